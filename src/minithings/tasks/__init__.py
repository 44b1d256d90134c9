"""
Task subsystem.

Components:
- task_models.py: data structures (Task, LogEntry, LogEntryType) + errors
- frontmatter.py: markdown/frontmatter codec and filename derivation
- task_store.py: one-markdown-file-per-task storage
- logbook_store.py: append-only JSON-lines event log
- seed.py: demo tasks for an empty task directory
"""
