# src/minithings/tasks/logbook_store.py

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from .task_models import LogEntry, utc_now_iso

logger = logging.getLogger(__name__)


class LogbookStore:
    """
    Append-only event log, one JSON object per line.

    Entries are never rewritten: the file only grows via append() or is
    truncated as a whole via clear().
    """

    def __init__(self, path: str | Path = "logbook/logbook.jsonl") -> None:
        self._path = Path(path)
        self._ensure_file()
        logger.info("LogbookStore ready path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_file(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._path.write_text("", "utf-8")

    def append(self, type: str, data: dict[str, Any]) -> LogEntry:
        entry = LogEntry(
            id=str(uuid.uuid4()),
            type=str(type),
            created_at=utc_now_iso(),
            data=data,
        )
        line = json.dumps(entry.to_dict(), ensure_ascii=False)

        self._ensure_file()
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

        logger.debug("Logbook append id=%s type=%s", entry.id, entry.type)
        return entry

    def read_all(self) -> list[LogEntry]:
        """Return every parseable entry, most recent first."""
        self._ensure_file()
        raw = self._path.read_text("utf-8")

        entries: list[LogEntry] = []
        for lineno, line in enumerate(raw.split("\n"), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except ValueError as e:
                logger.warning("Skipping malformed logbook line %s in %s: %s", lineno, self._path, e)
                continue
            if not isinstance(obj, dict):
                logger.warning("Skipping non-object logbook line %s in %s", lineno, self._path)
                continue
            entries.append(LogEntry.from_mapping(obj))

        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries

    def clear(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text("", "utf-8")
        logger.info("Logbook cleared path=%s", self._path)
