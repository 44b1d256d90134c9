# src/minithings/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import os
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ..core.ports import LogbookRepo
from .frontmatter import TASK_FILE_SUFFIX, parse_markdown_task, task_filename, task_to_markdown
from .seed import DEFAULT_TAG
from .task_models import (
    LogEntryType,
    Task,
    TaskNotFoundError,
    TaskValidationError,
    as_text,
    normalize_tags,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _TaskRecord:
    file_name: str
    task: Task


class TaskStore:
    """
    Markdown-file task store.

    One task = one `<id>--<slug>.md` file in `tasks_dir`. The task list is
    rebuilt from the directory on every read; there is no index or cache.

    Lifecycle events (complete/reopen/delete/tag removal) are appended to the
    logbook passed in.

    Concurrency:
    - single writer assumed; no locking between requests
    """

    def __init__(self, tasks_dir: str | Path, logbook: LogbookRepo) -> None:
        self._dir = Path(tasks_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._logbook = logbook
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready dir=%s total=%s", self._dir, total)

    @property
    def tasks_dir(self) -> Path:
        return self._dir

    # ---- low-level helpers ----

    def _task_files(self) -> list[Path]:
        return sorted(p for p in self._dir.glob(f"*{TASK_FILE_SUFFIX}") if p.is_file())

    def _read_records(self) -> list[_TaskRecord]:
        records: list[_TaskRecord] = []
        for path in self._task_files():
            try:
                task = parse_markdown_task(path.read_text("utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("Skipping malformed task file %s: %s", path.name, e)
                continue
            records.append(_TaskRecord(file_name=path.name, task=task))

        records.sort(key=lambda r: (r.task.order, r.task.created_at))
        return records

    def _find_record(self, task_id: str) -> _TaskRecord:
        for record in self._read_records():
            if record.task.id == task_id:
                return record
        raise TaskNotFoundError(task_id)

    def _write(self, task: Task, previous_file_name: str | None = None) -> _TaskRecord:
        """
        Write the task file, then remove the previous file if the name changed.
        """
        task = Task.from_mapping(task.to_dict())
        file_name = task_filename(task)
        path = self._dir / file_name

        tmp = path.with_suffix(".tmp")
        tmp.write_text(task_to_markdown(task), "utf-8")
        os.replace(tmp, path)

        if previous_file_name and previous_file_name != file_name:
            with contextlib.suppress(FileNotFoundError):
                (self._dir / previous_file_name).unlink()
            logger.debug("Task renamed id=%s %s -> %s", task.id, previous_file_name, file_name)

        return _TaskRecord(file_name=file_name, task=task)

    def _remove(self, record: _TaskRecord) -> None:
        (self._dir / record.file_name).unlink()

    @staticmethod
    def _clean_title(raw: Any) -> str:
        title = as_text(raw).strip()
        if not title:
            raise TaskValidationError("Title is required.")
        return title

    # ---- public API ----

    def list_tasks(self) -> list[Task]:
        """All readable tasks ordered by (order, createdAt)."""
        return [r.task for r in self._read_records()]

    def count_tasks(self) -> int:
        return len(self._read_records())

    def get_task(self, task_id: str) -> Task:
        return self._find_record(task_id).task

    def create_task(self, fields: Mapping[str, Any]) -> Task:
        title = self._clean_title(fields.get("title"))

        raw_tags = fields.get("tags")
        if not isinstance(raw_tags, list):
            raw_tags = [fields["tag"]] if "tag" in fields else [DEFAULT_TAG]

        now = utc_now_iso()
        task = Task(
            id=str(uuid.uuid4()),
            title=title,
            description=as_text(fields.get("description")),
            tags=normalize_tags(raw_tags),
            done=bool(fields.get("done")),
            order=self.count_tasks(),
            created_at=now,
            updated_at=now,
        )

        record = self._write(task)
        logger.info("Task created id=%s file=%s order=%s", task.id, record.file_name, task.order)
        return record.task

    def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Task:
        """
        Partial update: only keys present in `fields` are applied.

        Toggling `done` appends task_completed / task_reopened to the logbook.
        """
        record = self._find_record(task_id)
        current = record.task

        title = current.title
        if "title" in fields:
            title = self._clean_title(fields["title"])

        changes: dict[str, Any] = {"title": title, "updated_at": utc_now_iso()}
        if "done" in fields:
            changes["done"] = bool(fields["done"])
        if "description" in fields:
            changes["description"] = as_text(fields["description"])
        if "tags" in fields:
            changes["tags"] = normalize_tags(fields["tags"], current.id)
        elif "tag" in fields:
            changes["tags"] = normalize_tags([fields["tag"]], current.id)
        if "order" in fields:
            try:
                changes["order"] = int(fields["order"])
            except (TypeError, ValueError, OverflowError):
                raise TaskValidationError("order must be an integer.") from None

        saved = self._write(replace(current, **changes), record.file_name).task

        if "done" in fields and saved.done != current.done:
            event = LogEntryType.TASK_COMPLETED if saved.done else LogEntryType.TASK_REOPENED
            self._logbook.append(
                event,
                {"taskId": saved.id, "title": saved.title, "task": saved.to_dict()},
            )

        logger.debug("Task updated id=%s fields=%s", saved.id, sorted(fields))
        return saved

    def delete_task(self, task_id: str) -> Task:
        record = self._find_record(task_id)
        task = record.task

        self._logbook.append(
            LogEntryType.TASK_DELETED,
            {"taskId": task.id, "title": task.title, "task": task.to_dict()},
        )
        self._remove(record)
        logger.info("Task deleted id=%s file=%s", task.id, record.file_name)
        return task

    def delete_completed(self) -> list[Task]:
        completed = [r for r in self._read_records() if r.task.done]

        if completed:
            self._logbook.append(
                LogEntryType.COMPLETED_TASKS_DELETED,
                {"count": len(completed), "tasks": [r.task.to_dict() for r in completed]},
            )

        for record in completed:
            self._remove(record)

        logger.info("Deleted completed tasks count=%s", len(completed))
        return [r.task for r in completed]

    def delete_tag_everywhere(self, tag: Any) -> int:
        """
        Remove `tag` (case-insensitive) from every task that has it.

        Returns how many tasks changed. Each change is logged per task, plus one
        summary entry when anything changed.
        """
        tag_to_delete = as_text(tag).strip()
        if not tag_to_delete:
            raise TaskValidationError("Tag is required.")
        key = tag_to_delete.lower()

        changed_count = 0
        for record in self._read_records():
            if not record.task.has_tag(tag_to_delete):
                continue
            before = list(record.task.tags)
            remaining = [t for t in before if t.lower() != key]

            updated = replace(
                record.task,
                tags=normalize_tags(remaining, record.task.id),
                updated_at=utc_now_iso(),
            )
            saved = self._write(updated, record.file_name).task
            self._logbook.append(
                LogEntryType.TAG_REMOVED_FROM_TASK,
                {
                    "tag": tag_to_delete,
                    "taskId": saved.id,
                    "title": saved.title,
                    "beforeTags": before,
                    "afterTags": list(saved.tags),
                },
            )
            changed_count += 1

        if changed_count > 0:
            self._logbook.append(
                LogEntryType.TAG_DELETED_EVERYWHERE,
                {"tag": tag_to_delete, "changedCount": changed_count},
            )

        logger.info("Tag deleted everywhere tag=%s changed=%s", tag_to_delete, changed_count)
        return changed_count

    def reorder(self, task_ids: Any) -> list[Task]:
        """
        Persist a new ordering.

        Unknown/duplicate/non-string ids are ignored; known ids missing from the
        input keep their relative order and go last.
        """
        if not isinstance(task_ids, list):
            raise TaskValidationError("taskIds must be an array.")

        records = self._read_records()
        by_id = {r.task.id: r for r in records}

        ordered: list[str] = []
        seen: set[str] = set()
        for task_id in task_ids:
            if not isinstance(task_id, str) or task_id not in by_id or task_id in seen:
                continue
            seen.add(task_id)
            ordered.append(task_id)

        ordered.extend(r.task.id for r in records if r.task.id not in seen)

        now = utc_now_iso()
        for index, task_id in enumerate(ordered):
            record = by_id[task_id]
            by_id[task_id] = self._write(
                replace(record.task, order=index, updated_at=now),
                record.file_name,
            )

        logger.debug("Tasks reordered count=%s", len(ordered))
        return self.list_tasks()

    def seed_if_empty(self, seeds: Iterable[Mapping[str, Any]]) -> int:
        """Write `seeds` when the directory has no task files yet."""
        if self._task_files():
            return 0

        now = utc_now_iso()
        written = 0
        for seed in seeds:
            self._write(Task.from_mapping({**seed, "createdAt": now, "updatedAt": now}))
            written += 1

        logger.info("Seeded %s demo tasks into %s", written, self._dir)
        return written
