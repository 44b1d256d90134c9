# src/minithings/tasks/task_models.py

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from .seed import DEFAULT_TAG, default_tags_for


class TaskStoreError(Exception):
    """Base class for task/logbook storage errors."""


class TaskValidationError(TaskStoreError, ValueError):
    """Bad input from a caller (empty title, non-list ids, missing tag...)."""


class TaskNotFoundError(TaskStoreError):
    def __init__(self, task_id: str) -> None:
        super().__init__("Task not found.")
        self.task_id = task_id


class FrontmatterError(TaskStoreError, ValueError):
    """A task file could not be parsed."""


class LogEntryType(StrEnum):
    """Kinds of events written to the logbook."""

    TASK_COMPLETED = "task_completed"
    TASK_REOPENED = "task_reopened"
    TASK_DELETED = "task_deleted"
    COMPLETED_TASKS_DELETED = "completed_tasks_deleted"
    TAG_REMOVED_FROM_TASK = "tag_removed_from_task"
    TAG_DELETED_EVERYWHERE = "tag_deleted_everywhere"


def utc_now_iso() -> str:
    """Current UTC time as `2026-01-02T03:04:05.678Z` (sorts lexicographically)."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def as_text(value: Any) -> str:
    return "" if value is None else str(value)


def normalize_tags(raw: Any, task_id: str | None = None) -> list[str]:
    """
    Normalize a tag collection:
    - list -> used as-is, None -> default tags for the task id,
      "a,b" -> split on commas, other scalars -> one-element list
    - values trimmed, blanks dropped, case-insensitive de-duplication
    - never empty (falls back to the default tag)
    """
    if isinstance(raw, (list, tuple)):
        values = list(raw)
    elif raw is None:
        values = default_tags_for(task_id)
    elif isinstance(raw, str) and "," in raw:
        values = raw.split(",")
    else:
        values = [raw]

    tags: list[str] = []
    seen: set[str] = set()
    for value in values:
        tag = as_text(value).strip()
        if not tag:
            continue
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        tags.append(tag)

    return tags or [DEFAULT_TAG]


def _coerce_order(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0
    if not math.isfinite(raw):
        return 0
    return int(raw)


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str = ""
    tags: list[str] = field(default_factory=lambda: [DEFAULT_TAG])
    done: bool = False
    order: int = 0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Task:
        """
        Build a normalized Task from a loosely-typed mapping.

        Accepts both the camelCase wire/file keys and the snake_case attribute
        names; `tag` is honored when `tags` is absent.
        """
        raw_id = raw.get("id")
        if raw_id is None or as_text(raw_id).strip() == "":
            raise FrontmatterError("Task has no id.")
        task_id = as_text(raw_id)

        raw_title = raw.get("title")
        title = ("Untitled" if raw_title is None else str(raw_title)).strip() or "Untitled"

        raw_tags = raw.get("tags")
        if raw_tags is None:
            raw_tags = raw.get("tag")

        now = utc_now_iso()
        return cls(
            id=task_id,
            title=title,
            description=as_text(raw.get("description")),
            tags=normalize_tags(raw_tags, task_id),
            done=bool(raw.get("done")),
            order=_coerce_order(raw.get("order")),
            created_at=str(raw.get("createdAt") or raw.get("created_at") or now),
            updated_at=str(raw.get("updatedAt") or raw.get("updated_at") or now),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "done": self.done,
            "order": self.order,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def has_tag(self, tag: str) -> bool:
        key = tag.lower()
        return any(t.lower() == key for t in self.tags)


@dataclass(frozen=True, slots=True)
class LogEntry:
    id: str
    type: str
    created_at: str
    data: dict[str, Any]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> LogEntry:
        data = raw.get("data")
        return cls(
            id=as_text(raw.get("id")),
            type=as_text(raw.get("type")),
            created_at=as_text(raw.get("createdAt")),
            data=dict(data) if isinstance(data, Mapping) else {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": str(self.type),
            "createdAt": self.created_at,
            "data": self.data,
        }
