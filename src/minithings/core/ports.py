# src/minithings/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) between the HTTP layer and storage.

The router and the task store depend on Protocols instead of concrete classes.
This keeps storage swappable and makes testing easier.
"""

from typing import Any, Iterable, Mapping, Protocol


class LogbookRepo(Protocol):
    """Append-only event log."""

    def append(self, type: str, data: dict[str, Any]) -> Any: ...
    def read_all(self) -> list[Any]: ...
    def clear(self) -> None: ...


class TaskRepo(Protocol):
    # Queries
    def list_tasks(self) -> list[Any]: ...
    def count_tasks(self) -> int: ...
    def get_task(self, task_id: str) -> Any: ...

    # Mutations
    def create_task(self, fields: Mapping[str, Any]) -> Any: ...
    def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Any: ...
    def delete_task(self, task_id: str) -> Any: ...
    def delete_completed(self) -> list[Any]: ...
    def delete_tag_everywhere(self, tag: Any) -> int: ...
    def reorder(self, task_ids: Any) -> list[Any]: ...

    # Bootstrap
    def seed_if_empty(self, seeds: Iterable[Mapping[str, Any]]) -> int: ...
