# src/minithings/tasks/frontmatter.py

"""
Markdown task file codec.

A task file is a `---` delimited block of `key: <json value>` lines followed by
a blank line and the description as plain text:

    ---
    id: "t1"
    title: "Book dentist appointment"
    tags: ["Personal"]
    done: false
    order: 0
    createdAt: "2026-10-18T09:30:00.000Z"
    updatedAt: "2026-10-18T09:30:00.000Z"
    ---

    Call the clinic...
"""

from __future__ import annotations

import json
import re
from typing import Any

from .task_models import FrontmatterError, Task

_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---\n?(.*)\Z", re.DOTALL)
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")

SLUG_MAX_LEN = 64
TASK_FILE_SUFFIX = ".md"


def slugify(text: str) -> str:
    slug = _SLUG_STRIP_RE.sub("-", str(text).lower().strip()).strip("-")
    return slug[:SLUG_MAX_LEN] or "task"


def task_filename(task: Task) -> str:
    return f"{task.id}--{slugify(task.title)}{TASK_FILE_SUFFIX}"


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def task_to_markdown(task: Task) -> str:
    task = Task.from_mapping(task.to_dict())
    lines = [
        "---",
        f"id: {_dump(task.id)}",
        f"title: {_dump(task.title)}",
        f"tags: {_dump(task.tags)}",
        f"done: {_dump(task.done)}",
        f"order: {_dump(task.order)}",
        f"createdAt: {_dump(task.created_at)}",
        f"updatedAt: {_dump(task.updated_at)}",
        "---",
        "",
        task.description.rstrip(),
        "",
    ]
    return "\n".join(lines)


def parse_markdown_task(content: str) -> Task:
    """
    Parse a task file.

    Raises FrontmatterError when the `---` block is missing. Values that are not
    valid JSON are kept as raw strings.
    """
    text = content.replace("\r\n", "\n")
    match = _FRONTMATTER_RE.match(text)
    if not match:
        raise FrontmatterError("Missing frontmatter block.")

    meta_text, body = match.group(1), match.group(2) or ""
    meta: dict[str, Any] = {}

    for line in meta_text.split("\n"):
        if not line.strip():
            continue
        key, sep, raw_value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        raw_value = raw_value.strip()
        try:
            meta[key] = json.loads(raw_value)
        except ValueError:
            meta[key] = raw_value

    # Only the blank separator line belongs to the layout; leading indentation is content.
    meta["description"] = body.removeprefix("\n").rstrip()
    return Task.from_mapping(meta)
