# src/minithings/tasks/seed.py

"""Demo tasks written into an empty task directory on first start."""

from __future__ import annotations

from typing import Any

DEFAULT_TAG = "General"

SEED_TASKS: tuple[dict[str, Any], ...] = (
    {
        "id": "t1",
        "title": "Book dentist appointment",
        "description": "Call the clinic and confirm an early-morning slot for next week.",
        "tags": ["Personal"],
        "done": False,
        "order": 0,
    },
    {
        "id": "t2",
        "title": "Send invoice to Marco",
        "description": "Include the revised hourly breakdown and payment due date in the email.",
        "tags": ["Work"],
        "done": False,
        "order": 1,
    },
    {
        "id": "t3",
        "title": "Run 8km easy",
        "description": "Keep it conversational pace and finish with 10 minutes of mobility work.",
        "tags": ["Health"],
        "done": True,
        "order": 2,
    },
    {
        "id": "t4",
        "title": "Refactor navbar animation",
        "description": "Separate transition timing from layout logic to reduce jank on mobile.",
        "tags": ["Work"],
        "done": False,
        "order": 3,
    },
    {
        "id": "t5",
        "title": "Plan Sunday ride",
        "description": "Pick route, weather window, and coffee stop before Saturday night.",
        "tags": ["Personal"],
        "done": False,
        "order": 4,
    },
)


def default_tags_for(task_id: str | None) -> list[str]:
    """Tags used when a stored task has none: the seed's tags, else the default tag."""
    for seed in SEED_TASKS:
        if seed["id"] == task_id:
            return list(seed["tags"])
    return [DEFAULT_TAG]
