"""Shared helpers for label checks, timestamps and boolean-like inputs."""

from datetime import datetime, timedelta
from typing import Any, Iterable

from stalebot.models import Issue, IssueEvent

_TRUE_VALUES = {"true", "yes", "y", "on", "1"}


def parse_iso(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def is_true(value: Any) -> bool:
    """Interpret a boolean-like input (e.g. an env var or YAML value).

    Booleans pass through; strings are true when they read "true", "yes",
    "y", "on" or "1" (case-insensitive, surrounding whitespace ignored).
    Anything else, including an empty string, is false.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def _same_label(a: str, b: str) -> bool:
    # GitHub label names are unique case-insensitively
    return a.casefold() == b.casefold()


def is_labeled(issue: Issue, label: str) -> bool:
    """Return True if the issue carries ``label``."""
    return any(_same_label(name, label) for name in issue.labels)


def was_last_updated_before(issue: Issue, days: int, now: datetime) -> bool:
    """Return True if the issue was last updated at least ``days`` days ago."""
    return now - issue.updated_at >= timedelta(days=days)


def applied_label_before(applied_at: datetime, days: int, now: datetime) -> bool:
    """Return True if a label applied at ``applied_at`` is at least ``days`` days old."""
    return now - applied_at >= timedelta(days=days)


def last_label_applied_at(events: Iterable[IssueEvent], label: str) -> datetime | None:
    """Latest time ``label`` was added, from an issue's event history.

    Args:
        events: Issue events in any order.
        label: Label name to look for.

    Returns:
        created_at of the most recent "labeled" event for that label, or
        None if the history has no such event.
    """
    times = [
        ev.created_at
        for ev in events
        if ev.event == "labeled" and ev.label is not None and _same_label(ev.label, label)
    ]
    return max(times) if times else None
