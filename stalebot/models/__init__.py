"""Data models for issues, comments and issue events (Pydantic)."""

from stalebot.models.comment import Comment
from stalebot.models.event import IssueEvent
from stalebot.models.issue import Issue

__all__ = ["Comment", "Issue", "IssueEvent"]
