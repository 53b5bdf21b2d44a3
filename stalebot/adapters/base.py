"""Abstract base for repository adapters."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from stalebot.models import Comment, Issue, IssueEvent


class RemoteOperationError(Exception):
    """Raised when a repository API call fails."""

    pass


class RepositoryAdapter(ABC):
    """Remote calls the stale processor needs from a code-hosting platform."""

    @abstractmethod
    def list_open_items(self, repo: str, page: int, per_page: int = 100) -> List[Issue]:
        """Fetch one page of open issues and pull requests."""
        ...

    @abstractmethod
    def list_comments(
        self,
        repo: str,
        issue_number: int,
        since: datetime | None = None,
    ) -> List[Comment]:
        """Fetch comments on an issue posted or updated at/after ``since``."""
        ...

    @abstractmethod
    def list_issue_events(self, repo: str, issue_number: int) -> List[IssueEvent]:
        """Fetch the full event history of an issue."""
        ...

    @abstractmethod
    def add_label(self, repo: str, issue_number: int, label: str) -> None:
        """Add one label to an issue."""
        ...

    @abstractmethod
    def remove_label(self, repo: str, issue_number: int, label: str) -> None:
        """Remove one label from an issue."""
        ...

    @abstractmethod
    def create_comment(self, repo: str, issue_number: int, body: str) -> Comment:
        """Post a comment on an issue."""
        ...

    @abstractmethod
    def close_issue(self, repo: str, issue_number: int) -> None:
        """Set the issue state to closed."""
        ...
