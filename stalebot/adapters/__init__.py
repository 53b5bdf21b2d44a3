"""Repository adapters."""

from stalebot.adapters.base import RemoteOperationError, RepositoryAdapter
from stalebot.adapters.github import GitHubAdapter

__all__ = ["RepositoryAdapter", "RemoteOperationError", "GitHubAdapter"]
