"""GitHub issue (or pull request listed as an issue) model."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class Issue(BaseModel):
    """Open issue or pull request as returned by the issues listing.

    GitHub lists pull requests among issues; ``is_pull_request`` is set
    when the item carries a ``pull_request`` reference.
    """

    number: int
    title: str
    state: str = "open"
    author: str = ""
    labels: List[str] = Field(default_factory=list)
    is_pull_request: bool = False
    created_at: datetime
    updated_at: datetime
