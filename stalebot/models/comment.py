"""Comment on an issue or PR."""

from datetime import datetime

from pydantic import BaseModel


class Comment(BaseModel):
    """Comment on an issue or PR."""

    id: int
    body: str = ""
    author: str
    # GitHub user.type: "User" for people, "Bot" for apps and automation
    author_type: str = "User"
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def is_human(self) -> bool:
        return self.author_type == "User"
