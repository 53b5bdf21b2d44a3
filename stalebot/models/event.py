"""Entry of an issue's event history (labeled, unlabeled, closed, ...)."""

from datetime import datetime

from pydantic import BaseModel


class IssueEvent(BaseModel):
    """Issue timeline event; ``label`` is set for labeled/unlabeled events."""

    id: int
    event: str
    label: str | None = None
    actor: str = ""
    created_at: datetime
