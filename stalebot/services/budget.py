"""Per-run operation budget guarding the API rate limit."""


class OperationBudget:
    """Counter of remote operations left for one run.

    Every listing page, history lookup and (outside dry-run) every
    mutating call spends one unit. Processing stops once it hits zero.
    """

    def __init__(self, operations: int) -> None:
        if operations < 0:
            raise ValueError("operations must be non-negative")
        self.initial = operations
        self.remaining = operations

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    @property
    def spent(self) -> int:
        return self.initial - self.remaining

    def spend(self, count: int = 1) -> None:
        self.remaining -= count

    def __repr__(self) -> str:
        return f"OperationBudget(remaining={self.remaining}, initial={self.initial})"
