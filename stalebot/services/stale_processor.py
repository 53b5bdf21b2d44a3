"""
Stale processor: walk open issues and PRs page by page and apply the stale policy.

For each item, in order of precedence:
1. exempt label present -> skip;
2. stale label present -> close it when nobody replied and the label is
   older than days_before_close, or drop the label when a human replied;
3. not updated for days_before_stale -> comment and add the stale label.

Every remote call is charged against an OperationBudget; the run stops as
soon as the budget is used up. Adapter errors are not caught here.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable

from stalebot.adapters.base import RepositoryAdapter
from stalebot.config import StaleConfig
from stalebot.models import Issue
from stalebot.services.budget import OperationBudget
from stalebot.utils import (
    applied_label_before,
    is_labeled,
    last_label_applied_at,
    was_last_updated_before,
)

PAGE_SIZE = 100


@dataclass
class RunStats:
    """Counts of what one run looked at and did."""

    pages: int = 0
    inspected: int = 0
    skipped: int = 0
    marked_stale: int = 0
    unmarked: int = 0
    closed: int = 0


def _kind(issue: Issue) -> str:
    return "pr" if issue.is_pull_request else "issue"


class StaleProcessor:
    """Applies the stale policy to every open item of one repository."""

    def __init__(
        self,
        adapter: RepositoryAdapter,
        config: StaleConfig,
        clock: Callable[[], datetime] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self._config = config
        self._repo = config.repository
        self._clock = clock or (lambda: datetime.now(UTC))
        self._log = log or logging.getLogger("stalebot.processor")
        self.stats = RunStats()

    def run(self) -> int:
        """Process pages until items or budget run out; return operations left."""
        cfg = self._config
        budget = OperationBudget(cfg.operations_per_run)
        self.stats = RunStats()
        now = self._clock()
        if cfg.dry_run:
            self._log.info("----- Running in DRY mode -----")

        page = 1
        while True:
            issues = self._adapter.list_open_items(self._repo, page, per_page=PAGE_SIZE)
            budget.spend()
            self.stats.pages += 1
            if not issues or budget.exhausted:
                self._log_summary(budget)
                return max(budget.remaining, 0)

            for issue in issues:
                self._process_issue(issue, budget, now)
                if budget.exhausted:
                    self._log.warning(
                        "performed %s operations, exiting to avoid rate limit",
                        cfg.operations_per_run,
                    )
                    self._log_summary(budget)
                    return 0
            page += 1

    def _process_issue(self, issue: Issue, budget: OperationBudget, now: datetime) -> None:
        cfg = self._config
        is_pr = issue.is_pull_request
        self.stats.inspected += 1
        self._log.debug("found %s #%s: %s last updated %s", _kind(issue), issue.number, issue.title, issue.updated_at)

        stale_message = cfg.stale_message_for(is_pr)
        if not stale_message:
            self._log.debug("skipping %s #%s due to empty message", _kind(issue), issue.number)
            self.stats.skipped += 1
            return

        stale_label = cfg.stale_label_for(is_pr)
        exempt_label = cfg.exempt_label_for(is_pr)

        if exempt_label and is_labeled(issue, exempt_label):
            self._log.debug("skipping %s #%s: exempt label %r", _kind(issue), issue.number, exempt_label)
            self.stats.skipped += 1
        elif is_labeled(issue, stale_label):
            events = self._adapter.list_issue_events(self._repo, issue.number)
            budget.spend()
            applied_at = last_label_applied_at(events, stale_label)
            if applied_at is None:
                self._log.debug(
                    "no %r label event on #%s, using last update %s",
                    stale_label,
                    issue.number,
                    issue.updated_at,
                )
                applied_at = issue.updated_at

            active = self._has_activity_since(issue, applied_at)
            budget.spend()

            if not active and applied_label_before(applied_at, cfg.days_before_close, now):
                budget.spend(self._close_issue(issue, cfg.close_message_for(is_pr)))
            elif active:
                budget.spend(self._remove_stale_label(issue, stale_label))
            else:
                self._log.debug("#%s is stale since %s, not closing yet", issue.number, applied_at)
        elif was_last_updated_before(issue, cfg.days_before_stale, now):
            budget.spend(self._add_stale_label(issue, stale_message, stale_label))

    def _has_activity_since(self, issue: Issue, since: datetime) -> bool:
        """True if a human (not a bot) commented at or after ``since``."""
        comments = self._adapter.list_comments(self._repo, issue.number, since=since)
        return any(c.is_human and c.created_at >= since for c in comments)

    def _add_stale_label(self, issue: Issue, message: str, label: str) -> int:
        self.stats.marked_stale += 1
        if self._config.dry_run:
            self._log.info("[dry-run] would mark #%s %r as stale", issue.number, issue.title)
            return 0
        self._log.info("marking #%s %r as stale", issue.number, issue.title)
        self._adapter.create_comment(self._repo, issue.number, message)
        self._adapter.add_label(self._repo, issue.number, label)
        return 2

    def _remove_stale_label(self, issue: Issue, label: str) -> int:
        self.stats.unmarked += 1
        if self._config.dry_run:
            self._log.info("[dry-run] would remove stale label on #%s %r", issue.number, issue.title)
            return 0
        self._log.info("removing stale label on #%s %r", issue.number, issue.title)
        self._adapter.remove_label(self._repo, issue.number, label)
        return 1

    def _close_issue(self, issue: Issue, message: str) -> int:
        self.stats.closed += 1
        if self._config.dry_run:
            self._log.info("[dry-run] would close #%s %r for being stale", issue.number, issue.title)
            return 0
        self._log.info("closing #%s %r for being stale", issue.number, issue.title)
        self._adapter.create_comment(self._repo, issue.number, message)
        self._adapter.close_issue(self._repo, issue.number)
        return 2

    def _log_summary(self, budget: OperationBudget) -> None:
        s = self.stats
        self._log.info(
            "Run finished | pages=%s inspected=%s skipped=%s stale=%s unstale=%s closed=%s operations=%s/%s",
            s.pages,
            s.inspected,
            s.skipped,
            s.marked_stale,
            s.unmarked,
            s.closed,
            budget.spent,
            budget.initial,
        )
