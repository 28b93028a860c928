"""
SLA Risk / Compliance Aggregator
================================

Scans a batch of issues already fetched through the query pipeline.
Both operations are pure; ``now`` is captured once by the caller.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List

from buganizer.issues.domain import Issue
from buganizer.sla.domain.entities import BucketStats, SLARiskIssue, SLAStats

_SECONDS_PER_HOUR = 3600


def _key(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def hours_until(due_date: datetime, now: datetime) -> int:
    """Whole hours from ``now`` to ``due_date``, rounded down (negative once past)."""
    return math.floor((due_date - now).total_seconds() / _SECONDS_PER_HOUR)


class SLAAggregator:
    """Risk windows and compliance statistics over issue batches."""

    @staticmethod
    def check_risk(issues: Iterable[Issue], now: datetime) -> List[SLARiskIssue]:
        """
        Hours remaining for every issue that has a due date.

        Issues past their due date are kept with a negative value; the
        caller decides what counts as at risk or breached.
        """
        return [
            SLARiskIssue(
                issue_id=issue.id,
                title=issue.title,
                priority=_key(issue.priority),
                severity=_key(issue.severity),
                due_date=issue.due_date,
                hours_remaining=hours_until(issue.due_date, now),
            )
            for issue in issues
            if issue.due_date is not None
        ]

    @staticmethod
    def compute_stats(issues: Iterable[Issue]) -> SLAStats:
        """
        Compliance over CLOSED/VERIFIED issues with a due date.

        An issue met its SLA iff it was last updated strictly before the
        due date. Everything else in the batch is ignored.
        """
        stats = SLAStats()

        for issue in issues:
            stats.issues_scanned += 1
            if issue.due_date is None or not issue.is_resolved:
                continue

            met = issue.met_sla()
            stats.total_issues += 1
            if met:
                stats.met_sla += 1
            else:
                stats.missed_sla += 1

            stats.by_priority.setdefault(_key(issue.priority), BucketStats()).record(met)
            stats.by_severity.setdefault(_key(issue.severity), BucketStats()).record(met)

        return stats
