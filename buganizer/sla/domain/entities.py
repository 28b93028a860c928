"""
SLA Domain Entities
====================

Derived SLA results. Nothing here is persisted: every value is recomputed
from the issues returned by a query.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict
from uuid import UUID


def compliance_percentage(met: int, total: int) -> float:
    """``met / total * 100``, or 0.0 for an empty bucket."""
    if total <= 0:
        return 0.0
    return met / total * 100


@dataclass
class SLARiskIssue:
    """
    An issue with a due date and the whole hours left until it.

    Negative ``hours_remaining`` means the SLA is already breached.
    """

    issue_id: UUID
    title: str
    priority: str
    severity: str
    due_date: datetime
    hours_remaining: int

    @property
    def is_breached(self) -> bool:
        return self.hours_remaining < 0


@dataclass
class BucketStats:
    """Met/total counts for one priority or severity."""

    total: int = 0
    met: int = 0

    @property
    def missed(self) -> int:
        return self.total - self.met

    @property
    def compliance(self) -> float:
        return compliance_percentage(self.met, self.total)

    def record(self, met: bool) -> None:
        self.total += 1
        if met:
            self.met += 1


@dataclass
class SLAStats:
    """
    Compliance over resolved issues that carry a due date.

    ``total_issues`` counts only those issues; ``issues_scanned`` is the
    size of the batch the stats were computed from.
    """

    total_issues: int = 0
    met_sla: int = 0
    missed_sla: int = 0
    issues_scanned: int = 0
    by_priority: Dict[str, BucketStats] = field(default_factory=dict)
    by_severity: Dict[str, BucketStats] = field(default_factory=dict)

    @property
    def compliance_percentage(self) -> float:
        return compliance_percentage(self.met_sla, self.total_issues)

    @property
    def issues_by_priority(self) -> Dict[str, int]:
        return {key: bucket.total for key, bucket in self.by_priority.items()}

    @property
    def issues_by_severity(self) -> Dict[str, int]:
        return {key: bucket.total for key, bucket in self.by_severity.items()}

    @property
    def compliance_by_priority(self) -> Dict[str, float]:
        return {key: bucket.compliance for key, bucket in self.by_priority.items()}

    @property
    def compliance_by_severity(self) -> Dict[str, float]:
        return {key: bucket.compliance for key, bucket in self.by_severity.items()}
