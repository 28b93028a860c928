from datetime import timedelta

import pytest

from buganizer.config import IssueStatus, Priority, Severity
from buganizer.sla.domain import SLAAggregator, compliance_percentage, hours_until


def test_hours_until_rounds_down(now):
    assert hours_until(now + timedelta(hours=3, minutes=59), now) == 3
    assert hours_until(now + timedelta(minutes=30), now) == 0
    assert hours_until(now - timedelta(hours=1), now) == -1
    assert hours_until(now - timedelta(minutes=1), now) == -1


def test_check_risk_keeps_breached_issues(make_issue, now):
    due_soon = make_issue(title="due soon", due_date=now + timedelta(hours=2, minutes=30))
    overdue = make_issue(title="overdue", due_date=now - timedelta(hours=1))
    no_due = make_issue(due_date=None)

    risks = SLAAggregator.check_risk([due_soon, overdue, no_due], now)

    assert [(r.title, r.hours_remaining) for r in risks] == [("due soon", 2), ("overdue", -1)]
    assert not risks[0].is_breached
    assert risks[1].is_breached


def test_check_risk_copies_issue_fields(make_issue, now):
    issue = make_issue(priority=Priority.P0, severity=Severity.S1, due_date=now + timedelta(hours=1))

    (risk,) = SLAAggregator.check_risk([issue], now)

    assert risk.issue_id == issue.id
    assert risk.priority == "P0"
    assert risk.severity == "S1"
    assert risk.due_date == issue.due_date


def test_compute_stats(make_issue, now):
    due = now
    met = [
        make_issue(status=IssueStatus.CLOSED, priority=Priority.P1, updated_at=due - timedelta(hours=1), due_date=due),
        make_issue(status=IssueStatus.VERIFIED, priority=Priority.P1, updated_at=due - timedelta(hours=5), due_date=due),
        make_issue(status=IssueStatus.CLOSED, priority=Priority.P2, updated_at=due - timedelta(days=1), due_date=due),
    ]
    missed = make_issue(status=IssueStatus.CLOSED, priority=Priority.P2, updated_at=due, due_date=due)
    ignored = [
        make_issue(status=IssueStatus.NEW, due_date=due),
        make_issue(status=IssueStatus.FIXED, due_date=due),
        make_issue(status=IssueStatus.CLOSED, due_date=None),
    ]

    stats = SLAAggregator.compute_stats(met + [missed] + ignored)

    assert stats.total_issues == 4
    assert stats.met_sla == 3
    assert stats.missed_sla == 1
    assert stats.issues_scanned == 7
    assert stats.compliance_percentage == 75.0
    assert stats.issues_by_priority == {"P1": 2, "P2": 2}
    assert stats.compliance_by_priority == {"P1": 100.0, "P2": 50.0}
    assert stats.issues_by_severity == {"S2": 4}
    assert stats.compliance_by_severity == {"S2": 75.0}


def test_met_sla_is_strictly_before_due(make_issue, now):
    on_the_dot = make_issue(status=IssueStatus.CLOSED, updated_at=now, due_date=now)
    assert on_the_dot.met_sla() is False
    assert make_issue(due_date=None).met_sla() is None


def test_compute_stats_empty_batch():
    stats = SLAAggregator.compute_stats([])

    assert stats.total_issues == 0
    assert stats.compliance_percentage == 0.0
    assert stats.issues_by_priority == {}


def test_compliance_percentage():
    assert compliance_percentage(1, 3) == pytest.approx(33.333, rel=1e-3)
    assert compliance_percentage(0, 0) == 0.0
