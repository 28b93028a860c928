from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from buganizer.config import IssueStatus, NotificationType, Priority, settings
from buganizer.core import ValidationException
from buganizer.issues.infrastructure.memory import InMemoryIssueRepository
from buganizer.search.application import IssueQueryService
from buganizer.sla.application import SLAMonitor, SLAService
from buganizer.sla.domain import SLAConfig, StaticSLAConfigProvider
from buganizer.sla.infrastructure import SLAScheduler


def make_service(issues, config=None):
    provider = StaticSLAConfigProvider(config or SLAConfig())
    return SLAService(IssueQueryService(InMemoryIssueRepository(issues)), provider)


# ========== Targets ==========

def test_calculate_sla_target(now):
    target = make_service([]).calculate_sla_target("P1", "S3", now)

    assert target.target_hours == 36
    assert target.target_date == now + timedelta(hours=36)


def test_calculate_sla_target_uses_configured_tables(now):
    service = make_service([], SLAConfig(base_hours={"P1": 8}))
    assert service.calculate_sla_target("P1", "S2", now).target_hours == 8


@pytest.mark.parametrize("priority,severity", [("", "S1"), ("P1", "")])
def test_calculate_sla_target_requires_both(priority, severity, now):
    with pytest.raises(ValidationException):
        make_service([]).calculate_sla_target(priority, severity, now)


# ========== Risk ==========

@pytest.fixture
def risk_issues(make_issue, now):
    return {
        "soon": make_issue(title="due soon", due_date=now + timedelta(hours=2, minutes=10)),
        "overdue": make_issue(title="overdue", due_date=now - timedelta(hours=3)),
        "later": make_issue(title="later", due_date=now + timedelta(hours=10)),
        "closed": make_issue(title="closed", status=IssueStatus.CLOSED, due_date=now + timedelta(hours=1)),
        "no_due": make_issue(title="no due date", due_date=None),
    }


async def test_check_sla_risk(risk_issues, now):
    report = await make_service(list(risk_issues.values())).check_sla_risk(now=now)

    assert [(r.title, r.hours_remaining) for r in report.at_risk_issues] == [
        ("overdue", -3),
        ("due soon", 2),
    ]
    assert report.total_at_risk == 2
    assert report.threshold_hours == 4
    assert [r.title for r in report.breached] == ["overdue"]


async def test_check_sla_risk_include_closed(risk_issues, now):
    report = await make_service(list(risk_issues.values())).check_sla_risk(include_closed=True, now=now)
    assert "closed" in [r.title for r in report.at_risk_issues]


async def test_check_sla_risk_threshold_from_config(risk_issues, now):
    service = make_service(list(risk_issues.values()), SLAConfig(at_risk_threshold_hours=12))
    report = await service.check_sla_risk(now=now)

    assert [r.title for r in report.at_risk_issues] == ["overdue", "due soon", "later"]


async def test_check_sla_risk_with_team_matches_nothing(risk_issues, now):
    report = await make_service(list(risk_issues.values())).check_sla_risk(team_id=str(uuid4()), now=now)
    assert report.total_at_risk == 0


async def test_check_sla_risk_finds_overdue_behind_a_full_batch(make_issue, now):
    due_tonight = [
        make_issue(title=f"fresh {n}", created_at=now - timedelta(hours=1), due_date=now + timedelta(hours=8))
        for n in range(settings.sla_risk_max_issues)
    ]
    stale = make_issue(title="stale", created_at=now - timedelta(days=10), due_date=now - timedelta(hours=3))

    report = await make_service(due_tonight + [stale]).check_sla_risk(now=now)

    assert [(r.title, r.hours_remaining) for r in report.at_risk_issues] == [("stale", -3)]


# ========== Stats ==========

async def test_get_sla_stats(make_issue, component_id, now):
    recent = now - timedelta(days=5)
    issues = [
        make_issue(status=IssueStatus.CLOSED, priority=Priority.P1, created_at=recent,
                   updated_at=recent + timedelta(hours=1), due_date=recent + timedelta(hours=24)),
        make_issue(status=IssueStatus.VERIFIED, priority=Priority.P1, created_at=recent,
                   updated_at=recent + timedelta(hours=30), due_date=recent + timedelta(hours=24)),
        make_issue(status=IssueStatus.NEW, created_at=recent),
        make_issue(status=IssueStatus.CLOSED, created_at=now - timedelta(days=45),
                   updated_at=now - timedelta(days=44), due_date=now - timedelta(days=40)),
        make_issue(status=IssueStatus.CLOSED, component_id=uuid4(), created_at=recent,
                   updated_at=recent, due_date=recent + timedelta(hours=1)),
    ]

    report = await make_service(issues).get_sla_stats(component_id=str(component_id), now=now)

    assert report.stats.total_issues == 2
    assert report.stats.met_sla == 1
    assert report.stats.compliance_percentage == 50.0
    assert report.stats.issues_scanned == 3
    assert report.end_date == now
    assert report.start_date == now - timedelta(days=30)


async def test_get_sla_stats_explicit_range(make_issue, component_id, now):
    created = now - timedelta(days=45)
    issue = make_issue(status=IssueStatus.CLOSED, created_at=created,
                       updated_at=created, due_date=created + timedelta(hours=2))

    report = await make_service([issue]).get_sla_stats(
        component_id=str(component_id),
        start_date=now - timedelta(days=60),
        end_date=now - timedelta(days=40),
        now=now,
    )

    assert report.stats.total_issues == 1


async def test_get_sla_stats_reads_naive_bounds_as_utc(make_issue, component_id, now):
    created = now - timedelta(days=45)
    issue = make_issue(status=IssueStatus.CLOSED, created_at=created,
                       updated_at=created, due_date=created + timedelta(hours=2))
    service = make_service([issue])

    report = await service.get_sla_stats(component_id=str(component_id), start_date=datetime(2024, 1, 1), now=now)

    assert report.start_date == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert report.end_date == now
    assert report.stats.total_issues == 1

    mixed = await service.get_sla_stats(
        component_id=str(component_id),
        start_date=datetime(2024, 1, 1),
        end_date=now - timedelta(days=40),
        now=now,
    )
    assert mixed.stats.total_issues == 1


async def test_get_sla_stats_requires_component_or_team(now):
    with pytest.raises(ValidationException):
        await make_service([]).get_sla_stats(now=now)


async def test_get_sla_stats_rejects_inverted_range(component_id, now):
    with pytest.raises(ValidationException):
        await make_service([]).get_sla_stats(
            component_id=str(component_id),
            start_date=now,
            end_date=now - timedelta(days=1),
            now=now,
        )


# ========== Monitor ==========

async def test_monitor_notifies_on_state_changes_only(make_issue, notifier, now):
    soon = make_issue(title="due soon", due_date=now + timedelta(hours=2, minutes=30))
    overdue = make_issue(title="overdue", due_date=now - timedelta(hours=5))
    service = make_service([soon, overdue])
    monitor = SLAMonitor(notifier)

    first = await monitor.evaluate(service, now=now)
    assert {(risk.title, state) for risk, state in first} == {
        ("due soon", NotificationType.SLA_AT_RISK),
        ("overdue", NotificationType.SLA_BREACHED),
    }
    assert len(notifier.sla_events) == 2

    assert await monitor.evaluate(service, now=now + timedelta(minutes=5)) == []
    assert len(notifier.sla_events) == 2

    later = await monitor.evaluate(service, now=now + timedelta(hours=3))
    assert [(risk.title, state) for risk, state in later] == [("due soon", NotificationType.SLA_BREACHED)]


async def test_monitor_messages(make_issue, notifier, now):
    issue = make_issue(title="Checkout broken", due_date=now + timedelta(hours=3, minutes=1))
    await SLAMonitor(notifier).evaluate(make_service([issue]), now=now)

    (_, notification_type, message) = notifier.sla_events[0]
    assert notification_type == NotificationType.SLA_AT_RISK
    assert message == "SLA at risk: Checkout broken is due in 3 hours"


async def test_monitor_without_notifier(make_issue, now):
    issue = make_issue(due_date=now - timedelta(hours=1))
    changes = await SLAMonitor().evaluate(make_service([issue]), now=now)
    assert len(changes) == 1


# ========== Scheduler ==========

async def test_scheduler_lifecycle():
    async def job():
        pass

    scheduler = SLAScheduler(interval_seconds=60)
    await scheduler.start(job)

    assert scheduler.is_running
    assert scheduler._scheduler.get_job("sla_risk_monitor") is not None

    await scheduler.stop()
    assert not scheduler.is_running
