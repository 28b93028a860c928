from datetime import timedelta
from uuid import uuid4

import pytest

from buganizer.config import IssueStatus, NotificationType, Priority, Severity
from buganizer.core import ExternalServiceException, ResourceNotFoundException, ValidationException
from buganizer.issues.application import IssueCreateRequest, IssueService, IssueUpdateRequest, INotifier


class FailingNotifier(INotifier):

    async def notify_issue(self, issue, notification_type, message) -> bool:
        raise ExternalServiceException("slack", "notification was not delivered")

    async def notify_sla(self, risk, notification_type, message) -> bool:
        raise ExternalServiceException("slack", "notification was not delivered")


@pytest.fixture
def service(issue_repository, comment_repository, attachment_repository, notifier):
    return IssueService(
        issue_repository,
        comment_repository,
        attachment_repository,
        notifier=notifier,
        base_url="https://bugs.example.com/",
    )


def create_request(component_id, /, **overrides):
    values = dict(title="Login page crashes", component_id=str(component_id))
    values.update(overrides)
    return IssueCreateRequest(**values)


# ========== Create ==========

async def test_create_issue_sets_status_and_due_date(service, component_id, now, notifier):
    reporter_id = uuid4()
    request = create_request(component_id, priority=Priority.P1, severity=Severity.S1, labels=["ui"])

    issue = await service.create_issue(request, reporter_id, now=now)

    assert issue.status == IssueStatus.NEW
    assert issue.reporter_id == reporter_id
    assert issue.component_id == component_id
    assert issue.due_date == now + timedelta(hours=18)
    assert issue.created_at == issue.updated_at == now
    assert issue.labels == ["ui"]
    assert await service.get_issue(str(issue.id)) == issue

    (_, notification_type, message) = notifier.issue_events[0]
    assert notification_type == NotificationType.ISSUE_CREATED
    assert message == "New issue created: Login page crashes"


async def test_create_issue_defaults_to_p2_s2(service, component_id, now):
    issue = await service.create_issue(create_request(component_id), uuid4(), now=now)

    assert (issue.priority, issue.severity) == (Priority.P2, Severity.S2)
    assert issue.due_date == now + timedelta(hours=72)


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"title": "  "}, "title is required"),
        ({"component_id": ""}, "component_id is required"),
        ({"component_id": "frontend"}, "invalid component ID format"),
    ],
)
async def test_create_issue_validation(service, component_id, overrides, message):
    with pytest.raises(ValidationException) as exc_info:
        await service.create_issue(create_request(component_id, **overrides), uuid4())
    assert exc_info.value.message == message


async def test_notification_failure_does_not_fail_create(
    issue_repository, comment_repository, attachment_repository, component_id, now
):
    service = IssueService(issue_repository, comment_repository, attachment_repository, notifier=FailingNotifier())

    issue = await service.create_issue(create_request(component_id), uuid4(), now=now)

    assert await issue_repository.get_by_id(issue.id) is not None


# ========== Get / Update ==========

async def test_get_issue_errors(service):
    with pytest.raises(ValidationException):
        await service.get_issue("not-a-uuid")
    with pytest.raises(ResourceNotFoundException):
        await service.get_issue(str(uuid4()))


async def test_update_issue_partial(service, component_id, now, notifier):
    issue = await service.create_issue(create_request(component_id, description="original"), uuid4(), now=now)
    later = now + timedelta(hours=1)

    updated = await service.update_issue(
        str(issue.id),
        IssueUpdateRequest(status=IssueStatus.IN_PROGRESS, priority=Priority.P0),
        now=later,
    )

    assert updated.status == IssueStatus.IN_PROGRESS
    assert updated.priority == Priority.P0
    assert updated.description == "original"
    assert updated.updated_at == later
    # Due date stays as computed at creation
    assert updated.due_date == issue.due_date

    (_, notification_type, message) = notifier.issue_events[-1]
    assert notification_type == NotificationType.ISSUE_UPDATED
    assert message == "Issue status changed from NEW to IN_PROGRESS: Login page crashes"


async def test_update_issue_allows_any_status(service, component_id, now):
    issue = await service.create_issue(create_request(component_id), uuid4(), now=now)

    updated = await service.update_issue(str(issue.id), IssueUpdateRequest(status=IssueStatus.CLOSED), now=now)
    reopened = await service.update_issue(str(updated.id), IssueUpdateRequest(status=IssueStatus.NEW), now=now)

    assert reopened.status == IssueStatus.NEW


async def test_update_issue_assignment_notifies(service, component_id, now, notifier):
    issue = await service.create_issue(create_request(component_id), uuid4(), now=now)
    assignee_id = uuid4()

    updated = await service.update_issue(str(issue.id), IssueUpdateRequest(assignee_id=assignee_id), now=now)

    assert updated.assignee_id == assignee_id
    assert [event[1] for event in notifier.issue_events] == [
        NotificationType.ISSUE_CREATED,
        NotificationType.ISSUE_ASSIGNED,
    ]


# ========== List ==========

async def test_list_issues_defaults_to_open(service, issue_repository, make_issue):
    await issue_repository.create(make_issue(title="open"))
    await issue_repository.create(make_issue(title="closed", status=IssueStatus.CLOSED))

    page = await service.list_issues()

    assert [issue.title for issue in page.issues] == ["open"]
    assert page.total_count == 1
    assert page.next_page_token == ""


async def test_list_issues_paginates_newest_first(service, issue_repository, make_issue, now):
    for day in range(5):
        await issue_repository.create(make_issue(title=f"day {day}", created_at=now - timedelta(days=day)))

    first = await service.list_issues("is:open", page_size=2)
    second = await service.list_issues("is:open", page_size=2, page_token=first.next_page_token)
    last = await service.list_issues("is:open", page_size=2, page_token=second.next_page_token)

    assert [i.title for i in first.issues] == ["day 0", "day 1"]
    assert first.next_page_token == "2"
    assert [i.title for i in second.issues] == ["day 2", "day 3"]
    assert [i.title for i in last.issues] == ["day 4"]
    assert last.next_page_token == ""
    assert last.total_count == 5


async def test_list_issues_bad_token_starts_over(service, issue_repository, make_issue):
    await issue_repository.create(make_issue(title="only"))

    page = await service.list_issues("is:open", page_token="garbage")

    assert [i.title for i in page.issues] == ["only"]


async def test_list_issues_assignee_me(service, issue_repository, make_issue):
    user_id = uuid4()
    await issue_repository.create(make_issue(title="mine", assignee_id=user_id))
    await issue_repository.create(make_issue(title="theirs", assignee_id=uuid4()))

    page = await service.list_issues("assignee:me", current_user_id=user_id)

    assert [i.title for i in page.issues] == ["mine"]


# ========== Comments / Attachments ==========

async def test_comments(service, component_id, now, notifier):
    issue = await service.create_issue(create_request(component_id), uuid4(), now=now)
    author_id = uuid4()

    await service.add_comment(str(issue.id), author_id, "second", now=now + timedelta(minutes=2))
    await service.add_comment(str(issue.id), author_id, "first", now=now + timedelta(minutes=1))

    comments = await service.list_comments(str(issue.id))
    assert [c.content for c in comments] == ["first", "second"]
    assert notifier.issue_events[-1][1] == NotificationType.COMMENT_ADDED
    assert notifier.issue_events[-1][2] == "New comment added to issue"


async def test_comment_requires_content_and_issue(service):
    with pytest.raises(ValidationException):
        await service.add_comment(str(uuid4()), uuid4(), " ")
    with pytest.raises(ResourceNotFoundException):
        await service.add_comment(str(uuid4()), uuid4(), "hello")


async def test_attachment_metadata(service, attachment_repository, component_id, now):
    issue = await service.create_issue(create_request(component_id), uuid4(), now=now)

    attachment = await service.add_attachment(str(issue.id), uuid4(), "trace.log", b"0123456789", now=now)

    assert attachment.file_size == 10
    assert attachment.file_url == f"https://bugs.example.com/files/{attachment.id}"
    assert attachment_repository.attachments == [attachment]


async def test_attachment_validation(service):
    with pytest.raises(ValidationException):
        await service.add_attachment(str(uuid4()), uuid4(), "", b"data")
    with pytest.raises(ResourceNotFoundException):
        await service.add_attachment(str(uuid4()), uuid4(), "trace.log", b"data")
