import asyncio

import pytest

from conftest import FakeResource, make_issue, make_project
from issueboard.errors import RequestError
from issueboard.form_controller import (
    IssueFormController,
    ProjectFormController,
    is_entity_id,
)
from issueboard.models import CreateIssueData, CreateProjectData, IssueStatus
from issueboard.state import FormMode, FormStatus


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, True), (42, True), (0, False), (-3, False), (None, False), (True, False), ("5", False)],
)
def test_only_positive_ints_select_edit_mode(value, expected):
    assert is_entity_id(value) is expected


def test_create_form_starts_ready_with_defaults(host):
    form = IssueFormController(host, FakeResource(), project_id=1)

    assert form.state.mode is FormMode.CREATE
    assert form.state.status is FormStatus.READY
    assert dict(form.state.fields) == {
        "title": "",
        "description": "",
        "assigned_to": "",
        "status": "to_do",
    }
    assert form.state.can_submit is False


def test_create_mount_does_not_fetch(host):
    resource = FakeResource()
    form = IssueFormController(host, resource, project_id=1, issue_id=0)

    asyncio.run(form.mount())

    assert form.state.mode is FormMode.CREATE
    assert resource.calls == []


def test_issue_create_submits_trimmed_payload_and_reloads_parent(host):
    resource = FakeResource(create=make_issue(5, title="New Issue", assigned_to="Jane Doe"))
    form = IssueFormController(host, resource, project_id=1)

    form.field_changed("title", "  New Issue ")
    form.field_changed("assigned_to", "Jane Doe")
    ok = asyncio.run(form.submit())

    assert ok is True
    assert resource.calls_to("create") == [
        (1, CreateIssueData("New Issue", "", "Jane Doe", IssueStatus.TO_DO))
    ]
    assert host.navigations == [("/projects/1", True)]
    assert host.notifications == []


def test_project_create_reloads_project_list(host):
    resource = FakeResource(create=make_project(9, "Roadmap"))
    form = ProjectFormController(host, resource)

    form.field_changed("name", "Roadmap")
    asyncio.run(form.submit())

    assert resource.calls_to("create") == [(CreateProjectData(name="Roadmap"),)]
    assert host.navigations == [("/projects", True)]


def test_edit_loads_entity_then_saves_and_stays(host):
    original = make_issue(3, project_id=2, title="Old title", status="active")
    saved = make_issue(3, project_id=2, title="Fixed title", status="resolved")
    resource = FakeResource(get=original, update=saved)
    form = IssueFormController(host, resource, project_id=2, issue_id=3)
    assert form.state.status is FormStatus.LOADING

    asyncio.run(form.mount())
    assert resource.calls_to("get") == [(2, 3)]
    assert form.state.fields["title"] == "Old title"
    assert form.state.fields["status"] == "active"
    assert form.state.read_only["created_at"] == "2024-01-01T00:00:00Z"

    form.field_changed("title", "Fixed title")
    form.field_changed("status", "resolved")
    ok = asyncio.run(form.submit())

    assert ok is True
    assert resource.calls_to("update") == [
        (2, 3, CreateIssueData("Fixed title", "Test description", "John Doe", IssueStatus.RESOLVED))
    ]
    assert host.navigations == []
    assert host.notifications == [("success", "Issue updated successfully!")]
    assert form.state.fields["title"] == "Fixed title"
    assert form.state.mode is FormMode.EDIT


def test_project_update_notifies(host):
    resource = FakeResource(get=make_project(4, "Old"), update=make_project(4, "New"))
    form = ProjectFormController(host, resource, project_id=4)
    asyncio.run(form.mount())

    form.field_changed("name", "New")
    asyncio.run(form.submit())

    assert resource.calls_to("update") == [(4, CreateProjectData(name="New"))]
    assert host.notifications == [("success", "Project updated successfully!")]


def test_edit_load_failure_hides_fields(host):
    form = ProjectFormController(
        host, FakeResource(get=RequestError(404, "Not Found")), project_id=8
    )

    state = asyncio.run(form.mount())

    assert state.status is FormStatus.ERROR
    assert state.error == "API Error: 404 Not Found"
    assert state.shows_fields is False
    assert state.can_submit is False


@pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
def test_whitespace_only_required_field_disables_submit(host, blank):
    resource = FakeResource(create=make_issue(1))
    form = IssueFormController(host, resource, project_id=1)
    form.field_changed("title", "Title")
    form.field_changed("assigned_to", blank)

    assert form.state.can_submit is False
    assert form.state.missing == ("assigned_to",)
    assert asyncio.run(form.submit()) is False
    assert resource.calls == []


def test_submit_failure_keeps_user_input(host):
    resource = FakeResource(create=RequestError(500, "Internal Server Error"))
    form = IssueFormController(host, resource, project_id=1)
    form.field_changed("title", "Draft title")
    form.field_changed("assigned_to", "Sam")
    form.field_changed("description", "Steps to reproduce")

    ok = asyncio.run(form.submit())

    assert ok is False
    assert form.state.error == "API Error: 500 Internal Server Error"
    assert form.state.submitting is False
    assert form.state.fields["title"] == "Draft title"
    assert form.state.fields["description"] == "Steps to reproduce"
    assert host.navigations == []
    # the form can be resubmitted after a failure
    assert form.state.can_submit is True


def test_submit_failure_without_message_uses_fallback(host):
    form = ProjectFormController(host, FakeResource(create=RuntimeError()))
    form.field_changed("name", "x")

    asyncio.run(form.submit())

    assert form.state.error == "Failed to create project"


def test_invalid_status_is_rejected(host):
    form = IssueFormController(host, FakeResource(), project_id=1)

    with pytest.raises(ValueError):
        form.field_changed("status", "blocked")
    assert form.state.fields["status"] == "to_do"


def test_unknown_field_is_rejected(host):
    form = ProjectFormController(host, FakeResource())

    with pytest.raises(KeyError):
        form.field_changed("colour", "red")


def test_cancel_navigates_without_reload(host):
    form = IssueFormController(host, FakeResource(), project_id=6)

    form.cancel()

    assert host.navigations == [("/projects/6", False)]


@pytest.mark.asyncio
async def test_double_submit_sends_one_request(host):
    gate = asyncio.Event()

    async def create(data):
        await gate.wait()
        return make_project(1, data.name)

    resource = FakeResource(create=create)
    form = ProjectFormController(host, resource)
    form.field_changed("name", "Once")

    first = asyncio.create_task(form.submit())
    await asyncio.sleep(0)
    assert form.state.submitting is True
    assert await form.submit() is False

    gate.set()
    assert await first is True
    assert len(resource.calls_to("create")) == 1


def test_subscribers_receive_form_states(host):
    form = ProjectFormController(host, FakeResource(get=make_project(2, "P")), project_id=2)
    seen = []
    form.subscribe(lambda state: seen.append(state.status))

    asyncio.run(form.mount())

    assert seen == [FormStatus.LOADING, FormStatus.READY]


def test_edit_submit_of_unchanged_values_sends_them_back(host):
    issue = make_issue(1, project_id=1, title="Test Issue", description="Test description")
    resource = FakeResource(get=issue, update=issue)
    form = IssueFormController(host, resource, project_id=1, issue_id=1)

    asyncio.run(form.mount())
    assert dict(form.state.fields) == {
        "title": "Test Issue",
        "description": "Test description",
        "assigned_to": "John Doe",
        "status": "to_do",
    }
    asyncio.run(form.submit())

    assert resource.calls_to("update") == [
        (1, 1, CreateIssueData("Test Issue", "Test description", "John Doe", IssueStatus.TO_DO))
    ]
    assert host.notifications == [("success", "Issue updated successfully!")]
    assert host.navigations == []
