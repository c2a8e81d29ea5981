import asyncio

import pytest

from conftest import FakeResource, RecordingHost, make_issue, make_project
from issueboard.errors import RequestError
from issueboard.list_controller import IssueTableController, ProjectListController
from issueboard.state import ListStatus


def _projects(*items):
    return FakeResource(list=list(items), destroy=None)


def test_mount_shows_rows_in_server_order(host):
    resource = _projects(make_project(3), make_project(1), make_project(2))
    controller = ProjectListController(host, resource)

    state = asyncio.run(controller.mount())

    assert state.status is ListStatus.LOADED
    assert [p.id for p in state.rows] == [3, 1, 2]
    assert resource.calls_to("list") == [()]


def test_empty_collection_is_empty_not_loaded(host):
    controller = ProjectListController(host, _projects())

    state = asyncio.run(controller.mount())

    assert state.status is ListStatus.EMPTY
    assert state.rows == ()
    assert controller.empty_message == "No projects found. Create your first project to get started."


def test_load_failure_surfaces_message_verbatim(host):
    resource = FakeResource(list=RequestError(500, "Internal Server Error"))
    controller = ProjectListController(host, resource)

    state = asyncio.run(controller.mount())

    assert state.status is ListStatus.ERROR
    assert state.error == "API Error: 500 Internal Server Error"
    assert state.rows == ()


def test_load_failure_without_message_uses_fallback(host):
    controller = ProjectListController(host, FakeResource(list=RuntimeError("")))

    state = asyncio.run(controller.mount())

    assert state.error == "Failed to load projects"


def test_state_is_loading_while_fetch_is_in_flight(host):
    seen = []

    async def slow_list():
        seen.append(controller.state.status)
        return [make_project(1)]

    controller = ProjectListController(host, FakeResource(list=slow_list))
    asyncio.run(controller.mount())

    assert seen == [ListStatus.LOADING]


def test_confirmed_delete_removes_exactly_one_row(host):
    resource = _projects(make_project(1, "Alpha"), make_project(2, "Beta"), make_project(3))
    controller = ProjectListController(host, resource)
    asyncio.run(controller.mount())

    deleted = asyncio.run(controller.delete(2))

    assert deleted is True
    assert host.confirmations == ['Are you sure you want to delete "Beta"?']
    assert resource.calls_to("destroy") == [(2,)]
    assert [p.id for p in controller.state.rows] == [1, 3]
    # no refetch after a local patch
    assert len(resource.calls_to("list")) == 1


def test_declined_delete_makes_no_request(declining_host):
    resource = _projects(make_project(1), make_project(2))
    controller = ProjectListController(declining_host, resource)
    asyncio.run(controller.mount())

    deleted = asyncio.run(controller.delete(1))

    assert deleted is False
    assert resource.calls_to("destroy") == []
    assert [p.id for p in controller.state.rows] == [1, 2]
    assert controller.state.error is None


def test_failed_delete_keeps_row_and_sets_inline_error(host):
    resource = FakeResource(list=[make_project(1)], destroy=RequestError(422, "Unprocessable Entity"))
    controller = ProjectListController(host, resource)
    asyncio.run(controller.mount())

    deleted = asyncio.run(controller.delete(1))

    assert deleted is False
    assert controller.state.status is ListStatus.LOADED
    assert [p.id for p in controller.state.rows] == [1]
    assert controller.state.error == "API Error: 422 Unprocessable Entity"
    assert not controller.state.is_pending(1)


def test_deleting_last_row_shows_empty_state(host):
    controller = ProjectListController(host, _projects(make_project(1)))
    asyncio.run(controller.mount())

    asyncio.run(controller.delete(1))

    assert controller.state.status is ListStatus.EMPTY


def test_delete_of_unknown_row_is_ignored(host):
    resource = _projects(make_project(1))
    controller = ProjectListController(host, resource)
    asyncio.run(controller.mount())

    assert asyncio.run(controller.delete(99)) is False
    assert host.confirmations == []
    assert resource.calls_to("destroy") == []


def test_delete_before_load_is_ignored(host):
    resource = _projects(make_project(1))
    controller = ProjectListController(host, resource)

    assert asyncio.run(controller.delete(1)) is False
    assert resource.calls_to("destroy") == []


def test_reload_is_idempotent(host):
    resource = _projects(make_project(1), make_project(2))
    controller = ProjectListController(host, resource)

    first = asyncio.run(controller.mount())
    second = asyncio.run(controller.reload())

    assert first.rows == second.rows
    assert second.status is ListStatus.LOADED


def test_issue_table_fetches_for_its_project(host):
    resource = FakeResource(list=[make_issue(1, project_id=7), make_issue(2, project_id=7)])
    controller = IssueTableController(host, resource, 7)

    state = asyncio.run(controller.mount())

    assert resource.calls_to("list") == [(7,)]
    assert [i.id for i in state.rows] == [1, 2]
    assert controller.empty_message == "No issues found. Create your first issue to get started."


def test_issue_delete_passes_project_scope(host):
    resource = FakeResource(list=[make_issue(4, project_id=7, title="Crash on start")], destroy=None)
    controller = IssueTableController(host, resource, 7)
    asyncio.run(controller.mount())

    asyncio.run(controller.delete(4))

    assert host.confirmations == ['Are you sure you want to delete "Crash on start"?']
    assert resource.calls_to("destroy") == [(7, 4)]


def test_stale_scope_result_is_discarded(host):
    async def scenario():
        release_first = asyncio.Event()

        async def list_issues(project_id):
            if project_id == 1:
                await release_first.wait()
                return [make_issue(10, project_id=1)]
            return [make_issue(20, project_id=2)]

        controller = IssueTableController(host, FakeResource(list=list_issues), 1)
        first = asyncio.create_task(controller.mount())
        await asyncio.sleep(0)
        await controller.set_scope(2)
        release_first.set()
        await first
        return controller.state

    state = asyncio.run(scenario())

    assert state.scope == 2
    assert [i.id for i in state.rows] == [20]


def test_overlapping_reloads_keep_latest_result(host):
    async def scenario():
        gate = asyncio.Event()
        responses = iter([[make_project(1)], [make_project(2)]])

        async def list_projects():
            batch = next(responses)
            if batch[0].id == 1:
                await gate.wait()
            return batch

        controller = ProjectListController(host, FakeResource(list=list_projects))
        first = asyncio.create_task(controller.load())
        await asyncio.sleep(0)
        await controller.load()
        gate.set()
        await first
        return controller.state

    state = asyncio.run(scenario())

    assert [p.id for p in state.rows] == [2]


@pytest.mark.asyncio
async def test_concurrent_deletes_of_different_rows_both_settle():
    host = RecordingHost()
    gates = {1: asyncio.Event(), 2: asyncio.Event()}

    async def destroy(project_id):
        await gates[project_id].wait()

    controller = ProjectListController(
        host, FakeResource(list=[make_project(1), make_project(2), make_project(3)], destroy=destroy)
    )
    await controller.mount()

    first = asyncio.create_task(controller.delete(1))
    second = asyncio.create_task(controller.delete(2))
    await asyncio.sleep(0)
    assert controller.state.pending_ids == frozenset({1, 2})
    # a second delete of a pending row is rejected
    assert await controller.delete(1) is False

    gates[2].set()
    gates[1].set()
    assert await asyncio.gather(first, second) == [True, True]
    assert [p.id for p in controller.state.rows] == [3]


def test_subscribers_see_each_state_change(host):
    controller = ProjectListController(host, _projects(make_project(1)))
    seen = []
    unsubscribe = controller.subscribe(lambda state: seen.append(state.status))

    asyncio.run(controller.mount())
    unsubscribe()
    asyncio.run(controller.reload())

    assert seen == [ListStatus.LOADING, ListStatus.LOADED]
