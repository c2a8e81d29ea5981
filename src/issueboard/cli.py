"""issueboard CLI.

Subcommands (each maps to one page of the web client):
  projects list|show|create|update|delete
  issues   list|show|create|update|delete
  comments list|add|delete

Every command mounts the matching controller, feeds it the command-line
values as field edits or row actions, then renders the resulting state.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import re
import sys
from collections.abc import Awaitable, Callable
from typing import Any

from .comment_thread import CommentThreadController
from .config import CONFIG_DEFAULT
from .errors import error_message
from .form_controller import (
    EntityFormController,
    IssueFormController,
    ProjectFormController,
    is_entity_id,
)
from .host import ConsoleHost
from .list_controller import IssueTableController, ProjectListController
from .logging import get_logger
from .models import IssueStatus
from .resources import ApiClients
from .runtime import execute_command, prepare_config
from .state import FormMode, ListStatus
from .views import (
    form_heading,
    render_error_panel,
    render_form,
    render_issues,
    render_project_header,
    render_projects,
    render_thread,
)

_MAX_HELP_WIDTH = 100
_PROJECT_ROUTE = re.compile(r"^/projects/(\d+)$")

Handler = Callable[[ApiClients], Awaitable[int]]


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _status_arg(value: str) -> str:
    try:
        return IssueStatus(value).value
    except ValueError as exc:
        choices = ", ".join(s.value for s in IssueStatus)
        raise argparse.ArgumentTypeError(f"invalid status {value!r} (choose from {choices})") from exc


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(prog="issueboard", description="Project and issue tracker client")
    p.add_argument(
        "--config",
        default=None,
        help=f"YAML configuration file (default: {CONFIG_DEFAULT} if present)",
    )
    p.add_argument("--base-url", help="API base URL (env: ISSUEBOARD_API_BASE_URL)")
    p.add_argument("--json-logs", action="store_true", help="Emit JSON log records on stderr")
    p.add_argument("--log-level", help="Logging level (default INFO)")
    p.add_argument(
        "--yes",
        action="store_true",
        help="Answer yes to delete confirmations (env: ISSUEBOARD_ASSUME_YES=1)",
    )
    sub = p.add_subparsers(
        dest="resource", required=True, parser_class=_FormatterArgumentParser, metavar="<resource>"
    )

    projects = sub.add_parser("projects", help="Manage projects")
    pact = projects.add_subparsers(dest="action", required=True, metavar="<action>")
    pact.add_parser("list", help="List projects")
    ps = pact.add_parser("show", help="Show a project and its issues")
    ps.add_argument("project_id", type=int)
    pc = pact.add_parser("create", help="Create a project")
    pc.add_argument("--name", required=True)
    pu = pact.add_parser("update", help="Rename a project")
    pu.add_argument("project_id", type=int)
    pu.add_argument("--name", required=True)
    pd = pact.add_parser("delete", help="Delete a project")
    pd.add_argument("project_id", type=int)

    issues = sub.add_parser("issues", help="Manage issues of a project")
    iact = issues.add_subparsers(dest="action", required=True, metavar="<action>")
    il = iact.add_parser("list", help="List issues of a project")
    il.add_argument("project_id", type=int)
    ish = iact.add_parser("show", help="Show an issue with its comments")
    ish.add_argument("project_id", type=int)
    ish.add_argument("issue_id", type=int)
    ic = iact.add_parser("create", help="Create an issue")
    ic.add_argument("project_id", type=int)
    ic.add_argument("--title", required=True)
    ic.add_argument("--assigned-to", required=True)
    ic.add_argument("--description", default="")
    ic.add_argument("--status", type=_status_arg, default=IssueStatus.TO_DO.value)
    iu = iact.add_parser("update", help="Edit an issue")
    iu.add_argument("project_id", type=int)
    iu.add_argument("issue_id", type=int)
    iu.add_argument("--title")
    iu.add_argument("--assigned-to")
    iu.add_argument("--description")
    iu.add_argument("--status", type=_status_arg)
    idl = iact.add_parser("delete", help="Delete an issue")
    idl.add_argument("project_id", type=int)
    idl.add_argument("issue_id", type=int)

    comments = sub.add_parser("comments", help="Manage comments of an issue")
    cact = comments.add_subparsers(dest="action", required=True, metavar="<action>")
    cl = cact.add_parser("list", help="List comments of an issue")
    cl.add_argument("issue_id", type=int)
    ca = cact.add_parser("add", help="Add a comment")
    ca.add_argument("issue_id", type=int)
    ca.add_argument("--text", required=True)
    cd = cact.add_parser("delete", help="Delete a comment")
    cd.add_argument("issue_id", type=int)
    cd.add_argument("comment_id", type=int)
    return p


def _exit_code_for(status: ListStatus) -> int:
    return 1 if status is ListStatus.ERROR else 0


async def _show_projects(clients: ApiClients, host: ConsoleHost) -> int:
    controller = ProjectListController(host, clients.projects)
    state = await controller.mount()
    render_projects(state, controller.empty_message)
    return _exit_code_for(state.status)


async def _show_project(clients: ApiClients, host: ConsoleHost, project_id: int) -> int:
    try:
        project = await clients.projects.get(project_id)
    except Exception as exc:
        get_logger().log_error("failed to load project", exc, entity="project", entity_id=project_id)
        render_error_panel("Failed to load project")
        return 1
    render_project_header(project)
    table = IssueTableController(host, clients.issues, project_id)
    state = await table.mount()
    render_issues(state, table.empty_message)
    return _exit_code_for(state.status)


async def _follow_navigation(clients: ApiClients, host: ConsoleHost) -> int:
    """Render the page a successful create navigated to."""
    if not host.reload_requested or host.location is None:
        return 0
    if host.location == "/projects":
        return await _show_projects(clients, host)
    match = _PROJECT_ROUTE.match(host.location)
    if match:
        table = IssueTableController(host, clients.issues, int(match.group(1)))
        state = await table.mount()
        render_issues(state, table.empty_message)
        return _exit_code_for(state.status)
    return 0


async def _run_form(
    controller: EntityFormController[Any],
    fields: dict[str, str | None],
    heading: Callable[[], str],
    clients: ApiClients,
    host: ConsoleHost,
) -> int:
    state = await controller.mount()
    if not state.shows_fields:
        render_form(state, heading())
        return 1
    for name, value in fields.items():
        if value is not None:
            controller.field_changed(name, value)
    if not controller.state.can_submit:
        missing = ", ".join(controller.state.missing) or "form busy"
        render_error_panel(f"Cannot submit: required field(s) empty: {missing}")
        return 1
    ok = await controller.submit()
    if not ok:
        render_form(controller.state, heading())
        return 1
    if controller.state.mode is FormMode.CREATE:
        return await _follow_navigation(clients, host)
    render_form(controller.state, heading())
    return 0


def _build_handler(args: argparse.Namespace, host: ConsoleHost) -> Handler:
    resource, action = args.resource, args.action

    async def projects_handler(clients: ApiClients) -> int:
        if action == "list":
            return await _show_projects(clients, host)
        if action == "show":
            return await _show_project(clients, host, args.project_id)
        if action == "update" and not is_entity_id(args.project_id):
            render_error_panel(f"Invalid project id: {args.project_id}")
            return 1
        if action in ("create", "update"):
            form = ProjectFormController(
                host, clients.projects, args.project_id if action == "update" else None
            )
            return await _run_form(
                form, {"name": args.name}, lambda: form_heading(form.state, "Project"), clients, host
            )
        controller = ProjectListController(host, clients.projects)
        return await _delete_row(controller, args.project_id, render_projects)

    async def issues_handler(clients: ApiClients) -> int:
        if action == "list":
            table = IssueTableController(host, clients.issues, args.project_id)
            state = await table.mount()
            render_issues(state, table.empty_message)
            return _exit_code_for(state.status)
        if action == "show":
            return await _show_issue(clients, host, args.project_id, args.issue_id)
        if action == "update" and not is_entity_id(args.issue_id):
            render_error_panel(f"Invalid issue id: {args.issue_id}")
            return 1
        if action in ("create", "update"):
            form = IssueFormController(
                host,
                clients.issues,
                args.project_id,
                args.issue_id if action == "update" else None,
            )
            fields = {
                "title": args.title,
                "description": args.description,
                "assigned_to": args.assigned_to,
                "status": args.status,
            }
            return await _run_form(
                form, fields, lambda: form_heading(form.state, "Issue", "title"), clients, host
            )
        table = IssueTableController(host, clients.issues, args.project_id)
        return await _delete_row(table, args.issue_id, render_issues)

    async def comments_handler(clients: ApiClients) -> int:
        thread = CommentThreadController(host, clients.comments, args.issue_id)
        state = await thread.mount()
        if action == "list":
            render_thread(thread.snapshot(), thread.empty_message)
            return _exit_code_for(state.status)
        if action == "add":
            thread.draft_changed(args.text)
            if not thread.snapshot().can_submit:
                render_error_panel("Cannot submit: comment text is empty")
                return 1
            ok = await thread.submit()
            render_thread(thread.snapshot(), thread.empty_message)
            return 0 if ok else 1
        if state.status is ListStatus.ERROR:
            render_thread(thread.snapshot(), thread.empty_message)
            return 1
        deleted = await _confirm_delete(thread, args.comment_id)
        render_thread(thread.snapshot(), thread.empty_message)
        return 0 if deleted is not False else 1

    handlers: dict[str, Callable[[ApiClients], Awaitable[int]]] = {
        "projects": projects_handler,
        "issues": issues_handler,
        "comments": comments_handler,
    }
    return handlers[resource]


async def _confirm_delete(controller: Any, entity_id: int) -> bool | None:
    """True deleted, None declined, False failed or unknown row."""
    if controller.state.find(entity_id) is None:
        render_error_panel(f"{controller.entity_name.capitalize()} {entity_id} not found")
        return False
    if await controller.delete(entity_id):
        return True
    if controller.state.error:
        return False
    print("Cancelled.")
    return None


async def _delete_row(controller: Any, entity_id: int, render: Callable[..., None]) -> int:
    state = await controller.mount()
    if state.status is ListStatus.ERROR:
        render(state, controller.empty_message)
        return 1
    deleted = await _confirm_delete(controller, entity_id)
    render(controller.state, controller.empty_message)
    return 0 if deleted is not False else 1


async def _show_issue(clients: ApiClients, host: ConsoleHost, project_id: int, issue_id: int) -> int:
    form = IssueFormController(host, clients.issues, project_id, issue_id)
    thread = CommentThreadController(host, clients.comments, issue_id)
    # both panels load independently, as on the edit page
    form_state, thread_state = await asyncio.gather(form.mount(), thread.mount())
    render_form(form_state, form_heading(form_state, "Issue", "title"))
    render_thread(thread.snapshot(), thread.empty_message)
    return 1 if not form_state.shows_fields or thread_state.status is ListStatus.ERROR else 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.yes and os.environ.get("ISSUEBOARD_ASSUME_YES") == "1":
        args.yes = True
    try:
        cfg = prepare_config(args)
    except RuntimeError as exc:
        print(f"[config] {error_message(exc, 'invalid configuration')}", file=sys.stderr)
        return 2
    host = ConsoleHost(assume_yes=args.yes)
    handler = _build_handler(args, host)
    return execute_command(handler, cfg, f"{args.resource}_{args.action}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
