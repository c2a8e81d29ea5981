"""Text rendering of controller state.

Each ``render_*`` function draws one state record: a loading line, an error
panel, an empty-state message or the rows. Nothing here talks to the network.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, TextIO

from . import ux
from .comment_thread import ThreadState
from .models import Comment, Issue, Project
from .state import FormMode, FormState, FormStatus, ListState, ListStatus

LOADING_TEXT = "Loading..."


def format_date(timestamp: str) -> str:
    """``2024-01-01T00:00:00Z`` -> ``2024-01-01``; unparsable values pass through."""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return timestamp


def format_timestamp(timestamp: str) -> str:
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    return parsed.strftime("%Y-%m-%d %H:%M")


def render_error_panel(message: str, stream: TextIO | None = None) -> None:
    ux.print_error(message, stream=stream or sys.stdout)


def _render_list(
    state: ListState[Any],
    empty_message: str,
    headers: Sequence[str],
    row: Callable[[int, Any], list[str]],
    stream: TextIO,
) -> None:
    if state.status is ListStatus.LOADING:
        print(LOADING_TEXT, file=stream)
        return
    if state.status is ListStatus.ERROR:
        render_error_panel(state.error or "", stream)
        return
    if state.error:
        render_error_panel(state.error, stream)
    if state.status is ListStatus.EMPTY:
        print(empty_message, file=stream)
        return
    ux.print_table(headers, [row(i, item) for i, item in enumerate(state.rows)], stream=stream)


def render_projects(
    state: ListState[Project], empty_message: str, stream: TextIO | None = None
) -> None:
    def row(_: int, project: Project) -> list[str]:
        marker = " (deleting...)" if state.is_pending(project.id) else ""
        return [str(project.id), project.name + marker]

    _render_list(state, empty_message, ("ID", "Name"), row, stream or sys.stdout)


def render_issues(
    state: ListState[Issue], empty_message: str, stream: TextIO | None = None
) -> None:
    stream = stream or sys.stdout

    def row(index: int, issue: Issue) -> list[str]:
        return [
            f"#{index + 1}",
            str(issue.id),
            issue.title,
            format_date(issue.created_at),
            issue.assigned_to,
            ux.badge(issue.status.label, issue.status.variant, stream=stream)
            + (" (deleting...)" if state.is_pending(issue.id) else ""),
        ]

    _render_list(
        state,
        empty_message,
        ("No", "ID", "Title", "Date Created", "Assigned To", "Status"),
        row,
        stream,
    )


def render_thread(thread: ThreadState, empty_message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    ux.print_header("Comments", stream=stream)
    state = thread.thread
    if state.error and state.status is not ListStatus.ERROR:
        render_error_panel(state.error, stream)
    if state.status is ListStatus.LOADING:
        print(LOADING_TEXT, file=stream)
    elif state.status is ListStatus.ERROR:
        render_error_panel(state.error or "", stream)
    elif state.status is ListStatus.EMPTY:
        print(empty_message, file=stream)
    else:
        for comment in state.rows:
            _render_comment(comment, state.is_pending(comment.id), stream)


def _render_comment(comment: Comment, pending: bool, stream: TextIO) -> None:
    stamp = ux.colorize(format_timestamp(comment.created_at), ux.Colors.DIM, stream=stream)
    suffix = " (deleting...)" if pending else ""
    print(f"[{comment.id}] {stamp}{suffix}", file=stream)
    for line in comment.text.splitlines() or [""]:
        print(f"    {line}", file=stream)


def form_heading(state: FormState, entity_label: str, title_field: str | None = None) -> str:
    if state.mode is FormMode.CREATE:
        return f"Create New {entity_label}"
    if title_field:
        return f"Edit {state.fields.get(title_field, '')}"
    return f"Edit {entity_label}"


def render_form(
    state: FormState, heading: str, stream: TextIO | None = None
) -> None:
    stream = stream or sys.stdout
    if state.status is FormStatus.LOADING:
        print(LOADING_TEXT, file=stream)
        return
    if not state.shows_fields:
        render_error_panel(state.error or "", stream)
        return
    if state.error:
        render_error_panel(state.error, stream)
    items: list[tuple[str, str]] = []
    if state.mode is FormMode.EDIT and state.read_only.get("created_at"):
        items.append(("Created At", format_date(state.read_only["created_at"])))
    for name, value in state.fields.items():
        label = name.replace("_", " ").capitalize()
        items.append((label, value))
    ux.print_summary_box(heading, items, stream=stream)


def render_project_header(project: Project, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    ux.print_header(project.name, stream=stream)
    print("Issues: track and manage project issues", file=stream)


__all__ = [
    "form_heading",
    "format_date",
    "format_timestamp",
    "render_error_panel",
    "render_form",
    "render_issues",
    "render_project_header",
    "render_projects",
    "render_thread",
]
