"""Capability interface controllers use to reach the embedding environment.

Controllers never prompt, route or toast on their own. They call a ``Host``:

- ``confirm(message)`` gates destructive actions,
- ``navigate(path, reload=...)`` leaves the current view,
- ``notify(kind, message)`` shows a transient message.

``ConsoleHost`` is the terminal implementation used by the CLI.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Literal, Protocol, TextIO

from . import ux

NotifyKind = Literal["success", "error", "info"]


class Host(Protocol):
    def confirm(self, message: str) -> bool: ...

    def navigate(self, path: str, *, reload: bool = False) -> None: ...

    def notify(self, kind: NotifyKind, message: str) -> None: ...


def projects_path() -> str:
    return "/projects"


def project_path(project_id: int) -> str:
    return f"/projects/{project_id}"


def new_issue_path(project_id: int) -> str:
    return f"/projects/{project_id}/issues/new"


def edit_issue_path(project_id: int, issue_id: int) -> str:
    return f"/projects/{project_id}/issues/{issue_id}/edit"


def edit_project_path(project_id: int) -> str:
    return f"/projects/{project_id}/edit"


class ConsoleHost:
    """Terminal host: ``input`` prompts, ux-styled notifications."""

    def __init__(
        self,
        *,
        assume_yes: bool = False,
        stream: TextIO | None = None,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.assume_yes = assume_yes
        self.stream = stream
        self._prompt = prompt
        self.location: str | None = None
        self.reload_requested = False

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        try:
            answer = self._prompt(f"{message} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")

    def navigate(self, path: str, *, reload: bool = False) -> None:
        self.location = path
        self.reload_requested = reload
        ux.print_info(f"-> {path}", stream=self.stream or sys.stdout)

    def notify(self, kind: NotifyKind, message: str) -> None:
        if kind == "success":
            ux.print_success(message, stream=self.stream)
        elif kind == "error":
            ux.print_error(message, stream=self.stream)
        else:
            ux.print_info(message, stream=self.stream)


__all__ = [
    "ConsoleHost",
    "Host",
    "NotifyKind",
    "edit_issue_path",
    "edit_project_path",
    "new_issue_path",
    "project_path",
    "projects_path",
]
