"""Pytest configuration for issueboard tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install, and provides the test doubles shared by
the controller tests: a recording host and fake resource clients.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Keep a developer's .env and base URL out of the test session
os.environ["ISSUEBOARD_DISABLE_DOTENV"] = "1"
os.environ.pop("ISSUEBOARD_API_BASE_URL", None)

from issueboard.models import Comment, Issue, Project  # noqa: E402


class RecordingHost:
    """Host double: scripted confirmation answers, recorded side effects."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.confirmations: list[str] = []
        self.navigations: list[tuple[str, bool]] = []
        self.notifications: list[tuple[str, str]] = []

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        return self.answer

    def navigate(self, path: str, *, reload: bool = False) -> None:
        self.navigations.append((path, reload))

    def notify(self, kind: str, message: str) -> None:
        self.notifications.append((kind, message))


class FakeResource:
    """Stands in for any resource client.

    ``responses`` maps an operation name to a value, an exception instance
    (raised) or a callable (called with the arguments, may be async).
    """

    def __init__(self, **responses: Any) -> None:
        self.responses = responses
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def _respond(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        value = self.responses.get(name)
        if isinstance(value, BaseException):
            raise value
        if callable(value):
            result = value(*args)
            if hasattr(result, "__await__"):
                result = await result
            return result
        return value

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for op, args in self.calls if op == name]

    async def list(self, *args: Any) -> Any:
        return await self._respond("list", *args)

    async def get(self, *args: Any) -> Any:
        return await self._respond("get", *args)

    async def create(self, *args: Any) -> Any:
        return await self._respond("create", *args)

    async def update(self, *args: Any) -> Any:
        return await self._respond("update", *args)

    async def destroy(self, *args: Any) -> Any:
        return await self._respond("destroy", *args)


def make_project(pid: int, name: str | None = None) -> Project:
    return Project(
        id=pid,
        name=name or f"Project {pid}",
        created_at="2024-01-01T00:00:00Z",
        updated_at="2024-01-01T00:00:00Z",
    )


def make_issue(iid: int, project_id: int = 1, **overrides: Any) -> Issue:
    raw: dict[str, Any] = {
        "id": iid,
        "project_id": project_id,
        "title": f"Issue {iid}",
        "description": "Test description",
        "assigned_to": "John Doe",
        "status": "to_do",
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    }
    raw.update(overrides)
    return Issue.from_dict(raw)


def make_comment(cid: int, issue_id: int = 1, text: str | None = None) -> Comment:
    return Comment(
        id=cid,
        issue_id=issue_id,
        text=text or f"Comment {cid}",
        created_at=f"2024-01-0{cid % 9 + 1}T00:00:00Z",
        updated_at=f"2024-01-0{cid % 9 + 1}T00:00:00Z",
    )


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def declining_host() -> RecordingHost:
    return RecordingHost(answer=False)

