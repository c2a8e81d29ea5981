"""Resource clients for projects, issues and comments.

Each client is a thin facade over :class:`HttpClient` that knows one REST
collection: its path template, the singular envelope key the server expects
around request bodies (``{"issue": {...}}``) and the model returned. No
validation happens here; errors from the HTTP layer propagate unchanged.
"""

from __future__ import annotations

import string
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from .http_client import HttpClient
from .models import (
    Comment,
    CreateCommentData,
    CreateIssueData,
    CreateProjectData,
    Issue,
    Project,
)

M = TypeVar("M")


class _Payload(Protocol):
    def to_payload(self) -> dict[str, Any]: ...


class ResourceClient(Generic[M]):
    """Shared CRUD plumbing; ``scope`` fills the collection path template."""

    collection_template: str = ""
    envelope: str = ""
    parse: Callable[[Mapping[str, Any]], M]

    def __init__(self, http: HttpClient):
        self.http = http

    def collection_path(self, *scope: int) -> str:
        names = _template_fields(self.collection_template)
        if len(names) != len(scope):
            raise TypeError(
                f"{type(self).__name__} expects {len(names)} scope id(s), got {len(scope)}"
            )
        return self.collection_template.format(**dict(zip(names, scope)))

    def member_path(self, *scope: int, entity_id: int) -> str:
        return f"{self.collection_path(*scope)}/{entity_id}"

    def _wrap(self, data: _Payload) -> dict[str, Any]:
        return {self.envelope: data.to_payload()}

    async def _list(self, *scope: int) -> list[M]:
        raw = await self.http.request(self.collection_path(*scope))
        if not isinstance(raw, list):
            raise TypeError(f"expected a JSON array from {self.collection_path(*scope)}")
        return [type(self).parse(item) for item in raw]

    async def _get(self, *scope: int, entity_id: int) -> M:
        raw = await self.http.request(self.member_path(*scope, entity_id=entity_id))
        return type(self).parse(raw)

    async def _create(self, *scope: int, data: _Payload) -> M:
        raw = await self.http.request(
            self.collection_path(*scope), method="POST", json_body=self._wrap(data)
        )
        return type(self).parse(raw)

    async def _update(self, *scope: int, entity_id: int, data: _Payload) -> M:
        raw = await self.http.request(
            self.member_path(*scope, entity_id=entity_id),
            method="PUT",
            json_body=self._wrap(data),
        )
        return type(self).parse(raw)

    async def _destroy(self, *scope: int, entity_id: int) -> None:
        await self.http.request(
            self.member_path(*scope, entity_id=entity_id),
            method="DELETE",
            expect_body=False,
        )


def _template_fields(template: str) -> list[str]:
    return [name for _, name, _, _ in string.Formatter().parse(template) if name]


class ProjectsClient(ResourceClient[Project]):
    collection_template = "/projects"
    envelope = "project"
    parse = staticmethod(Project.from_dict)

    async def list(self) -> list[Project]:
        return await self._list()

    async def get(self, project_id: int) -> Project:
        return await self._get(entity_id=project_id)

    async def create(self, data: CreateProjectData) -> Project:
        return await self._create(data=data)

    async def update(self, project_id: int, data: CreateProjectData) -> Project:
        return await self._update(entity_id=project_id, data=data)

    async def destroy(self, project_id: int) -> None:
        await self._destroy(entity_id=project_id)


class IssuesClient(ResourceClient[Issue]):
    collection_template = "/projects/{project_id}/issues"
    envelope = "issue"
    parse = staticmethod(Issue.from_dict)

    async def list(self, project_id: int) -> list[Issue]:
        return await self._list(project_id)

    async def get(self, project_id: int, issue_id: int) -> Issue:
        return await self._get(project_id, entity_id=issue_id)

    async def create(self, project_id: int, data: CreateIssueData) -> Issue:
        return await self._create(project_id, data=data)

    async def update(self, project_id: int, issue_id: int, data: CreateIssueData) -> Issue:
        return await self._update(project_id, entity_id=issue_id, data=data)

    async def destroy(self, project_id: int, issue_id: int) -> None:
        await self._destroy(project_id, entity_id=issue_id)


class CommentsClient(ResourceClient[Comment]):
    """Append/delete only: comments expose no get or update."""

    collection_template = "/issues/{issue_id}/comments"
    envelope = "comment"
    parse = staticmethod(Comment.from_dict)

    async def list(self, issue_id: int) -> list[Comment]:
        return await self._list(issue_id)

    async def create(self, issue_id: int, data: CreateCommentData) -> Comment:
        return await self._create(issue_id, data=data)

    async def destroy(self, issue_id: int, comment_id: int) -> None:
        await self._destroy(issue_id, entity_id=comment_id)


@dataclass
class ApiClients:
    """The three resource clients sharing one :class:`HttpClient`."""

    http: HttpClient = field(default_factory=HttpClient)
    projects: ProjectsClient = field(init=False)
    issues: IssuesClient = field(init=False)
    comments: CommentsClient = field(init=False)

    def __post_init__(self) -> None:
        self.projects = ProjectsClient(self.http)
        self.issues = IssuesClient(self.http)
        self.comments = CommentsClient(self.http)

    def close(self) -> None:
        self.http.close()


__all__ = [
    "ApiClients",
    "CommentsClient",
    "IssuesClient",
    "ProjectsClient",
    "ResourceClient",
]
