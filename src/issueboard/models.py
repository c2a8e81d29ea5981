from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class IssueStatus(str, Enum):
    TO_DO = "to_do"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    RESOLVED = "resolved"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def variant(self) -> str:
        return _STATUS_VARIANTS[self]


_STATUS_LABELS = {
    IssueStatus.TO_DO: "To do",
    IssueStatus.ACTIVE: "Active",
    IssueStatus.ON_HOLD: "On hold",
    IssueStatus.RESOLVED: "Resolved",
}

_STATUS_VARIANTS = {
    IssueStatus.TO_DO: "secondary",
    IssueStatus.ACTIVE: "default",
    IssueStatus.ON_HOLD: "outline",
    IssueStatus.RESOLVED: "secondary",
}


def _require(raw: Mapping[str, Any], key: str, kind: type) -> Any:
    if not isinstance(raw, Mapping):
        raise TypeError(f"expected a JSON object, got {type(raw).__name__}")
    value = raw[key]
    # bool is an int subclass; ids are never booleans
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Project:
    """Top-level aggregate root."""

    id: int
    name: str
    created_at: str
    updated_at: str

    @property
    def display_name(self) -> str:
        return self.name

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Project:
        return cls(
            id=_require(raw, "id", int),
            name=_require(raw, "name", str),
            created_at=str(raw.get("created_at") or ""),
            updated_at=str(raw.get("updated_at") or ""),
        )


@dataclass(frozen=True)
class Issue:
    id: int
    project_id: int
    title: str
    description: str
    assigned_to: str
    status: IssueStatus
    created_at: str
    updated_at: str

    @property
    def display_name(self) -> str:
        return self.title

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Issue:
        # IssueStatus() raises ValueError for anything outside the four states
        return cls(
            id=_require(raw, "id", int),
            project_id=_require(raw, "project_id", int),
            title=_require(raw, "title", str),
            description=str(raw.get("description") or ""),
            assigned_to=str(raw.get("assigned_to") or ""),
            status=IssueStatus(_require(raw, "status", str)),
            created_at=str(raw.get("created_at") or ""),
            updated_at=str(raw.get("updated_at") or ""),
        )


@dataclass(frozen=True)
class Comment:
    """Leaf entity: created and deleted, never updated."""

    id: int
    issue_id: int
    text: str
    created_at: str
    updated_at: str

    @property
    def display_name(self) -> str:
        return self.text

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Comment:
        return cls(
            id=_require(raw, "id", int),
            issue_id=_require(raw, "issue_id", int),
            text=_require(raw, "text", str),
            created_at=str(raw.get("created_at") or ""),
            updated_at=str(raw.get("updated_at") or ""),
        )


@dataclass(frozen=True)
class CreateProjectData:
    name: str

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class CreateIssueData:
    title: str
    description: str
    assigned_to: str
    status: IssueStatus = IssueStatus.TO_DO

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "assigned_to": self.assigned_to,
            "status": IssueStatus(self.status).value,
        }


@dataclass(frozen=True)
class CreateCommentData:
    text: str

    def to_payload(self) -> dict[str, Any]:
        return {"text": self.text}


__all__ = [
    "Comment",
    "CreateCommentData",
    "CreateIssueData",
    "CreateProjectData",
    "Issue",
    "IssueStatus",
    "Project",
]
