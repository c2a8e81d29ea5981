"""State records and reducers for the view controllers.

Every controller owns one immutable state record and replaces it by feeding
events through a pure reducer: ``reduce_list`` for collections and
``reduce_form`` for forms. Controllers perform the network calls; reducers
only decide what the next state looks like, so they can be tested without an
event loop.

Stale results are rejected here: list loads carry ``(scope, seq)`` and form
loads carry ``key``; a completion that does not match the record's current
tag leaves the state untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar


class Identified(Protocol):
    @property
    def id(self) -> int: ...


E = TypeVar("E", bound=Identified)


class ListStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class FormStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class Reconcile(str, Enum):
    """How a successful mutation is reflected in the UI."""

    PATCH_LOCAL = "patch_local"  # edit the in-memory collection, no refetch
    RELOAD_DESTINATION = "reload_destination"  # navigate away and force a reload there
    STAY = "stay"  # keep the current view, notify only


# ---- list -------------------------------------------------------------


@dataclass(frozen=True)
class ListState(Generic[E]):
    status: ListStatus = ListStatus.LOADING
    items: tuple[E, ...] = ()
    error: str | None = None
    pending_ids: frozenset[int] = frozenset()
    scope: int | None = None
    seq: int = 0

    @property
    def rows(self) -> tuple[E, ...]:
        """Rows to render; none unless the collection is loaded."""
        return self.items if self.status is ListStatus.LOADED else ()

    def is_pending(self, entity_id: int) -> bool:
        return entity_id in self.pending_ids

    def find(self, entity_id: int) -> E | None:
        for item in self.items:
            if item.id == entity_id:
                return item
        return None


@dataclass(frozen=True)
class LoadStarted:
    scope: int | None
    seq: int


@dataclass(frozen=True)
class LoadSucceeded(Generic[E]):
    scope: int | None
    seq: int
    items: tuple[E, ...]


@dataclass(frozen=True)
class LoadFailed:
    scope: int | None
    seq: int
    message: str


@dataclass(frozen=True)
class DeleteStarted:
    entity_id: int


@dataclass(frozen=True)
class DeleteSucceeded:
    entity_id: int


@dataclass(frozen=True)
class DeleteFailed:
    entity_id: int
    message: str


@dataclass(frozen=True)
class ItemAppended(Generic[E]):
    scope: int | None
    item: E


@dataclass(frozen=True)
class InlineError:
    message: str | None


def _settled(items: tuple[Any, ...]) -> ListStatus:
    return ListStatus.LOADED if items else ListStatus.EMPTY


def reduce_list(state: ListState[E], event: object) -> ListState[E]:
    if isinstance(event, LoadStarted):
        return ListState(status=ListStatus.LOADING, scope=event.scope, seq=event.seq)

    if isinstance(event, (LoadSucceeded, LoadFailed)):
        if (event.scope, event.seq) != (state.scope, state.seq):
            return state
        if isinstance(event, LoadFailed):
            return replace(state, status=ListStatus.ERROR, items=(), error=event.message)
        # items appended while this load was in flight are kept after the server rows
        fetched_ids = {item.id for item in event.items}
        items = (*event.items, *(i for i in state.items if i.id not in fetched_ids))
        return replace(state, status=_settled(items), items=items, error=None)

    settled = state.status in (ListStatus.LOADED, ListStatus.EMPTY)

    if isinstance(event, DeleteStarted):
        if (
            not settled
            or event.entity_id in state.pending_ids
            or state.find(event.entity_id) is None
        ):
            return state
        return replace(state, pending_ids=state.pending_ids | {event.entity_id}, error=None)

    if isinstance(event, DeleteSucceeded):
        # a reload in between clears pending_ids, which drops this completion
        if event.entity_id not in state.pending_ids:
            return state
        items = tuple(item for item in state.items if item.id != event.entity_id)
        return replace(
            state,
            items=items,
            status=_settled(items),
            pending_ids=state.pending_ids - {event.entity_id},
        )

    if isinstance(event, DeleteFailed):
        if event.entity_id not in state.pending_ids:
            return state
        return replace(
            state,
            pending_ids=state.pending_ids - {event.entity_id},
            error=event.message,
        )

    if isinstance(event, ItemAppended):
        if event.scope != state.scope or state.find(event.item.id) is not None:
            return state
        items = (*state.items, event.item)
        if state.status is ListStatus.LOADING:
            return replace(state, items=items)
        if state.status is ListStatus.ERROR:
            return replace(state, items=items, status=ListStatus.LOADED, error=None)
        return replace(state, items=items, status=ListStatus.LOADED)

    if isinstance(event, InlineError):
        # a failed load keeps its message until something replaces it
        if event.message is None and state.status is ListStatus.ERROR:
            return state
        return replace(state, error=event.message)

    raise TypeError(f"unknown list event: {event!r}")


# ---- form -------------------------------------------------------------


@dataclass(frozen=True)
class FormState:
    mode: FormMode
    status: FormStatus
    fields: Mapping[str, str]
    required: tuple[str, ...] = ()
    read_only: Mapping[str, str] = field(default_factory=dict)
    error: str | None = None
    submitting: bool = False
    key: tuple[int, ...] | None = None

    @property
    def missing(self) -> tuple[str, ...]:
        return tuple(name for name in self.required if not self.fields.get(name, "").strip())

    @property
    def can_submit(self) -> bool:
        return self.status is FormStatus.READY and not self.submitting and not self.missing

    @property
    def shows_fields(self) -> bool:
        return self.status is FormStatus.READY


@dataclass(frozen=True)
class FormLoadStarted:
    key: tuple[int, ...]


@dataclass(frozen=True)
class FormLoadSucceeded:
    key: tuple[int, ...]
    fields: Mapping[str, str]
    read_only: Mapping[str, str]


@dataclass(frozen=True)
class FormLoadFailed:
    key: tuple[int, ...]
    message: str


@dataclass(frozen=True)
class FieldChanged:
    name: str
    value: str


@dataclass(frozen=True)
class SubmitStarted:
    pass


@dataclass(frozen=True)
class SubmitSucceeded:
    fields: Mapping[str, str] | None = None
    read_only: Mapping[str, str] | None = None


@dataclass(frozen=True)
class SubmitFailed:
    message: str


def reduce_form(state: FormState, event: object) -> FormState:
    if isinstance(event, FormLoadStarted):
        return replace(
            state, status=FormStatus.LOADING, key=event.key, error=None, submitting=False
        )

    if isinstance(event, (FormLoadSucceeded, FormLoadFailed)):
        if event.key != state.key:
            return state
        if isinstance(event, FormLoadFailed):
            return replace(state, status=FormStatus.ERROR, error=event.message)
        return replace(
            state,
            status=FormStatus.READY,
            fields={**state.fields, **event.fields},
            read_only=dict(event.read_only),
            error=None,
        )

    if isinstance(event, FieldChanged):
        if event.name not in state.fields:
            raise KeyError(event.name)
        return replace(state, fields={**state.fields, event.name: event.value})

    if isinstance(event, SubmitStarted):
        if not state.can_submit:
            return state
        return replace(state, submitting=True, error=None)

    if isinstance(event, SubmitSucceeded):
        if not state.submitting:
            return state
        return replace(
            state,
            submitting=False,
            fields={**state.fields, **(event.fields or {})},
            read_only={**state.read_only, **(event.read_only or {})},
        )

    if isinstance(event, SubmitFailed):
        if not state.submitting:
            return state
        return replace(state, submitting=False, error=event.message)

    raise TypeError(f"unknown form event: {event!r}")


__all__ = [
    "DeleteFailed",
    "DeleteStarted",
    "DeleteSucceeded",
    "FieldChanged",
    "FormLoadFailed",
    "FormLoadStarted",
    "FormLoadSucceeded",
    "FormMode",
    "FormState",
    "FormStatus",
    "InlineError",
    "ItemAppended",
    "ListState",
    "ListStatus",
    "LoadFailed",
    "LoadStarted",
    "LoadSucceeded",
    "Reconcile",
    "SubmitFailed",
    "SubmitStarted",
    "SubmitSucceeded",
    "reduce_form",
    "reduce_list",
]
