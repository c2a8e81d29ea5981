"""Entity list controllers (project list, issue table).

A list controller owns one collection for one scope, loads it on mount and
deletes rows behind a confirmation prompt. Successful deletes patch the local
collection; nothing is refetched.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic

from .errors import error_message
from .host import Host
from .logging import get_logger
from .models import Issue, Project
from .resources import IssuesClient, ProjectsClient
from .state import (
    E,
    DeleteFailed,
    DeleteStarted,
    DeleteSucceeded,
    ListState,
    ListStatus,
    LoadFailed,
    LoadStarted,
    LoadSucceeded,
    Reconcile,
    reduce_list,
)

Observer = Callable[[Any], None]

_KEEP_SCOPE = object()


class EntityListController(Generic[E]):
    entity_name: str = "item"
    plural_name: str = "items"
    empty_message: str = "Nothing here yet."
    reconcile = {"delete": Reconcile.PATCH_LOCAL}

    def __init__(self, host: Host, scope: int | None = None) -> None:
        self.host = host
        self.logger = get_logger()
        self._state: ListState[E] = ListState(scope=scope)
        self._seq = 0
        self._observers: list[Observer] = []

    # ---- observable state ---------------------------------------------
    @property
    def state(self) -> ListState[E]:
        return self._state

    def snapshot(self) -> Any:
        return self._state

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        self._observers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return _unsubscribe

    def _notify(self) -> None:
        snap = self.snapshot()
        for callback in list(self._observers):
            callback(snap)

    def _dispatch(self, event: object) -> None:
        new_state = reduce_list(self._state, event)
        if new_state is not self._state:
            self._state = new_state
            self._notify()

    # ---- resource hooks -----------------------------------------------
    async def _fetch(self, scope: int | None) -> Sequence[E]:
        raise NotImplementedError

    async def _destroy(self, scope: int | None, entity_id: int) -> None:
        raise NotImplementedError

    def confirm_message(self, entity: E) -> str:
        return f'Are you sure you want to delete "{getattr(entity, "display_name", entity.id)}"?'

    # ---- commands -----------------------------------------------------
    async def load(self, scope: Any = _KEEP_SCOPE) -> ListState[E]:
        """Fetch the collection for ``scope`` (default: the current one)."""
        target = self._state.scope if scope is _KEEP_SCOPE else scope
        self._seq += 1
        seq = self._seq
        self._dispatch(LoadStarted(target, seq))
        try:
            items = await self._fetch(target)
        except Exception as exc:
            self.logger.log_error(
                f"failed to load {self.plural_name}", exc, entity=self.entity_name, scope=target
            )
            self._dispatch(
                LoadFailed(target, seq, error_message(exc, f"Failed to load {self.plural_name}"))
            )
        else:
            self._dispatch(LoadSucceeded(target, seq, tuple(items)))
            if (target, seq) != (self._state.scope, self._state.seq):
                self.logger.debug(
                    f"discarded stale {self.plural_name} load", scope=target, seq=seq
                )
        return self._state

    async def mount(self) -> ListState[E]:
        return await self.load()

    async def reload(self) -> ListState[E]:
        return await self.load()

    async def set_scope(self, scope: int | None) -> ListState[E]:
        return await self.load(scope)

    def can_delete(self, entity_id: int) -> bool:
        state = self._state
        return (
            state.status is ListStatus.LOADED
            and not state.is_pending(entity_id)
            and state.find(entity_id) is not None
        )

    async def delete(self, entity_id: int) -> bool:
        """Confirm, destroy and drop one row; returns True when the row is gone."""
        entity = self._state.find(entity_id)
        if entity is None or not self.can_delete(entity_id):
            return False
        if not self.host.confirm(self.confirm_message(entity)):
            return False
        scope = self._state.scope
        self._dispatch(DeleteStarted(entity_id))
        try:
            await self._destroy(scope, entity_id)
        except Exception as exc:
            self.logger.log_error(
                f"failed to delete {self.entity_name}",
                exc,
                entity=self.entity_name,
                entity_id=entity_id,
            )
            self._dispatch(
                DeleteFailed(entity_id, error_message(exc, f"Failed to delete {self.entity_name}"))
            )
            return False
        self._dispatch(DeleteSucceeded(entity_id))
        self.logger.log_entity_action("deleted", self.entity_name, entity_id)
        return True


class ProjectListController(EntityListController[Project]):
    entity_name = "project"
    plural_name = "projects"
    empty_message = "No projects found. Create your first project to get started."

    def __init__(self, host: Host, projects: ProjectsClient) -> None:
        super().__init__(host)
        self.projects = projects

    async def _fetch(self, scope: int | None) -> Sequence[Project]:
        return await self.projects.list()

    async def _destroy(self, scope: int | None, entity_id: int) -> None:
        await self.projects.destroy(entity_id)


class IssueTableController(EntityListController[Issue]):
    entity_name = "issue"
    plural_name = "issues"
    empty_message = "No issues found. Create your first issue to get started."

    def __init__(self, host: Host, issues: IssuesClient, project_id: int) -> None:
        super().__init__(host, scope=project_id)
        self.issues = issues

    @property
    def project_id(self) -> int | None:
        return self._state.scope

    async def _fetch(self, scope: int | None) -> Sequence[Issue]:
        if scope is None:
            raise ValueError("issue table requires a project id")
        return await self.issues.list(scope)

    async def _destroy(self, scope: int | None, entity_id: int) -> None:
        if scope is None:
            raise ValueError("issue table requires a project id")
        await self.issues.destroy(scope, entity_id)


__all__ = [
    "EntityListController",
    "IssueTableController",
    "ProjectListController",
]
