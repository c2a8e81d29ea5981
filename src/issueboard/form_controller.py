"""Dual-mode (create/edit) form controllers for projects and issues."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Generic

from .errors import error_message
from .host import Host, project_path, projects_path
from .logging import get_logger
from .models import CreateIssueData, CreateProjectData, Issue, IssueStatus, Project
from .resources import IssuesClient, ProjectsClient
from .state import (
    E,
    FieldChanged,
    FormLoadFailed,
    FormLoadStarted,
    FormLoadSucceeded,
    FormMode,
    FormState,
    FormStatus,
    Reconcile,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    reduce_form,
)

Observer = Callable[[FormState], None]


def is_entity_id(value: object) -> bool:
    """Only positive integers select edit mode."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class EntityFormController(Generic[E]):
    entity_name: str = "item"
    defaults: Mapping[str, str] = {}
    required_fields: tuple[str, ...] = ()
    update_message: str = "Saved."
    reconcile = {"create": Reconcile.RELOAD_DESTINATION, "update": Reconcile.STAY}

    def __init__(self, host: Host, entity_id: int | None = None) -> None:
        self.host = host
        self.logger = get_logger()
        self.entity_id = entity_id if is_entity_id(entity_id) else None
        editing = self.entity_id is not None
        self._state = FormState(
            mode=FormMode.EDIT if editing else FormMode.CREATE,
            status=FormStatus.LOADING if editing else FormStatus.READY,
            fields=dict(self.defaults),
            required=self.required_fields,
        )
        self._observers: list[Observer] = []

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def is_editing(self) -> bool:
        return self._state.mode is FormMode.EDIT

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        self._observers.append(callback)
        return lambda: self._observers.remove(callback) if callback in self._observers else None

    def _dispatch(self, event: object) -> None:
        new_state = reduce_form(self._state, event)
        if new_state is not self._state:
            self._state = new_state
            for callback in list(self._observers):
                callback(new_state)

    # ---- entity hooks -------------------------------------------------
    def load_key(self, entity_id: int) -> tuple[int, ...]:
        return (entity_id,)

    async def _get(self, entity_id: int) -> E:
        raise NotImplementedError

    async def _create(self, fields: Mapping[str, str]) -> E:
        raise NotImplementedError

    async def _update(self, entity_id: int, fields: Mapping[str, str]) -> E:
        raise NotImplementedError

    def fields_from(self, entity: E) -> dict[str, str]:
        raise NotImplementedError

    def read_only_from(self, entity: E) -> dict[str, str]:
        return {"created_at": str(getattr(entity, "created_at", ""))}

    def parent_path(self) -> str:
        raise NotImplementedError

    def validate_field(self, name: str, value: str) -> str:
        return value

    # ---- commands -----------------------------------------------------
    async def load(self) -> FormState:
        """Edit mode only: fetch the entity and populate the fields."""
        entity_id = self.entity_id
        if entity_id is None:
            return self._state
        key = self.load_key(entity_id)
        self._dispatch(FormLoadStarted(key))
        try:
            entity = await self._get(entity_id)
        except Exception as exc:
            self.logger.log_error(
                f"failed to load {self.entity_name}", exc, entity=self.entity_name,
                entity_id=self.entity_id,
            )
            self._dispatch(FormLoadFailed(key, error_message(exc, f"Failed to load {self.entity_name}")))
        else:
            self._dispatch(
                FormLoadSucceeded(key, self.fields_from(entity), self.read_only_from(entity))
            )
        return self._state

    async def mount(self) -> FormState:
        return await self.load()

    def field_changed(self, name: str, value: str) -> FormState:
        self._dispatch(FieldChanged(name, self.validate_field(name, value)))
        return self._state

    def trimmed_fields(self) -> dict[str, str]:
        return {name: value.strip() for name, value in self._state.fields.items()}

    async def submit(self) -> bool:
        """Create or update; returns True on success, False when disabled or failed."""
        if not self._state.can_submit:
            return False
        self._dispatch(SubmitStarted())
        fields = self.trimmed_fields()
        entity_id = self.entity_id
        operation = "create" if entity_id is None else "update"
        try:
            if entity_id is None:
                entity = await self._create(fields)
            else:
                entity = await self._update(entity_id, fields)
        except Exception as exc:
            self.logger.log_error(
                f"failed to {operation} {self.entity_name}", exc, entity=self.entity_name,
                entity_id=self.entity_id,
            )
            self._dispatch(
                SubmitFailed(error_message(exc, f"Failed to {operation} {self.entity_name}"))
            )
            return False
        self.logger.log_entity_action(f"{operation}d", self.entity_name, getattr(entity, "id", None))
        if entity_id is not None:
            self._dispatch(
                SubmitSucceeded(fields=self.fields_from(entity), read_only=self.read_only_from(entity))
            )
        else:
            self._dispatch(SubmitSucceeded())
        self._reconcile(self.reconcile[operation])
        return True

    def _reconcile(self, policy: Reconcile) -> None:
        if policy is Reconcile.RELOAD_DESTINATION:
            self.host.navigate(self.parent_path(), reload=True)
        elif policy is Reconcile.STAY:
            self.host.notify("success", self.update_message)
        else:
            raise ValueError(f"form controllers cannot reconcile with {policy}")

    def cancel(self) -> None:
        self.host.navigate(self.parent_path())


class ProjectFormController(EntityFormController[Project]):
    entity_name = "project"
    defaults = {"name": ""}
    required_fields = ("name",)
    update_message = "Project updated successfully!"

    def __init__(
        self, host: Host, projects: ProjectsClient, project_id: int | None = None
    ) -> None:
        super().__init__(host, project_id)
        self.projects = projects

    async def _get(self, entity_id: int) -> Project:
        return await self.projects.get(entity_id)

    def _payload(self, fields: Mapping[str, str]) -> CreateProjectData:
        return CreateProjectData(name=fields["name"])

    async def _create(self, fields: Mapping[str, str]) -> Project:
        return await self.projects.create(self._payload(fields))

    async def _update(self, entity_id: int, fields: Mapping[str, str]) -> Project:
        return await self.projects.update(entity_id, self._payload(fields))

    def fields_from(self, entity: Project) -> dict[str, str]:
        return {"name": entity.name}

    def parent_path(self) -> str:
        return projects_path()


class IssueFormController(EntityFormController[Issue]):
    entity_name = "issue"
    defaults = {
        "title": "",
        "description": "",
        "assigned_to": "",
        "status": IssueStatus.TO_DO.value,
    }
    required_fields = ("title", "assigned_to")
    update_message = "Issue updated successfully!"

    def __init__(
        self,
        host: Host,
        issues: IssuesClient,
        project_id: int,
        issue_id: int | None = None,
    ) -> None:
        super().__init__(host, issue_id)
        self.issues = issues
        self.project_id = project_id

    def load_key(self, entity_id: int) -> tuple[int, ...]:
        return (self.project_id, entity_id)

    def validate_field(self, name: str, value: Any) -> str:
        if name == "status":
            return IssueStatus(value).value
        return value

    async def _get(self, entity_id: int) -> Issue:
        return await self.issues.get(self.project_id, entity_id)

    def _payload(self, fields: Mapping[str, str]) -> CreateIssueData:
        return CreateIssueData(
            title=fields["title"],
            description=fields.get("description", ""),
            assigned_to=fields["assigned_to"],
            status=IssueStatus(fields.get("status") or IssueStatus.TO_DO.value),
        )

    async def _create(self, fields: Mapping[str, str]) -> Issue:
        return await self.issues.create(self.project_id, self._payload(fields))

    async def _update(self, entity_id: int, fields: Mapping[str, str]) -> Issue:
        return await self.issues.update(self.project_id, entity_id, self._payload(fields))

    def fields_from(self, entity: Issue) -> dict[str, str]:
        return {
            "title": entity.title,
            "description": entity.description,
            "assigned_to": entity.assigned_to,
            "status": entity.status.value,
        }

    def parent_path(self) -> str:
        return project_path(self.project_id)


__all__ = [
    "EntityFormController",
    "IssueFormController",
    "ProjectFormController",
    "is_entity_id",
]
