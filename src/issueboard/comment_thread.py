from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import error_message
from .host import Host
from .list_controller import EntityListController
from .models import Comment, CreateCommentData
from .resources import CommentsClient
from .state import InlineError, ItemAppended, ListState, Reconcile


@dataclass(frozen=True)
class ThreadState:
    """The comment list plus the always-visible draft form."""

    thread: ListState[Comment]
    draft: str = ""
    submitting: bool = False

    @property
    def can_submit(self) -> bool:
        return bool(self.draft.strip()) and not self.submitting


class CommentThreadController(EntityListController[Comment]):
    """Append-only comment list for one issue.

    New comments are appended in the order the server returns them; a draft is
    cleared only once the server has accepted it.
    """

    entity_name = "comment"
    plural_name = "comments"
    empty_message = "No comments yet. Be the first to add one!"
    reconcile = {"create": Reconcile.PATCH_LOCAL, "delete": Reconcile.PATCH_LOCAL}

    def __init__(self, host: Host, comments: CommentsClient, issue_id: int) -> None:
        super().__init__(host, scope=issue_id)
        self.comments = comments
        self._draft = ""
        self._submitting = False

    @property
    def issue_id(self) -> int | None:
        return self.state.scope

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def submitting(self) -> bool:
        return self._submitting

    def snapshot(self) -> ThreadState:
        return ThreadState(thread=self.state, draft=self._draft, submitting=self._submitting)

    def confirm_message(self, entity: Comment) -> str:
        return "Are you sure you want to delete this comment?"

    async def _fetch(self, scope: int | None) -> Sequence[Comment]:
        if scope is None:
            raise ValueError("comment thread requires an issue id")
        return await self.comments.list(scope)

    async def _destroy(self, scope: int | None, entity_id: int) -> None:
        if scope is None:
            raise ValueError("comment thread requires an issue id")
        await self.comments.destroy(scope, entity_id)

    def draft_changed(self, text: str) -> ThreadState:
        self._draft = text
        self._notify()
        return self.snapshot()

    # form-controller spelling of the same command
    def field_changed(self, name: str, value: str) -> ThreadState:
        if name != "text":
            raise KeyError(name)
        return self.draft_changed(value)

    async def submit(self) -> bool:
        if not self.snapshot().can_submit:
            return False
        issue_id = self.issue_id
        if issue_id is None:
            raise ValueError("comment thread requires an issue id")
        self._submitting = True
        self._dispatch(InlineError(None))
        self._notify()
        try:
            comment = await self.comments.create(
                issue_id, CreateCommentData(text=self._draft.strip())
            )
        except Exception as exc:
            self.logger.log_error(
                "failed to add comment", exc, entity=self.entity_name, scope=issue_id
            )
            self._submitting = False
            self._dispatch(InlineError(error_message(exc, "Failed to add comment")))
            self._notify()
            return False
        self._submitting = False
        self._draft = ""
        self._dispatch(ItemAppended(issue_id, comment))
        self._notify()
        self.logger.log_entity_action("created", self.entity_name, comment.id)
        return True


__all__ = ["CommentThreadController", "ThreadState"]
