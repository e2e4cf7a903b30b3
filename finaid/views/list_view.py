"""
List View Controller

Owns the state of one paginated, filterable collection page.

State machine:
    IDLE -> LOADING -> (LOADED | FAILED)
Every change of offset or filter re-enters LOADING.

DESIGN DECISIONS:
1. Windowed pagination: no total count. "Next" stays enabled until a
   fetch returns fewer than `page_size` items; "Previous" is disabled
   at offset 0.
2. The backend is the source of truth. The page is re-fetched on every
   parameter change; the only local edits follow a confirmed,
   successful delete (the row is dropped and summaries adjusted).
3. Overlapping fetches are resolved with request tokens: only the
   response to the latest request is applied.
4. A failed delete leaves the gate open with the failure shown inside.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from finaid.config import get_settings
from finaid.models.resources import Entity, ListParams
from finaid.services.api import ApiError, FinAidApiInterface
from finaid.views.confirmation import ConfirmationGate, GateTone
from finaid.views.sequencing import RequestSequencer
from finaid.views.session import SessionContext


EntityT = TypeVar("EntityT", bound=Entity)
ChoiceT = TypeVar("ChoiceT")

UNKNOWN_LABEL = "Unknown"


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class EmptyParentPolicy(str, Enum):
    """What a dependent selector offers while its parent is unselected."""
    ALL = "all"
    NONE = "none"


def dependent_choices(
    universe: Iterable[ChoiceT],
    parent_id: Optional[int],
    parent_of: Callable[[ChoiceT], int],
    empty_parent: EmptyParentPolicy,
) -> list[ChoiceT]:
    """
    Choices of a dependent selector given the parent selection.

    With a parent selected, only children of that parent are offered.
    Without one, `empty_parent` decides between everything and nothing.
    """
    if parent_id is None:
        return list(universe) if empty_parent == EmptyParentPolicy.ALL else []
    return [item for item in universe if parent_of(item) == parent_id]


def names_by_id(entities: Iterable[Any]) -> dict[int, str]:
    return {entity.id: entity.name for entity in entities}


def label_for(names: dict[int, str], entity_id: Optional[int]) -> str:
    """Human-readable label for a foreign key."""
    if entity_id is None:
        return "-"
    return names.get(entity_id, UNKNOWN_LABEL)


class ListViewController(Generic[EntityT]):
    """
    Base controller for a resource list page.

    Subclasses provide `_fetch_page` and, when rows reference other
    resources, `_fetch_lookups` / `_apply_lookups`.
    """

    entity_label = "item"
    delete_confirm_label = "Delete"

    def __init__(
        self,
        api: FinAidApiInterface,
        session: SessionContext,
        page_size: Optional[int] = None,
    ):
        self._api = api
        self._session = session
        self._audit = session.audit_logger()
        self._sequencer = RequestSequencer()

        self.page_size = page_size or get_settings().app.page_size
        self.skip = 0

        self.status = ViewStatus.IDLE
        self.items: list[EntityT] = []
        self.error: Optional[str] = None
        self._last_fetch_count = 0
        self._lookups_loaded = False

        # Delete flow
        self.pending_delete: Optional[EntityT] = None
        self.delete_in_progress = False
        self.delete_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _params(self) -> ListParams:
        return ListParams(skip=self.skip, limit=self.page_size)

    async def _fetch_page(self, params: ListParams) -> list[EntityT]:
        raise NotImplementedError

    async def _delete(self, entity_id: int) -> None:
        raise NotImplementedError

    async def _fetch_lookups(self) -> Any:
        return None

    def _apply_lookups(self, lookups: Any) -> None:
        pass

    async def _fetch_summary(self, params: ListParams) -> Any:
        """Figures over every row matching `params`, not just this window."""
        return None

    def _apply_summary(self, summary: Any) -> None:
        pass

    def _on_deleted(self, entity: EntityT) -> None:
        pass

    def describe_for_delete(self, entity: EntityT) -> str:
        return (
            f"Are you sure you want to delete this {self.entity_label}? "
            "This action cannot be undone."
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def is_disposed(self) -> bool:
        return self._sequencer.disposed

    @property
    def has_previous(self) -> bool:
        return self.skip > 0

    @property
    def has_next(self) -> bool:
        return self.status == ViewStatus.LOADED and self._last_fetch_count >= self.page_size

    async def load(self) -> None:
        """
        Fetch the current window with the current filters.

        The summary is refreshed with every page; lookups are fetched
        alongside the first page only.
        """
        token = self._sequencer.issue()
        self.status = ViewStatus.LOADING
        self.error = None
        params = self._params()
        need_lookups = not self._lookups_loaded

        fetches = [self._fetch_page(params), self._fetch_summary(params)]
        if need_lookups:
            fetches.append(self._fetch_lookups())

        try:
            page, summary, *lookups = await asyncio.gather(*fetches)
        except ApiError as e:
            if not self._sequencer.is_current(token):
                return
            self.status = ViewStatus.FAILED
            self.error = e.message
            await self._audit.log_load_failed(
                self.entity_label,
                e.message,
                details=params.to_query(),
            )
            return

        if not self._sequencer.is_current(token):
            return

        if need_lookups:
            self._apply_lookups(lookups[0])
            self._lookups_loaded = True
        self._apply_summary(summary)
        self.items = list(page)
        self._last_fetch_count = len(page)
        self.status = ViewStatus.LOADED

    async def retry(self) -> None:
        """Re-issue the fetch with identical parameters."""
        await self.load()

    async def next_page(self) -> None:
        if not self.has_next:
            return
        self.skip += self.page_size
        await self.load()

    async def previous_page(self) -> None:
        if not self.has_previous:
            return
        self.skip = max(0, self.skip - self.page_size)
        await self.load()

    def dispose(self) -> None:
        """Stop applying responses; called when the page goes away."""
        self._sequencer.dispose()

    # ------------------------------------------------------------------
    # Delete flow
    # ------------------------------------------------------------------

    def request_delete(self, entity: EntityT) -> None:
        if self.delete_in_progress:
            return
        self.pending_delete = entity
        self.delete_error = None

    def close_delete(self) -> None:
        if self.delete_in_progress:
            return
        self.pending_delete = None
        self.delete_error = None

    async def confirm_delete(self) -> None:
        entity = self.pending_delete
        if entity is None or self.delete_in_progress:
            return

        self.delete_in_progress = True
        self.delete_error = None
        try:
            await self._delete(entity.id)
        except ApiError as e:
            self.delete_error = e.message
            await self._audit.log_delete_failed(self.entity_label, entity.id, e.message)
            return
        finally:
            self.delete_in_progress = False

        await self._audit.log_deleted(self.entity_label, entity.id)
        if self.is_disposed:
            return
        self.items = [item for item in self.items if item.id != entity.id]
        self._on_deleted(entity)
        self.pending_delete = None

    @property
    def confirmation_gate(self) -> Optional[ConfirmationGate]:
        """The open delete gate, or None when nothing awaits confirmation."""
        if self.pending_delete is None:
            return None
        return ConfirmationGate(
            title=f"Delete {self.entity_label.capitalize()}",
            message=self.describe_for_delete(self.pending_delete),
            confirm_label=self.delete_confirm_label,
            tone=GateTone.DANGER,
            is_loading=self.delete_in_progress,
            error=self.delete_error,
            on_confirm=self.confirm_delete,
            on_close=self.close_delete,
        )
