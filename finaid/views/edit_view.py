"""
Edit/Create View Controller

Owns the state of one entity form.

State machine:
    INITIAL_LOAD -> READY -> SUBMITTING -> (DONE | READY with errors)
    INITIAL_LOAD -> LOAD_FAILED -> (retry) INITIAL_LOAD

Form values are kept as the strings a user typed; they are only parsed
into a request body once validation has passed.

IMPORTANT: Validation runs on submit, never on each keystroke, and a
form with errors never reaches the network.
"""

import asyncio
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from finaid.models.resources import Entity
from finaid.services.api import ApiError, FinAidApiInterface, ResourceInterface
from finaid.views.sequencing import RequestSequencer
from finaid.views.session import SessionContext


EntityT = TypeVar("EntityT", bound=Entity)
InputT = TypeVar("InputT", bound=BaseModel)

Navigate = Callable[[str], None]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class FormStatus(str, Enum):
    INITIAL_LOAD = "initial_load"
    LOAD_FAILED = "load_failed"
    READY = "ready"
    SUBMITTING = "submitting"
    DONE = "done"


# =============================================================================
# FIELD PARSING - None means "not parseable"
# =============================================================================

def parse_decimal(value: str) -> Optional[Decimal]:
    try:
        number = Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        return None
    if not number.is_finite():
        return None
    return number


def parse_id(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def id_value(entity_id: Optional[int]) -> str:
    """Form value of an optional reference ("" = nothing selected)."""
    return "" if entity_id is None else str(entity_id)


class EditViewController(Generic[EntityT, InputT]):
    """
    Base controller for a create/edit page.

    `entity_id=None` means create mode. Subclasses provide the resource,
    default values, per-field validation and the request body.
    """

    entity_label = "item"
    list_route = "/"

    def __init__(
        self,
        api: FinAidApiInterface,
        session: SessionContext,
        navigate: Navigate,
        entity_id: Optional[int] = None,
    ):
        self._api = api
        self._session = session
        self._audit = session.audit_logger()
        self._navigate = navigate
        self._sequencer = RequestSequencer()

        self.entity_id = entity_id
        self.status = FormStatus.INITIAL_LOAD
        self.values: dict[str, str] = self.default_values()
        self.errors: dict[str, str] = {}
        self.general_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @property
    def resource(self) -> ResourceInterface:
        raise NotImplementedError

    def default_values(self) -> dict[str, str]:
        raise NotImplementedError

    def values_from_entity(self, entity: EntityT) -> dict[str, str]:
        raise NotImplementedError

    def validate(self) -> dict[str, str]:
        """Map of field -> error message; empty when the form is valid."""
        raise NotImplementedError

    def build_input(self) -> InputT:
        raise NotImplementedError

    async def _fetch_auxiliary(self) -> Any:
        return None

    def _apply_auxiliary(self, data: Any) -> None:
        pass

    def _on_field_changed(self, field: str) -> None:
        pass

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_edit_mode(self) -> bool:
        return self.entity_id is not None

    @property
    def action(self) -> str:
        return "update" if self.is_edit_mode else "create"

    @property
    def is_interactive(self) -> bool:
        return self.status == FormStatus.READY

    async def _fetch_entity(self) -> Optional[EntityT]:
        if self.entity_id is None:
            return None
        return await self.resource.get_by_id(self.entity_id)

    async def load(self) -> None:
        """Fetch the entity (edit mode) and auxiliary data in parallel."""
        token = self._sequencer.issue()
        self.status = FormStatus.INITIAL_LOAD
        self.general_error = None

        try:
            entity, auxiliary = await asyncio.gather(
                self._fetch_entity(),
                self._fetch_auxiliary(),
            )
        except ApiError as e:
            if not self._sequencer.is_current(token):
                return
            self.status = FormStatus.LOAD_FAILED
            self.general_error = f"Failed to load {self.entity_label} data. Please try again."
            await self._audit.log_load_failed(
                self.entity_label,
                e.message,
                details={"entity_id": self.entity_id},
            )
            return

        if not self._sequencer.is_current(token):
            return

        self._apply_auxiliary(auxiliary)
        if entity is not None:
            self.values = self.values_from_entity(entity)
        self.status = FormStatus.READY

    def set_field(self, field: str, value: str) -> None:
        """Edit one field, clearing its error and the submission error."""
        if field not in self.values:
            raise KeyError(f"Unknown field: {field}")
        self.values[field] = value
        self.errors.pop(field, None)
        self.general_error = None
        self._on_field_changed(field)

    async def submit(self) -> bool:
        """
        Validate, then create or update.

        Returns True once the entity is saved and the view navigated
        away; False when the form stays open.
        """
        if self.status != FormStatus.READY:
            return False

        errors = self.validate()
        self.errors = errors
        if errors:
            await self._audit.log_validation_failed(self.entity_label, errors)
            return False

        self.status = FormStatus.SUBMITTING
        self.general_error = None
        fallback = f"Failed to {self.action} {self.entity_label}. Please try again."

        try:
            body = self.build_input()
            if self.entity_id is not None:
                saved = await self.resource.update(self.entity_id, body)
            else:
                saved = await self.resource.create(body)
        except (ApiError, ValidationError) as e:
            message = e.message if isinstance(e, ApiError) else ""
            await self._audit.log_submit_failed(
                self.entity_label,
                self.entity_id,
                self.action,
                message or str(e),
            )
            if self._sequencer.disposed:
                return False
            self.status = FormStatus.READY
            self.general_error = message or fallback
            return False

        if self.is_edit_mode:
            await self._audit.log_updated(self.entity_label, saved.id)
        else:
            await self._audit.log_created(self.entity_label, saved.id)

        if self._sequencer.disposed:
            return False
        self.status = FormStatus.DONE
        self._navigate(self.list_route)
        return True

    def cancel(self) -> None:
        """Leave the form without saving."""
        self._navigate(self.list_route)

    def dispose(self) -> None:
        self._sequencer.dispose()
