"""
Confirmation Gate

A blocking confirmation in front of every destructive action.

The gate is pure presentation plus input gathering: it holds nothing
but what its caller gives it. Every dismissal path (cancel button,
overlay click, Escape key) funnels into `on_close`; the confirm button
funnels into `on_confirm`. While `is_loading` is set every path is
ignored, so a mutation in flight can neither be submitted twice nor
have its gate closed under it.
"""

from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict


class GateTone(str, Enum):
    """Presentational severity of the gate."""
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"


class DismissReason(str, Enum):
    CANCEL = "cancel"
    OVERLAY = "overlay"
    ESCAPE = "escape"


ESCAPE_KEY = "Escape"


class ConfirmationGate(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    title: str
    message: str
    on_confirm: Callable[[], Awaitable[None]]
    on_close: Callable[[], None]
    confirm_label: str = "Confirm"
    cancel_label: str = "Cancel"
    tone: GateTone = GateTone.DANGER
    is_loading: bool = False
    # Failure of the last confirm, shown inside the still-open gate
    error: Optional[str] = None

    @property
    def confirm_text(self) -> str:
        return "Processing..." if self.is_loading else self.confirm_label

    async def confirm(self) -> bool:
        """Run the confirm path. Returns False if the gate is busy."""
        if self.is_loading:
            return False
        await self.on_confirm()
        return True

    def dismiss(self, reason: DismissReason = DismissReason.CANCEL) -> bool:
        """Run the close path. Returns False if the gate is busy."""
        if self.is_loading:
            return False
        self.on_close()
        return True

    def cancel(self) -> bool:
        return self.dismiss(DismissReason.CANCEL)

    def click_overlay(self) -> bool:
        return self.dismiss(DismissReason.OVERLAY)

    def press_key(self, key: str) -> bool:
        """Only Escape dismisses; every other key is ignored."""
        if key != ESCAPE_KEY:
            return False
        return self.dismiss(DismissReason.ESCAPE)
