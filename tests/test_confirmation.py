"""Tests for the confirmation gate."""

import asyncio

import pytest
from pydantic import ValidationError

from finaid.views.confirmation import ConfirmationGate, DismissReason, GateTone


class Recorder:
    def __init__(self):
        self.confirmed = 0
        self.closed = 0

    async def on_confirm(self):
        self.confirmed += 1

    def on_close(self):
        self.closed += 1


def make_gate(recorder: Recorder, **overrides) -> ConfirmationGate:
    fields = dict(
        title="Delete Person",
        message='Are you sure you want to delete "Alice"?',
        on_confirm=recorder.on_confirm,
        on_close=recorder.on_close,
    )
    fields.update(overrides)
    return ConfirmationGate(**fields)


class TestConfirmationGate:
    """Tests for the blocking confirmation gate."""

    def test_defaults(self):
        gate = make_gate(Recorder())
        assert gate.confirm_label == "Confirm"
        assert gate.cancel_label == "Cancel"
        assert gate.tone == GateTone.DANGER
        assert gate.confirm_text == "Confirm"
        assert gate.error is None

    def test_confirm_invokes_callback(self):
        recorder = Recorder()
        assert asyncio.run(make_gate(recorder).confirm()) is True
        assert recorder.confirmed == 1
        assert recorder.closed == 0

    def test_every_dismiss_path_closes(self):
        """Cancel, overlay click and Escape all funnel into on_close."""
        recorder = Recorder()
        gate = make_gate(recorder)
        assert gate.cancel() is True
        assert gate.click_overlay() is True
        assert gate.press_key("Escape") is True
        assert gate.dismiss(DismissReason.OVERLAY) is True
        assert recorder.closed == 4
        assert recorder.confirmed == 0

    def test_other_keys_are_ignored(self):
        recorder = Recorder()
        gate = make_gate(recorder)
        assert gate.press_key("Enter") is False
        assert gate.press_key("a") is False
        assert recorder.closed == 0

    def test_loading_blocks_every_path(self):
        """While a mutation is in flight nothing can confirm or close the gate."""
        recorder = Recorder()
        gate = make_gate(recorder, is_loading=True)

        assert gate.confirm_text == "Processing..."
        assert asyncio.run(gate.confirm()) is False
        assert gate.cancel() is False
        assert gate.click_overlay() is False
        assert gate.press_key("Escape") is False
        assert recorder.confirmed == 0
        assert recorder.closed == 0

    def test_custom_labels(self):
        gate = make_gate(Recorder(), confirm_label="Delete Person", tone=GateTone.WARNING)
        assert gate.confirm_text == "Delete Person"
        assert gate.tone == GateTone.WARNING

    def test_gate_is_immutable(self):
        gate = make_gate(Recorder())
        with pytest.raises(ValidationError):
            gate.is_loading = True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
