"""
Request Sequencing

Fetches are never cancelled and may overlap, so a view only applies a
response whose token is the latest one it issued. Disposing the view
invalidates every outstanding token.
"""


class RequestSequencer:
    """Monotonic request tokens for one view instance."""

    def __init__(self):
        self._latest = 0
        self._disposed = False

    def issue(self) -> int:
        """Issue the token for a new request."""
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        """True if a response carrying `token` may still be applied."""
        return not self._disposed and token == self._latest

    def dispose(self) -> None:
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def latest(self) -> int:
        return self._latest
