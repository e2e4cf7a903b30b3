"""
Session Context

The signed-in user and the correlation id of the browser session.
Authentication is mocked: the identity comes from settings. Every
controller receives the context explicitly instead of reading a global.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from finaid.audit import AuditLogger, create_correlation_id
from finaid.config import get_settings


class SessionContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_name: str
    user_email: str
    correlation_id: UUID = Field(default_factory=create_correlation_id)

    @classmethod
    def from_settings(cls) -> "SessionContext":
        app = get_settings().app
        return cls(user_name=app.user_name, user_email=app.user_email)

    def audit_logger(self) -> AuditLogger:
        """An audit logger stamping events with this session."""
        return AuditLogger(correlation_id=self.correlation_id, user=self.user_email)
