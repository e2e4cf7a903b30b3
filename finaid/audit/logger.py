"""
Audit Logger

DESIGN DECISION: Every mutation and every failure shown to a user is logged.
This provides:
1. Traceability (which session created, changed or deleted what)
2. Debugging capability when the backend rejects a request

The audit logger:
- Is async so controllers can await it inline
- Never raises into the caller (a logging failure must not break a view)
- Stamps every event with the session's correlation id and user
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finaid.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """Central audit logging service."""

    def __init__(
        self,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ):
        self._correlation_id = correlation_id
        self._user = user
        self._logger = structlog.get_logger("finaid.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        if event.correlation_id is None:
            event.correlation_id = self._correlation_id
        if event.user is None:
            event.user = self._user

        log_dict = event.to_log_dict()

        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    async def log_created(self, entity_type: str, entity_id: int) -> None:
        await self.log(AuditEventBuilder.entity_created(entity_type, entity_id))

    async def log_updated(self, entity_type: str, entity_id: int) -> None:
        await self.log(AuditEventBuilder.entity_updated(entity_type, entity_id))

    async def log_deleted(self, entity_type: str, entity_id: int) -> None:
        await self.log(AuditEventBuilder.entity_deleted(entity_type, entity_id))

    async def log_delete_failed(
        self,
        entity_type: str,
        entity_id: int,
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.delete_failed(entity_type, entity_id, error_message))

    async def log_submit_failed(
        self,
        entity_type: str,
        entity_id: Optional[int],
        action: str,
        error_message: str,
    ) -> None:
        """Log a create/update the backend refused."""
        event = AuditEventBuilder.submit_failed(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            error_message=error_message,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        entity_type: str,
        errors: dict[str, str],
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(entity_type, errors))

    async def log_load_failed(
        self,
        entity_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        await self.log(AuditEventBuilder.load_failed(entity_type, error_message, details))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One is created per browser session and shared by every view in it.
    """
    return uuid4()
