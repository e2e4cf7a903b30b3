"""
Audit Models for FinAid Budget

Every mutation and every failure a user sees is logged for audit purposes.
This provides:
1. Traceability of who changed what, from which session
2. Debugging information when the backend rejects a request

DESIGN DECISION: Audit events are append-only structured log records.
The client never stores or edits them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Mutations
    ENTITY_CREATED = "entity_created"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"

    # Failures surfaced to the user
    DELETE_FAILED = "delete_failed"
    SUBMIT_FAILED = "submit_failed"
    VALIDATION_FAILED = "validation_failed"
    LOAD_FAILED = "load_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    entity_id is the backend's integer id and is absent for
    events that happen before an entity exists (failed create).
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Resource name (e.g., 'person', 'account', 'expense')"
    )
    entity_id: Optional[int] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Session correlation id"
    )
    user: Optional[str] = Field(
        default=None,
        description="Email of the session user"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "user": self.user,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created("person", 3, correlation_id)
        event = AuditEventBuilder.delete_failed("expense", 9, "Not found", correlation_id)
    """

    @staticmethod
    def entity_created(
        entity_type: str,
        entity_id: int,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            user=user,
            description=f"Created {entity_type} {entity_id}",
        )

    @staticmethod
    def entity_updated(
        entity_type: str,
        entity_id: int,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            user=user,
            description=f"Updated {entity_type} {entity_id}",
        )

    @staticmethod
    def entity_deleted(
        entity_type: str,
        entity_id: int,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            user=user,
            description=f"Deleted {entity_type} {entity_id}",
        )

    @staticmethod
    def delete_failed(
        entity_type: str,
        entity_id: int,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            user=user,
            description=f"Failed to delete {entity_type} {entity_id}",
            error_message=error_message,
        )

    @staticmethod
    def submit_failed(
        entity_type: str,
        entity_id: Optional[int],
        action: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBMIT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            user=user,
            description=f"Failed to {action} {entity_type}",
            details={"action": action},
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        errors: dict[str, str],
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            user=user,
            description=f"{entity_type.capitalize()} form rejected: {len(errors)} field(s) invalid",
            details={"fields": sorted(errors)},
        )

    @staticmethod
    def load_failed(
        entity_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
        user: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            correlation_id=correlation_id,
            user=user,
            description=f"Failed to load {entity_type} data",
            details=details or {},
            error_message=error_message,
        )
