"""
Audit Models for Gestor Financeiro

Every step of an input's journey (interpretation, extraction,
validation, persistence) produces an audit event. Events are
logged through structlog and kept in a short in-memory history.

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Input handling
    INPUT_RECEIVED = "input_received"
    INPUT_REJECTED = "input_rejected"
    INTENT_INTERPRETED = "intent_interpreted"

    # Extraction
    EXPENSE_PARSED = "expense_parsed"
    EXPENSE_PARSE_FAILED = "expense_parse_failed"
    CATEGORY_ASSIGNED = "category_assigned"
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    EXPENSE_SAVED = "expense_saved"
    STORE_CLEARED = "store_cleared"
    STORAGE_LOAD_FAILED = "storage_load_failed"
    RECORDS_SKIPPED = "records_skipped"

    # Queries
    SUMMARY_REQUESTED = "summary_requested"
    CATEGORY_TOTAL_REQUESTED = "category_total_requested"
    UNKNOWN_COMMAND = "unknown_command"

    # System events
    API_KEY_MISSING = "api_key_missing"
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Correlation - all events of one submitted input share this
    correlation_id: Optional[UUID] = None

    # What the event is about (expense id, month, ...)
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
        }


class AuditEventBuilder:
    """Factory methods for the events the tracker emits."""

    @staticmethod
    def input_received(text: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_RECEIVED,
            correlation_id=correlation_id,
            description="User submitted text",
            details={"length": len(text)},
        )

    @staticmethod
    def input_rejected(reason: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Input rejected: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def intent_interpreted(
        query_type: str,
        category: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_INTERPRETED,
            correlation_id=correlation_id,
            description=f"Intent interpreted as {query_type}",
            details={"query_type": query_type, "category": category},
        )

    @staticmethod
    def expense_parsed(amount: str, date: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_PARSED,
            correlation_id=correlation_id,
            description="Expense details extracted",
            details={"amount": amount, "date": date},
        )

    @staticmethod
    def expense_parse_failed(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_PARSE_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Could not extract expense details",
        )

    @staticmethod
    def category_assigned(category: str, defaulted: bool, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ASSIGNED,
            correlation_id=correlation_id,
            description=f"Category {category}" + (" (default)" if defaulted else ""),
            details={"category": category, "defaulted": defaulted},
        )

    @staticmethod
    def validation_failed(issues: list[dict], correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Validation failed with {len(issues)} issue(s)",
            details={"issues": issues},
        )

    @staticmethod
    def expense_saved(
        expense_id: str,
        amount: str,
        category: str,
        date: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_SAVED,
            correlation_id=correlation_id,
            entity_id=expense_id,
            description="Expense saved",
            details={"amount": amount, "category": category, "date": date},
        )

    @staticmethod
    def store_cleared(removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_CLEARED,
            severity=AuditSeverity.WARNING,
            description=f"Store cleared ({removed} expense(s) removed)",
            details={"removed": removed},
        )

    @staticmethod
    def storage_load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            description="Stored expenses unreadable, starting empty",
            details={"error": error_message},
        )

    @staticmethod
    def records_skipped(record_ids: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_SKIPPED,
            severity=AuditSeverity.WARNING,
            description=f"Skipped {len(record_ids)} invalid stored expense(s)",
            details={"record_ids": record_ids},
        )

    @staticmethod
    def summary_requested(month: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_REQUESTED,
            correlation_id=correlation_id,
            entity_id=month,
            description=f"Summary requested for {month}",
        )

    @staticmethod
    def category_total_requested(
        month: str,
        category: str,
        total: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_TOTAL_REQUESTED,
            correlation_id=correlation_id,
            entity_id=month,
            description=f"Total requested for {category}",
            details={"category": category, "total": total},
        )

    @staticmethod
    def unknown_command(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNKNOWN_COMMAND,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Command not understood",
        )

    @staticmethod
    def api_key_missing() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.API_KEY_MISSING,
            severity=AuditSeverity.WARNING,
            description="Gemini API key not configured; AI features disabled",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"{error_type}: {error_message}"[:500],
            details={"error_type": error_type},
        )

    @staticmethod
    def external_service_error(
        service: str,
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"{service} {operation} failed",
            details={"service": service, "operation": operation, "error": error_message},
        )
