"""
Audit Logger

DESIGN DECISION: Every significant action in the tracker is logged.
This provides:
1. Traceability of what the interpreter returned for each input
2. Debugging capability when Gemini misbehaves
3. A short history the UI can show

The audit logger:
- Never raises (logging must not break the request)
- Supports correlation IDs to trace all events of one input
- Keeps a bounded in-memory history of recent events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from gestor_financeiro.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and remembers
    the most recent ones.
    """

    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("gestor_financeiro.audit")

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_input_received(self, text: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.input_received(text, correlation_id))

    def log_input_rejected(self, reason: str, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.input_rejected(reason, correlation_id))

    def log_intent_interpreted(
        self,
        query_type: str,
        category: Optional[str],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.intent_interpreted(query_type, category, correlation_id))

    def log_expense_parsed(self, amount: str, date: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.expense_parsed(amount, date, correlation_id))

    def log_expense_parse_failed(self, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.expense_parse_failed(correlation_id))

    def log_category_assigned(self, category: str, defaulted: bool, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.category_assigned(category, defaulted, correlation_id))

    def log_validation_failed(self, issues: list[dict], correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.validation_failed(issues, correlation_id))

    def log_expense_saved(
        self,
        expense_id: str,
        amount: str,
        category: str,
        date: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.expense_saved(
            expense_id=expense_id,
            amount=amount,
            category=category,
            date=date,
            correlation_id=correlation_id,
        ))

    def log_store_cleared(self, removed: int) -> None:
        self.log(AuditEventBuilder.store_cleared(removed))

    def log_storage_load_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_load_failed(error_message))

    def log_records_skipped(self, record_ids: list[str]) -> None:
        self.log(AuditEventBuilder.records_skipped(record_ids))

    def log_summary_requested(self, month: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.summary_requested(month, correlation_id))

    def log_category_total_requested(
        self,
        month: str,
        category: str,
        total: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.category_total_requested(month, category, total, correlation_id))

    def log_unknown_command(self, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.unknown_command(correlation_id))

    def log_api_key_missing(self) -> None:
        self.log(AuditEventBuilder.api_key_missing())

    def log_error(
        self,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(error_type, error_message, correlation_id))

    def log_external_service_error(self, service: str, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.external_service_error(service, operation, error_message))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when the user submits an input and pass it
    through every step of that request.
    """
    return uuid4()
