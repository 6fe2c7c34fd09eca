"""
Tracker State Models

The session state the orchestrator works on, and the transient
notifications it hands back to the UI.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gestor_financeiro.dates import is_valid_month


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """A toast shown to the user after a request."""
    model_config = ConfigDict(frozen=True)

    message: str
    type: NotificationType = NotificationType.INFO

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls(message=message, type=NotificationType.SUCCESS)

    @classmethod
    def error(cls, message: str) -> "Notification":
        return cls(message=message, type=NotificationType.ERROR)

    @classmethod
    def info(cls, message: str) -> "Notification":
        return cls(message=message, type=NotificationType.INFO)

    @property
    def is_error(self) -> bool:
        return self.type == NotificationType.ERROR

    def duration_seconds(self, info_seconds: int = 7, other_seconds: int = 5) -> int:
        """Info toasts stay up longer than success/error ones."""
        return info_seconds if self.type == NotificationType.INFO else other_seconds


class TrackerState(BaseModel):
    """
    Per-session state owned by the UI and passed to the orchestrator.

    The expense list itself lives in ExpenseRecordStore; this holds
    what the user is looking at and whether a request is in flight.
    """
    model_config = ConfigDict(validate_assignment=True)

    selected_month: str = Field(..., description="YYYY-MM being viewed")
    is_loading: bool = False
    api_key_exists: bool = True
    startup_warning_shown: bool = False

    @field_validator("selected_month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        if not is_valid_month(v):
            raise ValueError(f"Invalid month: {v!r} (expected YYYY-MM)")
        return v
