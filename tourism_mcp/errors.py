"""
Outcome types for the booking and reservation managers.

The managers never raise for domain outcomes. They return the record on
success or one of the values below, and the calling tool decides how to
phrase it. ``SigningError`` is the exception: it means the ATM credentials are
unusable and the outbound request must not be sent.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict


@dataclass(frozen=True)
class LifecycleError:
    message: str
    code: ClassVar[str] = "error"

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.code, "message": self.message}


@dataclass(frozen=True)
class NotFound(LifecycleError):
    code: ClassVar[str] = "not_found"


@dataclass(frozen=True)
class NotBookable(LifecycleError):
    code: ClassVar[str] = "not_bookable"


@dataclass(frozen=True)
class CategoryMismatch(LifecycleError):
    code: ClassVar[str] = "category_mismatch"


@dataclass(frozen=True)
class InvalidState(LifecycleError):
    code: ClassVar[str] = "invalid_state"


@dataclass(frozen=True)
class AlreadyConfirmed:
    """Informational: the record was confirmed earlier and is returned unchanged."""

    record: Any
    message: str = "already confirmed"
    code: ClassVar[str] = "already_confirmed"

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.code, "message": self.message}


class SigningError(Exception):
    """The request could not be signed. Not retryable."""
