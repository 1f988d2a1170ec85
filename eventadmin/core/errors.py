"""Error codes and user-facing errors for the dashboard services."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ErrorCode(str, Enum):
    # field-scoped
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_DATE = "INVALID_DATE"
    INVALID_NUMBER = "INVALID_NUMBER"
    INVALID_CHOICE = "INVALID_CHOICE"
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # admission control
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    DUPLICATE_ATTENDEE = "DUPLICATE_ATTENDEE"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    CAPACITY_BELOW_REGISTRATIONS = "CAPACITY_BELOW_REGISTRATIONS"

    # access control
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"

    REPOSITORY_ERROR = "REPOSITORY_ERROR"


@dataclass(frozen=True)
class DomainError:
    """Error with a stable code and a message safe to show to the user.

    ``details`` carries structured context (event title, capacity, attendee
    name). ``field_errors`` is only populated for VALIDATION_FAILED and maps
    field names to their own errors.
    """

    code: ErrorCode
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)
    field_errors: Mapping[str, "DomainError"] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @classmethod
    def required(cls, message: str) -> "DomainError":
        return cls(ErrorCode.REQUIRED_FIELD, message)

    @classmethod
    def invalid_date(cls, message: str) -> "DomainError":
        return cls(ErrorCode.INVALID_DATE, message)

    @classmethod
    def invalid_number(cls, message: str) -> "DomainError":
        return cls(ErrorCode.INVALID_NUMBER, message)

    @classmethod
    def invalid_choice(cls, value: Any, choices) -> "DomainError":
        allowed = ", ".join(choices)
        return cls(ErrorCode.INVALID_CHOICE, f"'{value}' is not one of: {allowed}")

    @classmethod
    def validation_failed(cls, errors: Mapping[str, "DomainError"]) -> "DomainError":
        return cls(
            ErrorCode.VALIDATION_FAILED,
            "Please correct the highlighted fields",
            field_errors=dict(errors),
        )

    @classmethod
    def event_not_found(cls, event_id: str) -> "DomainError":
        return cls(ErrorCode.EVENT_NOT_FOUND, "Event not found", details={"event_id": event_id})

    @classmethod
    def capacity_exceeded(cls, title: str, count: int, capacity: int) -> "DomainError":
        return cls(
            ErrorCode.CAPACITY_EXCEEDED,
            f"Event '{title}' is at full capacity ({count}/{capacity})",
            details={"title": title, "count": count, "capacity": capacity},
        )

    @classmethod
    def duplicate_attendee(cls, attendee_name: str) -> "DomainError":
        return cls(
            ErrorCode.DUPLICATE_ATTENDEE,
            f'"{attendee_name}" is already registered for this event',
            details={"attendee_name": attendee_name},
        )

    @classmethod
    def registration_not_found(cls, registration_id: str) -> "DomainError":
        return cls(
            ErrorCode.REGISTRATION_NOT_FOUND,
            "Registration not found",
            details={"registration_id": registration_id},
        )

    @classmethod
    def capacity_below_registrations(cls, capacity: int, count: int) -> "DomainError":
        return cls(
            ErrorCode.CAPACITY_BELOW_REGISTRATIONS,
            f"Capacity cannot be lowered to {capacity}: {count} attendees are already registered",
            details={"capacity": capacity, "count": count},
        )

    @classmethod
    def not_authenticated(cls) -> "DomainError":
        return cls(ErrorCode.NOT_AUTHENTICATED, "Authentication required")

    @classmethod
    def permission_denied(cls, role: str) -> "DomainError":
        return cls(
            ErrorCode.PERMISSION_DENIED,
            f"This action is not available to the '{role}' role",
            details={"role": role},
        )

    @classmethod
    def user_not_found(cls, user_id: str) -> "DomainError":
        return cls(ErrorCode.USER_NOT_FOUND, "User not found", details={"user_id": user_id})

    @classmethod
    def duplicate_email(cls, email: str) -> "DomainError":
        return cls(
            ErrorCode.DUPLICATE_EMAIL,
            "A user with this email already exists",
            details={"email": email},
        )

    @classmethod
    def repository_error(cls, message: str) -> "DomainError":
        return cls(ErrorCode.REPOSITORY_ERROR, message)
