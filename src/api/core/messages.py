"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"
    CREATED = "CREATED"
    UPDATED = "UPDATED"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    AUTH_INSUFFICIENT_ROLE_PERMISSIONS = "AUTH_INSUFFICIENT_ROLE_PERMISSIONS"
    AUTH_MISSING_CONTEXT = "AUTH_MISSING_CONTEXT"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Role change requests
    ROLE_REQUEST_CREATED = "ROLE_REQUEST_CREATED"
    ROLE_REQUEST_APPROVED = "ROLE_REQUEST_APPROVED"
    ROLE_REQUEST_REJECTED = "ROLE_REQUEST_REJECTED"
    ROLE_REQUEST_NOT_FOUND = "ROLE_REQUEST_NOT_FOUND"
    ROLE_REQUEST_ALREADY_PROCESSED = "ROLE_REQUEST_ALREADY_PROCESSED"
    ROLE_UNCHANGED = "ROLE_UNCHANGED"
    ROLE_CHANGED = "ROLE_CHANGED"

    # Notifications
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    NOTIFICATION_SENT = "NOTIFICATION_SENT"
    BROADCAST_SENT = "BROADCAST_SENT"
    NOTIFICATION_READ = "NOTIFICATION_READ"
    NO_RECIPIENTS = "NO_RECIPIENTS"
    ROLE_CHANGE_NOT_ACCEPTABLE = "ROLE_CHANGE_NOT_ACCEPTABLE"

    # Staff
    STAFF_MEMBER_NOT_FOUND = "STAFF_MEMBER_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VALIDATION_INVALID_INPUT = "VALIDATION_INVALID_INPUT"
    INVALID_INPUT = "INVALID_INPUT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"

    # Permission errors
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Persistence
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success codes
    MessageCode.SUCCESS: "Operation completed successfully",
    MessageCode.CREATED: "Resource created successfully",
    MessageCode.UPDATED: "Resource updated successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Authentication required",
    MessageCode.UNAUTHORIZED: "Authentication required",
    MessageCode.FORBIDDEN: "Access denied",
    MessageCode.INVALID_TOKEN: "Invalid authentication token",
    MessageCode.AUTH_INSUFFICIENT_ROLE_PERMISSIONS: "Insufficient role permissions",
    MessageCode.AUTH_MISSING_CONTEXT: "Authentication context required",
    MessageCode.PROFILE_NOT_FOUND: "No staff profile exists for this account",
    # Role change requests
    MessageCode.ROLE_REQUEST_CREATED: "Role change request submitted for administrator approval",
    MessageCode.ROLE_REQUEST_APPROVED: "Role change request approved and requester notified",
    MessageCode.ROLE_REQUEST_REJECTED: "Role change request rejected and requester notified",
    MessageCode.ROLE_REQUEST_NOT_FOUND: "Role change request not found",
    MessageCode.ROLE_REQUEST_ALREADY_PROCESSED: "Role change request has already been processed",
    MessageCode.ROLE_UNCHANGED: "Requested role must differ from the current role",
    MessageCode.ROLE_CHANGED: "Role changed successfully",
    # Notifications
    MessageCode.NOTIFICATION_NOT_FOUND: "Notification not found",
    MessageCode.NOTIFICATION_SENT: "Message sent successfully",
    MessageCode.BROADCAST_SENT: "Broadcast sent successfully",
    MessageCode.NOTIFICATION_READ: "Notification marked as read",
    MessageCode.NO_RECIPIENTS: "At least one recipient is required",
    MessageCode.ROLE_CHANGE_NOT_ACCEPTABLE: "This notification does not carry an approved role change",
    # Staff
    MessageCode.STAFF_MEMBER_NOT_FOUND: "Staff member not found in your organization",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Validation failed",
    MessageCode.VALIDATION_INVALID_INPUT: "Invalid input provided",
    MessageCode.INVALID_INPUT: "Invalid input provided",
    MessageCode.PAYLOAD_TOO_LARGE: "Request payload too large",
    # Permission errors
    MessageCode.INSUFFICIENT_PERMISSIONS: "Insufficient permissions",
    # Persistence
    MessageCode.PERSISTENCE_ERROR: "The change could not be saved",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.INTERNAL_SERVER_ERROR: "Internal server error",
    MessageCode.RESOURCE_NOT_FOUND: "Resource not found",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.CONFLICT: "Conflict with current state",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )

    @classmethod
    def error(
        cls,
        message_code: MessageCode,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create an error response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Error occurred"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
