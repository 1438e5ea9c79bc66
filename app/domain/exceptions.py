"""Domain exceptions for the CRM workflow engine.

Defines domain-level exceptions that represent business rule violations
and action failures. Independent of infrastructure concerns; the
presentation layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class CrmAutomationException(Exception):
    """Base exception for all workflow engine errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CrmAutomationException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(CrmAutomationException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'client').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(CrmAutomationException):
    """Raised when an operation needs the database but DATABASE_URL is unusable."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class ExecutionStateException(CrmAutomationException):
    """Raised when an execution record would leave a terminal status."""

    def __init__(self, execution_id: str, current_status: str) -> None:
        super().__init__(
            f"Workflow execution {execution_id} is already {current_status} and cannot be changed",
            "EXECUTION_STATE_ERROR",
            {"execution_id": execution_id, "status": current_status},
        )


class WorkflowActionException(CrmAutomationException):
    """Base for failures raised while running a single workflow action.

    The action executor records these on the failed action; they never
    abort sibling actions or rules.
    """

    def __init__(
        self,
        message: str,
        action_type: str,
        error_code: str = "ACTION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.action_type = action_type
        super().__init__(message, error_code, {"action_type": action_type, **(details or {})})


class ActionParameterException(WorkflowActionException):
    """Raised when an action is missing a required parameter or has an invalid one."""

    def __init__(self, action_type: str, message: str) -> None:
        super().__init__(message, action_type, "ACTION_PARAMETER_ERROR")


class UnknownActionTypeException(WorkflowActionException):
    """Raised when a stored action type has no handler."""

    def __init__(self, action_type: str) -> None:
        super().__init__(
            f"Unknown action type: {action_type}",
            action_type,
            "UNKNOWN_ACTION_TYPE",
        )


class WebhookDeliveryException(WorkflowActionException):
    """Raised when a webhook call fails or returns a non-success status."""

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize with target url, reason and optional HTTP status.

        Args:
            url: Webhook URL that was called.
            reason: Status text or transport error description.
            status_code: HTTP status when a response was received.
        """
        super().__init__(
            f"Webhook failed: {reason}",
            "webhook",
            "WEBHOOK_FAILED",
            {"url": url, "status_code": status_code},
        )
        self.status_code = status_code


class CommunicationDeliveryException(WorkflowActionException):
    """Raised when the email/SMS provider rejects or fails a send."""

    def __init__(self, channel: str, reason: str) -> None:
        action_type = "send_sms" if channel == "sms" else "send_email"
        super().__init__(
            f"{channel} delivery failed: {reason}",
            action_type,
            "DELIVERY_FAILED",
            {"channel": channel},
        )
