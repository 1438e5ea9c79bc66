"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    ActionParameterException,
    CommunicationDeliveryException,
    CrmAutomationException,
    ExecutionStateException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UnknownActionTypeException,
    ValidationException,
    WebhookDeliveryException,
    WorkflowActionException,
)


def test_base_exception_default_error_code() -> None:
    """Base CrmAutomationException uses class name as error_code when not provided."""
    exc = CrmAutomationException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "CrmAutomationException"
    assert exc.details == {}
    assert str(exc) == "Something failed"


def test_base_exception_to_dict() -> None:
    exc = CrmAutomationException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception_carries_field() -> None:
    exc = ValidationException("bad trigger", field="trigger")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "trigger"}
    assert ValidationException("no field").details == {}


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("workflow", "wf-1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "workflow not found: wf-1"
    assert exc.details == {"resource_type": "workflow", "resource_id": "wf-1"}


def test_sql_not_configured_maps_to_service_unavailable() -> None:
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"


def test_execution_state_exception() -> None:
    exc = ExecutionStateException("ex-1", "completed")
    assert exc.error_code == "EXECUTION_STATE_ERROR"
    assert exc.details == {"execution_id": "ex-1", "status": "completed"}


def test_action_exceptions_share_workflow_action_base() -> None:
    for exc in (
        ActionParameterException("add_tag", "tag_id missing"),
        UnknownActionTypeException("send_fax"),
        WebhookDeliveryException("https://h.example", "Not Found", 404),
        CommunicationDeliveryException("sms", "gateway refused"),
    ):
        assert isinstance(exc, WorkflowActionException)
        assert "action_type" in exc.details


def test_webhook_delivery_exception_details() -> None:
    exc = WebhookDeliveryException("https://h.example/x", "Service Unavailable", 503)
    assert exc.message == "Webhook failed: Service Unavailable"
    assert exc.status_code == 503
    assert exc.details == {
        "action_type": "webhook",
        "url": "https://h.example/x",
        "status_code": 503,
    }


def test_communication_delivery_exception_maps_channel_to_action() -> None:
    assert CommunicationDeliveryException("sms", "x").action_type == "send_sms"
    assert CommunicationDeliveryException("email", "x").action_type == "send_email"
