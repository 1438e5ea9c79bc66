"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.communication_service import (
    CommunicationService,
    LogOnlyDeliveryProvider,
)
from app.infrastructure.services.error_reporter import LoggingErrorReporter
from app.infrastructure.services.system_audit_service import SystemAuditService
from app.infrastructure.services.webhook_client import HttpxWebhookClient

__all__ = [
    "CommunicationService",
    "HttpxWebhookClient",
    "LogOnlyDeliveryProvider",
    "LoggingErrorReporter",
    "SystemAuditService",
]
