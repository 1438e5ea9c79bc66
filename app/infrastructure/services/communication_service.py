"""Communication service: deliver email/SMS through a provider and persist the record."""

from __future__ import annotations

import logging

from app.application.dtos.communication import (
    CommunicationCreate,
    CommunicationResult,
    DeliveryReceipt,
)
from app.application.interfaces.repositories import ICommunicationRepository
from app.application.interfaces.services import IDeliveryProvider
from app.core.constants import SYSTEM_ACTOR
from app.domain.exceptions import CommunicationDeliveryException, WorkflowActionException
from app.shared.context import get_current_actor_id
from app.shared.enums import CommunicationChannel
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class LogOnlyDeliveryProvider:
    """IDeliveryProvider implementation that logs instead of sending.

    Use when no email/SMS transport is configured. Production can swap in an
    SMTP, SES or SMS gateway implementation.
    """

    async def deliver_email(
        self, sender: str, to: str, subject: str, body: str
    ) -> DeliveryReceipt:
        logger.info("Email (log only): from=%s to=%s subject=%r", sender, to, (subject or "")[:80])
        logger.debug("Email body (first 500 chars): %s", (body or "")[:500])
        return DeliveryReceipt(provider_message_id=f"log-{generate_cuid()}", status="logged")

    async def deliver_sms(self, sender: str, to: str, message: str) -> DeliveryReceipt:
        logger.info("SMS (log only): from=%s to=%s length=%d", sender, to, len(message or ""))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("SMS text: %s", (message or "")[:160])
        return DeliveryReceipt(provider_message_id=f"log-{generate_cuid()}", status="logged")


class CommunicationService:
    """ICommunicationService: provider delivery followed by a communication record.

    Nothing is recorded when the provider fails; the failure surfaces as
    CommunicationDeliveryException on the action.
    """

    def __init__(
        self,
        provider: IDeliveryProvider,
        repo: ICommunicationRepository,
        *,
        email_from: str,
        sms_from: str,
    ) -> None:
        self.provider = provider
        self.repo = repo
        self.email_from = email_from
        self.sms_from = sms_from

    async def send_email(
        self,
        client_id: str | None,
        to: str,
        subject: str,
        body: str,
        template_id: str | None = None,
    ) -> CommunicationResult:
        channel = CommunicationChannel.EMAIL
        try:
            receipt = await self.provider.deliver_email(self.email_from, to, subject, body)
        except WorkflowActionException:
            raise
        except Exception as e:
            raise CommunicationDeliveryException(channel.value, str(e) or e.__class__.__name__) from e
        return await self.repo.create(
            CommunicationCreate(
                client_id=client_id,
                channel=channel.value,
                recipient=to,
                sender=self.email_from,
                subject=subject,
                body=body,
                template_id=template_id,
                status=receipt.status,
                provider_message_id=receipt.provider_message_id,
                created_by=get_current_actor_id() or SYSTEM_ACTOR,
                sent_at=utc_now(),
            )
        )

    async def send_sms(self, client_id: str | None, to: str, message: str) -> CommunicationResult:
        channel = CommunicationChannel.SMS
        try:
            receipt = await self.provider.deliver_sms(self.sms_from, to, message)
        except WorkflowActionException:
            raise
        except Exception as e:
            raise CommunicationDeliveryException(channel.value, str(e) or e.__class__.__name__) from e
        return await self.repo.create(
            CommunicationCreate(
                client_id=client_id,
                channel=channel.value,
                recipient=to,
                sender=self.sms_from,
                body=message,
                status=receipt.status,
                provider_message_id=receipt.provider_message_id,
                created_by=get_current_actor_id() or SYSTEM_ACTOR,
                sent_at=utc_now(),
            )
        )
