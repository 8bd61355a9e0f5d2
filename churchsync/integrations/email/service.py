"""
Email delivery with an audit trail.

``EmailService.send`` is the single way the application sends email. With
``EMAIL_SEND_ENABLED`` off (the default outside production) nothing leaves
the process and the attempt is recorded as SKIPPED. Every attempt, sent or
not, is written to the ``email_logs`` table and reported to monitoring.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from typing import Any, Dict, Optional

import aiosmtplib
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.integrations import EmailLog
from churchsync.core.database.repositories.integrations import EmailLogRepository
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import DeliveryStatus
from churchsync.core.models.io.integrations import EmailStats
from churchsync.core.monitoring import log_notification
from churchsync.server.core.config import EmailConfig, settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class SendEmailResult:
    success: bool
    status: DeliveryStatus
    email_log_id: Optional[str] = None
    error: Optional[str] = None
    dry_run: bool = False


class EmailService:
    """Send email through SMTP and record each attempt."""

    def __init__(self, session: AsyncSession, config: Optional[EmailConfig] = None) -> None:
        self.session = session
        self.config = config or settings.email

    def _build_message(self, to: str, subject: str, html: str, text: Optional[str]) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.config.from_address
        msg["To"] = to
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = f"<{uuid.uuid4()}@churchsync>"
        if text:
            msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    async def _deliver(self, msg: MIMEMultipart) -> None:
        await aiosmtplib.send(
            msg,
            hostname=self.config.host,
            port=self.config.port,
            username=self.config.username,
            password=self.config.password,
            use_tls=self.config.port == 465,
            timeout=self.config.timeout,
        )

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        organization_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> SendEmailResult:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Optional plain-text alternative
            organization_id: Tenant for the audit trail
            metadata: Extra context stored on the log row (template, volunteer id, ...)

        Returns:
            SendEmailResult; ``success`` is true for SENT and SKIPPED
        """
        metadata = metadata or {}
        dry_run = not self.config.send_enabled
        error: Optional[str] = None

        if dry_run:
            status = DeliveryStatus.SKIPPED
            logger.info(f"[DRY RUN] Email to {to}: {subject}")
        else:
            try:
                await self._deliver(self._build_message(to, subject, html, text))
                status = DeliveryStatus.SENT
                logger.info(f"Email sent to {to}: {subject}")
            except aiosmtplib.SMTPException as e:
                status = DeliveryStatus.FAILED
                error = str(e)
                logger.error(f"Email to {to} failed: {error}")
            except OSError as e:
                status = DeliveryStatus.FAILED
                error = f"SMTP connection failed: {e}"
                logger.error(f"Email to {to} failed: {error}")

        email_log_id: Optional[str] = None
        try:
            log = EmailLog(
                organization_id=organization_id,
                to_address=to,
                subject=subject,
                status=status,
                error=error,
                context=metadata,
                sent_at=utc_now() if status == DeliveryStatus.SENT else None,
            )
            self.session.add(log)
            await self.session.commit()
            email_log_id = log.id
        except Exception:
            await self.session.rollback()
            logger.warning(f"Failed to record email log for {to}", exc_info=True)

        log_notification("email", status.value, organization_id, template=metadata.get("template"))
        return SendEmailResult(
            success=status in (DeliveryStatus.SENT, DeliveryStatus.SKIPPED),
            status=status,
            email_log_id=email_log_id,
            error=error,
            dry_run=dry_run,
        )

    async def stats(self, organization_id: str) -> EmailStats:
        """Delivery counts for an organization."""
        counts = await EmailLogRepository(self.session).status_counts(organization_id)
        return EmailStats(
            total=sum(counts.values()),
            sent=counts.get(DeliveryStatus.SENT, 0),
            failed=counts.get(DeliveryStatus.FAILED, 0),
            skipped=counts.get(DeliveryStatus.SKIPPED, 0),
        )
