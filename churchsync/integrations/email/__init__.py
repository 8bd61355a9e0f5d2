"""
Outbound email.

- service: ``EmailService`` (SMTP delivery, dry run, audit log, statistics)
- templates: subject/HTML/text builders for the notifications the app sends
"""

from .service import EmailService, SendEmailResult
from .templates import (
    BackgroundCheckBlock,
    DocumentLink,
    RenderedEmail,
    VolunteerDocumentsContext,
    background_check_request_email,
    leader_notification_email,
    staff_invitation_email,
    volunteer_documents_email,
)

__all__ = [
    "BackgroundCheckBlock",
    "DocumentLink",
    "EmailService",
    "RenderedEmail",
    "SendEmailResult",
    "VolunteerDocumentsContext",
    "background_check_request_email",
    "leader_notification_email",
    "staff_invitation_email",
    "volunteer_documents_email",
]
