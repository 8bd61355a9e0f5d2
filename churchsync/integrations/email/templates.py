"""
Email templates.

Each builder returns a ``RenderedEmail`` with the subject, an HTML body and
a plain-text alternative. Every interpolated value is HTML-escaped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import List, Optional


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class DocumentLink:
    name: str
    url: str
    description: Optional[str] = None


@dataclass(frozen=True)
class BackgroundCheckBlock:
    provider: str
    application_url: str
    instructions: Optional[str] = None
    confirmation_url: Optional[str] = None


@dataclass
class VolunteerDocumentsContext:
    church_name: str
    volunteer_name: str
    category_label: str
    documents: List[DocumentLink] = field(default_factory=list)
    background_check: Optional[BackgroundCheckBlock] = None
    training_url: Optional[str] = None


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><body style=\"font-family: Arial, sans-serif; color: #111827;\">"
        f"<h1 style=\"font-size: 22px;\">{escape(title)}</h1>{body}</body></html>"
    )


def _paragraph(text: str) -> str:
    return f"<p>{escape(text)}</p>"


def _link(url: str, label: str) -> str:
    return f"<a href=\"{escape(url, quote=True)}\">{escape(label)}</a>"


def leader_notification_email(
    church_name: str,
    leader_name: str,
    volunteer_name: str,
    volunteer_email: Optional[str],
    volunteer_phone: Optional[str],
    category_label: str,
    dashboard_url: str,
) -> RenderedEmail:
    """Tell a ministry leader that a new volunteer was assigned to them."""
    subject = f"New Volunteer Assigned: {volunteer_name or 'New Volunteer'} - {church_name}"
    contact_lines = [f"Name: {volunteer_name}", f"Ministry: {category_label}"]
    if volunteer_email:
        contact_lines.append(f"Email: {volunteer_email}")
    if volunteer_phone:
        contact_lines.append(f"Phone: {volunteer_phone}")

    body = _paragraph(f"Hi {leader_name},")
    body += _paragraph(f"A new volunteer is interested in serving with {category_label} at {church_name}.")
    body += "<ul>" + "".join(f"<li>{escape(line)}</li>" for line in contact_lines) + "</ul>"
    body += _paragraph("Please reach out within the next few days to welcome them.")
    body += f"<p>{_link(dashboard_url, 'Open the volunteer dashboard')}</p>"

    text = "\n".join(
        [
            f"Hi {leader_name},",
            "",
            f"A new volunteer is interested in serving with {category_label} at {church_name}.",
            "",
            *contact_lines,
            "",
            "Please reach out within the next few days to welcome them.",
            f"Volunteer dashboard: {dashboard_url}",
        ]
    )
    return RenderedEmail(subject=subject, html=_page("New volunteer assigned", body), text=text)


def volunteer_documents_email(context: VolunteerDocumentsContext) -> RenderedEmail:
    """Welcome a new volunteer with documents, background check and training steps."""
    subject = f"Welcome to {context.category_label} - {context.church_name}"
    body = _paragraph(f"Hi {context.volunteer_name},")
    body += _paragraph(
        f"Thank you for your interest in serving with {context.category_label} at {context.church_name}!"
    )
    text_lines = [
        f"Hi {context.volunteer_name},",
        "",
        f"Thank you for your interest in serving with {context.category_label} at {context.church_name}!",
    ]

    if context.documents:
        body += "<h2>Documents to review</h2><ul>"
        text_lines += ["", "Documents to review:"]
        for document in context.documents:
            description = f" - {escape(document.description)}" if document.description else ""
            body += f"<li>{_link(document.url, document.name)}{description}</li>"
            text_lines.append(f"- {document.name}: {document.url}")
        body += "</ul>"

    check = context.background_check
    if check is not None:
        body += "<h2>Background check</h2>"
        body += _paragraph(f"This ministry requires a background check through {check.provider}.")
        body += f"<p>{_link(check.application_url, 'Start your background check')}</p>"
        text_lines += [
            "",
            f"Background check: this ministry requires a background check through {check.provider}.",
            f"Start here: {check.application_url}",
        ]
        if check.instructions:
            body += _paragraph(check.instructions)
            text_lines.append(check.instructions)
        if check.confirmation_url:
            body += f"<p>{_link(check.confirmation_url, 'I have completed my background check')}</p>"
            text_lines.append(f"When you are done, confirm here: {check.confirmation_url}")

    if context.training_url:
        body += "<h2>Training</h2>"
        body += f"<p>{_link(context.training_url, 'Open the training')}</p>"
        text_lines += ["", f"Training: {context.training_url}"]

    body += _paragraph("We are excited to serve alongside you!")
    text_lines += ["", "We are excited to serve alongside you!"]
    return RenderedEmail(subject=subject, html=_page(subject, body), text="\n".join(text_lines))


def background_check_request_email(
    church_name: str, volunteer_name: str, check: BackgroundCheckBlock
) -> RenderedEmail:
    """Ask a volunteer to complete the background check and confirm it."""
    subject = f"Background check requested - {church_name}"
    body = _paragraph(f"Hi {volunteer_name},")
    body += _paragraph(f"{church_name} asks you to complete a background check through {check.provider}.")
    body += f"<p>{_link(check.application_url, 'Start your background check')}</p>"
    text_lines = [
        f"Hi {volunteer_name},",
        "",
        f"{church_name} asks you to complete a background check through {check.provider}.",
        f"Start here: {check.application_url}",
    ]
    if check.instructions:
        body += _paragraph(check.instructions)
        text_lines.append(check.instructions)
    if check.confirmation_url:
        body += _paragraph("Once you have submitted it, let us know with the link below.")
        body += f"<p>{_link(check.confirmation_url, 'I have completed my background check')}</p>"
        text_lines += ["", f"When you are done, confirm here: {check.confirmation_url}"]
    return RenderedEmail(subject=subject, html=_page("Background check", body), text="\n".join(text_lines))


def staff_invitation_email(
    church_name: str,
    inviter_name: str,
    role_label: str,
    accept_url: str,
    expires_in_days: int,
    location_name: Optional[str] = None,
) -> RenderedEmail:
    """Invite someone to join the church's dashboard team."""
    subject = f"You've been invited to join {church_name}"
    where = f" at {location_name}" if location_name else ""
    invite_line = f"{inviter_name} has invited you to join {church_name} as {role_label}{where}."
    expiry_line = f"This invitation expires in {expires_in_days} days."

    body = _paragraph(invite_line)
    body += f"<p>{_link(accept_url, 'Accept invitation')}</p>"
    body += _paragraph(expiry_line)
    text = "\n".join([invite_line, "", f"Accept the invitation: {accept_url}", "", expiry_line])
    return RenderedEmail(subject=subject, html=_page("Team invitation", body), text=text)
