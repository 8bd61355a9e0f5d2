"""
SMS text helpers.

Parsing of volunteer replies to event invitations and the outgoing SMS
templates. Every outgoing template ends with the opt-out notice.
"""

from __future__ import annotations

from datetime import date, time
from typing import Any, Literal, Mapping, Optional

ParsedResponse = Optional[Literal["YES", "NO"]]

OPT_OUT = "Reply STOP to opt out."

YES_PATTERNS = (
    "yes",
    "yeah",
    "yep",
    "yup",
    "sure",
    "ok",
    "okay",
    "absolutely",
    "definitely",
    "of course",
    "i can",
    "count me in",
    "i'm in",
    "im in",
    "y",
)

NO_PATTERNS = (
    "no",
    "nope",
    "nah",
    "can't",
    "cant",
    "cannot",
    "sorry",
    "unable",
    "i can't",
    "i cant",
    "not available",
    "pass",
    "n",
)


def parse_response(message: str) -> ParsedResponse:
    """Strict parse: YES/Y or NO/N, ignoring case and surrounding spaces."""
    normalized = (message or "").strip().upper()
    if normalized in ("YES", "Y"):
        return "YES"
    if normalized in ("NO", "N"):
        return "NO"
    return None


def _matches(normalized: str, pattern: str) -> bool:
    return normalized == pattern or normalized.startswith(pattern + " ")


def parse_response_fuzzy(message: str) -> ParsedResponse:
    """Lenient parse that also understands common phrasings ("count me in", "nope")."""
    normalized = (message or "").strip().lower()
    if any(_matches(normalized, pattern) for pattern in YES_PATTERNS):
        return "YES"
    if any(_matches(normalized, pattern) for pattern in NO_PATTERNS):
        return "NO"
    return None


def extract_message_from_payload(payload: Mapping[str, Any]) -> str:
    """Message text of an inbound webhook; providers use different keys."""
    for key in ("message", "body", "text"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def first_name_of(name: Optional[str]) -> str:
    parts = (name or "").split()
    return parts[0] if parts else "there"


def _hour_12(value: time) -> str:
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {'AM' if value.hour < 12 else 'PM'}"


def format_event_date(on: date, start: time) -> str:
    """``Sun, Jan 5 at 9:00 AM``"""
    return f"{on.strftime('%a, %b')} {on.day} at {_hour_12(start)}"


def volunteer_welcome(first_name: str, ministry_name: str, church_name: str) -> str:
    return (
        f"Hi {first_name}! Welcome to {ministry_name} at {church_name}. "
        "We're excited to have you on the team! You'll receive an email shortly with next steps. "
        f"{OPT_OUT}"
    )


def event_invitation(first_name: str, event_name: str, event_date: str) -> str:
    return f"Hi {first_name}! Can you serve at {event_name} on {event_date}? Reply YES or NO. {OPT_OUT}"


def event_confirmation(first_name: str, event_name: str, event_date: str, leader_name: Optional[str] = None) -> str:
    leader_text = f" Questions? Contact {leader_name}." if leader_name else ""
    return f"Thanks {first_name}! You're confirmed for {event_name} on {event_date}.{leader_text} {OPT_OUT}"


def render_confirmation_message(
    template: Optional[str],
    first_name: str,
    event_name: str,
    event_date: str,
    leader_name: Optional[str] = None,
) -> str:
    """Fill a custom confirmation template, or fall back to the default text."""
    if not template:
        return event_confirmation(first_name, event_name, event_date, leader_name)
    return (
        template.replace("{{firstName}}", first_name)
        .replace("{{eventName}}", event_name)
        .replace("{{eventDate}}", event_date)
        .replace("{{leaderName}}", leader_name or "the team leader")
    )
