"""
Connect card normalization and data-quality rules.

Pure functions applied to extracted connect card data before it is saved and
while it is reviewed. They never touch the database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

FIRST_VISIT = "First Visit"
SECOND_VISIT = "Second Visit"
REGULAR_ATTENDEE = "Regular attendee"
OTHER_VISIT = "Other"
VISIT_TYPES = (FIRST_VISIT, SECOND_VISIT, REGULAR_ATTENDEE, OTHER_VISIT)

_NON_DIGITS = re.compile(r"\D")

# Canonical interest label -> fragments that map to it, checked in order
INTEREST_PATTERNS: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Volunteering", ("volunteer", "serve", "serving", "get involved", "help out")),
    ("Small Groups", ("small group", "life group", "connect group", "community group", "bible study")),
    ("Youth Ministry", ("youth", "student", "teen")),
    ("Kids Ministry", ("kid", "child", "nursery")),
    ("Worship", ("worship", "music", "band", "choir")),
    ("Missions", ("mission", "outreach")),
)


@dataclass
class QualityIssue:
    field: str
    message: str
    severity: str = "error"


@dataclass
class QualityResult:
    is_valid: bool
    issues: List[QualityIssue] = field(default_factory=list)
    needs_review: bool = False

    @property
    def messages(self) -> List[str]:
        return [issue.message for issue in self.issues]


def digits_only(value: Optional[str]) -> str:
    return _NON_DIGITS.sub("", value or "")


def normalize_visit_status(visit_status: Optional[str]) -> Optional[str]:
    """Map free-text visit status to one of the standard visit types.

    Unrecognized text is returned unchanged so a reviewer can fix it.
    """
    if not visit_status:
        return None

    text = visit_status.lower().strip()
    if (
        "first" in text
        or "i'm new" in text
        or "im new" in text
        or "new here" in text
        or "new guest" in text
        or ("guest" in text and "return" not in text)
    ):
        return FIRST_VISIT
    if "second" in text or "2nd" in text:
        return SECOND_VISIT
    if any(word in text for word in ("regular", "member", "returning", "frequent", "attend")):
        return REGULAR_ATTENDEE
    return visit_status


def normalize_interests(interests: Optional[Iterable[str]]) -> List[str]:
    """Map checkbox labels to canonical interests, deduplicated in input order."""
    normalized: List[str] = []
    for interest in interests or []:
        lower = interest.lower().strip()
        label = next(
            (canonical for canonical, fragments in INTEREST_PATTERNS if any(f in lower for f in fragments)),
            interest,
        )
        if label not in normalized:
            normalized.append(label)
    return normalized


def normalize_keywords(keywords: Optional[Iterable[str]]) -> List[str]:
    cleaned = (keyword.lower().strip() for keyword in keywords or [])
    return [keyword for keyword in cleaned if keyword]


def validate_connect_card_data(data: Mapping[str, Any]) -> QualityResult:
    """Check extracted card data for the most common extraction mistakes.

    Looks at the name, phone and email only. Prayer text and address are
    optional and never flagged.
    """
    issues: List[QualityIssue] = []

    name = (data.get("name") or "").strip()
    if len(name) < 2:
        issues.append(QualityIssue("name", "Name is missing or too short"))

    phone = (data.get("phone") or "").strip()
    if phone:
        digits = digits_only(phone)
        if len(digits) == 9:
            issues.append(QualityIssue("phone", "Phone number has only 9 digits (expected 10)"))
        elif len(digits) >= 10 and len(set(digits)) == 1:
            issues.append(QualityIssue("phone", "Phone number appears invalid (all same digit)"))
        elif len(digits) < 9:
            issues.append(QualityIssue("phone", "Phone number appears incomplete"))
    else:
        issues.append(QualityIssue("phone", "Phone number is missing"))

    email = (data.get("email") or "").strip()
    if email:
        if "@" not in email:
            issues.append(QualityIssue("email", "Email is missing @ symbol"))
    else:
        issues.append(QualityIssue("email", "Email is missing"))

    needs_review = bool(issues)
    return QualityResult(is_valid=not needs_review, issues=issues, needs_review=needs_review)


def format_validation_summary(result: QualityResult) -> str:
    if result.is_valid:
        return "No issues detected - ready to save"
    count = sum(1 for issue in result.issues if issue.severity == "error")
    return f"{count} issue{'' if count == 1 else 's'} detected - needs review"


def format_phone_number(phone: Optional[str]) -> Optional[str]:
    """Format a US number as ``(xxx) xxx-xxxx``; anything else is returned as-is."""
    if not phone:
        return phone
    digits = digits_only(phone)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone
