"""
Connect card export profiles and CSV rendering.

Each ``ExportFormat`` has a fixed column layout matching the import screen
of the target church management system. Column getters receive the card
and the name of its campus.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from churchsync.core.models.domain.enums import ExportFormat

from .connect_cards import digits_only

ValueGetter = Callable[[Any, str], str]


@dataclass(frozen=True)
class ExportColumn:
    header: str
    value: ValueGetter


@dataclass(frozen=True)
class ExportProfile:
    id: str
    name: str
    description: str
    columns: Tuple[ExportColumn, ...]

    @property
    def headers(self) -> List[str]:
        return [column.header for column in self.columns]

    def row(self, card: Any, campus: str) -> List[str]:
        return [column.value(card, campus) for column in self.columns]


def _ten_digit_phone(phone: Optional[str]) -> str:
    if not phone:
        return ""
    digits = digits_only(phone)
    if len(digits) == 10:
        return digits
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return phone


def _display_phone(phone: Optional[str]) -> str:
    digits = _ten_digit_phone(phone)
    if len(digits) == 10 and digits.isdigit():
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone or ""


def _person_status(visit_type: Optional[str]) -> str:
    """Visitor / Attendee / Member from the card's visit type."""
    text = (visit_type or "").lower()
    if not text or "first" in text or "new" in text:
        return "Visitor"
    if "second" in text or "regular" in text or "attend" in text:
        return "Attendee"
    if "member" in text:
        return "Member"
    return "Visitor"


def _membership(visit_type: Optional[str]) -> str:
    text = (visit_type or "").lower()
    if not text or "first" in text or "new" in text or "second" in text or "return" in text:
        return "Visitor"
    if "regular" in text or "attend" in text:
        return "Attendee"
    if "member" in text:
        return "Member"
    return "Visitor"


def split_name(full_name: Optional[str]) -> Tuple[str, str]:
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def _iso_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _us_date(value: Optional[datetime]) -> str:
    return value.strftime("%m/%d/%Y") if value else ""


def _iso_timestamp(value: Optional[datetime]) -> str:
    return f"{value.isoformat(timespec='milliseconds')}Z" if value else ""


def _join(values: Optional[Iterable[str]]) -> str:
    return ", ".join(values or [])


def _enum_value(value: Any) -> str:
    if value is None:
        return ""
    return getattr(value, "value", str(value))


BREEZE = ExportProfile(
    id="breeze",
    name="Breeze",
    description="Ready for People > Import People in Breeze ChMS",
    columns=(
        ExportColumn("Name", lambda card, campus: card.name or ""),
        ExportColumn("Email Address", lambda card, campus: card.email or ""),
        ExportColumn("Mobile Phone", lambda card, campus: _ten_digit_phone(card.phone)),
        ExportColumn("Street Address", lambda card, campus: card.address or ""),
        ExportColumn("Status", lambda card, campus: _person_status(card.visit_type)),
        ExportColumn("Campus", lambda card, campus: campus),
        ExportColumn("Tags", lambda card, campus: _join(card.interests)),
        ExportColumn("Created On", lambda card, campus: _iso_date(card.scanned_at)),
    ),
)

PLANNING_CENTER = ExportProfile(
    id="planning_center",
    name="Planning Center",
    description="Ready for People > Import in Planning Center Online",
    columns=(
        ExportColumn("First name", lambda card, campus: split_name(card.name)[0]),
        ExportColumn("Last name", lambda card, campus: split_name(card.name)[1]),
        ExportColumn("Email", lambda card, campus: card.email or ""),
        ExportColumn("Mobile phone", lambda card, campus: _display_phone(card.phone)),
        ExportColumn("Home address", lambda card, campus: card.address or ""),
        ExportColumn("Membership", lambda card, campus: _membership(card.visit_type)),
        ExportColumn("Campus", lambda card, campus: campus),
        ExportColumn("Created at", lambda card, campus: _us_date(card.scanned_at)),
    ),
)

GENERIC = ExportProfile(
    id="generic",
    name="Generic CSV",
    description="All fields with standard column names",
    columns=(
        ExportColumn("ID", lambda card, campus: card.id),
        ExportColumn("Full Name", lambda card, campus: card.name or ""),
        ExportColumn("Email", lambda card, campus: card.email or ""),
        ExportColumn("Phone", lambda card, campus: card.phone or ""),
        ExportColumn("Address", lambda card, campus: card.address or ""),
        ExportColumn("Visit Type", lambda card, campus: card.visit_type or ""),
        ExportColumn("Interests", lambda card, campus: _join(card.interests)),
        ExportColumn("Volunteer Category", lambda card, campus: _enum_value(card.volunteer_category)),
        ExportColumn("Location", lambda card, campus: campus),
        ExportColumn("Status", lambda card, campus: _enum_value(card.status)),
        ExportColumn("Scanned At", lambda card, campus: _iso_timestamp(card.scanned_at)),
        ExportColumn("Created At", lambda card, campus: _iso_timestamp(card.created_at)),
    ),
)

EXPORT_PROFILES: Dict[ExportFormat, ExportProfile] = {
    ExportFormat.BREEZE_CSV: BREEZE,
    ExportFormat.PLANNING_CENTER_CSV: PLANNING_CENTER,
    ExportFormat.GENERIC_CSV: GENERIC,
}


def get_profile(export_format: ExportFormat) -> ExportProfile:
    return EXPORT_PROFILES[ExportFormat(export_format)]


def render_rows(
    cards: Iterable[Any], export_format: ExportFormat, campus_names: Mapping[Optional[str], str]
) -> List[List[str]]:
    profile = get_profile(export_format)
    return [profile.row(card, campus_names.get(card.location_id, "")) for card in cards]


def generate_csv(
    cards: Iterable[Any], export_format: ExportFormat, campus_names: Mapping[Optional[str], str]
) -> str:
    """Render cards as CSV text: a header row, one row per card, joined by LF."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(get_profile(export_format).headers)
    writer.writerows(render_rows(cards, export_format, campus_names))
    return buffer.getvalue().rstrip("\n")


def export_file_name(export_format: ExportFormat, on: Optional[date] = None) -> str:
    on = on or date.today()
    slug = get_profile(export_format).id.lower().replace("_", "-")
    return f"connect-cards-{slug}-{on.isoformat()}.csv"


def export_format_tag(export_format: ExportFormat) -> str:
    """Short tag stamped on exported cards, e.g. ``breeze``."""
    return ExportFormat(export_format).value.lower().replace("_csv", "")


def csv_byte_size(content: str) -> int:
    return len(content.encode("utf-8"))


def dedupe_by_email(cards: Sequence[Any]) -> Tuple[List[Any], int]:
    """Keep the first card per lower-cased email; cards without email are all kept.

    Cards are expected newest first so the most recent card wins.

    Returns:
        Tuple of (kept cards, number of skipped duplicates)
    """
    seen: set[str] = set()
    kept: List[Any] = []
    for card in cards:
        email = (card.email or "").strip().lower()
        if email:
            if email in seen:
                continue
            seen.add(email)
        kept.append(card)
    return kept, len(cards) - len(kept)


def duplicate_warning(skipped: int) -> Optional[str]:
    if not skipped:
        return None
    return f"{skipped} duplicate{'' if skipped == 1 else 's'} skipped (same email, kept most recent)"
