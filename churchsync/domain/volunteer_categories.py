"""
Mapping between ministry display names and ``VolunteerCategoryType``.

Team management screens use human-readable ministry names while volunteers
and connect cards store the enum.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from churchsync.core.models.domain.enums import VolunteerCategoryType

DISPLAY_TO_CATEGORY: Dict[str, VolunteerCategoryType] = {
    "Kids Ministry": VolunteerCategoryType.KIDS_MINISTRY,
    "Worship Team": VolunteerCategoryType.WORSHIP_TEAM,
    "Hospitality": VolunteerCategoryType.HOSPITALITY,
    "Parking & Traffic": VolunteerCategoryType.PARKING,
    "Connection Team": VolunteerCategoryType.GREETER,
    "Audio/Visual Tech": VolunteerCategoryType.AV_TECH,
    "Prayer Team": VolunteerCategoryType.PRAYER_TEAM,
    "Facility Setup": VolunteerCategoryType.USHER,
    "General": VolunteerCategoryType.GENERAL,
    "Other": VolunteerCategoryType.OTHER,
}

CATEGORY_TO_DISPLAY: Dict[VolunteerCategoryType, str] = {
    category: label for label, category in DISPLAY_TO_CATEGORY.items()
}


def category_from_label(label: Optional[str]) -> VolunteerCategoryType:
    """Resolve a display name or an enum-style label, defaulting to GENERAL."""
    if not label:
        return VolunteerCategoryType.GENERAL
    label = label.strip()
    if label in DISPLAY_TO_CATEGORY:
        return DISPLAY_TO_CATEGORY[label]
    key = label.upper().replace(" ", "_").replace("-", "_")
    try:
        return VolunteerCategoryType(key)
    except ValueError:
        return VolunteerCategoryType.GENERAL


def category_label(category: VolunteerCategoryType) -> str:
    return CATEGORY_TO_DISPLAY.get(VolunteerCategoryType(category), str(category))


def leader_matches_category(leader_categories: Iterable[str], card_category: Optional[str]) -> bool:
    """Whether a leader's display-name ministries include the card's category."""
    if not card_category:
        return False
    return any(DISPLAY_TO_CATEGORY.get(label) == card_category for label in leader_categories)
