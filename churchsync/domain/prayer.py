"""
Prayer request classification.

Keyword-based detection of critical needs, privacy and topic category, plus
the grouping used when a prayer team member works through a batch.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

CRITICAL_KEYWORDS: Tuple[str, ...] = (
    # Life-threatening conditions
    "cancer", "tumor", "terminal", "hospice", "dying", "life support", "intensive care", "icu",
    "stage 4", "stage four", "metastatic", "palliative",
    # Death and grief
    "passed away", "death", "died", "funeral", "passing", "lost my", "lost her", "lost his", "grieving",
    # Emergencies
    "emergency", "critical condition", "accident", "crash", "trauma",
    "surgery today", "surgery tomorrow", "urgent surgery",
    # Mental health crisis
    "suicide", "suicidal", "self-harm", "overdose", "crisis",
    # Serious trauma
    "abuse", "assault", "violence", "attacked",
)  # fmt: skip

SENSITIVE_KEYWORDS: Tuple[str, ...] = (
    "confidential", "private", "don't share", "dont share", "between us", "secret", "personal",
    "sensitive", "abuse", "addiction", "affair", "divorce", "depression", "suicide", "mental health",
    "legal", "court",
)  # fmt: skip

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Health", (
        "surgery", "doctor", "hospital", "cancer", "disease", "illness", "sick", "pain", "healing",
        "health", "medical", "treatment", "diagnosis", "recovery", "chronic", "mental health",
        "depression", "anxiety", "addiction",
    )),
    ("Salvation", (
        "salvation", "saved", "accept christ", "accept jesus", "gospel", "born again", "unsaved",
        "non-believer", "doesn't know jesus", "doesnt know jesus", "not a christian", "come to christ",
        "come to faith",
    )),
    ("Family", (
        "child", "children", "kids", "son", "daughter", "parent", "mother", "father", "mom", "dad",
        "family", "marriage", "husband", "wife", "spouse", "sibling", "brother", "sister",
        "grandparent", "grandmother", "grandfather",
    )),
    ("Financial", (
        "financial", "money", "job", "employment", "laid off", "unemployed", "debt", "bills",
        "provision", "finances", "income", "paycheck",
    )),
    ("Work/Career", (
        "work", "career", "job search", "interview", "business", "promotion", "coworker", "workplace", "boss",
    )),
    ("Relationships", (
        "relationship", "dating", "boyfriend", "girlfriend", "fiance", "engaged", "marriage counseling",
        "separation", "divorce", "affair", "friendship",
    )),
    ("Spiritual Growth", (
        "faith", "doubt", "spiritual", "bible study", "prayer", "worship", "ministry", "calling",
        "purpose", "discipleship", "grow", "closer to god",
    )),
)  # fmt: skip

CRITICAL = "CRITICAL"
PRIVATE = "PRIVATE"
OTHER = "Other"
CATEGORY_ORDER: List[str] = [
    CRITICAL,
    "Health",
    "Family",
    "Salvation",
    "Financial",
    "Work/Career",
    "Relationships",
    "Spiritual Growth",
    OTHER,
    PRIVATE,
]


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    lower = text.lower()
    return any(keyword in lower for keyword in keywords)


def is_critical_prayer(text: str) -> bool:
    return _contains_any(text or "", CRITICAL_KEYWORDS)


def has_sensitive_keywords(text: str) -> bool:
    return _contains_any(text or "", SENSITIVE_KEYWORDS)


def detect_prayer_category(text: str) -> Optional[str]:
    for category, keywords in CATEGORY_KEYWORDS:
        if _contains_any(text or "", keywords):
            return category
    return None


def _field(prayer: Any, name: str) -> Any:
    if isinstance(prayer, dict):
        return prayer.get(name)
    return getattr(prayer, name, None)


def prayer_display_category(prayer: Any) -> str:
    """Section a prayer is shown in.

    Critical wins unless the prayer is private; private prayers get their
    own section; otherwise the detected category, falling back to Other.
    """
    is_private = bool(_field(prayer, "is_private"))
    if not is_private and is_critical_prayer(_field(prayer, "request") or ""):
        return CRITICAL
    if is_private:
        return PRIVATE
    category = _field(prayer, "category")
    if category in CATEGORY_ORDER:
        return category
    return OTHER


def group_prayers_by_category(prayers: Iterable[Any]) -> Dict[str, List[Any]]:
    groups: Dict[str, List[Any]] = {key: [] for key in CATEGORY_ORDER}
    for prayer in prayers:
        groups[prayer_display_category(prayer)].append(prayer)
    return groups


def prayer_stats(prayers: Sequence[Any]) -> Dict[str, int]:
    critical = sum(
        1 for p in prayers if not _field(p, "is_private") and is_critical_prayer(_field(p, "request") or "")
    )
    prayed = sum(1 for p in prayers if _field(p, "status") == "ANSWERED")
    return {"total": len(prayers), "critical": critical, "prayed": prayed, "remaining": len(prayers) - prayed}
