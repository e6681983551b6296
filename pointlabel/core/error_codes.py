"""
Structured reason codes for dropped labels and rejected anchors.
Use these keys in return values; map to user-facing messages in callers.
"""

# Why a group produced no label
NO_CANDIDATES = "no_candidates"
ALL_CANDIDATES_DISQUALIFIED = "all_candidates_disqualified"

# Why an anchor never reached grouping
INVALID_ANCHOR = "invalid_anchor"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    NO_CANDIDATES: "No visible position exists for this label inside the area. Try a larger area or a smaller font.",
    ALL_CANDIDATES_DISQUALIFIED: "Every position collides with another label or covers its own point. Try fewer labels or a smaller font.",
    INVALID_ANCHOR: "Point skipped: it has no label text or a non-finite coordinate.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Message for a reason key from this module; fallback for unknown or empty keys."""
    return USER_MESSAGES.get(error_key or "", fallback)
