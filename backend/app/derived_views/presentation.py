"""Display helpers shared by the dashboard and directory views.

Every helper is total: missing or malformed input yields a placeholder or the
neutral tone, never an exception.
"""

import enum
import re
from datetime import date, datetime

PLACEHOLDER = "—"
UNNAMED_PROVIDER = "Unnamed Provider"
UNNAMED_FACILITY = "Unnamed Facility"

LICENSE_EXPIRING_DAYS = 90


class Tone(str, enum.Enum):
    critical = "critical"
    urgent = "urgent"
    high = "high"
    medium = "medium"
    low = "low"
    success = "success"
    info = "info"
    attention = "attention"
    warning = "warning"
    neutral = "neutral"


# Ordered keyword rules: first rule with any keyword contained in the value wins.
PRIORITY_RULES: list[tuple[tuple[str, ...], Tone]] = [
    (("top",), Tone.critical),
    (("super stat", "stat"), Tone.urgent),
    (("high",), Tone.high),
    (("medium",), Tone.medium),
    (("low",), Tone.low),
]

STATUS_RULES: list[tuple[tuple[str, ...], Tone]] = [
    (("approved",), Tone.success),
    (("awaiting", "pending"), Tone.info),
    (("missing", "hold", "ineligible"), Tone.attention),
]


def classify(value: str | None, rules: list[tuple[tuple[str, ...], Tone]]) -> Tone:
    normalized = (value or "").strip().lower()
    if not normalized:
        return Tone.neutral
    for keywords, tone in rules:
        if any(keyword in normalized for keyword in keywords):
            return tone
    return Tone.neutral


def priority_tone(value: str | None) -> Tone:
    return classify(value, PRIORITY_RULES)


def status_tone(value: str | None) -> Tone:
    return classify(value, STATUS_RULES)


def parse_date(value: date | datetime | str | None) -> date | None:
    """Coerce a date-like value, returning None when it cannot be read."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(value: date | datetime | str | None) -> str:
    parsed = parse_date(value)
    if parsed is None:
        return PLACEHOLDER
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def format_flag(value: bool | None) -> str:
    if value is None:
        return PLACEHOLDER
    return "Yes" if value else "No"


def format_text(value: str | None) -> str:
    if value is None or not str(value).strip():
        return PLACEHOLDER
    return str(value)


def format_list(values: list[str] | tuple[str, ...] | None) -> str:
    if not values:
        return PLACEHOLDER
    return ", ".join(values)


def badge(value: str | None, tone: Tone) -> dict:
    return {"label": format_text(value), "tone": tone.value}


def license_expiration_tone(
    value: date | datetime | str | None,
    today: date | None = None,
) -> Tone:
    expires = parse_date(value)
    if expires is None:
        return Tone.neutral
    today = today or date.today()
    days_left = (expires - today).days
    if days_left < 0:
        return Tone.critical
    if days_left <= LICENSE_EXPIRING_DAYS:
        return Tone.warning
    return Tone.success


def format_provider_name(
    first_name: str | None,
    middle_name: str | None,
    last_name: str | None,
    degree: str | None = None,
) -> str:
    full_name = " ".join(part for part in (first_name, middle_name, last_name) if part)
    if not full_name:
        return UNNAMED_PROVIDER
    return f"{full_name}, {degree}" if degree else full_name


def provider_full_name(
    first_name: str | None,
    middle_name: str | None,
    last_name: str | None,
) -> str:
    """Name without the degree suffix; degree is shown separately as a subtitle."""
    return format_provider_name(first_name, middle_name, last_name)


def facility_display_name(name: str | None) -> str:
    trimmed = (name or "").strip()
    return trimmed or UNNAMED_FACILITY


def sanitize_phone_for_href(value: str) -> str:
    return re.sub(r"[^\d+]", "", value)
