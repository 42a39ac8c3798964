"""Input validation helpers shared by endpoints and the CRUD layer."""

import re
import uuid
from typing import Any, Optional, Tuple

from pesxchange.core.exceptions import ValidationError

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
# PES format, e.g. PES2UG24CS453
SRN_PATTERN = re.compile(r"^PES\d[A-Z]{2}\d{2}[A-Z]{2}\d{3}$")

ALLOWED_CONDITIONS = ("New", "Like New", "Good", "Fair", "Poor")


def is_uuid(value: Any) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def parse_uuid(value: Any, field_name: str = "id") -> uuid.UUID:
    """Parse a canonical UUID string, raising ``ValidationError`` otherwise."""
    if isinstance(value, uuid.UUID):
        return value
    if not is_uuid(value):
        raise ValidationError(f"Invalid {field_name} format")
    return uuid.UUID(value)


def is_valid_srn(srn: str) -> bool:
    return bool(SRN_PATTERN.match(srn.upper()))


def sanitize_input(value: Optional[str], max_length: int = 100) -> str:
    """Trim, strip angle brackets and cap the length."""
    if not value:
        return ""
    return re.sub(r"[<>]", "", value.strip())[:max_length]


def sanitize_search_term(search: Optional[str]) -> Optional[str]:
    if not search:
        return None
    return re.sub(r"[<>]", "", search).strip()[:100] or None


def normalize_message_body(body: Optional[str], max_length: int) -> str:
    """Trim and truncate a message body; empty results are rejected."""
    text = (body or "").strip()[:max_length]
    if not text:
        raise ValidationError("Message cannot be empty")
    return text


def parse_price(value: Optional[str]) -> Optional[float]:
    """Parse a non-negative price filter, ignoring anything else."""
    if value is None or value == "":
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if price != price or price < 0:  # NaN or negative
        return None
    return price


def validate_price_range(
    min_price: Optional[str], max_price: Optional[str]
) -> Tuple[Optional[float], Optional[float]]:
    low = parse_price(min_price)
    high = parse_price(max_price)
    if low is not None and high is not None and low > high:
        return None, None
    return low, high
