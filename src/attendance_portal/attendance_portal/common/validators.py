from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_iso_date(value: str, field_name: str) -> str:
    """Accept only fixed-width YYYY-MM-DD strings naming a real calendar day."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format")
    return parsed.isoformat()
