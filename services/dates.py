"""Calendar-day helpers; days are exchanged and stored as ``YYYY-MM-DD`` strings."""

from datetime import date
from typing import Optional

from app.exceptions import ServiceValidationError


def today_str() -> str:
    return date.today().isoformat()


def parse_day(value: Optional[str], field: str = "date") -> date:
    """
    Parse a required ``YYYY-MM-DD`` value.

    Raises:
        ServiceValidationError: when missing or malformed
    """
    if not value:
        raise ServiceValidationError(f"{field.capitalize()} is required")
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ServiceValidationError(f"Invalid {field} format, expected YYYY-MM-DD")
