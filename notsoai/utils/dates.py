from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from notsoai.core.errors import ApiError


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, value: Optional[datetime]) -> bool:
        if value is None:
            return False
        return self.start <= value <= self.end


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    ISO-8601 string or datetime -> aware UTC datetime (naive values are taken as UTC).
    Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: Union[str, datetime, None]) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value or None


def parse_date_range(start: Optional[str], end: Optional[str]) -> Optional[DateRange]:
    # both bounds or no range at all
    if not start or not end:
        return None

    parsed_start = parse_timestamp(start)
    parsed_end = parse_timestamp(end)

    errors = {}
    if parsed_start is None:
        errors["from"] = "Invalid date"
    if parsed_end is None:
        errors["to"] = "Invalid date"
    if not errors and parsed_start > parsed_end:
        errors["from"] = "Start date must be before end date"

    if errors:
        raise ApiError(400, "VALIDATION_ERROR", "Invalid request data", errors)

    return DateRange(start=parsed_start, end=parsed_end)
