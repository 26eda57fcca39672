"""Utility functions for lexidrill."""

import math
from datetime import datetime, timezone


def normalize_answer(text: str | None) -> str:
    """Trim and lowercase an answer for comparison."""
    if not text:
        return ''
    return text.strip().lower()


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like Math.round."""
    return math.floor(value + 0.5)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO timestamp (or pass a datetime through) as tz-aware UTC."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def hours_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 3600


def days_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 86400
