"""
Date helpers for warranty arithmetic.

Timestamps are stored as naive UTC datetimes.
"""
from calendar import monthrange
from datetime import date, datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_months(value: Union[date, datetime], months: int) -> Union[date, datetime]:
    """
    Add calendar months to a date or datetime.

    The day of month is kept when it exists in the target month and clamped
    to the last day otherwise:

        add_months(date(2024, 1, 20), 12) -> date(2025, 1, 20)
        add_months(date(2024, 1, 31), 1)  -> date(2024, 2, 29)
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def parse_date(value: Optional[str], field: str = 'date') -> Optional[date]:
    """Parse an ISO 'YYYY-MM-DD' string; None/empty stays None."""
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
    except ValueError:
        from app.exceptions import BusinessLogicError
        raise BusinessLogicError(f'Invalid {field}: expected YYYY-MM-DD')
