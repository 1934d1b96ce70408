# dates.py
import calendar
from datetime import date, timedelta
from typing import List, Tuple

from parking_split.data_models import CalendarCell


def format_date(day: date) -> str:
    """Canonical YYYY-MM-DD key used for storage and comparison."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date(value: str) -> date:
    """Inverse of format_date. Raises ValueError on anything that is not YYYY-MM-DD."""
    parts = value.strip().split("-")
    if len(parts) != 3:
        raise ValueError(f"Date must be in YYYY-MM-DD format, got {value!r}.")
    year, month, day = [int(part) for part in parts]
    return date(year, month, day)


def add_one_month(day: date) -> date:
    """
    Same day-of-month in the following month. When the target month is too
    short the surplus days roll forward into the month after (Jan 31 -> Mar 3).
    """
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    return date(year, month, 1) + timedelta(days=day.day - 1)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Moves a (year, month) pair by delta months. Months are 1-12."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def build_month_grid(year: int, month: int) -> List[CalendarCell]:
    """
    Calendar cells for one month in full Monday-first weeks, padded with the
    trailing days of the previous month and the leading days of the next one.
    """
    first = date(year, month, 1)
    days_in_month = calendar.monthrange(year, month)[1]
    lead = first.weekday()

    cells = [CalendarCell(first - timedelta(days=lead - i), False) for i in range(lead)]
    cells.extend(CalendarCell(first + timedelta(days=i), True) for i in range(days_in_month))

    last = first + timedelta(days=days_in_month - 1)
    rest = (7 - len(cells) % 7) % 7
    cells.extend(CalendarCell(last + timedelta(days=i), False) for i in range(1, rest + 1))
    return cells
