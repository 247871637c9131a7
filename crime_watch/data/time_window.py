"""Month keys for the police.uk `date=YYYY-MM` query parameter."""

from datetime import date
from typing import List, Tuple


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """
    Step one calendar month back.

    Args:
        year (int): Current year
        month (int): Current month (1-12)

    Returns:
        Tuple[int, int]: (year, month) of the month before
    """
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_key(year: int, month: int) -> str:
    return f'{year:04d}-{month:02d}'


def plan(start_date: date, month_count: int) -> List[str]:
    """
    Build the ordered month keys for a baseline window.

    Args:
        start_date (date): Any date inside the most recent month (datetime works too)
        month_count (int): Number of months to emit; <= 0 gives an empty plan

    Returns:
        List[str]: `YYYY-MM` keys, most recent first

    Example:
        >>> plan(date(2024, 1, 15), 3)
        ['2024-01', '2023-12', '2023-11']
    """
    keys = []
    year, month = start_date.year, start_date.month
    for _ in range(max(month_count, 0)):
        keys.append(month_key(year, month))
        year, month = previous_month(year, month)
    return keys
