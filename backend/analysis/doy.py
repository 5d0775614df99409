"""
Day-of-year helpers.

Historical samples are aligned by day-of-year (DOY) so that any query date,
past or future, reads as "what usually happens around this date-of-year".
Windows are built with explicit modular arithmetic over the year length.
"""
import calendar
from datetime import date, timedelta
from typing import List, Tuple


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def max_doy(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def day_of_year(d: date) -> int:
    """1..366"""
    return d.timetuple().tm_yday


def date_from_doy(doy: int, year: int) -> date:
    return date(year, 1, 1) + timedelta(days=doy - 1)


def normalize_leap_doy(doy: int, is_leap: bool) -> int:
    """Map a DOY of a leap year onto the 365-day calendar.

    Feb 29 (60) falls back to Feb 28 (59); later days shift back by one so
    Mar 1 stays Mar 1.
    """
    if not is_leap or doy < 60:
        return doy
    if doy == 60:
        return 59
    return doy - 1


def center_doy_for_year(query_doy: int, query_is_leap: bool, year: int) -> int:
    """Center DOY of the sampling window inside `year`'s own calendar."""
    if query_is_leap and query_doy == 60 and is_leap_year(year):
        return 60
    doy = normalize_leap_doy(query_doy, query_is_leap)
    if is_leap_year(year) and doy >= 60:
        # Mar 1 and later sit one day further in a leap year
        return doy + 1
    return doy


def wrap_window(center: int, half_width: int, year_length: int = 365) -> List[int]:
    """All DOYs within ±half_width of center, wrapped over year_length, ascending.

    >>> wrap_window(1, 3, 365)
    [1, 2, 3, 4, 363, 364, 365]
    """
    if year_length < 1:
        raise ValueError("year_length must be positive")
    span = min(2 * half_width + 1, year_length)
    start = center - half_width
    days = {((start + offset - 1) % year_length) + 1 for offset in range(span)}
    return sorted(days)


def contiguous_runs(doys: List[int]) -> List[Tuple[int, int]]:
    """[1,2,3,363,364] -> [(1, 3), (363, 364)]"""
    runs: List[Tuple[int, int]] = []
    for d in sorted(doys):
        if runs and d == runs[-1][1] + 1:
            runs[-1] = (runs[-1][0], d)
        else:
            runs.append((d, d))
    return runs


def window_ranges(year: int, center: int, half_width: int) -> List[Tuple[date, date]]:
    """Inclusive date ranges covering the wrapped window inside `year`."""
    doys = wrap_window(center, half_width, max_doy(year))
    return [(date_from_doy(a, year), date_from_doy(b, year)) for a, b in contiguous_runs(doys)]


def format_doy(doy: int, year: int) -> str:
    d = date_from_doy(doy, year)
    return f"{calendar.month_abbr[d.month]} {d.day}"
