"""Partial dates: validation pattern, year resolution and normalization."""

import re

# YYYY, YYYY-MM or YYYY-MM-DD. Month and day ranges are part of the pattern so that
# e.g. "1955-13" and "1955-02-32" never validate.
PARTIAL_DATE_PATTERN = r"^[0-9]{4}(-(0[1-9]|1[0-2])(-(0[1-9]|[12][0-9]|3[01]))?)?(?!\n)$"

_PARTIAL_DATE = re.compile(PARTIAL_DATE_PATTERN)

# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

_QUALIFIERS = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|CIRCA|CA\.?|C\.|AROUND):?\s*",
    flags=re.IGNORECASE,
)


def is_partial_date(value: str | None) -> bool:
    return value is not None and _PARTIAL_DATE.match(value) is not None


def resolve_year(value: str | None) -> int | None:
    """Return the year of a partial date, or None when absent or unparseable."""
    if not is_partial_date(value):
        return None
    return int(value[:4])


def _format(year: int, month: int | None = None, day: int | None = None) -> str | None:
    if month is None:
        return f"{year:04d}"
    if not 1 <= month <= 12:
        return None
    if day is None:
        return f"{year:04d}-{month:02d}"
    if not 1 <= day <= 31:
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def normalize_date_string(date_str: str | None) -> str | None:
    """
    Normalize a free-form historical date string into a partial date.

    The result keeps the precision of the input: "1698" stays a bare year, "NOV 1954"
    becomes "1954-11" and "25 NOV 1954" becomes "1954-11-25". Returns None when the
    string cannot be understood.

    Handles formats like:
    - "1839-08-29", "1746-00-00" (zero month/day means unknown)
    - "25 NOV 1954", "08 March 1893", "11 Aug. 1968", "02 May1838"
    - "NOV 1954", "May, 1837"
    - "April 17, 1850", "SEPT. 17,1910", "Oct.12,1929"
    - "01-27-1920", "05/15/1923" (month first)
    - "ABOUT 1905", "(Abt.  1798)", "(1789?)", "(About:1746-00-00)"
    Ranges ("BET 1850 AND 1860", "FROM ... TO ...") are not resolved.
    """
    if not date_str:
        return None

    s = date_str.strip().strip("()").rstrip("?")
    s = _QUALIFIERS.sub("", s).strip()
    if not s:
        return None

    # ISO-like, possibly with zeroed components
    match = re.match(r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?$", s)
    if match:
        year = int(match.group(1))
        month = int(match.group(2)) if match.group(2) else 0
        day = int(match.group(3)) if match.group(3) else 0
        if month == 0:
            return _format(year)
        if day == 0:
            return _format(year, month)
        return _format(year, month, day)

    # "25 NOV 1954", "08 March 1893", "11 Aug. 1968", "02 May1838"
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        if month:
            return _format(int(match.group(3)), month, int(match.group(1)))

    # "NOV 1954", "November 1954", "May, 1837"
    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        if month:
            return _format(int(match.group(2)), month)

    # "April 17, 1850", "SEPT. 17,1910", "Oct.12,1929"
    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        if month:
            return _format(int(match.group(3)), month, int(match.group(2)))

    # "01-27-1920", "01/27/1920", "04 05 1911" (month first)
    match = re.match(r"^(\d{1,2})[-/\s](\d{1,2})[-/\s](\d{4})$", s)
    if match:
        return _format(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    return None
