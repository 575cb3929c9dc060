# src/family_xref/dates/formatter.py

from __future__ import annotations

import re
from typing import List, Optional


# ---------------------------------------------------------------------------
# Month names and patterns
# ---------------------------------------------------------------------------

MONTH_NAMES: List[str] = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

# Parish books write approximate years as "n 1730" or "n1730" (noin = about)
_APPROX_RE = re.compile(r"^n\s*(\d{2,4})$", re.IGNORECASE)
_DMY_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2}|\d{4})$")
_YEAR_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_TWO_DIGIT_RE = re.compile(r"^\d{2}$")

CENTURY_CANDIDATES = (1600, 1700, 1800)
DEFAULT_CENTURY = 1700
MIN_MARRIAGE_AGE = 15
MAX_MARRIAGE_AGE = 50


# ---------------------------------------------------------------------------
# Year helpers
# ---------------------------------------------------------------------------

def extract_year(date: Optional[str]) -> Optional[int]:
    """
    Pull a 4-digit year out of a date string.

    Handles ``dd.mm.yyyy``, a bare ``yyyy`` and approximate forms such as
    ``n 1730``. Two-digit years are not expanded here (see ``infer_century``).
    """
    if not date:
        return None

    m = _YEAR_RE.search(date.strip())
    if not m:
        return None
    return int(m.group(1))


def infer_century(two_digit_year: int, birth_year: Optional[int] = None) -> int:
    """
    Expand a 2-digit year using a birth year as anchor.

    The first of 1600s/1700s/1800s that puts the age in [15, 50] wins;
    otherwise the candidate closest to that window. No anchor: 1700s.
    """
    if birth_year is None:
        return DEFAULT_CENTURY + two_digit_year

    candidates = [century + two_digit_year for century in CENTURY_CANDIDATES]
    ages = [candidate - birth_year for candidate in candidates]

    for candidate, age in zip(candidates, ages):
        if MIN_MARRIAGE_AGE <= age <= MAX_MARRIAGE_AGE:
            return candidate

    def _distance(age: int) -> int:
        if age < MIN_MARRIAGE_AGE:
            return MIN_MARRIAGE_AGE - age
        return age - MAX_MARRIAGE_AGE

    best = min(range(len(candidates)), key=lambda i: _distance(ages[i]))
    return candidates[best]


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

def format_date(date: str, birth_year: Optional[int] = None) -> str:
    """
    Render a parish-book date for a citation.

    ``15.02.1730`` -> ``15 February 1730``; ``n 1730`` -> ``abt 1730``;
    ``14.10.73`` and ``n 30`` expand the year via ``infer_century``.
    Anything else is returned trimmed and unchanged.
    """
    text = date.strip()

    approx = _APPROX_RE.match(text)
    if approx:
        year = approx.group(1)
        if len(year) == 2:
            year = str(infer_century(int(year), birth_year))
        return f"abt {year}"

    m = _DMY_RE.match(text)
    if m:
        day, month, year = int(m.group(1)), int(m.group(2)), m.group(3)
        if not 1 <= month <= 12:
            return text
        if len(year) == 2:
            year = str(infer_century(int(year), birth_year))
        return f"{day} {MONTH_NAMES[month - 1]} {year}"

    return text


def format_marriage_year(marriage_date: str, birth_year: Optional[int] = None) -> str:
    """
    Render a marriage date that may be a full date, a year or a 2-digit year.
    """
    text = marriage_date.strip()

    if "." in text:
        return format_date(text, birth_year)

    if _TWO_DIGIT_RE.match(text):
        return str(infer_century(int(text), birth_year))

    return format_date(text, birth_year)
