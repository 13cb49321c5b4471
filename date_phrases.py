from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional, Tuple, Union


class TimeMatch(NamedTuple):
    hour: int
    minute: int
    start: int
    end: int


class DateMatch(NamedTuple):
    value: date
    start: int
    end: int


# "3:30 pm", "15:00", "12:05am"
_TIME_HM_RE = re.compile(r"(?<![\d:])(\d{1,2}):(\d{2})(?:\s*([ap])\.?m\.?)?(?![a-z\d])", re.IGNORECASE)
# "3pm", "9 a.m."
_TIME_H_RE = re.compile(r"(?<![\d:.])(\d{1,2})\s*([ap])\.?m\.?(?![a-z])", re.IGNORECASE)

_MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}
_MONTH_ALT = "|".join(sorted(_MONTHS, key=len, reverse=True))

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
# Year required: a bare "1/2" is half a cup far more often than January 2nd.
_NUMERIC_DATE_RE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})\b")
_MONTH_DAY_RE = re.compile(
    rf"\b({_MONTH_ALT})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?(?:,?\s+(\d{{4}}))?\b", re.IGNORECASE
)
_DAY_MONTH_RE = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+({_MONTH_ALT})\.?(?:,?\s+(\d{{4}}))?\b", re.IGNORECASE
)
_RELATIVE_RE = re.compile(
    r"\b(day after tomorrow|today|tonight|tomorrow|next week|next month)\b", re.IGNORECASE
)
_WEEKDAY_RE = re.compile(rf"\b(?:(next|this)\s+)?({'|'.join(_WEEKDAYS)})\b", re.IGNORECASE)


def as_date(reference: Union[date, datetime, None]) -> date:
    if reference is None:
        return date.today()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def _add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _year(raw: Optional[str], ref: date) -> int:
    if not raw:
        return ref.year
    y = int(raw)
    if y < 100:
        y += 2000
    return y


def find_time(text: Optional[str]) -> Optional[TimeMatch]:
    """
    First time of day in the text, as 24h hour/minute.
    "pm" lifts 1-11 by twelve, "am" turns 12 into 0; 12pm stays 12.
    """
    s = text or ""
    for pattern in (_TIME_HM_RE, _TIME_H_RE):
        for m in pattern.finditer(s):
            hour = int(m.group(1))
            if pattern is _TIME_HM_RE:
                minute = int(m.group(2))
                marker = (m.group(3) or "").lower()
            else:
                minute = 0
                marker = m.group(2).lower()

            if minute > 59:
                continue
            if marker:
                if hour > 12:
                    continue
                if marker == "p" and 1 <= hour <= 11:
                    hour += 12
                elif marker == "a" and hour == 12:
                    hour = 0
            elif hour > 23:
                continue
            return TimeMatch(hour, minute, m.start(), m.end())
    return None


def parse_time_of_day(text: Optional[str]) -> Optional[Tuple[int, int]]:
    found = find_time(text)
    if found is None:
        return None
    return found.hour, found.minute


def _absolute_match(s: str, ref: date) -> Optional[DateMatch]:
    m = _ISO_DATE_RE.search(s)
    if m:
        try:
            return DateMatch(date(int(m.group(1)), int(m.group(2)), int(m.group(3))), m.start(), m.end())
        except ValueError:
            pass

    m = _NUMERIC_DATE_RE.search(s)
    if m:
        try:
            value = date(_year(m.group(3), ref), int(m.group(1)), int(m.group(2)))
            return DateMatch(value, m.start(), m.end())
        except ValueError:
            pass

    m = _MONTH_DAY_RE.search(s)
    if m:
        try:
            value = date(_year(m.group(3), ref), _MONTHS[m.group(1).lower()], int(m.group(2)))
            return DateMatch(value, m.start(), m.end())
        except ValueError:
            pass

    m = _DAY_MONTH_RE.search(s)
    if m:
        try:
            value = date(_year(m.group(3), ref), _MONTHS[m.group(2).lower()], int(m.group(1)))
            return DateMatch(value, m.start(), m.end())
        except ValueError:
            pass

    return None


def _relative_match(s: str, ref: date) -> Optional[DateMatch]:
    m = _RELATIVE_RE.search(s)
    if m:
        word = m.group(1).lower()
        if word in ("today", "tonight"):
            value = ref
        elif word == "tomorrow":
            value = ref + timedelta(days=1)
        elif word == "day after tomorrow":
            value = ref + timedelta(days=2)
        elif word == "next week":
            value = ref + timedelta(weeks=1)
        else:
            value = _add_months(ref, 1)
        return DateMatch(value, m.start(), m.end())

    m = _WEEKDAY_RE.search(s)
    if m:
        target = _WEEKDAYS.index(m.group(2).lower())
        ahead = (target - ref.weekday()) % 7
        if ahead == 0:
            ahead = 7
        return DateMatch(ref + timedelta(days=ahead), m.start(), m.end())

    return None


def find_date(text: Optional[str], reference: Union[date, datetime, None] = None) -> Optional[DateMatch]:
    """
    First date phrase in the text. Written dates win over relative words;
    relative words ("today", "tomorrow", "next week", weekday names) resolve
    against `reference`, the note's creation instant.
    """
    s = text or ""
    ref = as_date(reference)
    return _absolute_match(s, ref) or _relative_match(s, ref)


def find_absolute_date(text: Optional[str]) -> Optional[DateMatch]:
    """Written dates only: "10/12/2026", "2026-10-12", "Oct 12, 2026", "12 Oct 2026"."""
    return _absolute_match(text or "", date.today())


def parse_date(text: Optional[str], reference: Union[date, datetime, None] = None) -> Optional[date]:
    found = find_date(text, reference)
    return found.value if found else None


def format_date(value: date) -> str:
    return value.isoformat()


def clock_string(hour: int, minute: int) -> str:
    """Storage form, 24h: "15:05"."""
    return f"{hour:02d}:{minute:02d}"


def parse_clock(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Inverse of clock_string; also accepts 12h spellings."""
    return parse_time_of_day(value)


def display_time(value: str) -> str:
    """'15:05' -> '3:05 PM'; returns the input untouched if it is not a clock."""
    parsed = parse_clock(value)
    if parsed is None:
        return value
    hour, minute = parsed
    suffix = "AM" if hour < 12 else "PM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minute:02d} {suffix}"
