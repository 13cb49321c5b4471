from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from date_phrases import as_date, clock_string, display_time, find_date, find_time, format_date
from line_rules import LineRule, compose, first_match, join_block, label_matcher, split_lines
from list_format import parse_task_line
from note_models import MeetingDetails, NoteType, ParsedTask
from trigger_tags import canonical_tag, strip_trigger_tag

logger = logging.getLogger(__name__)


_ATTENDEE_SPLIT_RE = re.compile(r"\s*(?:,|;|&|\band\b)\s*", re.IGNORECASE)
_ALL_DAY = "(all day)"
_SINGLE_VALUE_FIELDS = ("subject", "location")
# Sections inside meeting notes; each runs to the next header.
_MEETING_SECTION_RE = re.compile(
    r"^(agenda|action items?|actions|next steps|discussion|decisions)\s*:\s*(.*)$", re.IGNORECASE
)
_ACTION_SECTIONS = ("action item", "action items", "actions", "next steps")


def split_attendees(value: str) -> List[str]:
    """'Ana, Bo and Cy' -> ['Ana', 'Bo', 'Cy']"""
    return [name.strip() for name in _ATTENDEE_SPLIT_RE.split(value or "") if name.strip()]


def _add_attendees(details: MeetingDetails, value: str) -> None:
    seen = {name.lower() for name in details.attendees}
    for name in split_attendees(value):
        if name.lower() not in seen:
            details.attendees.append(name)
            seen.add(name.lower())


def _fill_when(details: MeetingDetails, text: str, reference: date, with_time: bool = True) -> None:
    if not details.date:
        found = find_date(text, reference)
        if found:
            details.date = format_date(found.value)
    if with_time and not details.time:
        found_time = find_time(text)
        if found_time:
            details.time = clock_string(found_time.hour, found_time.minute)


def _use_when(details: MeetingDetails, value: str, reference: date) -> bool:
    """
    Fill date and time from a "When:" value. Returns False and changes nothing
    when the value names no date or time, or names one that is already set.
    """
    found_date = find_date(value, reference)
    found_time = find_time(value)
    if found_date is None and found_time is None:
        return False
    if (found_date and details.date) or (found_time and details.time):
        return False
    if found_date:
        details.date = format_date(found_date.value)
    if found_time:
        details.time = clock_string(found_time.hour, found_time.minute)
    return True


def _setter(attr: str):
    def apply(details: MeetingDetails, value: str) -> None:
        setattr(details, attr, value)
    return apply


# Ordered, first match wins. "When" lines are handled by the caller because
# they need the note's creation date.
LABEL_RULES: List[LineRule] = [
    LineRule("subject", label_matcher("what:", "title:", "subject:", "event:", "meeting:"), _setter("subject")),
    LineRule("location", label_matcher("where:", "location:", "at:", "place:"), _setter("location")),
    LineRule("when", label_matcher("when:", "date:", "time:"), lambda details, value: None),
    LineRule("attendees", label_matcher("attendees:", "with:", "who:", "participants:"), _add_attendees),
]


def extract_event(content: Optional[str], reference: Union[date, datetime, None] = None) -> MeetingDetails:
    """
    Labeled lines first ("What:", "Where:", "When:", "Attendees:"); otherwise
    the first line is the title. Date and time come from "When:" lines, then
    from the title and notes. An entry with no date falls on the reference day.
    A repeated "What:"/"Where:" or a "When:" that cannot be used is kept in
    the notes as written.
    """
    ref = as_date(reference)
    details = MeetingDetails()
    all_day = False
    # Labeled lines that could not be used land here too, flagged so they
    # never become the title.
    free: List[str] = []
    demoted: List[bool] = []

    for line in split_lines(strip_trigger_tag(content)):
        if not line:
            if free:
                free.append(line)
                demoted.append(False)
            continue
        found = first_match(LABEL_RULES, line)
        if found is None:
            free.append(line)
            demoted.append(False)
            continue
        rule, value = found
        if not value:
            continue
        if rule.name == "when":
            used = _use_when(details, value, ref)
            all_day = all_day or (used and _ALL_DAY in value.lower())
        elif rule.name in _SINGLE_VALUE_FIELDS:
            used = not getattr(details, rule.name)
            if used:
                rule.apply(details, value)
        else:
            rule.apply(details, value)
            used = True
        if not used:
            free.append(line)
            demoted.append(True)

    if not details.subject:
        for i, line in enumerate(free):
            if line and not demoted[i]:
                details.subject = line
                del free[i]
                del demoted[i]
                break

    # An "(all day)" entry keeps its empty time.
    for text in [details.subject] + free:
        if details.date and (details.time or all_day):
            break
        if text:
            _fill_when(details, text, ref, with_time=not all_day)

    if not details.date:
        details.date = format_date(ref)
    details.notes = join_block(free)
    logger.debug("event: %r on %s %s", details.subject, details.date, details.time or _ALL_DAY)
    return details


def when_line(details: MeetingDetails) -> str:
    parts = ["When:"]
    if details.date:
        parts.append(details.date)
    if details.time:
        parts.append(f"at {display_time(details.time)}")
    else:
        parts.append(_ALL_DAY)
    return " ".join(parts)


def serialize_event(details: MeetingDetails, note_type: NoteType = NoteType.EVENT) -> str:
    headers: List[str] = []
    subject = (details.subject or "").strip()
    if subject:
        headers.append(f"What: {subject}")
    # "When" is written even for all-day entries.
    headers.append(when_line(details))
    location = (details.location or "").strip()
    if location:
        headers.append(f"Where: {location}")
    attendees = [a.strip() for a in details.attendees if (a or "").strip()]
    if attendees:
        headers.append("Attendees: " + ", ".join(attendees))
    return compose(headers, (details.notes or "").strip(), tag=canonical_tag(note_type))


def _meeting_sections(notes: str) -> Dict[str, List[str]]:
    sections: Dict[str, List[str]] = {}
    current: Optional[str] = None
    for line in split_lines(notes):
        m = _MEETING_SECTION_RE.match(line)
        if m:
            current = m.group(1).lower()
            sections.setdefault(current, [])
            if m.group(2).strip():
                sections[current].append(m.group(2).strip())
            continue
        if current is not None:
            sections[current].append(line)
    return sections


def meeting_agenda(notes: Optional[str]) -> str:
    """Text under "Agenda:" up to the next section header ("Action items:", "Discussion:")."""
    return join_block(_meeting_sections(notes or "").get("agenda", []))


def action_items(notes: Optional[str]) -> List[ParsedTask]:
    """Checkbox-grammar items under "Action items:"/"Next steps:", in note order."""
    items: List[ParsedTask] = []
    for name, lines in _meeting_sections(notes or "").items():
        if name not in _ACTION_SECTIONS:
            continue
        for line in lines:
            task = parse_task_line(line)
            if task is not None:
                items.append(task)
    return items
