from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from app_contract import REMINDER_CONSUME_RATIO
from date_phrases import DateMatch, TimeMatch, as_date, clock_string, display_time, find_date, find_time, format_date
from line_rules import compose, join_block, label_value, split_lines
from note_models import NoteType, ReminderFields
from trigger_tags import canonical_tag, strip_trigger_tag

logger = logging.getLogger(__name__)


_DUE_LABELS = ("due:", "remind:", "remind me:", "when:")


def _due_phrases(text: str, reference: date):
    """Date and time phrases in the text plus how many characters they cover."""
    found_date = find_date(text, reference)
    found_time = find_time(text)
    matches = [m for m in (found_date, found_time) if m is not None]
    if not matches:
        return None, None, 0
    covered = sum(m.end - m.start for m in matches)
    return found_date, found_time, covered


def _set_due(
    fields: ReminderFields,
    found_date: Optional[DateMatch],
    found_time: Optional[TimeMatch],
    reference: date,
) -> None:
    # A bare time means today, relative to when the note was written.
    fields.due_date = format_date(found_date.value if found_date else reference)
    if found_time is not None:
        fields.due_time = clock_string(found_time.hour, found_time.minute)


def extract_reminder(
    content: Optional[str],
    reference: Union[date, datetime, None] = None,
    consume_ratio: float = REMINDER_CONSUME_RATIO,
) -> ReminderFields:
    """
    "Due:"/"Remind:"/"When:" lines set the due date first. Without one, the
    first line naming a date or time does; that line is dropped from the text
    only when it is mostly the phrase ("tomorrow 3pm"). The rest is the text.
    """
    ref = as_date(reference)
    fields = ReminderFields()
    lines = split_lines(strip_trigger_tag(content))
    consumed = set()

    for i, line in enumerate(lines):
        value = label_value(line, _DUE_LABELS)
        if not value:
            continue
        found_date, found_time, _ = _due_phrases(value, ref)
        if found_date or found_time:
            _set_due(fields, found_date, found_time, ref)
            consumed.add(i)
            break

    if not fields.has_due_date:
        for i, line in enumerate(lines):
            if not line:
                continue
            found_date, found_time, covered = _due_phrases(line, ref)
            if not covered:
                continue
            _set_due(fields, found_date, found_time, ref)
            if covered > len(line) * consume_ratio:
                consumed.add(i)
            break

    fields.text = join_block(line for i, line in enumerate(lines) if i not in consumed)
    logger.debug("reminder: due=%s %s", fields.due_date, fields.due_time)
    return fields


def due_line(fields: ReminderFields) -> str:
    if fields.due_time:
        return f"Due: {fields.due_date} at {display_time(fields.due_time)}"
    return f"Due: {fields.due_date}"


def serialize_reminder(fields: ReminderFields) -> str:
    headers: List[str] = []
    if fields.has_due_date:
        headers.append(due_line(fields))
    return compose(headers, (fields.text or "").strip(), tag=canonical_tag(NoteType.REMINDER))
