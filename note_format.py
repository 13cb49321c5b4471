"""
Load and save canonical note text.

load_note() strips the leading trigger tag, settles the note type and hands
the cleaned content to that type's extractor. serialize() is the inverse and
save_note() writes the result back onto the Note record.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Union

from contact_format import extract_contact, serialize_contact
from email_format import extract_email, serialize_email
from event_format import extract_event, serialize_event
from expense_format import extract_expense, serialize_expense
from line_rules import compose
from list_format import extract_tasks, serialize_tasks
from note_models import (
    EmailFields,
    ExpenseFields,
    MeetingDetails,
    Note,
    NoteType,
    ParsedContact,
    ParsedRecipe,
    ReminderFields,
)
from recipe_format import extract_recipe, serialize_recipe
from reminder_format import extract_reminder, serialize_reminder
from trigger_tags import canonical_tag, extract_trigger_tag, note_type_for_tag, strip_trigger_tag

logger = logging.getLogger(__name__)

Reference = Union[date, datetime, None]


@dataclass(frozen=True)
class NoteFormat:
    """One extractor/serializer pair and the state type they exchange."""
    extract: Callable[[str, Reference], Any]
    serialize: Callable[[Any, NoteType], str]
    state_type: type


@dataclass
class LoadedNote:
    note_type: NoteType
    tag: Optional[str]
    content: str
    state: Any


def _passthrough_serialize(text: str, note_type: NoteType) -> str:
    return compose([], (text or "").strip(), tag=canonical_tag(note_type))


FORMATS: Dict[NoteType, NoteFormat] = {
    NoteType.TODO: NoteFormat(lambda c, r: extract_tasks(c), serialize_tasks, list),
    NoteType.SHOPPING: NoteFormat(lambda c, r: extract_tasks(c), serialize_tasks, list),
    NoteType.CONTACT: NoteFormat(lambda c, r: extract_contact(c), lambda s, t: serialize_contact(s), ParsedContact),
    NoteType.RECIPE: NoteFormat(lambda c, r: extract_recipe(c), lambda s, t: serialize_recipe(s), ParsedRecipe),
    NoteType.EVENT: NoteFormat(extract_event, serialize_event, MeetingDetails),
    NoteType.MEETING: NoteFormat(extract_event, serialize_event, MeetingDetails),
    NoteType.EXPENSE: NoteFormat(lambda c, r: extract_expense(c), lambda s, t: serialize_expense(s), ExpenseFields),
    NoteType.REMINDER: NoteFormat(extract_reminder, lambda s, t: serialize_reminder(s), ReminderFields),
    NoteType.EMAIL: NoteFormat(lambda c, r: extract_email(c), lambda s, t: serialize_email(s), EmailFields),
    # Free text: the cleaned content is the whole state.
    NoteType.IDEA: NoteFormat(lambda c, r: strip_trigger_tag(c).strip(), _passthrough_serialize, str),
}


def resolve_type(content: Optional[str], note_type: Union[NoteType, str, None] = None) -> NoteType:
    """
    The leading tag decides; without one the stored type hint is used.
    A manual classification on the note outranks both (see load_note).
    """
    found = extract_trigger_tag(content)
    if found is not None:
        tagged = note_type_for_tag(found.tag)
        if tagged is not None:
            return tagged
    return NoteType.parse(note_type)


def extract(note_type: Union[NoteType, str], content: Optional[str], reference: Reference = None) -> Any:
    """
    Structured state for content of a known type. Never raises for string input.
    Each extractor strips the leading tag itself, exactly once, so a body line
    that looks like a tag stays body. General notes are kept verbatim.
    """
    kind = NoteType.parse(note_type)
    fmt = FORMATS.get(kind)
    if fmt is None:
        return content or ""
    return fmt.extract(content or "", reference)


def serialize(note_type: Union[NoteType, str], state: Any) -> str:
    """
    Canonical text for a structured state. General notes come back verbatim.
    Raises ValueError when the state does not belong to the type.
    """
    kind = NoteType.parse(note_type)
    fmt = FORMATS.get(kind)
    if fmt is None:
        if not isinstance(state, str):
            raise ValueError(f"{kind.value} notes are plain text, got {type(state).__name__}")
        return state
    if not isinstance(state, fmt.state_type):
        raise ValueError(f"{kind.value} notes need {fmt.state_type.__name__}, got {type(state).__name__}")
    return fmt.serialize(state, kind)


def load_note(note: Note) -> LoadedNote:
    """
    Open a note for editing. A user's manual type choice wins over the tag,
    the tag wins over the stored type string.
    """
    found = extract_trigger_tag(note.content)
    if note.classification is not None and note.classification.is_manual:
        note_type = note.classification.type
    else:
        note_type = resolve_type(note.content, note.note_type)

    content = found.cleaned_content if found is not None else (note.content or "")
    state = extract(note_type, note.content, note.created_at)
    logger.debug("loaded %s note (tag=%r)", note_type.value, found.tag if found else None)
    return LoadedNote(note_type=note_type, tag=found.tag if found else None, content=content, state=state)


def save_note(note: Note, note_type: Union[NoteType, str], state: Any) -> Note:
    """Write the serialized state back onto the note; the note owns everything else."""
    kind = NoteType.parse(note_type)
    note.content = serialize(kind, state)
    note.note_type = kind.value
    return note
