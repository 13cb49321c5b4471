from __future__ import annotations

import re
from typing import Dict, Optional

from app_contract import NOTE_TYPE_TRIGGERS
from note_models import NoteType, TriggerTag


# First non-whitespace token of the content. A tag only counts when it is that
# token, so "#todo#" halfway down a note is plain text.
_LEADING_TOKEN_RE = re.compile(r"\A\s*(\S+)")
# What separates the tag from the body: trailing blanks on the tag line plus
# exactly one line break.
_TAG_SEPARATOR_RE = re.compile(r"\A[ \t]*(?:\r\n|\n|\r)?")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def _build_index() -> Dict[str, NoteType]:
    index: Dict[str, NoteType] = {}
    for type_name, triggers in NOTE_TYPE_TRIGGERS.items():
        note_type = NoteType.parse(type_name)
        for trigger in triggers:
            index[trigger.lower()] = note_type
    return index


_TRIGGER_INDEX = _build_index()


def extract_trigger_tag(content: Optional[str]) -> Optional[TriggerTag]:
    """
    Split a leading "#type#" marker off the content.
    Example: "#todo#\\n[ ] milk" -> TriggerTag(tag="#todo#", cleaned_content="[ ] milk")
    Returns None when the first token is not a known trigger.
    """
    s = content or ""
    m = _LEADING_TOKEN_RE.match(s)
    if not m:
        return None
    token = m.group(1)
    if token.lower() not in _TRIGGER_INDEX:
        return None
    rest = s[m.end():]
    rest = rest[_TAG_SEPARATOR_RE.match(rest).end():]
    return TriggerTag(tag=token, cleaned_content=rest)


def strip_trigger_tag(content: Optional[str]) -> str:
    """Content without its leading tag; tag-less content comes back unchanged."""
    found = extract_trigger_tag(content)
    if found is None:
        return content or ""
    return found.cleaned_content


def note_type_for_tag(tag: Optional[str]) -> Optional[NoteType]:
    return _TRIGGER_INDEX.get((tag or "").strip().lower())


def detect_note_type(content: Optional[str]) -> Optional[NoteType]:
    """Type named by the leading tag, or None (inference happens elsewhere)."""
    found = extract_trigger_tag(content)
    if found is None:
        return None
    return note_type_for_tag(found.tag)


def canonical_tag(note_type: NoteType) -> Optional[str]:
    """The tag serializers write for this type; None for types without one."""
    triggers = NOTE_TYPE_TRIGGERS.get(NoteType.parse(note_type).value)
    if not triggers:
        return None
    return triggers[0]


def strip_all_trigger_tags(content: Optional[str], note_type: NoteType) -> str:
    """
    Remove every trigger of note_type, wherever it appears.
    Used when a note changes type so stale markers do not survive in the body.
    """
    s = content or ""
    triggers = NOTE_TYPE_TRIGGERS.get(NoteType.parse(note_type).value) or []
    if not triggers:
        return s
    for trigger in triggers:
        s = re.sub(re.escape(trigger), "", s, flags=re.IGNORECASE)
    s = _BLANK_RUN_RE.sub("\n\n", s)
    return s.strip()
