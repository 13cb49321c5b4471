from datetime import datetime

import pytest

import note_format as nf
from note_models import (
    Classification,
    ClassificationMethod,
    MeetingDetails,
    Note,
    NoteType,
    ParsedContact,
    ParsedTask,
)


def test_every_structured_type_has_a_format():
    for note_type in NoteType:
        if note_type is NoteType.GENERAL:
            continue
        assert note_type in nf.FORMATS


def test_resolve_type_prefers_the_tag():
    assert nf.resolve_type("#todo#\nmilk", "recipe") is NoteType.TODO
    assert nf.resolve_type("milk", "recipe") is NoteType.RECIPE
    assert nf.resolve_type("milk", None) is NoteType.GENERAL
    assert nf.resolve_type("milk", "bogus") is NoteType.GENERAL


def test_load_note_strips_tag_and_extracts():
    loaded = nf.load_note(Note(content="#shopping#\n- milk", note_type="general"))
    assert loaded.note_type is NoteType.SHOPPING
    assert loaded.tag == "#shopping#"
    assert loaded.content == "- milk"
    assert loaded.state == [ParsedTask("milk", False)]


def test_manual_classification_wins_over_the_tag():
    note = Note(
        content="#todo#\nmilk",
        note_type="todo",
        classification=Classification(NoteType.SHOPPING, ClassificationMethod.MANUAL),
    )
    loaded = nf.load_note(note)
    assert loaded.note_type is NoteType.SHOPPING
    assert loaded.state == [ParsedTask("milk", False)]


def test_relative_dates_use_the_creation_time():
    note = Note(content="#event#\nLunch tomorrow", created_at=datetime(2026, 10, 18, 12, 0))
    assert nf.load_note(note).state.date == "2026-10-19"


def test_save_note_writes_canonical_text():
    note = Note(content="#todo#\n- milk")
    loaded = nf.load_note(note)
    nf.save_note(note, loaded.note_type, loaded.state)
    assert note.content == "#todo#\n[ ] milk"
    assert note.note_type == "todo"


def test_general_notes_are_verbatim():
    assert nf.extract(NoteType.GENERAL, "hello\n  world") == "hello\n  world"
    assert nf.serialize("general", "hello\n  world") == "hello\n  world"


def test_idea_notes_keep_text_behind_their_tag():
    assert nf.extract("idea", "#idea#\n  big thought ") == "big thought"
    assert nf.serialize(NoteType.IDEA, "big thought") == "#idea#\nbig thought"


def test_serialize_rejects_the_wrong_state():
    with pytest.raises(ValueError):
        nf.serialize(NoteType.CONTACT, [])
    with pytest.raises(ValueError):
        nf.serialize(NoteType.EVENT, ParsedContact())
    with pytest.raises(ValueError):
        nf.serialize(NoteType.GENERAL, MeetingDetails())


def test_meeting_and_event_share_a_format_but_not_a_tag():
    details = MeetingDetails(subject="Sync", date="2026-10-20")
    assert nf.serialize(NoteType.EVENT, details).startswith("#event#\n")
    assert nf.serialize(NoteType.MEETING, details).startswith("#meeting#\n")


def test_only_the_leading_tag_is_stripped():
    assert nf.extract(NoteType.RECIPE, "#recipe#\n#notes#").title == "#notes#"
    assert nf.extract(NoteType.IDEA, "#idea#\n#todo#\nbike rack") == "#todo#\nbike rack"
    assert nf.extract(NoteType.GENERAL, "#todo#\n#todo#\nNote: foo") == "#todo#\n#todo#\nNote: foo"
