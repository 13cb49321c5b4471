import app_contract as ac
from note_models import NoteType


def test_trigger_keys_are_note_types():
    values = {t.value for t in NoteType}
    for key in ac.NOTE_TYPE_TRIGGERS:
        assert key in values
    assert NoteType.GENERAL.value not in ac.NOTE_TYPE_TRIGGERS


def test_triggers_are_unique_and_hash_wrapped():
    seen = set()
    for triggers in ac.NOTE_TYPE_TRIGGERS.values():
        assert triggers
        for trigger in triggers:
            assert trigger.startswith("#") and trigger.endswith("#")
            assert trigger == trigger.lower()
            assert trigger not in seen
            seen.add(trigger)


def test_confidence_bands_are_ordered():
    assert 0.0 < ac.LOW_CONFIDENCE < ac.CONFIRMATION_THRESHOLD < ac.HIGH_CONFIDENCE <= 1.0


def test_consume_ratios_are_fractions():
    for ratio in (ac.CONTACT_CONSUME_RATIO, ac.EXPENSE_CONSUME_RATIO, ac.REMINDER_CONSUME_RATIO):
        assert 0.0 < ratio < 1.0
