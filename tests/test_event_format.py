from datetime import datetime

from event_format import action_items, extract_event, meeting_agenda, serialize_event, split_attendees
from note_models import MeetingDetails, NoteType, ParsedTask

# A Sunday.
REF = datetime(2026, 10, 18, 9, 0)


def test_labeled_event():
    details = extract_event(
        "Dentist appointment\nWhen: tomorrow at 3pm\nWhere: Main St Clinic\nBring insurance card",
        REF,
    )
    assert details.subject == "Dentist appointment"
    assert details.date == "2026-10-19"
    assert details.time == "15:00"
    assert details.location == "Main St Clinic"
    assert details.notes == "Bring insurance card"


def test_serialize_event():
    details = MeetingDetails(
        subject="Dentist appointment",
        location="Main St Clinic",
        date="2026-10-19",
        time="15:00",
        notes="Bring insurance card",
    )
    assert serialize_event(details) == (
        "#event#\n"
        "What: Dentist appointment\n"
        "When: 2026-10-19 at 3:00 PM\n"
        "Where: Main St Clinic\n"
        "\n"
        "Bring insurance card"
    )


def test_all_day_event_still_writes_when():
    details = extract_event("Team offsite\nDate: Oct 30, 2026", REF)
    assert details.date == "2026-10-30"
    assert details.is_all_day
    assert "When: 2026-10-30 (all day)" in serialize_event(details)


def test_missing_date_falls_on_creation_day():
    details = extract_event("Lunch with Sam", REF)
    assert details.subject == "Lunch with Sam"
    assert details.date == "2026-10-18"
    assert details.time == ""


def test_time_in_title_is_picked_up():
    details = extract_event("Standup 9:30am\nfriday", REF)
    assert details.subject == "Standup 9:30am"
    assert details.time == "09:30"
    assert details.date == "2026-10-23"
    assert details.notes == "friday"


def test_midnight_and_noon():
    assert extract_event("When: 10/20/2026 12am", REF).time == "00:00"
    assert extract_event("When: 10/20/2026 12pm", REF).time == "12:00"


def test_label_aliases():
    details = extract_event("Title: Board meeting\nLocation: Room 4\nTime: 2:15 pm", REF)
    assert details.subject == "Board meeting"
    assert details.location == "Room 4"
    assert details.time == "14:15"


def test_meeting_attendees_are_split_and_deduplicated():
    details = extract_event("What: Sprint review\nAttendees: Ana, Bo and Cy\nWith: ana, Dee", REF)
    assert details.attendees == ["Ana", "Bo", "Cy", "Dee"]

    text = serialize_event(details, NoteType.MEETING)
    assert text.startswith("#meeting#\nWhat: Sprint review\n")
    assert "Attendees: Ana, Bo, Cy, Dee" in text


def test_split_attendees():
    assert split_attendees("Ana & Bo; Cy") == ["Ana", "Bo", "Cy"]
    assert split_attendees("") == []


def test_round_trip_keeps_details():
    first = extract_event("Dinner with Sam tomorrow at 7pm\nBring wine\n\nAsk about trip", REF)
    again = extract_event(serialize_event(first), REF)
    assert again == first
    assert first.notes == "Bring wine\n\nAsk about trip"


def test_when_line_without_a_date_stays_in_notes():
    details = extract_event("Picnic\nWhen: after lunch", REF)
    assert details.subject == "Picnic"
    assert details.date == "2026-10-18"
    assert details.notes == "When: after lunch"
    assert extract_event(serialize_event(details), REF) == details


def test_unusable_when_line_never_becomes_the_title():
    details = extract_event("When: after lunch\nPicnic", REF)
    assert details.subject == "Picnic"
    assert details.notes == "When: after lunch"


def test_repeated_labels_fall_through_to_notes():
    details = extract_event("What: Lunch\nWhat: Bring salad\nWhere: Cafe\nWhere: Patio", REF)
    assert details.subject == "Lunch"
    assert details.location == "Cafe"
    assert details.notes == "What: Bring salad\nWhere: Patio"
    assert extract_event(serialize_event(details), REF) == details


def test_second_when_date_is_kept_in_notes():
    details = extract_event("Call\nWhen: tomorrow\nWhen: friday", REF)
    assert details.date == "2026-10-19"
    assert details.notes == "When: friday"


def test_all_day_survives_a_time_in_the_notes():
    details = MeetingDetails(subject="Offsite", date="2026-10-20", notes="bus leaves at 7am")
    assert extract_event(serialize_event(details), REF) == details


def test_time_in_notes_is_used_without_all_day_marker():
    details = extract_event("Offsite\nWhen: 10/20/2026\nbus leaves at 7am", REF)
    assert details.time == "07:00"


MINUTES = """Q3 planning
Agenda: budget
hiring
Action items:
[ ] send deck
[x] book room
- follow up with Bo
Discussion: went long"""


def test_meeting_agenda_and_action_items():
    details = extract_event(MINUTES, REF)
    assert details.subject == "Q3 planning"
    assert meeting_agenda(details.notes) == "budget\nhiring"
    assert action_items(details.notes) == [
        ParsedTask("send deck", False),
        ParsedTask("book room", True),
        ParsedTask("follow up with Bo", False),
    ]


def test_notes_without_sections():
    assert meeting_agenda("just chatting") == ""
    assert action_items("") == []
