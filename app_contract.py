"""
Stable app-level constants used by the extractors, the intake runtime and tests.
Keep this file dependency-free (no watchdog/etc).
"""

APP_NAME = "NoteFormats"
APP_VERSION = "v0.3.0"  # bump when you ship

# Trigger vocabulary, one entry per structured note type. The first trigger of
# each list is the one the serializers write back.
NOTE_TYPE_TRIGGERS = {
    "todo": ["#todo#", "#to-do#", "#tasks#", "#task#"],
    "shopping": ["#shopping#", "#shop#", "#grocery#", "#groceries#", "#list#"],
    "contact": ["#contact#", "#person#", "#phone#"],
    "recipe": ["#recipe#", "#cook#", "#bake#"],
    "event": ["#event#", "#appointment#", "#schedule#", "#appt#"],
    "meeting": ["#meeting#", "#notes#", "#minutes#"],
    "expense": ["#expense#", "#receipt#", "#spent#", "#paid#"],
    "reminder": ["#reminder#", "#remind#", "#remindme#"],
    "email": ["#email#", "#mail#"],
    "idea": ["#idea#", "#thought#", "#note-to-self#", "#notetoself#"],
}

# A detected phone/email/amount only swallows its line when the matched text
# is longer than this share of the line.
CONTACT_CONSUME_RATIO = 0.5
EXPENSE_CONSUME_RATIO = 0.5
REMINDER_CONSUME_RATIO = 0.5

# Lines shorter than this that are mostly a bare dollar amount never reach notes.
EXPENSE_BARE_AMOUNT_MAX_LEN = 15

# Classification confidence bands.
HIGH_CONFIDENCE = 0.85
LOW_CONFIDENCE = 0.70
CONFIRMATION_THRESHOLD = 0.80
