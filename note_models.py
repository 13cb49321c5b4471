from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from app_contract import CONFIRMATION_THRESHOLD, HIGH_CONFIDENCE, LOW_CONFIDENCE


class NoteType(str, Enum):
    GENERAL = "general"
    TODO = "todo"
    SHOPPING = "shopping"
    CONTACT = "contact"
    RECIPE = "recipe"
    EVENT = "event"
    MEETING = "meeting"
    EXPENSE = "expense"
    REMINDER = "reminder"
    EMAIL = "email"
    IDEA = "idea"

    @classmethod
    def parse(cls, value: Optional[str]) -> "NoteType":
        """Unknown or empty strings fall back to GENERAL."""
        s = (value or "").strip().lower()
        for member in cls:
            if member.value == s:
                return member
        return cls.GENERAL


class ClassificationMethod(str, Enum):
    EXPLICIT = "explicit"
    LLM = "llm"
    HEURISTIC = "heuristic"
    VOICE_COMMAND = "voiceCommand"
    CONTENT_ANALYSIS = "contentAnalysis"
    DEFAULT = "default"
    MANUAL = "manual"

    @property
    def display_name(self) -> str:
        return {
            "explicit": "Hashtag",
            "llm": "AI Detection",
            "heuristic": "Pattern Match",
            "voiceCommand": "Voice Command",
            "contentAnalysis": "Content Analysis",
            "default": "Default",
            "manual": "Manual",
        }[self.value]

    @property
    def is_automatic(self) -> bool:
        # A tag is explicit, a manual pick is the user's; neither is a guess.
        return self not in (ClassificationMethod.EXPLICIT, ClassificationMethod.MANUAL)


@dataclass(frozen=True)
class Classification:
    type: NoteType
    method: ClassificationMethod
    confidence: Optional[float] = None
    reasoning: Optional[str] = None

    def __post_init__(self) -> None:
        if self.confidence is not None and not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence!r}")

    @property
    def is_manual(self) -> bool:
        return self.method == ClassificationMethod.MANUAL

    @property
    def is_high_confidence(self) -> bool:
        return (self.confidence or 0.0) >= HIGH_CONFIDENCE

    @property
    def is_low_confidence(self) -> bool:
        return (self.confidence or 0.0) < LOW_CONFIDENCE

    @property
    def should_request_confirmation(self) -> bool:
        return (self.confidence or 0.0) < CONFIRMATION_THRESHOLD and self.method not in (
            ClassificationMethod.EXPLICIT,
            ClassificationMethod.MANUAL,
        )

    @property
    def confidence_percentage(self) -> str:
        if self.confidence is None:
            return "n/a"
        return f"{round(self.confidence * 100)}%"


@dataclass(frozen=True)
class TriggerTag:
    tag: str
    cleaned_content: str


@dataclass
class Note:
    """The persisted note record as seen from this side: we only read and write content."""
    content: str = ""
    note_type: str = NoteType.GENERAL.value
    classification: Optional[Classification] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class ParsedTask:
    text: str
    is_completed: bool = False


@dataclass
class ParsedContact:
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    job_title: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    street_address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    notes: str = ""

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def initials(self) -> str:
        first = self.first_name[:1].upper()
        last = self.last_name[:1].upper()
        return first + last

    @property
    def has_address(self) -> bool:
        return any((self.street_address, self.city, self.state, self.zip_code))

    @property
    def formatted_address(self) -> str:
        parts = []
        if self.street_address:
            parts.append(self.street_address)
        # "Springfield, IL 62704"
        locality = ", ".join(p for p in (self.city, self.state) if p)
        locality = " ".join(p for p in (locality, self.zip_code) if p)
        if locality:
            parts.append(locality)
        return "\n".join(parts)


@dataclass
class ParsedIngredient:
    original_text: str
    quantity: Optional[float] = None
    display_quantity: Optional[str] = None
    name: str = ""


@dataclass
class ParsedRecipe:
    title: str = ""
    servings: str = ""
    prep_time: str = ""
    cook_time: str = ""
    ingredients: List[ParsedIngredient] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)
    notes: str = ""


@dataclass
class MeetingDetails:
    """
    date is ISO "YYYY-MM-DD", time is 24h "HH:MM" or "" for an all-day entry.
    """
    subject: str = ""
    location: str = ""
    date: str = ""
    time: str = ""
    notes: str = ""
    attendees: List[str] = field(default_factory=list)

    @property
    def is_all_day(self) -> bool:
        return not self.time


@dataclass
class ExpenseFields:
    amount: str = ""
    vendor: str = ""
    category: str = ""
    date: str = ""
    notes: str = ""


@dataclass
class ReminderFields:
    text: str = ""
    due_date: str = ""
    due_time: str = ""

    @property
    def has_due_date(self) -> bool:
        return bool(self.due_date)


@dataclass
class EmailFields:
    to: str = ""
    cc: str = ""
    bcc: str = ""
    subject: str = ""
    body: str = ""
