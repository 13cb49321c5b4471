from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from note_models import NoteType, ParsedTask
from line_rules import compose, split_lines
from trigger_tags import canonical_tag, strip_trigger_tag


# Handwritten/OCR markers we peel off the front of a list line.
# Bullets come first so "- [x] milk" still reads as a checked item.
_BULLET_RE = re.compile(r"^[-•*·∙◦](?=\s|$)\s*")
_CHECKBOX_PREFIXES = tuple(sorted(
    ("[ ]", "[x]", "[]", "( )", "(x)", "()", "✓", "✔", "☑", "☒", "☐"),
    key=len,
    reverse=True,
))
_CHECKED_PREFIXES = ("[x]", "(x)", "✓", "✔", "☑", "☒")
_NUM_RE = re.compile(r"^\d+[.)]\s*")

# "3 lbs chicken", "1 gallon milk"; a bare count ("2 apples") is the fallback.
_SHOPPING_UNIT_QTY_RE = re.compile(
    r"^(\d+(?:\.\d+)?\s+(?:lbs?|oz|kg|g|gallon|quart|pint|cup|package|bag|box|can)s?)\s+(.+)$",
    re.IGNORECASE,
)
_SHOPPING_COUNT_RE = re.compile(r"^(\d+)\s+(.+)$")

# Aisle keywords, checked in order: "ice cream" is frozen before "cream" is dairy.
SHOPPING_CATEGORIES = (
    ("frozen", ("ice cream", "frozen", "pizza")),
    ("produce", ("apple", "banana", "orange", "lettuce", "tomato", "carrot", "onion", "potato", "fruit", "vegetable")),
    ("dairy", ("milk", "cheese", "yogurt", "butter", "cream", "egg")),
    ("meat", ("chicken", "beef", "pork", "fish", "turkey", "bacon", "sausage")),
    ("bakery", ("bread", "bagel", "donut", "cake", "pastry")),
    ("pantry", ("rice", "pasta", "flour", "sugar", "oil", "cereal", "can")),
    ("household", ("detergent", "soap", "paper towel", "toilet paper", "cleaner")),
)
_CATEGORY_PATTERNS = [
    (category, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")(?:e?s)?\b", re.IGNORECASE))
    for category, keywords in SHOPPING_CATEGORIES
]


def _strip_prefix(s: str, prefixes: Iterable[str]) -> Tuple[str, Optional[str]]:
    lowered = s.lower()
    for prefix in prefixes:
        if lowered.startswith(prefix):
            return s[len(prefix):].strip(), prefix
    return s, None


def parse_task_line(raw_line: str) -> Optional[ParsedTask]:
    """
    "[x] Buy milk" -> ParsedTask("Buy milk", True)
    "- Buy eggs"   -> ParsedTask("Buy eggs", False)
    "2. Call mom"  -> ParsedTask("Call mom", False)
    Returns None when nothing is left after the markers.
    """
    s = (raw_line or "").strip()
    if not s:
        return None

    s = _BULLET_RE.sub("", s, count=1)
    s, checkbox = _strip_prefix(s, _CHECKBOX_PREFIXES)
    is_completed = checkbox in _CHECKED_PREFIXES

    if checkbox is None:
        s = _NUM_RE.sub("", s, count=1).strip()
    if not s:
        return None
    return ParsedTask(text=s, is_completed=is_completed)


def extract_tasks(content: Optional[str]) -> List[ParsedTask]:
    """One task per non-empty line; shopping items use the same grammar."""
    tasks: List[ParsedTask] = []
    for line in split_lines(strip_trigger_tag(content)):
        task = parse_task_line(line)
        if task is not None:
            tasks.append(task)
    return tasks


def task_line(task: ParsedTask) -> str:
    checkbox = "[x]" if task.is_completed else "[ ]"
    return f"{checkbox} {task.text.strip()}"


def serialize_tasks(tasks: Iterable[ParsedTask], note_type: NoteType = NoteType.TODO) -> str:
    lines = [task_line(t) for t in tasks if (t.text or "").strip()]
    return compose(lines, "", tag=canonical_tag(note_type))


def completion_progress(tasks: List[ParsedTask]) -> float:
    if not tasks:
        return 0.0
    return sum(1 for t in tasks if t.is_completed) / len(tasks)


def split_quantity(text: str) -> Tuple[Optional[str], str]:
    """
    "3 lbs chicken" -> ("3 lbs", "chicken"), "2 apples" -> ("2", "apples"),
    "milk" -> (None, "milk")
    """
    s = (text or "").strip()
    m = _SHOPPING_UNIT_QTY_RE.match(s) or _SHOPPING_COUNT_RE.match(s)
    if not m:
        return None, s
    return m.group(1), m.group(2).strip()


def shopping_category(text: str) -> Optional[str]:
    _, name = split_quantity(text)
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(name):
            return category
    return None
