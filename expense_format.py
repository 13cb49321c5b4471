from __future__ import annotations

import logging
import re
from typing import List, Optional

from app_contract import EXPENSE_BARE_AMOUNT_MAX_LEN, EXPENSE_CONSUME_RATIO
from date_phrases import find_absolute_date, format_date
from line_rules import LineRule, compose, covers_most, first_match, join_block, label_matcher, split_lines
from note_models import ExpenseFields, NoteType
from trigger_tags import canonical_tag, strip_trigger_tag

logger = logging.getLogger(__name__)


# "$12", "$ 4.50", or a bare "12.50"
_DOLLAR_RE = re.compile(r"\$\s*\d[\d,]*(?:\.\d+)?|\b\d+\.\d{2}\b")
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
_NUMERIC_AMOUNT_RE = re.compile(r"^\d+(?:\.\d+)?$")


def parse_amount(value: str) -> str:
    """
    "$1,200.50" -> "1200.50", "12 dollars" -> "12".
    Values without a number are kept as written.
    """
    s = (value or "").strip()
    m = _NUMBER_RE.search(s)
    if not m:
        return s
    return m.group(0).replace(",", "")


def parse_expense_date(value: str) -> str:
    """Written dates become ISO; anything else is kept as written."""
    s = (value or "").strip()
    found = find_absolute_date(s)
    if found is None:
        return s
    return format_date(found.value)


def is_numeric_amount(amount: str) -> bool:
    return bool(_NUMERIC_AMOUNT_RE.match((amount or "").strip()))


def format_amount(amount: str) -> str:
    """Display form: "12.5" -> "$12.50"; non-numeric amounts come back untouched."""
    s = (amount or "").strip()
    if not is_numeric_amount(s):
        return s
    return f"${float(s):,.2f}"


def _field(attr: str, convert=lambda v: v):
    def apply(fields: ExpenseFields, value: str) -> None:
        setattr(fields, attr, convert(value))
    return apply


# Ordered, first match wins; alternate spellings share one rule.
LABEL_RULES: List[LineRule] = [
    LineRule("amount", label_matcher("amount:"), _field("amount", parse_amount)),
    LineRule("vendor", label_matcher("vendor:", "store:", "from:"), _field("vendor")),
    LineRule("category", label_matcher("category:", "cat:"), _field("category")),
    LineRule("date", label_matcher("date:"), _field("date", parse_expense_date)),
]


def find_dollar_amount(line: str) -> Optional[str]:
    m = _DOLLAR_RE.search(line or "")
    return m.group(0) if m else None


def is_bare_amount_line(
    line: str,
    consume_ratio: float = EXPENSE_CONSUME_RATIO,
    max_len: int = EXPENSE_BARE_AMOUNT_MAX_LEN,
) -> bool:
    """"$12.50" alone on a short line; "$5 tip" is still a sentence."""
    found = find_dollar_amount(line)
    return bool(found) and len(line) < max_len and covers_most(found, line, consume_ratio)


def extract_expense(
    content: Optional[str],
    consume_ratio: float = EXPENSE_CONSUME_RATIO,
    max_len: int = EXPENSE_BARE_AMOUNT_MAX_LEN,
) -> ExpenseFields:
    """
    An "Amount:" line wins; otherwise the first dollar amount on any other line.
    Repeated labels fall through to notes so nothing is dropped.
    """
    fields = ExpenseFields()
    scanned: Optional[str] = None
    notes: List[str] = []

    for line in split_lines(strip_trigger_tag(content)):
        if not line:
            if notes:
                notes.append(line)
            continue

        found = first_match(LABEL_RULES, line)
        if found is not None:
            rule, value = found
            if not value:
                continue
            if not getattr(fields, rule.name):
                rule.apply(fields, value)
                continue

        if scanned is None:
            amount = find_dollar_amount(line)
            if amount:
                scanned = parse_amount(amount)

        if is_bare_amount_line(line, consume_ratio, max_len):
            continue
        notes.append(line)

    if not fields.amount and scanned:
        fields.amount = scanned
    fields.notes = join_block(notes)
    logger.debug("expense: amount=%r vendor=%r", fields.amount, fields.vendor)
    return fields


def serialize_expense(fields: ExpenseFields) -> str:
    headers: List[str] = []
    amount = (fields.amount or "").strip()
    if amount:
        headers.append(f"Amount: ${amount}" if is_numeric_amount(amount) else f"Amount: {amount}")
    for label, value in (("Vendor", fields.vendor), ("Category", fields.category), ("Date", fields.date)):
        value = (value or "").strip()
        if value:
            headers.append(f"{label}: {value}")
    return compose(headers, (fields.notes or "").strip(), tag=canonical_tag(NoteType.EXPENSE))
