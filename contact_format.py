from __future__ import annotations

import logging
import re
from typing import List, Optional

from app_contract import CONTACT_CONSUME_RATIO
from line_rules import LineRule, compose, covers_most, first_match, join_block, label_matcher, split_lines
from note_models import NoteType, ParsedContact
from trigger_tags import canonical_tag, strip_trigger_tag

logger = logging.getLogger(__name__)


_MAILTO_RE = re.compile(r"mailto:([A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,})", re.IGNORECASE)
_EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
_PHONE_RE = re.compile(r"(?:\+?\d{1,3}[\s.-]?)?(?:\(\d{3}\)|\d{3})[\s.-]?\d{3}[\s.-]?\d{4}\b")
_WEBSITE_RE = re.compile(
    r"(?:https?://)?(?:www\.)?[a-z0-9-]+(?:\.[a-z0-9-]+)*\."
    r"(?:com|org|net|io|co|dev|app|edu|gov|us|uk|ca|me|biz|info)(?:/\S*)?\b",
    re.IGNORECASE,
)
_CITY_STATE_ZIP_RE = re.compile(r"^([A-Za-z][A-Za-z .'-]*),\s*([A-Z]{2})\.?\s+(\d{5}(?:-\d{4})?)$")
_STREET_RE = re.compile(
    r"^\d+\s+\S.*\b(street|st|avenue|ave|road|rd|boulevard|blvd|lane|ln|drive|dr|"
    r"court|ct|way|place|pl|parkway|pkwy|highway|hwy|suite|ste|unit|apt)\b\.?",
    re.IGNORECASE,
)
_DIGIT_RE = re.compile(r"\d")

_ORG_KEYWORDS_RE = re.compile(
    r"\b(inc|llc|ltd|corp|corporation|company|co|group|gmbh|plc|partners|"
    r"associates|agency|studio|labs|solutions|technologies|university|bank)\b\.?",
    re.IGNORECASE,
)
_JOB_TITLE_RE = re.compile(
    r"\b(ceo|cto|cfo|coo|vp|president|founder|co-founder|director|manager|engineer|"
    r"developer|designer|consultant|analyst|architect|owner|partner|officer|lead|"
    r"specialist|coordinator|assistant|administrator|head of|recruiter|attorney|"
    r"realtor|agent|professor|doctor)\b",
    re.IGNORECASE,
)

# Longer names before their prefixes ("job title:" before "title:").
_NAME_LABELS = ("name:", "full name:")
_FIRST_NAME_LABELS = ("first name:", "first:")
_LAST_NAME_LABELS = ("last name:", "surname:", "last:")
_NOTES_LABELS = ("notes:", "note:")


def _set_name(contact: ParsedContact, value: str) -> None:
    tokens = value.split()
    if not tokens:
        return
    contact.first_name = tokens[0]
    contact.last_name = " ".join(tokens[1:])


def _one_line(value: str) -> str:
    return " ".join((value or "").split())


def _setter(attr: str):
    def apply(contact: ParsedContact, value: str) -> None:
        setattr(contact, attr, _one_line(value))
    return apply


# Ordered, first match wins.
LABEL_RULES: List[LineRule] = [
    LineRule("first_name", label_matcher(*_FIRST_NAME_LABELS), _setter("first_name")),
    LineRule("last_name", label_matcher(*_LAST_NAME_LABELS), _setter("last_name")),
    LineRule("name", label_matcher(*_NAME_LABELS), _set_name),
    LineRule("job_title", label_matcher("job title:", "title:", "position:", "role:"), _setter("job_title")),
    LineRule("company", label_matcher("company:", "organization:", "org:", "employer:"), _setter("company")),
    LineRule("phone", label_matcher("phone:", "tel:", "mobile:", "cell:"), _setter("phone")),
    LineRule("email", label_matcher("email:", "e-mail:"), _setter("email")),
    LineRule("website", label_matcher("website:", "web:", "url:"), _setter("website")),
    LineRule("street_address", label_matcher("address:", "street:"), _setter("street_address")),
    LineRule("city", label_matcher("city:"), _setter("city")),
    LineRule("state", label_matcher("state:"), _setter("state")),
    LineRule("zip_code", label_matcher("zip code:", "zip:", "postal code:"), _setter("zip_code")),
]


def find_email(line: str) -> Optional[str]:
    """Address-link form first ("mailto:x@y.z"), then a raw address."""
    m = _MAILTO_RE.search(line)
    if m:
        return m.group(1)
    m = _EMAIL_RE.search(line)
    return m.group(0) if m else None


def find_phone(line: str) -> Optional[str]:
    m = _PHONE_RE.search(line)
    return m.group(0).strip() if m else None


def find_website(line: str) -> Optional[str]:
    if "@" in line:
        return None
    m = _WEBSITE_RE.search(line)
    return m.group(0) if m else None


def _looks_like_name(line: str) -> bool:
    return not _DIGIT_RE.search(line) and "@" not in line and 0 < len(line.split()) <= 4


def _consume_detected(contact: ParsedContact, line: str, ratio: float) -> bool:
    """
    Phone/email/website detectors. A line is swallowed only when the match
    covers more than `ratio` of it; a number inside a sentence stays in notes.
    """
    email = find_email(line)
    if email and not contact.email and covers_most(email, line, ratio):
        contact.email = email
        return True

    phone = find_phone(line)
    if phone and not contact.phone and covers_most(phone, line, ratio):
        contact.phone = phone
        return True

    website = find_website(line)
    if website and not contact.website and covers_most(website, line, ratio):
        contact.website = website
        return True

    return False


def _consume_address(contact: ParsedContact, line: str) -> bool:
    m = _CITY_STATE_ZIP_RE.match(line)
    if m and not (contact.city or contact.state or contact.zip_code):
        contact.city = _one_line(m.group(1))
        contact.state = m.group(2)
        contact.zip_code = m.group(3)
        return True
    if _STREET_RE.match(line) and not contact.street_address:
        contact.street_address = _one_line(line)
        return True
    return False


def extract_contact(content: Optional[str], consume_ratio: float = CONTACT_CONSUME_RATIO) -> ParsedContact:
    """
    Labeled lines ("Phone: ...") win. Unlabeled lines go through the detectors
    and then the name/title/company heuristics; what is left becomes notes.
    A blank line after a labeled field starts the notes body, kept verbatim.
    """
    contact = ParsedContact()
    candidates: List[str] = []
    body: List[str] = []
    seen_label = False
    in_body = False

    for line in split_lines(strip_trigger_tag(content)):
        if in_body:
            body.append(line)
            continue
        if not line:
            if seen_label:
                in_body = True
            continue

        notes_value = label_matcher(*_NOTES_LABELS)(line)
        if notes_value is not None:
            if notes_value:
                body.append(notes_value)
            in_body = True
            continue

        found = first_match(LABEL_RULES, line)
        if found is not None:
            rule, value = found
            if value:
                rule.apply(contact, value)
                seen_label = True
            continue

        candidates.append(line)

    remaining = [
        line for line in candidates
        if not _consume_detected(contact, line, consume_ratio) and not _consume_address(contact, line)
    ]

    if not (contact.first_name or contact.last_name):
        for i, line in enumerate(remaining):
            if _looks_like_name(line) and not _ORG_KEYWORDS_RE.search(line) and not _JOB_TITLE_RE.search(line):
                _set_name(contact, line)
                del remaining[i]
                break

    if not contact.job_title:
        for i, line in enumerate(remaining):
            if _JOB_TITLE_RE.search(line) and not _ORG_KEYWORDS_RE.search(line) and not _DIGIT_RE.search(line):
                contact.job_title = _one_line(line)
                del remaining[i]
                break

    if not contact.company and remaining:
        org_index = next((i for i, line in enumerate(remaining) if _ORG_KEYWORDS_RE.search(line)), None)
        if org_index is not None:
            contact.company = _one_line(remaining.pop(org_index))
        elif not _DIGIT_RE.search(remaining[0]) and "@" not in remaining[0]:
            contact.company = _one_line(remaining.pop(0))

    contact.notes = join_block(remaining + ([""] if remaining and body else []) + body)
    logger.debug("contact: name=%r consumed=%d notes_lines=%d",
                 contact.display_name, len(candidates) - len(remaining), len(remaining))
    return contact


def serialize_contact(contact: ParsedContact) -> str:
    first = _one_line(contact.first_name)
    last = _one_line(contact.last_name)

    headers: List[str] = []
    if first and " " not in first:
        headers.append(f"Name: {first} {last}".rstrip())
    else:
        if first:
            headers.append(f"First name: {first}")
        if last:
            headers.append(f"Last name: {last}")

    for label, value in (
        ("Title", contact.job_title),
        ("Company", contact.company),
        ("Phone", contact.phone),
        ("Email", contact.email),
        ("Website", contact.website),
        ("Address", contact.street_address),
        ("City", contact.city),
        ("State", contact.state),
        ("Zip", contact.zip_code),
    ):
        value = _one_line(value)
        if value:
            headers.append(f"{label}: {value}")

    notes = (contact.notes or "").strip()
    if notes and not headers:
        # Bare notes would be re-read as a name; an explicit label keeps them notes.
        headers.append("Notes:")
        return "\n".join([canonical_tag(NoteType.CONTACT)] + headers + [notes])
    return compose(headers, notes, tag=canonical_tag(NoteType.CONTACT))
