from __future__ import annotations

import logging
import re
from typing import List, Optional

from line_rules import LineRule, compose, first_match, join_block, label_matcher, split_lines
from note_models import EmailFields, NoteType
from trigger_tags import canonical_tag, strip_trigger_tag

logger = logging.getLogger(__name__)


_EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


def _recipients_field(attr: str):
    def apply(fields: EmailFields, value: str) -> None:
        current = getattr(fields, attr)
        setattr(fields, attr, f"{current}, {value}" if current else value)
    return apply


def _set_subject(fields: EmailFields, value: str) -> None:
    fields.subject = value


# Distinct prefixes, first match wins.
HEADER_RULES: List[LineRule] = [
    LineRule("to", label_matcher("to:"), _recipients_field("to")),
    LineRule("cc", label_matcher("cc:"), _recipients_field("cc")),
    LineRule("bcc", label_matcher("bcc:"), _recipients_field("bcc")),
    LineRule("subject", label_matcher("subject:", "subj:", "re:"), _set_subject),
]


def extract_email(content: Optional[str]) -> EmailFields:
    """
    Header lines at the top, then the body. The first line that is not a
    header starts the body and everything after it stays body, including
    lines that happen to look like headers. A blank line after a filled
    header also starts the body.
    """
    fields = EmailFields()
    body: List[str] = []
    seen_header = False
    in_body = False

    for line in split_lines(strip_trigger_tag(content)):
        if in_body:
            body.append(line)
            continue
        if not line:
            if seen_header:
                in_body = True
            continue

        found = first_match(HEADER_RULES, line)
        if found is not None:
            rule, value = found
            if not value:
                continue
            # A second subject is not a header any more.
            if not (rule.name == "subject" and fields.subject):
                rule.apply(fields, value)
                seen_header = True
                continue

        in_body = True
        body.append(line)

    fields.body = join_block(body)
    logger.debug("email: to=%r subject=%r", fields.to, fields.subject)
    return fields


def recipients(value: Optional[str]) -> List[str]:
    """'a@b.com, c@d.com;e@f.com' -> ['a@b.com', 'c@d.com', 'e@f.com']"""
    return [r.strip() for r in re.split(r"[,;]", value or "") if r.strip()]


def is_valid_email(address: Optional[str]) -> bool:
    return bool(_EMAIL_RE.match((address or "").strip()))


def serialize_email(fields: EmailFields) -> str:
    headers: List[str] = []
    for label, value in (("To", fields.to), ("Cc", fields.cc), ("Bcc", fields.bcc), ("Subject", fields.subject)):
        value = (value or "").strip()
        if value:
            headers.append(f"{label}: {value}")
    return compose(headers, (fields.body or "").strip(), tag=canonical_tag(NoteType.EMAIL))
