from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class LineRule:
    """
    One line-level rule: `match` returns the captured value (or None when the
    rule does not apply), `apply` stores it on the extractor state.
    Rules are kept in ordered lists and the first match wins.
    """
    name: str
    match: Callable[[str], Optional[str]]
    apply: Callable[[Any, str], None]


def first_match(rules: Sequence[LineRule], line: str) -> Optional[Tuple[LineRule, str]]:
    for rule in rules:
        value = rule.match(line)
        if value is not None:
            return rule, value
    return None


def label_value(line: str, labels: Iterable[str]) -> Optional[str]:
    """
    "Where: Room 4" with labels ("where:", "location:") -> "Room 4".
    Labels are lowercase and include the colon. Checked in the order given.
    """
    s = (line or "").strip()
    lowered = s.lower()
    for label in labels:
        if lowered.startswith(label):
            return s[len(label):].strip()
    return None


def label_matcher(*labels: str) -> Callable[[str], Optional[str]]:
    return lambda line: label_value(line, labels)


def covers_most(matched: str, line: str, ratio: float = 0.5) -> bool:
    """True when the matched text is longer than `ratio` of the line."""
    return len(matched) > len(line) * ratio


def split_lines(content: Optional[str]) -> List[str]:
    """Lines with surrounding blanks removed; empty lines are kept as ""."""
    return [line.strip() for line in (content or "").splitlines()]


def join_block(lines: Iterable[str]) -> str:
    """Join lines and trim blank lines at both ends, keeping inner blanks."""
    return "\n".join(lines).strip("\n").strip()


def compose(header_lines: Sequence[str], remainder: str, tag: Optional[str] = None) -> str:
    """
    Canonical text: tag, header lines, one blank line, then the remainder.
    Nothing is emitted for an empty part.
    """
    out: List[str] = []
    if tag:
        out.append(tag)
    out.extend(header_lines)
    if remainder:
        if header_lines:
            out.append("")
        out.append(remainder)
    return "\n".join(out)
