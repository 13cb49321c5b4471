from __future__ import annotations

import json
import logging
import threading
import time
from collections import Counter, defaultdict
from pathlib import Path
from typing import Optional, Union

from note_models import Classification, ClassificationMethod, Note, NoteType
from trigger_tags import canonical_tag, detect_note_type, strip_all_trigger_tags, strip_trigger_tag

logger = logging.getLogger(__name__)

_WRITE_LOCK = threading.Lock()
_TOP_PATTERNS = 5


def classify(
    current: Optional[Classification],
    note_type: Union[NoteType, str],
    method: ClassificationMethod,
    confidence: Optional[float] = None,
    reasoning: Optional[str] = None,
) -> Classification:
    """
    New automatic result for a note. A manual choice already on the note is
    returned unchanged: re-classification never undoes the user.
    """
    if current is not None and current.is_manual:
        logger.debug("keeping manual %s over %s guess", current.type.value, NoteType.parse(note_type).value)
        return current
    return Classification(type=NoteType.parse(note_type), method=method, confidence=confidence, reasoning=reasoning)


def classify_content(
    current: Optional[Classification],
    content: Optional[str],
    fallback: Union[NoteType, str] = NoteType.GENERAL,
) -> Classification:
    """A leading tag is an explicit classification; otherwise the fallback is the default."""
    tagged = detect_note_type(content)
    if tagged is not None:
        return classify(current, tagged, ClassificationMethod.EXPLICIT, confidence=1.0)
    return classify(current, fallback, ClassificationMethod.DEFAULT)


def manual_override(note_type: Union[NoteType, str, None]) -> Classification:
    if not note_type or not str(note_type).strip():
        raise ValueError("a manual override needs a note type")
    return Classification(type=NoteType.parse(note_type), method=ClassificationMethod.MANUAL)


def override_note_type(note: Note, note_type: Union[NoteType, str]) -> Note:
    """
    User picked a type. Old type's tags are removed from the text, the new
    type's tag leads it, and the choice is pinned as manual.
    """
    new_type = NoteType.parse(note_type)
    old_type = NoteType.parse(note.note_type)
    body = strip_trigger_tag(strip_all_trigger_tags(note.content, old_type)).strip()
    tag = canonical_tag(new_type)
    if tag:
        body = f"{tag}\n{body}" if body else tag
    note.content = body
    note.note_type = new_type.value
    note.classification = manual_override(new_type)
    return note


def load_log(path: Path) -> dict:
    if not path.exists():
        return {"events": []}
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError):
        logger.warning("classification log at %s is unreadable, starting fresh", path)
        return {"events": []}
    events = data.get("events") if isinstance(data, dict) else None
    if not isinstance(events, list):
        return {"events": []}
    return {"events": events}


def _atomic_write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
    tmp.replace(path)


def classification_event(
    classification: Classification,
    corrected_type: Union[NoteType, str, None] = None,
    filename: str = "",
) -> dict:
    """Log record for one classification, optionally with the user's correction."""
    event = {
        "note_type": classification.type.value,
        "method": classification.method.value,
        "confidence": classification.confidence,
        "filename": filename,
    }
    if corrected_type is not None:
        event["corrected_type"] = NoteType.parse(corrected_type).value
    return event


def append_event(path: Path, event: dict) -> None:
    with _WRITE_LOCK:
        data = load_log(path)
        events = data.setdefault("events", [])
        confidence = event.get("confidence")
        corrected = event.get("corrected_type") or ""
        events.append(
            {
                "ts": float(event.get("ts", time.time())),
                "note_type": event.get("note_type", NoteType.GENERAL.value),
                "method": event.get("method", ClassificationMethod.DEFAULT.value),
                "confidence": float(confidence) if confidence is not None else None,
                "corrected_type": corrected,
                "filename": event.get("filename", ""),
            }
        )
        _atomic_write_json(path, data)
    logger.debug("logged %s classification to %s", event.get("note_type"), path)


def _is_correction(event: dict) -> bool:
    corrected = event.get("corrected_type") or ""
    return bool(corrected) and corrected != event.get("note_type")


def aggregates(events: list) -> dict:
    count = len(events)
    corrections = [e for e in events if _is_correction(e)]

    by_method = Counter(e.get("method", "") for e in events)
    confidences = defaultdict(list)
    for e in events:
        if e.get("confidence") is not None:
            confidences[e.get("method", "")].append(float(e["confidence"]))
    avg_confidence = {method: sum(values) / len(values) for method, values in confidences.items()}

    patterns = Counter(f"{e.get('note_type')}->{e.get('corrected_type')}" for e in corrections)

    return {
        "count": count,
        "corrections": len(corrections),
        "correction_rate": (len(corrections) / count) if count > 0 else 0.0,
        "by_method": dict(by_method),
        "avg_confidence": avg_confidence,
        "top_misclassifications": patterns.most_common(_TOP_PATTERNS),
    }
