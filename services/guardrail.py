"""
Attendee guardrails applied to the model's output.

The model is told to keep schedulers and assistants out of
``attendees_primary`` but does not always comply. Each candidate is checked
against three rules, in order:

  1. ``denylist``: the candidate's email contains a denylisted domain.
  2. ``keyword``: the candidate's name reads like an agent title.
  3. ``signature``: the name is mentioned in a body that has a contact or
     signature block. Names listed under an attendee label (``WITH:``,
     ``Attendees:``) are exempt from this rule.

Rule 3 is deliberately loose and can drop a real attendee whose name sits
near a phone number. It is a best-effort filter, not a guarantee.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from models import MeetingRecord

logger = logging.getLogger(__name__)

AGENT_KEYWORDS = ("office of", "assistant to", "admin assistant", "scheduler")

_SIGNATURE_PATTERNS = (r"office of", r"assistant to", r"\bo:\s?\d", r"\bsignature\b")

_ANGLE_EMAIL_RE = re.compile(r"<([^>]+)>")
_BARE_EMAIL_RE = re.compile(r"^[^@\s<>]+@[^@\s<>]+\.[^@\s<>]+$")
_ATTENDEE_LABEL_RE = re.compile(r"^\s*(?:with|attendees|participants)\s*:(.*)$")


def parse_candidate(entry: str) -> Tuple[str, str]:
    """Split ``Name <email>`` into ``(name, email)``, both lowercased."""
    entry = entry.strip()
    m = _ANGLE_EMAIL_RE.search(entry)
    if m:
        email = m.group(1).strip()
        name = entry[: m.start()]
    else:
        email = entry if _BARE_EMAIL_RE.match(entry) else ""
        name = entry
    name = name.strip().strip("\"'").strip()
    return name.lower(), email.lower()


def signature_pattern(location_keywords: Iterable[str] = ()) -> re.Pattern:
    patterns = list(_SIGNATURE_PATTERNS)
    patterns.extend(re.escape(k.lower()) for k in location_keywords if k.strip())
    return re.compile("|".join(patterns))


def labeled_attendee_text(body_lower: str) -> str:
    """Text listed under ``WITH:`` / ``Attendees:`` style labels.

    A label with names on the same line contributes that line. A bare label
    contributes the lines below it, up to the next blank line.
    """
    lines = body_lower.splitlines()
    found: List[str] = []
    for i, line in enumerate(lines):
        m = _ATTENDEE_LABEL_RE.match(line)
        if not m:
            continue
        rest = m.group(1).strip()
        if rest:
            found.append(rest)
            continue
        for follow in lines[i + 1:]:
            if not follow.strip():
                break
            found.append(follow.strip())
    return "\n".join(found)


def _mentions(text: str, name: str) -> bool:
    """True if *name* occurs in *text* as whole words ("sam" is not in "samantha")."""
    return re.search(rf"(?<!\w){re.escape(name)}(?!\w)", text) is not None


def scheduler_reason(
    entry: str,
    body: str,
    denylist: Sequence[str] = (),
    location_keywords: Iterable[str] = (),
) -> Optional[str]:
    """Return the rule that marks *entry* as a scheduler, or ``None`` for a real attendee."""
    name, email = parse_candidate(entry)

    if email and any(d and d.lower() in email for d in denylist):
        return "denylist"

    if any(k in name for k in AGENT_KEYWORDS):
        return "keyword"

    body_lower = body.lower()
    if (
        name
        and name in body_lower
        and signature_pattern(location_keywords).search(body_lower)
        and not _mentions(labeled_attendee_text(body_lower), name)
    ):
        return "signature"

    return None


def is_scheduler(
    entry: str,
    body: str,
    denylist: Sequence[str] = (),
    location_keywords: Iterable[str] = (),
) -> bool:
    return scheduler_reason(entry, body, denylist, location_keywords) is not None


def filter_attendees(
    candidates: Any,
    body: str,
    denylist: Sequence[str] = (),
    location_keywords: Iterable[str] = (),
) -> List[str]:
    """Keep the candidates that are not schedulers, in their original order."""
    if not isinstance(candidates, (list, tuple)):
        return []

    location_keywords = tuple(location_keywords)
    kept: List[str] = []
    for entry in candidates:
        if not isinstance(entry, str):
            continue
        reason = scheduler_reason(entry, body, denylist, location_keywords)
        if reason:
            logger.debug("Dropping attendee %r (rule: %s)", entry, reason)
            continue
        kept.append(entry)
    return kept


def apply_guardrails(
    raw: Any,
    subject: str,
    body: str,
    denylist: Sequence[str] = (),
    location_keywords: Iterable[str] = (),
) -> MeetingRecord:
    """Coerce raw model output into a record, filter attendees, pin the subject."""
    record = MeetingRecord.from_untrusted(raw)
    attendees = filter_attendees(record.attendees_primary, body, denylist, location_keywords)
    dropped = len(record.attendees_primary) - len(attendees)
    if dropped:
        logger.info("Guardrails removed %d scheduler-like attendee(s)", dropped)
    return record.model_copy(
        update={"attendees_primary": attendees, "source_subject": subject}
    )
