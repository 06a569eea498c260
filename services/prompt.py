import json

from models import extraction_template


def build_system_prompt(timezone: str) -> str:
    return " ".join([
        "You extract structured meeting details from raw email text.",
        "Return STRICT JSON ONLY. No preamble, no markdown, no comments.",
        "Infer missing values conservatively; if unknown, return empty string or empty array, never null, and never omit a field.",
        f"All times should be interpreted in {timezone} unless an explicit offset/zone is provided.",
        "Only include people we are actually meeting WITH in attendees_primary.",
        "Agents/assistants (e.g., 'Office of', 'Assistant to', signature blocks) should go to scheduler_name/scheduler_email, not attendees_primary.",
        "Prefer names under labels like 'WITH:' or 'Attendees:' for attendees_primary.",
        "If Zoom/Meet/Teams links appear, set join_url accordingly.",
        "If an address appears (street/city/state/zip), set address accordingly.",
        "If both address and join_url exist, include both.",
        "Return valid ISO 8601 timestamps for start_iso/end_iso when possible (e.g., 2025-09-30T10:00:00-07:00).",
    ])


def build_user_prompt(subject: str, body: str) -> str:
    return "\n".join([
        "Extract the following fields from the email according to this JSON template:",
        json.dumps(extraction_template(), indent=2),
        "",
        "Email subject:",
        subject,
        "",
        "Email body:",
        body,
    ])
