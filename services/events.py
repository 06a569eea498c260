from .guardrail import apply_guardrails
from .llm import CompletionClient
from .prompt import build_system_prompt, build_user_prompt
from config import Settings
from errors import UpstreamParseError
from models import EmailInput, MeetingRecord
import json
import logging
import re

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def parse_model_output(content: str):
    """Parse the model's reply as JSON, tolerating a surrounding markdown fence."""
    cleaned = content.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1)

    try:
        return json.loads(cleaned)
    except ValueError:
        logger.warning("Model returned non-JSON: %s", content[:200])
        raise UpstreamParseError(content)


async def extract_meeting(email: EmailInput, settings: Settings, client: CompletionClient) -> MeetingRecord:
    system = build_system_prompt(settings.default_timezone)
    prompt = build_user_prompt(email.subject, email.body)
    raw = await client.complete(system, prompt)

    parsed = parse_model_output(raw)
    return apply_guardrails(
        parsed,
        subject=email.subject,
        body=email.body,
        denylist=settings.scheduler_denylist,
        location_keywords=settings.signature_location_keywords,
    )
