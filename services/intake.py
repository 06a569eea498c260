"""
Request intake: decode the payload, fall back from HTML to text, validate,
and check the bearer token.
"""
import json
import logging
import re
import secrets
from typing import Any, Optional

from errors import AuthError, BodyValidationError
from models import EmailInput

logger = logging.getLogger(__name__)

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def html_to_text(html: str) -> str:
    """Line breaks and paragraph ends become newlines, every other tag is dropped."""
    text = _BR_RE.sub("\n", html)
    text = _P_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    return text.replace("&nbsp;", " ").strip()


def decode_payload(raw: Any) -> Any:
    """Turn a raw request body into a JSON value. Parsed values pass through."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise BodyValidationError("Malformed JSON body")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            raise BodyValidationError("Malformed JSON body")
    return raw


def parse_email(raw: Any) -> EmailInput:
    """Validate the request body and return the email to extract from."""
    data = decode_payload(raw)
    if not isinstance(data, dict):
        raise BodyValidationError("Missing JSON body")

    email = EmailInput.model_validate(data)

    # If plain body is empty, fall back to HTML
    if not email.body and email.html:
        email = email.model_copy(update={"body": html_to_text(email.html)})

    if not email.body.strip():
        raise BodyValidationError("Missing 'body' in JSON payload")
    return email


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        return ""
    return authorization.split(" ")[1]


def authorize(authorization: Optional[str], expected: Optional[str]) -> None:
    """Raise :class:`AuthError` unless the header carries the configured token."""
    if not expected:
        logger.warning("AUTH_TOKEN is not configured; rejecting request")
        raise AuthError()
    token = bearer_token(authorization)
    if not token or not secrets.compare_digest(token.encode(), expected.encode()):
        raise AuthError()
