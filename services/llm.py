import logging
from typing import Optional

import httpx

from config import Settings
from errors import UpstreamCallError, UpstreamInitError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Chat-completion client for an OpenAI-compatible API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def build_payload(self, system: str, user: str) -> dict:
        return {
            "model": self.settings.model,
            "temperature": self.settings.temperature,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }

    async def complete(self, system: str, user: str) -> str:
        """Return the model's message content, ``"{}"`` when the reply has none."""
        api_key = self.settings.completion_api_key
        if not api_key:
            raise UpstreamInitError("Missing COMPLETION_API_KEY in environment")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        url = f"{self.settings.completion_api_base}/chat/completions"

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.completion_timeout, transport=self._transport
            ) as client:
                r = await client.post(url, headers=headers, json=self.build_payload(system, user))
                r.raise_for_status()
                data = r.json()
        except httpx.InvalidURL as e:
            raise UpstreamInitError(f"Invalid COMPLETION_API_BASE: {e}") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "Completion API HTTP error: %s -> %s",
                e.response.status_code, e.response.text[:200],
            )
            raise UpstreamCallError(
                f"Completion API returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Completion API request failed: %r", e)
            raise UpstreamCallError(str(e) or e.__class__.__name__) from e
        except ValueError as e:
            logger.error("Completion API returned an undecodable envelope: %s", e)
            raise UpstreamCallError(f"Invalid response from completion API: {e}") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if choices and not isinstance(choices, list):
            logger.error("Completion API reply has malformed choices: %r", choices)
            raise UpstreamCallError("Invalid response from completion API")
        if not choices or not isinstance(choices[0], dict):
            logger.warning("Completion API reply had no choices")
            return "{}"
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) and content else "{}"
