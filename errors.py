"""Error taxonomy for the parse endpoint. Each error knows its HTTP status."""
from typing import Any, Dict, Optional


class ApiError(Exception):
    status_code = 500

    def __init__(self, error: str, detail: Optional[str] = None, content: Optional[str] = None):
        super().__init__(detail or error)
        self.error = error
        self.detail = detail
        self.content = content

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            payload["detail"] = self.detail
        if self.content is not None:
            payload["content"] = self.content
        return payload


class BodyValidationError(ApiError):
    status_code = 400


class AuthError(ApiError):
    status_code = 401

    def __init__(self):
        super().__init__("Unauthorized")


class MethodNotAllowedError(ApiError):
    status_code = 405

    def __init__(self):
        super().__init__("Method not allowed")


class UpstreamError(ApiError):
    status_code = 502


class UpstreamInitError(UpstreamError):
    """The completion client cannot be set up (e.g. no API key)."""

    def __init__(self, detail: str):
        super().__init__("OpenAI init error", detail=detail)


class UpstreamCallError(UpstreamError):
    """The completion API was unreachable or answered with an error."""

    def __init__(self, detail: str):
        super().__init__("Parser error", detail=detail)


class UpstreamParseError(UpstreamError):
    """The model answered, but not with JSON."""

    def __init__(self, content: str, detail: str = "Model returned non-JSON"):
        super().__init__("Parser error", detail=detail, content=content)
