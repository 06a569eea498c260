"""
Pytest fixtures shared across all test modules.
"""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import app, get_completion_client, get_settings
from services.llm import CompletionClient

AUTH_TOKEN = "test-secret"


@pytest.fixture
def settings():
    return Settings(
        auth_token=AUTH_TOKEN,
        completion_api_key="sk-test",
        completion_api_base="https://llm.test/v1",
        scheduler_denylist=("@agency.com",),
    )


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {AUTH_TOKEN}"}


def completion_reply(content):
    """A chat-completion response envelope carrying *content*."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeCompletionAPI:
    """Stands in for the completion endpoint via ``httpx.MockTransport``."""

    def __init__(self, content="{}", status_code=200, error=None):
        self.content = content
        self.status_code = status_code
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream exploded")
        return httpx.Response(200, json=completion_reply(self.content))

    @property
    def last_payload(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def make_api():
    return FakeCompletionAPI


@pytest.fixture
def fake_api():
    return FakeCompletionAPI()


@pytest.fixture
def client(settings, fake_api):
    """TestClient wired to *settings* and the fake completion API."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_completion_client] = lambda: CompletionClient(
        settings, transport=httpx.MockTransport(fake_api)
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def scheduler_email():
    """The assistant-coordinated email used across guardrail tests."""
    return {
        "subject": "Sync",
        "body": (
            "WITH: Jane Doe\n"
            "Jane's assistant, Office of Jane, will coordinate. "
            "jane.assistant@agency.com"
        ),
    }
