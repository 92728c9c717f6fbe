"""Shared fixtures for artifact-lanes tests."""

import json

import pytest

from artifact_lanes.config import OpenAIConfig


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        return self.payload


def chat_payload(content: str) -> dict:
    """Wrap message content in a chat-completions response body."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def openai_config():
    """Remote service configuration pointing at a fake host."""
    return OpenAIConfig(
        api_key="test-key",
        base_url="https://llm.test/v1",
        model="test-chat",
        embed_model="test-embed",
        timeout=5,
    )


@pytest.fixture
def fake_clock():
    """Fake monotonic clock whose sleep() advances time instantly."""

    class Clock:
        def __init__(self):
            self.now = 0.0
            self.sleeps = []

        def sleep(self, seconds):
            self.sleeps.append(seconds)
            self.now += seconds

    return Clock()


@pytest.fixture
def make_response():
    """Factory for fake HTTP responses."""
    return FakeResponse


@pytest.fixture
def chat_response():
    """Factory for fake chat-completions responses carrying `content`."""

    def build(content: str, status_code: int = 200) -> FakeResponse:
        return FakeResponse(chat_payload(content), status_code=status_code)

    return build
