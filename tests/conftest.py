import sys
import os
import json

import httpx
import pytest

# Ensure the repo root is on the path for all tests
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from protocol import GenerateResult
from provider import OllamaProvider


BASE_URL = "http://ollama.test:11434"
MODEL = "qwen2.5-coder:1.5b"


def ollama_reply(text, eval_count=42, eval_duration=1_500_000_000):
    """A /api/generate response the way a real server sends it (stream=false)."""
    return httpx.Response(200, json={
        "model": MODEL,
        "response": text,
        "done": True,
        "eval_count": eval_count,
        "eval_duration": eval_duration,
    })


class FakeOllama:
    """Scripted Ollama server behind httpx.MockTransport.

    Each generate call pops the next reply: a str (model text), an
    httpx.Response (sent as-is), or an exception (raised as a transport error).
    """

    def __init__(self, replies=(), head_status=200):
        self.replies = list(replies)
        self.head_status = head_status
        self.requests = []

    def handler(self, request):
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        if request.method == "HEAD":
            return httpx.Response(self.head_status)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return ollama_reply(reply)

    def transport(self):
        return httpx.MockTransport(self.handler)

    @property
    def generate_calls(self):
        return [r for r in self.requests if r[0] == "POST"]

    @property
    def prompts(self):
        return [body["prompt"] for _, _, body in self.generate_calls]


class FakeProvider:
    """Stands in for OllamaProvider in orchestrator tests."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, GenerateResult):
            return reply
        return GenerateResult(text=reply, eval_count=42, eval_duration=1_500_000_000, done=True)


def make_provider(fake, **kwargs):
    return OllamaProvider(kwargs.pop("base_url", BASE_URL), kwargs.pop("model", MODEL),
                          transport=fake.transport(), **kwargs)


@pytest.fixture
def fake_ollama():
    return FakeOllama()
