"""Pytest configuration and fixtures."""
import asyncio
import json
from typing import Callable, List, Optional

import httpx
import pytest

from asklky.conversation import ConversationController
from asklky.corpus import DEFAULT_CORPUS, Corpus, Passage
from asklky.llm_client import GenerationClient


BASE_URL = "https://gemini.test/v1beta"
MODEL = "test-model"


def gemini_reply(text: str) -> dict:
    """A well-formed generateContent response body."""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class FakeGenerator:
    """Generator that records prompts and replays canned results.

    Each entry in `results` is either reply text or an exception to raise.
    When `gate` is set the call blocks until the event fires.
    """

    def __init__(self, results: Optional[list] = None, gate: Optional[asyncio.Event] = None):
        self.results = list(results or ["Singapore must stay relevant."])
        self.gate = gate
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        result = self.results[(len(self.prompts) - 1) % len(self.results)]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def corpus() -> Corpus:
    return DEFAULT_CORPUS


@pytest.fixture
def small_corpus() -> Corpus:
    return Corpus([
        Passage(topic="Alpha", text="first passage about trade"),
        Passage(topic="beta", text="second passage about Defense"),
        Passage(topic="gamma, trade", text="third passage"),
    ])


@pytest.fixture
def make_client() -> Callable[..., GenerationClient]:
    """Build a GenerationClient whose requests go to a handler function."""

    def _make(handler, api_key: str = "") -> GenerationClient:
        return GenerationClient(
            base_url=BASE_URL,
            model=MODEL,
            api_key=api_key,
            timeout=5.0,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def ok_handler(recorded_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        return httpx.Response(200, json=gemini_reply("We owe ourselves our own survival."))

    return handler


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def controller(corpus, fake_generator) -> ConversationController:
    return ConversationController(corpus, fake_generator)


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)
