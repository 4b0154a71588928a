"""
Shared fixtures for the AI detection tests.
Zero network calls: the Replicate endpoint is replaced by httpx.MockTransport.
"""
import asyncio
import json

import httpx
import pytest

from services.external_ai_detection_service import ReplicateAIDetector
from services.heuristic_detection_service import HeuristicAIDetector

TEST_TOKEN = "r8_test_token"

HUMAN_ESSAY = (
    "I remember the summer my grandmother taught me to bake bread. Flour everywhere! "
    "She laughed at my lopsided loaves and said the crooked ones taste better. "
    "Honestly, I still think she was just being kind."
)


class FixedRandom:
    """Random source returning the same value every call. 0.5 means zero jitter."""

    def __init__(self, value=0.5):
        self.value = value
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.value


class SequenceRandom:
    """Random source replaying the given values in order, e.g. jitter then processing time."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[self.calls]
        self.calls += 1
        return value


class RecordingHandler:
    """MockTransport handler that records requests and replays a canned response."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self.payload = payload
        self.text = text
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def fixed_random():
    return FixedRandom(0.5)


@pytest.fixture
def heuristic(fixed_random):
    return HeuristicAIDetector(rng=fixed_random)


@pytest.fixture
def human_essay():
    return HUMAN_ESSAY


@pytest.fixture
def make_remote():
    """Build a ReplicateAIDetector whose HTTP calls hit the given handler.
    Clients are closed after the test, once no event loop is running."""
    clients = []

    def _make(handler, api_token=TEST_TOKEN):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return ReplicateAIDetector(api_token=api_token, http_client=client)

    yield _make

    for client in clients:
        asyncio.run(client.aclose())
    assert all(client.is_closed for client in clients)
