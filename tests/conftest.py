"""
Shared pytest fixtures for the detective test suite.

Provides:
    - make_provider: scripted language model (no network)
    - make_lookup: in-memory character lookup that counts calls
"""

import json
import threading

import pytest

from detective.guesses import CharacterLookup
from detective.providers import BaseProvider


class FakeProvider(BaseProvider):
    """Returns scripted responses in order; exceptions in the script are raised."""

    provider_name = "fake"

    def __init__(self, responses):
        super().__init__(model_name="fake-model", base_url="http://fake")
        self.responses = list(responses)
        self.calls = []

    def chat(self, messages, temperature=0.7, max_tokens=128):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        if not self.responses:
            raise AssertionError("FakeProvider ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


class FakeLookup(CharacterLookup):
    """Serves facts from a dict and records every looked-up name."""

    def __init__(self, facts=None):
        self.facts = facts or {}
        self.calls = []
        self._lock = threading.Lock()

    def lookup(self, name):
        with self._lock:
            self.calls.append(name)
        return self.facts.get(name.lower())


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def make_lookup():
    """Factory for in-memory lookups."""
    return FakeLookup
