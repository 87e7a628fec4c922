"""Pytest configuration and shared fakes."""
import os
import sys
from typing import Any, List, Optional

import pytest

# Ensure src is on path for imports
ROOT = os.path.dirname(os.path.abspath(__file__))
SRC = os.path.join(os.path.dirname(ROOT), 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from pubqa.utils.types import Candidate  # noqa: E402


def make_candidate(idx: int, similarity: Optional[float] = 0.8, **overrides: Any) -> Candidate:
    fields = {
        "id": f"art-{idx}",
        "title": f"Article title {idx}",
        "abstract": f"Abstract text for article {idx}. " * 5,
        "authors": f"Author {idx}",
        "pub_date": "2023-01-01",
        "pubmed_url": f"https://pubmed.ncbi.nlm.nih.gov/{1000 + idx}/",
        "is_free": idx % 2 == 0,
        "similarity": similarity,
    }
    fields.update(overrides)
    return Candidate(**fields)


class FakeStore:
    """Vector store returning canned result lists, one per search call."""

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: List[dict] = []

    def search(self, vector, threshold, limit):
        self.calls.append({"vector": vector, "threshold": threshold, "limit": limit})
        if not self.responses:
            return []
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return list(response)


class FakeLLM:
    """Provider whose outcomes are strings (returned) or exceptions (raised)."""

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes)
        self.calls: List[dict] = []

    def generate(self, prompt, temperature, max_new_tokens):
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_new_tokens": max_new_tokens})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeEmbedder:
    def __init__(self, vector: Optional[List[float]] = None, error: Optional[Exception] = None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.error = error
        self.calls: List[str] = []

    def embed_query(self, query):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return self.vector


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def primary_pool():
    """Seven first-pass candidates, similarity 0.90 down to 0.60."""
    return [make_candidate(i, similarity=round(0.95 - 0.05 * i, 2)) for i in range(1, 8)]


@pytest.fixture
def fakes():
    """Access to the fake collaborator classes."""
    class _Fakes:
        Store = FakeStore
        LLM = FakeLLM
        Embedder = FakeEmbedder
        Sleep = SleepRecorder
    return _Fakes


@pytest.fixture
def prompt_builder():
    from pubqa.generation.prompts.builder import PromptBuilder
    return PromptBuilder()
