"""Pytest configuration and shared fixtures for the test suite."""

import math
import re

import pytest
import requests

from finchat.llm.base import ContentPart, EmbeddingTask, parts_to_text
from finchat.service.database import RetrievedChunk, cosine_similarity
from finchat.service.ingestion import NoThrottle
from finchat.service.retriever import Retriever
from finchat.service.router import ModelRouter

FAKE_DIMENSIONS = 64


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible."""
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def ravendb_available() -> bool:
    """Check if RavenDB server is running and accessible."""
    try:
        response = requests.get("http://localhost:8080/databases", timeout=2)
        return response.status_code in (200, 401)  # Auth required is OK
    except requests.RequestException:
        return False


class FakeEmbedder:
    """Deterministic bag-of-words embedder.

    Each lowercase word is hashed into one of FAKE_DIMENSIONS buckets, so texts
    sharing words end up with a high cosine similarity.
    """

    def __init__(self, dimensions: int = FAKE_DIMENSIONS) -> None:
        self.dimensions = dimensions
        self.calls: list[tuple[str, EmbeddingTask]] = []

    async def embed(self, text: str, task: EmbeddingTask = EmbeddingTask.DOCUMENT) -> list[float]:
        self.calls.append((text, task))
        vector = [0.0] * self.dimensions
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = sum(ord(c) * (i + 1) for i, c in enumerate(word)) % self.dimensions
            vector[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]


class FakeVectorStore:
    """In-memory vector store ranking records by cosine similarity."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.records: list[tuple[str, str, list[float], dict]] = []
        self.fail_on = fail_on or set()
        self.upsert_calls = 0

    async def upsert(self, text: str, vector: list[float], metadata: dict) -> str:
        call_index = self.upsert_calls
        self.upsert_calls += 1
        if call_index in self.fail_on:
            raise RuntimeError(f"simulated store failure on call {call_index}")
        record_id = f"FinancialChunks/{len(self.records)}"
        self.records.append((record_id, text, vector, dict(metadata)))
        return record_id

    async def query(self, vector: list[float], k: int) -> list[RetrievedChunk]:
        scored = [
            RetrievedChunk(text=text, score=cosine_similarity(vector, stored), metadata=metadata)
            for _, text, stored, metadata in self.records
        ]
        scored.sort(key=lambda chunk: chunk.score, reverse=True)
        return scored[:k]


class FailingVectorStore:
    """Store whose every call raises."""

    async def upsert(self, text: str, vector: list[float], metadata: dict) -> str:
        raise ConnectionError("store unreachable")

    async def query(self, vector: list[float], k: int) -> list[RetrievedChunk]:
        raise ConnectionError("store unreachable")


class FakeCompletionService:
    """Completion provider that records its prompts and answers from a script."""

    def __init__(self, label: str, reply: str = "ok", error: Exception | None = None) -> None:
        self.label = label
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def complete(
        self,
        system_instruction: str,
        parts: list[ContentPart],
        history: list[dict[str, str]] | None = None,
    ) -> str:
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "parts": list(parts),
                "text": parts_to_text(parts),
                "history": history,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture
def fast_llm() -> FakeCompletionService:
    return FakeCompletionService("Groq (Llama 3.3)", reply="fast answer")


@pytest.fixture
def deep_llm() -> FakeCompletionService:
    return FakeCompletionService("Gemini 2.5 Flash", reply="deep answer")


@pytest.fixture
def retriever(embedder, store) -> Retriever:
    return Retriever(embedder, store)


@pytest.fixture
def router(fast_llm, deep_llm) -> ModelRouter:
    return ModelRouter(fast_llm, deep_llm)


@pytest.fixture
def no_throttle() -> NoThrottle:
    return NoThrottle()


@pytest.fixture
def ravendb_service():
    """Skip unless a local RavenDB server is reachable."""
    if not ravendb_available():
        pytest.skip("RavenDB server not available")
    return "http://localhost:8080"


@pytest.fixture
def ollama_service():
    """Skip unless a local Ollama server is reachable."""
    if not ollama_available():
        pytest.skip("Ollama server not available")
    return "http://localhost:11434"
