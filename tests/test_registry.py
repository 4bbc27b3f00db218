"""Tests for building the service registry from the environment."""

import pytest

from finchat.exceptions import ConfigurationError
from finchat.llm import GeminiService, GroqService
from finchat.service.database import RavenVectorStore
from finchat.service.ingestion import FixedDelayThrottle, NoThrottle
from finchat.service.registry import ServiceRegistry, build_registry

ENV_VARS = (
    "GROQ_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "RAVENDB_URL",
    "FAST_LLM_SERVICE",
    "EMBEDDING_SERVICE",
    "INGEST_PASSWORD",
    "INGEST_DELAY_SECONDS",
    "EMBEDDING_DIMENSIONS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestBuildRegistry:
    def test_nothing_configured(self):
        registry = build_registry()

        assert registry.status() == {
            "embedder": "missing",
            "store": "missing",
            "fast_llm": "missing",
            "deep_llm": "missing",
        }
        assert "RAVENDB_URL" in registry.errors["store"]
        assert "GROQ_API_KEY" in registry.errors["fast_llm"]

    def test_fully_configured(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        monkeypatch.setenv("GEMINI_API_KEY", "g-test")
        monkeypatch.setenv("RAVENDB_URL", "http://raven:8080")

        registry = build_registry()

        assert registry.errors == {}
        assert isinstance(registry.fast_llm, GroqService)
        assert isinstance(registry.deep_llm, GeminiService)
        assert isinstance(registry.embedder, GeminiService)
        assert isinstance(registry.store, RavenVectorStore)

    def test_unsupported_service_recorded(self, monkeypatch):
        """An unknown provider selector is a recorded gap, not a start-up crash."""
        monkeypatch.setenv("FAST_LLM_SERVICE", "openai")
        monkeypatch.setenv("EMBEDDING_SERVICE", "cohere")

        registry = build_registry()

        assert registry.fast_llm is None
        assert "openai" in registry.errors["fast_llm"]
        assert registry.embedder is None
        assert "cohere" in registry.errors["embedder"]

    @pytest.mark.parametrize("dimensions", ["abc", "0"])
    def test_bad_dimensions_recorded(self, monkeypatch, dimensions):
        monkeypatch.setenv("RAVENDB_URL", "http://raven:8080")
        monkeypatch.setenv("EMBEDDING_DIMENSIONS", dimensions)

        registry = build_registry()

        assert registry.store is None
        assert "EMBEDDING_DIMENSIONS" in registry.errors["store"]


class TestServiceRegistry:
    def test_default_pipeline_requires_secret(self, monkeypatch):
        monkeypatch.setenv("INGEST_PASSWORD", "s3cret")
        pipeline = ServiceRegistry().ingestion_pipeline()

        assert pipeline.authorizer is not None
        assert isinstance(pipeline.throttle, FixedDelayThrottle)
        assert pipeline.throttle.delay_seconds == 0.5

    def test_delay_from_env(self, monkeypatch):
        monkeypatch.setenv("INGEST_DELAY_SECONDS", "0")
        assert isinstance(ServiceRegistry().ingestion_pipeline().throttle, NoThrottle)

    def test_local_pipeline_skips_secret(self):
        pipeline = ServiceRegistry().ingestion_pipeline(
            delay_seconds=1.0, require_password=False, chunk_size=500, chunk_overlap=50
        )

        assert pipeline.authorizer is None
        assert pipeline.throttle.delay_seconds == 1.0
        assert (pipeline.chunk_size, pipeline.chunk_overlap) == (500, 50)

    @pytest.mark.asyncio
    async def test_unconfigured_pipeline_raises(self):
        pipeline = ServiceRegistry().ingestion_pipeline(delay_seconds=0, require_password=False)
        with pytest.raises(ConfigurationError):
            await pipeline.ingest("some text")
