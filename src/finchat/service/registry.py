"""Build the injected collaborators from environment configuration."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from finchat.constants import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_INGEST_DELAY_SECONDS,
    DEFAULT_TOP_K,
)
from finchat.exceptions import ConfigurationError
from finchat.llm import (
    CompletionService,
    EmbeddingService,
    get_deep_llm_service,
    get_embedding_service,
    get_fast_llm_service,
)
from finchat.service.auth import SharedSecretAuthorizer, get_ingest_password
from finchat.service.chat import ChatService
from finchat.service.database import RavenDBConfig, RavenVectorStore, VectorStore
from finchat.service.ingestion import FixedDelayThrottle, IngestionPipeline, NoThrottle
from finchat.service.retriever import Retriever
from finchat.service.router import ModelRouter

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class ServiceRegistry:
    """Explicitly constructed collaborator handles.

    Any handle may be None when its configuration is missing; the reason is
    kept in ``errors`` and surfaced when an operation needs that handle.
    """

    embedder: EmbeddingService | None = None
    store: VectorStore | None = None
    fast_llm: CompletionService | None = None
    deep_llm: CompletionService | None = None
    errors: dict[str, str] = field(default_factory=dict)

    def status(self) -> dict[str, str]:
        """Per-collaborator "configured"/"missing" summary for health checks."""
        return {
            name: "configured" if getattr(self, name) is not None else "missing"
            for name in ("embedder", "store", "fast_llm", "deep_llm")
        }

    def retriever(self) -> Retriever:
        return Retriever(self.embedder, self.store)

    def router(self) -> ModelRouter:
        return ModelRouter(self.fast_llm, self.deep_llm)

    def chat_service(self, top_k: int = DEFAULT_TOP_K) -> ChatService:
        return ChatService(self.retriever(), self.router(), top_k=top_k)

    def ingestion_pipeline(
        self,
        delay_seconds: float | None = None,
        require_password: bool = True,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ) -> IngestionPipeline:
        """Create an ingestion pipeline over the registry's embedder and store.

        Args:
            delay_seconds: Pause between chunk uploads (default: INGEST_DELAY_SECONDS
                           env or 0.5). Zero disables throttling.
            require_password: Gate ingestion behind INGEST_PASSWORD. Local CLI
                              callers pass False.
            chunk_size: Characters per chunk
            chunk_overlap: Characters shared by neighbouring chunks
        """
        if delay_seconds is None:
            delay_seconds = float(
                os.getenv("INGEST_DELAY_SECONDS", str(DEFAULT_INGEST_DELAY_SECONDS))
            )
        throttle = FixedDelayThrottle(delay_seconds) if delay_seconds > 0 else NoThrottle()
        authorizer = SharedSecretAuthorizer(get_ingest_password()) if require_password else None
        return IngestionPipeline(
            self.embedder,
            self.store,
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            throttle=throttle,
            authorizer=authorizer,
        )


def _try_build(name: str, factory: Callable[[], Any], errors: dict[str, str]) -> Any:
    try:
        return factory()
    except ConfigurationError as e:
        logger.warning(f"⚠️ {name} not configured: {e}")
        errors[name] = str(e)
        return None


def build_registry() -> ServiceRegistry:
    """Build every collaborator the environment allows.

    Missing credentials never raise here; they are recorded so that chat and
    ingestion can report a configuration error to the caller instead.
    """
    logger.info("🔧 Building service registry...")
    errors: dict[str, str] = {}

    registry = ServiceRegistry(
        embedder=_try_build("embedder", get_embedding_service, errors),
        store=_try_build(
            "store",
            lambda: RavenVectorStore(RavenDBConfig.require_url()),
            errors,
        ),
        fast_llm=_try_build("fast_llm", get_fast_llm_service, errors),
        deep_llm=_try_build("deep_llm", get_deep_llm_service, errors),
        errors=errors,
    )
    logger.info(f"✅ Service registry ready: {registry.status()}")
    return registry
