"""Ingestion pipeline: chunk raw text, embed each chunk, persist sequentially."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from finchat.constants import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_INGEST_DELAY_SECONDS,
    INGEST_CHUNK_TIMEOUT_SECONDS,
)
from finchat.exceptions import ConfigurationError, PartialIngestionFailure, ValidationError
from finchat.llm.base import EmbeddingService, EmbeddingTask
from finchat.service.chunker import split
from finchat.service.database.models import VectorStore

logger = logging.getLogger(__name__)


class Throttle(Protocol):
    """Rate-limit policy applied between successive chunk uploads."""

    async def wait(self) -> None: ...


class FixedDelayThrottle:
    """Sleep a fixed number of seconds between uploads."""

    def __init__(self, delay_seconds: float = DEFAULT_INGEST_DELAY_SECONDS) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds

    async def wait(self) -> None:
        await asyncio.sleep(self.delay_seconds)


class NoThrottle:
    """Upload chunks back to back."""

    async def wait(self) -> None:
        return None


@dataclass
class ChunkFailure:
    """A chunk that could not be embedded or persisted."""

    chunk_index: int
    error: str


@dataclass
class IngestionResult:
    """Outcome of one ingestion run.

    Attributes:
        total_chunks: Number of chunks the text was split into
        stored: Chunks persisted successfully
        failed: Chunks that failed to embed or persist
        record_ids: Ids of the persisted records, in chunk order
        failures: Per-chunk failure details
    """

    total_chunks: int = 0
    stored: int = 0
    failed: int = 0
    record_ids: list[str] = field(default_factory=list)
    failures: list[ChunkFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.failed == 0

    @property
    def message(self) -> str:
        if self.failed:
            return (
                f"Processed {self.total_chunks} chunks: {self.stored} uploaded, "
                f"{self.failed} failed."
            )
        return (
            f"Successfully processed and uploaded {self.stored} chunks "
            "to the Knowledge Base."
        )

    def raise_for_failures(self) -> None:
        """Raise PartialIngestionFailure if any chunk failed."""
        if self.failed:
            raise PartialIngestionFailure(self)


class IngestionPipeline:
    """Populate the vector store from raw text.

    Chunks are embedded and persisted strictly one after another, with the
    throttle applied between uploads. A failed chunk is logged and counted
    and the remaining chunks still go through; records already persisted are
    never rolled back.
    """

    def __init__(
        self,
        embedder: EmbeddingService | None,
        store: VectorStore | None,
        *,
        splitter: Callable[[str, int, int], list[str]] = split,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        throttle: Throttle | None = None,
        authorizer: Callable[[str | None], None] | None = None,
        chunk_timeout: float = INGEST_CHUNK_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the pipeline.

        Args:
            embedder: Embedding service, or None when not configured
            store: Vector store, or None when not configured
            splitter: Chunking function with the signature of chunker.split
            chunk_size: Characters per chunk
            chunk_overlap: Characters shared by neighbouring chunks
            throttle: Delay policy between uploads (default: FixedDelayThrottle())
            authorizer: Callable that raises AuthorizationError on a bad credential;
                        None disables the check (trusted local callers)
            chunk_timeout: Upper bound in seconds on embedding + persisting one chunk
        """
        self.embedder = embedder
        self.store = store
        self.splitter = splitter
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.throttle = throttle if throttle is not None else FixedDelayThrottle()
        self.authorizer = authorizer
        self.chunk_timeout = chunk_timeout

    async def _store_chunk(self, chunk: str, metadata: dict) -> str:
        async with asyncio.timeout(self.chunk_timeout):
            vector = await self.embedder.embed(chunk, EmbeddingTask.DOCUMENT)
            return await self.store.upsert(chunk, vector, metadata)

    async def ingest(
        self,
        raw_text: str,
        credential: str | None = None,
        source: str | None = None,
    ) -> IngestionResult:
        """Chunk, embed and persist raw text.

        Args:
            raw_text: Document text
            credential: Caller-supplied secret, checked when an authorizer is set
            source: Optional source label stored in each record's metadata

        Returns:
            IngestionResult with success and failure counts

        Raises:
            AuthorizationError: If the credential is rejected
            ValidationError: If raw_text is empty or blank
            ConfigurationError: If the embedder or store is not configured
        """
        if self.authorizer is not None:
            self.authorizer(credential)

        if not isinstance(raw_text, str) or not raw_text.strip():
            raise ValidationError("No text provided")

        if self.embedder is None or self.store is None:
            raise ConfigurationError(
                "Ingestion requires a configured embedding service and vector store"
            )

        chunks = self.splitter(raw_text, self.chunk_size, self.chunk_overlap)
        logger.info(f"🔪 Split text into {len(chunks)} chunks")

        result = IngestionResult(total_chunks=len(chunks))
        ingested_at = datetime.now(timezone.utc).isoformat()

        for i, chunk in enumerate(chunks):
            if i > 0:
                await self.throttle.wait()

            metadata = {
                "source": source,
                "chunk_index": i,
                "chunk_size": self.chunk_size,
                "chunk_overlap": self.chunk_overlap,
                "ingested_at": ingested_at,
            }
            try:
                record_id = await self._store_chunk(chunk, metadata)
            except Exception as e:
                logger.error(f"❌ Error uploading chunk {i + 1}/{len(chunks)}: {e}")
                result.failed += 1
                result.failures.append(ChunkFailure(chunk_index=i, error=str(e) or type(e).__name__))
                continue

            result.stored += 1
            result.record_ids.append(record_id)
            logger.debug(f"⏳ Uploaded chunk {i + 1}/{len(chunks)}")

        logger.info(f"✅ Ingestion complete: {result.stored} stored, {result.failed} failed")
        return result
