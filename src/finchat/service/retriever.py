"""Retriever: turn a query into a context block of the nearest stored chunks."""

import asyncio
import logging

from finchat.constants import DEFAULT_TOP_K, RETRIEVAL_TIMEOUT_SECONDS
from finchat.exceptions import RetrievalFailure, ValidationError
from finchat.llm.base import EmbeddingService, EmbeddingTask
from finchat.service.database.models import RetrievedChunk, VectorStore

logger = logging.getLogger(__name__)


def format_context(chunks: list[RetrievedChunk]) -> str:
    """Join chunk texts, most relevant first, separated by a blank line."""
    ordered = sorted(chunks, key=lambda chunk: chunk.score, reverse=True)
    return "\n\n".join(chunk.text for chunk in ordered)


class Retriever:
    """Similarity search over the vector store."""

    def __init__(
        self,
        embedder: EmbeddingService | None,
        store: VectorStore | None,
        timeout: float = RETRIEVAL_TIMEOUT_SECONDS,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.timeout = timeout

    async def search(self, query: str, k: int = DEFAULT_TOP_K) -> list[RetrievedChunk]:
        """Return the k nearest stored chunks for a query.

        Args:
            query: Search text
            k: Number of chunks to return; must be a positive integer

        Returns:
            list[RetrievedChunk]: Most relevant first

        Raises:
            ValidationError: If k is not a positive integer
            RetrievalFailure: If the collaborators are missing or any call fails
        """
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise ValidationError(f"k must be a positive integer, got {k!r}")
        if self.embedder is None or self.store is None:
            raise RetrievalFailure("Retrieval requires a configured embedding service and vector store")

        try:
            async with asyncio.timeout(self.timeout):
                vector = await self.embedder.embed(query, EmbeddingTask.QUERY)
                results = await self.store.query(vector, k)
        except TimeoutError as e:
            raise RetrievalFailure(f"Retrieval timed out after {self.timeout}s") from e
        except Exception as e:
            raise RetrievalFailure(f"{type(e).__name__}: {e}") from e

        logger.info(f"[RAG] Retrieved {len(results)} docs")
        return sorted(results, key=lambda chunk: chunk.score, reverse=True)[:k]

    async def retrieve(self, query: str, k: int = DEFAULT_TOP_K) -> str:
        """Build the context block for a query.

        Never raises on collaborator failure: any RetrievalFailure degrades to
        an empty context so the chat turn can continue.

        Returns:
            str: Chunk texts joined by blank lines, or "" when nothing is found
        """
        try:
            chunks = await self.search(query, k)
        except RetrievalFailure as e:
            logger.warning(f"⚠️ [RAG] Retrieval failed, proceeding without context: {e}")
            return ""
        return format_context(chunks)
