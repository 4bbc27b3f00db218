"""RavenDB-backed vector store used by ingestion and retrieval."""

import asyncio
import logging
import threading
import uuid
from typing import Any

from ravendb import DocumentStore

from finchat.constants import VECTOR_INDEX_NAME, get_embedding_dimensions
from finchat.service.database.config import RavenDBConfig
from finchat.service.database.models import RetrievedChunk, StoredChunk
from finchat.service.database.operations import create_document_store, ensure_index_exists
from finchat.service.database.utils import check_dimensions, cosine_similarity

logger = logging.getLogger(__name__)


class RavenVectorStore:
    """Vector store over a single RavenDB collection.

    The RavenDB client is synchronous, so each operation runs in a worker
    thread to keep the event loop free. Records are append-only: every upsert
    gets a fresh id, so re-ingesting the same text creates duplicates.
    """

    def __init__(
        self,
        url: str,
        database: str | None = None,
        collection: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        self.url = url
        self.database = database or RavenDBConfig.get_database_name()
        self.collection = collection or RavenDBConfig.get_collection()
        self.dimensions = dimensions or get_embedding_dimensions()
        self._store: DocumentStore | None = None
        self._lock = threading.Lock()
        logger.info(
            f"🗄️  Vector store: {self.url}/{self.database} "
            f"collection={self.collection}, dimensions={self.dimensions}"
        )

    def _get_store(self) -> DocumentStore:
        """Lazily create the document store and its vector index."""
        with self._lock:
            if self._store is None:
                store = create_document_store(self.url, self.database)
                ensure_index_exists(store, self.collection)
                self._store = store
            return self._store

    def close(self) -> None:
        with self._lock:
            if self._store is not None:
                self._store.close()
                self._store = None

    def _upsert_sync(self, text: str, vector: list[float], metadata: dict[str, Any]) -> str:
        check_dimensions(vector, self.dimensions)
        doc_id = f"{self.collection}/{uuid.uuid4().hex}"
        doc = StoredChunk(
            Id=doc_id,
            text=text,
            embedding=vector,
            metadata=dict(metadata),
            collection=self.collection,
        )

        with self._get_store().open_session() as session:
            session.store(doc, doc_id)
            session.advanced.get_metadata_for(doc)["@collection"] = self.collection
            session.save_changes()

        return doc_id

    async def upsert(self, text: str, vector: list[float], metadata: dict[str, Any]) -> str:
        """Persist one (chunk, vector, metadata) record.

        Returns:
            str: The new record id

        Raises:
            ValueError: If the vector does not match the collection's dimension
        """
        return await asyncio.to_thread(self._upsert_sync, text, vector, metadata)

    def _query_sync(self, vector: list[float], k: int) -> list[RetrievedChunk]:
        with self._get_store().open_session() as session:
            results = list(
                session.query_index(VECTOR_INDEX_NAME, object_type=dict)
                .vector_search("embedding", vector)
                .order_by_score()
                .take(k)
            )

        chunks = []
        for result in results:
            index_score = result.get("@metadata", {}).get("@index-score")
            if index_score is not None:
                score = float(index_score)
            else:
                score = cosine_similarity(vector, result.get("embedding", []))
            chunks.append(
                RetrievedChunk(
                    text=result.get("text", ""),
                    score=score,
                    metadata=result.get("metadata", {}),
                )
            )

        chunks.sort(key=lambda chunk: chunk.score, reverse=True)
        return chunks[:k]

    async def query(self, vector: list[float], k: int) -> list[RetrievedChunk]:
        """Return the k nearest stored chunks, most relevant first."""
        return await asyncio.to_thread(self._query_sync, vector, k)
