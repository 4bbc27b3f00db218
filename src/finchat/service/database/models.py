"""Data models for vector store records."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from finchat.constants import DEFAULT_COLLECTION


@dataclass(eq=False)
class StoredChunk:
    """A chunk of a financial document with its embedding.

    Note: eq=False ensures each instance is unique and hashable by identity,
    which is required for RavenDB's session entity tracking.

    Attributes:
        Id: RavenDB document ID
        text: The text content of the chunk
        embedding: Vector embedding of the text
        metadata: source, chunk_index, chunk_size, chunk_overlap, ingested_at
        collection: Collection name for grouping documents
    """

    Id: str | None = None
    text: str = ""
    embedding: list[float] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    collection: str = DEFAULT_COLLECTION

    def __hash__(self) -> int:
        """Hash by object identity for RavenDB session tracking."""
        return id(self)


@dataclass(frozen=True)
class RetrievedChunk:
    """A stored chunk returned by similarity search, with its relevance score."""

    text: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


class VectorStore(Protocol):
    """Interface the core needs from a vector store."""

    async def upsert(self, text: str, vector: list[float], metadata: dict[str, Any]) -> str:
        """Persist a record and return its id."""
        ...

    async def query(self, vector: list[float], k: int) -> list[RetrievedChunk]:
        """Return up to k nearest records ordered by descending score."""
        ...
