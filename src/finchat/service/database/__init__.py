"""Vector store configuration and operations for RavenDB.

Usage:
    from finchat.service.database import RavenDBConfig, RavenVectorStore

    store = RavenVectorStore(RavenDBConfig.require_url())
"""

from finchat.service.database.config import RavenDBConfig
from finchat.service.database.models import RetrievedChunk, StoredChunk, VectorStore
from finchat.service.database.operations import (
    count_documents,
    create_database,
    create_document_store,
    database_exists,
    delete_database,
    ensure_index_exists,
)
from finchat.service.database.store import RavenVectorStore
from finchat.service.database.utils import check_dimensions, cosine_similarity

__all__ = [
    # Config
    "RavenDBConfig",
    # Models
    "RetrievedChunk",
    "StoredChunk",
    "VectorStore",
    # Operations
    "create_document_store",
    "ensure_index_exists",
    "database_exists",
    "create_database",
    "delete_database",
    "count_documents",
    # Store
    "RavenVectorStore",
    # Utils
    "check_dimensions",
    "cosine_similarity",
]
