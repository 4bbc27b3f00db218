"""Database maintenance operations for RavenDB - setup, indexing, counting."""

import requests
from ravendb import DocumentStore
from ravendb.documents.indexes.definitions import (
    FieldIndexing,
    FieldStorage,
    IndexDefinition,
    IndexFieldOptions,
)
from ravendb.documents.indexes.vector.options import VectorOptions
from ravendb.documents.operations.indexes import GetIndexNamesOperation, PutIndexesOperation
from ravendb.serverwide.operations.common import DeleteDatabaseOperation

from finchat.constants import VECTOR_INDEX_NAME, get_embedding_dimensions
from finchat.service.database.config import RavenDBConfig


def _resolve(url: str | None, database: str | None) -> tuple[str, str]:
    return url or RavenDBConfig.require_url(), database or RavenDBConfig.get_database_name()


def create_document_store(url: str | None = None, database: str | None = None) -> DocumentStore:
    """Create and initialize a DocumentStore instance.

    Args:
        url: RavenDB server URL (defaults to RAVENDB_URL)
        database: Database name (defaults to RAVENDB_DATABASE)

    Returns:
        DocumentStore: Initialized DocumentStore instance

    Raises:
        ConfigurationError: If no URL is given and RAVENDB_URL is unset
    """
    url, database = _resolve(url, database)
    store = DocumentStore([url], database)
    store.initialize()
    return store


def ensure_index_exists(store: DocumentStore, collection: str | None = None) -> None:
    """Ensure the vector search index exists in RavenDB.

    Creates a static index with a vector field sized to EMBEDDING_DIMENSIONS.

    Args:
        store: Initialized DocumentStore instance
        collection: Collection to index (defaults to RAVENDB_COLLECTION)
    """
    collection = collection or RavenDBConfig.get_collection()

    existing_indexes = store.maintenance.send(GetIndexNamesOperation(0, 100))
    if VECTOR_INDEX_NAME in existing_indexes:
        return

    index_definition = IndexDefinition()
    index_definition.name = VECTOR_INDEX_NAME
    index_definition.maps = {
        f"""from chunk in docs.{collection}
        where chunk.embedding != null
        select new {{
            text = chunk.text,
            embedding = CreateField("embedding", chunk.embedding, new CreateFieldOptions {{ Storage = FieldStorage.Yes, Indexing = FieldIndexing.No }})
        }}"""
    }

    vector_options = VectorOptions(dimensions=get_embedding_dimensions())
    index_definition.fields = {
        "embedding": IndexFieldOptions(
            storage=FieldStorage.YES, indexing=FieldIndexing.NO, vector=vector_options
        )
    }

    store.maintenance.send(PutIndexesOperation(index_definition))


def database_exists(url: str | None = None, database: str | None = None) -> bool:
    """Check if a database exists in RavenDB.

    Returns:
        bool: True if database exists, False otherwise
    """
    url, database = _resolve(url, database)
    store = DocumentStore([url], database)
    try:
        store.initialize()
        with store.open_session() as session:
            list(session.query().take(0))
        return True
    except Exception:
        return False
    finally:
        store.close()


def create_database(url: str | None = None, database: str | None = None) -> None:
    """Create a new database in RavenDB."""
    url, database = _resolve(url, database)
    api_url = f"{url}/admin/databases"
    payload = {"DatabaseName": database, "Settings": {}, "Disabled": False}

    response = requests.put(api_url, json=payload, timeout=10)
    response.raise_for_status()


def delete_database(url: str | None = None, database: str | None = None) -> None:
    """Delete a database from RavenDB.

    WARNING: This operation is irreversible and will delete all data in the database.
    """
    url, database = _resolve(url, database)
    store = DocumentStore([url], database)
    try:
        store.initialize()
        operation = DeleteDatabaseOperation(database_name=database, hard_delete=True)
        store.maintenance.server.send(operation)
    finally:
        store.close()


def count_documents(
    url: str | None = None, database: str | None = None, collection: str | None = None
) -> int:
    """Count the stored chunks in the collection.

    Returns:
        int: Number of chunk records
    """
    url, database = _resolve(url, database)
    collection = collection or RavenDBConfig.get_collection()

    store = DocumentStore([url], database)
    store.initialize()
    try:
        with store.open_session() as session:
            results = list(session.advanced.raw_query(f"from {collection}", object_type=dict))
            return len(results)
    finally:
        store.close()
