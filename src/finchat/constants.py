"""Application-wide constants and defaults for finchat.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os

from finchat.exceptions import ConfigurationError

# =============================================================================
# Chunking
# =============================================================================
DEFAULT_CHUNK_SIZE = 1000  # Characters per chunk
DEFAULT_CHUNK_OVERLAP = 200  # Characters shared by neighbouring chunks

# =============================================================================
# Ingestion Throttling
# =============================================================================
DEFAULT_INGEST_DELAY_SECONDS = 0.5  # Between chunk uploads from the HTTP endpoint
DEFAULT_CLI_INGEST_DELAY_SECONDS = 1.0  # Offline ingestion is gentler on free-tier quotas

# =============================================================================
# Retrieval & Routing
# =============================================================================
DEFAULT_TOP_K = 3  # Number of chunks to put in the context window
MAX_HISTORY_MESSAGES = 10  # Prior turns forwarded to the provider

# =============================================================================
# Timeouts (seconds)
# =============================================================================
RETRIEVAL_TIMEOUT_SECONDS = 15.0
COMPLETION_TIMEOUT_SECONDS = 60.0
INGEST_CHUNK_TIMEOUT_SECONDS = 30.0

# =============================================================================
# Completion Providers
# =============================================================================
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
FAST_TEMPERATURE = 0.5
FAST_MAX_TOKENS = 1024

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEEP_TEMPERATURE = 0.3  # Lower temperature for analytical/financial tasks
DEEP_MAX_OUTPUT_TOKENS = 4096

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3"

# Labels shown next to each assistant reply
GROQ_PROVIDER_LABEL = "Groq (Llama 3.3)"
GEMINI_PROVIDER_LABEL = "Gemini 2.5 Flash"
OLLAMA_PROVIDER_LABEL = "Ollama (Local)"
SYSTEM_PROVIDER_LABEL = "system"

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

# =============================================================================
# Vector Store
# =============================================================================
DEFAULT_RAVENDB_DATABASE = "finchat"
DEFAULT_COLLECTION = "FinancialChunks"
VECTOR_INDEX_NAME = "FinancialChunks/ByEmbedding"

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 200  # Characters to show in content previews

# =============================================================================
# Embedding Model Defaults
# =============================================================================
EMBEDDING_DEFAULTS = {
    "ollama": "nomic-embed-text",
    "gemini": "text-embedding-004",
}

# Both defaults above produce 768-dimensional vectors
DEFAULT_EMBEDDING_DIMENSIONS = 768


def get_embedding_model(service: str | None = None) -> str:
    """Get the default embedding model for a given embedding service.

    Checks the EMBEDDING_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The embedding service name ("gemini" or "ollama").
                If None, uses EMBEDDING_SERVICE env var or defaults to "gemini".

    Returns:
        str: The embedding model name to use.
    """
    env_model = os.getenv("EMBEDDING_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("EMBEDDING_SERVICE", "gemini")

    return EMBEDDING_DEFAULTS.get(service, EMBEDDING_DEFAULTS["gemini"])


def get_embedding_dimensions() -> int:
    """Get the embedding dimension shared by every vector in the collection.

    Returns:
        int: Value of EMBEDDING_DIMENSIONS, or the default of 768

    Raises:
        ConfigurationError: If EMBEDDING_DIMENSIONS is not a positive integer
    """
    raw = os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS))
    try:
        dimensions = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"EMBEDDING_DIMENSIONS must be an integer, got {raw!r}") from e
    if dimensions < 1:
        raise ConfigurationError(f"EMBEDDING_DIMENSIONS must be positive, got {dimensions}")
    return dimensions
