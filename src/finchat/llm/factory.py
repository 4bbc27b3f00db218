"""Factory functions for creating completion and embedding service instances."""

import logging
import os

from dotenv import load_dotenv

from finchat.constants import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GROQ_MODEL,
    DEFAULT_OLLAMA_HOST,
    DEFAULT_OLLAMA_MODEL,
)
from finchat.exceptions import ConfigurationError
from finchat.llm.base import CompletionService, EmbeddingService
from finchat.llm.gemini import GeminiService
from finchat.llm.groq import GroqService
from finchat.llm.ollama import OllamaService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_google_api_key() -> str | None:
    """Return the Gemini API key from GEMINI_API_KEY or GOOGLE_API_KEY."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


def _require_google_api_key(config: dict) -> str:
    api_key = config.get("api_key") or get_google_api_key()
    if not api_key:
        raise ConfigurationError("Missing Gemini credentials: set GEMINI_API_KEY or GOOGLE_API_KEY")
    return api_key


def get_fast_llm_service(config: dict | None = None) -> CompletionService:
    """Create the low-latency completion service.

    Args:
        config: Optional configuration dictionary. If None, uses environment variables.
                Expected keys:
                - 'service': "groq" (default, from FAST_LLM_SERVICE env) or "ollama"
                - 'model': Model name (default: from FAST_LLM_MODEL env)
                - 'api_key': Groq API key (default: from GROQ_API_KEY env)
                - 'host': Ollama host URL (default: from OLLAMA_HOST env)

    Returns:
        CompletionService: A text-only completion provider.

    Raises:
        ConfigurationError: If the Groq API key is missing or the service type is unknown.
    """
    if config is None:
        config = {}

    service_type = config.get("service", os.getenv("FAST_LLM_SERVICE", "groq"))

    if service_type == "groq":
        api_key = config.get("api_key", os.getenv("GROQ_API_KEY"))
        if not api_key:
            raise ConfigurationError("Missing Groq credentials: set GROQ_API_KEY")
        model = config.get("model", os.getenv("FAST_LLM_MODEL", DEFAULT_GROQ_MODEL))
        return GroqService(api_key=api_key, model=model)

    if service_type == "ollama":
        host = config.get("host", os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST))
        model = config.get("model", os.getenv("FAST_LLM_MODEL", DEFAULT_OLLAMA_MODEL))
        return OllamaService(host=host, model=model)

    raise ConfigurationError(f"Unsupported fast LLM service type: {service_type}")


def get_deep_llm_service(config: dict | None = None) -> CompletionService:
    """Create the high-capability (multimodal) completion service.

    Args:
        config: Optional configuration dictionary with 'model' and 'api_key' keys.
                Defaults come from DEEP_LLM_MODEL and GEMINI_API_KEY.

    Returns:
        CompletionService: The Gemini provider.

    Raises:
        ConfigurationError: If the Gemini API key is missing.
    """
    if config is None:
        config = {}

    api_key = _require_google_api_key(config)
    model = config.get("model", os.getenv("DEEP_LLM_MODEL", DEFAULT_GEMINI_MODEL))
    return GeminiService(api_key=api_key, model=model)


def get_embedding_service(config: dict | None = None) -> EmbeddingService:
    """Create the embedding service.

    Args:
        config: Optional configuration dictionary. Expected keys:
                - 'service': "gemini" (default, from EMBEDDING_SERVICE env) or "ollama"
                - 'model': Embedding model (default: EMBEDDING_MODEL env or service default)
                - 'api_key' / 'host': Provider credentials or location

    Returns:
        EmbeddingService: The embedding provider.

    Raises:
        ConfigurationError: If Gemini credentials are missing or the service type is unknown.
    """
    if config is None:
        config = {}

    service_type = config.get("service", os.getenv("EMBEDDING_SERVICE", "gemini"))
    model = config.get("model")

    if service_type == "gemini":
        api_key = _require_google_api_key(config)
        return GeminiService(api_key=api_key, embedding_model=model)

    if service_type == "ollama":
        host = config.get("host", os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST))
        return OllamaService(host=host, embedding_model=model)

    raise ConfigurationError(f"Unsupported embedding service type: {service_type}")
