"""Completion and embedding provider layer for finchat.

This package provides a unified interface over the hosted model providers:
- GroqService: low-latency text completions (OpenAI-compatible API)
- GeminiService: multimodal completions and embeddings
- OllamaService: local completions and embeddings

Usage:
    from finchat.llm import get_fast_llm_service, get_deep_llm_service

    fast = get_fast_llm_service()
    deep = get_deep_llm_service({"model": "gemini-2.5-flash"})
"""

from finchat.llm.base import (
    CompletionService,
    ContentPart,
    EmbeddingService,
    EmbeddingTask,
    ImagePart,
    TextPart,
)
from finchat.llm.factory import (
    get_deep_llm_service,
    get_embedding_service,
    get_fast_llm_service,
)
from finchat.llm.gemini import GeminiService
from finchat.llm.groq import GroqService
from finchat.llm.ollama import OllamaService

__all__ = [
    "CompletionService",
    "ContentPart",
    "EmbeddingService",
    "EmbeddingTask",
    "ImagePart",
    "TextPart",
    "GeminiService",
    "GroqService",
    "OllamaService",
    "get_deep_llm_service",
    "get_embedding_service",
    "get_fast_llm_service",
]
