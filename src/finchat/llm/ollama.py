"""Ollama completion and embedding service implementation."""

import logging

import ollama

from finchat.constants import (
    DEFAULT_OLLAMA_HOST,
    DEFAULT_OLLAMA_MODEL,
    FAST_TEMPERATURE,
    OLLAMA_PROVIDER_LABEL,
    get_embedding_model,
)
from finchat.exceptions import CompletionFailure
from finchat.llm.base import ContentPart, EmbeddingTask, ImagePart, parts_to_text

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama service for local completions and embeddings.

    Can stand in for Groq on the low-latency path (FAST_LLM_SERVICE=ollama)
    and for Gemini as the embedding backend (EMBEDDING_SERVICE=ollama).
    """

    def __init__(
        self,
        host: str = DEFAULT_OLLAMA_HOST,
        model: str = DEFAULT_OLLAMA_MODEL,
        embedding_model: str | None = None,
        temperature: float = FAST_TEMPERATURE,
        label: str = OLLAMA_PROVIDER_LABEL,
    ) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The model name to use (e.g., "llama3")
            embedding_model: Embedding model name (default: EMBEDDING_MODEL env or
                             "nomic-embed-text")
            temperature: Sampling temperature
            label: Provider label attached to replies
        """
        self.host = host
        self.model = model
        self.embedding_model = embedding_model or get_embedding_model("ollama")
        self.temperature = temperature
        self.label = label
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")

    def _make_client(self) -> ollama.AsyncClient:
        return ollama.AsyncClient(host=self.host)

    async def complete(
        self,
        system_instruction: str,
        parts: list[ContentPart],
        history: list[dict[str, str]] | None = None,
    ) -> str:
        """Generate a response using Ollama.

        Args:
            system_instruction: System prompt including the retrieved context
            parts: Content of the current user turn (text only)
            history: Optional prior turns

        Returns:
            str: The generated response content from the model.
        """
        if any(isinstance(part, ImagePart) for part in parts):
            logger.warning("⚠️ OllamaService is text-only; ignoring image attachment")

        messages = [{"role": "system", "content": system_instruction}]
        messages.extend(history or [])
        messages.append({"role": "user", "content": parts_to_text(parts)})

        logger.info(f"🗣️  Generating response with {self.model}")
        client = self._make_client()
        try:
            response = await client.chat(
                model=self.model,
                messages=messages,
                options={"temperature": self.temperature},
            )
        finally:
            await client.close()

        content = response.message.content or ""
        if not content:
            raise CompletionFailure(f"{self.model} returned an empty response")
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content

    async def embed(self, text: str, task: EmbeddingTask = EmbeddingTask.DOCUMENT) -> list[float]:
        """Generate an embedding for a text using Ollama.

        Ollama models do not distinguish document and query intent, so the
        task is ignored.
        """
        client = self._make_client()
        try:
            response = await client.embed(model=self.embedding_model, input=text)
        finally:
            await client.close()
        return list(response["embeddings"][0])
