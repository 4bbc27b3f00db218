"""Google Gemini completion and embedding service implementation."""

import logging
from typing import Any

from google import genai

from finchat.constants import (
    COMPLETION_TIMEOUT_SECONDS,
    DEEP_MAX_OUTPUT_TOKENS,
    DEEP_TEMPERATURE,
    DEFAULT_GEMINI_MODEL,
    GEMINI_PROVIDER_LABEL,
    get_embedding_model,
)
from finchat.exceptions import CompletionFailure
from finchat.llm.base import ContentPart, EmbeddingTask, ImagePart, TextPart

logger = logging.getLogger(__name__)

# Gemini task types for retrieval embeddings
_TASK_TYPES = {
    EmbeddingTask.DOCUMENT: "RETRIEVAL_DOCUMENT",
    EmbeddingTask.QUERY: "RETRIEVAL_QUERY",
}


class GeminiService:
    """Google Gemini service for multimodal completions and embeddings.

    This is the high-capability provider: it accepts image parts and is used
    for "deep analysis" requests. A fresh SDK client is created per call so no
    connection pool outlives the event loop that created it.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        embedding_model: str | None = None,
        temperature: float = DEEP_TEMPERATURE,
        max_output_tokens: int = DEEP_MAX_OUTPUT_TOKENS,
        timeout: float = COMPLETION_TIMEOUT_SECONDS,
        label: str = GEMINI_PROVIDER_LABEL,
    ) -> None:
        """Initialize the Gemini service.

        Args:
            api_key: Google AI Studio API key
            model: The model name to use (e.g., "gemini-2.5-flash")
            embedding_model: Embedding model name (default: EMBEDDING_MODEL env or
                             "text-embedding-004")
            temperature: Sampling temperature for completions
            max_output_tokens: Upper bound on generated tokens
            timeout: HTTP timeout in seconds
            label: Provider label attached to replies
        """
        self.api_key = api_key
        self.model = model
        self.embedding_model = embedding_model or get_embedding_model("gemini")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self.label = label
        logger.info(f"🤖 Initializing GeminiService: model={model}, embeddings={self.embedding_model}")

    def _make_client(self) -> genai.Client:
        """Create an SDK client bound to the configured key and timeout; closed after each call."""
        return genai.Client(
            api_key=self.api_key,
            http_options=genai.types.HttpOptions(timeout=int(self.timeout * 1000)),
        )

    @staticmethod
    def _convert_parts(parts: list[ContentPart]) -> list[genai.types.Part]:
        """Convert content parts to Gemini parts, images first like the web client."""
        images = [
            genai.types.Part.from_bytes(data=part.to_bytes(), mime_type=part.mime_type)
            for part in parts
            if isinstance(part, ImagePart)
        ]
        texts = [genai.types.Part(text=part.text) for part in parts if isinstance(part, TextPart)]
        return images + texts

    def _build_contents(
        self, parts: list[ContentPart], history: list[dict[str, str]] | None
    ) -> list[genai.types.Content]:
        contents = []
        for msg in history or []:
            # Gemini calls the assistant role "model"
            role = "model" if msg["role"] == "assistant" else "user"
            contents.append(
                genai.types.Content(role=role, parts=[genai.types.Part(text=msg["content"])])
            )
        contents.append(genai.types.Content(role="user", parts=self._convert_parts(parts)))
        return contents

    async def complete(
        self,
        system_instruction: str,
        parts: list[ContentPart],
        history: list[dict[str, str]] | None = None,
    ) -> str:
        """Generate a response using Gemini.

        Args:
            system_instruction: System prompt including the retrieved context
            parts: Text and image parts of the current user turn
            history: Optional prior turns

        Returns:
            str: The generated response content from the model.

        Raises:
            CompletionFailure: If Gemini returns no text.
        """
        image_count = sum(1 for part in parts if isinstance(part, ImagePart))
        logger.info(f"🗣️  Generating response with {self.model} ({image_count} image(s))")

        config = genai.types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
        generate_kwargs: dict[str, Any] = {
            "model": self.model,
            "contents": self._build_contents(parts, history),
            "config": config,
        }

        client = self._make_client()
        try:
            response = await client.aio.models.generate_content(**generate_kwargs)
        finally:
            await client.aio.aclose()

        content = response.text
        if not content:
            raise CompletionFailure(f"{self.model} returned an empty response")
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content

    async def embed(self, text: str, task: EmbeddingTask = EmbeddingTask.DOCUMENT) -> list[float]:
        """Generate an embedding for a text using Gemini.

        Args:
            text: Text to embed
            task: Document or query intent, mapped to Gemini's task types

        Returns:
            list[float]: Embedding vector
        """
        client = self._make_client()
        try:
            response = await client.aio.models.embed_content(
                model=self.embedding_model,
                contents=[text],
                config=genai.types.EmbedContentConfig(task_type=_TASK_TYPES[task]),
            )
        finally:
            await client.aio.aclose()
        values = response.embeddings[0].values
        logger.debug(f"Generated {len(values)}-dim {task.value} embedding with {self.embedding_model}")
        return list(values)
