"""Groq completion service implementation (OpenAI-compatible API)."""

import logging

from openai import AsyncOpenAI

from finchat.constants import (
    COMPLETION_TIMEOUT_SECONDS,
    DEFAULT_GROQ_MODEL,
    FAST_MAX_TOKENS,
    FAST_TEMPERATURE,
    GROQ_BASE_URL,
    GROQ_PROVIDER_LABEL,
)
from finchat.exceptions import CompletionFailure
from finchat.llm.base import ContentPart, ImagePart, parts_to_text

logger = logging.getLogger(__name__)


class GroqService:
    """Groq low-latency completion service.

    Groq exposes an OpenAI-compatible API, so the OpenAI SDK is pointed at
    Groq's base URL. Text only: image parts are dropped with a warning.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GROQ_MODEL,
        base_url: str = GROQ_BASE_URL,
        temperature: float = FAST_TEMPERATURE,
        max_tokens: int = FAST_MAX_TOKENS,
        timeout: float = COMPLETION_TIMEOUT_SECONDS,
        label: str = GROQ_PROVIDER_LABEL,
    ) -> None:
        """Initialize the Groq service.

        Args:
            api_key: Groq API key
            model: The model name to use (e.g., "llama-3.3-70b-versatile")
            base_url: OpenAI-compatible endpoint
            temperature: Sampling temperature
            max_tokens: Upper bound on generated tokens
            timeout: HTTP timeout in seconds
            label: Provider label attached to replies
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.label = label
        logger.info(f"🤖 Initializing GroqService: model={model}")

    def _make_client(self) -> AsyncOpenAI:
        """Create an SDK client; closed again after each call."""
        return AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)

    async def complete(
        self,
        system_instruction: str,
        parts: list[ContentPart],
        history: list[dict[str, str]] | None = None,
    ) -> str:
        """Generate a response using Groq.

        Args:
            system_instruction: System prompt including the retrieved context
            parts: Content of the current user turn (text only)
            history: Optional prior turns

        Returns:
            str: The generated response content from the model.

        Raises:
            CompletionFailure: If Groq returns no choices or empty content.
        """
        if any(isinstance(part, ImagePart) for part in parts):
            logger.warning("⚠️ GroqService is text-only; ignoring image attachment")

        messages = [{"role": "system", "content": system_instruction}]
        messages.extend(history or [])
        messages.append({"role": "user", "content": parts_to_text(parts)})

        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Messages: {len(messages)} messages")

        client = self._make_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        finally:
            await client.close()

        if not response.choices:
            raise CompletionFailure(f"{self.model} returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise CompletionFailure(f"{self.model} returned an empty response")

        logger.info(f"✅ Response generated: {len(content)} characters")
        return content
