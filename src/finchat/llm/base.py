"""Base types and protocols for completion and embedding services."""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from finchat.constants import DEFAULT_IMAGE_MIME_TYPE
from finchat.exceptions import ValidationError


class EmbeddingTask(str, Enum):
    """Intent of an embedding request, for models that distinguish them."""

    DOCUMENT = "document"
    QUERY = "query"


@dataclass(frozen=True)
class TextPart:
    """A plain-text piece of user content."""

    text: str


@dataclass(frozen=True)
class ImagePart:
    """An inline image piece of user content.

    Attributes:
        data: Base64-encoded image bytes (no data URL prefix)
        mime_type: MIME type of the image, e.g. "image/png"
    """

    data: str
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE

    @classmethod
    def from_encoded(cls, encoded: str) -> "ImagePart":
        """Build an ImagePart from a data URL or a bare base64 string.

        Args:
            encoded: "data:image/png;base64,...." or raw base64

        Returns:
            ImagePart with the prefix stripped and the MIME type detected

        Raises:
            ValidationError: If the payload is not a string, is empty or is not valid base64
        """
        if not isinstance(encoded, str):
            raise ValidationError(f"Image payload must be a string, got {type(encoded).__name__}")
        mime_type = DEFAULT_IMAGE_MIME_TYPE
        data = encoded.strip()
        if data.startswith("data:") and "," in data:
            header, data = data.split(",", 1)
            declared = header[len("data:"):].split(";", 1)[0]
            if declared:
                mime_type = declared

        if not data:
            raise ValidationError("Image payload is empty")
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Image payload is not valid base64: {e}") from e

        return cls(data=data, mime_type=mime_type)

    def to_bytes(self) -> bytes:
        """Decode the image payload."""
        return base64.b64decode(self.data)


ContentPart = TextPart | ImagePart


def parts_to_text(parts: list[ContentPart]) -> str:
    """Join the text parts of a content sequence, dropping images."""
    return "\n".join(part.text for part in parts if isinstance(part, TextPart))


class CompletionService(Protocol):
    """Protocol defining the interface for chat completion providers.

    Implementations carry their own model, temperature and output bound; the
    caller only supplies the prompt.
    """

    label: str

    async def complete(
        self,
        system_instruction: str,
        parts: list[ContentPart],
        history: list[dict[str, str]] | None = None,
    ) -> str:
        """Generate a completion for the given prompt.

        Args:
            system_instruction: System prompt with the retrieved context rendered in
            parts: Content of the current user turn. Text-only providers ignore
                   ImagePart entries.
            history: Optional prior turns as {"role", "content"} dictionaries,
                     roles limited to "user" and "assistant".

        Returns:
            str: The generated text.

        Raises:
            CompletionFailure: If the provider returns no usable text.
        """
        ...


class EmbeddingService(Protocol):
    """Protocol defining the interface for embedding providers."""

    async def embed(self, text: str, task: EmbeddingTask = EmbeddingTask.DOCUMENT) -> list[float]:
        """Turn text into a fixed-length vector.

        Args:
            text: Text to embed
            task: Whether the text is a stored document or a search query

        Returns:
            list[float]: The embedding vector
        """
        ...
