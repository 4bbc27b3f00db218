"""Model router: pick a completion provider and build its prompt."""

import asyncio
import logging
from dataclasses import dataclass

from finchat.constants import COMPLETION_TIMEOUT_SECONDS, SYSTEM_PROVIDER_LABEL
from finchat.exceptions import ValidationError
from finchat.llm.base import CompletionService, ContentPart, ImagePart, TextPart

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION_TEMPLATE = """You are a Senior Financial Analyst for the Myanmar market.
Use the provided CONTEXT from the database to answer questions accurately.
If the context is empty or irrelevant, use your general knowledge but mention the lack of specific internal data.
{mode_instruction}

CONTEXT:
{context}
"""

DEEP_MODE_INSTRUCTION = (
    'You are in "Deep Analysis" mode. Provide detailed, structured reasoning.'
)
FAST_MODE_INSTRUCTION = "Answer quickly and concisely."


@dataclass(frozen=True)
class RoutingResult:
    """Outcome of one routed completion.

    On failure ``text`` is empty, ``provider`` is the system label and
    ``error`` carries a human-readable explanation.
    """

    text: str
    provider: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display_text(self) -> str:
        """Text to show the user: the completion, or the error message."""
        return self.text if self.ok else self.error


def should_use_high_capability(deep_mode: bool, image: str | None) -> bool:
    """The single routing predicate: deep mode or an attached image."""
    return bool(deep_mode) or bool(image)


def build_system_instruction(context: str, deep_mode: bool) -> str:
    """Render the analyst persona with the retrieved context.

    The CONTEXT section is always present, empty when nothing was retrieved.
    """
    mode_instruction = DEEP_MODE_INSTRUCTION if deep_mode else FAST_MODE_INSTRUCTION
    return SYSTEM_INSTRUCTION_TEMPLATE.format(mode_instruction=mode_instruction, context=context or "")


class ModelRouter:
    """Route a request to the low-latency or the high-capability provider.

    There is no retry and no failover: if the selected provider fails, the
    failure is returned as a RoutingResult and the other provider is not tried.
    """

    def __init__(
        self,
        fast_service: CompletionService | None,
        deep_service: CompletionService | None,
        timeout: float = COMPLETION_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the router.

        Args:
            fast_service: Low-latency text-only provider (Groq by default)
            deep_service: High-capability multimodal provider (Gemini)
            timeout: Upper bound in seconds on one completion call
        """
        self.fast_service = fast_service
        self.deep_service = deep_service
        self.timeout = timeout

    def select(self, deep_mode: bool, image: str | None) -> tuple[bool, CompletionService | None]:
        """Return (use_high_capability, provider) for a request."""
        use_high = should_use_high_capability(deep_mode, image)
        return use_high, self.deep_service if use_high else self.fast_service

    @staticmethod
    def _failure(message: str) -> RoutingResult:
        return RoutingResult(text="", provider=SYSTEM_PROVIDER_LABEL, error=message)

    async def route(
        self,
        user_text: str,
        context_text: str,
        deep_mode: bool,
        image: str | None = None,
        history: list[dict[str, str]] | None = None,
    ) -> RoutingResult:
        """Generate a completion with the selected provider.

        Args:
            user_text: The user's question
            context_text: Retrieved context (may be empty)
            deep_mode: The user's "deep think" toggle
            image: Optional encoded image (data URL or base64)
            history: Optional prior turns as role/content dictionaries

        Returns:
            RoutingResult: The completion and provider label, or a structured
            failure labelled "system". Never raises for provider errors.
        """
        use_high, service = self.select(deep_mode, image)
        path = "high-capability" if use_high else "low-latency"

        if service is None:
            message = f"The {path} provider is not configured. Please check the server credentials."
            logger.error(f"❌ {message}")
            return self._failure(message)

        parts: list[ContentPart] = [TextPart(user_text)]
        if use_high and image:
            try:
                parts.append(ImagePart.from_encoded(image))
            except ValidationError as e:
                logger.warning(f"⚠️ Rejected image attachment: {e}")
                return self._failure(f"The attached image could not be read: {e}")

        system_instruction = build_system_instruction(context_text, deep_mode=use_high)
        logger.info(f"🔀 Routing to {service.label} ({path}, context={len(context_text)} chars)")

        try:
            async with asyncio.timeout(self.timeout):
                text = await service.complete(system_instruction, parts, history)
        except TimeoutError:
            logger.error(f"❌ {service.label} timed out after {self.timeout}s")
            return self._failure(
                f"{service.label} did not respond within {self.timeout:g} seconds. Please try again."
            )
        except Exception as e:
            logger.error(f"❌ {service.label} error: {e}", exc_info=True)
            return self._failure(f"I encountered an error while contacting {service.label}: {e}")

        return RoutingResult(text=text, provider=service.label)
