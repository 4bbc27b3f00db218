"""One chat turn: retrieve context, route the completion, record both messages."""

import logging

from finchat.constants import DEFAULT_TOP_K
from finchat.exceptions import ValidationError
from finchat.service.retriever import Retriever
from finchat.service.router import ModelRouter, RoutingResult
from finchat.service.session import ChatSession, Sender

logger = logging.getLogger(__name__)


class ChatService:
    """Glue between the retriever, the router and the session log."""

    def __init__(self, retriever: Retriever, router: ModelRouter, top_k: int = DEFAULT_TOP_K) -> None:
        self.retriever = retriever
        self.router = router
        self.top_k = top_k

    async def handle_turn(
        self,
        session: ChatSession,
        message: str,
        deep_mode: bool = False,
        image: str | None = None,
    ) -> RoutingResult:
        """Answer one user message and append both sides to the session.

        Retrieval problems degrade to an empty context and provider problems
        come back as a failed RoutingResult; in both cases an assistant entry
        is still appended so the conversation shows what happened.

        Raises:
            ValidationError: If the message is empty or blank
        """
        if not message or not message.strip():
            raise ValidationError("Missing 'message' field in request")

        history = session.history()
        session.append(Sender.USER, message, image=image)

        logger.info(f"💬 Chat turn: '{message[:100]}' (deep={deep_mode}, image={bool(image)})")
        context = await self.retriever.retrieve(message, self.top_k)
        result = await self.router.route(message, context, deep_mode, image=image, history=history)

        session.append(Sender.ASSISTANT, result.display_text, provider=result.provider)
        return result
