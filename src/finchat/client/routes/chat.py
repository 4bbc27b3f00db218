"""Chat API route: retrieval-augmented answer from the routed provider."""

import logging

from flask import Blueprint, jsonify, request

from finchat.client.routes.config import get_config
from finchat.constants import SYSTEM_PROVIDER_LABEL
from finchat.exceptions import ValidationError
from finchat.service.async_helpers import run_async
from finchat.service.session import ChatSession

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


def error_response(message: str, status: int):
    """Error body the web client can render as an assistant message."""
    return jsonify({"error": message, "text": message, "provider": SYSTEM_PROVIDER_LABEL}), status


@chat_bp.route("/api/chat", methods=["POST"])
def chat():
    """Answer a chat message using RAG and the model router.

    Request:
        {
            "message": "What is the MMK exchange policy?",
            "history": [  # Optional prior turns
                {"sender": "user", "text": "Previous question"},
                {"sender": "assistant", "text": "Previous answer", "provider": "..."}
            ],
            "useComplexModel": false,  # Deep analysis toggle
            "image": "data:image/png;base64,..."  # Optional
        }

    Response:
        {"text": "The Central Bank of Myanmar...", "provider": "Groq (Llama 3.3)"}

    Errors:
        400 for a missing message or malformed history, 502 when the selected
        provider fails, 500 when the chat service is unavailable.
    """
    config = get_config()
    logger.info("📨 Received chat request")

    data = request.get_json(silent=True)
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, str) or not message.strip():
        logger.warning("❌ Missing 'message' field in request")
        return error_response("Missing 'message' field in request", 400)

    if config.chat_service is None:
        logger.error("❌ Chat service is not initialized")
        return error_response("System Error: chat service is not initialized", 500)

    deep_mode = bool(data.get("useComplexModel", False))
    image = data.get("image") or None
    if image is not None and not isinstance(image, str):
        logger.warning("❌ Non-string 'image' field in request")
        return error_response("'image' must be a base64 string or data URL", 400)

    try:
        session = ChatSession.from_history(data.get("history"))
        result = run_async(config.chat_service.handle_turn(session, message, deep_mode, image))
    except ValidationError as e:
        logger.warning(f"❌ Invalid chat request: {e}")
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"❌ Error processing chat request: {e}", exc_info=True)
        return error_response(f"System Error: {e}", 500)

    if not result.ok:
        return error_response(result.error, 502)

    logger.info(f"✅ Chat request answered by {result.provider}")
    return jsonify({"text": result.text, "provider": result.provider})
