"""Ingestion API route for adding text to the knowledge base."""

import logging

from flask import Blueprint, jsonify, request

from finchat.client.routes.config import get_config
from finchat.exceptions import AuthorizationError, ConfigurationError, ValidationError
from finchat.service.async_helpers import run_async

logger = logging.getLogger(__name__)

ingest_bp = Blueprint("ingest", __name__)


@ingest_bp.route("/api/ingest", methods=["POST"])
def ingest():
    """Chunk, embed and store a text document.

    Request:
        {"text": "...", "password": "..."}

    Response:
        {
            "success": true,
            "message": "Successfully processed and uploaded 12 chunks to the Knowledge Base.",
            "chunks_stored": 12,
            "chunks_failed": 0
        }

    Errors:
        401 {"error": "Unauthorized"}, 400 {"error": "No text provided"},
        500 {"error": "..."} for configuration or unexpected failures.
    """
    config = get_config()
    logger.info("📤 Received ingestion request")

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    if config.ingestion_pipeline is None:
        logger.error("❌ Ingestion pipeline is not initialized")
        return jsonify({"error": "Server misconfiguration (ingestion unavailable)"}), 500

    text = data.get("text")
    if text is not None and not isinstance(text, str):
        logger.warning("❌ Non-string 'text' field in ingestion request")
        return jsonify({"error": "'text' must be a string"}), 400

    try:
        result = run_async(
            config.ingestion_pipeline.ingest(
                text or "",
                credential=data.get("password"),
                source=data.get("source") or "admin",
            )
        )
    except AuthorizationError:
        return jsonify({"error": "Unauthorized"}), 401
    except ValidationError as e:
        logger.warning(f"❌ Invalid ingestion request: {e}")
        return jsonify({"error": str(e)}), 400
    except ConfigurationError as e:
        logger.error(f"❌ Server misconfiguration: {e}")
        return jsonify({"error": f"Server misconfiguration ({e})"}), 500
    except Exception as e:
        logger.error(f"❌ Ingest API error: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify(
        {
            "success": result.succeeded,
            "message": result.message,
            "chunks_stored": result.stored,
            "chunks_failed": result.failed,
        }
    )
