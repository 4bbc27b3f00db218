"""Flask web application for the hybrid financial chat back-end.

This module exposes the chat endpoint (retrieval plus model routing) and the
ingestion endpoint that populates the vector store.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask

from finchat.client.routes import chat_bp, health_bp, ingest_bp, init_config
from finchat.service.registry import build_registry

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")

# Create Flask app
app = Flask(__name__)
# Base64 images arrive inside the JSON body
app.config["MAX_CONTENT_LENGTH"] = 20 * 1024 * 1024
logger.debug("Flask app created")

# Register blueprints
app.register_blueprint(chat_bp)
app.register_blueprint(ingest_bp)
app.register_blueprint(health_bp)


def initialize_services():
    """Build collaborators from the environment and hand them to the routes."""
    logger.info("🔧 Initializing services...")

    registry = build_registry()
    for name, error in registry.errors.items():
        logger.warning(f"⚠️ {name}: {error}")

    init_config(
        chat_service=registry.chat_service(),
        ingestion_pipeline=registry.ingestion_pipeline(),
        registry=registry,
    )
    logger.info("✅ Services initialized")


def create_app():
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting finchat Flask application...")
    initialize_services()

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "production") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
