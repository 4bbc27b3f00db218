"""Flask route blueprints for the finchat application."""

from finchat.client.routes.chat import chat_bp
from finchat.client.routes.config import get_config, init_config
from finchat.client.routes.health import health_bp
from finchat.client.routes.ingest import ingest_bp

__all__ = [
    "chat_bp",
    "health_bp",
    "ingest_bp",
    "init_config",
    "get_config",
]
