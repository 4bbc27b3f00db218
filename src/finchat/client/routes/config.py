"""Shared configuration for route modules."""

from dataclasses import dataclass
from typing import Any


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    Holds the explicitly constructed services the blueprints call, so tests
    can swap in fakes without touching module globals.
    """

    chat_service: Any = None
    ingestion_pipeline: Any = None
    registry: Any = None


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(
    chat_service: Any = None,
    ingestion_pipeline: Any = None,
    registry: Any = None,
) -> None:
    """Initialize the shared route configuration.

    Args:
        chat_service: ChatService handling /api/chat
        ingestion_pipeline: IngestionPipeline handling /api/ingest
        registry: ServiceRegistry reported by /health
    """
    if chat_service is not None:
        _config.chat_service = chat_service
    if ingestion_pipeline is not None:
        _config.ingestion_pipeline = ingestion_pipeline
    if registry is not None:
        _config.registry = registry
