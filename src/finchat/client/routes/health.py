"""Health check API route."""

from flask import Blueprint, jsonify

from finchat.client.routes.config import get_config

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Report which collaborators are configured.

    Returns:
        JSON with overall status and per-service configuration
    """
    registry = get_config().registry
    services = registry.status() if registry is not None else {}
    degraded = not services or any(state != "configured" for state in services.values())
    return jsonify({"status": "degraded" if degraded else "healthy", "services": services})
