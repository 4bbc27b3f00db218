"""Shared-secret gate for ingestion.

This is a coarse check, not an auth system: the secret travels in plaintext
with every request and is compared against a single configured value.
"""

import hmac
import logging
import os

from finchat.exceptions import AuthorizationError, ConfigurationError

logger = logging.getLogger(__name__)


def get_ingest_password() -> str | None:
    """Return the configured ingestion secret (INGEST_PASSWORD), if any."""
    return os.getenv("INGEST_PASSWORD") or None


class SharedSecretAuthorizer:
    """Callable that accepts a credential only if it equals the secret."""

    def __init__(self, secret: str | None) -> None:
        self.secret = secret

    def __call__(self, credential: str | None) -> None:
        """Check a caller-supplied credential.

        Raises:
            ConfigurationError: If no secret is configured
            AuthorizationError: If the credential is missing or wrong
        """
        if not self.secret:
            raise ConfigurationError("Ingestion secret is not configured: set INGEST_PASSWORD")
        if not isinstance(credential, str) or not hmac.compare_digest(
            credential.encode("utf-8"), self.secret.encode("utf-8")
        ):
            logger.warning("🔒 Rejected ingestion request with invalid credential")
            raise AuthorizationError("Unauthorized")
