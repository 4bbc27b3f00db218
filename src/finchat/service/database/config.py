"""Configuration for RavenDB connection."""

import os

from dotenv import load_dotenv

from finchat.constants import DEFAULT_COLLECTION, DEFAULT_RAVENDB_DATABASE
from finchat.exceptions import ConfigurationError

# Load environment variables
load_dotenv()


class RavenDBConfig:
    """Configuration class for RavenDB connection details."""

    @staticmethod
    def get_url() -> str | None:
        """Get the RavenDB server URL from environment variables.

        Returns:
            str | None: RavenDB server URL, or None when RAVENDB_URL is unset
        """
        return os.getenv("RAVENDB_URL") or None

    @staticmethod
    def require_url() -> str:
        """Get the RavenDB server URL, failing when it is not configured.

        Raises:
            ConfigurationError: If RAVENDB_URL is unset
        """
        url = RavenDBConfig.get_url()
        if not url:
            raise ConfigurationError("Missing vector store endpoint: set RAVENDB_URL")
        return url

    @staticmethod
    def get_database_name() -> str:
        """Get the RavenDB database name from environment variables.

        Returns:
            str: Database name (default: finchat)
        """
        return os.getenv("RAVENDB_DATABASE", DEFAULT_RAVENDB_DATABASE)

    @staticmethod
    def get_collection() -> str:
        """Get the collection holding the financial document chunks.

        Returns:
            str: Collection name (default: FinancialChunks)
        """
        return os.getenv("RAVENDB_COLLECTION", DEFAULT_COLLECTION)
