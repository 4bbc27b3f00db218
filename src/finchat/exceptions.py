"""Exception taxonomy shared by the finchat core and its entry points."""

from typing import Any


class FinChatError(Exception):
    """Base class for all finchat errors."""


class ConfigurationError(FinChatError):
    """A required credential or endpoint is missing."""


class ValidationError(FinChatError):
    """Caller input is malformed or empty."""


class AuthorizationError(FinChatError):
    """The ingestion credential did not match the configured secret."""


class RetrievalFailure(FinChatError):
    """Embedding or similarity search failed; callers degrade to no context."""


class CompletionFailure(FinChatError):
    """A chat completion call failed or returned an unusable response."""


class PartialIngestionFailure(FinChatError):
    """One or more chunks could not be persisted during ingestion.

    Attributes:
        result: The IngestionResult carrying the success and failure counts
    """

    def __init__(self, result: Any) -> None:
        self.result = result
        super().__init__(result.message)
