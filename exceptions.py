"""Custom exceptions for the news search skill."""


class NewsSkillException(Exception):
    """Base exception for news skill errors."""

    def __init__(self, message: str = "", stage: str = None):
        super().__init__(message)
        self.stage = stage


class ProviderUnavailable(NewsSkillException):
    """Raised when a keyword, search or similarity provider cannot be reached."""
    pass


class AIAuthenticationError(ProviderUnavailable):
    """Raised when provider credentials are missing or rejected."""
    pass


class AIInvalidResponse(ProviderUnavailable):
    """Raised when a provider response is invalid or malformed."""
    pass


class EmbeddingBatchFailure(NewsSkillException):
    """Raised when any embedding call of a batch fails."""
    pass


class StorageWriteFailure(NewsSkillException):
    """Raised when the bulk insert into the vector store fails."""
    pass


class MalformedRequest(NewsSkillException):
    """Raised when an inbound webhook body has no usable utterance."""
    pass


class ConfigurationError(NewsSkillException):
    """Raised when settings are missing or invalid."""
    pass
