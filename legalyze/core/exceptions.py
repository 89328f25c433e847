"""Custom exception hierarchy.

Fatal errors abort an analysis run and surface as a failure envelope.
Degradable errors (``APIClientError`` and ``ResponseSchemaError``) are
recovered inside the pipeline by the fallback analyzer.
"""


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentNotFoundError(AppError):
    """Raised when a document id is missing or has no record."""
    pass


class StorageError(AppError):
    """Raised when the blob store cannot serve or accept a file."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass


class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""
    pass


class ResponseSchemaError(AppError):
    """Raised when an LLM response is not the expected JSON shape."""
    pass
