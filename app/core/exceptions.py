from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass

class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""
    pass

class ValidationError(AppError):
    """Raised when input validation fails."""
    pass

class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass

class RegistryLookupError(APIClientError):
    """Raised when the land registry could not return a parcel record."""
    pass

class ParcelValidationError(ValidationError):
    """Raised when a parcel query is rejected before any network call.

    Attributes:
        field: Name of the offending field (``province_code``,
            ``district_code`` or ``parcel_number``)
    """
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
