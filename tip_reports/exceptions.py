"""
Exceptions for Tip Distribution Reports.

Exception Hierarchy:
    TipReportError (base)
    ├── InputRejectedError   bad upload, reported back to the client
    ├── ExtractionError      text extraction service failed
    └── PersistenceError     report or calculation could not be stored

Parsing never raises: incomplete text yields an incomplete Report.
"""


class TipReportError(Exception):
    """
    Base exception for all tip report errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputRejectedError(TipReportError):
    """Raised when an upload is missing or is not an image."""
    pass


class ExtractionError(TipReportError):
    """Raised when the vision service cannot turn an image into text."""
    pass


class PersistenceError(TipReportError):
    """
    Raised when storage fails.

    The in-memory report or calculation is still valid and can be
    exported even though it was not saved.
    """
    pass
