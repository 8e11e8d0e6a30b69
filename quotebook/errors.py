from typing import Optional


class QuotebookError(Exception):
    """Base class for every error the quote book reports to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(QuotebookError):
    pass


class FormatError(QuotebookError):
    pass


class StorageError(QuotebookError):
    pass


class NetworkError(QuotebookError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
