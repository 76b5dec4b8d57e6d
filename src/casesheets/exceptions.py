from typing import Optional


class CaseSheetsError(Exception):
    """Base exception for Case Sheets errors."""
    pass


class ConfigError(CaseSheetsError):
    """Startup configuration errors (credentials, settings)."""
    pass


class PayloadError(CaseSheetsError):
    """Request body is missing required fields."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SheetsApiError(CaseSheetsError):
    """The Sheets API rejected a call or could not be reached."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class SheetsServiceError(CaseSheetsError):
    """A remote call failed while serving a request; `error` carries the upstream text."""

    def __init__(self, message: str, error: str):
        super().__init__(message)
        self.message = message
        self.error = error
