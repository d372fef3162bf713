"""
Error types raised by the conversion pipeline.

Every stage raises one of these so the command line can report a failure
without a traceback and map it to a non-zero exit code.
"""

from typing import Optional


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    def __init__(self, message: str, code: str = "APPLICATION_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class ConfigurationError(ApplicationError):
    """The settings document exists but cannot be used."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message, "CONFIGURATION_ERROR")
        self.original_error = original_error


class FileSystemError(ApplicationError):
    """A required file is missing."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, "FILE_SYSTEM_ERROR")
        self.file_path = file_path


class BrowserError(ApplicationError):
    """Browser launch or navigation failure."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message, "BROWSER_ERROR")
        self.original_error = original_error


class PDFGenerationError(ApplicationError):
    """Page transformation or PDF capture failure."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message, "PDF_GENERATION_ERROR")
        self.original_error = original_error


class ValidationError(ApplicationError):
    """A single settings field failed its domain check."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field
