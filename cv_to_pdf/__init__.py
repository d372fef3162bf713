"""Render a static HTML CV into a print-quality PDF with headless Chromium."""

from .config import Config, RenderSettings, resolve
from .converter import CVToPDFConverter, main
from .errors import (
    ApplicationError,
    BrowserError,
    ConfigurationError,
    FileSystemError,
    PDFGenerationError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "ApplicationError",
    "BrowserError",
    "CVToPDFConverter",
    "Config",
    "ConfigurationError",
    "FileSystemError",
    "PDFGenerationError",
    "RenderSettings",
    "ValidationError",
    "main",
    "resolve",
]
