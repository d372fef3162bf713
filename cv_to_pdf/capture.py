"""PDF capture: print the prepared page to the output file."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import DocumentSettings
from .constants import ERROR_MESSAGES
from .errors import PDFGenerationError
from .logger import Logger, get_logger
from .session import RenderSession

# Chromium's PDF printer has no omit-background switch; clear the root instead
TRANSPARENT_ROOT_SCRIPT = """() => {
    for (const el of [document.documentElement, document.body]) {
        if (el) el.style.setProperty('background', 'transparent', 'important');
    }
}"""


def build_pdf_options(document: DocumentSettings) -> Dict[str, Any]:
    """Map document settings onto Playwright's page.pdf() keyword arguments."""
    return {
        "format": document.format,
        "scale": document.scale,
        "print_background": document.print_background,
        "prefer_css_page_size": document.prefer_css_page_size,
        "display_header_footer": document.display_header_footer,
        "margin": document.margin.as_dict(),
    }


class CaptureStage:
    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger()

    async def capture(self, session: RenderSession, output_path: Union[str, Path],
                      document: DocumentSettings) -> Path:
        """Write the PDF to ``output_path``; the path is only returned on success.

        Raises:
            PDFGenerationError: printing or writing the file failed.
        """
        if document.omit_background:
            try:
                await session.evaluate(TRANSPARENT_ROOT_SCRIPT)
            except Exception as e:
                raise PDFGenerationError(f"{ERROR_MESSAGES['pdf_generation']}: {e}", e) from e

        pdf_options = build_pdf_options(document)
        self.logger.debug(f"Printing PDF with options: {pdf_options}")
        return await session.capture(output_path, pdf_options)
