"""
Headless Chromium session: one browser process, one context, one page.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from playwright.async_api import async_playwright

from .config import RenderSettings
from .constants import BROWSER_ARGS, ERROR_MESSAGES, WAIT_CONDITIONS
from .errors import BrowserError, PDFGenerationError
from .logger import Logger, get_logger


class RenderSession:
    """Owns the Playwright driver, the browser and the single page.

    Page operations are only valid between a successful initialize() and
    cleanup(). cleanup() never raises and may be called more than once.
    """

    def __init__(self, logger: Optional[Logger] = None, headless: bool = True):
        self.logger = logger or get_logger()
        self.headless = headless
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def is_active(self) -> bool:
        return self._page is not None

    @property
    def page(self):
        if self._page is None:
            raise BrowserError(ERROR_MESSAGES["session_inactive"])
        return self._page

    async def initialize(self, settings: RenderSettings) -> None:
        """Launch Chromium and open a page sized from the viewport settings."""
        if self.is_active:
            raise BrowserError("Render session is already initialized")

        viewport = settings.viewport
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=BROWSER_ARGS,
            )
            self._context = await self._browser.new_context(
                viewport={"width": viewport.width, "height": viewport.height},
                device_scale_factor=viewport.device_scale_factor,
            )
            self._page = await self._context.new_page()
        except Exception as e:
            # Release whatever did start before reporting the failure
            await self.cleanup()
            raise BrowserError(f"{ERROR_MESSAGES['browser_init']}: {e}", e) from e

        self.logger.debug(
            f"Browser launched with viewport {viewport.width}x{viewport.height} "
            f"@{viewport.device_scale_factor}x"
        )

    async def goto(self, url: str, wait_until: str = WAIT_CONDITIONS["dom_content_loaded"], timeout: float = 30000) -> None:
        await self.page.goto(url, wait_until=wait_until, timeout=timeout)

    async def set_content(self, html: str, wait_until: str = WAIT_CONDITIONS["dom_content_loaded"], timeout: float = 30000) -> None:
        await self.page.set_content(html, wait_until=wait_until, timeout=timeout)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return await self.page.evaluate(script)
        return await self.page.evaluate(script, arg)

    async def wait_for_function(self, script: str, timeout: float, polling: float) -> None:
        await self.page.wait_for_function(script, timeout=timeout, polling=polling)

    async def capture(self, output_path: Union[str, Path], pdf_options: Dict[str, Any]) -> Path:
        """Print the current page to ``output_path`` and return that path."""
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            await self.page.pdf(path=str(output_path), **pdf_options)
        except Exception as e:
            raise PDFGenerationError(f"{ERROR_MESSAGES['pdf_generation']}: {e}", e) from e
        return output_path

    async def cleanup(self) -> None:
        """Close page, context, browser and driver. Never raises."""
        # Grab references and null them out first to prevent double-close
        page, context, browser, pw = self._page, self._context, self._browser, self._playwright
        self._page = self._context = self._browser = self._playwright = None

        if pw is None:
            return

        for name, closer in (
            ("page", page.close if page is not None else None),
            ("context", context.close if context is not None else None),
            ("browser", browser.close if browser is not None else None),
            ("playwright", pw.stop),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                self.logger.warning(f"Failed to close {name}: {e}")

        self.logger.debug("Browser instance closed and cleaned up")

    async def __aenter__(self) -> "RenderSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cleanup()
