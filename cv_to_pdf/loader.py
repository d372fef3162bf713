"""
Loading the CV document into the render session.

The page is opened from its file:// URL first; if that navigation fails the raw
markup is injected instead. Both wait only for DOMContentLoaded so remote fonts
and CDN stylesheets that never arrive cannot block the conversion.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .config import TimeoutSettings
from .constants import (
    ERROR_MESSAGES,
    IMAGE_POLL_INTERVAL_MS,
    IMAGE_WAIT_CEILING_MS,
    LOG_MESSAGES,
    WAIT_CONDITIONS,
)
from .errors import BrowserError, FileSystemError
from .logger import Logger, get_logger
from .session import RenderSession

IMAGE_COUNT_SCRIPT = "() => document.images.length"

IMAGES_READY_SCRIPT = """() => Array.from(document.images).every(
    (img) => img.complete || img.naturalWidth > 0
)"""


class LoadStrategy(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class ImageWait(str, Enum):
    NO_IMAGES = "no_images"  # flat settle delay, nothing to poll
    LOADED = "loaded"  # every image reported complete
    TIMER = "timer"  # flat delay finished first
    CEILING = "ceiling"  # poll gave up at the fixed ceiling


@dataclass(frozen=True)
class LoadOutcome:
    """Which load strategy worked and how the image wait ended."""

    strategy: LoadStrategy
    image_wait: ImageWait
    image_count: int = 0

    @property
    def timed_out(self) -> bool:
        return self.image_wait in (ImageWait.TIMER, ImageWait.CEILING)


class ContentLoader:
    """Loads the document and waits, boundedly, for its images."""

    def __init__(self, logger: Optional[Logger] = None,
                 ceiling_ms: float = IMAGE_WAIT_CEILING_MS,
                 poll_interval_ms: float = IMAGE_POLL_INTERVAL_MS):
        self.logger = logger or get_logger()
        self.ceiling_ms = ceiling_ms
        self.poll_interval_ms = poll_interval_ms

    async def load(self, session: RenderSession, document_path: Union[str, Path],
                   timeouts: TimeoutSettings) -> LoadOutcome:
        """Load ``document_path`` into the session page.

        Raises:
            FileSystemError: the document does not exist.
            BrowserError: both the navigation and the content injection failed.
        """
        document_path = Path(document_path)
        if not document_path.is_file():
            raise FileSystemError(f"{ERROR_MESSAGES['html_not_found']}: {document_path}", str(document_path))

        strategy = await self._open(session, document_path, timeouts)
        image_count, image_wait = await self.settle_images(session, timeouts)
        return LoadOutcome(strategy=strategy, image_wait=image_wait, image_count=image_count)

    async def _open(self, session: RenderSession, document_path: Path, timeouts: TimeoutSettings) -> LoadStrategy:
        wait_until = WAIT_CONDITIONS["dom_content_loaded"]
        url = document_path.resolve().as_uri()

        try:
            await session.goto(url, wait_until=wait_until, timeout=timeouts.page_load)
            self.logger.debug(f"Loaded {url}")
            return LoadStrategy.PRIMARY
        except Exception as e:
            self.logger.warning(f"{LOG_MESSAGES['warning_file_url']} ({e})")

        try:
            html = document_path.read_text(encoding="utf-8")
            await session.set_content(html, wait_until=wait_until, timeout=timeouts.page_load)
        except Exception as e:
            raise BrowserError(f"{ERROR_MESSAGES['content_load']}: {e}", e) from e

        # Injected markup has no base URL (about:blank), so relative image paths
        # produced by the asset rewrite cannot resolve on this path.
        self.logger.debug(f"Injected markup of {document_path.name} into the page")
        return LoadStrategy.FALLBACK

    async def settle_images(self, session: RenderSession, timeouts: TimeoutSettings) -> tuple[int, ImageWait]:
        """Give images a bounded chance to finish loading.

        Returns ``(image_count, ImageWait)``. Never raises for slow or broken
        images; a partially loaded page is still captured.
        """
        delay = timeouts.image_render / 1000

        try:
            image_count = int(await session.evaluate(IMAGE_COUNT_SCRIPT) or 0)
        except Exception as e:
            self.logger.warning(f"Could not count images ({e}), using flat settle delay")
            image_count = 0

        if image_count == 0:
            await asyncio.sleep(delay)
            return 0, ImageWait.NO_IMAGES

        self.logger.debug(f"Waiting for {image_count} image(s)")
        poll = asyncio.ensure_future(self._poll_images(session))
        timer = asyncio.ensure_future(asyncio.sleep(delay))
        done, pending = await asyncio.wait({poll, timer}, return_when=asyncio.FIRST_COMPLETED)

        for task in pending:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if poll in done and poll.result():
            outcome = ImageWait.LOADED
        elif poll in done:
            outcome = ImageWait.CEILING
        else:
            outcome = ImageWait.TIMER

        if outcome is ImageWait.LOADED:
            self.logger.debug("All images loaded")
        else:
            self.logger.warning(LOG_MESSAGES["warning_images"])
        return image_count, outcome

    async def _poll_images(self, session: RenderSession) -> bool:
        """Poll image completion up to the fixed ceiling. Resolves, never raises."""
        try:
            await session.wait_for_function(
                IMAGES_READY_SCRIPT,
                timeout=self.ceiling_ms,
                polling=self.poll_interval_ms,
            )
            return True
        except Exception as e:
            self.logger.debug(f"Image poll ended without completion: {e}")
            return False
