#!/usr/bin/env python3
"""
CV to PDF converter using a headless Chromium driven by Playwright.

Pipeline: settings -> browser session -> load -> print transformations ->
PDF capture, with the browser always torn down at the end.

MIT License - Copyright (c) 2025 CV to PDF Converter
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional, Union

from tqdm import tqdm

from .capture import CaptureStage
from .config import Config
from .constants import LOG_MESSAGES, PATHS
from .errors import ApplicationError
from .loader import ContentLoader, LoadOutcome
from .logger import Logger, configure_logger, get_logger
from .session import RenderSession
from .transforms import DomTransformer

PIPELINE_STEPS = 5


class CVToPDFConverter:
    """Converts one HTML CV into one PDF."""

    def __init__(self, input_path: Union[str, Path] = PATHS["html_file"],
                 config_path: Optional[Union[str, Path]] = None,
                 output_path: Optional[Union[str, Path]] = None,
                 logger: Optional[Logger] = None,
                 show_progress: bool = True):
        """Initialize the converter.

        Args:
            input_path: HTML document to convert
            config_path: JSON settings file (default: pdf-config.json next to the input)
            output_path: PDF destination, overrides output.filename from the settings
            logger: Logger to use instead of the process-wide one
            show_progress: Show a progress bar over the pipeline stages
        """
        self.input_path = Path(input_path)
        self.config_path = Path(config_path) if config_path else self.input_path.parent / PATHS["config_file"]
        self.output_path = Path(output_path) if output_path else None
        self.logger = logger or get_logger()
        self.show_progress = show_progress

        self.loader = ContentLoader(logger=self.logger)
        self.transformer = DomTransformer(logger=self.logger)
        self.capture_stage = CaptureStage(logger=self.logger)
        self.load_outcome: Optional[LoadOutcome] = None

    def _new_session(self) -> RenderSession:
        return RenderSession(logger=self.logger)

    async def convert_async(self) -> Path:
        """Run the whole pipeline and return the written PDF path.

        Raises:
            ApplicationError: any stage failed; the browser is closed first.
        """
        self.logger.info(LOG_MESSAGES["start"])
        session: Optional[RenderSession] = None

        with tqdm(total=PIPELINE_STEPS, desc=f"  {self.input_path.name}", unit="step",
                  leave=False, disable=not self.show_progress) as pbar:
            try:
                pbar.set_description(f"  {self.input_path.name} - Settings")
                config = Config(self.config_path, logger=self.logger)
                settings = config.settings
                output_path = self.output_path or config.get_output_path(self.input_path.parent)
                pbar.update(1)

                pbar.set_description(f"  {self.input_path.name} - Browser")
                session = self._new_session()
                await session.initialize(settings)
                self.logger.success(LOG_MESSAGES["browser_init"])
                pbar.update(1)

                pbar.set_description(f"  {self.input_path.name} - Loading")
                self.load_outcome = await self.loader.load(session, self.input_path, settings.timeouts)
                self.logger.success(
                    f"{LOG_MESSAGES['content_loaded']} "
                    f"(strategy: {self.load_outcome.strategy.value}, images: {self.load_outcome.image_wait.value})"
                )
                pbar.update(1)

                pbar.set_description(f"  {self.input_path.name} - Optimizing")
                counts = await self.transformer.apply(session)
                if counts.get("rewrite-asset-urls"):
                    # Rewritten sources start loading again from local files
                    await self.loader.settle_images(session, settings.timeouts)
                self.logger.success(LOG_MESSAGES["optimizations_applied"])
                pbar.update(1)

                pbar.set_description(f"  {self.input_path.name} - PDF")
                written = await self.capture_stage.capture(session, output_path, settings.document)
                self.logger.success(f"{LOG_MESSAGES['pdf_generated']}: {written}")
                pbar.update(1)
            finally:
                if session is not None:
                    await session.cleanup()

        self.logger.success(LOG_MESSAGES["completed"])
        return written

    def convert(self) -> Path:
        """Run the pipeline on a fresh event loop."""
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            return loop.run_until_complete(self.convert_async())
        finally:
            asyncio.set_event_loop(None)
            loop.close()


def main(argv: Optional[list] = None) -> int:
    """Main entry point. Returns the process exit code."""
    import argparse

    parser = argparse.ArgumentParser(description="Convert an HTML CV to a print-ready PDF using headless Chromium")
    parser.add_argument("--input", "-i", default=PATHS["html_file"], help="HTML document to convert (default: index.html)")
    parser.add_argument("--config", "-c", default=None, help="JSON settings file (default: pdf-config.json next to the input)")
    parser.add_argument("--output", "-o", default=None, help="PDF output path (default: output.filename from settings, next to the input)")
    parser.add_argument("--log-level", default=None, choices=["debug", "info", "warn", "error"], help="Logging threshold (default: LOG_LEVEL env or info)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    args = parser.parse_args(argv)

    logger = get_logger()
    if args.debug:
        configure_logger("debug")
    elif args.log_level:
        configure_logger(args.log_level)

    converter = CVToPDFConverter(
        args.input,
        config_path=args.config,
        output_path=args.output,
        logger=logger,
        show_progress=not args.no_progress,
    )

    try:
        converter.convert()
    except ApplicationError as e:
        logger.error(f"{LOG_MESSAGES['error']} [{e.code}] {e.message}")
        cause = e.__cause__
        if cause is not None:
            logger.debug(f"Caused by: {cause!r}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Conversion interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
