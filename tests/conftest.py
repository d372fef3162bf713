import asyncio
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cv_to_pdf.loader import IMAGE_COUNT_SCRIPT
from cv_to_pdf.logger import Logger
from cv_to_pdf.transforms import APPLY_RULES_SCRIPT

MINIMAL_CV = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>body { background: #111; color: #eee; }</style>
</head>
<body>
    <section class="professional-experience">
        <h2 class="section-title">Experience</h2>
        <ul>
            <li><strong>Engineer, Example Corp</strong>
                <ul><li>Built things</li></ul>
            </li>
        </ul>
    </section>
    <img class="profile-image" src="https://jane.github.io/assets/images/profile.jpg" alt="Jane">
    <details><summary>More</summary><p>Hidden details</p></details>
    <button class="download-btn">Download PDF</button>
    <div class="footer">Made with love</div>
</body>
</html>
"""


class FakeSession:
    """Stands in for RenderSession; records calls and injects failures."""

    def __init__(self, image_count=0, goto_error=None, set_content_error=None,
                 images_ready_after=None, evaluate_error=None, capture_error=None):
        self.image_count = image_count
        self.goto_error = goto_error
        self.set_content_error = set_content_error
        self.images_ready_after = images_ready_after  # seconds, None = never
        self.evaluate_error = evaluate_error
        self.capture_error = capture_error
        self.calls = []
        self.cleanup_calls = 0

    async def initialize(self, settings):
        self.calls.append(("initialize", settings))

    async def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url, wait_until, timeout))
        if self.goto_error:
            raise self.goto_error

    async def set_content(self, html, wait_until=None, timeout=None):
        self.calls.append(("set_content", html, wait_until, timeout))
        if self.set_content_error:
            raise self.set_content_error

    async def evaluate(self, script, arg=None):
        self.calls.append(("evaluate", script, arg))
        if script == IMAGE_COUNT_SCRIPT:
            return self.image_count
        if self.evaluate_error:
            raise self.evaluate_error
        if script == APPLY_RULES_SCRIPT:
            return [0 for _ in arg]
        return None

    async def wait_for_function(self, script, timeout, polling):
        self.calls.append(("wait_for_function", timeout, polling))
        if self.images_ready_after is None:
            await asyncio.sleep(timeout / 1000)
            raise TimeoutError(f"Timeout {timeout}ms exceeded")
        await asyncio.sleep(self.images_ready_after)

    async def capture(self, output_path, pdf_options):
        self.calls.append(("capture", output_path, pdf_options))
        if self.capture_error:
            raise self.capture_error
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"%PDF-1.4 fake")
        return output_path

    async def cleanup(self):
        self.cleanup_calls += 1

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def logger():
    return MagicMock(spec=Logger)


@pytest.fixture
def cv_file(tmp_path):
    path = tmp_path / "index.html"
    path.write_text(MINIMAL_CV, encoding="utf-8")
    return path


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="pdf-config.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
