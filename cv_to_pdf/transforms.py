"""
Print preparation applied inside the rendered page before capture.

Each step is a list of rules, and each rule is a CSS selector plus one
mutation: set inline styles, set an attribute, or rewrite an attribute value
with a regular expression. Rules run in order, tolerate zero matches and only
ever assign values, so running the whole stage twice leaves the page exactly as
running it once.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .constants import ASSET_URL_PATTERN, ERROR_MESSAGES, PDF_STYLES
from .errors import PDFGenerationError
from .logger import Logger, get_logger
from .session import RenderSession

COLORS = PDF_STYLES["colors"]
TYPOGRAPHY = PDF_STYLES["typography"]
IMAGE = PDF_STYLES["image"]
SECTION_TITLE = PDF_STYLES["section_title"]


@dataclass(frozen=True)
class StyleRule:
    """Set inline style properties (CSS names) on every match."""

    selector: str
    styles: Dict[str, str]
    important: bool = False

    def payload(self) -> Dict[str, Any]:
        return {"kind": "style", "selector": self.selector, "styles": dict(self.styles),
                "important": self.important}


@dataclass(frozen=True)
class AttributeRule:
    """Set an attribute to a fixed value on every match."""

    selector: str
    attribute: str
    value: str = ""

    def payload(self) -> Dict[str, Any]:
        return {"kind": "attribute", "selector": self.selector, "attribute": self.attribute,
                "value": self.value}


@dataclass(frozen=True)
class RewriteRule:
    """Rewrite an attribute value with a regex; counts only changed elements."""

    selector: str
    attribute: str
    pattern: str
    replacement: str

    def payload(self) -> Dict[str, Any]:
        return {"kind": "rewrite", "selector": self.selector, "attribute": self.attribute,
                "pattern": self.pattern, "replacement": self.replacement}


Rule = Union[StyleRule, AttributeRule, RewriteRule]


@dataclass(frozen=True)
class TransformStep:
    name: str
    rules: Tuple[Rule, ...] = field(default_factory=tuple)


APPLY_RULES_SCRIPT = """(rules) => {
    const counts = [];
    for (const rule of rules) {
        const elements = Array.from(document.querySelectorAll(rule.selector));
        let count = 0;
        for (const el of elements) {
            if (rule.kind === 'style') {
                for (const [prop, value] of Object.entries(rule.styles)) {
                    el.style.setProperty(prop, value, rule.important ? 'important' : '');
                }
                count += 1;
            } else if (rule.kind === 'attribute') {
                el.setAttribute(rule.attribute, rule.value);
                count += 1;
            } else if (rule.kind === 'rewrite') {
                const current = el.getAttribute(rule.attribute);
                if (!current) continue;
                const next = current.replace(new RegExp(rule.pattern), rule.replacement);
                if (next !== current) {
                    el.setAttribute(rule.attribute, next);
                    count += 1;
                }
            }
        }
        counts.push(count);
    }
    return counts;
}"""


def relativize_asset_url(url: str, pattern: str = ASSET_URL_PATTERN) -> str:
    """Turn an absolute hosted-asset URL into a path relative to the document.

    >>> relativize_asset_url("https://jane.github.io/assets/images/me.jpg")
    'assets/images/me.jpg'

    Only URLs on the published site's host are rewritten; third-party images
    and relative paths come back unchanged.
    """
    return re.sub(pattern, r"\1", url, count=1)


HEADINGS = "h1, h2, h3, h4, h5, h6"
CONTENT_BLOCKS = (
    ".experience-item, .education-item, .project-item, .timeline-item, "
    ".job, .entry, .card, article"
)
COLLAPSIBLE_REGIONS = (
    ".collapse, .collapsible, .collapsible-content, .collapsible-body, "
    ".accordion-content, .accordion-collapse, .accordion-body, .details-content"
)
INTERACTIVE_ONLY = (
    ".download-btn, .download-button, .download-pdf, .pdf-download, "
    "#download-pdf, #downloadPdf, .theme-toggle, #theme-toggle, "
    ".footer, .no-print"
)

TRANSFORM_STEPS: List[TransformStep] = [
    TransformStep("rewrite-asset-urls", (
        RewriteRule("img[src]", "src", ASSET_URL_PATTERN, "$1"),
    )),
    TransformStep("print-palette", (
        StyleRule("html, body", {
            "background-color": COLORS["background"],
            "color": COLORS["text_primary"],
        }, important=True),
        StyleRule(
            "main, header, section, article, aside, .container, "
            "[data-theme], .dark, .dark-mode, .dark-theme",
            {"background-color": COLORS["background"]},
            important=True,
        ),
        StyleRule(f"{HEADINGS}, .section-title", {"color": COLORS["text_primary"]}, important=True),
        StyleRule("p, li, dd, dt", {"color": COLORS["text_secondary"]}, important=True),
        StyleRule("em, strong, b, i", {"color": COLORS["text_secondary"]}, important=True),
        StyleRule("small, .text-muted", {"color": COLORS["text_tertiary"]}, important=True),
        StyleRule('span[style*="color"]', {"color": COLORS["text_secondary"]}, important=True),
    )),
    TransformStep("section-titles", (
        StyleRule(".section-title", {
            "border-bottom": SECTION_TITLE["border_bottom"],
            "padding-bottom": SECTION_TITLE["padding_bottom"],
            "margin-bottom": SECTION_TITLE["margin_bottom"],
        }),
    )),
    TransformStep("page-breaks", (
        StyleRule("section, .section, .professional-experience", {
            "page-break-inside": "avoid",
            "break-inside": "avoid",
            "orphans": str(TYPOGRAPHY["section_orphans"]),
            "widows": str(TYPOGRAPHY["section_widows"]),
        }),
        # Long list entries may span pages; keep a few lines together instead
        StyleRule("li", {
            "page-break-inside": "auto",
            "break-inside": "auto",
            "orphans": str(TYPOGRAPHY["orphans"]),
            "widows": str(TYPOGRAPHY["widows"]),
        }),
        StyleRule("p", {
            "orphans": str(TYPOGRAPHY["orphans"]),
            "widows": str(TYPOGRAPHY["widows"]),
        }),
        StyleRule(CONTENT_BLOCKS, {"page-break-inside": "avoid", "break-inside": "avoid"}),
        StyleRule(f"{HEADINGS}, .section-title", {
            "page-break-after": "avoid",
            "break-after": "avoid",
            "page-break-inside": "avoid",
            "break-inside": "avoid",
        }),
        StyleRule("h1 + *, h2 + *, h3 + *, h4 + *, h5 + *, h6 + *, .section-title + *", {
            "page-break-before": "avoid",
            "break-before": "avoid",
        }),
        StyleRule("li > ul, li > ol, li > ul > li:first-child, li > ol > li:first-child", {
            "page-break-before": "avoid",
            "break-before": "avoid",
        }),
    )),
    TransformStep("expand-collapsibles", (
        AttributeRule("details", "open", ""),
        StyleRule(COLLAPSIBLE_REGIONS, {
            "display": "block",
            "height": "auto",
            "max-height": "none",
            "overflow": "visible",
            "visibility": "visible",
            "opacity": "1",
        }, important=True),
    )),
    TransformStep("hide-interactive", (
        StyleRule(INTERACTIVE_ONLY, {"display": "none"}, important=True),
    )),
    TransformStep("links-and-images", (
        StyleRule("a", {"color": COLORS["link"], "text-decoration": "none"}, important=True),
        StyleRule("img", {"max-width": "100%", "height": "auto"}),
        StyleRule(".profile-image", {
            "width": IMAGE["width_percent"],
            "height": "auto",
            "margin-bottom": IMAGE["margin_bottom"],
            "border-radius": IMAGE["border_radius"],
        }),
    )),
]


class DomTransformer:
    """Runs the transformation steps against the session page."""

    def __init__(self, steps: Optional[List[TransformStep]] = None, logger: Optional[Logger] = None):
        self.steps = steps if steps is not None else TRANSFORM_STEPS
        self.logger = logger or get_logger()

    async def apply(self, session: RenderSession) -> Dict[str, int]:
        """Apply every step in order; returns matched elements per step.

        Raises:
            PDFGenerationError: an in-page evaluation failed.
        """
        results: Dict[str, int] = {}
        for step in self.steps:
            payload = [rule.payload() for rule in step.rules]
            try:
                counts = await session.evaluate(APPLY_RULES_SCRIPT, payload)
            except Exception as e:
                raise PDFGenerationError(f"{ERROR_MESSAGES['optimizations']} ({step.name}): {e}", e) from e
            results[step.name] = sum(counts or [])
            self.logger.debug(f"{step.name}: {results[step.name]} element(s)")
        return results
