"""
Render settings: loading, validation and merging with defaults.

A missing or unreadable settings file is not an error, the defaults are used.
A settings file that exists but is not valid JSON, or that has a field outside
its domain, stops the run with a ConfigurationError.
"""

import copy
import json
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import (
    DEFAULT_CONFIG,
    ERROR_MESSAGES,
    LEGACY_SECTION_ALIASES,
    LOG_MESSAGES,
    MARGIN_MAX_INCHES,
    MARGIN_PATTERN,
    PATHS,
    UNITS_PER_INCH,
)
from .errors import ConfigurationError, ValidationError
from .logger import Logger, get_logger


@dataclass(frozen=True)
class Margin:
    top: str
    bottom: str
    left: str
    right: str

    def as_dict(self) -> Dict[str, str]:
        return {"top": self.top, "bottom": self.bottom, "left": self.left, "right": self.right}


@dataclass(frozen=True)
class DocumentSettings:
    format: str
    scale: float
    print_background: bool
    prefer_css_page_size: bool
    display_header_footer: bool
    omit_background: bool
    margin: Margin


@dataclass(frozen=True)
class ViewportSettings:
    width: int
    height: int
    device_scale_factor: float


@dataclass(frozen=True)
class TimeoutSettings:
    """Deadlines in milliseconds."""

    page_load: float
    image_render: float


@dataclass(frozen=True)
class OutputSettings:
    filename: str


@dataclass(frozen=True)
class RenderSettings:
    """Immutable settings for one conversion run."""

    document: DocumentSettings
    viewport: ViewportSettings
    timeouts: TimeoutSettings
    output: OutputSettings

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderSettings":
        """Build settings from a merged (already validated) settings document."""
        document = data["document"]
        margin = document["margin"]
        viewport = data["viewport"]
        timeouts = data["timeouts"]
        return cls(
            document=DocumentSettings(
                format=document["format"],
                scale=document["scale"],
                print_background=document["printBackground"],
                prefer_css_page_size=document["preferCSSPageSize"],
                display_header_footer=document["displayHeaderFooter"],
                omit_background=document["omitBackground"],
                margin=Margin(
                    top=margin["top"],
                    bottom=margin["bottom"],
                    left=margin["left"],
                    right=margin["right"],
                ),
            ),
            viewport=ViewportSettings(
                width=int(viewport["width"]),
                height=int(viewport["height"]),
                device_scale_factor=viewport["deviceScaleFactor"],
            ),
            timeouts=TimeoutSettings(
                page_load=timeouts["pageLoad"],
                image_render=timeouts["imageRender"],
            ),
            output=OutputSettings(filename=data["output"]["filename"]),
        )

    @classmethod
    def defaults(cls) -> "RenderSettings":
        return cls.from_dict(default_config())

    def output_path(self, base_dir: Union[str, Path]) -> Path:
        """Resolve the output filename; relative names land in base_dir."""
        target = Path(self.output.filename).expanduser()
        if target.is_absolute():
            return target
        return Path(base_dir) / target


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the built-in settings document."""
    return copy.deepcopy(DEFAULT_CONFIG)


# --- Validation ---

def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true/false must not pass as numbers.
    # json.loads also accepts NaN and Infinity.
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_pixel_count(value: Any) -> bool:
    return _is_number(value) and value >= 1 and float(value).is_integer()


def _require_object(value: Any, field: str) -> None:
    if not isinstance(value, dict):
        raise ValidationError(f"{field} configuration must be an object", field)


def validate_margin_value(value: Any, field: str) -> str:
    """Validate a single margin length like '15mm' or '0.5in'."""
    if not isinstance(value, str):
        raise ValidationError(f"Margin {field} must be a string (e.g., '15mm')", field)

    match = re.match(MARGIN_PATTERN, value.strip())
    if not match:
        raise ValidationError(
            f"Invalid margin format: '{value}'. Use format like '1in', '2.5cm', '10mm', etc.", field
        )

    amount, unit = match.groups()
    if float(amount) / UNITS_PER_INCH[unit] > MARGIN_MAX_INCHES:
        raise ValidationError(f"Margin too large: '{value}'. Maximum value is 3 inches (7.62cm).", field)
    return value


def validate_document(section: Any, name: str = "document") -> None:
    _require_object(section, name)

    if section.get("format") is not None and not isinstance(section["format"], str):
        raise ValidationError("Document format must be a string", f"{name}.format")

    scale = section.get("scale")
    if scale is not None and (not _is_number(scale) or scale <= 0 or scale > 1):
        raise ValidationError("Document scale must be a number greater than 0 and at most 1", f"{name}.scale")

    for flag in ("printBackground", "preferCSSPageSize", "displayHeaderFooter", "omitBackground"):
        if section.get(flag) is not None and not isinstance(section[flag], bool):
            raise ValidationError(f"Document {flag} must be a boolean", f"{name}.{flag}")

    margin = section.get("margin")
    if margin is not None:
        _require_object(margin, f"{name}.margin")
        for side in ("top", "bottom", "left", "right"):
            if margin.get(side) is not None:
                validate_margin_value(margin[side], f"{name}.margin.{side}")


def validate_viewport(section: Any) -> None:
    _require_object(section, "viewport")

    for dimension in ("width", "height"):
        value = section.get(dimension)
        if value is not None and not _is_pixel_count(value):
            raise ValidationError(f"Viewport {dimension} must be a positive whole number of pixels",
                                  f"viewport.{dimension}")

    factor = section.get("deviceScaleFactor")
    if factor is not None and (not _is_number(factor) or factor < 1 or factor > 3):
        raise ValidationError("Device scale factor must be a number between 1 and 3", "viewport.deviceScaleFactor")


def validate_timeouts(section: Any) -> None:
    _require_object(section, "timeouts")

    page_load = section.get("pageLoad")
    if page_load is not None and (not _is_number(page_load) or page_load <= 0):
        raise ValidationError("Page load timeout must be a positive number", "timeouts.pageLoad")

    image_render = section.get("imageRender")
    if image_render is not None and (not _is_number(image_render) or image_render < 0):
        raise ValidationError("Image render timeout must be a non-negative number", "timeouts.imageRender")


def validate_output(section: Any) -> None:
    _require_object(section, "output")

    filename = section.get("filename")
    if filename is not None and (not isinstance(filename, str) or not filename.strip()):
        raise ValidationError("Output filename must be a non-empty string", "output.filename")


def validate_config(config: Any) -> None:
    """Validate a user settings document.

    Raises:
        ValidationError: naming the first field that failed its check.
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be an object")

    for legacy in LEGACY_SECTION_ALIASES:
        if config.get(legacy) is not None:
            validate_document(config[legacy], legacy)
    if config.get("document") is not None:
        validate_document(config["document"])
    if config.get("viewport") is not None:
        validate_viewport(config["viewport"])
    if config.get("timeouts") is not None:
        validate_timeouts(config["timeouts"])
    if config.get("output") is not None:
        validate_output(config["output"])


# --- Merging ---

def _present(section: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in section.items() if value is not None}


def merge_with_defaults(user_config: Dict[str, Any], defaults: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge a validated user document over the defaults, field by field.

    The margin object merges per side, so overriding only ``top`` keeps the
    default bottom, left and right.
    """
    merged = copy.deepcopy(defaults if defaults is not None else DEFAULT_CONFIG)

    user = dict(user_config)
    for legacy, section in LEGACY_SECTION_ALIASES.items():
        if user.get(legacy) is not None:
            # The current section name wins over its legacy alias
            combined = _present(user[legacy])
            combined.update(_present(user.get(section) or {}))
            if user[legacy].get("margin") and (user.get(section) or {}).get("margin"):
                combined["margin"] = {**_present(user[legacy]["margin"]), **_present(user[section]["margin"])}
            user[section] = combined

    for section in ("document", "viewport", "timeouts", "output"):
        overrides = user.get(section)
        if not overrides:
            continue
        overrides = _present(overrides)
        margin = overrides.pop("margin", None)
        merged[section].update(overrides)
        if section == "document" and margin:
            merged[section]["margin"].update(_present(margin))

    return merged


# --- Loading ---

def resolve(path: Optional[Union[str, Path]] = None, logger: Optional[Logger] = None) -> RenderSettings:
    """Load, validate and merge the settings document at ``path``.

    Returns the defaults when the file does not exist or cannot be read.

    Raises:
        ConfigurationError: the file is not JSON, or a field is invalid.
    """
    logger = logger or get_logger()
    config_path = Path(path if path is not None else PATHS["config_file"])

    if not config_path.is_file():
        logger.warning(f"{LOG_MESSAGES['warning_config']} {config_path}, {LOG_MESSAGES['warning_fallback']}")
        return RenderSettings.defaults()

    try:
        raw = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"{LOG_MESSAGES['warning_config']} {config_path} ({e}), {LOG_MESSAGES['warning_fallback']}")
        return RenderSettings.defaults()

    try:
        user_config = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{ERROR_MESSAGES['config_json']}: {e}", e) from e

    try:
        validate_config(user_config)
    except ValidationError as e:
        raise ConfigurationError(f"{ERROR_MESSAGES['config_invalid']}: {e.message}", e) from e

    settings = RenderSettings.from_dict(merge_with_defaults(user_config))
    logger.debug(f"Configuration loaded successfully from {config_path}")
    return settings


class Config:
    """Settings accessor for one run, loaded once at construction."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None, logger: Optional[Logger] = None):
        self.config_path = Path(config_path if config_path is not None else PATHS["config_file"])
        self.settings = resolve(self.config_path, logger)

    def get_pdf_options(self) -> DocumentSettings:
        return self.settings.document

    def get_viewport(self) -> ViewportSettings:
        return self.settings.viewport

    def get_timeouts(self) -> TimeoutSettings:
        return self.settings.timeouts

    def get_output_path(self, base_dir: Union[str, Path]) -> Path:
        return self.settings.output_path(base_dir)
