"""
Application constants for the CV to PDF converter.

Keeps defaults, print styles, browser flags and user-facing messages in one
place so the pipeline stages never carry magic numbers or strings.
"""

# Default render settings. Keys mirror the JSON settings document.
DEFAULT_CONFIG = {
    "document": {
        "format": "A4",
        "scale": 0.95,
        "printBackground": True,
        "preferCSSPageSize": False,
        "displayHeaderFooter": False,
        "omitBackground": False,
        "margin": {
            "top": "15mm",
            "bottom": "15mm",
            "left": "10mm",
            "right": "10mm",
        },
    },
    "viewport": {
        "width": 1200,
        "height": 1600,
        "deviceScaleFactor": 2,
    },
    "timeouts": {
        "pageLoad": 30000,
        "imageRender": 1000,
    },
    "output": {
        "filename": "CV.pdf",
    },
}

# Older settings files used "pdf" for the document section
LEGACY_SECTION_ALIASES = {"pdf": "document"}

PDF_STYLES = {
    "colors": {
        "background": "#ffffff",
        "text_primary": "#000000",
        "text_secondary": "#333333",
        "text_tertiary": "#555555",
        "link": "#0066cc",
        "border": "#0066cc",
    },
    "typography": {
        "orphans": 3,
        "widows": 3,
        "section_orphans": 4,
        "section_widows": 4,
    },
    "image": {
        "width_percent": "15%",
        "margin_bottom": "20px",
        "border_radius": "50%",
    },
    "section_title": {
        "border_bottom": "3px solid #0066cc",
        "padding_bottom": "10px",
        "margin_bottom": "20px",
    },
}

# Chromium flags for containers and CI boxes without a usable OS sandbox
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",  # Use /tmp instead of /dev/shm
    "--disable-gpu",
]

PATHS = {
    "config_file": "pdf-config.json",
    "html_file": "index.html",
    "output_file": "CV.pdf",
}

WAIT_CONDITIONS = {
    "dom_content_loaded": "domcontentloaded",
    "load": "load",
    "network_idle": "networkidle",
}

# Upper bound for the polled image check, independent of configured timeouts
IMAGE_WAIT_CEILING_MS = 15000
IMAGE_POLL_INTERVAL_MS = 100

# Margin lengths: number plus CSS unit, capped at 3 inches
MARGIN_PATTERN = r"^(\d+(?:\.\d+)?)\s*(cm|in|mm|pt|px)$"
MARGIN_MAX_INCHES = 3.0
UNITS_PER_INCH = {
    "in": 1.0,
    "cm": 2.54,
    "mm": 25.4,
    "pt": 72.0,
    "px": 96.0,
}

# Host of the published CV site; images served from any other host are left alone
HOSTED_SITE_HOST_PATTERN = r"[A-Za-z0-9-]+\.github\.io"
# Absolute URLs of the hosted site's assets. Group 1 is the site-relative path,
# starting at the first assets/images/img directory.
ASSET_URL_PATTERN = rf"^https?://{HOSTED_SITE_HOST_PATTERN}/(?:[^?#]*?/)??((?:assets|images|img)/[^?#]+)"

LOG_MESSAGES = {
    "start": "Starting PDF conversion...",
    "browser_init": "Browser initialized",
    "content_loaded": "HTML content loaded",
    "optimizations_applied": "PDF optimizations applied",
    "pdf_generated": "PDF generated successfully",
    "completed": "Conversion completed successfully!",
    "error": "Error during PDF conversion:",
    "warning_config": "Could not load config from",
    "warning_fallback": "using defaults",
    "warning_file_url": "file:// URL failed, trying setContent method...",
    "warning_images": "Some images may not have loaded, continuing with PDF generation...",
}

ERROR_MESSAGES = {
    "browser_init": "Failed to initialize browser",
    "content_load": "Failed to load content",
    "html_not_found": "HTML file not found",
    "optimizations": "Failed to apply optimizations",
    "pdf_generation": "Failed to generate PDF",
    "config_load": "Failed to load configuration",
    "config_invalid": "Invalid configuration format",
    "config_json": "Invalid JSON in configuration file",
    "session_inactive": "Render session is not initialized",
}
