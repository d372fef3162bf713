#!/usr/bin/env python3
"""
Convert the CV page (index.html) to CV.pdf.

Usage:
    python convert_cv_to_pdf.py [--input index.html] [--config pdf-config.json] [--output CV.pdf] [--debug]
"""

import sys

from cv_to_pdf.converter import main

if __name__ == "__main__":
    sys.exit(main())
