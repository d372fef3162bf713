#!/usr/bin/env python3
"""
Install the Python packages and the Chromium build the CV converter needs.
"""

import subprocess
import sys


def run_command(cmd: list, description: str) -> bool:
    """Run a command and return success status."""
    print(f"Installing {description}...")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
        print(f"✓ {description} installed successfully")
        return True
    except subprocess.CalledProcessError as e:
        print(f"✗ Failed to install {description}: {e.stderr}")
        return False


def main() -> int:
    """Main setup function."""
    print("Setting up CV to PDF converter...")

    if sys.version_info < (3, 9):
        print("Error: Python 3.9 or higher is required")
        return 1

    print(f"✓ Python {sys.version_info.major}.{sys.version_info.minor} detected")

    print("\nInstalling Python dependencies...")
    if not run_command([sys.executable, "-m", "pip", "install", "-e", "."], "Python packages"):
        return 1

    print("\nInstalling Playwright browsers...")
    if not run_command([sys.executable, "-m", "playwright", "install", "chromium"], "Playwright Chromium"):
        return 1

    print("\n✓ All dependencies are ready!")
    print("\nYou can now run the converter with:")
    print("python convert_cv_to_pdf.py --input index.html")
    return 0


if __name__ == "__main__":
    sys.exit(main())
