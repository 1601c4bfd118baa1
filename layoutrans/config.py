"""
Project-wide defaults and directory structure.

Module Contents:
    APP_NAME: Application name for display purposes
    CONFIG_DIR: Per-user directory holding the key file
    KEYS_FILE: JSON fallback store for API keys
    DEFAULT_BATCH_SIZE: Maximum token texts per translation call
    DEFAULT_TARGET_LANG: Target language used when none is given
    DEFAULT_OUTPUT_NAME: File name for translated output
    DEFAULT_FONT: Fixed metric font used to measure and draw replacements
    DEFAULT_TIMEOUT: Per-request deadline for the translation call (seconds)

Example:
    >>> from layoutrans.config import DEFAULT_BATCH_SIZE
    >>> print(DEFAULT_BATCH_SIZE)
    1000
"""

from pathlib import Path

APP_NAME = "layoutrans"

CONFIG_DIR = Path.home() / ".layoutrans"
KEYS_FILE = CONFIG_DIR / "keys.json"

# Service limit on texts per request
DEFAULT_BATCH_SIZE = 1000

DEFAULT_TARGET_LANG = "JA"

DEFAULT_OUTPUT_NAME = "translated.pdf"

# PyMuPDF built-in Unicode fallback font, covers CJK
DEFAULT_FONT = "cjk"

DEFAULT_TIMEOUT = 30.0

# Page background and foreground (RGB, 0..1)
BACKGROUND_COLOR = (1, 1, 1)
TEXT_COLOR = (0, 0, 0)
