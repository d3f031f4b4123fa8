"""Terminal-safe output and logging setup.

Detects the terminal encoding and swaps Unicode icons for ASCII on
terminals that cannot print UTF-8. Log records go through Rich.
"""
import locale
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    # Status icons
    '✓': '[OK]',
    '✔': '[OK]',
    '✅': '[OK]',
    '✗': '[FAIL]',
    '✘': '[FAIL]',
    '❌': '[FAIL]',
    '⚠️': '[WARN]',
    '⚠': '[WARN]',
    'ℹ': '[i]',

    # Arrows
    '→': '->',
    '←': '<-',
    '⇒': '=>',

    # Symbols
    '…': '...',
    '•': '*',
    '─': '-',
    '│': '|',
}

LOG_FORMAT = "%(message)s"


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    encoding = locale.getpreferredencoding(False)
    return encoding.lower() if encoding else 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal lacks UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Text safe for the current terminal
    """
    if is_utf8_capable():
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)
    return sanitized


def setup_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    """Route the solidlint loggers through a RichHandler.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)
        console: Console the handler writes to (stderr by default)

    Raises:
        ValueError: If level is not a known logging level
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("solidlint")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(numeric_level)
    package_logger.propagate = False
