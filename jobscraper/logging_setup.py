"""
Logging configuration shared by both entry points.

Console output keeps ANSI colors; the log file gets the same records
with color codes stripped.
"""

import logging
import re

from .settings import Settings


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


def configure_logging(settings: Settings, log_to_file: bool = True):
    """
    Set up console (and optionally file) logging for a pipeline run.

    The DEBUG flag switches everything to verbose diagnostics.
    """
    level = getattr(logging, settings.effective_log_level, logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(settings.log_format))
    handlers = [console_handler]

    if log_to_file:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
        file_handler.setFormatter(ColorStripFormatter(settings.log_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    # Playwright's driver chatter is only useful when debugging
    if not settings.debug:
        logging.getLogger('asyncio').setLevel(logging.WARNING)
        logging.getLogger('playwright').setLevel(logging.WARNING)
