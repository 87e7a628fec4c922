from __future__ import annotations
import logging
import sys
from typing import Optional, TextIO


class ColoredFormatter(logging.Formatter):
    """Colored log formatter."""

    COLORS = {
        'DEBUG': '\033[36m',  # Cyan
        'INFO': '\033[32m',  # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',  # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{self.BOLD}{record.levelname:8}{self.RESET}"

        # pubqa.pipelines.qa -> pubqa...qa
        name_parts = record.name.split('.')
        if len(name_parts) > 2:
            record.name = f"{name_parts[0]}...{name_parts[-1]}"
        elif len(name_parts) == 2:
            record.name = name_parts[-1]

        return super().format(record)


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Setup structured logging with colors."""
    if logging.getLogger().handlers:
        return

    separator = f"{ColoredFormatter.COLORS['INFO']}║{ColoredFormatter.RESET}"
    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = ColoredFormatter(
        fmt=f"%(asctime)s {separator} %(levelname)s {separator} %(name)-15s {separator} %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # Silence noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    logging.getLogger("pubqa").setLevel(root.level)
    logging.getLogger("__main__").setLevel(logging.INFO)


def preview(text: str, limit: int = 100) -> str:
    """Shorten user text for log lines."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
