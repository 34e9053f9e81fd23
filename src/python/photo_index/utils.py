"""
Utility functions for photo-index.
"""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

_WORD_START = re.compile(r"(^|[^\w'])(\w)")


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """Configure the root logger.

    Args:
        level: Logging level name or number
        log_file: Optional path to an additional log file
        format_string: Format for all handlers
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(format_string)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Third-party libraries are chatty at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def title_case(text: str) -> str:
    """
    Uppercase the first letter of every word, leaving the rest untouched.

    Unlike str.title() this keeps "McDonald's" and "TV" readable:
        >>> title_case("eiffel tower")
        'Eiffel Tower'
        >>> title_case("mcDonald's drive-in")
        "McDonald's Drive-In"
    """
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)


def parse_date_from_filename(filename: str) -> Optional[datetime]:
    """
    Attempt to parse a capture date from a filename.

    Supported patterns:
    - YYYYMMDD_HHMMSS (e.g., IMG_20250101_123045.jpg, PXL_20250101_123045123.jpg)
    - YYYY-MM-DD_HH-MM-SS (e.g., 2025-01-01_12-30-45.jpg)
    - YYYYMMDD-HHMMSS (e.g., Screenshot_20251214-082305.png)
    - YYYYMMDD (e.g., IMG-20250101-WA0001.jpg)
    """
    patterns = (
        (r"(\d{8})_(\d{6})", "%Y%m%d%H%M%S"),
        (r"(\d{4}-\d{2}-\d{2})_(\d{2}-\d{2}-\d{2})", "%Y-%m-%d%H-%M-%S"),
        (r"(\d{8})-(\d{6})", "%Y%m%d%H%M%S"),
    )

    for pattern, fmt in patterns:
        match = re.search(pattern, filename)
        if match:
            try:
                return datetime.strptime(match.group(1) + match.group(2), fmt)
            except ValueError:
                pass

    # Restrict to 201x-202x to avoid matching random counters
    match = re.search(r"(20[1-2]\d{5})", filename)
    if match:
        try:
            return datetime.strptime(match.group(1), "%Y%m%d")
        except ValueError:
            pass

    return None
