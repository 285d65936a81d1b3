"""
Logging configuration for scratchauth
"""

import logging
from pathlib import Path

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_file: Path | None = None, verbose: bool = False):
    """Console logging for scratchauth, plus a file log when log_file is given"""
    # Suppress transport logs
    logging.getLogger("curl_cffi").setLevel(logging.WARNING)

    package_logger = logging.getLogger("scratchauth")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    package_logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FORMAT))
        package_logger.addHandler(file_handler)
