"""Logging configuration shared by the API, UI and scripts."""
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO"):
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    root.setLevel(level)
    # Request lines from the HTTP client are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
