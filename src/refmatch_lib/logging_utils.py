import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[str, int, None] = None, logfile: Optional[str] = None) -> None:
    """Configure root logging for scripts.

    Parameters
    ----------
    level: str | int | None
        Desired log level (e.g., "DEBUG", "INFO"). If ``None``, the
        ``LOG_LEVEL`` environment variable is consulted. Defaults to
        ``INFO`` if neither is provided.
    logfile: str | None
        Optional path; when given, records are also appended there.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(logfile, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
