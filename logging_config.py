import logging
import os

from rich.logging import RichHandler

DEFAULT_LEVEL = "WARNING"


def configure(level: str | None = None, verbose: bool = False) -> None:
    """Routes log records through rich. Level: argument, ROUTE_CACHE_LOG_LEVEL, or WARNING."""
    if verbose:
        level = "DEBUG"
    level = (level or os.getenv("ROUTE_CACHE_LOG_LEVEL") or DEFAULT_LEVEL).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_time=False, show_path=verbose,
                              markup=False)],
    )
    # urllib3 logs every connection; only show that in verbose mode.
    if not verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
