import logging
from pathlib import Path

from rich.logging import RichHandler


def setup_logging(level=logging.WARNING, log_file=None):
    """Configure the root logger for command line use.

    Console output goes through rich. When `log_file` is given, everything
    down to DEBUG is also written there.
    """
    handlers = []

    console = RichHandler(
        level=level,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    handlers.append(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_file else level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )
