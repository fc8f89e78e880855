import logging
from contextlib import suppress
from os import getenv
from pathlib import Path
from typing import Any, Final

from dotenv import load_dotenv

COLORS: Final = {
    logging.DEBUG: "\x1b[38;5;40m\x1b[48;5;232m",
    logging.INFO: "\x1b[48;5;27m",
    logging.WARNING: "\x1b[38;5;232m\x1b[48;5;214m",
    logging.ERROR: "\x1b[48;5;124m",
    logging.CRITICAL: "\x1b[1m\x1b[48;5;196m",
}


class ColorFormatter(logging.Formatter):
    """
    Color codes log lines by level, and shortens the path of the file that
    emitted the log to be relative to the project root.
    """

    datefmt = "%Y-%m-%dT%H:%M:%S"

    fmt: str
    project_root: Path
    use_color: bool

    def __init__(self, *, use_color: bool = True, **kwargs: Any) -> None:  # type: ignore[misc]
        super().__init__(**kwargs)

        self.project_root = Path(__file__).parent.parent
        self.use_color = use_color

        self.fmt = " ".join(
            [
                "[%(asctime)s.%(msecs)03d]",
                "[%(levelname)s]",
                "[%(pathname)s:%(lineno)d]:",
                "%(message)s",
            ]
        )

    def format(self, record: logging.LogRecord) -> str:
        with suppress(ValueError):
            record.pathname = str(Path(record.pathname).relative_to(self.project_root))

        if self.use_color and (color := COLORS.get(record.levelno)):
            fmt = f"{color}{self.fmt}\x1b[0m"
        else:
            fmt = self.fmt

        return logging.Formatter(fmt, datefmt=self.datefmt).format(record)


def setup(*, use_color: bool = True) -> None:
    load_dotenv()

    handler = logging.StreamHandler()
    handler.setFormatter(ColorFormatter(use_color=use_color))

    log_level = getenv("USERLINK_LOG_LEVEL", "WARNING").upper()

    logger = logging.getLogger("userlink")
    logger.setLevel(log_level)

    if not logger.handlers:
        logger.addHandler(handler)
