import logging

from rich.logging import RichHandler

from utils import config


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        dynamic_width = CenteredFormatter.longest_name_length + 2
        record.name = f"{record.name.center(dynamic_width - 2)}"
        return super().format(record)


def _resolve_level() -> int:
    if config.DEBUG:
        return logging.DEBUG
    level = logging.getLevelName(config.LOG_LEVEL)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    Level is DEBUG when the DEBUG env var is set, else EMARKET_LOG_LEVEL.
    """
    if name is None:
        name = "emarket"
    logger = logging.getLogger(name)
    log_level = _resolve_level()
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        console_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized at level {log_level}.")

    return logger
