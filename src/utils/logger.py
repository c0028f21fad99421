import sys
from pathlib import Path

from loguru import logger

# Tags logged on every recompute; kept out of the console, always in the file
RECOMPUTE_TAGS = ("[PIPELINE]", "[WINDOW]")


def _console_filter(record: dict) -> bool:
    return not record["message"].startswith(RECOMPUTE_TAGS)


def setup_logger(*, json_logs: bool = False, level: str = "INFO", log_dir: str | Path = "logs") -> None:
    """Configure loguru for the list service.

    ``level`` applies to the console (``settings.log_level``, i.e. LOG_LEVEL).
    The file under ``log_dir`` captures DEBUG, including pipeline and window
    recomputes, so a session can be replayed.
    """
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=level.upper(), filter=_console_filter)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan> - "
                "<level>{message}</level>"
            ),
            level=level.upper(),
            filter=_console_filter,
            colorize=True,
        )

    logger.add(
        Path(log_dir) / "scanlist_{time:YYYY-MM-DD}.log",
        rotation="20 MB",
        retention="3 days",
        level="DEBUG",
        serialize=json_logs,
    )
