import os
import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<level>{message}</level>"
)


def setup_logger(*, json_logs: bool = False, level: str = "INFO", log_dir: str | None = "logs") -> None:
    """Configure loguru sinks for the simulator and any embedding host.

    Console level comes from LOG_LEVEL env, falling back to ``level``.
    Messages carry their own component tag ([CURVE], [CUSTODY], [RUNTIME]...),
    so the console format omits module/function names.
    With ``log_dir`` set, a DEBUG file sink keeps every commit and rollback.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    if log_dir is None:
        return

    logger.add(
        Path(log_dir) / "curve_{time:YYYY-MM-DD}.log",
        rotation="20 MB",
        retention=5,
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
