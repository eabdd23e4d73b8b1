import os
import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_configured = False


def _env_flag(key: str) -> bool:
    return os.getenv(key, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    Configure the loguru sinks used by quadstream.

    Args:
        level: Console level
        suppress_console: Drop the stderr sink. Defaults to QUADSTREAM_MACHINE_MODE.
        enable_file_logging: Add a rotating file sink under the configured log_dir.
            Defaults to QUADSTREAM_FILE_LOGGING.
        force: Replace an existing configuration (the CLI does this for --verbose)

    Returns:
        Path of the log file, or None without a file sink
    """
    global _configured
    if _configured and not force:
        return None
    _configured = True

    logger.remove()
    if suppress_console is None:
        suppress_console = _env_flag("QUADSTREAM_MACHINE_MODE")
    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging is None:
        enable_file_logging = _env_flag("QUADSTREAM_FILE_LOGGING")
    if not enable_file_logging:
        return None

    from quadstream.config import get_config

    log_file = Path(get_config().log_dir) / "quadstream.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(log_file, level="INFO", rotation="10 MB", retention="1 day", compression="gz", catch=True)
    return log_file


setup_logging(level=os.getenv("QUADSTREAM_LOG_LEVEL", "INFO"))
