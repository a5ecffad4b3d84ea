import logging
import sys
from pathlib import Path

from loguru import logger

from src.storefront.runtime.context import get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# Third-party loggers and the level they are capped at.
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # request_context already logs every request
        if record.name == "uvicorn.access":
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def configure_logging() -> None:
    """Install the console sink, the optional file sink and the stdlib bridge."""
    config = get_config()
    settings = config.logging
    diagnose = config.app.environment != "production"

    logger.remove()
    logger.configure(
        extra={"request_id": "-"},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )
    logger.add(
        sys.stderr,
        level=settings.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=diagnose,
        diagnose=diagnose,
    )

    if settings.file:
        log_file = Path(settings.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        as_json = settings.format == "json"
        logger.add(
            log_file,
            level=settings.level,
            format="{message}" if as_json else CONSOLE_FORMAT,
            serialize=as_json,
            rotation=f"{settings.max_size_mb} MB",
            retention=settings.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=diagnose,
            diagnose=diagnose,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers = []
        existing.propagate = True
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logger.bind(
        level=settings.level, file=settings.file, environment=config.app.environment
    ).info("Logging configured")
