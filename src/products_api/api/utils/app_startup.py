"""Loguru setup for the products service.

The console sink is always human readable. An optional rotating file sink
writes plain lines or loguru's JSON records. Libraries that log through the
standard ``logging`` module (uvicorn, SQLAlchemy) are forwarded into loguru,
so their output lands in the same sinks with the same request id field.
"""

import inspect
import logging
import sys
from pathlib import Path

from loguru import logger

from src.products_api.runtime.config.config_data import ConfigData, LoggingConfig
from src.products_api.runtime.context import get_config

LINE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

ACCESS_LOGGER = "uvicorn.access"


class StdlibForwarder(logging.Handler):
    """Hand standard library log records to loguru."""

    def __init__(self, skip: frozenset[str] = frozenset()) -> None:
        super().__init__()
        self.skip = skip

    def emit(self, record: logging.LogRecord) -> None:
        if record.name in self.skip:
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Attribute the record to the caller of the stdlib logger
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, verbose: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if as_json else LINE_FORMAT,
        serialize=as_json,
        rotation=cfg.rotation,
        retention=cfg.retention,
        compression="zip",
        enqueue=True,
        backtrace=verbose,
        diagnose=verbose,
    )


def _forward_stdlib_logging(cfg: LoggingConfig) -> None:
    skip = frozenset() if cfg.access_log else frozenset({ACCESS_LOGGER})
    logging.basicConfig(handlers=[StdlibForwarder(skip)], level=0, force=True)

    # uvicorn attaches its own handlers; send everything through the root
    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers = []
        existing.propagate = True

    for name, level in cfg.library_levels.items():
        logging.getLogger(name).setLevel(level.upper())


def configure_logging(config: ConfigData | None = None) -> None:
    """Install the loguru sinks and stdlib forwarding.

    Uses the active configuration when ``config`` is omitted. Calling it
    again replaces every sink added by an earlier call.
    """
    config = config or get_config()
    cfg = config.logging
    verbose = config.app.environment != "production"

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    logger.add(
        sys.stderr,
        level=cfg.level,
        format=LINE_FORMAT,
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )
    if cfg.file:
        _add_file_sink(cfg, verbose)

    _forward_stdlib_logging(cfg)

    logger.info(
        "Logging configured",
        level=cfg.level,
        file=cfg.file,
        environment=config.app.environment,
    )
