"""Structured logging with Loguru."""

import contextvars
import logging
import sys
from pathlib import Path
from types import FrameType
from typing import Any, Dict, Optional, Union

from loguru import logger

# Context variable holding the id of the wizard operation being executed
operation_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "operation_id", default=None
)

__all__ = ["operation_id_ctx", "setup_structured_logging", "InterceptHandler"]


class InterceptHandler(logging.Handler):
    """Redirect standard logging records (aiohttp, tenacity) to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame: Optional[FrameType] = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _operation_patcher(record: Dict[str, Any]) -> None:
    """
    Patch log records with operation_id from context.

    Called by Loguru for each record; the id is set by the task bridge
    for the lifetime of one scheduled wizard operation.
    """
    op_id = operation_id_ctx.get()
    if op_id:
        record["extra"]["operation_id"] = op_id


def setup_structured_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_dir: Optional[Union[str, Path]] = None,
    diagnose: bool = False,
) -> None:
    """
    Setup Loguru logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Serialize file records as JSON lines
        log_dir: Directory for rotating log files (console only when None)
        diagnose: Include variable values in tracebacks (never in production)
    """
    # Remove default handler
    logger.remove()

    logger.configure(patcher=_operation_patcher)

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    logger.add(
        sys.stderr,
        format=console_format,
        level=level,
        colorize=True,
    )

    if log_dir is not None:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        if json_format:
            logger.add(
                logs_dir / "login_wizard.jsonl",
                format="{message}",
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="zip",
                serialize=True,
            )
        else:
            logger.add(
                logs_dir / "login_wizard.log",
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | "
                "{name}:{function}:{line} - {message}",
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="zip",
            )

        logger.add(
            logs_dir / "errors_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} - {message}",
            level="ERROR",
            rotation="10 MB",
            retention="90 days",
            backtrace=True,
            diagnose=diagnose,
        )

    # Intercept all standard logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.root.setLevel(getattr(logging, level))
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logger.info(f"Logging initialized (level={level}, json={json_format})")
