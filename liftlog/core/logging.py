"""Loguru setup: one stdout sink, stdlib logging routed through it."""

import logging
import sys
import types

from loguru import logger

from liftlog.core.config import Settings


class InterceptHandler(logging.Handler):
    """Forward stdlib records (uvicorn, sqlalchemy, alembic) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame: types.FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logger.remove()
    logger.configure(
        handlers=[  # type: ignore[list-item]
            {
                "sink": sys.stdout,
                "level": level,
                "format": (
                    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                    "<level>{level}</level> | "
                    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                    "<level>{message}</level>"
                ),
                "colorize": True,
            },
        ]
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.WARNING, force=True)
    # SQL echo only in debug
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.debug else logging.WARNING)
