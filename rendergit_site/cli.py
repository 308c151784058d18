"""CLI entry point for rendergit-site."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

import structlog

from rendergit_site.config import config_from_args
from rendergit_site.errors import RendergitSiteError
from rendergit_site.render import RenderOrchestrator
from rendergit_site.urls import summary_url

logger = structlog.get_logger()


def configure_logging(level: str = "INFO") -> None:
    """Set up structlog with dev-friendly console output on stderr."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(),
        )
    )
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = config_from_args(argv)
    except RendergitSiteError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level)
    logger.info("config", repo=config.repo_path, out=config.outdir, revs=config.revs)

    try:
        RenderOrchestrator(config).run()
    except RendergitSiteError as e:
        logger.error("render_failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger.info("site_ready", index=config.outdir + summary_url())
    return 0


def run() -> None:
    raise SystemExit(main())
