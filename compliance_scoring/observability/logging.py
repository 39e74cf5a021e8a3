"""
Structured logging configuration using structlog.

Service code logs through structlog; library modules (breaker, cache,
AI clients) use stdlib ``logging.getLogger(__name__)``. Both streams end up
in one stderr handler whose ``ProcessorFormatter`` renders JSON in
production and colored console lines otherwise, so a document id bound with
``bound_context()`` shows up on every line, whichever API emitted it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.types import Processor

from compliance_scoring.config.settings import get_settings

HANDLER_NAME = "compliance_scoring"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "asyncio")


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        super().__init__()

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Safe to call more than once; the handler installed by a previous call
    is replaced.

    Args:
        level: Log level name. Defaults to settings.log_level.
        json_logs: Render JSON instead of console output. Defaults to
            True in production.

    Usage:
        setup_logging()
        logger = get_logger(__name__)
        with bound_context(document_id="doc-1"):
            logger.info("Document classified", tier="TIER_2")
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_logs is None:
        json_logs = settings.is_production

    # Applied to structlog events and to foreign stdlib records alike
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderers: list[Processor]
    if json_logs:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    handler = _StderrHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)


@contextmanager
def bound_context(**kwargs) -> Iterator[None]:
    """
    Attach key-value pairs to every log line emitted inside the block.

    Bindings live in contextvars, so concurrent asyncio tasks each see only
    their own values.
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
