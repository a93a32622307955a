"""
Structured logs for the course chatbot.

Both front ends (the terminal widget and the Flask proxy) call
``configure_logging`` with ``Settings.log_level`` before serving. Modules
take a named logger at import time, so every line carries the module that
wrote it, e.g. ``{"event": "fallback_failed", "logger": "protools_chat.dispatcher"}``.
"""

import logging

import structlog

# chatty third-party loggers; their request lines would drown out chat events
QUIET_LOGGERS = ("httpx", "httpcore", "werkzeug")

_configured = False


def configure_logging(level: str = "INFO") -> None:
    global _configured
    if _configured:
        return

    logging.basicConfig(format="%(message)s", level=getattr(logging, str(level).upper(), logging.INFO))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str):
    """Module logger; pass ``__name__``."""
    return structlog.get_logger(name)
