"""Structured logging for the Sentinela service.

Every log line carries the request context bound by the HTTP layer
(``request_id``, ``method``, ``path`` and, once the caller is known,
``user_id`` and ``role``). Taxpayer identifiers are masked before rendering.
"""
import logging
import re
import sys
from typing import Any, List, MutableMapping

import structlog
from structlog.stdlib import ProcessorFormatter

from sentinela.core.config import settings

SENSITIVE_KEYS = frozenset({"cpf"})
_DIGIT = re.compile(r"\d")


def mask_identifier(value: Any) -> Any:
    """Hide every digit of an identifier except the last two."""
    if not isinstance(value, str):
        return value
    digits = len(_DIGIT.findall(value))
    seen = 0

    def replace(match: "re.Match[str]") -> str:
        nonlocal seen
        seen += 1
        return match.group(0) if seen > digits - 2 else "*"

    return _DIGIT.sub(replace, value)


def mask_sensitive_fields(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking sensitive keys, also inside ``details`` dicts."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = mask_identifier(event_dict[key])
    details = event_dict.get("details")
    if isinstance(details, dict) and SENSITIVE_KEYS.intersection(details):
        event_dict["details"] = {
            k: mask_identifier(v) if k in SENSITIVE_KEYS else v for k, v in details.items()
        }
    return event_dict


def bind_request_context(**values: Any) -> None:
    """Attach values to every log line emitted while handling the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def setup_logging() -> None:
    """Configure structlog on top of the standard logging handlers.

    Development renders colored console lines; every other environment
    renders one JSON object per line.
    """
    shared_processors: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        mask_sensitive_fields,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    if settings.ENVIRONMENT == "development":
        final_processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        final_processor = structlog.processors.JSONRenderer()
        shared_processors.insert(-1, structlog.processors.format_exc_info)

    structlog.configure(
        processors=shared_processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processor=final_processor))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Request lines come from our own middleware
    logging.getLogger("uvicorn.access").disabled = True
    for noisy in ("httpx", "httpcore", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
