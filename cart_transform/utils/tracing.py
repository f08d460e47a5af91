import logging
from typing import Any, Callable, Dict

# event name, event fields
Tracer = Callable[[str, Dict[str, Any]], None]


def null_tracer(event: str, fields: Dict[str, Any]) -> None:
    return None


def logging_tracer(logger: logging.Logger, level: int = logging.DEBUG) -> Tracer:
    """Forward transform trace events to a logger."""
    def _trace(event: str, fields: Dict[str, Any]) -> None:
        if logger.isEnabledFor(level):
            detail = " ".join(f"{k}={v!r}" for k, v in fields.items())
            logger.log(level, "%s %s", event, detail)
    return _trace
