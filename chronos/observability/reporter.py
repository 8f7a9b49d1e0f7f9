"""Failure reporting for operations that degrade instead of raising."""
from typing import Optional

from opentelemetry import trace

from chronos.logging import get_logger

logger = get_logger(__name__)


class FailureReporter:
    """
    Sink for failures the catalog and cart swallow.

    The default implementation logs and annotates the active span.
    Applications subclass it to surface notices to the user.
    """

    def report(self, message: str, error: Optional[BaseException] = None) -> None:
        if error is not None:
            logger.error(f"{message}: {error}")
        else:
            logger.error(message)

        span = trace.get_current_span()
        if span.is_recording():
            span.add_event("failure", {"message": message})
            if error is not None:
                span.record_exception(error)
