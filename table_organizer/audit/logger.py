"""
Audit Logger

DESIGN DECISION: Every mutation of the table is logged.
This provides:
1. Traceability (who was added, linked, removed, and when)
2. Debugging capability when storage rejects a write
3. A recent-history view for the UI

The audit logger:
- Writes structured (JSON) lines through structlog
- Keeps a bounded in-memory history
- Never lets a logging failure break a table operation
"""

import logging
from collections import deque
from typing import Optional

import structlog

from table_organizer.models.audit import AuditEvent, AuditSeverity


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


# Configure structlog for local logging
structlog.configure(
    processors=_processors(json_output=True),
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Route structlog output through the stdlib root logger at `level`.
    
    Call once at application start.
    """
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)
    if not json_output:
        structlog.configure(processors=_processors(json_output=False))


_LEVELS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
}


class AuditLogger:
    """
    Central audit logging service.
    
    Logs events both to:
    1. Structured local log (for debugging)
    2. A bounded in-memory history (for the UI)
    """
    
    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.
        
        Args:
            history_size: How many events to keep. 0 disables history.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("table_organizer.audit")
    
    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.
        
        Returns True if the event was written, False if logging failed.
        """
        self._history.append(event)
        
        try:
            method = getattr(self._logger, _LEVELS[event.severity])
            method("audit_event", **event.to_log_dict())
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).error(
                "audit logging failed for %s: %s", event.event_id, e
            )
            return False
        
        return True
    
    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """
        Get the most recent audit events, newest first.
        
        Args:
            limit: Maximum number of events to return (all if None)
        """
        events = list(reversed(self._history))
        if limit is not None:
            events = events[:limit]
        return events
    
    def clear_history(self) -> None:
        self._history.clear()
