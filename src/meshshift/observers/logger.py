from __future__ import annotations
import logging
from .events import BaseEvent, ShiftFailed, ShiftSkipped


class LoggerObserver:
    """Routes events to a logger; failures at ERROR, skips at WARNING."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        d = event.dict()
        etype = event.__class__.__name__
        msg = ", ".join(f"{k}={v}" for k, v in d.items() if k not in ("ts", "tracking_id"))

        if isinstance(event, ShiftFailed):
            level = logging.ERROR
        elif isinstance(event, ShiftSkipped):
            level = logging.WARNING
        else:
            level = logging.INFO
        self.logger.log(level, f"[{d['tracking_id']}] [EVENT] {etype}: {msg}")
