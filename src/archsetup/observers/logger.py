from __future__ import annotations
import logging
from .events import BaseEvent, GuardFailed, PrecheckFailed, UnitFailed


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        d = event.dict()
        etype = event.__class__.__name__
        msg = ", ".join(f"{k}={v}" for k, v in d.items() if k not in ("ts", "output"))

        if isinstance(event, (UnitFailed, PrecheckFailed)):
            self.logger.error("[EVENT] %s: %s", etype, msg)
            if getattr(event, "output", None):
                self.logger.error("[EVENT] %s output:\n%s", etype, event.output)
        elif isinstance(event, GuardFailed):
            self.logger.warning("[EVENT] %s: %s", etype, msg)
        else:
            self.logger.debug("[EVENT] %s: %s", etype, msg)
