from __future__ import annotations
import json
from pathlib import Path
from .interface import Observer
from .events import BaseEvent
from ..utils.serialize import to_jsonable

class JsonFileObserver(Observer):
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def notify(self, event: BaseEvent) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            json.dump({"type": event.__class__.__name__, **to_jsonable(event.dict())}, f)
            f.write("\n")
