from __future__ import annotations
import json
from pathlib import Path
from .interface import Observer
from .events import BaseEvent


class JsonFileObserver(Observer):
    """
    Appends one JSON line per event; an audit trail of shifts.

    Records carry the event type and, for subset events, the rule/subset
    pair as "route" so a run can be grepped per build.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def notify(self, event: BaseEvent) -> None:
        rec = {"type": event.__class__.__name__, **event.dict()}
        if "subset" in rec and "name" in rec:
            rec["route"] = f"{rec['namespace']}/{rec['name']}#{rec['subset']}"
        with self.path.open("a") as f:
            json.dump(rec, f)
            f.write("\n")
