# src/meshshift/observers/console.py
from .events import BaseEvent, ShiftFailed


class ConsoleObserver:
    """One line per event, leading with the subset/rule it touched."""

    def notify(self, event: BaseEvent) -> None:
        d = event.dict()
        k = event.__class__.__name__
        target = d.get("subset") or d.get("name") or d.get("operation") or "-"
        rest = ", ".join(
            f"{x}={y}" for x, y in d.items()
            if x not in ("ts", "tracking_id", "namespace", "subset")
        )
        mark = "!!" if isinstance(event, ShiftFailed) else "->"
        print(f"[{d['ts']}] {mark} {k} {d['namespace']}/{target} tracking={d['tracking_id']} ({rest})")
