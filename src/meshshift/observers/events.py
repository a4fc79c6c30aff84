# src/meshshift/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any
from datetime import datetime, timezone


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str            # ISO timestamp
    tracking_id: str   # correlates all events of one shift operation
    namespace: str     # namespace the routing objects live in

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(tracking_id: str, namespace: str) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "tracking_id": tracking_id,
        "namespace": namespace,
    }


# ---------------------------------------------------------------------
# DestinationRule lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class DestinationRuleCreated(BaseEvent):
    name: str
    subset: str

@dataclass(frozen=True)
class DestinationRuleUpdated(BaseEvent):
    name: str
    subset: str
    action: str        # "replaced" | "appended"

@dataclass(frozen=True)
class SubsetCleared(BaseEvent):
    name: str
    subset: str
    remaining: List[str]

@dataclass(frozen=True)
class DestinationRuleDeleted(BaseEvent):
    name: str

@dataclass(frozen=True)
class ShiftSkipped(BaseEvent):
    operation: str
    reason: str

@dataclass(frozen=True)
class ShiftFailed(BaseEvent):
    operation: str
    error: str


# ---------------------------------------------------------------------
# Route list snapshots
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class RouteListValidated(BaseEvent):
    virtual_services: int
    destination_rules: int
