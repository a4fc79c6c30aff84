# src/meshshift/router/models.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


ISTIO_GROUP = "networking.istio.io"


# -----------------------------
# Shift request
# -----------------------------

@dataclass
class Traffic:
    pod_selector: Dict[str, str] = field(default_factory=dict)


@dataclass
class Shift:
    port: int = 0
    hostname: str = ""
    selector: Dict[str, str] = field(default_factory=dict)
    traffic: Traffic = field(default_factory=Traffic)


# -----------------------------
# Istio objects
# -----------------------------

@dataclass
class Subset:
    name: str = ""
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "labels": dict(self.labels)}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Subset":
        return cls(name=raw.get("name", ""), labels=dict(raw.get("labels") or {}))


@dataclass
class DestinationRuleObject:
    name: str = ""
    namespace: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    host: str = ""
    subsets: List[Subset] = field(default_factory=list)
    traffic_policy: Optional[Dict[str, Any]] = None
    resource_version: Optional[str] = None

    def subset_names(self) -> List[str]:
        return [s.name for s in self.subsets]

    def to_manifest(self, api_version: str = "v1beta1") -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "labels": dict(self.labels),
        }
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version

        spec: Dict[str, Any] = {
            "host": self.host,
            "subsets": [s.to_dict() for s in self.subsets],
        }
        if self.traffic_policy:
            spec["trafficPolicy"] = self.traffic_policy

        return {
            "apiVersion": f"{ISTIO_GROUP}/{api_version}",
            "kind": "DestinationRule",
            "metadata": metadata,
            "spec": spec,
        }

    @classmethod
    def from_manifest(cls, raw: Dict[str, Any]) -> "DestinationRuleObject":
        meta = raw.get("metadata") or {}
        spec = raw.get("spec") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", ""),
            labels=dict(meta.get("labels") or {}),
            host=spec.get("host", ""),
            subsets=[Subset.from_dict(s) for s in spec.get("subsets") or []],
            traffic_policy=spec.get("trafficPolicy"),
            resource_version=meta.get("resourceVersion"),
        )


@dataclass
class VirtualServiceObject:
    name: str = ""
    namespace: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    hosts: List[str] = field(default_factory=list)
    gateways: List[str] = field(default_factory=list)
    http: List[Dict[str, Any]] = field(default_factory=list)
    resource_version: Optional[str] = None

    def to_manifest(self, api_version: str = "v1beta1") -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "labels": dict(self.labels),
        }
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        return {
            "apiVersion": f"{ISTIO_GROUP}/{api_version}",
            "kind": "VirtualService",
            "metadata": metadata,
            "spec": {
                "hosts": list(self.hosts),
                "gateways": list(self.gateways),
                "http": list(self.http),
            },
        }

    @classmethod
    def from_manifest(cls, raw: Dict[str, Any]) -> "VirtualServiceObject":
        meta = raw.get("metadata") or {}
        spec = raw.get("spec") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", ""),
            labels=dict(meta.get("labels") or {}),
            hosts=list(spec.get("hosts") or []),
            gateways=list(spec.get("gateways") or []),
            http=list(spec.get("http") or []),
            resource_version=meta.get("resourceVersion"),
        )


# -----------------------------
# Results / snapshots
# -----------------------------

@dataclass
class IstioRoute:
    """What Create hands back: the subset it bound and the object holding it."""
    subset: Subset
    destination_rule: DestinationRuleObject


@dataclass
class IstioRouteList:
    # None means "absent", an empty list means "fetched, nothing there"
    virtual_services: Optional[List[VirtualServiceObject]] = None
    destination_rules: Optional[List[DestinationRuleObject]] = None
