import copy
from typing import Dict, List, Tuple

import pytest

from meshshift.router.errors import AlreadyExistsError, ConflictError, NotFoundError
from meshshift.router.models import DestinationRuleObject, VirtualServiceObject
from meshshift.utils.labels import parse_selector


def matches_selector(labels, selector):
    # equality-based label selector, as the API server applies it
    labels = labels or {}
    return all(labels.get(k) == v for k, v in selector.items())


class FakeIstioStore:
    """In-memory IstioStore with resourceVersion checks, like the API server."""

    def __init__(self):
        self.destination_rules: Dict[Tuple[str, str], DestinationRuleObject] = {}
        self.virtual_services: Dict[Tuple[str, str], VirtualServiceObject] = {}
        self.calls: List[str] = []
        self._rv = 0

    def _next_rv(self) -> str:
        self._rv += 1
        return str(self._rv)

    # -- seeding helpers -------------------------------------------------
    def add_destination_rule(self, obj: DestinationRuleObject) -> DestinationRuleObject:
        obj = copy.deepcopy(obj)
        obj.resource_version = self._next_rv()
        self.destination_rules[(obj.namespace, obj.name)] = obj
        return obj

    def add_virtual_service(self, obj: VirtualServiceObject) -> None:
        self.virtual_services[(obj.namespace, obj.name)] = copy.deepcopy(obj)

    def get(self, namespace: str, name: str) -> DestinationRuleObject:
        return self.destination_rules[(namespace, name)]

    # -- IstioStore ------------------------------------------------------
    def list_destination_rules(self, namespace, label_selector):
        self.calls.append("list_destination_rules")
        selector = parse_selector(label_selector)
        return [
            copy.deepcopy(o)
            for (ns, _), o in sorted(self.destination_rules.items())
            if ns == namespace and matches_selector(o.labels, selector)
        ]

    def list_virtual_services(self, namespace, label_selector):
        self.calls.append("list_virtual_services")
        selector = parse_selector(label_selector)
        return [
            copy.deepcopy(o)
            for (ns, _), o in sorted(self.virtual_services.items())
            if ns == namespace and matches_selector(o.labels, selector)
        ]

    def create_destination_rule(self, obj):
        self.calls.append("create_destination_rule")
        key = (obj.namespace, obj.name)
        if key in self.destination_rules:
            raise AlreadyExistsError(f"destinationrule {obj.namespace}/{obj.name} already exists")
        return copy.deepcopy(self.add_destination_rule(obj))

    def update_destination_rule(self, obj):
        self.calls.append("update_destination_rule")
        key = (obj.namespace, obj.name)
        current = self.destination_rules.get(key)
        if current is None:
            raise NotFoundError(f"destinationrule {obj.namespace}/{obj.name} not found")
        if obj.resource_version and obj.resource_version != current.resource_version:
            raise ConflictError(f"destinationrule {obj.namespace}/{obj.name} was modified concurrently")
        return copy.deepcopy(self.add_destination_rule(obj))

    def delete_destination_rule(self, namespace, name):
        self.calls.append("delete_destination_rule")
        if (namespace, name) not in self.destination_rules:
            raise NotFoundError(f"destinationrule {namespace}/{name} not found")
        del self.destination_rules[(namespace, name)]


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)

    def kinds(self):
        return [e.__class__.__name__ for e in self.events]


@pytest.fixture
def store():
    return FakeIstioStore()


@pytest.fixture
def capture():
    return Capture()
