# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/router/routelist.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from meshshift.observers.dispatcher import EventBus
from meshshift.observers.events import RouteListValidated, new_ctx
from meshshift.utils.labels import format_selector

from .errors import InvalidState
from .models import IstioRouteList
from .store import IstioStore

log = logging.getLogger("meshshift")


def validate_destination_rule_list(route_list: IstioRouteList) -> None:
    """
    Only checks that destination rules were found at all; the entries
    themselves are not inspected.
    """
    if not route_list.destination_rules:
        raise InvalidState("empty destinationRules")


def fetch_route_list(
    istio: IstioStore,
    namespace: str,
    selector: Dict[str, str],
    *,
    tracking_id: str = "",
    bus: Optional[EventBus] = None,
) -> IstioRouteList:
    """
    Snapshot the VirtualServices and DestinationRules in namespace matching
    selector, and validate it.
    """
    label_selector = format_selector(selector)
    log.debug("[%s] fetching routes in %s for %s", tracking_id, namespace, label_selector)

    route_list = IstioRouteList(
        virtual_services=istio.list_virtual_services(namespace, label_selector),
        destination_rules=istio.list_destination_rules(namespace, label_selector),
    )
    validate_destination_rule_list(route_list)

    if bus:
        bus.emit(RouteListValidated(
            virtual_services=len(route_list.virtual_services),
            destination_rules=len(route_list.destination_rules),
            **new_ctx(tracking_id, namespace),
        ))
    return route_list
