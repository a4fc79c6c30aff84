# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/router/store.py
from __future__ import annotations

import logging
from typing import List, Protocol

from kubernetes.client.rest import ApiException

from .errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    RouterError,
    StoreError,
)
from .models import ISTIO_GROUP, DestinationRuleObject, VirtualServiceObject

log = logging.getLogger("meshshift")

HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409

DESTINATION_RULES = "destinationrules"
VIRTUAL_SERVICES = "virtualservices"


class IstioStore(Protocol):
    """Namespace-scoped access to Istio routing objects."""

    def list_destination_rules(
        self, namespace: str, label_selector: str
    ) -> List[DestinationRuleObject]: ...

    def create_destination_rule(
        self, obj: DestinationRuleObject
    ) -> DestinationRuleObject: ...

    def update_destination_rule(
        self, obj: DestinationRuleObject
    ) -> DestinationRuleObject: ...

    def delete_destination_rule(self, namespace: str, name: str) -> None: ...

    def list_virtual_services(
        self, namespace: str, label_selector: str
    ) -> List[VirtualServiceObject]: ...


def classify_api_exception(exc: ApiException, *, op: str, target: str) -> RouterError:
    """
    Map a kubernetes ApiException onto the router error taxonomy.

    A 409 means "already exists" on create and a stale resourceVersion
    on update.
    """
    status = exc.status
    detail = exc.reason or str(exc)

    if status == HTTP_NOT_FOUND:
        return NotFoundError(f"{target} not found", status=status)
    if status == HTTP_CONFLICT and op == "create":
        return AlreadyExistsError(f"{target} already exists", status=status)
    if status == HTTP_CONFLICT:
        return ConflictError(f"{target} was modified concurrently: {detail}")
    return StoreError(f"{op} {target} failed ({status}): {detail}", status=status)


class KubernetesIstioStore:
    """
    IstioStore backed by the Kubernetes CustomObjectsApi.
    """

    def __init__(self, api, *, api_version: str = "v1beta1"):
        self.api = api
        self.api_version = api_version

    # --------------------------------------------------
    def list_destination_rules(
        self, namespace: str, label_selector: str
    ) -> List[DestinationRuleObject]:
        items = self._list(DESTINATION_RULES, namespace, label_selector)
        return [DestinationRuleObject.from_manifest(i) for i in items]

    def list_virtual_services(
        self, namespace: str, label_selector: str
    ) -> List[VirtualServiceObject]:
        items = self._list(VIRTUAL_SERVICES, namespace, label_selector)
        return [VirtualServiceObject.from_manifest(i) for i in items]

    def create_destination_rule(
        self, obj: DestinationRuleObject
    ) -> DestinationRuleObject:
        target = f"destinationrule {obj.namespace}/{obj.name}"
        try:
            raw = self.api.create_namespaced_custom_object(
                group=ISTIO_GROUP,
                version=self.api_version,
                namespace=obj.namespace,
                plural=DESTINATION_RULES,
                body=obj.to_manifest(self.api_version),
            )
        except ApiException as exc:
            raise classify_api_exception(exc, op="create", target=target) from exc
        return DestinationRuleObject.from_manifest(raw)

    def update_destination_rule(
        self, obj: DestinationRuleObject
    ) -> DestinationRuleObject:
        target = f"destinationrule {obj.namespace}/{obj.name}"
        try:
            raw = self.api.replace_namespaced_custom_object(
                group=ISTIO_GROUP,
                version=self.api_version,
                namespace=obj.namespace,
                plural=DESTINATION_RULES,
                name=obj.name,
                body=obj.to_manifest(self.api_version),
            )
        except ApiException as exc:
            raise classify_api_exception(exc, op="update", target=target) from exc
        return DestinationRuleObject.from_manifest(raw)

    def delete_destination_rule(self, namespace: str, name: str) -> None:
        target = f"destinationrule {namespace}/{name}"
        try:
            self.api.delete_namespaced_custom_object(
                group=ISTIO_GROUP,
                version=self.api_version,
                namespace=namespace,
                plural=DESTINATION_RULES,
                name=name,
            )
        except ApiException as exc:
            raise classify_api_exception(exc, op="delete", target=target) from exc

    # --------------------------------------------------
    def _list(self, plural: str, namespace: str, label_selector: str) -> list:
        log.debug(
            "[istio] list %s namespace=%s selector=%s", plural, namespace, label_selector
        )
        try:
            resp = self.api.list_namespaced_custom_object(
                group=ISTIO_GROUP,
                version=self.api_version,
                namespace=namespace,
                plural=plural,
                label_selector=label_selector,
            )
        except ApiException as exc:
            raise classify_api_exception(
                exc, op="list", target=f"{plural} in {namespace}"
            ) from exc
        return resp.get("items") or []
