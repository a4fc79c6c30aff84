# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/router/destinationrule.py
from __future__ import annotations

import logging
from typing import List, Optional

from meshshift.observers.dispatcher import EventBus
from meshshift.observers.events import (
    BaseEvent,
    DestinationRuleCreated,
    DestinationRuleDeleted,
    DestinationRuleUpdated,
    ShiftFailed,
    ShiftSkipped,
    SubsetCleared,
    new_ctx,
)
from meshshift.utils.labels import format_selector

from .errors import AlreadyExistsError, ConflictError, InvalidRequest, NotFoundError
from .models import DestinationRuleObject, IstioRoute, Shift, Subset
from .store import IstioStore

log = logging.getLogger("meshshift")

MIN_PORT = 1024
MAX_PORT = 65535


class DestinationRule:
    """
    Manages the DestinationRule side of a traffic shift for one build of a
    service: the subset named "<name>-<build>-<namespace>" selecting the
    pods given by the shift's pod selector.

    The object is request-scoped. It holds no state besides its identity,
    the store handle and an optional EventBus; concurrent shifts on the same
    selector are arbitrated by the store (stale writes surface as
    ConflictError).
    """

    def __init__(
        self,
        *,
        tracking_id: str = "",
        name: str = "",
        namespace: str = "",
        build: int = 0,
        istio: Optional[IstioStore] = None,
        bus: Optional[EventBus] = None,
    ):
        self.tracking_id = tracking_id
        self.name = name
        self.namespace = namespace
        self.build = build
        self.istio = istio
        self.bus = bus

    @property
    def subset_name(self) -> str:
        return f"{self.name}-{self.build}-{self.namespace}"

    def subset(self, shift: Shift) -> Subset:
        return Subset(name=self.subset_name, labels=dict(shift.traffic.pod_selector))

    # --------------------------------------------------
    def validate(self, shift: Shift) -> None:
        """Raise InvalidRequest on the first violated precondition."""
        if not shift.selector:
            raise InvalidRequest("empty label-selector")

        if shift.port == 0:
            raise InvalidRequest("empty port")

        if shift.port < MIN_PORT or shift.port > MAX_PORT:
            raise InvalidRequest(f"port not in range {MIN_PORT} - {MAX_PORT}")

        if not shift.traffic.pod_selector:
            raise InvalidRequest("empty pod selector")

        if not self.name:
            raise InvalidRequest("empty 'name' attribute")

        if not self.namespace:
            raise InvalidRequest("empty 'namespace' attribute")

        if not self.build:
            raise InvalidRequest("empty 'build' attribute")

        if self.istio is None:
            raise InvalidRequest("nil istioClient object")

    # --------------------------------------------------
    def create(self, shift: Shift) -> IstioRoute:
        """
        Create a DestinationRule holding only this build's subset.

        AlreadyExistsError propagates so callers can fall back to update().
        """
        self.validate(shift)

        subset = self.subset(shift)
        obj = DestinationRuleObject(
            name=self.name,
            namespace=self.namespace,
            labels=dict(shift.selector),
            host=shift.hostname or self.name,
            subsets=[subset],
        )

        log.info(
            "[%s] creating destinationRule %s/%s with subset %s",
            self.tracking_id, self.namespace, self.name, subset.name,
        )
        try:
            created = self.istio.create_destination_rule(obj)
        except AlreadyExistsError:
            log.info(
                "[%s] destinationRule %s/%s already exists",
                self.tracking_id, self.namespace, self.name,
            )
            raise
        except Exception as exc:
            self._emit_failure("create", exc)
            raise

        self._emit(DestinationRuleCreated, name=created.name, subset=subset.name)
        return IstioRoute(subset=subset, destination_rule=created)

    # --------------------------------------------------
    def update(self, shift: Shift, *, create_if_missing: bool = False) -> None:
        """
        Bind this build's subset into the DestinationRule matching
        shift.selector: replace a subset of the same name in place, append
        otherwise. No match is a no-op unless create_if_missing is set.
        """
        self.validate(shift)

        matches = self._matching(shift, "update")
        if not matches:
            if create_if_missing:
                log.info(
                    "[%s] no destinationRule matches %s, creating one",
                    self.tracking_id, format_selector(shift.selector),
                )
                self.create(shift)
                return
            self._skip("update", f"no destinationRule matches {format_selector(shift.selector)}")
            return

        self._bind(matches[0], shift, "update")

    # --------------------------------------------------
    def clear(self, shift: Shift) -> None:
        """
        Remove this build's subset from the matching DestinationRule and
        delete the object once no subsets remain. Clearing something that is
        already gone succeeds.
        """
        self.validate(shift)

        matches = self._matching(shift, "clear")
        if not matches:
            self._skip("clear", f"no destinationRule matches {format_selector(shift.selector)}")
            return

        dr = matches[0]
        name = self.subset_name
        if name not in dr.subset_names():
            self._skip("clear", f"subset {name} not present in {dr.name}")
            return

        dr.subsets = [s for s in dr.subsets if s.name != name]

        try:
            if dr.subsets:
                log.info(
                    "[%s] removing subset %s from destinationRule %s/%s",
                    self.tracking_id, name, dr.namespace, dr.name,
                )
                try:
                    self.istio.update_destination_rule(dr)
                except NotFoundError:
                    self._skip("clear", f"destinationRule {dr.name} deleted concurrently")
                    return
                self._emit(SubsetCleared, name=dr.name, subset=name, remaining=dr.subset_names())
                return

            log.info(
                "[%s] last subset %s removed, deleting destinationRule %s/%s",
                self.tracking_id, name, dr.namespace, dr.name,
            )
            try:
                self.istio.delete_destination_rule(dr.namespace, dr.name)
            except NotFoundError:
                log.info("[%s] destinationRule %s already deleted", self.tracking_id, dr.name)
        except Exception as exc:
            self._emit_failure("clear", exc)
            raise

        self._emit(SubsetCleared, name=dr.name, subset=name, remaining=[])
        self._emit(DestinationRuleDeleted, name=dr.name)

    # --------------------------------------------------
    def apply(self, shift: Shift) -> None:
        """
        Merge into the DestinationRule matching shift.selector, creating one
        only when nothing matches.
        """
        self.validate(shift)

        matches = self._matching(shift, "apply")
        if matches:
            self._bind(matches[0], shift, "apply")
            return

        try:
            self.create(shift)
        except AlreadyExistsError as exc:
            # the name is taken by a rule our selector does not match
            err = ConflictError(f"destination rule {self.name} exists with a different selector")
            log.error("[%s] %s", self.tracking_id, err)
            self._emit_failure("apply", err)
            raise err from exc

    # --------------------------------------------------
    def _bind(self, dr: DestinationRuleObject, shift: Shift, operation: str) -> None:
        subset = self.subset(shift)
        action = merge_subset(dr.subsets, subset)

        log.info(
            "[%s] updating destinationRule %s/%s: %s subset %s",
            self.tracking_id, dr.namespace, dr.name, action, subset.name,
        )
        try:
            self.istio.update_destination_rule(dr)
        except NotFoundError:
            self._skip(operation, f"destinationRule {dr.name} deleted concurrently")
            return
        except Exception as exc:
            self._emit_failure(operation, exc)
            raise

        self._emit(DestinationRuleUpdated, name=dr.name, subset=subset.name, action=action)

    # --------------------------------------------------
    def _matching(self, shift: Shift, operation: str) -> List[DestinationRuleObject]:
        selector = format_selector(shift.selector)
        try:
            matches = self.istio.list_destination_rules(self.namespace, selector)
        except Exception as exc:
            self._emit_failure(operation, exc)
            raise

        if len(matches) > 1:
            exc = ConflictError("multiple destination rules match selector")
            log.error(
                "[%s] %s: %s match %s",
                self.tracking_id, exc, [m.name for m in matches], selector,
            )
            self._emit_failure(operation, exc)
            raise exc
        return matches

    def _skip(self, operation: str, reason: str) -> None:
        log.info("[%s] %s skipped: %s", self.tracking_id, operation, reason)
        self._emit(ShiftSkipped, operation=operation, reason=reason)

    def _emit_failure(self, operation: str, exc: Exception) -> None:
        self._emit(ShiftFailed, operation=operation, error=str(exc))

    def _emit(self, event_cls: type[BaseEvent], **data) -> None:
        if self.bus:
            self.bus.emit(event_cls(**data, **new_ctx(self.tracking_id, self.namespace)))


def merge_subset(subsets: List[Subset], subset: Subset) -> str:
    """
    Put subset into subsets (mutates), keeping unrelated subsets in order.
    Returns "replaced" or "appended".
    """
    for i, existing in enumerate(subsets):
        if existing.name == subset.name:
            subsets[i] = subset
            return "replaced"
    subsets.append(subset)
    return "appended"
