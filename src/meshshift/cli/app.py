# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import typer

from meshshift.config.loader import load_config
from meshshift.config.models import ShiftConfig
from meshshift.k8s.client import build_custom_objects_api
from meshshift.logging.log import init_logging
from meshshift.observers.console import ConsoleObserver
from meshshift.observers.dispatcher import EventBus
from meshshift.observers.jsonfile import JsonFileObserver
from meshshift.observers.logger import LoggerObserver
from meshshift.router.destinationrule import DestinationRule
from meshshift.router.errors import RouterError
from meshshift.router.models import Shift
from meshshift.router.routelist import fetch_route_list
from meshshift.router.store import IstioStore, KubernetesIstioStore


app = typer.Typer(help="meshshift: canary subsets for Istio DestinationRules")


ConfigArg = typer.Argument(..., help="Shift definition YAML")
DebugOpt = typer.Option(False, "--debug", help="Log DEBUG to the console")
LogDirOpt = typer.Option(None, "--log-dir", help="Directory for run logs (default: ~/.meshshift/logs)")
EventsOpt = typer.Option(False, "--print-events", help="Echo lifecycle events to stdout")


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def build_store(cfg: ShiftConfig) -> IstioStore:
    api = build_custom_objects_api(
        kubeconfig=cfg.kube.kubeconfig,
        kube_context=cfg.kube.context,
        in_cluster=cfg.kube.in_cluster,
    )
    return KubernetesIstioStore(api, api_version=cfg.kube.api_version)


def _setup(
    config: str,
    *,
    debug: bool,
    log_dir: Optional[Path],
    print_events: bool,
) -> Tuple[ShiftConfig, DestinationRule, Shift]:
    logger, run_id, _ = init_logging(base_dir=log_dir, verbose=debug)

    try:
        cfg = load_config(config)
    except RouterError as exc:
        _fail(exc)
    logger.info(f"tracking_id={cfg.tracking_id}")

    observers = [
        LoggerObserver(logger),
        JsonFileObserver((log_dir or Path.home() / ".meshshift" / "logs") / f"{run_id}.jsonl"),
    ]
    if print_events:
        observers.append(ConsoleObserver())

    dr = DestinationRule(
        tracking_id=cfg.tracking_id,
        name=cfg.service.name,
        namespace=cfg.service.namespace,
        build=cfg.service.build,
        istio=build_store(cfg),
        bus=EventBus(observers=observers),
    )
    return cfg, dr, cfg.shift.to_shift()


def _fail(exc: RouterError) -> None:
    typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def validate(
    config: str = ConfigArg,
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
    print_events: bool = EventsOpt,
):
    """Check a shift definition. Loads kube credentials (they must exist) but makes no API calls."""
    _, dr, shift = _setup(config, debug=debug, log_dir=log_dir, print_events=print_events)
    try:
        dr.validate(shift)
    except RouterError as exc:
        _fail(exc)
    typer.echo(f"ok: subset {dr.subset_name}")


@app.command()
def create(
    config: str = ConfigArg,
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
    print_events: bool = EventsOpt,
):
    """Create the DestinationRule for this build."""
    _, dr, shift = _setup(config, debug=debug, log_dir=log_dir, print_events=print_events)
    try:
        route = dr.create(shift)
    except RouterError as exc:
        _fail(exc)
    typer.echo(f"created {route.destination_rule.namespace}/{route.destination_rule.name} subset {route.subset.name}")


@app.command()
def update(
    config: str = ConfigArg,
    create_if_missing: bool = typer.Option(
        False, "--create-if-missing", help="Create the DestinationRule when none matches the selector"
    ),
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
    print_events: bool = EventsOpt,
):
    """Bind this build's subset into the matching DestinationRule."""
    _, dr, shift = _setup(config, debug=debug, log_dir=log_dir, print_events=print_events)
    try:
        dr.update(shift, create_if_missing=create_if_missing)
    except RouterError as exc:
        _fail(exc)
    typer.echo(f"updated subset {dr.subset_name}")


@app.command()
def apply(
    config: str = ConfigArg,
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
    print_events: bool = EventsOpt,
):
    """Merge into the matching DestinationRule, creating one only when none matches."""
    _, dr, shift = _setup(config, debug=debug, log_dir=log_dir, print_events=print_events)
    try:
        dr.apply(shift)
    except RouterError as exc:
        _fail(exc)
    typer.echo(f"applied subset {dr.subset_name}")


@app.command()
def clear(
    config: str = ConfigArg,
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
    print_events: bool = EventsOpt,
):
    """Remove this build's subset (and the DestinationRule once empty)."""
    _, dr, shift = _setup(config, debug=debug, log_dir=log_dir, print_events=print_events)
    try:
        dr.clear(shift)
    except RouterError as exc:
        _fail(exc)
    typer.echo(f"cleared subset {dr.subset_name}")


@app.command()
def routes(
    config: str = ConfigArg,
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
    print_events: bool = EventsOpt,
):
    """Fetch and sanity-check the routing objects matching the selector."""
    cfg, dr, shift = _setup(config, debug=debug, log_dir=log_dir, print_events=print_events)
    try:
        route_list = fetch_route_list(
            dr.istio,
            dr.namespace,
            shift.selector,
            tracking_id=cfg.tracking_id,
            bus=dr.bus,
        )
    except RouterError as exc:
        _fail(exc)

    for vs in route_list.virtual_services:
        typer.echo(f"virtualservice  {vs.namespace}/{vs.name} hosts={','.join(vs.hosts)}")
    for d in route_list.destination_rules:
        typer.echo(f"destinationrule {d.namespace}/{d.name} subsets={','.join(d.subset_names())}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
