# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/config/loader.py

import logging
import os
import yaml
from pathlib import Path
from .models import ShiftConfig

log = logging.getLogger("meshshift")

KUBE_CONTEXT_ENV = "MESHSHIFT_KUBE_CONTEXT"


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_config(path: str | Path) -> ShiftConfig:
    """
    Load and validate a shift config.

    ``${ENV_VAR}`` placeholders are resolved at load time, and
    ``MESHSHIFT_KUBE_CONTEXT`` (when set) wins over ``kube.context``.
    Selectors may be written as ``"app=x,env=y"`` or as mappings.
    """
    path = Path(path)
    data = _load_yaml(path)

    ctx = os.environ.get(KUBE_CONTEXT_ENV)
    if ctx:
        log.debug("%s=%s overrides kube.context", KUBE_CONTEXT_ENV, ctx)
        data.setdefault("kube", {})
        data["kube"] = {**(data["kube"] or {}), "context": ctx}

    return ShiftConfig.model_validate(data)
