# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/utils/labels.py
from __future__ import annotations

from typing import Dict, Mapping

from meshshift.router.errors import InvalidRequest


def parse_selector(text: str) -> Dict[str, str]:
    """
    Turn "key=value,key2=value2" into a label map.

    Values may themselves contain '=' (only the first one splits).
    A blank string gives an empty map.
    """
    labels: Dict[str, str] = {}
    if not text or not text.strip():
        return labels

    for pair in text.split(","):
        pair = pair.strip()
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidRequest(
                f"malformed label pair '{pair}': expected key=value"
            )
        labels[key] = value.strip()

    return labels


def format_selector(labels: Mapping[str, str]) -> str:
    """Returns a k8s selector string based on given map. Ex: "key=value,key2=value2"."""
    pairs = [f"{k}={labels[k]}" for k in sorted(labels)]
    if not pairs:
        raise InvalidRequest("got an empty labelSelector")
    return ",".join(pairs)
