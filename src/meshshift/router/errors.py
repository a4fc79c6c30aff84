# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/router/errors.py
from __future__ import annotations

from typing import Optional


class RouterError(RuntimeError):
    """Base class for traffic-shift failures."""


class InvalidRequest(RouterError):
    """Raised when caller-supplied data violates a precondition."""


class InvalidState(RouterError):
    """Raised when a fetched routing snapshot violates an expected invariant."""


class ConflictError(RouterError):
    """Raised for ambiguous or concurrently-modified remote state."""


class StoreError(RouterError):
    """Raised when the routing store fails for transport/backend reasons."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    pass


class AlreadyExistsError(StoreError):
    pass
