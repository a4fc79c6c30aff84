# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/__init__.py

__version__ = "0.1.0"
