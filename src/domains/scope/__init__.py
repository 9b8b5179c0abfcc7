# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Scope resolution domain package."""

from src.domains.scope.service import ScopeResolver, resolve_scope

__all__ = [
    "ScopeResolver",
    "resolve_scope",
]
