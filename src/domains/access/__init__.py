# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access validation domain package."""

from src.domains.access.service import (
    ACCESS_PREDICATES,
    AccessPredicate,
    AccessValidator,
    check_access,
)

__all__ = [
    "ACCESS_PREDICATES",
    "AccessPredicate",
    "AccessValidator",
    "check_access",
]
