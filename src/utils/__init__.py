# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for PedagogyGuard.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from src.utils.datetime import (
    ensure_utc,
    format_iso,
    parse_iso,
    to_zone,
    utc_now,
)
from src.utils.logging import get_logger, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Datetime
    "utc_now",
    "ensure_utc",
    "to_zone",
    "format_iso",
    "parse_iso",
]
