# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit sink implementations.

The engine never stores audit records; callers hand decisions to a sink.
"""

from src.infrastructure.audit.sink import StructlogAuditSink

__all__ = [
    "StructlogAuditSink",
]
