# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Activity record consistency domain package."""

from src.domains.consistency.service import (
    ChainInput,
    ConsistencyChain,
    validate_activity_record,
)

__all__ = [
    "ChainInput",
    "ConsistencyChain",
    "validate_activity_record",
]
