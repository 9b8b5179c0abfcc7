# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Planning domain package.

This package provides the plan status gate and plan write policy:
- PlanStatusGate: Legal status transitions and who may trigger them
- PlanPolicy: Who may create or edit plans
"""

from src.domains.planning.service import (
    PLAN_TRANSITIONS,
    TRANSITION_LEVELS,
    PlanPolicy,
    PlanStatusGate,
    is_terminal,
    is_valid_transition,
    permits_activity_records,
)

__all__ = [
    "PLAN_TRANSITIONS",
    "TRANSITION_LEVELS",
    "PlanPolicy",
    "PlanStatusGate",
    "is_terminal",
    "is_valid_transition",
    "permits_activity_records",
]
