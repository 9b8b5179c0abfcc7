# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum domain package.

This package provides the curriculum matrix mutation guard:
- CurriculumMatrixGuard: Creation, update and retirement rules
"""

from src.domains.curriculum.service import (
    DEFAULT_MATRIX_VERSION,
    MATRIX_RETIRE_LEVELS,
    MATRIX_WRITE_LEVELS,
    CurriculumMatrixGuard,
)

__all__ = [
    "CurriculumMatrixGuard",
    "DEFAULT_MATRIX_VERSION",
    "MATRIX_RETIRE_LEVELS",
    "MATRIX_WRITE_LEVELS",
]
