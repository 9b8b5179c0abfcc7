# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external collaborators.

This package contains:
- Database connections and the SQLAlchemy record store (PostgreSQL)
- Audit sinks
"""
