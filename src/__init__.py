"""PedagogyGuard.

Hierarchical multi-tenant authorization and activity-record consistency
engine for early-childhood school networks.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
