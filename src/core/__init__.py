# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for PedagogyGuard.

This package contains cross-cutting building blocks:
- config: Application configuration and settings
- errors: Caller-visible error taxonomy
- interfaces: Protocols of the external collaborators (store, audit, clock)
"""
