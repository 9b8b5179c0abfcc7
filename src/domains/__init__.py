# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for PedagogyGuard.

This package contains the decision components of the engine. Each domain
reads through a RecordStore and returns decisions; none of them writes.

Domains:
    scope: Principal scope resolution.
    access: Rank-ordered access checks.
    calendar: Institutional day arithmetic and clock.
    consistency: Activity record consistency chain.
    planning: Plan status state machine and plan policy.
    curriculum: Curriculum matrix lifecycle guard.
    activity_record: Activity record write authorization and listing filters.
"""
