# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models shared by the engine components.

- common: Role levels, lifecycle statuses and decision codes
- principal: The authenticated caller and its role grants
- entities: Read snapshots handed out by a RecordStore
- decisions: Scopes, access targets and decision values
"""
