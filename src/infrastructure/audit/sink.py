# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit sink writing decision events to the structured log.

Deployments that persist audit trails plug their own AuditSink; this one
ships decisions to the log pipeline, where they are collected with the
rest of the JSON output in production.
"""

from src.models.decisions import AuditEvent
from src.utils.datetime import format_iso
from src.utils.logging import get_logger


class StructlogAuditSink:
    """AuditSink emitting one structured log line per decision."""

    def __init__(self, logger_name: str = "src.audit") -> None:
        self._logger = get_logger(logger_name)

    def record(self, event: AuditEvent) -> None:
        """Emit an audit event.

        Args:
            event: Decision notification.
        """
        log = self._logger.info if event.allowed else self._logger.warning
        log(
            "audit",
            action=event.action.value,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            actor_id=event.actor_id,
            tenant_id=event.tenant_id,
            unit_id=event.unit_id,
            allowed=event.allowed,
            code=event.code.value if event.code else None,
            detail=event.detail,
            occurred_at=format_iso(event.occurred_at),
            **event.metadata,
        )
