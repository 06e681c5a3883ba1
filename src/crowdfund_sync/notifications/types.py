"""Operator alert payloads."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

AlertType = Literal[
    "sync_failed",
    "transaction_failed",
    "contribution_recorded",
    "system_started",
    "system_stopped",
]


@dataclass(frozen=True, slots=True)
class NotificationMessage:
    """One alert; each channel decides how to present it."""

    event_type: AlertType
    message: str
    title: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    def render_text(self) -> str:
        """Title line (if any), the message, then payload as key=value pairs."""
        parts = [self.title, self.message] if self.title else [self.message]
        if self.payload:
            parts.append(" ".join(f"{key}={value}" for key, value in self.payload.items()))
        return "\n".join(parts)
