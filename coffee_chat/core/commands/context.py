"""Shared data passed to command handlers."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import PendingInteraction


@dataclass(frozen=True)
class CommandContext:
    sender: str
    text: str
    pending: PendingInteraction | None = None
