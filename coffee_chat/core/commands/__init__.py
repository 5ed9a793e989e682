"""Bare-word chat commands (summary, cancel, help)."""

from .context import CommandContext
from .contacts import ContactCommandHandler
from .dispatcher import CommandDispatcher
from .registry import CommandSpec, get_command_spec, iter_command_specs
from .session import SessionCommandHandler

__all__ = [
    "CommandContext",
    "CommandDispatcher",
    "CommandSpec",
    "ContactCommandHandler",
    "SessionCommandHandler",
    "get_command_spec",
    "iter_command_specs",
]
