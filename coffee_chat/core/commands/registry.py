"""Central registry of supported chat commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CommandSpec:
    """Metadata describing a single supported command."""

    name: str
    handler_id: str
    usage: str
    description: str
    aliases: Tuple[str, ...] = ()
    match_anywhere: bool = False

    @property
    def all_names(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases)


def _build_specs() -> Tuple[CommandSpec, ...]:
    return (
        CommandSpec(
            name="summary",
            handler_id="contacts.summary",
            usage="summary",
            description="List all contacts",
            aliases=("recent contacts",),
            match_anywhere=True,
        ),
        CommandSpec(
            name="cancel",
            handler_id="session.cancel",
            usage="cancel",
            description="Cancel current interaction",
        ),
        CommandSpec(
            name="help",
            handler_id="catalog.help",
            usage="help",
            description="Show how to log a contact",
            aliases=("commands",),
        ),
    )


COMMAND_SPECS: Tuple[CommandSpec, ...] = _build_specs()
COMMAND_LOOKUP: Dict[str, CommandSpec] = {
    key: spec for spec in COMMAND_SPECS for key in spec.all_names
}


def get_command_spec(name: str) -> Optional[CommandSpec]:
    """Return the command spec for a given name or alias."""
    return COMMAND_LOOKUP.get(name.strip().lower())


def iter_command_specs() -> Sequence[CommandSpec]:
    """Return the immutable list of command specs in display order."""
    return COMMAND_SPECS
