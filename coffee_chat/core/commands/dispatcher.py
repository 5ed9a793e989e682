"""Match inbound text against the command registry."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from .registry import CommandSpec, iter_command_specs


class CommandDispatcher:
    """Maps message text to command metadata."""

    def __init__(self, specs: Optional[Sequence[CommandSpec]] = None) -> None:
        self._specs: Sequence[CommandSpec] = tuple(specs or iter_command_specs())
        self._lookup: Dict[str, CommandSpec] = {
            name: spec for spec in self._specs for name in spec.all_names
        }

    @property
    def specs(self) -> Sequence[CommandSpec]:
        return self._specs

    def get_spec(self, name: str) -> Optional[CommandSpec]:
        return self._lookup.get(name.lower())

    def match(self, text: str) -> Optional[CommandSpec]:
        """Return the command the text invokes, if any.

        Exact (case-insensitive) names and aliases match first; commands marked
        ``match_anywhere`` also match when a name appears inside the text.
        """

        normalized = text.strip().lower()
        if not normalized:
            return None
        spec = self._lookup.get(normalized)
        if spec:
            return spec
        for spec in self._specs:
            if spec.match_anywhere and any(name in normalized for name in spec.all_names):
                return spec
        return None
