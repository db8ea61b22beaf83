"""Parsed program: top-level command sequence plus label index."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence

from scenescript.domain.commands import ChoiceCommand, Command, ConditionalCommand, MenuCommand


@dataclass(slots=True)
class Program:
    """Output of the script parser."""

    commands: List[Command] = field(default_factory=list)
    labels: Dict[str, int] = field(default_factory=dict)

    def resolve(self, label: str) -> int | None:
        """Return the top-level index of a label, or None when it is not defined."""
        return self.labels.get(label)

    def iter_commands(self) -> Iterator[Command]:
        """Walk every command depth-first, including nested menu and conditional bodies."""
        yield from walk_commands(self.commands)

    def __len__(self) -> int:
        return len(self.commands)


def walk_commands(commands: Sequence[Command]) -> Iterator[Command]:
    """Yield `commands` and everything nested inside them, depth-first."""
    for command in commands:
        yield command
        if isinstance(command, MenuCommand):
            for choice in command.choices:
                yield choice
                yield from walk_commands(choice.actions)
        elif isinstance(command, (ChoiceCommand, ConditionalCommand)):
            yield from walk_commands(command.actions)
