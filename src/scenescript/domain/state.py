"""Runtime state owned by the execution engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from scenescript.domain.commands import Command, MenuCommand
from scenescript.domain.program import Program
from scenescript.core.types import Value


@dataclass(slots=True)
class CharacterDef:
    """Speaker registered through a `define` line."""

    display_name: str
    color: str | None = None


@dataclass(slots=True)
class ExecutionFrame:
    """One command sequence being walked and the index of the next command to apply."""

    commands: Sequence[Command]
    position: int = 0

    def exhausted(self) -> bool:
        return self.position >= len(self.commands)


@dataclass
class ExecutionState:
    """Mutable state of a single script run."""

    program: Program
    frames: List[ExecutionFrame] = field(default_factory=list)
    variables: Dict[str, Value] = field(default_factory=dict)
    characters: Dict[str, CharacterDef] = field(default_factory=dict)
    running: bool = False
    suspended: bool = False
    active_scene: str | None = None
    # tag -> full image reference, in the order actors were shown
    visible_actors: Dict[str, str] = field(default_factory=dict)
    channels: Dict[str, str] = field(default_factory=dict)
    pending_menu: MenuCommand | None = None

    @property
    def frame(self) -> ExecutionFrame:
        """Return the innermost frame."""
        return self.frames[-1]

    @property
    def commands(self) -> Sequence[Command]:
        """Return the sequence currently being walked."""
        return self.frame.commands

    @property
    def position(self) -> int:
        return self.frame.position

    @property
    def depth(self) -> int:
        """Number of nested blocks entered below the top-level sequence."""
        return len(self.frames) - 1
