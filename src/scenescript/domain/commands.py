"""Command records produced by the classifier and assembled by the parser."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from scenescript.core.types import MediaKind

NARRATOR = "narrator"
DEFAULT_POSITION = "center"


@dataclass(slots=True)
class Command:
    """Base class for every classified script instruction."""

    line_number: int = field(default=0, kw_only=True)


@dataclass(slots=True)
class LabelCommand(Command):
    name: str


@dataclass(slots=True)
class PositionModifier(Command):
    """`at <position>` line, folded into the preceding show/scene."""

    position: str


@dataclass(slots=True)
class TransitionModifier(Command):
    """`with <effect>` line, folded into the preceding show/scene."""

    effect: str


Modifier = Union[PositionModifier, TransitionModifier]


@dataclass(slots=True)
class _ImageCommand(Command):
    image: str
    modifiers: List[Modifier] = field(default_factory=list)

    @property
    def transition(self) -> str | None:
        """Return the effect of the last `with` modifier, if any."""
        effects = [mod.effect for mod in self.modifiers if isinstance(mod, TransitionModifier)]
        return effects[-1] if effects else None

    @property
    def position(self) -> str:
        """Return the position of the last `at` modifier, defaulting to center."""
        positions = [mod.position for mod in self.modifiers if isinstance(mod, PositionModifier)]
        return positions[-1] if positions else DEFAULT_POSITION


@dataclass(slots=True)
class SceneCommand(_ImageCommand):
    pass


@dataclass(slots=True)
class ShowCommand(_ImageCommand):
    pass


@dataclass(slots=True)
class HideCommand(Command):
    image: str


@dataclass(slots=True)
class DialogueCommand(Command):
    speaker: str
    text: str


@dataclass(slots=True)
class ChoiceCommand(Command):
    """Selectable entry of a menu; only ever stored inside `MenuCommand.choices`."""

    text: str
    actions: List[Command] = field(default_factory=list)


@dataclass(slots=True)
class MenuCommand(Command):
    choices: List[ChoiceCommand] = field(default_factory=list)


@dataclass(slots=True)
class JumpCommand(Command):
    target: str


@dataclass(slots=True)
class ConditionalCommand(Command):
    expression: str
    actions: List[Command] = field(default_factory=list)


@dataclass(slots=True)
class DefineCharacterCommand(Command):
    variable: str
    display_name: str
    color: str | None = None


@dataclass(slots=True)
class AssignmentCommand(Command):
    expression: str


@dataclass(slots=True)
class MediaCommand(Command):
    kind: MediaKind
    channel: str
    file: str | None = None


@dataclass(slots=True)
class ReturnCommand(Command):
    pass


@dataclass(slots=True)
class UnrecognizedCommand(Command):
    raw_text: str


def image_tag(image: str) -> str:
    """Return the tag (first word) of an image reference, e.g. 'eileen' for 'eileen happy'."""
    parts = image.split()
    return parts[0] if parts else image
