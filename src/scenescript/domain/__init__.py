"""Domain model exports."""

from .assets import AssetHandle
from .commands import (
    NARRATOR,
    AssignmentCommand,
    ChoiceCommand,
    Command,
    ConditionalCommand,
    DefineCharacterCommand,
    DialogueCommand,
    HideCommand,
    JumpCommand,
    LabelCommand,
    MediaCommand,
    MenuCommand,
    Modifier,
    PositionModifier,
    ReturnCommand,
    SceneCommand,
    ShowCommand,
    TransitionModifier,
    UnrecognizedCommand,
)
from .program import Program, walk_commands
from .state import CharacterDef, ExecutionFrame, ExecutionState

__all__ = [
    "NARRATOR",
    "AssetHandle",
    "AssignmentCommand",
    "CharacterDef",
    "ChoiceCommand",
    "Command",
    "ConditionalCommand",
    "DefineCharacterCommand",
    "DialogueCommand",
    "ExecutionFrame",
    "ExecutionState",
    "HideCommand",
    "JumpCommand",
    "LabelCommand",
    "MediaCommand",
    "MenuCommand",
    "Modifier",
    "PositionModifier",
    "Program",
    "ReturnCommand",
    "SceneCommand",
    "ShowCommand",
    "TransitionModifier",
    "UnrecognizedCommand",
    "walk_commands",
]
