"""Service layer exports."""

from .errors import (
    BrokenChoiceError,
    BrokenJumpError,
    BrokenMenuError,
    EvaluationFailure,
    MissingEntryLabelError,
    RunawayLoopError,
    ScriptRuntimeError,
    UnsupportedCommandError,
)
from .execution_engine import END_TEXT, ENTRY_LABEL, AssetResolver, ExecutionEngine, run
from .renderer import RendererCallbacks

__all__ = [
    "END_TEXT",
    "ENTRY_LABEL",
    "AssetResolver",
    "BrokenChoiceError",
    "BrokenJumpError",
    "BrokenMenuError",
    "EvaluationFailure",
    "ExecutionEngine",
    "MissingEntryLabelError",
    "RendererCallbacks",
    "RunawayLoopError",
    "ScriptRuntimeError",
    "UnsupportedCommandError",
    "run",
]
