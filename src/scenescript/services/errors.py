"""Service-layer exceptions raised while executing a program.

The engine raises these internally and reports them through the notifier;
none of them escape a public engine call.
"""


class ScriptRuntimeError(Exception):
    """Base exception for conditions met while executing a script."""

    condition = "RuntimeError"

    def __init__(self, detail: str, line_number: int = 0) -> None:
        self.detail = detail
        self.line_number = line_number
        super().__init__(self.message)

    @property
    def message(self) -> str:
        suffix = f" (line {self.line_number})" if self.line_number else ""
        return f"{self.condition}: {self.detail}{suffix}"


class MissingEntryLabelError(ScriptRuntimeError):
    """Raised when the program has no entry label to start from."""

    condition = "MissingEntryLabel"


class BrokenJumpError(ScriptRuntimeError):
    """Raised when a jump targets a label that is not defined."""

    condition = "BrokenJump"


class BrokenChoiceError(ScriptRuntimeError):
    """Raised when a selected menu choice has no jump in its actions."""

    condition = "BrokenChoice"


class BrokenMenuError(ScriptRuntimeError):
    """Raised when a menu has no choices to offer."""

    condition = "BrokenMenu"


class EvaluationFailure(ScriptRuntimeError):
    """Raised when a condition or statement cannot be evaluated."""

    condition = "EvaluationError"


class UnsupportedCommandError(ScriptRuntimeError):
    """Raised when a command cannot be applied at the position it was reached."""

    condition = "UnsupportedCommand"


class RunawayLoopError(ScriptRuntimeError):
    """Raised when a run keeps advancing without ever pausing for input."""

    condition = "RunawayLoop"
