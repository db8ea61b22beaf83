"""Indentation-aware script parser.

The parser walks the script line by line, classifies each line and places
the resulting command in the sequence that is active for its indentation:

* the top-level program,
* the action list of a menu choice, or
* the action list of an `if` block.

Open blocks are kept on an explicit stack of contexts. A line whose
indentation is less than or equal to the indentation recorded for the top
context closes that context, so blocks nest as deeply as the source does.

`at`/`with` lines directly following a `scene` or `show` are folded into
that command's modifiers instead of becoming commands of their own.

Parsing never fails: unrecognized lines, choices outside a menu and dangling
modifiers are reported through the notifier and dropped.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

from scenescript.core.notifications import Notifier, default_notifier
from scenescript.core.types import Severity
from scenescript.domain.commands import (
    ChoiceCommand,
    Command,
    ConditionalCommand,
    LabelCommand,
    MenuCommand,
    PositionModifier,
    SceneCommand,
    ShowCommand,
    TransitionModifier,
    UnrecognizedCommand,
)
from scenescript.domain.program import Program
from scenescript.language.classifier import classify_line

ContextKind = Literal["program", "menu", "choice", "conditional"]


@dataclass(slots=True)
class BlockContext:
    """One open block: where its commands go and the indentation that opened it."""

    kind: ContextKind
    indent: int
    actions: List[Command] | None = None
    menu: MenuCommand | None = None


@dataclass
class ContextStack:
    """Stack of open blocks on top of the top-level program sequence."""

    root: List[Command]
    contexts: List[BlockContext] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.contexts.append(BlockContext(kind="program", indent=-1, actions=self.root))

    @property
    def top(self) -> BlockContext:
        return self.contexts[-1]

    def close_for_indent(self, indent: int) -> None:
        """Pop every block whose opening indentation is at or beyond `indent`."""
        while len(self.contexts) > 1 and indent <= self.top.indent:
            self.contexts.pop()

    def reset(self) -> None:
        del self.contexts[1:]

    def push(self, context: BlockContext) -> None:
        self.contexts.append(context)


def measure_indent(line: str) -> int:
    """Return the raw count of leading whitespace characters."""
    return len(line) - len(line.lstrip())


def parse(script_text: str, notifier: Notifier | None = None) -> Program:
    """Parse script text into a Program."""
    return ScriptParser(notifier).parse(script_text)


class ScriptParser:
    """Stateful line-by-line parser; one instance may parse many scripts."""

    def __init__(self, notifier: Notifier | None = None) -> None:
        self._notify = notifier or default_notifier()

    def parse(self, script_text: str) -> Program:
        program = Program()
        stack = ContextStack(root=program.commands)
        attachable: SceneCommand | ShowCommand | None = None

        for index, raw_line in enumerate(script_text.splitlines()):
            line_number = index + 1
            stripped = raw_line.strip()
            if not stripped or stripped.startswith("#"):
                attachable = None
                continue

            indent = measure_indent(raw_line)
            stack.close_for_indent(indent)

            command = classify_line(stripped, line_number)
            if command is None:
                attachable = None
                continue

            if isinstance(command, (PositionModifier, TransitionModifier)):
                if attachable is not None:
                    attachable.modifiers.append(command)
                else:
                    self._report(f"Skipped standalone modifier: {stripped}", line_number, "warning")
                continue
            attachable = None

            if isinstance(command, UnrecognizedCommand):
                self._report(f"Skipped unknown command: {stripped}", line_number, "warning")
                continue

            if isinstance(command, LabelCommand):
                stack.reset()
                program.labels[command.name] = len(program.commands)
                program.commands.append(command)
                continue

            if isinstance(command, ChoiceCommand):
                menu = stack.top.menu
                if stack.top.kind != "menu" or menu is None:
                    self._report(f"Choice found outside of menu: {stripped}", line_number, "warning")
                    continue
                menu.choices.append(command)
                stack.push(BlockContext(kind="choice", indent=indent, actions=command.actions))
                continue

            target = stack.top.actions
            if target is None:
                self._report(f"Only choices may appear inside a menu: {stripped}", line_number, "warning")
                continue
            target.append(command)

            if isinstance(command, MenuCommand):
                stack.push(BlockContext(kind="menu", indent=indent, menu=command))
            elif isinstance(command, ConditionalCommand):
                stack.push(BlockContext(kind="conditional", indent=indent, actions=command.actions))
            elif isinstance(command, (SceneCommand, ShowCommand)):
                attachable = command

        return program

    def _report(self, message: str, line_number: int, severity: Severity) -> None:
        self._notify(f"{message} (line {line_number})", severity)
