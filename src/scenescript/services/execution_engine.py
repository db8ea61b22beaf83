"""Resumable interpreter that plays a parsed program.

The engine walks the program one command at a time. Most commands apply
their effect and fall through to the next one; dialogue lines and menus
suspend the run until `continue_dialogue` or `select_choice` is called.

Nested action lists (a taken `if` block, the actions of a chosen menu
entry) are entered by pushing an `ExecutionFrame`. The parent frame has
already been moved past the command that opened the block, so when the
nested frame runs out it is popped and execution carries on after that
command. A suspension inside a nested block therefore resumes in the
block it was suspended in. `jump` always resolves against the top-level
label index and discards every nested frame.

Every failure (missing entry label, broken jump or choice, bad
expression) is reported through the notifier and degraded to a skip, so
no public call raises because of script content.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, List, Mapping, Optional

from scenescript.core.notifications import Notifier, default_notifier
from scenescript.core.types import EngineStatus, Severity, Value
from scenescript.domain.assets import AssetHandle
from scenescript.domain.commands import (
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
    PositionModifier,
    ReturnCommand,
    SceneCommand,
    ShowCommand,
    TransitionModifier,
    UnrecognizedCommand,
    image_tag,
)
from scenescript.domain.program import Program, walk_commands
from scenescript.domain.state import CharacterDef, ExecutionFrame, ExecutionState
from scenescript.language.errors import ExpressionError
from scenescript.language.expressions import evaluate_condition, execute_statement
from scenescript.services.errors import (
    BrokenChoiceError,
    BrokenJumpError,
    BrokenMenuError,
    EvaluationFailure,
    MissingEntryLabelError,
    RunawayLoopError,
    ScriptRuntimeError,
    UnsupportedCommandError,
)
from scenescript.services.renderer import RendererCallbacks

logger = logging.getLogger(__name__)

# (reference, asset type) -> handle; the type is "images" or "audio"
AssetResolver = Callable[[str, str], Optional[AssetHandle]]

ENTRY_LABEL = "start"
END_TEXT = "The End"

_SUSPENDED_STATES = ("suspended_dialogue", "suspended_menu")
_INTERPOLATION_RE = re.compile(r"\[(\w+)\]")


def _no_assets(ref: str, asset_type: str) -> AssetHandle | None:
    return None


class ExecutionEngine:
    """Owns one ExecutionState at a time and drives it through a program."""

    def __init__(
        self,
        asset_resolver: AssetResolver | None = None,
        renderer: RendererCallbacks | None = None,
        notifier: Notifier | None = None,
        *,
        entry_label: str = ENTRY_LABEL,
        initial_variables: Mapping[str, Value] | None = None,
        max_steps: int | None = None,
    ) -> None:
        self._resolve_asset = asset_resolver or _no_assets
        self._renderer = renderer or RendererCallbacks()
        self._notify = notifier or default_notifier()
        self._entry_label = entry_label
        self._initial_variables = dict(initial_variables or {})
        self._max_steps = max_steps
        self._status: EngineStatus = "idle"
        self._state: ExecutionState | None = None
        self._advancing = False
        self._steps = 0

    # --- public surface ------------------------------------------------

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def state(self) -> ExecutionState | None:
        """Return the live run state (None before the first successful start)."""
        return self._state

    @property
    def entry_label(self) -> str:
        return self._entry_label

    def current_choices(self) -> List[str]:
        """Return the texts of the menu the engine is waiting on, if any."""
        if self._status != "suspended_menu" or self._state is None or self._state.pending_menu is None:
            return []
        return [choice.text for choice in self._state.pending_menu.choices]

    def load_and_run(self, program: Program) -> None:
        """Start a fresh run of `program` at the entry label."""
        entry = program.resolve(self._entry_label)
        if entry is None:
            self._report(MissingEntryLabelError(f'label "{self._entry_label}" not found in script'), "error")
            self._state = None
            self._set_status("idle")
            return

        self._state = ExecutionState(
            program=program,
            frames=[ExecutionFrame(commands=program.commands, position=entry)],
            variables=dict(self._initial_variables),
        )
        # defines are init-time: register top-level ones even if they sit above the entry label
        for command in program.commands:
            if isinstance(command, DefineCharacterCommand):
                self._state.characters[command.variable] = CharacterDef(
                    display_name=command.display_name,
                    color=command.color,
                )
        logger.info("starting run at label %r (index %d)", self._entry_label, entry)
        self._set_status("running")
        if self._state.variables:
            self._renderer.on_variables_changed(dict(self._state.variables))
        self._run()

    def continue_dialogue(self) -> None:
        """Resume after the dialogue line the engine is waiting on."""
        state = self._state
        if self._status != "suspended_dialogue" or state is None:
            logger.debug("ignoring continue_dialogue while %s", self._status)
            return
        state.frame.position += 1
        self._set_status("running")
        self._run()

    def select_choice(self, index: int) -> None:
        """Resume the pending menu with the choice at `index` (0-based)."""
        state = self._state
        if self._status != "suspended_menu" or state is None or state.pending_menu is None:
            logger.debug("ignoring select_choice(%r) while %s", index, self._status)
            return
        choices = state.pending_menu.choices
        if not 0 <= index < len(choices):
            self._notify(f"Choice index {index} is out of range for a menu with {len(choices)} choices", "warning")
            return

        choice = choices[index]
        state.pending_menu = None
        state.frame.position += 1
        if not any(isinstance(action, JumpCommand) for action in walk_commands(choice.actions)):
            self._report(BrokenChoiceError(f'choice "{choice.text}" has no jump', choice.line_number), "warning")
        if choice.actions:
            state.frames.append(ExecutionFrame(commands=choice.actions))
        self._set_status("running")
        self._run()

    def stop(self) -> None:
        """Halt immediately and ask the renderer to clear its presentation."""
        if self._state is not None:
            self._state.pending_menu = None
        self._set_status("halted")
        logger.info("run stopped")
        self._renderer.on_cleared()

    def reset_to_entry(self) -> None:
        """Restart the current program from its entry label."""
        if self._state is None or self._status not in ("running",) + _SUSPENDED_STATES:
            logger.debug("ignoring reset_to_entry while %s", self._status)
            return
        self.load_and_run(self._state.program)

    # --- main loop -----------------------------------------------------

    def _set_status(self, status: EngineStatus) -> None:
        logger.debug("status %s -> %s", self._status, status)
        self._status = status
        if status != "running":
            self._steps = 0
        if self._state is not None:
            self._state.running = status == "running"
            self._state.suspended = status in _SUSPENDED_STATES

    def _run(self) -> None:
        # Resume signals raised from renderer callbacks land here while the
        # outer loop is still active; they only change the state.
        if self._advancing:
            return
        self._advancing = True
        try:
            while self._status == "running":
                self._steps += 1
                if self._max_steps is not None and self._steps > self._max_steps:
                    self._report(RunawayLoopError(f"no pause after {self._max_steps} commands"), "error")
                    self._halt()
                    break
                self._step()
        finally:
            self._advancing = False

    def _step(self) -> None:
        state = self._state
        assert state is not None
        frame = state.frame
        if frame.exhausted():
            if state.depth == 0:
                self._halt()
            else:
                state.frames.pop()
            return
        command = frame.commands[frame.position]
        try:
            self._apply(command, state, frame)
        except ScriptRuntimeError as exc:
            self._report(exc, "warning")
            frame.position += 1

    def _apply(self, command: Command, state: ExecutionState, frame: ExecutionFrame) -> None:
        if isinstance(command, DialogueCommand):
            self._show_dialogue(command, state)
        elif isinstance(command, MenuCommand):
            self._show_menu(command, state)
        elif isinstance(command, JumpCommand):
            self._jump(command, state)
        elif isinstance(command, ConditionalCommand):
            self._enter_conditional(command, state, frame)
        elif isinstance(command, SceneCommand):
            frame.position += 1
            self._change_scene(command, state)
        elif isinstance(command, ShowCommand):
            frame.position += 1
            self._show_actor(command, state)
        elif isinstance(command, HideCommand):
            frame.position += 1
            self._hide_actor(command, state)
        elif isinstance(command, AssignmentCommand):
            frame.position += 1
            self._assign(command, state)
        elif isinstance(command, DefineCharacterCommand):
            frame.position += 1
            state.characters[command.variable] = CharacterDef(display_name=command.display_name, color=command.color)
        elif isinstance(command, MediaCommand):
            frame.position += 1
            self._control_media(command, state)
        elif isinstance(command, (LabelCommand, PositionModifier, TransitionModifier)):
            frame.position += 1
        elif isinstance(command, ReturnCommand):
            self._halt()
        elif isinstance(command, ChoiceCommand):
            raise UnsupportedCommandError(f'choice "{command.text}" outside of a menu', command.line_number)
        elif isinstance(command, UnrecognizedCommand):
            raise UnsupportedCommandError(f"unknown command {command.raw_text!r}", command.line_number)
        else:
            raise UnsupportedCommandError(f"cannot execute {type(command).__name__}", command.line_number)

    def _halt(self) -> None:
        if self._state is not None:
            self._state.pending_menu = None
        self._set_status("halted")
        logger.info("run halted")
        self._renderer.on_halted(END_TEXT)

    # --- command effects -----------------------------------------------

    def _show_dialogue(self, command: DialogueCommand, state: ExecutionState) -> None:
        character = state.characters.get(command.speaker)
        if character is not None:
            name, color = character.display_name, character.color
        elif command.speaker == NARRATOR:
            name, color = "", None
        else:
            name, color = command.speaker, None
        text = self._interpolate(command.text, state)
        self._set_status("suspended_dialogue")
        self._renderer.on_dialogue(name, color, text)

    def _show_menu(self, command: MenuCommand, state: ExecutionState) -> None:
        if not command.choices:
            raise BrokenMenuError("menu has no choices", command.line_number)
        state.pending_menu = command
        self._set_status("suspended_menu")
        self._renderer.on_menu([choice.text for choice in command.choices])

    def _jump(self, command: JumpCommand, state: ExecutionState) -> None:
        index = state.program.resolve(command.target)
        if index is None:
            raise BrokenJumpError(f"label '{command.target}' not found", command.line_number)
        logger.debug("jump to %r (index %d)", command.target, index)
        del state.frames[1:]
        state.frames[0].position = index

    def _enter_conditional(self, command: ConditionalCommand, state: ExecutionState, frame: ExecutionFrame) -> None:
        frame.position += 1
        try:
            taken = evaluate_condition(command.expression, state.variables)
        except ExpressionError as exc:
            self._report(EvaluationFailure(f"{command.expression!r}: {exc}", command.line_number), "error")
            taken = False
        if taken and command.actions:
            state.frames.append(ExecutionFrame(commands=command.actions))

    def _assign(self, command: AssignmentCommand, state: ExecutionState) -> None:
        try:
            execute_statement(command.expression, state.variables)
        except ExpressionError as exc:
            self._report(EvaluationFailure(f"{command.expression!r}: {exc}", command.line_number), "error")
            return
        self._renderer.on_variables_changed(dict(state.variables))

    def _change_scene(self, command: SceneCommand, state: ExecutionState) -> None:
        state.active_scene = command.image
        state.visible_actors.clear()
        asset = self._lookup_asset(command.image, "images")
        self._renderer.on_scene_changed(command.image, asset, command.transition)

    def _show_actor(self, command: ShowCommand, state: ExecutionState) -> None:
        tag = image_tag(command.image)
        previous = state.visible_actors.pop(tag, None)
        if previous is not None and previous != command.image:
            self._renderer.on_actor_hidden(previous)
        state.visible_actors[tag] = command.image
        asset = self._lookup_asset(command.image, "images")
        self._renderer.on_actor_shown(command.image, asset, command.position)

    def _hide_actor(self, command: HideCommand, state: ExecutionState) -> None:
        shown = state.visible_actors.pop(image_tag(command.image), None)
        if shown is None:
            logger.debug("hide %r: nothing with that tag is visible", command.image)
            return
        self._renderer.on_actor_hidden(shown)

    def _control_media(self, command: MediaCommand, state: ExecutionState) -> None:
        if command.kind == "play" and command.file:
            state.channels[command.channel] = command.file
            self._renderer.on_media("play", command.channel, command.file, self._lookup_asset(command.file, "audio"))
        else:
            state.channels.pop(command.channel, None)
            self._renderer.on_media("stop", command.channel, None, None)

    def _interpolate(self, text: str, state: ExecutionState) -> str:
        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in state.variables:
                return match.group(0)
            try:
                return str(state.variables[name])
            except ValueError:
                # int too large to render as text
                return match.group(0)

        return _INTERPOLATION_RE.sub(substitute, text)

    def _lookup_asset(self, ref: str, asset_type: str) -> AssetHandle | None:
        try:
            return self._resolve_asset(ref, asset_type)
        except Exception as exc:  # resolver is an external collaborator
            self._notify(f"AssetLookup: could not resolve {ref!r}: {exc}", "warning")
            return None

    def _report(self, error: ScriptRuntimeError, severity: Severity) -> None:
        self._notify(error.message, severity)


def run(
    program: Program,
    asset_resolver: AssetResolver | None = None,
    renderer: RendererCallbacks | None = None,
    notifier: Notifier | None = None,
    *,
    entry_label: str = ENTRY_LABEL,
    initial_variables: Mapping[str, Value] | None = None,
    max_steps: int | None = None,
) -> ExecutionEngine:
    """Create an engine, start `program` and return the engine for resume signals."""
    engine = ExecutionEngine(
        asset_resolver,
        renderer,
        notifier,
        entry_label=entry_label,
        initial_variables=initial_variables,
        max_steps=max_steps,
    )
    engine.load_and_run(program)
    return engine
