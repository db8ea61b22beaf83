"""Single-line classification into command records."""
from __future__ import annotations

import re
from typing import List, Tuple

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
    Modifier,
    PositionModifier,
    ReturnCommand,
    SceneCommand,
    ShowCommand,
    TransitionModifier,
    UnrecognizedCommand,
)

DEFINE_RE = re.compile(
    r'^define\s+(\w+)\s*=\s*Character\(\s*"(.+?)"(?:\s*,\s*color\s*=\s*"(.+?)")?\s*\)$'
)
CHOICE_RE = re.compile(r'^"(.+)"\s*:$')
NARRATION_RE = re.compile(r'^"(.+)"$')
SPEAKER_RE = re.compile(r'^(\w+)\s+"(.+)"$')
INLINE_MODIFIER_RE = re.compile(r"\s+(at|with)\s+")


def strip_comment(line: str) -> str:
    """Remove a trailing `#` comment, ignoring `#` characters inside double quotes."""
    in_quote = False
    for index, char in enumerate(line):
        if char == '"':
            in_quote = not in_quote
        elif char == "#" and not in_quote:
            return line[:index].rstrip()
    return line


def classify_line(line: str, line_number: int = 0) -> Command | None:
    """Return the command for one source line, or None for a comment-only line.

    Rules are tried in a fixed order and the first match wins. Anything that
    matches no rule becomes an `UnrecognizedCommand`; this function never raises.
    """
    text = strip_comment(line.strip()).strip()
    if not text:
        return None
    command = _classify(text)
    command.line_number = line_number
    return command


def _classify(line: str) -> Command:
    if line.startswith("label "):
        return LabelCommand(name=line[len("label "):].replace(":", "").strip())

    if line.startswith("define "):
        match = DEFINE_RE.match(line)
        if match:
            return DefineCharacterCommand(
                variable=match.group(1),
                display_name=match.group(2),
                color=match.group(3),
            )

    if line.startswith("scene "):
        image, modifiers = _split_inline_modifiers(line[len("scene "):])
        return SceneCommand(image=image, modifiers=modifiers)
    if line.startswith("show "):
        image, modifiers = _split_inline_modifiers(line[len("show "):])
        return ShowCommand(image=image, modifiers=modifiers)
    if line.startswith("hide "):
        return HideCommand(image=line[len("hide "):].strip())

    if line.startswith("jump "):
        return JumpCommand(target=line[len("jump "):].strip())

    if line.startswith("menu:"):
        return MenuCommand()

    if line.startswith("play "):
        parts = line.split()
        if len(parts) >= 3:
            return MediaCommand(kind="play", channel=parts[1], file=" ".join(parts[2:]).replace('"', ""))
        return UnrecognizedCommand(raw_text=line)
    if line.startswith("stop "):
        parts = line.split()
        if len(parts) >= 2:
            return MediaCommand(kind="stop", channel=parts[1])
        return UnrecognizedCommand(raw_text=line)

    if line.startswith("return"):
        return ReturnCommand()

    if line.startswith("at "):
        return PositionModifier(position=line[len("at "):].strip())
    if line.startswith("with "):
        return TransitionModifier(effect=line[len("with "):].strip())

    match = CHOICE_RE.match(line)
    if match:
        return ChoiceCommand(text=match.group(1))

    match = NARRATION_RE.match(line)
    if match:
        return DialogueCommand(speaker=NARRATOR, text=match.group(1))

    match = SPEAKER_RE.match(line)
    if match:
        return DialogueCommand(speaker=match.group(1), text=match.group(2))

    if line.startswith("$"):
        return AssignmentCommand(expression=line[1:].strip())

    if line.startswith("if "):
        condition = line[len("if "):].strip()
        if condition.endswith(":"):
            condition = condition[:-1].rstrip()
        return ConditionalCommand(expression=condition)

    return UnrecognizedCommand(raw_text=line)


def _split_inline_modifiers(rest: str) -> Tuple[str, List[Modifier]]:
    """Split `eileen happy at left with dissolve` into the image and its modifiers."""
    parts = INLINE_MODIFIER_RE.split(" " + rest.strip())
    image = parts[0].strip()
    modifiers: List[Modifier] = []
    # split() alternates keyword and value after the leading image text
    for keyword, value in zip(parts[1::2], parts[2::2]):
        value = value.strip()
        if keyword == "at":
            modifiers.append(PositionModifier(position=value))
        else:
            modifiers.append(TransitionModifier(effect=value))
    return image, modifiers
