"""Console renderer for the interactive player."""
from __future__ import annotations

import os
import textwrap
from typing import Mapping, Sequence

from scenescript.core.types import MediaKind, Value
from scenescript.domain.assets import AssetHandle
from scenescript.services.renderer import RendererCallbacks

DEFAULT_TEXT_WIDTH = 72


def debug_enabled() -> bool:
    """Return True only when SCENESCRIPT_DEBUG is explicitly set to '1'."""
    return os.getenv("SCENESCRIPT_DEBUG") == "1"


def wrap_text_for_box(text: str, width: int, *, indent_continuation: bool = True) -> list[str]:
    """
    Wrap text to fit within a fixed width, breaking on word boundaries.

    Args:
        text: The text to wrap
        width: Maximum width per line
        indent_continuation: If True, indent continuation lines with 2 spaces

    Returns:
        List of wrapped lines, each <= width characters
    """
    if not text or width <= 0:
        return [text] if text else [""]
    subsequent_indent = "  " if indent_continuation else ""
    wrapped = textwrap.fill(
        text,
        width=width,
        subsequent_indent=subsequent_indent,
        break_long_words=False,
        break_on_hyphens=False,
    )
    return wrapped.split("\n")


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def format_speaker(name: str, color: str | None) -> str:
    """Return the speaker prefix for a dialogue line; narration has none."""
    if not name:
        return ""
    if color and debug_enabled():
        return f"{name} [{color}]: "
    return f"{name}: "


class ConsoleRenderer(RendererCallbacks):
    """Prints engine output to stdout."""

    def __init__(self, text_width: int = DEFAULT_TEXT_WIDTH) -> None:
        self.text_width = text_width

    def on_scene_changed(self, ref: str, asset: AssetHandle | None, transition: str | None = None) -> None:
        suffix = f" ({transition})" if transition else ""
        render_heading(f"Scene: {ref}{suffix}")
        if asset is None:
            print(f"[{ref} (asset not found)]")
        elif debug_enabled():
            print(f"[{asset.path}]")

    def on_actor_shown(self, ref: str, asset: AssetHandle | None, position: str) -> None:
        missing = "" if asset is not None else " (asset not found)"
        print(f"[{ref} appears at {position}{missing}]")

    def on_actor_hidden(self, ref: str) -> None:
        print(f"[{ref} leaves]")

    def on_dialogue(self, speaker_name: str, color: str | None, text: str) -> None:
        line = format_speaker(speaker_name, color) + text
        for wrapped in wrap_text_for_box(line, self.text_width):
            print(wrapped)

    def on_menu(self, choice_texts: Sequence[str]) -> None:
        render_menu("Choices", choice_texts)

    def on_halted(self, final_text: str) -> None:
        render_heading(final_text)

    def on_cleared(self) -> None:
        print("\nPreview stopped.")

    def on_media(self, kind: MediaKind, channel: str, file_ref: str | None, asset: AssetHandle | None) -> None:
        if not debug_enabled():
            return
        if kind == "play":
            print(f"[{channel}: playing {file_ref}]")
        else:
            print(f"[{channel}: stopped]")

    def on_variables_changed(self, variables: Mapping[str, Value]) -> None:
        if debug_enabled():
            rendered = ", ".join(f"{key}={value!r}" for key, value in variables.items())
            print(f"[variables: {rendered}]")
