from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

from scenescript.core.types import Severity, Value
from scenescript.services.renderer import RendererCallbacks


class RecordingNotifier:
    """Notifier double that keeps every diagnostic."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, Severity]] = []

    def __call__(self, message: str, severity: Severity) -> None:
        self.messages.append((message, severity))

    def matching(self, fragment: str) -> List[Tuple[str, Severity]]:
        return [entry for entry in self.messages if fragment in entry[0]]


class RecordingRenderer(RendererCallbacks):
    """Renderer double that records each callback as a tuple."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def on_scene_changed(self, ref, asset, transition=None) -> None:
        self.calls.append(("scene", ref, asset, transition))

    def on_actor_shown(self, ref, asset, position) -> None:
        self.calls.append(("show", ref, asset, position))

    def on_actor_hidden(self, ref) -> None:
        self.calls.append(("hide", ref))

    def on_dialogue(self, speaker_name, color, text) -> None:
        self.calls.append(("dialogue", speaker_name, color, text))

    def on_menu(self, choice_texts: Sequence[str]) -> None:
        self.calls.append(("menu", list(choice_texts)))

    def on_halted(self, final_text) -> None:
        self.calls.append(("halted", final_text))

    def on_cleared(self) -> None:
        self.calls.append(("cleared",))

    def on_media(self, kind, channel, file_ref, asset) -> None:
        self.calls.append(("media", kind, channel, file_ref))

    def on_variables_changed(self, variables: Mapping[str, Value]) -> None:
        self.calls.append(("variables", dict(variables)))

    def of_kind(self, kind: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == kind]

    def dialogue_texts(self) -> List[str]:
        return [call[3] for call in self.of_kind("dialogue")]
