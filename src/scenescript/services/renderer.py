"""Renderer callback interface used by the execution engine."""
from __future__ import annotations

from typing import Mapping, Sequence

from scenescript.core.types import MediaKind, Value
from scenescript.domain.assets import AssetHandle


class RendererCallbacks:
    """Presentation hooks invoked synchronously by the engine.

    Every hook is a no-op here; concrete renderers override the ones they
    draw. Arguments are already resolved display data and must be treated
    as read-only.
    """

    def on_scene_changed(self, ref: str, asset: AssetHandle | None, transition: str | None = None) -> None:
        pass

    def on_actor_shown(self, ref: str, asset: AssetHandle | None, position: str) -> None:
        pass

    def on_actor_hidden(self, ref: str) -> None:
        pass

    def on_dialogue(self, speaker_name: str, color: str | None, text: str) -> None:
        pass

    def on_menu(self, choice_texts: Sequence[str]) -> None:
        pass

    def on_halted(self, final_text: str) -> None:
        pass

    def on_cleared(self) -> None:
        pass

    def on_media(self, kind: MediaKind, channel: str, file_ref: str | None, asset: AssetHandle | None) -> None:
        pass

    def on_variables_changed(self, variables: Mapping[str, Value]) -> None:
        pass
