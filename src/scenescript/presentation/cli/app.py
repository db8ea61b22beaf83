"""Console-driven player loop for scenescript."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Literal, Sequence

from scenescript.core.notifications import LoggingNotifier
from scenescript.data import DataLoadError, get_default_manifest_path, get_default_script_path, load_program
from scenescript.data.repositories import AssetRepository
from scenescript.presentation.cli.config import load_config
from scenescript.presentation.cli.render import ConsoleRenderer
from scenescript.services import AssetResolver, ExecutionEngine

ContinueAction = Literal["continue", "restart", "quit"]

# a script that never pauses would otherwise hang the terminal
PLAYER_MAX_STEPS = 100_000

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Play a script interactively in the terminal."""
    args = _parse_args(argv)
    config = load_config(args.config)
    _configure_logging(str(config["log_level"]))

    notifier = LoggingNotifier()
    try:
        program = load_program(args.script, notifier)
    except DataLoadError as exc:
        print(f"Error: {exc}")
        return 1

    engine = ExecutionEngine(
        _build_asset_resolver(args.assets),
        ConsoleRenderer(text_width=int(config["text_width"])),
        notifier,
        entry_label=args.entry or str(config["entry_label"]),
        max_steps=PLAYER_MAX_STEPS,
    )
    print(f"=== scenescript: {Path(args.script).name} ===")
    engine.load_and_run(program)
    if engine.status == "idle":
        return 1
    _run_player_loop(engine)
    print("Goodbye!")
    return 0


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="scenescript", description="Play a scene script in the terminal.")
    parser.add_argument("script", nargs="?", type=Path, default=get_default_script_path(), help="script file to play")
    parser.add_argument("--assets", type=Path, default=None, help="asset manifest (JSON)")
    parser.add_argument("--config", type=Path, default=None, help="option file (JSON)")
    parser.add_argument("--entry", default=None, help="label to start from")
    return parser.parse_args(argv)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s %(name)-12s %(levelname)-8s %(message)s",
        level=getattr(logging, level, logging.WARNING),
    )
    logging.captureWarnings(True)


def _build_asset_resolver(manifest: Path | None) -> AssetResolver | None:
    if manifest is None:
        manifest = get_default_manifest_path()
        if not manifest.exists():
            logger.info("no asset manifest at %s; assets will show as missing", manifest)
            return None
    return AssetRepository(manifest).resolve


def _run_player_loop(engine: ExecutionEngine) -> None:
    """Feed user input to the engine until the run halts or the user quits."""
    try:
        while True:
            status = engine.status
            if status == "suspended_dialogue":
                action = _prompt_continue()
                if action == "quit":
                    engine.stop()
                    return
                if action == "restart":
                    engine.reset_to_entry()
                else:
                    engine.continue_dialogue()
            elif status == "suspended_menu":
                index = _prompt_choice(len(engine.current_choices()))
                if index is None:
                    engine.stop()
                    return
                engine.select_choice(index)
            else:
                return
    except EOFError:
        engine.stop()


def _prompt_continue() -> ContinueAction:
    raw = input("(Enter: continue, r: restart, q: quit) ").strip().lower()
    if raw == "q":
        return "quit"
    if raw == "r":
        return "restart"
    return "continue"


def _prompt_choice(choice_count: int) -> int | None:
    while True:
        raw = input("Select an option (q to quit): ").strip().lower()
        if raw == "q":
            return None
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < choice_count:
            return index
        print(f"Please enter a value between 1 and {choice_count}.")
