"""Load script files from disk and parse them."""
from __future__ import annotations

import logging
from pathlib import Path

from scenescript.core.notifications import Notifier
from scenescript.data.json_loader import read_text
from scenescript.domain.program import Program
from scenescript.language.parser import parse

logger = logging.getLogger(__name__)


def load_script(path: Path | str) -> str:
    """Return the text of a script file."""
    return read_text(Path(path))


def load_program(path: Path | str, notifier: Notifier | None = None) -> Program:
    """Read and parse a script file into a Program."""
    script_path = Path(path)
    program = parse(load_script(script_path), notifier)
    logger.info("parsed %s: %d commands, %d labels", script_path.name, len(program.commands), len(program.labels))
    return program
