"""Entry-point for launching the console player."""
from __future__ import annotations

from .presentation.cli.app import main as cli_main


def main() -> None:
    """Run the CLI presentation layer."""
    raise SystemExit(cli_main())


if __name__ == "__main__":
    main()
