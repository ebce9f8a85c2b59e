# ==============================================================================
# clicksignals CLI
# ==============================================================================
"""
Command-line interface for the behavioral signal engine.

Usage:
    clicksignals --help
    clicksignals config show
    clicksignals config show --json
    clicksignals replay session.jsonl
    clicksignals replay session.jsonl --sink memory --json
    clicksignals replay session.jsonl --sink kafka --store valkey
"""

import os

import typer

# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="clicksignals",
    help="Behavioral telemetry and signal detection engine CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from clicksignals.cli.config import config_show

config_app.command("show")(config_show)

from clicksignals.cli.replay import replay

app.command("replay")(replay)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
