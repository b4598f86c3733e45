# src/bgrotate/cli.py: Command-Line Interface (CLI) entry point.
# Implemented using Typer, this module provides the 'bgrotate' command. It
# takes exactly one flag: --start runs the daemon in the foreground, --next
# tells a running daemon to rotate now, --help prints usage. run_cli checks the
# shape of the invocation before Typer sees it, so every malformed invocation
# exits with code 1.

import sys
from typing import List, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape

from .config import load_config, Config
from .daemon import ensure_not_running, request_advance, start_daemon
from .util.errors import AlreadyRunningError, BgRotateError, ConfigError, NotRunningError
from .util.log import setup_logging

PROG_NAME = "bgrotate"
HELP_OPTION_NAMES = ["-h", "--help"]
KNOWN_FLAGS = {"-s", "--start", "-n", "--next", "-h", "--help"}

app = typer.Typer(name=PROG_NAME, add_completion=False)
console = Console(stderr=True, soft_wrap=True)

def get_config() -> Config:
    """Loads the config and handles errors."""
    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {e}", highlight=False)
        raise typer.Exit(e.exit_code)

@app.command(context_settings={"help_option_names": HELP_OPTION_NAMES})
def main(
    ctx: typer.Context,
    start: bool = typer.Option(False, "--start", "-s", help="Start rotating backgrounds."),
    advance: bool = typer.Option(False, "--next", "-n", help="Switch to the next background."),
):
    """Rotate desktop backgrounds across workspaces."""
    if start and advance:
        console.print("[bold red]Error:[/bold red] --start and --next are mutually exclusive.")
        typer.echo(ctx.get_help())
        raise typer.Exit(ConfigError.exit_code)

    if advance:
        try:
            typer.echo("Switching ....", nl=False)
            request_advance()
            typer.echo(" done")
        except NotRunningError as e:
            typer.echo("")
            console.print(f"[bold red]Error:[/bold red] {e}", highlight=False)
        return

    if start:
        try:
            ensure_not_running()
        except AlreadyRunningError as e:
            console.print(f"[bold red]Error:[/bold red] {e}", highlight=False)
            raise typer.Exit(e.exit_code)

        config = get_config()
        setup_logging(config.logging)
        try:
            start_daemon(config)
        except BgRotateError as e:
            console.print(f"[bold red]Error:[/bold red] {e}", highlight=False)
            raise typer.Exit(e.exit_code)
        return

    typer.echo(ctx.get_help())

def _print_usage() -> None:
    command = typer.main.get_command(app)
    with click.Context(command, info_name=PROG_NAME, help_option_names=HELP_OPTION_NAMES) as ctx:
        typer.echo(command.get_help(ctx))

def run_cli(argv: Optional[List[str]] = None):
    """Main entry point for the CLI application."""
    args = list(sys.argv[1:] if argv is None else argv)

    if not args:
        args = ["--help"]

    if len(args) > 1:
        console.print("[bold red]Error:[/bold red] Too many arguments")
        _print_usage()
        sys.exit(ConfigError.exit_code)

    if args[0] not in KNOWN_FLAGS:
        console.print(f"[bold red]Error:[/bold red] Invalid option: {escape(args[0])}", highlight=False)
        _print_usage()
        sys.exit(ConfigError.exit_code)

    app(args=args, prog_name=PROG_NAME)

if __name__ == "__main__":
    run_cli()
