"""Blockspring CLI commands."""

import logging
import sys
from pathlib import Path
from typing import Sequence

import typer
from rich.console import Console

from blockspring_core import get_credentials, load_settings
from blockspring_sync import BlockSync, BlockspringAPI, ConsolePrompt, GitClient, VcsGuard

from blockspring_cli.commands import CommandRegistry, build_registry

# Initialize
app = typer.Typer(help="Blockspring - sync a block's script and config with blockspring.com")
console = Console(highlight=False, soft_wrap=True)

# Configure logging (default to WARNING, can be lowered with --debug)
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M",
)
logger = logging.getLogger(__name__)


def _launch(url: str) -> None:
    code = typer.launch(url)
    if code:
        raise OSError(f"the launcher exited with status {code}")


def build_api() -> BlockspringAPI:
    settings = load_settings()
    return BlockspringAPI(get_credentials, base_url=settings.base_url, timeout=settings.timeout)


def build_guard(workdir: Path) -> VcsGuard:
    return VcsGuard(GitClient(workdir), ConsolePrompt(console), console=console)


def build_engine(workdir: Path = Path(".")) -> BlockSync:
    return BlockSync(
        build_api(),
        build_guard(workdir),
        workdir=workdir,
        opener=_launch,
        console=console,
    )


def build_command_registry() -> CommandRegistry:
    return build_registry(build_engine(), console=console)


def _run(name: str, args: list[str]) -> None:
    code = build_command_registry().dispatch(name, args)
    if code != 0:
        raise typer.Exit(code)


@app.callback()
def _root(
    debug: bool = typer.Option(False, "--debug", help="Show debug logging (HTTP and git calls)"),
):
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("blockspring_sync").setLevel(logging.DEBUG)


@app.command("get")
def get(
    ref: str | None = typer.Argument(None, help="Block reference: USER/BLOCKID or BLOCKID"),
):
    """
    Pull down an existing block into a new directory.

    Example:
      $ blockspring get testuser/f19512619b94678ea0b4bf383f3a9cf5
    """
    _run("get", [ref] if ref else [])


@app.command("pull")
def pull():
    """Pull block changes from the server to the current directory."""
    _run("pull", [])


@app.command("push")
def push(
    force: bool = typer.Option(False, "--force", help="Overwrite the server copy even if newer"),
):
    """Push local block changes, or a new block, to the server."""
    _run("push", ["--force"] if force else [])


@app.command("new")
def new(
    language: str | None = typer.Argument(None, help="Block language: js|php|py|R|rb"),
    name: str | None = typer.Argument(None, help="Human title of the block"),
):
    """
    Generate a new block from the server's language template.

    Example:
      $ blockspring new js "My Cool Block"
    """
    _run("new", [a for a in (language, name) if a])


@app.command("open")
def open_cmd():
    """Open the current block in a web browser."""
    _run("open", [])


@app.command("help")
def help_cmd():
    """List registered commands and aliases."""
    _run("help", [])


def _typer_command_names() -> set[str]:
    return {info.name for info in app.registered_commands if info.name}


def main(argv: Sequence[str] | None = None) -> None:
    """Console entry point.

    Names typer does not know (e.g. `block:get`, or typos) go straight to the
    command registry, which runs them or prints a not-a-command hint.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if args and not args[0].startswith("-") and args[0] not in _typer_command_names():
        code = build_command_registry().dispatch(args[0], args[1:])
        raise SystemExit(code)
    app(args=args, prog_name="blockspring")


if __name__ == "__main__":
    main()
