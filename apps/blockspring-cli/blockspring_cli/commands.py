"""Command registry: maps command names (and aliases) to handlers.

The registry is built once at startup and is read-only afterwards.
Handlers receive their own copy of the argument list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from blockspring_core.errors import BlockspringError
from blockspring_sync import BlockSync

logger = logging.getLogger(__name__)

Operation = Callable[[list[str]], None]


@dataclass(frozen=True)
class Command:
    name: str
    handler: Operation
    summary: str = ""
    aliases: tuple[str, ...] = field(default_factory=tuple)


class CommandRegistry:
    """Immutable name -> Command table with exact-match lookup."""

    def __init__(self, commands: Mapping[str, Command], console: Console | None = None):
        self._commands = MappingProxyType(dict(commands))
        self.console = console or Console(highlight=False, soft_wrap=True)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def commands(self) -> list[Command]:
        """Distinct commands in registration order (aliases folded in)."""
        seen: dict[str, Command] = {}
        for cmd in self._commands.values():
            seen.setdefault(cmd.name, cmd)
        return list(seen.values())

    def resolve(self, name: str) -> Command | None:
        return self._commands.get(name)

    def dispatch(self, name: str, args: Sequence[str] = ()) -> int:
        """
        Run the command registered under name.

        Returns 0 on success and 1 when the command is unknown or failed
        with a BlockspringError (already reported to the user).
        """
        command = self.resolve(name)
        if command is None:
            self.console.print(f"{name} is not a command.")
            self.console.print("See `blockspring help` for a list of commands.")
            return 1

        logger.debug(f"Dispatching {name!r} -> {command.name} {list(args)!r}")
        try:
            command.handler(list(args))
        except BlockspringError as e:
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")
            return 1
        return 0


class RegistryBuilder:
    """Collects command registrations, then freezes them into a CommandRegistry."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(
        self,
        name: str,
        handler: Operation,
        summary: str = "",
        aliases: Iterable[str] = (),
    ) -> Command:
        # Re-registering a name overwrites the previous entry
        command = Command(name=name, handler=handler, summary=summary, aliases=tuple(aliases))
        self._commands[name] = command
        for alias in command.aliases:
            self._commands[alias] = command
        return command

    def build(self, console: Console | None = None) -> CommandRegistry:
        return CommandRegistry(self._commands, console=console)


def _arg(args: list[str], index: int) -> str | None:
    positional = [a for a in args if not a.startswith("--")]
    return positional[index] if index < len(positional) else None


def build_registry(engine: BlockSync, console: Console | None = None) -> CommandRegistry:
    """Register the block commands (`block:*` with short aliases) and `help`."""
    builder = RegistryBuilder()

    def get(args: list[str]) -> None:
        engine.get(_arg(args, 0))

    def pull(args: list[str]) -> None:
        engine.pull()

    def push(args: list[str]) -> None:
        engine.push(force="--force" in args)

    def new(args: list[str]) -> None:
        engine.new(_arg(args, 0), _arg(args, 1))

    def open_(args: list[str]) -> None:
        engine.open()

    builder.register(
        "block:get", get, "Pull down an existing block into a new directory", aliases=["get"]
    )
    builder.register(
        "block:pull", pull, "Pull block changes from the server to this directory", aliases=["pull"]
    )
    builder.register(
        "block:push", push, "Push local changes or a new block to the server", aliases=["push"]
    )
    builder.register("block:new", new, "Generate a new block from a language template", aliases=["new"])
    builder.register("block:open", open_, "Open this block in the browser", aliases=["open"])

    def help_(args: list[str]) -> None:
        out = registry.console
        table = Table(show_header=True, header_style="bold")
        table.add_column("Command")
        table.add_column("Aliases")
        table.add_column("Description")
        for cmd in registry.commands():
            table.add_row(cmd.name, ", ".join(cmd.aliases), cmd.summary)
        out.rule("[bold cyan]Blockspring commands[/bold cyan]")
        out.print(table)

    builder.register("help", help_, "List available commands")
    registry = builder.build(console=console)
    return registry
