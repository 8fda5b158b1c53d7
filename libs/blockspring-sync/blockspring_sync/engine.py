"""Block sync engine: get, pull, push, new and open."""

import logging
from pathlib import Path
from typing import Callable

from rich.console import Console

from blockspring_core.errors import MissingArgument
from blockspring_core.models import Block, BlockConfig
from blockspring_core.store import (
    CONFIG_FILENAME,
    create_directory,
    language_from_ambient_files,
    read_config,
    read_script,
    script_filename_for,
    write_block,
)

from blockspring_sync.api import BlockspringAPI
from blockspring_sync.vcs import VcsGuard

logger = logging.getLogger(__name__)

Opener = Callable[[str], None]


class BlockSync:
    """Reconciles one working directory with its remote block.

    Each operation is a single linear pass; the first failed precondition
    raises a BlockspringError before any network call is made.
    """

    def __init__(
        self,
        api: BlockspringAPI,
        guard: VcsGuard,
        workdir: Path = Path("."),
        opener: Opener | None = None,
        viewer_url: str | None = None,
        console: Console | None = None,
    ):
        self.api = api
        self.guard = guard
        self.workdir = workdir
        self.opener = opener
        self.viewer_url = (viewer_url or api.base_url).rstrip("/")
        self.console = console or Console(highlight=False, soft_wrap=True)

    def _done(self) -> None:
        self.console.print("[green]Done.[/green]")

    def get(self, ref: str | None) -> Path:
        """Download a block (`user/id` or bare id) into a new directory."""
        if not ref:
            raise MissingArgument("You must specify a block id")
        block_id = ref.split("/")[-1]
        block = self.api.fetch_block(block_id)
        # Reject a block with no language before touching the filesystem
        script_filename_for(block.config)

        target = create_directory(block, self.workdir, out=self.console)
        write_block(block, target, "Syncing", out=self.console)
        self._done()
        return target

    def pull(self) -> None:
        config = read_config(self.workdir)
        if not config.id:
            raise MissingArgument(f"{CONFIG_FILENAME} has no block id; push the block first")

        def _download() -> None:
            self.console.print(f"Pulling {config.user}/{config.id}")
            block = self.api.fetch_block(str(config.id))
            write_block(block, self.workdir, "Pulling", out=self.console)

        self.guard.stash_and_pull_then_restore(_download)
        self._done()

    def _local_config(self) -> BlockConfig:
        if (self.workdir / CONFIG_FILENAME).exists():
            return read_config(self.workdir)
        language = language_from_ambient_files(self.workdir)
        logger.info(f"No {CONFIG_FILENAME}; inferred language {language!r} from script files")
        return BlockConfig(language=language)

    def push(self, force: bool = False) -> bool:
        """Upload local changes; returns False if the operator aborted."""
        if not self.guard.allow_push():
            self.console.print("[yellow]Repo has changed since last commit. Push aborted.[/yellow]")
            return False

        config = self._local_config()
        code = read_script(self.workdir, config)

        saved = self.api.create_or_update_block(Block(config=config, code=code), force=force)
        write_block(saved, self.workdir, "Syncronizing", out=self.console)

        self.guard.commit_and_push(read_config(self.workdir))
        self._done()
        return True

    def new(self, language: str | None, name: str | None) -> Path:
        if not language:
            raise MissingArgument("You must specify a language")
        if not name:
            raise MissingArgument("You must specify a name for your block")

        block = self.api.fetch_template(language)
        block.config.title = name
        script_filename_for(block.config)

        target = create_directory(block, self.workdir, out=self.console)
        write_block(block, target, "Creating", out=self.console)
        return target

    def block_url(self, config: BlockConfig) -> str:
        return f"{self.viewer_url}/{config.user}/{config.id}"

    def open(self) -> str:
        config = read_config(self.workdir)
        uri = self.block_url(config)
        if self.opener is None:
            self.console.print(uri)
            return uri
        try:
            self.opener(uri)
        except Exception as e:
            self.console.print(f"[red]Attempted to open {uri} and failed because {e}[/red]")
        return uri
