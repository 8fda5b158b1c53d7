"""Version-control guard for block directories.

A block directory opts in by containing a `git_config.json` marker. When
present, `push` refuses to run on top of uncommitted or diverged work unless
the operator agrees to discard it, `pull` stashes local edits around the
download, and a successful push is committed and pushed to the git remote.
"""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol, TypeVar

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from blockspring_core.errors import VcsError
from blockspring_core.models import BlockConfig
from blockspring_core.store import CONFIG_FILENAME, load_json_object

logger = logging.getLogger(__name__)

VCS_MARKER = "git_config.json"
DEFAULT_UPSTREAM = "origin/master"

T = TypeVar("T")


class Decision(Enum):
    """Operator choice when the working tree has diverged."""

    ABORT = "1"
    DISCARD_AND_CONTINUE = "2"


class VcsClient(Protocol):
    def is_tracked(self) -> bool: ...

    def pull(self) -> None: ...

    def status(self) -> str: ...

    def has_diverged(self) -> bool: ...

    def stash(self) -> bool: ...

    def pop_stash(self) -> bool: ...

    def reset_hard(self) -> None: ...

    def add(self, path: str) -> None: ...

    def commit(self, message: str) -> None: ...

    def push(self) -> None: ...


class DecisionPrompt(Protocol):
    def ask(self, summary: str) -> Decision: ...


class GitClient:
    """VcsClient backed by the `git` executable, run inside workdir."""

    def __init__(self, workdir: Path, upstream: str | None = None):
        self.workdir = workdir
        self._upstream = upstream

    # ---- helpers -------------------------------------------------------------
    def _git(self, *args: str, capture: bool = False) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        logger.debug(f"Running {' '.join(cmd)} in {self.workdir}")
        try:
            proc = subprocess.run(
                cmd, cwd=self.workdir, text=True, capture_output=capture, check=False
            )
        except OSError as e:
            raise VcsError(f"Could not run git: {e}") from e
        if proc.returncode != 0:
            logger.info(f"{' '.join(cmd)} exited with {proc.returncode}")
        return proc

    @property
    def upstream(self) -> str:
        """Ref that `reset_hard` returns to (`upstream` key of the marker file)."""
        if self._upstream is None:
            self._upstream = DEFAULT_UPSTREAM
            marker = self.workdir / VCS_MARKER
            if marker.is_file():
                data = load_json_object(marker)
                if data is None:
                    logger.warning(f"{marker} holds no JSON object; using {DEFAULT_UPSTREAM}")
                elif data.get("upstream"):
                    self._upstream = str(data["upstream"])
        return self._upstream

    def _stash_ref(self) -> str:
        proc = self._git("rev-parse", "-q", "--verify", "refs/stash", capture=True)
        return proc.stdout.strip() if proc.returncode == 0 else ""

    # ---- VcsClient -------------------------------------------------------------
    def is_tracked(self) -> bool:
        return (self.workdir / VCS_MARKER).is_file()

    def pull(self) -> None:
        self._git("pull")

    def status(self) -> str:
        proc = self._git("status", capture=True)
        return (proc.stdout or "") + (proc.stderr or "")

    def has_diverged(self) -> bool:
        """Count tracked changes and ahead/behind divergence from the upstream."""
        proc = self._git("status", "--porcelain=v1", "--branch", capture=True)
        if proc.returncode != 0:
            raise VcsError(f"git status failed: {proc.stderr.strip()}")
        count = 0
        for line in proc.stdout.splitlines():
            if line.startswith("## "):
                if "ahead" in line and "behind" in line:
                    count += 1
            elif line[:2] not in ("??", "!!"):
                count += 1
        logger.debug(f"{count} divergent entries in {self.workdir}")
        return count > 0

    def stash(self) -> bool:
        """Stash local edits; True only if a new stash entry was created."""
        before = self._stash_ref()
        self._git("stash")
        after = self._stash_ref()
        return bool(after) and after != before

    def pop_stash(self) -> bool:
        return self._git("stash", "pop").returncode == 0

    def reset_hard(self) -> None:
        self._git("reset", "--hard", self.upstream)

    def add(self, path: str) -> None:
        self._git("add", path)

    def commit(self, message: str) -> None:
        self._git("commit", "-m", message)

    def push(self) -> None:
        self._git("push")


class ConsolePrompt:
    """Ask the operator on the terminal; only "1" and "2" are accepted."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def ask(self, summary: str) -> Decision:
        if summary.strip():
            self.console.print(Panel(Text(summary.rstrip("\n")), title="git status", expand=True))
        self.console.print("Looks like some files in the repo have changed since the last commit.")
        self.console.print(
            "\nOptions:\n"
            "  1. Abort blockspring push - commit any changes you want to save prior to pushing\n"
            "  2. Blow away changes and push from last commit - this discards any post-commit\n"
            "     changes to all folders in this repo, and could be bad!"
        )
        choice = Prompt.ask(
            "What do you want to do?", choices=["1", "2"], console=self.console
        )
        return Decision(choice)


class VcsGuard:
    """Applies the version-control policy around sync operations.

    Every step is skipped when the directory carries no VCS marker.
    """

    def __init__(self, client: VcsClient, prompt: DecisionPrompt, console: Console | None = None):
        self.client = client
        self.prompt = prompt
        self.console = console or Console(highlight=False, soft_wrap=True)

    def is_tracked(self) -> bool:
        return self.client.is_tracked()

    def has_diverged(self) -> bool:
        self.client.pull()
        return self.client.has_diverged()

    def confirm_overwrite_or_abort(self) -> Decision:
        decision = self.prompt.ask(self.client.status())
        if decision is Decision.DISCARD_AND_CONTINUE:
            self.console.print("[yellow]Discarding changes[/yellow]")
            self.client.reset_hard()
        return decision

    def allow_push(self) -> bool:
        """False when the operator chose to abort a push over diverged work."""
        if not self.is_tracked():
            return True
        if not self.has_diverged():
            return True
        return self.confirm_overwrite_or_abort() is not Decision.ABORT

    def stash_and_pull_then_restore(self, action: Callable[[], T]) -> T:
        if not self.is_tracked():
            return action()

        self.console.print("Stashing any local changes")
        stashed = self.client.stash()
        try:
            return action()
        finally:
            if stashed:
                self.console.print("Reapplying stashed changes")
                if not self.client.pop_stash():
                    self.console.print(
                        "[yellow]Reapplying stashed changes hit conflicts; "
                        "resolve them with git.[/yellow]"
                    )

    def commit_and_push(self, config: BlockConfig) -> None:
        if not self.is_tracked():
            return
        self.console.print(f"Staging {CONFIG_FILENAME}")
        self.client.add(CONFIG_FILENAME)
        message = f"Block - {config.title} - Push: {config.id} at {config.updated_at or ''}"
        self.client.commit(message)
        self.console.print("Committed blockspring push timestamp")
        self.client.push()
        self.console.print("Pushed to git remote")
