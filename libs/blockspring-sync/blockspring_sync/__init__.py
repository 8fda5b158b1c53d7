"""Blockspring Sync - remote client, VCS guard and sync engine."""

__version__ = "0.3.0"

from blockspring_sync.api import BlockspringAPI  # noqa: E402
from blockspring_sync.engine import BlockSync  # noqa: E402
from blockspring_sync.vcs import (  # noqa: E402
    ConsolePrompt,
    Decision,
    GitClient,
    VcsClient,
    VcsGuard,
)

__all__ = [
    "__version__",
    "BlockspringAPI",
    "BlockSync",
    "ConsolePrompt",
    "Decision",
    "GitClient",
    "VcsClient",
    "VcsGuard",
]
