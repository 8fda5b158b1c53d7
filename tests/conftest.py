"""Pytest fixtures wired from tests.framework."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from blockspring_sync import BlockSync, BlockspringAPI, VcsGuard
from tests.framework import BASE_URL, FakeServer, FakeVcs, ScriptedPrompt, quiet_console


@pytest.fixture()
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture()
def api(server: FakeServer) -> BlockspringAPI:
    return BlockspringAPI(
        lambda: ("testuser", "secret-key"),
        base_url=BASE_URL,
        transport=httpx.MockTransport(server.handle),
    )


@pytest.fixture()
def vcs() -> FakeVcs:
    return FakeVcs(tracked=False)


@pytest.fixture()
def prompt() -> ScriptedPrompt:
    return ScriptedPrompt()


@pytest.fixture()
def engine(tmp_path: Path, api: BlockspringAPI, vcs: FakeVcs, prompt: ScriptedPrompt) -> BlockSync:
    console = quiet_console()
    return BlockSync(
        api,
        VcsGuard(vcs, prompt, console=console),
        workdir=tmp_path,
        console=console,
    )
