"""User-level settings and credentials.

Values come from the environment first (a local .env file is honoured),
then from a per-user credentials file under BLOCKSPRING_HOME.
"""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path

import dotenv

from blockspring_core import __version__
from blockspring_core.errors import ConfigMalformed, Unauthenticated

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.blockspring.com"
DEFAULT_TIMEOUT = 60.0


def blockspring_home_dir() -> Path:
    """Return per-user Blockspring home (override with BLOCKSPRING_HOME)."""
    env = os.environ.get("BLOCKSPRING_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return Path.home() / ".blockspring"


def credentials_path() -> Path:
    return blockspring_home_dir() / "credentials.json"


def user_agent() -> str:
    return f"blockspring-cli/{__version__} (python {platform.python_version()})"


@dataclass
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def load_settings() -> Settings:
    dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))
    base_url = os.environ.get("BLOCKSPRING_URL") or DEFAULT_BASE_URL
    raw_timeout = os.environ.get("BLOCKSPRING_TIMEOUT")
    timeout = DEFAULT_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid BLOCKSPRING_TIMEOUT={raw_timeout!r}")
    return Settings(base_url=base_url.rstrip("/"), timeout=timeout)


def _read_credentials_file() -> dict[str, str]:
    path = credentials_path()
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigMalformed(f"Credentials file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigMalformed(f"Credentials file {path} must contain a JSON object")
    return data


def get_credentials() -> tuple[str | None, str]:
    """Return (user, api_key); environment variables win over the credentials file."""
    dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))
    user = os.environ.get("BLOCKSPRING_USER")
    key = os.environ.get("BLOCKSPRING_API_KEY")
    if not key:
        stored = _read_credentials_file()
        user = user or stored.get("user")
        key = stored.get("api_key")
    if not key:
        raise Unauthenticated(
            "You must be logged in: set BLOCKSPRING_API_KEY or add it to "
            f"{credentials_path()}"
        )
    return user, key
