"""Local artifact store: the script file and blockspring.json of one block."""

import json
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console

from blockspring_core.errors import (
    ConfigMalformed,
    ConfigNotFound,
    DirectoryConflict,
    LanguageUndeclared,
    ScriptFileMissing,
    ScriptUnreadable,
)
from blockspring_core.models import Block, BlockConfig

CONFIG_FILENAME = "blockspring.json"
SCRIPT_STEM = "block"

console = Console(highlight=False, soft_wrap=True)

_SLUG_STRIP_RE = re.compile(r"[^\w-]", re.ASCII)


def read_config(directory: Path) -> BlockConfig:
    """Load blockspring.json from directory."""
    path = directory / CONFIG_FILENAME
    if not path.is_file():
        raise ConfigNotFound(f"{path} not found. Run this command inside a block directory.")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigMalformed(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigMalformed(f"{path} must contain a JSON object")
    try:
        return BlockConfig.from_dict(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise ConfigMalformed(f"{path} has invalid fields: {fields}") from e


def script_filename_for(config: BlockConfig) -> str:
    ext = config.script_extension
    if not ext:
        raise LanguageUndeclared("You must declare a language in your blockspring.json file.")
    return f"{SCRIPT_STEM}.{ext}"


def read_script(directory: Path, config: BlockConfig) -> str:
    filename = script_filename_for(config)
    path = directory / filename
    if not path.is_file():
        raise ScriptFileMissing(f"{filename} file not found")
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ScriptUnreadable(f"{filename} is not UTF-8 text: {e}") from e


def _write_text(path: Path, text: str) -> None:
    # Write atomically
    temp_path = path.parent / f".{path.name}.bstmp"
    temp_path.write_text(text, encoding="utf-8")
    temp_path.replace(path)


def dump_config(config: BlockConfig) -> str:
    return json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n"


def write_block(
    block: Block, directory: Path, verb: str = "Syncing", out: Console | None = None
) -> None:
    """
    Write the script body, then the config, into directory.

    Existing files are overwritten. The script goes first, so an interrupted
    write can leave a script without its matching config.
    """
    out = out or console
    script_path = directory / script_filename_for(block.config)
    out.print(f"{verb} script file {script_path}")
    _write_text(script_path, block.code)

    config_path = directory / CONFIG_FILENAME
    out.print(f"{verb} config file {config_path}")
    _write_text(config_path, dump_config(block.config))


def slugify(title: str | None) -> str:
    slug = (title or "").lower().strip().replace(" ", "-")
    return _SLUG_STRIP_RE.sub("", slug)


def derive_directory_name(block: Block) -> str:
    """
    Directory name for a block.

    Saved blocks get `slug[:12]-id[:8]`; unsaved ones just `slug[:20]`.
    """
    slug = slugify(block.config.title)
    if block.config.id:
        return f"{slug[:12]}-{str(block.config.id)[:8]}"
    return slug[:20]


def create_directory(block: Block, parent: Path, out: Console | None = None) -> Path:
    out = out or console
    name = derive_directory_name(block)
    target = parent / name
    # is_symlink() catches dangling links that exists() misses
    if target.exists() or target.is_symlink():
        raise DirectoryConflict(f"Block directory already exists: {target}")
    out.print(f"Creating directory {target}")
    target.mkdir()
    return target


def language_from_ambient_files(directory: Path) -> str | None:
    """Infer the language from the first block.* file (sorted by name)."""
    for path in sorted(directory.glob(f"{SCRIPT_STEM}.*")):
        if not path.is_file():
            continue
        language = path.name[len(SCRIPT_STEM) + 1 :]
        if language:
            return language
    return None


def load_json_object(path: Path) -> dict[str, Any] | None:
    """Best-effort read of a small JSON object file; None if empty or not an object."""
    try:
        text = path.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError:
        return None
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None
