import json
import os
from pathlib import Path

import pytest

from blockspring_core import (
    Block,
    BlockConfig,
    ConfigMalformed,
    ConfigNotFound,
    DirectoryConflict,
    LanguageUndeclared,
    ScriptFileMissing,
    ScriptUnreadable,
    create_directory,
    derive_directory_name,
    language_from_ambient_files,
    read_config,
    read_script,
    script_filename_for,
    write_block,
)
from blockspring_core.store import slugify


def _block(**config) -> Block:
    return Block(config=BlockConfig.from_dict(config), code="print('hi')\n")


def test_script_filename_uses_first_language_segment():
    assert script_filename_for(BlockConfig(language="py:3.9")) == "block.py"
    assert script_filename_for(BlockConfig(language="js")) == "block.js"


@pytest.mark.parametrize("language", ["", None])
def test_script_filename_requires_language(language):
    with pytest.raises(LanguageUndeclared):
        script_filename_for(BlockConfig(language=language))


def test_directory_name_for_saved_block():
    block = _block(title="Cool Block!", id="f19512619b94678ea0b4bf383f3a9cf5")
    assert derive_directory_name(block) == "cool-block-f1951261"


def test_directory_name_for_unsaved_block():
    assert derive_directory_name(_block(title="My New Thing")) == "my-new-thing"


def test_directory_name_truncates_slug():
    long_title = "A Really Quite Long Block Title"
    assert derive_directory_name(_block(title=long_title)) == "a-really-quite-long-"
    saved = _block(title=long_title, id="0123456789abcdef")
    assert derive_directory_name(saved) == "a-really-qui-01234567"


def test_directory_name_for_numeric_id():
    block = _block(title="Cool Block", id=1234567890123)
    assert derive_directory_name(block) == "cool-block-12345678"


def test_slugify_strips_non_word_characters():
    assert slugify("  Hello, World & Friends ") == "hello-world--friends"
    assert slugify(None) == ""


def test_create_directory(tmp_path: Path):
    target = create_directory(_block(title="My New Thing"), tmp_path)
    assert target == tmp_path / "my-new-thing"
    assert target.is_dir()


@pytest.mark.parametrize("kind", ["file", "dir", "symlink"])
def test_create_directory_conflict_leaves_filesystem_untouched(tmp_path: Path, kind: str):
    existing = tmp_path / "my-new-thing"
    if kind == "file":
        existing.write_text("keep me", encoding="utf-8")
    elif kind == "dir":
        existing.mkdir()
    else:
        os.symlink(tmp_path / "nowhere", existing)
    before = sorted(p.name for p in tmp_path.iterdir())

    with pytest.raises(DirectoryConflict):
        create_directory(_block(title="My New Thing"), tmp_path)

    assert sorted(p.name for p in tmp_path.iterdir()) == before
    if kind == "file":
        assert existing.read_text(encoding="utf-8") == "keep me"


def test_write_then_read_round_trips_config(tmp_path: Path, capsys):
    raw = {
        "id": "abc123",
        "user": "testuser",
        "title": "Café Block",
        "language": "py:3",
        "updated_at": "2026-01-01T00:00:00Z",
        "custom": {"nested": [1, 2, 3]},
    }
    block = Block(config=BlockConfig.from_dict(raw), code="print('ok')\n")

    write_block(block, tmp_path, "Pulling")

    assert read_config(tmp_path).to_dict() == raw
    text = (tmp_path / "blockspring.json").read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert text == json.dumps(raw, indent=2, ensure_ascii=False) + "\n"
    assert (tmp_path / "block.py").read_text(encoding="utf-8") == "print('ok')\n"

    out = capsys.readouterr().out
    assert "Pulling script file" in out
    assert "Pulling config file" in out


def test_write_block_overwrites_existing_files(tmp_path: Path):
    (tmp_path / "block.py").write_text("old", encoding="utf-8")
    write_block(_block(title="T", language="py"), tmp_path)
    assert (tmp_path / "block.py").read_text(encoding="utf-8") == "print('hi')\n"
    assert not list(tmp_path.glob(".*.bstmp"))


def test_read_config_missing(tmp_path: Path):
    with pytest.raises(ConfigNotFound):
        read_config(tmp_path)


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_read_config_malformed(tmp_path: Path, content: str):
    (tmp_path / "blockspring.json").write_text(content, encoding="utf-8")
    with pytest.raises(ConfigMalformed):
        read_config(tmp_path)


def test_read_config_rejects_non_utf8(tmp_path: Path):
    (tmp_path / "blockspring.json").write_bytes(b'{"title": "\xff"}')
    with pytest.raises(ConfigMalformed):
        read_config(tmp_path)


@pytest.mark.parametrize("field", ["title", "user", "language"])
def test_read_config_rejects_wrongly_typed_fields(tmp_path: Path, field: str):
    cfg = {"id": "abc", "user": "u", "title": "T", "language": "py"}
    cfg[field] = 5
    (tmp_path / "blockspring.json").write_text(json.dumps(cfg), encoding="utf-8")
    with pytest.raises(ConfigMalformed):
        read_config(tmp_path)


def test_read_script(tmp_path: Path):
    cfg = BlockConfig(language="rb")
    with pytest.raises(ScriptFileMissing):
        read_script(tmp_path, cfg)
    (tmp_path / "block.rb").write_text("puts 1\n", encoding="utf-8")
    assert read_script(tmp_path, cfg) == "puts 1\n"


def test_read_script_rejects_non_utf8(tmp_path: Path):
    (tmp_path / "block.py").write_bytes(b"print('\xff')\n")
    with pytest.raises(ScriptUnreadable):
        read_script(tmp_path, BlockConfig(language="py"))


def test_language_from_ambient_files(tmp_path: Path):
    assert language_from_ambient_files(tmp_path) is None
    (tmp_path / "block.r").mkdir()  # directories never count
    assert language_from_ambient_files(tmp_path) is None
    (tmp_path / "block.py").write_text("", encoding="utf-8")
    (tmp_path / "block.js").write_text("", encoding="utf-8")
    assert language_from_ambient_files(tmp_path) == "js"
