from blockspring_core import Block, BlockConfig


def test_config_round_trip_keeps_unknown_fields_and_order():
    raw = {
        "user": "testuser",
        "parameters": {"x": {"type": "number"}},
        "id": "abc",
        "title": "Cool Block",
        "language": "py:3",
        "updated_at": "2026-01-01T00:00:00Z",
        "tags": ["a", "b"],
    }
    cfg = BlockConfig.from_dict(raw)
    assert cfg.to_dict() == raw
    assert list(cfg.to_dict()) == list(raw)


def test_config_to_dict_omits_fields_never_set():
    cfg = BlockConfig.from_dict({"language": "js"})
    assert cfg.to_dict() == {"language": "js"}

    cfg.title = "Renamed"
    assert cfg.to_dict() == {"language": "js", "title": "Renamed"}


def test_numeric_id_and_timestamp_round_trip_unchanged():
    raw = {"id": 42, "language": "rb", "updated_at": 1760870400}
    cfg = BlockConfig.from_dict(raw)
    assert cfg.id == 42
    assert cfg.to_dict() == raw


def test_script_extension():
    assert BlockConfig(language="py:3.9").script_extension == "py"
    assert BlockConfig(language="ruby:MRI-2.0").script_extension == "ruby"
    assert BlockConfig(language="").script_extension is None
    assert BlockConfig().script_extension is None


def test_block_payload_includes_force_only_when_requested():
    block = Block.from_dict({"code": "x = 1", "config": {"language": "py"}})
    assert block.to_payload() == {"code": "x = 1", "config": {"language": "py"}}
    assert block.to_payload(force=True)["force"] is True


def test_block_from_dict_tolerates_missing_parts():
    block = Block.from_dict({})
    assert block.code == ""
    assert block.config.to_dict() == {}
