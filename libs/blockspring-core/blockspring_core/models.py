"""Core data models for Blockspring blocks."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class BlockConfig(BaseModel):
    """Metadata of a block (the contents of blockspring.json).

    Unknown keys are kept as extra fields so the file round-trips.
    """

    model_config = ConfigDict(extra="allow")

    # Numeric ids and timestamps are kept as-is so the file round-trips
    id: str | int | None = Field(default=None, description="Remote id, absent until first push")
    user: str | None = None
    title: str | None = None
    language: str | None = Field(default=None, description="`name` or `name:version`")
    updated_at: str | int | float | None = None

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockConfig":
        config = cls.model_validate(data)
        config._key_order = list(data)
        return config

    def to_dict(self) -> dict[str, Any]:
        """Dump keys that were loaded or set, in their original order."""
        data = self.model_dump()
        present = set(self.model_fields_set) | set(self.model_extra or {})
        ordered = {key: data[key] for key in self._key_order if key in present}
        for key, value in data.items():
            if key in present:
                ordered.setdefault(key, value)
        return ordered

    @property
    def script_extension(self) -> str | None:
        # language could be js:0.10.x, py:3 or ruby:MRI-2.0
        if not self.language:
            return None
        return self.language.split(":")[0] or None


class Block(BaseModel):
    """A block as exchanged with the server: config plus script body."""

    config: BlockConfig = Field(default_factory=BlockConfig)
    code: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Block":
        return cls(
            config=BlockConfig.from_dict(data.get("config") or {}),
            code=data.get("code") or "",
        )

    def to_payload(self, force: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "config": self.config.to_dict()}
        if force:
            payload["force"] = True
        return payload
