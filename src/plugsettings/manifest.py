"""Plugin identity as handed over by the host."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PluginManifest(BaseModel):
    """Identity of the plugin that owns a settings object.

    The host reads and validates the manifest file itself; this model only
    carries the fields the settings layer needs (the id decides where the
    plugin's data file lives).
    """

    id: str = Field(..., min_length=1, pattern=r"^[A-Za-z0-9._-]+$", description="Plugin id")
    name: str = Field(..., description="Display name")
    version: str = Field(..., description="Plugin version string")
    description: Optional[str] = None

    @field_validator("id")
    @classmethod
    def reject_relative_ids(cls, v: str) -> str:
        if v in (".", ".."):
            raise ValueError("plugin id cannot be a relative path component")
        return v

    def __str__(self) -> str:
        return f"{self.id}@{self.version}"
