"""Base model for Bluem SDK."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BluemModel(BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BluemModel":
        """Create model from dictionary."""
        return cls.model_validate(data)
