from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional


class PaddingUpdate(BaseModel):
    """Viewport insets as ``[top, right, bottom, left]`` fractions."""
    padding: list[float] = Field(min_length=4, max_length=4)

    @field_validator("padding")
    @classmethod
    def validate_insets(cls, v):
        if any(not 0.0 <= inset < 1.0 for inset in v):
            raise ValueError("padding insets must be in [0, 1)")
        return v


class MapStateRead(BaseModel):
    markers: list[dict[str, Any]]
    cameraTarget: Optional[dict[str, Any]] = None
    preventAutoFrame: bool
    generation: int
    padding: list[float]


class MapCommandList(BaseModel):
    commands: list[dict[str, Any]]
