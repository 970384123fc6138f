from typing import List, Optional

from pydantic import BaseModel, Field


class Slice(BaseModel):
    """One labeled, colored sector. ``id`` is the stable key across reorders."""

    id: str
    label: str
    color: str


class Wheel(BaseModel):
    """Public view of a stored wheel; never carries the edit key hash."""

    id: str
    title: Optional[str] = None
    slices: List[Slice] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def public(self) -> "Wheel":
        return Wheel(**self.model_dump(include=set(Wheel.model_fields)))


class WheelRecord(Wheel):
    """Privileged view used by access control only."""

    edit_key_hash: Optional[str] = None
    edit_key_created_at: Optional[str] = None
