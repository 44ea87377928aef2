"""
Vibe Models — Pydantic schemas for the settings store and vote ledger.

Rows mirror the two backing tables:

- app_settings: {key, value}
- vibe_counts:  {id, name, count}
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

SETTINGS_TABLE = "app_settings"
VIBES_TABLE = "vibe_counts"

CENSOR_SETTING_KEY = "censor_bad_vibes"


class Setting(BaseModel):
    """A named boolean configuration value."""

    key: str
    value: bool = False


class VibeOption(BaseModel):
    """One voting option and its running tally."""

    id: str
    name: str
    count: int = Field(default=0, ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        # Hosted tables use integer or uuid keys
        return str(v)


class VoteResult(BaseModel):
    """Outcome of a vote that passed validation."""

    censored: bool = False
    vibe: Optional[VibeOption] = None

    def to_response(self) -> Dict[str, Any]:
        if self.censored:
            return {
                "message": "Vote received, but action modified due to policy.",
                "censored": True,
            }
        return {
            "success": True,
            "data": self.vibe.model_dump() if self.vibe else None,
        }


class ToggleResult(BaseModel):
    """Outcome of a successful censorship toggle."""

    new_state: bool

    def to_response(self) -> Dict[str, Any]:
        return {"success": True, "newState": self.new_state}


LiveState = Literal["loading", "ready"]


class LiveSnapshot(BaseModel):
    """What a live view renders: sorted tallies and the overall label."""

    state: LiveState = "loading"
    vibes: List[VibeOption] = Field(default_factory=list)
    overall: str = "Checking the vibes..."
    total_votes: int = 0


class ChangeEvent(BaseModel):
    """A change notification for one table."""

    table: str
    event: Literal["INSERT", "UPDATE", "DELETE"] = "UPDATE"
    record: Dict[str, Any] = Field(default_factory=dict)
