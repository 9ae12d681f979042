"""API request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class CreateMonsterRequest(BaseModel):
    """Monster creation request"""

    name: str = Field(..., description="Monster name, 2~50 characters")
    template_id: str = Field(..., description="One of the monster templates")


class InteractRequest(BaseModel):
    """Interaction request"""

    action: str = Field(..., description="Action: feed, sleep, play, cuddle")


class VisibilityRequest(BaseModel):
    """Gallery visibility toggle"""

    is_public: bool


# === Response Schemas ===


class MonsterInfo(BaseModel):
    """Monster with its mood already brought up to date"""

    monster_id: str
    owner_id: str
    name: str
    template_id: str
    template_name: str = ""
    color: Optional[str] = None
    is_public: bool = False
    mood: str
    last_mood_change_at: Optional[datetime] = None
    next_mood_change_at: Optional[datetime] = None
    next_change_in_ms: int = 0
    level: int
    current_level_xp: int
    xp_for_next_level: int
    total_xp: int
    progress_percent: int
    created_at: Optional[datetime] = None


class InteractionResponse(BaseModel):
    """Interaction result. Failures are normal outcomes, not HTTP errors."""

    success: bool
    action: str
    message: str
    error: Optional[str] = None
    xp_gained: int = 0
    leveled_up: bool = False
    monster: MonsterInfo


class XPResponse(BaseModel):
    """Gift / daily play result"""

    success: bool
    message: str
    error: Optional[str] = None
    xp_gained: int = 0
    leveled_up: bool = False
    remaining: Optional[int] = None
    monster: MonsterInfo


class ErrorResponse(BaseModel):
    """Error response"""

    success: bool = False
    error: str
    detail: Optional[str] = None
