from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal

from tournament_maker.models.bracket_model import Gender, PlayerModel

class PlayerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    nickname: Optional[str] = None
    gender: Gender
    profile_picture: Optional[str] = None

class PlayerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    nickname: Optional[str] = None
    gender: Optional[Gender] = None
    profile_picture: Optional[str] = None
    winnings: Optional[Decimal] = Field(default=None, ge=0)

PlayerRead = PlayerModel

class LeaderboardRow(BaseModel):
    player: PlayerRead
    win_rate: float
    badge: Optional[str] = None

class PlayerGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    player_ids: List[str] = Field(default_factory=list)

class PlayerGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    player_ids: Optional[List[str]] = None
