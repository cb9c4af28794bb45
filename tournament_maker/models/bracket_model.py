"""
Domain contracts the bracket engine works with.

These are plain pydantic models, independent of how they are stored. The
SQL repository converts ORM rows into them, and the services never touch
ORM objects directly.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, computed_field, model_validator

from tournament_maker.core.clock import utcnow
from tournament_maker.core.identity import new_id


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class TournamentStatus(str, Enum):
    SETUP = "setup"
    ACTIVE = "active"
    COMPLETED = "completed"


class TeamCreationMode(str, Enum):
    MANUAL = "manual"
    BOY_GIRL = "boy_girl"


class PlayerModel(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=100)
    nickname: Optional[str] = None
    gender: Gender
    wins: int = 0
    losses: int = 0
    winnings: Decimal = Decimal("0")
    profile_picture: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True


class _TeamBase(BaseModel):
    id: str = Field(default_factory=new_id)
    tournament_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True

    @property
    def members(self) -> Tuple[PlayerModel, ...]:
        raise NotImplementedError

    @property
    def member_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.members)


class PairedTeam(_TeamBase):
    kind: Literal["paired"] = "paired"
    player1: PlayerModel
    player2: PlayerModel

    @computed_field
    @property
    def team_name(self) -> str:
        return f"{self.player1.name} & {self.player2.name}"

    @property
    def members(self) -> Tuple[PlayerModel, ...]:
        return (self.player1, self.player2)


class SoloTeam(_TeamBase):
    """A single player filling a bracket slot left over by an odd roster."""
    kind: Literal["solo"] = "solo"
    player: PlayerModel

    @computed_field
    @property
    def team_name(self) -> str:
        return self.player.name

    @property
    def members(self) -> Tuple[PlayerModel, ...]:
        return (self.player,)


TeamModel = Annotated[Union[PairedTeam, SoloTeam], Field(discriminator="kind")]


class MatchModel(BaseModel):
    id: str = Field(default_factory=new_id)
    tournament_id: Optional[str] = None
    team1: TeamModel
    team2: Optional[TeamModel] = None # None means team1 has a bye
    score1: int = 0
    score2: int = 0
    round_number: int = Field(ge=1)
    is_complete: bool = False
    winner: Optional[TeamModel] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True

    @property
    def is_bye(self) -> bool:
        return self.team2 is None

    @property
    def differential(self) -> int:
        return abs(self.score1 - self.score2)

    @property
    def loser(self):
        if not self.is_complete or self.winner is None or self.is_bye:
            return None
        return self.team2 if self.winner.id == self.team1.id else self.team1

    @model_validator(mode="after")
    def winner_is_a_participant(self):
        if self.winner is not None:
            allowed = {self.team1.id}
            if self.team2 is not None:
                allowed.add(self.team2.id)
            if self.winner.id not in allowed:
                raise ValueError("Winner must be one of the teams in the match.")
        return self

    @classmethod
    def bye(cls, team, round_number: int, tournament_id: Optional[str] = None) -> "MatchModel":
        return cls(
            tournament_id=tournament_id,
            team1=team,
            team2=None,
            round_number=round_number,
            is_complete=True,
            winner=team,
        )


class TournamentModel(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=100)
    teams: List[TeamModel] = Field(default_factory=list)
    matches: List[MatchModel] = Field(default_factory=list)
    status: TournamentStatus = TournamentStatus.SETUP
    current_round: int = 1
    buy_in: Decimal = Decimal("0")
    pot: Decimal = Decimal("0")
    winner: Optional[TeamModel] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True

    def find_match(self, match_id: str) -> Optional[MatchModel]:
        return next((m for m in self.matches if m.id == match_id), None)

    def matches_in_round(self, round_number: int) -> List[MatchModel]:
        return [m for m in self.matches if m.round_number == round_number]


class PlayerGroupModel(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=100)
    players: List[PlayerModel] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True
