from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from decimal import Decimal

from tournament_maker.models.bracket_model import (
    MatchModel,
    TeamCreationMode,
    TeamModel,
    TournamentModel,
)
from tournament_maker.utils.currency import format_currency, is_valid_currency, parse_currency

class TournamentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    mode: TeamCreationMode = TeamCreationMode.MANUAL
    buy_in: Decimal = Field(default=Decimal("0"), ge=0)
    # Either an explicit roster or a saved player group
    player_ids: Optional[List[str]] = None
    group_id: Optional[str] = None

    @field_validator("buy_in", mode="before")
    @classmethod
    def parse_buy_in_text(cls, value):
        # Accepts what people type, e.g. "$25" or "1,000.50"
        if isinstance(value, str):
            if not is_valid_currency(value):
                raise ValueError(f"{value!r} is not a valid amount")
            return parse_currency(value)
        return value

    @model_validator(mode="after")
    def roster_source_given(self):
        if (self.player_ids is None) == (self.group_id is None):
            raise ValueError("Provide exactly one of player_ids or group_id")
        return self

class TournamentCreated(BaseModel):
    id: str

TournamentRead = TournamentModel

class RoundRead(BaseModel):
    round_number: int
    title: str
    is_championship: bool
    matches: List[MatchModel]

class Payouts(BaseModel):
    pot: Decimal
    champion: Decimal
    runner_up: Decimal
    pot_display: str
    champion_display: str
    runner_up_display: str

    @classmethod
    def from_split(cls, pot: Decimal, champion: Decimal, runner_up: Decimal) -> "Payouts":
        return cls(
            pot=pot,
            champion=champion,
            runner_up=runner_up,
            pot_display=format_currency(pot),
            champion_display=format_currency(champion),
            runner_up_display=format_currency(runner_up),
        )

class BracketRead(BaseModel):
    tournament_id: str
    status: str
    current_round: int
    rounds: List[RoundRead]
    is_complete: bool
    winner: Optional[TeamModel] = None
    runner_up: Optional[TeamModel] = None
    payouts: Payouts
