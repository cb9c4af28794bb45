"""
Persistence collaborator the bracket engine depends on.

Every method speaks in domain models (tournament_maker.models.bracket_model).
Partial update methods only touch the fields that are passed explicitly.
"""
import abc
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, List, Optional

from tournament_maker.models.bracket_model import (
    Gender,
    MatchModel,
    PlayerGroupModel,
    PlayerModel,
    TeamModel,
    TournamentModel,
    TournamentStatus,
)


class TournamentRepository(abc.ABC):

    @abc.abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group writes: commit when the block exits cleanly, roll back otherwise."""

    # Players
    @abc.abstractmethod
    def create_player(self, player: PlayerModel) -> PlayerModel: ...

    @abc.abstractmethod
    def get_player(self, player_id: str) -> Optional[PlayerModel]: ...

    @abc.abstractmethod
    def list_players(self) -> List[PlayerModel]: ...

    @abc.abstractmethod
    def update_player(
        self,
        player_id: str,
        name: Optional[str] = None,
        nickname: Optional[str] = None,
        gender: Optional[Gender] = None,
        profile_picture: Optional[str] = None,
        winnings: Optional[Decimal] = None,
    ) -> Optional[PlayerModel]: ...

    @abc.abstractmethod
    def update_player_stats(self, player_id: str, wins: int, losses: int) -> None:
        """Overwrite (not increment) a player's win/loss record."""

    @abc.abstractmethod
    def delete_player(self, player_id: str) -> bool: ...

    # Teams
    @abc.abstractmethod
    def create_team(self, team: TeamModel, tournament_id: str) -> TeamModel: ...

    @abc.abstractmethod
    def get_team(self, team_id: str) -> Optional[TeamModel]: ...

    # Matches
    @abc.abstractmethod
    def create_match(self, match: MatchModel, tournament_id: str) -> MatchModel: ...

    @abc.abstractmethod
    def get_match(self, match_id: str) -> Optional[MatchModel]: ...

    @abc.abstractmethod
    def update_match(
        self,
        match_id: str,
        score1: Optional[int] = None,
        score2: Optional[int] = None,
        is_complete: Optional[bool] = None,
        winner_id: Optional[str] = None,
    ) -> None: ...

    # Tournaments
    @abc.abstractmethod
    def create_tournament(self, tournament: TournamentModel) -> TournamentModel:
        """Store the tournament row only; teams and matches are created separately."""

    @abc.abstractmethod
    def get_tournament(self, tournament_id: str) -> Optional[TournamentModel]:
        """Load a tournament with its teams and matches."""

    @abc.abstractmethod
    def list_tournaments(self) -> List[TournamentModel]: ...

    @abc.abstractmethod
    def update_tournament(
        self,
        tournament_id: str,
        name: Optional[str] = None,
        status: Optional[TournamentStatus] = None,
        current_round: Optional[int] = None,
        winner_id: Optional[str] = None,
    ) -> None: ...

    @abc.abstractmethod
    def delete_tournament(self, tournament_id: str) -> bool: ...

    @abc.abstractmethod
    def clear_all_tournaments(self) -> int: ...

    # Player groups
    @abc.abstractmethod
    def create_player_group(self, name: str, player_ids: List[str]) -> PlayerGroupModel: ...

    @abc.abstractmethod
    def get_player_group(self, group_id: str) -> Optional[PlayerGroupModel]: ...

    @abc.abstractmethod
    def list_player_groups(self) -> List[PlayerGroupModel]: ...

    @abc.abstractmethod
    def update_player_group(
        self, group_id: str, name: Optional[str] = None, player_ids: Optional[List[str]] = None
    ) -> Optional[PlayerGroupModel]: ...

    @abc.abstractmethod
    def delete_player_group(self, group_id: str) -> bool: ...
