import functools
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tournament_maker.core.clock import utcnow
from tournament_maker.core.errors import PersistenceError
from tournament_maker.models import match as match_model
from tournament_maker.models import player as player_model
from tournament_maker.models import player_group as player_group_model
from tournament_maker.models import team as team_model
from tournament_maker.models import tournament as tournament_model
from tournament_maker.models.bracket_model import (
    Gender,
    MatchModel,
    PairedTeam,
    PlayerGroupModel,
    PlayerModel,
    SoloTeam,
    TeamModel,
    TournamentModel,
    TournamentStatus,
)
from tournament_maker.services.repository import TournamentRepository

logger = logging.getLogger(__name__)

DELETED_PLAYER_NAME = "Deleted player"


def translate_errors(method):
    """Re-raise driver failures as PersistenceError, keeping the driver error as __cause__."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("Storage failure in %s: %s", method.__name__, exc)
            raise PersistenceError(f"{method.__name__} failed: {exc}") from exc
    return wrapper


def _to_player(row: Optional[player_model.Player], player_id: str) -> PlayerModel:
    if row is None:
        # Players are deleted independently of the teams that reference them
        return PlayerModel(id=player_id, name=DELETED_PLAYER_NAME, gender=Gender.MALE)
    return PlayerModel.model_validate(row)


def _to_team(row: team_model.Team) -> TeamModel:
    if row.kind == "solo":
        return SoloTeam(
            id=row.id,
            tournament_id=row.tournament_id,
            created_at=row.created_at,
            player=_to_player(row.player1, row.player1_id),
        )
    return PairedTeam(
        id=row.id,
        tournament_id=row.tournament_id,
        created_at=row.created_at,
        player1=_to_player(row.player1, row.player1_id),
        player2=_to_player(row.player2, row.player2_id),
    )


def _to_match(row: match_model.Match, teams: Dict[str, TeamModel]) -> MatchModel:
    def team_for(team_id, relation):
        if team_id is None:
            return None
        return teams.get(team_id) or _to_team(relation)

    return MatchModel(
        id=row.id,
        tournament_id=row.tournament_id,
        team1=team_for(row.team1_id, row.team1),
        team2=team_for(row.team2_id, row.team2),
        score1=row.score1,
        score2=row.score2,
        round_number=row.round,
        is_complete=row.is_complete,
        winner=team_for(row.winner_id, row.winner),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_tournament(row: tournament_model.Tournament) -> TournamentModel:
    team_rows = sorted(row.teams, key=lambda t: t.sequence)
    teams = {t.id: _to_team(t) for t in team_rows}
    match_rows = sorted(row.matches, key=lambda m: (m.round, m.sequence))
    return TournamentModel(
        id=row.id,
        name=row.name,
        teams=list(teams.values()),
        matches=[_to_match(m, teams) for m in match_rows],
        status=TournamentStatus(row.status),
        current_round=row.current_round,
        buy_in=row.buy_in if row.buy_in is not None else Decimal("0"),
        pot=row.pot if row.pot is not None else Decimal("0"),
        winner=teams.get(row.winner_id) if row.winner_id else None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_group(row: player_group_model.PlayerGroup) -> PlayerGroupModel:
    return PlayerGroupModel(
        id=row.id,
        name=row.name,
        players=[_to_player(m.player, m.player_id) for m in row.members],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlAlchemyRepository(TournamentRepository):
    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.db.rollback()
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                self._commit()

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"commit failed: {exc}") from exc

    def _write_done(self):
        # Outside an explicit transaction every write stands on its own
        self.db.flush()
        if self._depth == 0:
            self._commit()

    # --- Players ---

    @translate_errors
    def create_player(self, player: PlayerModel) -> PlayerModel:
        db_player = player_model.Player(
            id=player.id,
            name=player.name,
            nickname=player.nickname,
            gender=Gender(player.gender).value,
            wins=player.wins,
            losses=player.losses,
            winnings=player.winnings,
            profile_picture=player.profile_picture,
            created_at=player.created_at,
            updated_at=player.updated_at,
        )
        self.db.add(db_player)
        self._write_done()
        return _to_player(db_player, player.id)

    @translate_errors
    def get_player(self, player_id: str) -> Optional[PlayerModel]:
        row = self.db.get(player_model.Player, player_id)
        return _to_player(row, player_id) if row else None

    @translate_errors
    def list_players(self) -> List[PlayerModel]:
        rows = self.db.query(player_model.Player).order_by(player_model.Player.name).all()
        return [_to_player(r, r.id) for r in rows]

    @translate_errors
    def update_player(
        self,
        player_id: str,
        name: Optional[str] = None,
        nickname: Optional[str] = None,
        gender: Optional[Gender] = None,
        profile_picture: Optional[str] = None,
        winnings: Optional[Decimal] = None,
    ) -> Optional[PlayerModel]:
        row = self.db.get(player_model.Player, player_id)
        if not row:
            return None
        if name is not None:
            row.name = name
        if nickname is not None:
            row.nickname = nickname
        if gender is not None:
            row.gender = Gender(gender).value
        if profile_picture is not None:
            row.profile_picture = profile_picture
        if winnings is not None:
            row.winnings = winnings
        row.updated_at = utcnow()
        self._write_done()
        return _to_player(row, player_id)

    @translate_errors
    def update_player_stats(self, player_id: str, wins: int, losses: int) -> None:
        row = self.db.get(player_model.Player, player_id)
        if not row:
            return
        row.wins = wins
        row.losses = losses
        row.updated_at = utcnow()
        self._write_done()

    @translate_errors
    def delete_player(self, player_id: str) -> bool:
        row = self.db.get(player_model.Player, player_id)
        if not row:
            return False
        self.db.query(player_group_model.PlayerGroupMember).filter(
            player_group_model.PlayerGroupMember.player_id == player_id
        ).delete(synchronize_session="fetch")
        self.db.delete(row)
        self._write_done()
        return True

    # --- Teams ---

    @translate_errors
    def create_team(self, team: TeamModel, tournament_id: str) -> TeamModel:
        sequence = self.db.query(func.count(team_model.Team.id)).filter(
            team_model.Team.tournament_id == tournament_id
        ).scalar() or 0
        if isinstance(team, SoloTeam):
            player1_id, player2_id = team.player.id, None
        else:
            player1_id, player2_id = team.player1.id, team.player2.id
        db_team = team_model.Team(
            id=team.id,
            tournament_id=tournament_id,
            kind=team.kind,
            player1_id=player1_id,
            player2_id=player2_id,
            team_name=team.team_name,
            sequence=sequence,
            created_at=team.created_at,
        )
        self.db.add(db_team)
        self._write_done()
        return team.model_copy(update={"tournament_id": tournament_id})

    @translate_errors
    def get_team(self, team_id: str) -> Optional[TeamModel]:
        row = self.db.get(team_model.Team, team_id)
        return _to_team(row) if row else None

    # --- Matches ---

    @translate_errors
    def create_match(self, match: MatchModel, tournament_id: str) -> MatchModel:
        last_sequence = self.db.query(func.max(match_model.Match.sequence)).filter(
            match_model.Match.tournament_id == tournament_id
        ).scalar()
        db_match = match_model.Match(
            id=match.id,
            tournament_id=tournament_id,
            team1_id=match.team1.id,
            team2_id=match.team2.id if match.team2 else None,
            score1=match.score1,
            score2=match.score2,
            round=match.round_number,
            sequence=(last_sequence or 0) + 1,
            is_complete=match.is_complete,
            winner_id=match.winner.id if match.winner else None,
            created_at=match.created_at,
            updated_at=match.updated_at,
        )
        self.db.add(db_match)
        self._write_done()
        return match.model_copy(update={"tournament_id": tournament_id})

    @translate_errors
    def get_match(self, match_id: str) -> Optional[MatchModel]:
        row = self.db.get(match_model.Match, match_id)
        return _to_match(row, {}) if row else None

    @translate_errors
    def update_match(
        self,
        match_id: str,
        score1: Optional[int] = None,
        score2: Optional[int] = None,
        is_complete: Optional[bool] = None,
        winner_id: Optional[str] = None,
    ) -> None:
        row = self.db.get(match_model.Match, match_id)
        if not row:
            return
        if score1 is not None:
            row.score1 = score1
        if score2 is not None:
            row.score2 = score2
        if is_complete is not None:
            row.is_complete = is_complete
        if winner_id is not None:
            row.winner_id = winner_id
        row.updated_at = utcnow()
        self._write_done()

    # --- Tournaments ---

    @translate_errors
    def create_tournament(self, tournament: TournamentModel) -> TournamentModel:
        db_tournament = tournament_model.Tournament(
            id=tournament.id,
            name=tournament.name,
            status=TournamentStatus(tournament.status).value,
            current_round=tournament.current_round,
            buy_in=tournament.buy_in,
            pot=tournament.pot,
            created_at=tournament.created_at,
            updated_at=tournament.updated_at,
        )
        self.db.add(db_tournament)
        self._write_done()
        return tournament

    @translate_errors
    def get_tournament(self, tournament_id: str) -> Optional[TournamentModel]:
        row = self.db.get(tournament_model.Tournament, tournament_id)
        if row is None:
            return None
        # Rows may have been loaded earlier in this session before later writes
        self.db.refresh(row)
        return _to_tournament(row)

    @translate_errors
    def list_tournaments(self) -> List[TournamentModel]:
        rows = self.db.query(tournament_model.Tournament).order_by(
            tournament_model.Tournament.created_at.desc()
        ).all()
        return [_to_tournament(r) for r in rows]

    @translate_errors
    def update_tournament(
        self,
        tournament_id: str,
        name: Optional[str] = None,
        status: Optional[TournamentStatus] = None,
        current_round: Optional[int] = None,
        winner_id: Optional[str] = None,
    ) -> None:
        row = self.db.get(tournament_model.Tournament, tournament_id)
        if not row:
            return
        if name is not None:
            row.name = name
        if status is not None:
            row.status = TournamentStatus(status).value
        if current_round is not None:
            row.current_round = current_round
        if winner_id is not None:
            row.winner_id = winner_id
        row.updated_at = utcnow()
        self._write_done()

    @translate_errors
    def delete_tournament(self, tournament_id: str) -> bool:
        row = self.db.get(tournament_model.Tournament, tournament_id)
        if not row:
            return False
        self.db.delete(row)
        self._write_done()
        return True

    @translate_errors
    def clear_all_tournaments(self) -> int:
        rows = self.db.query(tournament_model.Tournament).all()
        for row in rows:
            self.db.delete(row)
        self._write_done()
        return len(rows)

    # --- Player groups ---

    @translate_errors
    def create_player_group(self, name: str, player_ids: List[str]) -> PlayerGroupModel:
        db_group = player_group_model.PlayerGroup(name=name, created_at=utcnow(), updated_at=utcnow())
        db_group.members = [
            player_group_model.PlayerGroupMember(player_id=pid, position=i)
            for i, pid in enumerate(player_ids)
        ]
        self.db.add(db_group)
        self._write_done()
        self.db.refresh(db_group)
        return _to_group(db_group)

    @translate_errors
    def get_player_group(self, group_id: str) -> Optional[PlayerGroupModel]:
        row = self.db.get(player_group_model.PlayerGroup, group_id)
        return _to_group(row) if row else None

    @translate_errors
    def list_player_groups(self) -> List[PlayerGroupModel]:
        rows = self.db.query(player_group_model.PlayerGroup).order_by(
            player_group_model.PlayerGroup.name
        ).all()
        return [_to_group(r) for r in rows]

    @translate_errors
    def update_player_group(
        self, group_id: str, name: Optional[str] = None, player_ids: Optional[List[str]] = None
    ) -> Optional[PlayerGroupModel]:
        row = self.db.get(player_group_model.PlayerGroup, group_id)
        if not row:
            return None
        if name is not None:
            row.name = name
        if player_ids is not None:
            row.members = [
                player_group_model.PlayerGroupMember(player_id=pid, position=i)
                for i, pid in enumerate(player_ids)
            ]
        row.updated_at = utcnow()
        self._write_done()
        self.db.refresh(row)
        return _to_group(row)

    @translate_errors
    def delete_player_group(self, group_id: str) -> bool:
        row = self.db.get(player_group_model.PlayerGroup, group_id)
        if not row:
            return False
        self.db.delete(row)
        self._write_done()
        return True
