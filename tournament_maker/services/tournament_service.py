import logging
import random
from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple, Optional, Sequence

from tournament_maker.core.config import settings
from tournament_maker.core.errors import MatchClosedError, NotFoundError, TiedScoreError
from tournament_maker.core.locks import TournamentLockRegistry
from tournament_maker.models.bracket_model import (
    MatchModel,
    PlayerModel,
    TeamCreationMode,
    TeamModel,
    TournamentModel,
    TournamentStatus,
)
from tournament_maker.services import bracket_service
from tournament_maker.services.repository import TournamentRepository
from tournament_maker.services.team_service import generate_teams

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class PrizeSplit(NamedTuple):
    champion: Decimal
    runner_up: Decimal


def calculate_prize_split(pot: Decimal, champion_share: Optional[Decimal] = None) -> PrizeSplit:
    """Champion takes `champion_share` of the pot (70% by default), the runner-up the rest."""
    share = Decimal(champion_share if champion_share is not None else settings.CHAMPION_SHARE)
    pot = Decimal(pot)
    champion = (pot * share).quantize(CENTS, rounding=ROUND_HALF_UP)
    return PrizeSplit(champion=champion, runner_up=(pot - champion).quantize(CENTS))


class TournamentService:
    def __init__(
        self,
        repository: TournamentRepository,
        locks: Optional[TournamentLockRegistry] = None,
        rng: Optional[random.Random] = None,
    ):
        self.repository = repository
        self.locks = locks or TournamentLockRegistry()
        self.rng = rng

    def _require_tournament(self, tournament_id: str) -> TournamentModel:
        tournament = self.repository.get_tournament(tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament", tournament_id)
        return tournament

    def get_tournament(self, tournament_id: str) -> TournamentModel:
        return self._require_tournament(tournament_id)

    def list_tournaments(self) -> List[TournamentModel]:
        return self.repository.list_tournaments()

    def create_tournament(
        self,
        name: str,
        players: Sequence[PlayerModel],
        mode: TeamCreationMode,
        buy_in: Decimal = Decimal("0"),
    ) -> str:
        # Teams and bracket are built in memory first so a bad roster writes nothing
        teams = generate_teams(players, mode, rng=self.rng)
        matches = bracket_service.generate_bracket(teams, rng=self.rng)
        buy_in = Decimal(buy_in)

        tournament = TournamentModel(
            name=name,
            status=TournamentStatus.SETUP,
            current_round=1,
            buy_in=buy_in,
            pot=buy_in * len(players),
        )

        with self.repository.transaction():
            self.repository.create_tournament(tournament)
            for team in teams:
                self.repository.create_team(team, tournament.id)
            for match in matches:
                self.repository.create_match(match, tournament.id)

        logger.info(
            "Created tournament %s (%s) with %d teams and %d first round matches",
            tournament.id, name, len(teams), len(matches),
        )
        return tournament.id

    def delete_tournament(self, tournament_id: str) -> None:
        with self.locks.hold(tournament_id):
            if not self.repository.delete_tournament(tournament_id):
                raise NotFoundError("Tournament", tournament_id)
        self.locks.discard(tournament_id)
        logger.info("Deleted tournament %s", tournament_id)

    def clear_all_tournaments(self) -> int:
        removed = self.repository.clear_all_tournaments()
        logger.info("Cleared %d tournaments", removed)
        return removed

    def activate_tournament(self, tournament_id: str) -> None:
        with self.locks.hold(tournament_id):
            tournament = self._require_tournament(tournament_id)
            self._activate(tournament)

    def _activate(self, tournament: TournamentModel) -> None:
        if tournament.status == TournamentStatus.SETUP:
            self.repository.update_tournament(tournament.id, status=TournamentStatus.ACTIVE)
            logger.info("Tournament activated: %s", tournament.id)

    def update_match_score(
        self,
        match_id: str,
        tournament_id: str,
        score1: int,
        score2: int,
        complete: bool = False,
    ) -> MatchModel:
        """
        Save a match score, optionally finalizing it.

        Finalizing sets the winner, updates the players' records and advances
        the bracket when the round is done. Without `complete` only the scores
        are stored.
        """
        if complete and score1 == score2:
            raise TiedScoreError(score1)

        with self.locks.hold(tournament_id):
            tournament = self._require_tournament(tournament_id)
            match = tournament.find_match(match_id)
            if match is None:
                raise NotFoundError("Match", match_id)
            if match.is_bye:
                raise MatchClosedError(match_id, "bye matches advance automatically")
            if match.is_complete:
                raise MatchClosedError(match_id, "match is already complete")

            with self.repository.transaction():
                self._activate(tournament)

                if not complete:
                    self.repository.update_match(match_id, score1=score1, score2=score2, is_complete=False)
                    return match.model_copy(update={"score1": score1, "score2": score2})

                winner = match.team1 if score1 > score2 else match.team2
                self.repository.update_match(
                    match_id, score1=score1, score2=score2, is_complete=True, winner_id=winner.id
                )
                completed = match.model_copy(
                    update={"score1": score1, "score2": score2, "is_complete": True, "winner": winner}
                )
                self._update_player_stats_for_match(completed)
                self.check_and_create_next_round(tournament_id)

        return completed

    def _update_player_stats_for_match(self, match: MatchModel) -> None:
        loser = match.loser
        if loser is None:
            return
        for player_id in match.winner.member_ids:
            player = self.repository.get_player(player_id)
            if player is None:
                logger.warning("Skipping stats for missing player %s", player_id)
                continue
            self.repository.update_player_stats(player_id, player.wins + 1, player.losses)
        for player_id in loser.member_ids:
            player = self.repository.get_player(player_id)
            if player is None:
                logger.warning("Skipping stats for missing player %s", player_id)
                continue
            self.repository.update_player_stats(player_id, player.wins, player.losses + 1)
        logger.debug("Updated player stats for %s vs %s", match.winner.team_name, loser.team_name)

    def check_and_create_next_round(self, tournament_id: str) -> None:
        """Advance to the next round, or finish the tournament, once every match in the current round is done."""
        with self.locks.hold(tournament_id):
            tournament = self._require_tournament(tournament_id)
            if tournament.status == TournamentStatus.COMPLETED:
                return

            current_round = tournament.current_round
            round_matches = tournament.matches_in_round(current_round)
            if not round_matches or not all(m.is_complete for m in round_matches):
                return

            winners = [m.winner for m in round_matches if m.winner is not None]

            with self.repository.transaction():
                if len(winners) > 1:
                    next_round = current_round + 1
                    next_matches = bracket_service.generate_round_matches(
                        winners, next_round, round_matches, rng=self.rng
                    )
                    for next_match in next_matches:
                        self.repository.create_match(next_match, tournament_id)
                    self.repository.update_tournament(tournament_id, current_round=next_round)
                    logger.info(
                        "Tournament %s advanced to round %d with %d matches",
                        tournament_id, next_round, len(next_matches),
                    )
                elif len(winners) == 1:
                    self.complete_tournament(tournament_id, winners[0])

    def complete_tournament(self, tournament_id: str, winner: TeamModel) -> None:
        with self.locks.hold(tournament_id):
            tournament = self._require_tournament(tournament_id)
            if tournament.status == TournamentStatus.COMPLETED:
                return
            self.repository.update_tournament(
                tournament_id, status=TournamentStatus.COMPLETED, winner_id=winner.id
            )
        logger.info("Tournament completed: %s Winner: %s", tournament_id, winner.team_name)

    def fix_tournament_bracket(self, tournament_id: str) -> List[MatchModel]:
        """Regenerate round 1 for a tournament that has teams but lost its matches."""
        with self.locks.hold(tournament_id):
            tournament = self._require_tournament(tournament_id)
            if len(tournament.teams) < 2 or tournament.matches:
                logger.info("Tournament %s bracket is already valid or has insufficient teams", tournament_id)
                return []

            matches = bracket_service.generate_bracket(tournament.teams, rng=self.rng)
            with self.repository.transaction():
                for match in matches:
                    self.repository.create_match(match, tournament_id)
        logger.info("Regenerated %d matches for tournament %s", len(matches), tournament_id)
        return matches

    def get_prize_split(self, tournament_id: str) -> PrizeSplit:
        return calculate_prize_split(self._require_tournament(tournament_id).pot)
