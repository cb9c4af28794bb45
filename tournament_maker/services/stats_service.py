import logging
from collections import Counter
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Sequence

from tournament_maker.models.bracket_model import PlayerModel
from tournament_maker.services.repository import TournamentRepository

logger = logging.getLogger(__name__)


class Badge(str, Enum):
    CHAMP = "champ"
    BIGGEST_LOSER = "biggest_loser"


class LeaderboardEntry(NamedTuple):
    player: PlayerModel
    win_rate: float
    badge: Optional[Badge]


def _games_played(player: PlayerModel) -> int:
    return player.wins + player.losses


def rank_players(players: Sequence[PlayerModel]) -> List[PlayerModel]:
    """Order by win rate, then more wins, then fewer losses. Players without games go last."""
    def sort_key(player: PlayerModel):
        played = _games_played(player)
        if played == 0:
            return (1, 0.0, 0, 0, player.name)
        return (0, -(player.wins / played), -player.wins, player.losses, player.name)

    return sorted(players, key=sort_key)


def build_leaderboard(players: Sequence[PlayerModel]) -> List[LeaderboardEntry]:
    ranked = rank_players(players)
    with_games = [p for p in ranked if _games_played(p) > 0]
    best_id = with_games[0].id if len(with_games) >= 2 else None
    worst_id = with_games[-1].id if len(with_games) >= 2 else None

    entries = []
    for player in ranked:
        played = _games_played(player)
        badge = None
        if player.id == best_id:
            badge = Badge.CHAMP
        elif player.id == worst_id:
            badge = Badge.BIGGEST_LOSER
        entries.append(LeaderboardEntry(player, player.wins / played if played else 0.0, badge))
    return entries


class StatsService:
    def __init__(self, repository: TournamentRepository):
        self.repository = repository

    def reset_player_statistics(self) -> int:
        players = self.repository.list_players()
        with self.repository.transaction():
            for player in players:
                self.repository.update_player_stats(player.id, 0, 0)
        logger.info("Player statistics reset for %d players", len(players))
        return len(players)

    def fix_player_statistics(self) -> int:
        """
        Rebuild every player's record from all completed, non-bye matches.

        The tally is computed in memory first and each player is written once,
        so running this repeatedly always converges on the same totals.
        Returns the number of matches replayed.
        """
        wins: Dict[str, int] = Counter()
        losses: Dict[str, int] = Counter()
        matches_processed = 0

        for tournament in self.repository.list_tournaments():
            for match in tournament.matches:
                loser = match.loser
                if loser is None:
                    continue
                for player_id in match.winner.member_ids:
                    wins[player_id] += 1
                for player_id in loser.member_ids:
                    losses[player_id] += 1
                matches_processed += 1

        players = self.repository.list_players()
        with self.repository.transaction():
            for player in players:
                self.repository.update_player_stats(player.id, wins[player.id], losses[player.id])

        logger.info(
            "Player statistics recomputed for %d players from %d matches",
            len(players), matches_processed,
        )
        return matches_processed

    def get_leaderboard(self) -> List[LeaderboardEntry]:
        return build_leaderboard(self.repository.list_players())
