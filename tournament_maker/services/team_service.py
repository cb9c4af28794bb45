import logging
import random
from collections import Counter
from typing import List, Optional, Sequence

from tournament_maker.core.errors import DuplicatePlayerError, InsufficientPlayersError, UnbalancedRosterError
from tournament_maker.core.identity import shuffled
from tournament_maker.models.bracket_model import (
    Gender,
    PairedTeam,
    PlayerModel,
    SoloTeam,
    TeamCreationMode,
    TeamModel,
)

logger = logging.getLogger(__name__)


def generate_teams(
    players: Sequence[PlayerModel],
    mode: TeamCreationMode,
    rng: Optional[random.Random] = None,
) -> List[TeamModel]:
    """
    Pair a roster into two-player teams.

    Every player ends up in exactly one team, so a roster naming someone twice
    is refused. An odd player out becomes a SoloTeam that only exists to
    occupy a bracket slot.
    """
    if len(players) < 2:
        raise InsufficientPlayersError(len(players))

    repeated = [pid for pid, seen in Counter(p.id for p in players).items() if seen > 1]
    if repeated:
        raise DuplicatePlayerError(repeated)

    if TeamCreationMode(mode) == TeamCreationMode.BOY_GIRL:
        teams = _generate_boy_girl_teams(players, rng)
    else:
        teams = _generate_manual_teams(players, rng)

    logger.debug("Generated %d %s teams from %d players", len(teams), TeamCreationMode(mode).value, len(players))
    return teams


def _pair_sequentially(players: Sequence[PlayerModel]) -> List[TeamModel]:
    teams: List[TeamModel] = []
    for i in range(0, len(players) - 1, 2):
        teams.append(PairedTeam(player1=players[i], player2=players[i + 1]))
    if len(players) % 2 == 1:
        teams.append(SoloTeam(player=players[-1]))
    return teams


def _generate_manual_teams(players: Sequence[PlayerModel], rng: Optional[random.Random]) -> List[TeamModel]:
    return _pair_sequentially(shuffled(players, rng))


def _generate_boy_girl_teams(players: Sequence[PlayerModel], rng: Optional[random.Random]) -> List[TeamModel]:
    males = [p for p in players if p.gender == Gender.MALE]
    females = [p for p in players if p.gender == Gender.FEMALE]

    if not males or not females:
        raise UnbalancedRosterError(len(males), len(females))

    shuffled_males = shuffled(males, rng)
    shuffled_females = shuffled(females, rng)
    min_pairs = min(len(males), len(females))

    teams: List[TeamModel] = [
        PairedTeam(player1=shuffled_males[i], player2=shuffled_females[i])
        for i in range(min_pairs)
    ]

    # Only one side can have leftovers; they are paired among themselves
    remaining = shuffled_males[min_pairs:] + shuffled_females[min_pairs:]
    teams.extend(_pair_sequentially(remaining))
    return teams
