"""
Single elimination bracket generation and round advancement.

Brackets are built one round at a time: generate_bracket creates round 1 and
generate_round_matches creates each later round from the winners of the
previous one. The query helpers at the bottom are pure functions over a list
of matches and never touch storage.
"""
import logging
import random
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from tournament_maker.core.errors import InsufficientTeamsError
from tournament_maker.core.identity import pick_index, shuffled
from tournament_maker.models.bracket_model import MatchModel, TeamModel

logger = logging.getLogger(__name__)

CHAMPIONSHIP_ROUND_TEXT = "Championship Round"


def _pair_into_matches(teams: Sequence[TeamModel], round_number: int) -> List[MatchModel]:
    return [
        MatchModel(team1=teams[i], team2=teams[i + 1], round_number=round_number)
        for i in range(0, len(teams) - 1, 2)
    ]


def generate_bracket(teams: Sequence[TeamModel], rng: Optional[random.Random] = None) -> List[MatchModel]:
    """Create the first round. With an odd team count one random team gets a bye."""
    if len(teams) < 2:
        raise InsufficientTeamsError(len(teams))

    teams_to_match = shuffled(teams, rng)
    matches: List[MatchModel] = []

    if len(teams_to_match) % 2 == 1:
        bye_team = teams_to_match.pop(pick_index(len(teams_to_match), rng))
        logger.debug("Round 1 bye assigned to %s", bye_team.team_name)
        matches.append(MatchModel.bye(bye_team, round_number=1))

    matches.extend(_pair_into_matches(teams_to_match, round_number=1))
    return matches


def select_bye_team(
    advancing_teams: Sequence[TeamModel],
    previous_round_matches: Optional[Sequence[MatchModel]] = None,
) -> TeamModel:
    """
    Pick the team that sits out a round.

    The winner of the previous round's most lopsided played match gets the
    bye, as long as it is still advancing; the first match encountered wins a
    tie. Without such a match the last advancing team gets it.
    """
    advancing_ids = {team.id for team in advancing_teams}
    best_differential = -1
    best_team: Optional[TeamModel] = None

    for match in previous_round_matches or []:
        if match.is_bye or match.winner is None or match.winner.id not in advancing_ids:
            continue
        if match.differential > best_differential:
            best_differential = match.differential
            best_team = match.winner

    if best_team is not None:
        logger.debug("Bye assigned to %s for score differential %d", best_team.team_name, best_differential)
        return next(team for team in advancing_teams if team.id == best_team.id)

    fallback = advancing_teams[-1]
    logger.debug("Fallback bye assigned to %s", fallback.team_name)
    return fallback


def generate_round_matches(
    advancing_teams: Sequence[TeamModel],
    round_number: int,
    previous_round_matches: Optional[Sequence[MatchModel]] = None,
    rng: Optional[random.Random] = None,
) -> List[MatchModel]:
    teams_to_match = list(advancing_teams)
    matches: List[MatchModel] = []

    if len(teams_to_match) % 2 == 1:
        bye_team = select_bye_team(teams_to_match, previous_round_matches)
        teams_to_match = [team for team in teams_to_match if team.id != bye_team.id]
        matches.append(MatchModel.bye(bye_team, round_number=round_number))

    matches.extend(_pair_into_matches(shuffled(teams_to_match, rng), round_number))
    return matches


# --- Query helpers ---

def get_bracket_structure(matches: Sequence[MatchModel]) -> Dict[int, List[MatchModel]]:
    """Group matches by round, keeping the order they were given in within each round."""
    bracket: Dict[int, List[MatchModel]] = OrderedDict()
    for match in sorted(matches, key=lambda m: m.round_number):
        bracket.setdefault(match.round_number, []).append(match)
    return bracket


def _final_round_matches(matches: Sequence[MatchModel]) -> List[MatchModel]:
    if not matches:
        return []
    final_round = max(m.round_number for m in matches)
    return [m for m in matches if m.round_number == final_round]


def is_tournament_complete(matches: Sequence[MatchModel]) -> bool:
    """A tournament without matches is never complete."""
    final_matches = _final_round_matches(matches)
    return bool(final_matches) and all(m.is_complete for m in final_matches)


def _final_match(matches: Sequence[MatchModel]) -> Optional[MatchModel]:
    if not is_tournament_complete(matches):
        return None
    final_matches = _final_round_matches(matches)
    # A completed round holding several matches is waiting for the next round
    if len(final_matches) != 1:
        return None
    return final_matches[0]


def get_tournament_winner(matches: Sequence[MatchModel]) -> Optional[TeamModel]:
    final_match = _final_match(matches)
    return final_match.winner if final_match else None


def get_tournament_runner_up(matches: Sequence[MatchModel]) -> Optional[TeamModel]:
    final_match = _final_match(matches)
    return final_match.loser if final_match else None


def is_championship_round(matches: Sequence[MatchModel], round_number: int) -> bool:
    non_bye_matches = [m for m in matches if m.round_number == round_number and not m.is_bye]
    return len(non_bye_matches) == 1


def get_round_display_text(matches: Sequence[MatchModel], round_number: int) -> str:
    if is_championship_round(matches, round_number):
        return CHAMPIONSHIP_ROUND_TEXT
    return f"Round {round_number}"
