from typing import Dict, List

from fastapi import APIRouter, Depends, status

from tournament_maker.api.dependencies import get_player_service, get_tournament_service
from tournament_maker.models.bracket_model import MatchModel
from tournament_maker.schemas import match_schemas, tournament_schemas
from tournament_maker.services import bracket_service
from tournament_maker.services.player_service import PlayerService
from tournament_maker.services.tournament_service import TournamentService

router = APIRouter()

@router.post("/", response_model=tournament_schemas.TournamentCreated, status_code=status.HTTP_201_CREATED)
def create_tournament_endpoint(
    tournament_in: tournament_schemas.TournamentCreate,
    tournament_service: TournamentService = Depends(get_tournament_service),
    player_service: PlayerService = Depends(get_player_service),
):
    if tournament_in.group_id is not None:
        players = player_service.get_player_group(tournament_in.group_id).players
    else:
        players = player_service.get_players(tournament_in.player_ids)
    tournament_id = tournament_service.create_tournament(
        tournament_in.name, players, tournament_in.mode, tournament_in.buy_in
    )
    return {"id": tournament_id}

@router.get("/", response_model=List[tournament_schemas.TournamentRead])
def list_tournaments_endpoint(tournament_service: TournamentService = Depends(get_tournament_service)):
    return tournament_service.list_tournaments()

@router.delete("/", response_model=Dict[str, int])
def clear_tournaments_endpoint(tournament_service: TournamentService = Depends(get_tournament_service)):
    return {"deleted": tournament_service.clear_all_tournaments()}

@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentRead)
def get_tournament_endpoint(
    tournament_id: str,
    tournament_service: TournamentService = Depends(get_tournament_service),
):
    return tournament_service.get_tournament(tournament_id)

@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tournament_endpoint(
    tournament_id: str,
    tournament_service: TournamentService = Depends(get_tournament_service),
):
    tournament_service.delete_tournament(tournament_id)

@router.post("/{tournament_id}/activate", response_model=tournament_schemas.TournamentRead)
def activate_tournament_endpoint(
    tournament_id: str,
    tournament_service: TournamentService = Depends(get_tournament_service),
):
    tournament_service.activate_tournament(tournament_id)
    return tournament_service.get_tournament(tournament_id)

@router.post("/{tournament_id}/fix-bracket", response_model=List[MatchModel])
def fix_tournament_bracket_endpoint(
    tournament_id: str,
    tournament_service: TournamentService = Depends(get_tournament_service),
):
    return tournament_service.fix_tournament_bracket(tournament_id)

@router.get("/{tournament_id}/bracket", response_model=tournament_schemas.BracketRead)
def get_bracket_endpoint(
    tournament_id: str,
    tournament_service: TournamentService = Depends(get_tournament_service),
):
    tournament = tournament_service.get_tournament(tournament_id)
    matches = tournament.matches
    rounds = [
        tournament_schemas.RoundRead(
            round_number=round_number,
            title=bracket_service.get_round_display_text(matches, round_number),
            is_championship=bracket_service.is_championship_round(matches, round_number),
            matches=round_matches,
        )
        for round_number, round_matches in bracket_service.get_bracket_structure(matches).items()
    ]
    split = tournament_service.get_prize_split(tournament_id)
    return tournament_schemas.BracketRead(
        tournament_id=tournament.id,
        status=tournament.status.value,
        current_round=tournament.current_round,
        rounds=rounds,
        is_complete=bracket_service.is_tournament_complete(matches),
        winner=bracket_service.get_tournament_winner(matches),
        runner_up=bracket_service.get_tournament_runner_up(matches),
        payouts=tournament_schemas.Payouts.from_split(tournament.pot, split.champion, split.runner_up),
    )

@router.post("/{tournament_id}/matches/{match_id}/score", response_model=MatchModel)
def update_match_score_endpoint(
    tournament_id: str,
    match_id: str,
    score_in: match_schemas.MatchScoreUpdate,
    tournament_service: TournamentService = Depends(get_tournament_service),
):
    return tournament_service.update_match_score(
        match_id, tournament_id, score_in.score1, score_in.score2, complete=score_in.complete
    )
