from typing import Dict, List

from fastapi import APIRouter, Depends

from tournament_maker.api.dependencies import get_stats_service
from tournament_maker.schemas import player_schemas
from tournament_maker.services.stats_service import StatsService

router = APIRouter()

@router.post("/reset", response_model=Dict[str, int])
def reset_stats_endpoint(stats_service: StatsService = Depends(get_stats_service)):
    return {"players_reset": stats_service.reset_player_statistics()}

@router.post("/fix", response_model=Dict[str, int])
def fix_stats_endpoint(stats_service: StatsService = Depends(get_stats_service)):
    return {"matches_processed": stats_service.fix_player_statistics()}

@router.get("/leaderboard", response_model=List[player_schemas.LeaderboardRow])
def leaderboard_endpoint(stats_service: StatsService = Depends(get_stats_service)):
    return [
        player_schemas.LeaderboardRow(
            player=entry.player,
            win_rate=entry.win_rate,
            badge=entry.badge.value if entry.badge else None,
        )
        for entry in stats_service.get_leaderboard()
    ]
