from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse

from tournament_maker.api.dependencies import get_player_service
from tournament_maker.schemas import player_schemas
from tournament_maker.services.player_service import PlayerService

router = APIRouter()

@router.post("/", response_model=player_schemas.PlayerRead, status_code=status.HTTP_201_CREATED)
def create_player_endpoint(
    player_in: player_schemas.PlayerCreate,
    player_service: PlayerService = Depends(get_player_service),
):
    return player_service.create_player(**player_in.model_dump())

@router.get("/", response_model=List[player_schemas.PlayerRead])
def list_players_endpoint(player_service: PlayerService = Depends(get_player_service)):
    return player_service.list_players()

@router.get("/{player_id}", response_model=player_schemas.PlayerRead)
def get_player_endpoint(player_id: str, player_service: PlayerService = Depends(get_player_service)):
    return player_service.get_player(player_id)

@router.patch("/{player_id}", response_model=player_schemas.PlayerRead)
def update_player_endpoint(
    player_id: str,
    player_in: player_schemas.PlayerUpdate,
    player_service: PlayerService = Depends(get_player_service),
):
    return player_service.update_player(player_id, **player_in.model_dump(exclude_unset=True))

@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_player_endpoint(player_id: str, player_service: PlayerService = Depends(get_player_service)):
    player_service.delete_player(player_id)

@router.get("/{player_id}/avatar", response_class=FileResponse)
def get_player_avatar_endpoint(player_id: str, player_service: PlayerService = Depends(get_player_service)):
    return FileResponse(player_service.get_profile_picture_path(player_id))
