from typing import List

from fastapi import APIRouter, Depends, status

from tournament_maker.api.dependencies import get_player_service
from tournament_maker.models.bracket_model import PlayerGroupModel
from tournament_maker.schemas import player_schemas
from tournament_maker.services.player_service import PlayerService

router = APIRouter()

@router.post("/", response_model=PlayerGroupModel, status_code=status.HTTP_201_CREATED)
def create_player_group_endpoint(
    group_in: player_schemas.PlayerGroupCreate,
    player_service: PlayerService = Depends(get_player_service),
):
    return player_service.create_player_group(group_in.name, group_in.player_ids)

@router.get("/", response_model=List[PlayerGroupModel])
def list_player_groups_endpoint(player_service: PlayerService = Depends(get_player_service)):
    return player_service.list_player_groups()

@router.get("/{group_id}", response_model=PlayerGroupModel)
def get_player_group_endpoint(group_id: str, player_service: PlayerService = Depends(get_player_service)):
    return player_service.get_player_group(group_id)

@router.put("/{group_id}", response_model=PlayerGroupModel)
def update_player_group_endpoint(
    group_id: str,
    group_in: player_schemas.PlayerGroupUpdate,
    player_service: PlayerService = Depends(get_player_service),
):
    return player_service.update_player_group(group_id, name=group_in.name, player_ids=group_in.player_ids)

@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_player_group_endpoint(group_id: str, player_service: PlayerService = Depends(get_player_service)):
    player_service.delete_player_group(group_id)
