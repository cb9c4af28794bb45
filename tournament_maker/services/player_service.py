import logging
import os
from collections import Counter
from decimal import Decimal
from typing import List, Optional

from tournament_maker.core.errors import DuplicatePlayerError, InvalidProfilePictureError, NotFoundError
from tournament_maker.models.bracket_model import Gender, PlayerGroupModel, PlayerModel
from tournament_maker.services.image_service import ImageService
from tournament_maker.services.repository import TournamentRepository

logger = logging.getLogger(__name__)


class PlayerService:
    def __init__(self, repository: TournamentRepository, image_service: Optional[ImageService] = None):
        self.repository = repository
        self.image_service = image_service or ImageService()

    def _import_picture(self, source_path: str, player_id: str) -> str:
        try:
            return self.image_service.save_profile_picture(source_path, player_id)
        except OSError as exc:
            raise InvalidProfilePictureError(source_path, str(exc)) from exc

    def create_player(
        self,
        name: str,
        gender: Gender,
        nickname: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> PlayerModel:
        """Create a player. A given picture is copied into the avatar directory first."""
        player = PlayerModel(name=name, gender=gender, nickname=nickname)
        if profile_picture:
            player.profile_picture = self._import_picture(profile_picture, player.id)
        created = self.repository.create_player(player)
        logger.info("Created player %s (%s)", created.id, created.name)
        return created

    def get_player(self, player_id: str) -> PlayerModel:
        player = self.repository.get_player(player_id)
        if player is None:
            raise NotFoundError("Player", player_id)
        return player

    def list_players(self) -> List[PlayerModel]:
        return self.repository.list_players()

    def get_players(self, player_ids: List[str]) -> List[PlayerModel]:
        """Resolve ids in the given order, failing on the first unknown one."""
        return [self.get_player(pid) for pid in player_ids]

    def update_player(
        self,
        player_id: str,
        name: Optional[str] = None,
        nickname: Optional[str] = None,
        gender: Optional[Gender] = None,
        profile_picture: Optional[str] = None,
        winnings: Optional[Decimal] = None,
    ) -> PlayerModel:
        existing = self.get_player(player_id)
        if profile_picture is not None and profile_picture != existing.profile_picture:
            profile_picture = self._import_picture(profile_picture, player_id)
        updated = self.repository.update_player(
            player_id,
            name=name,
            nickname=nickname,
            gender=gender,
            profile_picture=profile_picture,
            winnings=winnings,
        )
        if existing.profile_picture and existing.profile_picture != updated.profile_picture:
            self.image_service.delete_profile_picture(existing.profile_picture)
        return updated

    def delete_player(self, player_id: str) -> None:
        player = self.get_player(player_id)
        self.repository.delete_player(player_id)
        self.image_service.delete_profile_picture(player.profile_picture)
        logger.info("Deleted player %s", player_id)

    def get_profile_picture_path(self, player_id: str) -> str:
        player = self.get_player(player_id)
        if player.profile_picture and os.path.exists(player.profile_picture):
            return player.profile_picture
        path = self.image_service.get_profile_picture_path(player_id)
        if path is None:
            raise NotFoundError("Profile picture", player_id)
        return path

    # --- Player groups ---

    def _resolve_members(self, player_ids: List[str]) -> List[PlayerModel]:
        repeated = [pid for pid, seen in Counter(player_ids).items() if seen > 1]
        if repeated:
            raise DuplicatePlayerError(repeated)
        return self.get_players(player_ids)

    def create_player_group(self, name: str, player_ids: List[str]) -> PlayerGroupModel:
        self._resolve_members(player_ids)
        return self.repository.create_player_group(name, player_ids)

    def get_player_group(self, group_id: str) -> PlayerGroupModel:
        group = self.repository.get_player_group(group_id)
        if group is None:
            raise NotFoundError("PlayerGroup", group_id)
        return group

    def list_player_groups(self) -> List[PlayerGroupModel]:
        return self.repository.list_player_groups()

    def update_player_group(
        self, group_id: str, name: Optional[str] = None, player_ids: Optional[List[str]] = None
    ) -> PlayerGroupModel:
        self.get_player_group(group_id)
        if player_ids is not None:
            self._resolve_members(player_ids)
        return self.repository.update_player_group(group_id, name=name, player_ids=player_ids)

    def delete_player_group(self, group_id: str) -> None:
        if not self.repository.delete_player_group(group_id):
            raise NotFoundError("PlayerGroup", group_id)
