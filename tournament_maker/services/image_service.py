import logging
import os
import shutil
from typing import Optional

from tournament_maker.core.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("jpg", "jpeg", "png", "webp")


class ImageService:
    def __init__(self, avatar_dir: str = settings.AVATAR_DIR):
        self.avatar_dir = avatar_dir

    def _ensure_dir(self):
        os.makedirs(self.avatar_dir, exist_ok=True)

    def save_profile_picture(self, source_path: str, player_id: str) -> str:
        """Copy an image into the avatar directory as `{player_id}.{ext}` and return its path."""
        self._ensure_dir()
        extension = os.path.splitext(source_path)[1].lstrip(".").lower() or "jpg"
        destination = os.path.join(self.avatar_dir, f"{player_id}.{extension}")
        if os.path.abspath(source_path) != os.path.abspath(destination):
            shutil.copyfile(source_path, destination)
        return destination

    def delete_profile_picture(self, file_path: Optional[str]) -> bool:
        # Best effort: a missing or locked file must never block deleting a player
        if not file_path:
            return False
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
                return True
        except OSError as exc:
            logger.warning("Failed to delete profile picture %s: %s", file_path, exc)
        return False

    def get_profile_picture_path(self, player_id: str) -> Optional[str]:
        for ext in SUPPORTED_EXTENSIONS:
            candidate = os.path.join(self.avatar_dir, f"{player_id}.{ext}")
            if os.path.exists(candidate):
                return candidate
        return None
