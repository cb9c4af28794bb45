from decimal import Decimal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./tournament_maker.db"
    AVATAR_DIR: str = "data/profile_pictures"
    LOG_LEVEL: str = "INFO"
    CHAMPION_SHARE: Decimal = Decimal("0.70")
    CURRENCY_SYMBOL: str = "$"

    class Config:
        env_file = ".env"

settings = Settings()
