import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tournament_maker.core.database import Base
from tournament_maker.models import create_all
from tournament_maker.models.bracket_model import Gender
from tournament_maker.services.player_service import PlayerService
from tournament_maker.services.image_service import ImageService
from tournament_maker.services.sql_repository import SqlAlchemyRepository
from tournament_maker.services.stats_service import StatsService
from tournament_maker.services.tournament_service import TournamentService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db):
    return SqlAlchemyRepository(db)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def tournament_service(repository, rng):
    return TournamentService(repository, rng=rng)


@pytest.fixture
def stats_service(repository):
    return StatsService(repository)


@pytest.fixture
def player_service(repository, tmp_path):
    return PlayerService(repository, image_service=ImageService(avatar_dir=str(tmp_path / "avatars")))


@pytest.fixture
def make_players(player_service):
    """Create players named P0..Pn-1 (or with the given genders) and return them."""
    def _make(count=None, genders=None):
        if genders is None:
            genders = [Gender.MALE] * count
        return [
            player_service.create_player(name=f"P{i}", gender=gender)
            for i, gender in enumerate(genders)
        ]
    return _make
