from tournament_maker.core.database import Base, engine

# Import all models here to ensure they are registered with Base
from .player import Player
from .team import Team
from .match import Match
from .tournament import Tournament
from .player_group import PlayerGroup, PlayerGroupMember


def create_all(bind=engine):
    Base.metadata.create_all(bind=bind)
