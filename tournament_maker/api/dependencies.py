from fastapi import Depends
from sqlalchemy.orm import Session

from tournament_maker.core.database import SessionLocal
from tournament_maker.core.locks import TournamentLockRegistry
from tournament_maker.services.player_service import PlayerService
from tournament_maker.services.sql_repository import SqlAlchemyRepository
from tournament_maker.services.stats_service import StatsService
from tournament_maker.services.tournament_service import TournamentService

# Shared by every request so concurrent score submissions on one tournament serialise
tournament_locks = TournamentLockRegistry()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_repository(db: Session = Depends(get_db)) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db)

def get_tournament_service(repository: SqlAlchemyRepository = Depends(get_repository)) -> TournamentService:
    return TournamentService(repository, locks=tournament_locks)

def get_player_service(repository: SqlAlchemyRepository = Depends(get_repository)) -> PlayerService:
    return PlayerService(repository)

def get_stats_service(repository: SqlAlchemyRepository = Depends(get_repository)) -> StatsService:
    return StatsService(repository)
