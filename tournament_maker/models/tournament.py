from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from tournament_maker.core.database import Base
from tournament_maker.core.identity import new_id
from tournament_maker.core.clock import utcnow

class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    status = Column(String, nullable=False, default="setup") # "setup", "active", "completed"
    current_round = Column(Integer, nullable=False, default=1)
    buy_in = Column(Numeric(12, 2), nullable=False, default=0)
    pot = Column(Numeric(12, 2), nullable=False, default=0)
    winner_id = Column(String, ForeignKey("teams.id", use_alter=True), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    teams = relationship(
        "Team",
        back_populates="tournament",
        foreign_keys="Team.tournament_id",
        cascade="all, delete-orphan",
    )
    matches = relationship(
        "Match",
        back_populates="tournament",
        cascade="all, delete-orphan",
    )
    winner = relationship("Team", foreign_keys=[winner_id], post_update=True)
