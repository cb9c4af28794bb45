from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from tournament_maker.core.database import Base
from tournament_maker.core.identity import new_id
from tournament_maker.core.clock import utcnow

class Match(Base):
    __tablename__ = "matches"

    id = Column(String, primary_key=True, default=new_id)
    tournament_id = Column(String, ForeignKey("tournaments.id"), nullable=False, index=True)
    team1_id = Column(String, ForeignKey("teams.id"), nullable=False)
    team2_id = Column(String, ForeignKey("teams.id"), nullable=True) # NULL means a bye
    score1 = Column(Integer, nullable=False, default=0)
    score2 = Column(Integer, nullable=False, default=0)
    round = Column(Integer, nullable=False)
    # Insertion order within the tournament; keeps per-round ordering stable
    sequence = Column(Integer, nullable=False, default=0)
    is_complete = Column(Boolean, nullable=False, default=False)
    winner_id = Column(String, ForeignKey("teams.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    tournament = relationship("Tournament", back_populates="matches")
    team1 = relationship("Team", foreign_keys=[team1_id])
    team2 = relationship("Team", foreign_keys=[team2_id])
    winner = relationship("Team", foreign_keys=[winner_id])
