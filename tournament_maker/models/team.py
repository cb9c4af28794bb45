from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from tournament_maker.core.database import Base
from tournament_maker.core.identity import new_id
from tournament_maker.core.clock import utcnow

class Team(Base):
    __tablename__ = "teams"

    id = Column(String, primary_key=True, default=new_id)
    tournament_id = Column(String, ForeignKey("tournaments.id"), nullable=True, index=True)
    kind = Column(String, nullable=False, default="paired") # "paired" or "solo"
    # Plain columns: a player row may be deleted while past teams still name it
    player1_id = Column(String, nullable=False)
    player2_id = Column(String, nullable=True) # NULL for solo teams
    team_name = Column(String, nullable=False)
    sequence = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)

    tournament = relationship("Tournament", back_populates="teams", foreign_keys=[tournament_id])
    player1 = relationship("Player", primaryjoin="foreign(Team.player1_id) == Player.id", viewonly=True)
    player2 = relationship("Player", primaryjoin="foreign(Team.player2_id) == Player.id", viewonly=True)
