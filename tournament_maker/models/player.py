from sqlalchemy import Column, Integer, String, DateTime, Numeric
from tournament_maker.core.database import Base
from tournament_maker.core.identity import new_id
from tournament_maker.core.clock import utcnow

class Player(Base):
    __tablename__ = "players"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    nickname = Column(String, nullable=True)
    gender = Column(String, nullable=False) # "male" or "female"
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    winnings = Column(Numeric(12, 2), nullable=False, default=0)
    profile_picture = Column(String, nullable=True) # Path managed by ImageService
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)
