from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from tournament_maker.core.database import Base
from tournament_maker.core.identity import new_id
from tournament_maker.core.clock import utcnow

class PlayerGroup(Base):
    __tablename__ = "player_groups"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    members = relationship(
        "PlayerGroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="PlayerGroupMember.position",
    )


class PlayerGroupMember(Base):
    __tablename__ = "player_group_members"

    id = Column(String, primary_key=True, default=new_id)
    group_id = Column(String, ForeignKey("player_groups.id"), nullable=False, index=True)
    player_id = Column(String, ForeignKey("players.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    group = relationship("PlayerGroup", back_populates="members")
    player = relationship("Player")
