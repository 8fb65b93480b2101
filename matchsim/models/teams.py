from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Team(Base):
    __tablename__ = "teams"

    id = Column(String(64), primary_key=True)
    name = Column(String(128), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    players = relationship("Player", back_populates="team", order_by="Player.roster_slot")


class Player(Base):
    __tablename__ = "players"

    id = Column(String(64), primary_key=True)
    team_id = Column(String(64), ForeignKey("teams.id"))
    name = Column(String(64), nullable=False)
    role = Column(String(32))  # 'duelist', 'initiator', 'controller', 'sentinel'
    roster_slot = Column(Integer, default=0)  # 0 = bench

    # Skill attributes (0-100)
    aim = Column(Integer, default=75)
    game_iq = Column(Integer, default=75)
    clutch = Column(Integer, default=75)
    teamwork = Column(Integer, default=75)
    positioning = Column(Integer, default=75)
    morale = Column(Integer, default=75)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    team = relationship("Team", back_populates="players")
