from sqlalchemy import Column, String, Integer, Float, ForeignKey
from sqlalchemy.dialects.postgresql import TIMESTAMP, JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Fixture(Base):
    """A scheduled match. Results are written to `matches` once it is played."""
    __tablename__ = "fixtures"

    id = Column(String(64), primary_key=True)
    home_team_id = Column(String(64), ForeignKey("teams.id"), nullable=False)
    away_team_id = Column(String(64), ForeignKey("teams.id"), nullable=False)
    scheduled_at = Column(TIMESTAMP(timezone=True))
    status = Column(String(20), default="scheduled")  # 'scheduled', 'completed'
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    home_team = relationship("Team", foreign_keys=[home_team_id])
    away_team = relationship("Team", foreign_keys=[away_team_id])


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(64), primary_key=True)
    fixture_id = Column(String(64), ForeignKey("fixtures.id"))
    home_team_id = Column(String(64), ForeignKey("teams.id"))
    away_team_id = Column(String(64), ForeignKey("teams.id"))
    map_name = Column(String(32))
    home_score = Column(Integer, nullable=False)
    away_score = Column(Integer, nullable=False)
    final_score = Column(String(10))
    winner_id = Column(String(64), ForeignKey("teams.id"))
    mvp_player_id = Column(String(64))
    duration_seconds = Column(Float)
    player_stats = Column(JSONB, default=list)
    analysis = Column(JSONB, default=list)
    completed_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    home_team = relationship("Team", foreign_keys=[home_team_id])
    away_team = relationship("Team", foreign_keys=[away_team_id])
    winner = relationship("Team", foreign_keys=[winner_id])
    rounds = relationship("Round", back_populates="match", cascade="all, delete-orphan")


class Round(Base):
    __tablename__ = "rounds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(String(64), ForeignKey("matches.id", ondelete="CASCADE"))
    round_number = Column(Integer, nullable=False)
    winner = Column(String(8))  # 'home', 'away'
    winner_side = Column(String(8))  # 'attack', 'defense'
    end_condition = Column(String(20))  # 'elimination', 'defuse', 'explode', 'time'
    duration_ms = Column(Integer)
    home_credits = Column(Integer)
    away_credits = Column(Integer)
    kills = Column(JSONB, default=list)

    # Relationships
    match = relationship("Match", back_populates="rounds")
