from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from .agents import AgentResponse


# Commands

class MatchCreate(BaseModel):
    fixture_id: str


class TickRequest(BaseModel):
    units: int = Field(1, ge=1, le=10000)


class BanRequest(BaseModel):
    agent_id: int


class SelectRequest(BaseModel):
    side: str = Field(..., pattern="^(home|away)$")
    agent_id: int


class TimeoutRequest(BaseModel):
    side: str = Field(..., pattern="^(home|away)$")


class PlayingRequest(BaseModel):
    playing: bool


class AdviceRequest(BaseModel):
    side: str = Field("home", pattern="^(home|away)$")
    role: str = "coach"  # 'coach', 'analyst', 'player' (agent roles speak as player)
    question: str = ""


# Responses

class DraftResponse(BaseModel):
    phase: str  # 'ban', 'pick', 'complete'
    turn_index: int
    acting_side: Optional[str] = None
    turn_timer: int
    banned: List[int] = []
    home_picks: List[int] = []
    away_picks: List[int] = []


class KillEventResponse(BaseModel):
    killer_id: str
    killer: str
    killer_side: str
    victim_id: str
    victim: str
    weapon: str
    headshot: bool
    timestamp: float


class RoundResponse(BaseModel):
    round_number: int
    winner: str
    winner_side: str
    end_condition: str
    duration: float
    economy: Dict[str, int]
    home_win_probability: float
    kills: List[KillEventResponse] = []


class PlayerStatsResponse(BaseModel):
    player_id: str
    name: str
    team: str
    kills: int
    deaths: int
    headshots: int
    clutches: int
    rounds_played: int
    rating: float
    adr: float
    kd: float


class MatchResultResponse(BaseModel):
    match_id: str
    home_team_id: str
    away_team_id: str
    winner: str  # 'home', 'away', 'tie'
    home_score: int
    away_score: int
    rounds_played: int
    mvp: Optional[PlayerStatsResponse] = None
    player_stats: List[PlayerStatsResponse] = []
    duration_seconds: float
    duration_minutes: float
    analysis: List[str] = []
    map_name: Optional[str] = None
    completed_at: Optional[datetime] = None


class MatchStateResponse(BaseModel):
    session_id: str
    match_id: str
    home_team_id: str
    away_team_id: str
    phase: str
    map_name: Optional[str] = None
    draft: Optional[DraftResponse] = None
    home_agents: List[AgentResponse] = []
    away_agents: List[AgentResponse] = []
    home_score: int
    away_score: int
    current_round: int
    economy: Dict[str, int]
    timeouts: Dict[str, int]
    phase_timer: int
    round_timer: int
    timeout_timer: int
    is_playing: bool
    timeout_side: Optional[str] = None
    round_events: List[str] = []
    last_round: Optional[RoundResponse] = None
    result: Optional[MatchResultResponse] = None


class SuggestionResponse(BaseModel):
    agent: Optional[AgentResponse] = None


class AdviceResponse(BaseModel):
    role: str
    text: str
    source: str  # 'llm' or 'canned'


class ExitResponse(BaseModel):
    session_id: str
    phase: str
    home_score: int
    away_score: int


class PredictionResponse(BaseModel):
    home_win_chance: float
    confidence: float
    factors: List[str] = []
