# Core modules (no database dependencies)
from .sides import TeamSide, Side
from .agent_catalog import AgentCatalog, Agent, AgentNotFound, Role
from .map_catalog import MapCatalog, MapLayout, MapNotFound
from .team_strength import RosterMember, TeamComposition, compute_strength, compute_synergy
from .economy_engine import EconomyEngine, Economy, BuyType, EndCondition
from .draft_negotiator import DraftNegotiator, DraftState, DraftPhase, InsufficientAgentPool, InvalidSelection
from .round_engine import RoundResolutionEngine, RoundResult, KillEvent
from .match_summary import MatchResult, PlayerStats, summarize
from .match_engine import MatchEngine, MatchState, MatchPhase, Fixture
from .providers import FixtureNotFound
from .match_sessions import MatchSessionManager, MatchSession, SessionNotFound

__all__ = [
    "TeamSide",
    "Side",
    "AgentCatalog",
    "Agent",
    "AgentNotFound",
    "Role",
    "MapCatalog",
    "MapLayout",
    "MapNotFound",
    "RosterMember",
    "TeamComposition",
    "compute_strength",
    "compute_synergy",
    "EconomyEngine",
    "Economy",
    "BuyType",
    "EndCondition",
    "DraftNegotiator",
    "DraftState",
    "DraftPhase",
    "InvalidSelection",
    "InsufficientAgentPool",
    "RoundResolutionEngine",
    "RoundResult",
    "KillEvent",
    "MatchResult",
    "PlayerStats",
    "summarize",
    "MatchEngine",
    "MatchState",
    "MatchPhase",
    "Fixture",
    "FixtureNotFound",
    "MatchSessionManager",
    "MatchSession",
    "SessionNotFound",
]
