from .agents import AgentResponse
from .maps import MapResponse, MapDetailResponse, MapTacticalInfo, ChokePointResponse
from .matches import (
    MatchCreate, TickRequest, BanRequest, SelectRequest, TimeoutRequest,
    PlayingRequest, AdviceRequest, DraftResponse, KillEventResponse,
    RoundResponse, PlayerStatsResponse, MatchResultResponse,
    MatchStateResponse, SuggestionResponse, AdviceResponse, ExitResponse,
    PredictionResponse,
)

__all__ = [
    "AgentResponse",
    "MapResponse", "MapDetailResponse", "MapTacticalInfo", "ChokePointResponse",
    "MatchCreate", "TickRequest", "BanRequest", "SelectRequest", "TimeoutRequest",
    "PlayingRequest", "AdviceRequest", "DraftResponse", "KillEventResponse",
    "RoundResponse", "PlayerStatsResponse", "MatchResultResponse",
    "MatchStateResponse", "SuggestionResponse", "AdviceResponse", "ExitResponse",
    "PredictionResponse",
]
