from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from typing import List

from ...schemas.agents import AgentResponse
from ...schemas.matches import (
    MatchCreate, TickRequest, BanRequest, SelectRequest, TimeoutRequest,
    PlayingRequest, AdviceRequest, DraftResponse, RoundResponse,
    PlayerStatsResponse, MatchResultResponse, MatchStateResponse,
    SuggestionResponse, AdviceResponse, ExitResponse, PredictionResponse,
)
from ...services.draft_negotiator import InsufficientAgentPool, InvalidSelection
from ...services.llm import TacticalAdvisor
from ...services.match_sessions import MatchSession, MatchSessionManager, SessionNotFound
from ...services.match_summary import MatchResult, PlayerStats
from ...services.providers import FixtureNotFound
from ...services.round_engine import round_summary
from ...services.sides import TeamSide
from ...services.team_strength import predict_match_outcome

router = APIRouter()


def get_session_manager(request: Request) -> MatchSessionManager:
    """Session manager from app state; created on first use (demo mode)."""
    manager = getattr(request.app.state, "match_sessions", None)
    if manager is None:
        manager = MatchSessionManager()
        request.app.state.match_sessions = manager
    return manager


def get_advisor(request: Request) -> TacticalAdvisor:
    advisor = getattr(request.app.state, "advisor", None)
    if advisor is None:
        advisor = TacticalAdvisor()
        request.app.state.advisor = advisor
    return advisor


def _stats_response(stats: PlayerStats) -> PlayerStatsResponse:
    return PlayerStatsResponse(**stats.as_dict())


def _result_response(result: MatchResult) -> MatchResultResponse:
    return MatchResultResponse(
        match_id=result.match_id,
        home_team_id=result.home_team_id,
        away_team_id=result.away_team_id,
        winner=result.winner,
        home_score=result.home_score,
        away_score=result.away_score,
        rounds_played=result.rounds_played,
        mvp=_stats_response(result.mvp) if result.mvp else None,
        player_stats=[_stats_response(s) for s in result.player_stats],
        duration_seconds=round(result.duration_seconds, 2),
        duration_minutes=round(result.duration_minutes, 2),
        analysis=result.analysis,
        map_name=result.map_name,
        completed_at=result.completed_at,
    )


def _state_response(session: MatchSession) -> MatchStateResponse:
    state = session.state
    draft = None
    if state.draft is not None:
        draft = DraftResponse(
            phase=state.draft.phase.value,
            turn_index=state.draft.turn_index,
            acting_side=state.draft.acting_side.value if state.draft.acting_side else None,
            turn_timer=state.draft.turn_timer,
            banned=list(state.draft.banned),
            home_picks=list(state.draft.home_picks),
            away_picks=list(state.draft.away_picks),
        )

    return MatchStateResponse(
        session_id=session.id,
        match_id=state.match_id,
        home_team_id=state.fixture.home_team_id,
        away_team_id=state.fixture.away_team_id,
        phase=state.phase.value,
        map_name=state.map_layout.name if state.map_layout else None,
        draft=draft,
        home_agents=[AgentResponse.from_agent(a) for a in state.home_agents],
        away_agents=[AgentResponse.from_agent(a) for a in state.away_agents],
        home_score=state.home_score,
        away_score=state.away_score,
        current_round=state.current_round,
        economy=state.economy.as_dict(),
        timeouts={side.value: count for side, count in state.timeouts.items()},
        phase_timer=state.phase_timer,
        round_timer=state.round_timer,
        timeout_timer=state.timeout_timer,
        is_playing=state.is_playing,
        timeout_side=state.timeout_side.value if state.timeout_side else None,
        round_events=list(state.round_events),
        last_round=RoundResponse(**round_summary(state.history[-1])) if state.history else None,
        result=_result_response(state.result) if state.result else None,
    )


def _schedule_persistence(
    manager: MatchSessionManager, session: MatchSession, background_tasks: BackgroundTasks
):
    if manager.claim_persistence(session):
        background_tasks.add_task(manager.persist, session)


def _get_session(manager: MatchSessionManager, session_id: str) -> MatchSession:
    try:
        return manager.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Match session not found")


@router.get("/", response_model=List[MatchStateResponse])
async def list_match_sessions(manager: MatchSessionManager = Depends(get_session_manager)):
    """List live match sessions."""
    return [_state_response(s) for s in manager.list_sessions()]


@router.post("/", response_model=MatchStateResponse, status_code=201)
async def create_match(
    config: MatchCreate, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Start a match for a scheduled fixture."""
    try:
        session = await manager.create(config.fixture_id)
    except FixtureNotFound:
        raise HTTPException(status_code=404, detail=f"Fixture {config.fixture_id} not found")
    except InsufficientAgentPool as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _state_response(session)


@router.get("/{session_id}", response_model=MatchStateResponse)
async def get_match(session_id: str, manager: MatchSessionManager = Depends(get_session_manager)):
    """Current state of a match session."""
    return _state_response(_get_session(manager, session_id))


@router.post("/{session_id}/tick", response_model=MatchStateResponse)
async def tick_match(
    session_id: str,
    request: TickRequest,
    background_tasks: BackgroundTasks,
    manager: MatchSessionManager = Depends(get_session_manager),
):
    """Advance the match clock by `units`."""
    _get_session(manager, session_id)
    session = await manager.tick(session_id, request.units)
    _schedule_persistence(manager, session, background_tasks)
    return _state_response(session)


@router.post("/{session_id}/draft/ban", response_model=MatchStateResponse)
async def ban_agent(
    session_id: str, request: BanRequest, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Ban an agent for the side whose turn it is."""
    _get_session(manager, session_id)
    try:
        session = await manager.ban_agent(session_id, request.agent_id)
    except InvalidSelection as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state_response(session)


@router.post("/{session_id}/draft/select", response_model=MatchStateResponse)
async def select_agent(
    session_id: str, request: SelectRequest, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Pick an agent for a side."""
    _get_session(manager, session_id)
    try:
        session = await manager.select_agent(session_id, TeamSide(request.side), request.agent_id)
    except InvalidSelection as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state_response(session)


@router.post("/{session_id}/draft/expire", response_model=MatchStateResponse)
async def expire_draft_turn(
    session_id: str, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Auto-resolve the current draft turn."""
    _get_session(manager, session_id)
    session = await manager.expire_draft_turn(session_id)
    return _state_response(session)


@router.get("/{session_id}/draft/suggestion", response_model=SuggestionResponse)
async def draft_suggestion(
    session_id: str, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Hint for the current draft turn. Does not change the draft."""
    session = _get_session(manager, session_id)
    agent = manager.engine.suggest_agent(session.state)
    return SuggestionResponse(agent=AgentResponse.from_agent(agent) if agent else None)


@router.get("/{session_id}/prediction", response_model=PredictionResponse)
async def match_prediction(
    session_id: str, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Pre-match outcome estimate. Available once both sides have drafted."""
    session = _get_session(manager, session_id)
    state = session.state
    if not state.home_agents or not state.away_agents:
        raise HTTPException(status_code=409, detail="Draft has not completed")
    prediction = predict_match_outcome(
        state.home_roster,
        state.away_roster,
        list(state.home_agents),
        list(state.away_agents),
        state.map_layout,
    )
    return PredictionResponse(
        home_win_chance=round(prediction.home_win_chance, 4),
        confidence=round(prediction.confidence, 4),
        factors=prediction.factors,
    )


@router.post("/{session_id}/timeout", response_model=MatchStateResponse)
async def call_timeout(
    session_id: str, request: TimeoutRequest, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Call a tactical timeout. Ignored when the side has none left."""
    _get_session(manager, session_id)
    session = await manager.call_timeout(session_id, TeamSide(request.side))
    return _state_response(session)


@router.post("/{session_id}/resume", response_model=MatchStateResponse)
async def resume_match(session_id: str, manager: MatchSessionManager = Depends(get_session_manager)):
    """End the timeout early."""
    _get_session(manager, session_id)
    session = await manager.resume(session_id)
    return _state_response(session)


@router.post("/{session_id}/playing", response_model=MatchStateResponse)
async def set_playing(
    session_id: str, request: PlayingRequest, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Pause or resume playback."""
    _get_session(manager, session_id)
    session = await manager.set_playing(session_id, request.playing)
    return _state_response(session)


@router.delete("/{session_id}", response_model=ExitResponse)
async def exit_match(session_id: str, manager: MatchSessionManager = Depends(get_session_manager)):
    """Abort the match and discard the session."""
    _get_session(manager, session_id)
    state = await manager.exit(session_id)
    return ExitResponse(
        session_id=session_id,
        phase=state.phase.value,
        home_score=state.home_score,
        away_score=state.away_score,
    )


@router.get("/{session_id}/summary", response_model=MatchResultResponse)
async def get_match_summary(
    session_id: str, manager: MatchSessionManager = Depends(get_session_manager)
):
    """Post-match summary. Only available once the match has completed."""
    session = _get_session(manager, session_id)
    if session.state.result is None:
        raise HTTPException(status_code=409, detail="Match has not completed")
    return _result_response(session.state.result)


@router.post("/{session_id}/advice", response_model=AdviceResponse)
async def get_advice(
    session_id: str,
    request: AdviceRequest,
    manager: MatchSessionManager = Depends(get_session_manager),
    advisor: TacticalAdvisor = Depends(get_advisor),
):
    """Tactical advice for a side, typically during a timeout."""
    session = _get_session(manager, session_id)
    advice = await advisor.advise(
        session.state, TeamSide(request.side), role=request.role, question=request.question
    )
    return AdviceResponse(role=advice.role, text=advice.text, source=advice.source)
