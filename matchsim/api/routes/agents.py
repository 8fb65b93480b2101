from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ...schemas.agents import AgentResponse
from ...services.agent_catalog import AgentCatalog, AgentNotFound, Role
from ...services.match_sessions import MatchSessionManager
from .matches import get_session_manager

router = APIRouter()


async def get_agent_catalog(
    manager: MatchSessionManager = Depends(get_session_manager),
) -> AgentCatalog:
    """The draftable pool, from the same roster provider the draft uses."""
    return AgentCatalog(await manager.rosters.get_available_agents())


@router.get("/", response_model=List[AgentResponse])
async def list_agents(
    role: Optional[str] = Query(None, description="Filter by role"),
    catalog: AgentCatalog = Depends(get_agent_catalog),
):
    """List all draftable agents."""
    if role:
        try:
            agents = catalog.by_role(Role(role.lower()))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown role {role}")
    else:
        agents = catalog.list_agents()
    return [AgentResponse.from_agent(a) for a in agents]


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: int, catalog: AgentCatalog = Depends(get_agent_catalog)):
    """Get a single agent."""
    try:
        return AgentResponse.from_agent(catalog.get_agent(agent_id))
    except AgentNotFound:
        raise HTTPException(status_code=404, detail="Agent not found")
