from fastapi import APIRouter
from .routes import agents, matches, maps

api_router = APIRouter()

api_router.include_router(agents.router, prefix="/agents", tags=["agents"])
api_router.include_router(maps.router, prefix="/maps", tags=["maps"])
api_router.include_router(matches.router, prefix="/matches", tags=["matches"])
