"""Esports Match Simulator - FastAPI Backend.

Hosts live match sessions: draft, round-by-round simulation, timeouts and
post-match summaries.
"""

import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .api import api_router
from .services.llm import TacticalAdvisor
from .services.match_engine import MatchEngine
from .services.match_sessions import MatchSessionManager

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def _build_session_manager():
    """SQL collaborators when the database answers, in-memory demo data otherwise."""
    engine = MatchEngine(settings)
    try:
        from .database import AsyncSessionLocal, async_engine, init_db
        from sqlalchemy import text
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        await init_db()
    except Exception as e:
        logger.warning(f"Database unavailable, running with demo data: {e}")
        return MatchSessionManager(engine=engine), False

    from .services.repository import SQLFixtureProvider, SQLPersistenceSink, SQLRosterProvider
    logger.info("Database connection successful")
    manager = MatchSessionManager(
        engine=engine,
        rosters=SQLRosterProvider(AsyncSessionLocal, engine.agent_catalog),
        fixtures=SQLFixtureProvider(AsyncSessionLocal),
        sink=SQLPersistenceSink(AsyncSessionLocal),
    )
    return manager, True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    logger.info(f"Starting {settings.app_name}...")

    app.state.match_sessions, app.state.db_available = await _build_session_manager()
    app.state.advisor = TacticalAdvisor(settings=settings)

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await app.state.advisor.close()
    if app.state.db_available:
        from .database import async_engine
        await async_engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
    Esports Match Simulator API.

    Features:
    - Agent draft with alternating bans and picks
    - Round-by-round match simulation with economy
    - Tactical timeouts with coach/analyst advice
    - Post-match statistics and MVP
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration - allow deployed frontend and localhost
cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
]

# Add deployed frontend URL from env var
frontend_url = os.environ.get("FRONTEND_URL")
if frontend_url:
    cors_origins.append(frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=f"/api/{settings.api_version}")


@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "matchsim.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=True,
    )
