"""
FastAPI main application
CodeArena - judging and pacing server for player vs. AI coding battles

Routers in arena/api/:
- health.py: Health check and battle status
- judge.py: Code validation and opponent progress
- battle.py: Battle session (setup, countdown, ticks, submit, reset)
- config.py: Battle parameters and setup choices

All routers access shared state via arena.state module.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os

from arena import state
from arena.config import load_config_or_default, DEFAULT_CONFIG_PATH

from arena.api import health, judge, battle
from arena.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    config_path = os.getenv("ARENA_CONFIG", DEFAULT_CONFIG_PATH)
    try:
        state.configure(load_config_or_default(config_path))
        logger.info(
            f"✅ Server started | time limit {state.PARAMS.time_limit}s | "
            f"opponent source: {state.PARAMS.opponent_source}"
        )
    except Exception as e:
        logger.error(f"❌ Failed to load battle parameters: {e}")
        raise

    yield

    state.cancel_clock()
    logger.info("🛑 Server shutting down")


app = FastAPI(
    title="CodeArena - Judge Server",
    description="Heuristic code judging and simulated AI opponent for coding battles",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Judging (POST /api/validate-code, /api/ai-opponent)
app.include_router(judge.router)

# Battle session (GET /battle, POST /battle/...)
app.include_router(battle.router)

# Config (GET /config)
app.include_router(config_router.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
