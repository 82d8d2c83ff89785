"""
Global application state
Shared resources accessible across all modules
"""
import asyncio
from typing import Optional

from arena.core.battle import BattleEngine
from arena.core.opponent import LocalOpponentSource
from arena.models import ArenaParams
from arena.services.remote_opponent import RemoteOpponentSource

# Battle parameters (loaded at startup)
PARAMS: ArenaParams = ArenaParams()

# The one battle of this game instance
ENGINE: BattleEngine = BattleEngine(PARAMS)

# Running countdown/tick task, if the server drives the clock
CLOCK_TASK: Optional[asyncio.Task] = None


def build_engine(params: ArenaParams) -> BattleEngine:
    """Create an engine with the opponent source named in params"""
    if params.opponent_source == "remote":
        if not params.opponent_url:
            raise ValueError("opponent_url is required when opponent_source is 'remote'")
        source = RemoteOpponentSource(params.opponent_url)
    else:
        source = LocalOpponentSource()
    return BattleEngine(params, source=source)


def configure(params: ArenaParams) -> BattleEngine:
    """Replace parameters and start over with a fresh engine"""
    global PARAMS, ENGINE
    cancel_clock()
    PARAMS = params
    ENGINE = build_engine(params)
    return ENGINE


def cancel_clock() -> None:
    global CLOCK_TASK
    if CLOCK_TASK is not None and not CLOCK_TASK.done():
        CLOCK_TASK.cancel()
    CLOCK_TASK = None
