"""
Battle session endpoints (one session per server instance)
"""
from fastapi import APIRouter, HTTPException
import asyncio
import logging

from arena import state
from arena.core.battle import BATTLE, COUNTDOWN, SETUP
from arena.core.narration import format_clock
from arena.core.scheduler import BattleClock
from arena.models import BattleSession


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/battle", tags=["battle"])

PROFILE_FIELDS = ("name", "field", "language", "difficulty")


def session_out(session: BattleSession) -> dict:
    data = session.model_dump()
    data["clock"] = format_clock(session.remaining_seconds)
    return data


def _require_manual_clock() -> None:
    if state.PARAMS.auto_clock:
        raise HTTPException(status_code=409, detail="Battle clock is driven by the server")


@router.get("")
async def get_battle():
    """Current session snapshot"""
    return session_out(state.ENGINE.session)


@router.post("/profile")
async def update_profile(payload: dict):
    """
    Fill in profile fields during setup

    Request:
        {"name": "neo", "field": "AI", "language": "python", "difficulty": "hard"}
    """
    if state.ENGINE.session.state != SETUP:
        raise HTTPException(status_code=400, detail="Profile can only be changed during setup")

    fields = {}
    for key in PROFILE_FIELDS:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise HTTPException(status_code=400, detail=f"'{key}' must be a string")
        fields[key] = value.strip()

    return session_out(state.ENGINE.update_profile(**fields))


@router.post("/start")
async def start_battle():
    """Leave setup and begin the countdown"""
    session = state.ENGINE.start()
    if session.state != COUNTDOWN:
        raise HTTPException(
            status_code=400,
            detail="Name, field and language are required before entering the arena"
        )

    if state.PARAMS.auto_clock:
        state.cancel_clock()
        state.CLOCK_TASK = asyncio.create_task(BattleClock(state.ENGINE).run())
        logger.info("⏱️ Battle clock started")

    return session_out(session)


@router.post("/countdown/finish")
async def finish_countdown():
    """Manual clock: end the countdown and open the battle"""
    _require_manual_clock()
    session = state.ENGINE.finish_countdown()
    if session.state != BATTLE:
        raise HTTPException(status_code=400, detail="No countdown in progress")
    return session_out(session)


@router.post("/tick")
async def tick():
    """Manual clock: advance the battle by one tick"""
    _require_manual_clock()
    if state.ENGINE.session.state != BATTLE:
        raise HTTPException(status_code=400, detail="No battle in progress")
    # the opponent source may block on HTTP, keep it off the event loop
    return session_out(await asyncio.to_thread(state.ENGINE.tick))


@router.post("/submit")
async def submit(payload: dict):
    """
    Judge the player's code for the running battle

    Request:
        {"code": "def solution(data): ..."}
    """
    code = payload.get("code")
    if not isinstance(code, str):
        raise HTTPException(status_code=400, detail="'code' must be a string")

    # waits for any in-flight tick, which holds the engine lock
    verdict, session = await asyncio.to_thread(state.ENGINE.submit, code)
    if verdict is None:
        raise HTTPException(status_code=400, detail="No battle in progress")

    return {
        "valid": verdict.is_acceptable,
        "score": verdict.score,
        "output": verdict.transcript,
        "mistakes": verdict.mistakes,
        "optimizationSuggestions": verdict.optimization_notes,
        "session": session_out(session)
    }


@router.post("/reset")
async def reset_battle():
    """Play again: stop the clock and return to setup"""
    state.cancel_clock()
    return session_out(state.ENGINE.reset())
