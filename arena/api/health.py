"""
Health check and system status endpoints
"""
from fastapi import APIRouter
from arena import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "CodeArena Judge Server",
        "version": "1.0.0",
        "battle_state": state.ENGINE.session.state
    }
