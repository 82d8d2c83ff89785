"""
Configuration endpoints
"""
from fastapi import APIRouter

from arena import state
from arena.core.challenges import CHALLENGES, DEFAULT_CHALLENGE, DIFFICULTIES, FIELDS, LANGUAGES


router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config():
    """Battle parameters and the choices offered during setup"""
    return {
        "params": state.PARAMS.model_dump(),
        "fields": FIELDS,
        "languages": LANGUAGES,
        "difficulties": DIFFICULTIES,
        "challenges": {
            field: CHALLENGES.get(field, DEFAULT_CHALLENGE) for field in FIELDS
        }
    }
