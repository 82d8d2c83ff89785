"""
Stateless judging endpoints: code validation and opponent progress
"""
from fastapi import APIRouter, HTTPException, Request
import logging
import math

from arena.core.analyzer import score_submission
from arena.core.opponent import advance_opponent, DEFAULT_DIFFICULTY


router = APIRouter(prefix="/api", tags=["judge"])
logger = logging.getLogger(__name__)


async def read_json_object(request: Request) -> dict:
    """Parse the request body, rejecting anything that is not a JSON object"""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request: body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request: body must be a JSON object")
    return body


@router.post("/validate-code")
async def validate_code(request: Request):
    """
    Heuristically judge a code submission (the code is never executed)

    Request:
        {
            "code": "def solution(data): ...",
            "language": "python",
            "challenge": "Sort the array ..."
        }

    Response:
        {
            "valid": true,
            "score": 80,
            "output": "> Compiling python...",
            "mistakes": [...],
            "optimizationSuggestions": [...]
        }
    """
    body = await read_json_object(request)

    for key in ("code", "language", "challenge"):
        if not isinstance(body.get(key), str):
            raise HTTPException(status_code=400, detail=f"Invalid request: '{key}' must be a string")

    try:
        verdict = score_submission(body["code"], body["language"], body["challenge"])
    except Exception as e:
        logger.error(
            f"❌ ERROR in /api/validate-code\n"
            f"Request Body: {body}\n"
            f"Error: {str(e)}\n"
            f"Error Type: {type(e).__name__}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    logger.info(
        f"{'✅' if verdict.is_acceptable else '❌'} Validation | {body['language']} | "
        f"Score: {verdict.score} | Mistakes: {len(verdict.mistakes)}"
    )

    return {
        "valid": verdict.is_acceptable,
        "score": verdict.score,
        "output": verdict.transcript,
        "mistakes": verdict.mistakes,
        "optimizationSuggestions": verdict.optimization_notes
    }


@router.post("/ai-opponent")
async def ai_opponent(request: Request):
    """
    Simulated opponent progress

    Request:
        {"difficulty": "easy|medium|hard", "timeElapsed": 42.0}

    Unknown or missing difficulty uses medium speed.
    """
    body = await read_json_object(request)

    elapsed = body.get("timeElapsed")
    if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
        raise HTTPException(status_code=400, detail="Invalid request: 'timeElapsed' must be a number")
    if not math.isfinite(elapsed) or elapsed < 0:
        raise HTTPException(status_code=400, detail="Invalid request: 'timeElapsed' must be a finite number >= 0")

    difficulty = body.get("difficulty")
    if not isinstance(difficulty, str):
        difficulty = DEFAULT_DIFFICULTY

    reading = advance_opponent(difficulty, float(elapsed))

    return {
        "progress": reading.progress,
        "codeSnippet": reading.narration_snippet
    }
