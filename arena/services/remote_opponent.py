"""
Remote opponent source - reads progress from another judge server's /api/ai-opponent
"""
from typing import Any, Dict, Optional

import requests

from arena.core.opponent import OpponentSourceError
from arena.models import OpponentProgress


class RemoteOpponentSource:
    """HTTP client for POST /api/ai-opponent"""

    def __init__(self, base_url: str, timeout: float = 2.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.post(url, json=payload, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            raise OpponentSourceError(f"Opponent request to {url} failed: {e}") from e

    def advance(self, difficulty: str, elapsed_seconds: float) -> OpponentProgress:
        data = self._post(
            "/api/ai-opponent",
            {"difficulty": difficulty, "timeElapsed": elapsed_seconds}
        )
        try:
            return OpponentProgress(
                progress=data["progress"],
                narration_snippet=data.get("codeSnippet", "")
            )
        except (KeyError, TypeError, ValueError) as e:
            raise OpponentSourceError(f"Malformed opponent response: {data}") from e
