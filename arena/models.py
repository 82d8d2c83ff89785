"""
Data models for the CodeArena judge server
"""
from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Submission(BaseModel):
    """One code submission to be judged"""
    model_config = ConfigDict(frozen=True)

    source_text: str
    language: str  # "python" | "javascript" | "java" | "cpp"
    challenge_text: str


class Verdict(BaseModel):
    """Heuristic judgement of a submission"""
    model_config = ConfigDict(frozen=True)

    is_acceptable: bool
    score: int                            # 0..100
    mistakes: List[str] = []              # at most 5
    optimization_notes: List[str] = []    # at most 3
    transcript: str = ""


class OpponentProgress(BaseModel):
    """One reading of the simulated opponent"""
    progress: float                       # 0..100
    narration_snippet: str


class OpponentState(BaseModel):
    """Simulated opponent inside a battle"""
    model_config = ConfigDict(frozen=True)

    difficulty: str = "easy"              # "easy" | "medium" | "hard"
    elapsed_seconds: float = 0.0
    progress: float = 0.0                 # re-derived every tick, not monotonic


class PlayerProfile(BaseModel):
    """Profile fields collected during setup"""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    field: str = ""
    language: str = ""
    difficulty: str = "easy"

    def is_complete(self) -> bool:
        return bool(self.name and self.field and self.language)


class ArenaParams(BaseModel):
    """Tunable parameters for battles"""
    time_limit: int = 300                 # Battle clock in seconds
    tick_interval: float = 1.0            # Seconds between ticks
    pass_threshold: int = 70              # Submit score that wins the battle
    countdown_init_delay: float = 3.0     # "Initializing" hold before counting
    countdown_step: float = 1.5           # Delay between countdown messages
    countdown_from: int = 3
    fallback_max_increment: float = 3.0   # Local progress step when the source fails
    opponent_source: str = "local"        # "local" | "remote"
    opponent_url: Optional[str] = None
    auto_clock: bool = True               # /battle/start launches the scheduler


class BattleSession(BaseModel):
    """The one play-through owned by a BattleEngine"""
    model_config = ConfigDict(frozen=True)

    state: str = "setup"                  # "setup" | "countdown" | "battle" | "result"
    remaining_seconds: int = 300
    player_progress: float = 0.0
    opponent: OpponentState = OpponentState()
    winner: str = "none"                  # "player" | "ai" | "none"
    profile: PlayerProfile = PlayerProfile()
    challenge: str = ""
    player_code: str = ""
    opponent_code: str = ""
    mistakes: List[str] = []
    output: str = ""
    guide_message: str = ""
    battle_id: int = 0                    # Bumped on every countdown -> battle edge
