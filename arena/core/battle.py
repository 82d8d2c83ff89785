"""
Battle state machine

States:
  setup → countdown → battle → result, plus reset (any state → setup)

Rules:
  - setup → countdown only when name, field and language are all set
  - countdown → battle after the narrated delay, no scoring or ticking
  - tick: remaining -1, opponent re-read; opponent >= 100 with player < 100 → ai wins
  - submit: score >= pass threshold → player wins
  - remaining reaches 0 with no winner → ai wins (even at player progress 95)
  - result is frozen; only reset applies

Transitions are pure: transition(session, event, params) → new session.
BattleEngine owns the single mutable reference and serializes events, so a
submit that lands together with a tick is always applied before that tick.
"""
import logging
import random
import threading
from typing import Callable, Optional, Tuple

from pydantic import BaseModel

from arena.core import narration
from arena.core.analyzer import score_submission
from arena.core.challenges import get_challenge, starter_code
from arena.core.opponent import LocalOpponentSource, OpponentProgressSource
from arena.models import (
    ArenaParams, BattleSession, OpponentState, Verdict
)


logger = logging.getLogger(__name__)

SETUP = "setup"
COUNTDOWN = "countdown"
BATTLE = "battle"
RESULT = "result"

PLAYER = "player"
AI = "ai"
NO_WINNER = "none"


# ==================== EVENTS ====================

class UpdateProfile(BaseModel):
    name: Optional[str] = None
    field: Optional[str] = None
    language: Optional[str] = None
    difficulty: Optional[str] = None


class StartBattle(BaseModel):
    pass


class CountdownMessage(BaseModel):
    message: str


class CountdownFinished(BaseModel):
    pass


class Tick(BaseModel):
    """One clock second with the opponent reading taken for it"""
    elapsed_seconds: float
    progress: float
    narration_snippet: Optional[str] = None    # None when progress came from the fallback


class SubmitReceived(BaseModel):
    code: str


class SubmissionScored(BaseModel):
    battle_id: int
    verdict: Verdict


class Reset(BaseModel):
    pass


# ==================== TRANSITIONS ====================

def new_session(params: ArenaParams, battle_id: int = 0) -> BattleSession:
    """Fresh session in the setup state"""
    return BattleSession(
        remaining_seconds=params.time_limit,
        guide_message=narration.WELCOME,
        battle_id=battle_id
    )


def finish(session: BattleSession, winner: str) -> BattleSession:
    """Move to result with a winner; the session is frozen from here on"""
    update = {"state": RESULT, "winner": winner}
    if winner == PLAYER:
        update["guide_message"] = narration.PLAYER_VICTORY
    else:
        update["guide_message"] = narration.AI_VICTORY
        update["mistakes"] = list(narration.DEFEAT_REVIEW)
    return session.model_copy(update=update)


def _update_profile(session: BattleSession, event: UpdateProfile) -> BattleSession:
    changes = event.model_dump(exclude_none=True)
    profile = session.profile.model_copy(update=changes)
    update = {
        "profile": profile,
        "challenge": get_challenge(profile.field) if profile.field else "",
        "guide_message": narration.setup_prompt(profile),
        "opponent": session.opponent.model_copy(update={"difficulty": profile.difficulty}),
    }
    if profile.language != session.profile.language:
        update["player_code"], update["opponent_code"] = starter_code(profile.language)
    return session.model_copy(update=update)


def _tick(session: BattleSession, event: Tick) -> BattleSession:
    remaining = max(0, session.remaining_seconds - 1)
    opponent = OpponentState(
        difficulty=session.opponent.difficulty,
        elapsed_seconds=event.elapsed_seconds,
        progress=min(100.0, max(0.0, event.progress))
    )
    update = {"remaining_seconds": remaining, "opponent": opponent}
    if event.narration_snippet:
        update["opponent_code"] = session.opponent_code + "\n    " + event.narration_snippet
    session = session.model_copy(update=update)

    if opponent.progress >= 100 and session.player_progress < 100:
        return finish(session, AI)
    if remaining <= 0:
        return finish(session, AI)
    return session


def _submission_scored(session: BattleSession, event: SubmissionScored, params: ArenaParams) -> BattleSession:
    if event.battle_id != session.battle_id:
        return session
    verdict = event.verdict
    session = session.model_copy(update={
        "player_progress": float(verdict.score),
        "output": verdict.transcript,
        "mistakes": list(verdict.mistakes),
    })
    if verdict.score >= params.pass_threshold:
        return finish(session, PLAYER)
    return session.model_copy(update={"guide_message": narration.NEEDS_IMPROVEMENT})


def transition(session: BattleSession, event: BaseModel, params: ArenaParams) -> BattleSession:
    """
    Apply one event to a session

    Events that do not apply to the current state leave the session unchanged.

    Args:
        session: Current session
        event: One of the event models above
        params: Battle parameters

    Returns:
        The next session (may be the same object)
    """
    if isinstance(event, Reset):
        return new_session(params, battle_id=session.battle_id)

    state = session.state

    if state == SETUP:
        if isinstance(event, UpdateProfile):
            return _update_profile(session, event)
        if isinstance(event, StartBattle) and session.profile.is_complete():
            return session.model_copy(update={
                "state": COUNTDOWN,
                "remaining_seconds": params.time_limit,
                "player_progress": 0.0,
                "opponent": OpponentState(difficulty=session.profile.difficulty),
                "winner": NO_WINNER,
                "mistakes": [],
                "output": "",
                "guide_message": narration.INITIALIZING,
            })

    elif state == COUNTDOWN:
        if isinstance(event, CountdownMessage):
            return session.model_copy(update={"guide_message": event.message})
        if isinstance(event, CountdownFinished):
            return session.model_copy(update={
                "state": BATTLE,
                "battle_id": session.battle_id + 1,
                "guide_message": narration.BATTLE_BEGIN,
            })

    elif state == BATTLE:
        if isinstance(event, Tick):
            return _tick(session, event)
        if isinstance(event, SubmitReceived):
            return session.model_copy(update={
                "player_code": event.code,
                "guide_message": narration.ANALYZING,
            })
        if isinstance(event, SubmissionScored):
            return _submission_scored(session, event, params)

    return session


# ==================== ENGINE ====================

Scorer = Callable[[str, str, str], Verdict]


class BattleEngine:
    """
    Owns one BattleSession and serializes every event against it

    A tick is a single read-modify-write under the lock, opponent source call
    included. A submit holds the lock from receipt through scoring to verdict.
    """

    def __init__(
        self,
        params: Optional[ArenaParams] = None,
        source: Optional[OpponentProgressSource] = None,
        scorer: Optional[Scorer] = None,
        rng: Optional[random.Random] = None,
        session: Optional[BattleSession] = None
    ):
        self.params = params or ArenaParams()
        self.rng = rng or random.Random()
        self.source = source or LocalOpponentSource(rng=self.rng)
        self.scorer = scorer or score_submission
        self._lock = threading.Lock()
        self._session = session or new_session(self.params)

    @property
    def session(self) -> BattleSession:
        return self._session

    def _apply(self, event: BaseModel) -> BattleSession:
        # Caller holds the lock
        before = self._session
        after = transition(before, event, self.params)
        if after.state != before.state:
            logger.info(f"🔀 Battle {after.battle_id}: {before.state} → {after.state}")
            if after.state == RESULT:
                logger.info(
                    f"🏁 Winner: {after.winner} | Player {after.player_progress:.0f}% | "
                    f"AI {after.opponent.progress:.1f}% | Remaining {after.remaining_seconds}s"
                )
        self._session = after
        return after

    def dispatch(self, event: BaseModel) -> BattleSession:
        with self._lock:
            return self._apply(event)

    # ---------- setup / countdown ----------

    def update_profile(self, **fields) -> BattleSession:
        return self.dispatch(UpdateProfile(**fields))

    def start(self) -> BattleSession:
        return self.dispatch(StartBattle())

    def countdown_message(self, message: str) -> BattleSession:
        return self.dispatch(CountdownMessage(message=message))

    def finish_countdown(self) -> BattleSession:
        return self.dispatch(CountdownFinished())

    def reset(self) -> BattleSession:
        return self.dispatch(Reset())

    # ---------- battle ----------

    def tick(self, battle_id: Optional[int] = None) -> BattleSession:
        """
        Advance the clock by one tick

        Args:
            battle_id: When given, the tick is dropped unless it belongs to the
                current battle (protects against a stale scheduler)
        """
        with self._lock:
            session = self._session
            if session.state != BATTLE:
                return session
            if battle_id is not None and battle_id != session.battle_id:
                return session

            elapsed = session.opponent.elapsed_seconds + self.params.tick_interval
            try:
                reading = self.source.advance(session.opponent.difficulty, elapsed)
                event = Tick(
                    elapsed_seconds=elapsed,
                    progress=reading.progress,
                    narration_snippet=reading.narration_snippet
                )
            except Exception as e:
                fallback = min(
                    100.0,
                    session.opponent.progress + self.rng.uniform(0, self.params.fallback_max_increment)
                )
                logger.warning(
                    f"⚠️ Opponent source failed ({type(e).__name__}: {e}), "
                    f"using local progress {fallback:.1f}%"
                )
                event = Tick(elapsed_seconds=elapsed, progress=fallback)

            return self._apply(event)

    def submit(self, code: str) -> Tuple[Optional[Verdict], BattleSession]:
        """
        Judge the player's code for the running battle

        Receipt, scoring and verdict are applied in one critical section, so a
        tick arriving meanwhile waits and sees the outcome of this submit.

        Returns:
            (verdict, session); verdict is None when no battle is running
        """
        with self._lock:
            session = self._session
            if session.state != BATTLE:
                return None, session
            battle_id = session.battle_id
            session = self._apply(SubmitReceived(code=code))

            verdict = self.scorer(code, session.profile.language, session.challenge)
            logger.info(
                f"📥 Battle {battle_id} submission | {session.profile.language} | "
                f"Score: {verdict.score} | Mistakes: {len(verdict.mistakes)}"
            )
            return verdict, self._apply(SubmissionScored(battle_id=battle_id, verdict=verdict))
