"""
Tests for the battle state machine and engine
"""
import threading

import pytest

from arena.core import narration
from arena.core.battle import (
    transition,
    new_session,
    BattleEngine,
    UpdateProfile,
    StartBattle,
    CountdownMessage,
    CountdownFinished,
    Tick,
    SubmitReceived,
    SubmissionScored,
    Reset,
)
from arena.core.challenges import get_challenge, DEFAULT_CHALLENGE
from arena.core.opponent import OpponentSourceError
from arena.models import ArenaParams, OpponentProgress, Verdict


PARAMS = ArenaParams()

WINNING_PYTHON = """def solution(data):
    # sort the values
    if not data:
        return []
    return sorted(data)"""


def verdict(score: int) -> Verdict:
    return Verdict(is_acceptable=score >= 70, score=score, mistakes=[], optimization_notes=[], transcript="> Score")


def profiled(**overrides):
    fields = {"name": "neo", "field": "AI", "language": "python", "difficulty": "medium"}
    fields.update(overrides)
    return transition(new_session(PARAMS), UpdateProfile(**fields), PARAMS)


def in_battle():
    session = transition(profiled(), StartBattle(), PARAMS)
    return transition(session, CountdownFinished(), PARAMS)


class StubSource:
    def __init__(self, *progress):
        self.readings = list(progress)
        self.calls = []

    def advance(self, difficulty, elapsed_seconds):
        self.calls.append((difficulty, elapsed_seconds))
        value = self.readings.pop(0) if len(self.readings) > 1 else self.readings[0]
        return OpponentProgress(progress=value, narration_snippet="# Implementing core algorithm...")


class FailingSource:
    def advance(self, difficulty, elapsed_seconds):
        raise OpponentSourceError("connection refused")


def battle_engine(source=None, scorer=None, rng=None, params=PARAMS):
    engine = BattleEngine(params, source=source or StubSource(0.0), scorer=scorer, rng=rng)
    engine.update_profile(name="neo", field="AI", language="python", difficulty="medium")
    engine.start()
    engine.finish_countdown()
    return engine


# ---------- setup ----------

def test_new_session_defaults():
    """Setup state, full clock, no winner"""
    session = new_session(PARAMS)
    assert session.state == "setup"
    assert session.remaining_seconds == 300
    assert session.player_progress == 0
    assert session.winner == "none"
    assert session.guide_message == narration.WELCOME


@pytest.mark.parametrize("missing", ["name", "field", "language"])
def test_start_requires_complete_profile(missing):
    """Any empty profile field keeps the session in setup"""
    session = profiled(**{missing: ""})
    after = transition(session, StartBattle(), PARAMS)
    assert after.state == "setup"
    assert after == session


def test_profile_sets_challenge_and_starter_code():
    """Field picks the challenge, language picks both starter snippets"""
    session = profiled(field="Medical", language="javascript")
    assert session.challenge == get_challenge("Medical")
    assert session.player_code == "function solution(data) {\n    // Write your code here\n}"
    assert "AI is thinking" in session.opponent_code
    assert session.guide_message == "Excellent choices! Ready to begin the simulation?"


def test_unknown_field_gets_default_challenge():
    """Fields without a challenge of their own fall back to the sorting task"""
    assert profiled(field="Web Dev").challenge == DEFAULT_CHALLENGE


def test_guide_asks_for_first_missing_field():
    """Name given → guide asks for the field next"""
    session = transition(new_session(PARAMS), UpdateProfile(name="neo"), PARAMS)
    assert session.guide_message == "Nice to meet you, neo! What's your field of expertise?"


def test_partial_update_keeps_other_fields():
    """Profile updates merge; difficulty carries over to the opponent"""
    session = profiled()
    session = transition(session, UpdateProfile(difficulty="hard"), PARAMS)
    assert session.profile.name == "neo"
    assert session.profile.difficulty == "hard"
    assert session.opponent.difficulty == "hard"


# ---------- countdown ----------

def test_countdown_then_battle():
    """Countdown narrates, ignores ticks and verdicts, then opens battle 1"""
    session = transition(profiled(), StartBattle(), PARAMS)
    assert session.state == "countdown"
    assert session.guide_message == narration.INITIALIZING

    session = transition(session, CountdownMessage(message="Starting in 3..."), PARAMS)
    assert session.guide_message == "Starting in 3..."

    # No activity during countdown
    assert transition(session, Tick(elapsed_seconds=1, progress=50), PARAMS) == session
    assert transition(session, SubmissionScored(battle_id=0, verdict=verdict(90)), PARAMS) == session

    session = transition(session, CountdownFinished(), PARAMS)
    assert session.state == "battle"
    assert session.battle_id == 1
    assert session.guide_message == narration.BATTLE_BEGIN


# ---------- battle ----------

def test_tick_updates_clock_and_opponent():
    """One tick: clock -1, opponent reading stored, narration appended"""
    session = in_battle()
    session = transition(session, Tick(elapsed_seconds=1, progress=12.5, narration_snippet="# Analyzing input data structure..."), PARAMS)
    assert session.remaining_seconds == 299
    assert session.opponent.progress == 12.5
    assert session.opponent.elapsed_seconds == 1
    assert session.opponent_code.endswith("\n    # Analyzing input data structure...")
    assert session.state == "battle"


def test_opponent_reaching_100_wins():
    """Opponent at 100 with player below → ai wins with the defeat review"""
    session = transition(in_battle(), Tick(elapsed_seconds=1, progress=100), PARAMS)
    assert session.state == "result"
    assert session.winner == "ai"
    assert session.mistakes == narration.DEFEAT_REVIEW
    assert session.guide_message == narration.AI_VICTORY


def test_timeout_goes_to_ai_even_at_95():
    """Clock runs out → ai wins regardless of player progress"""
    session = in_battle().model_copy(update={"remaining_seconds": 1, "player_progress": 95.0})
    session = transition(session, Tick(elapsed_seconds=299, progress=40), PARAMS)
    assert session.remaining_seconds == 0
    assert session.state == "result"
    assert session.winner == "ai"


def test_submit_pass_threshold_wins():
    """Verdict at or above the pass threshold → player wins"""
    session = in_battle()
    session = transition(session, SubmitReceived(code=WINNING_PYTHON), PARAMS)
    assert session.guide_message == narration.ANALYZING
    session = transition(session, SubmissionScored(battle_id=session.battle_id, verdict=verdict(85)), PARAMS)
    assert session.state == "result"
    assert session.winner == "player"
    assert session.player_progress == 85
    assert session.guide_message == narration.PLAYER_VICTORY


def test_low_score_keeps_battle_going():
    """Verdict below the threshold updates progress, battle continues"""
    session = in_battle()
    session = transition(session, SubmissionScored(battle_id=session.battle_id, verdict=verdict(69)), PARAMS)
    assert session.state == "battle"
    assert session.winner == "none"
    assert session.player_progress == 69
    assert session.guide_message == narration.NEEDS_IMPROVEMENT


def test_stale_submission_discarded():
    """Verdict for an earlier battle id leaves the session untouched"""
    session = in_battle()
    after = transition(session, SubmissionScored(battle_id=session.battle_id - 1, verdict=verdict(100)), PARAMS)
    assert after == session


def test_result_is_frozen():
    """Only reset applies once a winner is set"""
    session = transition(in_battle(), Tick(elapsed_seconds=1, progress=100), PARAMS)
    for event in (
        Tick(elapsed_seconds=2, progress=10),
        SubmitReceived(code="x"),
        SubmissionScored(battle_id=session.battle_id, verdict=verdict(100)),
        UpdateProfile(name="trinity"),
        StartBattle(),
        CountdownFinished(),
    ):
        assert transition(session, event, PARAMS) == session


def test_reset_restores_setup_defaults():
    """Reset returns to setup with a full clock and no winner"""
    session = transition(in_battle(), Tick(elapsed_seconds=1, progress=100), PARAMS)
    session = transition(session, Reset(), PARAMS)
    assert session.state == "setup"
    assert session.winner == "none"
    assert session.remaining_seconds == 300
    assert session.player_progress == 0
    assert session.mistakes == []
    # Battle ids keep counting so late events from the old battle stay stale
    assert session.battle_id == 1


def test_winner_set_only_in_result():
    """Winner is "none" in every state except result"""
    session = new_session(PARAMS)
    events = [
        UpdateProfile(name="neo", field="AI", language="python"),
        StartBattle(),
        CountdownFinished(),
        Tick(elapsed_seconds=1, progress=30),
        SubmissionScored(battle_id=1, verdict=verdict(40)),
        Tick(elapsed_seconds=2, progress=100),
        Reset(),
    ]
    for event in events:
        session = transition(session, event, PARAMS)
        assert (session.winner != "none") == (session.state == "result")


# ---------- engine ----------

def test_engine_tick_reads_source_with_elapsed_time():
    """Each tick asks the source with accumulated tick time"""
    source = StubSource(10.0, 20.0)
    engine = battle_engine(source=source)
    engine.tick()
    session = engine.tick()
    assert source.calls == [("medium", 1.0), ("medium", 2.0)]
    assert session.opponent.progress == 20.0
    assert session.remaining_seconds == 298


def test_submit_wins_tie_with_tick():
    """Opponent would hit 100 on the next tick, player submits 85 first → player"""
    engine = battle_engine(source=StubSource(100.0), scorer=lambda code, language, challenge: verdict(85))
    result, session = engine.submit("def solution(data): ...")
    assert result.score == 85
    assert session.winner == "player"

    after = engine.tick()
    assert after.winner == "player"
    assert after.opponent.progress == 0


def test_engine_submit_with_real_scorer():
    """Default scorer judges the code and stores its transcript"""
    engine = battle_engine()
    result, session = engine.submit(WINNING_PYTHON)
    assert result.score == 100
    assert session.winner == "player"
    assert session.player_code == WINNING_PYTHON
    assert "> Score: 100/100" in session.output


def test_submit_outside_battle_ignored():
    """Submit in setup → no verdict, session unchanged"""
    engine = BattleEngine(PARAMS)
    result, session = engine.submit(WINNING_PYTHON)
    assert result is None
    assert session.state == "setup"


def test_tick_during_scoring_waits_for_verdict():
    """Clock tick landing while the submit is being scored cannot take the win"""
    engine = battle_engine(source=StubSource(100.0))
    ticker = threading.Thread(target=engine.tick)

    def scorer(code, language, challenge):
        ticker.start()
        # the tick blocks on the engine lock until this submit is applied
        ticker.join(timeout=0.2)
        return verdict(85)

    engine.scorer = scorer
    result, session = engine.submit(WINNING_PYTHON)
    ticker.join()

    assert result.score == 85
    assert session.winner == "player"
    assert session.player_progress == 85
    assert engine.session.winner == "player"
    assert engine.session.opponent.progress == 0
    assert engine.session.remaining_seconds == 300


def test_reset_during_scoring_applies_after_verdict():
    """Reset from another thread waits for the submit, then clears the result"""
    engine = battle_engine()
    resetter = threading.Thread(target=engine.reset)

    def scorer(code, language, challenge):
        resetter.start()
        resetter.join(timeout=0.2)
        return verdict(95)

    engine.scorer = scorer
    result, session = engine.submit(WINNING_PYTHON)
    resetter.join()

    assert result.score == 95
    assert session.winner == "player"
    assert engine.session.state == "setup"
    assert engine.session.winner == "none"
    assert engine.session.player_progress == 0


def test_source_failure_falls_back_to_local_increment(make_rng):
    """Failing source → previous progress + U(0, 3), battle keeps running"""
    engine = battle_engine(source=FailingSource(), rng=make_rng(0.5))
    first = engine.tick()
    # 0 + U(0, 3) at the midpoint
    assert first.opponent.progress == pytest.approx(1.5)
    second = engine.tick()
    assert second.opponent.progress == pytest.approx(3.0)
    assert second.remaining_seconds == 298
    assert second.state == "battle"
    # No narration without a reading
    assert second.opponent_code == first.opponent_code


def test_stale_clock_tick_dropped():
    """Tick tagged with another battle id is ignored"""
    engine = battle_engine()
    session = engine.tick(battle_id=engine.session.battle_id + 5)
    assert session.remaining_seconds == 300


def test_tick_outside_battle_is_noop():
    """Tick in setup never reads the source"""
    source = StubSource(50.0)
    engine = BattleEngine(PARAMS, source=source)
    assert engine.tick().state == "setup"
    assert source.calls == []


def test_engine_runs_out_the_clock():
    """Three ticks on a 3 s limit → ai wins at 0"""
    engine = battle_engine(params=ArenaParams(time_limit=3))
    for _ in range(3):
        session = engine.tick()
    assert session.state == "result"
    assert session.winner == "ai"
    assert session.remaining_seconds == 0
