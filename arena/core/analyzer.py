"""
CodeArena heuristic scorer - pattern-based judging of source text

Submitted code is never executed. The verdict is built from ordered checks:
  1. Fewer than 2 non-blank lines → score 0, rejected (no further checks)
  2. Language policy (python / javascript; other languages skip this step)
  3. Cross-language bonuses: structure, comments, edge-case handling
  4. Loop flag: more than one "for" token → mistake + optimization note
  5. Readability flag: more than 2 single-letter identifiers
  6. Score = clamp(0, 100, accumulated), acceptable if mistakes < 3
  7. Keep the first 5 mistakes and first 3 optimization notes

Point values:
  python:      function with return +20, sort usage +30, for-in iteration +20
  javascript:  function with return +20, array method (.sort/.filter/.map) +30
  any:         more than 3 lines +20, comments +10, if/try +20
"""
import random
import re
from typing import List, Optional, Tuple

from arena.core.transcript import render_transcript, INCOMPLETE_TRANSCRIPT
from arena.models import Submission, Verdict


MIN_NONBLANK_LINES = 2
MAX_MISTAKES = 5
MAX_OPTIMIZATION_NOTES = 3
ACCEPTABLE_MISTAKE_LIMIT = 3    # acceptable only with fewer mistakes than this
STRUCTURE_POINTS = 20           # function definition and return both present

INCOMPLETE_MISTAKE = "Solution appears incomplete - needs more implementation."

PYTHON_FOR_IN = re.compile(r"for\s+\w+\s+in")
LOOP_TOKEN = re.compile(r"for")
SINGLE_LETTER = re.compile(r"\b[a-z]\b")


def split_nonblank_lines(source_text: str) -> List[str]:
    """Lines that contain something other than whitespace"""
    return [line for line in source_text.split("\n") if line.strip()]


def check_python(source_text: str, nonblank_count: int) -> Tuple[int, List[str], List[str]]:
    """
    Python policy checks

    Returns:
        (points, mistakes, optimization_notes)
    """
    points = 0
    mistakes = []
    notes = []

    if "def " not in source_text:
        mistakes.append("Missing function definition in Python.")
    if "pass" in source_text and nonblank_count < 4:
        mistakes.append("Function body contains only 'pass' - implementation needed.")
    if "return" not in source_text:
        mistakes.append("No return statement found - function should return a value.")
    if not mistakes:
        points += STRUCTURE_POINTS

    # "sorted" contains "sort", one substring test covers both
    if "sort" in source_text:
        points += 30
        notes.append("Good use of built-in sorting functions!")
    if PYTHON_FOR_IN.search(source_text):
        points += 20
        notes.append("Proper iteration pattern detected.")

    return points, mistakes, notes


def check_javascript(source_text: str) -> Tuple[int, List[str], List[str]]:
    """
    JavaScript policy checks

    Returns:
        (points, mistakes, optimization_notes)
    """
    points = 0
    mistakes = []
    notes = []

    if "function" not in source_text and "=>" not in source_text:
        mistakes.append("Missing function declaration in JavaScript.")
    if "return" not in source_text:
        mistakes.append("No return statement found.")
    if not mistakes:
        points += STRUCTURE_POINTS

    if any(method in source_text for method in (".sort", ".filter", ".map")):
        points += 30
        notes.append("Excellent use of array methods!")

    return points, mistakes, notes


def check_cross_language(source_text: str) -> Tuple[int, List[str], List[str]]:
    """
    Rules applied to every language

    Returns:
        (points, mistakes, optimization_notes)
    """
    points = 0
    mistakes = []
    notes = []

    # Raw line count, blank lines included
    if len(source_text.split("\n")) > 3:
        points += 20

    if "//" in source_text or "#" in source_text:
        points += 10
        notes.append("Good code documentation with comments.")

    if "if" in source_text.lower() or "try" in source_text:
        points += 20
        notes.append("Edge case handling detected.")
    else:
        mistakes.append("Consider handling edge cases (empty inputs, null values, etc.).")

    # Counts every "for" substring; nesting is not distinguished from sequence
    loop_count = count_loop_tokens(source_text)
    if loop_count > 1:
        mistakes.append(
            f"Detected {loop_count} loops - algorithm may have O(n²) or higher complexity."
        )
        notes.append("Consider using more efficient algorithms like QuickSort or hash maps.")

    if count_single_letter_identifiers(source_text) > 2:
        mistakes.append("Single-letter variable names reduce code readability.")

    return points, mistakes, notes


def count_loop_tokens(source_text: str) -> int:
    return len(LOOP_TOKEN.findall(source_text))


def count_single_letter_identifiers(source_text: str) -> int:
    return len(SINGLE_LETTER.findall(source_text))


def clamp_score(points: int) -> int:
    return min(100, max(0, points))


def judge(submission: Submission, rng: Optional[random.Random] = None) -> Verdict:
    """
    Judge a submission

    Args:
        submission: Code, language and challenge text
        rng: Random source for the transcript's cosmetic figures

    Returns:
        Verdict (score, mistakes and notes are deterministic)
    """
    source_text = submission.source_text
    nonblank = split_nonblank_lines(source_text)

    if len(nonblank) < MIN_NONBLANK_LINES:
        return Verdict(
            is_acceptable=False,
            score=0,
            mistakes=[INCOMPLETE_MISTAKE],
            optimization_notes=[],
            transcript=INCOMPLETE_TRANSCRIPT
        )

    points = 0
    mistakes: List[str] = []
    notes: List[str] = []

    if submission.language == "python":
        policy = check_python(source_text, len(nonblank))
    elif submission.language == "javascript":
        policy = check_javascript(source_text)
    else:
        policy = (0, [], [])

    for rule_points, rule_mistakes, rule_notes in (policy, check_cross_language(source_text)):
        points += rule_points
        mistakes.extend(rule_mistakes)
        notes.extend(rule_notes)

    score = clamp_score(points)

    return Verdict(
        is_acceptable=len(mistakes) < ACCEPTABLE_MISTAKE_LIMIT,
        score=score,
        mistakes=mistakes[:MAX_MISTAKES],
        optimization_notes=notes[:MAX_OPTIMIZATION_NOTES],
        transcript=render_transcript(submission.language, score, rng=rng)
    )


def score_submission(
    source_text: str,
    language: str,
    challenge_text: str,
    rng: Optional[random.Random] = None
) -> Verdict:
    """Main scoring entry point"""
    submission = Submission(
        source_text=source_text,
        language=language,
        challenge_text=challenge_text
    )
    return judge(submission, rng=rng)
