"""
Synthetic test-run transcript

The transcript is derived solely from the score:
  pass_count = floor(score / 100 * 5)
  fail_count = 5 - pass_count

Execution time and memory figures are cosmetic noise drawn from `rng`.
"""
import math
import random
from typing import Optional


TOTAL_TEST_CASES = 5
PASS_STATUS = "> Status: All critical tests passed! ✓"
FAIL_STATUS = "> Status: Some tests failed. Review mistakes below."
INCOMPLETE_TRANSCRIPT = "> Error: Code validation failed\n> Reason: Incomplete solution"


def count_passed_cases(score: int) -> int:
    """Number of passing test lines for a score (clamped to 0..5)"""
    passed = math.floor(score / 100 * TOTAL_TEST_CASES)
    return min(TOTAL_TEST_CASES, max(0, passed))


def render_transcript(
    language: str,
    score: int,
    rng: Optional[random.Random] = None,
    pass_threshold: int = 70
) -> str:
    """
    Render a mock execution log for a scored submission

    Args:
        language: Submission language, echoed in the header
        score: Final score (0..100)
        rng: Random source for execution time and memory figures
        pass_threshold: Score at which the status line reports success

    Returns:
        Multi-line transcript text
    """
    rng = rng or random
    passed = count_passed_cases(score)

    lines = [f"> Compiling {language}...", "> Running test suite..."]
    for i in range(1, passed + 1):
        lines.append(f"> Test Case {i}: ✓ PASS")
    for i in range(passed + 1, TOTAL_TEST_CASES + 1):
        lines.append(f"> Test Case {i}: ✗ FAIL")

    # whole milliseconds below 100, so the printed figure never reaches 0.100
    execution_time = math.floor(rng.random() * 100) / 1000
    memory_mb = math.floor(rng.random() * 20 + 10)

    lines.append("")
    lines.append(f"> Execution Time: {execution_time:.3f}s")
    lines.append(f"> Memory Usage: {memory_mb}MB")
    lines.append("")
    lines.append(f"> Score: {score}/100")
    lines.append(PASS_STATUS if score >= pass_threshold else FAIL_STATUS)

    return "\n".join(lines)
