"""
Guide narration shown beside the arena
"""
from typing import List, Tuple

from arena.models import PlayerProfile


WELCOME = "Welcome to CodeArena! I'm your guide. Let's set up your profile first."
INITIALIZING = "Initializing battle environment..."
GO = "Go!"
BATTLE_BEGIN = "BEGIN! Solve the challenge before the AI!"
ANALYZING = "Compiling and analyzing your solution..."
NEEDS_IMPROVEMENT = "Your code needs improvement. Check the mistakes and try again!"
PLAYER_VICTORY = "Incredible! You've outperformed the AI model! Victory is yours!"
AI_VICTORY = "Analysis complete. The AI was slightly more optimized this time. Let's review your logic."

# Replaces the session's mistakes when the AI wins
DEFEAT_REVIEW = [
    "Consider handling edge cases for empty inputs.",
    "Your sorting algorithm has O(n²) complexity; QuickSort would be O(n log n).",
    "Variable naming could be more descriptive for maintainability.",
]


def setup_prompt(profile: PlayerProfile) -> str:
    """Ask for the first missing profile field"""
    if not profile.name:
        return "First, what should I call you, challenger?"
    if not profile.field:
        return f"Nice to meet you, {profile.name}! What's your field of expertise?"
    if not profile.language:
        return "Which programming language do you prefer for this battle?"
    return "Excellent choices! Ready to begin the simulation?"


def countdown_script(init_delay: float, step: float, count_from: int = 3) -> List[Tuple[float, str]]:
    """
    Timed countdown messages

    Each entry is (seconds to wait before showing, message). The battle begins
    one `step` after the last entry.

    Example:
        >>> countdown_script(3.0, 1.5)
        [(3.0, 'Starting in 3...'), (1.5, 'Starting in 2...'), (1.5, 'Starting in 1...'), (1.5, 'Go!')]
    """
    script = []
    for i, count in enumerate(range(count_from, 0, -1)):
        script.append((init_delay if i == 0 else step, f"Starting in {count}..."))
    script.append((step if script else init_delay, GO))
    return script


def format_clock(seconds: int) -> str:
    """Render remaining time as m:ss"""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
