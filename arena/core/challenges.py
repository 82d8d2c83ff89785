"""
Challenge catalogue and starter code
"""
from typing import Dict, Tuple


DEFAULT_CHALLENGE = "Sort the array using QuickSort algorithm and optimize for space complexity."

# Player field → challenge text ("Web Dev" and unknown fields use the default)
CHALLENGES: Dict[str, str] = {
    "Medical": "Analyze patient data: Calculate average heart rate from the input list and filter out anomalies (>100bpm).",
    "Engineering": "Calculate structural load: Given a list of force vectors, compute the net force and direction.",
    "Data Science": "Clean dataset: Remove duplicates and fill missing values with the mean of the column.",
    "AI": "Implement a basic neural network forward pass function using matrix multiplication.",
    "Computer Science": "Implement a binary search tree insertion method with O(log n) complexity.",
    "Software Engineering": "Design a singleton pattern implementation that is thread-safe.",
}

FIELDS = [
    "Engineering", "Software Engineering", "Computer Science",
    "AI", "Medical", "Data Science", "Web Dev",
]

LANGUAGES = ["python", "javascript", "java", "cpp"]

DIFFICULTIES = ["easy", "medium", "hard"]

# Language → (player template, opponent template)
STARTER_CODE: Dict[str, Tuple[str, str]] = {
    "python": (
        "def solution(data):\n    # Write your code here\n    pass",
        "def solution(data):\n    # AI is thinking...\n    pass",
    ),
    "javascript": (
        "function solution(data) {\n    // Write your code here\n}",
        "function solution(data) {\n    // AI is thinking...\n}",
    ),
    "cpp": (
        "void solution(vector<int>& data) {\n    // Write your code here\n}",
        "void solution(vector<int>& data) {\n    // AI is thinking...\n}",
    ),
    "java": (
        "public void solution(int[] data) {\n    // Write your code here\n}",
        "public void solution(int[] data) {\n    // AI is thinking...\n}",
    ),
}


def get_challenge(field: str) -> str:
    """Challenge text for a player field"""
    return CHALLENGES.get(field, DEFAULT_CHALLENGE)


def starter_code(language: str) -> Tuple[str, str]:
    """(player_code, opponent_code) templates; empty for unknown languages"""
    return STARTER_CODE.get(language, ("", ""))
