"""
Skill string normalization and similarity scoring.

Similarity is 1.0 for identical strings, a fixed 0.8 when one contains the
other, and otherwise one minus the Levenshtein distance over the longer
length.
"""

from collections.abc import Iterable

from ats_tracker.utils.constants import SUBSTRING_SIMILARITY


def normalize_skill(skill: str) -> str:
    """Lowercase and trim a skill name."""
    return skill.strip().lower()


def normalize_skills(skills: Iterable[str]) -> list[str]:
    """
    Normalize a skill list for matching.

    Drops empty entries and duplicates (after normalization), keeping the
    first occurrence order.
    """
    seen: set[str] = set()
    normalized: list[str] = []
    for skill in skills:
        if not isinstance(skill, str):
            continue
        value = normalize_skill(skill)
        if value and value not in seen:
            seen.add(value)
            normalized.append(value)
    return normalized


def levenshtein_distance(a: str, b: str) -> int:
    """Single-character edit distance (insert, delete, substitute; cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Two-row DP over the shorter string
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def skill_similarity(a: str, b: str) -> float:
    """
    Similarity between two already-normalized skill strings, in [0, 1].

    Containment short-circuits to 0.8 ahead of edit-distance scoring.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return SUBSTRING_SIMILARITY

    longest = max(len(a), len(b))
    return 1.0 - levenshtein_distance(a, b) / longest
