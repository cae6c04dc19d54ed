"""Edit-distance based name similarity on a 0-100 scale."""
import math

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(str1: str, str2: str) -> int:
    """Minimum number of single-character insertions, deletions and substitutions."""
    # Unit weights for all three operations, i.e. the classical DP edit distance
    return Levenshtein.distance(str1, str2, weights=(1, 1, 1))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (round() would give 62 for 62.5)."""
    return int(math.floor(value + 0.5))


def calculate_similarity(str1: str, str2: str) -> int:
    """
    Similarity of two strings as a whole percentage.

    ``(len(longer) - distance) / len(longer) * 100``, rounded half up.
    Two empty strings are 100% similar.
    """
    if len(str1) > len(str2):
        longer, shorter = str1, str2
    else:
        longer, shorter = str2, str1

    if len(longer) == 0:
        return 100

    edit_distance = levenshtein_distance(longer, shorter)
    return round_half_up(((len(longer) - edit_distance) / len(longer)) * 100)
