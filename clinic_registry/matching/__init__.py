"""Duplicate patient detection by name similarity."""

from .duplicate_matcher import DuplicateMatcher, normalize_full_name
from .models import MatchResult, MatchType, PatientRecord
from .similarity import calculate_similarity, levenshtein_distance

__all__ = [
    "PatientRecord",
    "MatchResult",
    "MatchType",
    "DuplicateMatcher",
    "normalize_full_name",
    "calculate_similarity",
    "levenshtein_distance",
]
