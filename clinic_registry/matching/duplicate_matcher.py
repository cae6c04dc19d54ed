"""Duplicate patient detection by normalized full-name similarity."""
import time
from typing import Iterable, List, Optional

from ..config import DEFAULT_SIMILARITY_THRESHOLD
from ..exceptions import InvalidPatientRecordError
from ..secure_logging import get_secure_logger
from .models import MatchResult, MatchType, PatientRecord
from .similarity import calculate_similarity

logger = get_secure_logger(__name__)


def normalize_full_name(first_name: str, last_name: str, strip_whitespace: bool = False) -> str:
    """
    Join first and last name with a single space and lower-case the result.

    Surrounding whitespace is kept unless ``strip_whitespace`` is set, so
    ``"Somchai "`` and ``"Somchai"`` score as different names by default.
    """
    if not isinstance(first_name, str) or not isinstance(last_name, str):
        raise InvalidPatientRecordError("first_name and last_name must be strings")
    if strip_whitespace:
        first_name, last_name = first_name.strip(), last_name.strip()
    return f"{first_name} {last_name}".lower()


class DuplicateMatcher:
    """
    Flags roster patients whose normalized full name equals the candidate's
    (exact, similarity 100) or scores strictly above ``similarity_threshold``.
    """

    def __init__(
        self,
        similarity_threshold: int = DEFAULT_SIMILARITY_THRESHOLD,
        strip_whitespace: bool = False,
    ):
        if not (0 <= similarity_threshold <= 100):
            raise ValueError("similarity_threshold must be between 0 and 100")
        self.similarity_threshold = similarity_threshold
        self.strip_whitespace = strip_whitespace

    def _normalize(self, record: PatientRecord) -> str:
        return normalize_full_name(record.first_name, record.last_name, self.strip_whitespace)

    def compare(self, candidate: PatientRecord, existing: PatientRecord) -> Optional[MatchResult]:
        """Classify one existing patient against the candidate, or None when unrelated."""
        return self._compare_normalized(self._normalize(candidate), existing)

    def _compare_normalized(self, candidate_name: str, existing: PatientRecord) -> Optional[MatchResult]:
        existing_name = self._normalize(existing)

        if candidate_name == existing_name:
            return MatchResult(existing, MatchType.EXACT, 100)

        similarity = calculate_similarity(candidate_name, existing_name)
        if similarity > self.similarity_threshold:
            return MatchResult(existing, MatchType.SIMILAR, similarity)
        return None

    def find_similar(self, candidate: PatientRecord, roster: Iterable[PatientRecord]) -> List[MatchResult]:
        """
        Return every roster patient whose name matches the candidate exactly or
        closely, highest similarity first.
        """
        start = time.perf_counter()
        candidate_name = self._normalize(candidate)

        roster_size = 0
        matches: List[MatchResult] = []
        for existing in roster:
            roster_size += 1
            result = self._compare_normalized(candidate_name, existing)
            if result is not None:
                matches.append(result)

        matches.sort(key=lambda m: m.similarity, reverse=True)

        exact_count = sum(1 for m in matches if m.is_exact)
        logger.log_duplicate_check(
            roster_size=roster_size,
            exact_count=exact_count,
            similar_count=len(matches) - exact_count,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return matches
