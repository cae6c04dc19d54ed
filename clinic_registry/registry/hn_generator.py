"""Hospital number (HN) generation with collision retry."""
import random
import time
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional, Set

from ..config import (
    DEFAULT_HN_MAX_ATTEMPTS,
    DEFAULT_HN_PREFIX,
    DEFAULT_HN_RANDOM_DIGITS,
    DEFAULT_HN_TIME_DIGITS,
)
from ..secure_logging import get_secure_logger

logger = get_secure_logger(__name__)


def _identifier_of(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        return item.get("hn")
    return getattr(item, "hn", None)


class HNGenerator:
    """
    Mints identifiers of the form ``<prefix><time digits><random digits>``,
    e.g. ``HN482917``.

    Uniqueness is only checked against the roster handed to
    :meth:`generate_unique`; nothing is reserved, so the caller must commit
    the identifier together with the new record.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_HN_PREFIX,
        time_digits: int = DEFAULT_HN_TIME_DIGITS,
        random_digits: int = DEFAULT_HN_RANDOM_DIGITS,
        max_attempts: int = DEFAULT_HN_MAX_ATTEMPTS,
        clock: Callable[[], int] = time.perf_counter_ns,
        rng: Optional[random.Random] = None,
    ):
        if time_digits < 1 or random_digits < 1:
            raise ValueError("time_digits and random_digits must be positive")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.prefix = prefix
        self.time_digits = time_digits
        self.random_digits = random_digits
        self.max_attempts = max_attempts
        self._clock = clock
        self._rng = rng or random.Random()

    @property
    def width(self) -> int:
        """Total identifier length, prefix included."""
        return len(self.prefix) + self.time_digits + self.random_digits

    def generate(self) -> str:
        """Build a single candidate without any uniqueness check."""
        micros = self._clock() // 1000
        time_part = str(micros % (10 ** self.time_digits)).zfill(self.time_digits)
        random_part = str(self._rng.randrange(10 ** self.random_digits)).zfill(self.random_digits)
        return f"{self.prefix}{time_part}{random_part}"

    @staticmethod
    def existing_identifiers(roster: Iterable[Any]) -> Set[str]:
        return {hn for hn in (_identifier_of(item) for item in roster) if hn}

    def is_unique(self, hn: str, roster: Iterable[Any]) -> bool:
        return hn not in self.existing_identifiers(roster)

    def generate_unique(self, roster: Iterable[Any]) -> str:
        """
        Generate an identifier absent from ``roster``.

        Retries up to ``max_attempts`` candidates; if every one collides the
        last candidate is returned anyway and a warning is logged.
        """
        existing = self.existing_identifiers(roster)
        hn = self.generate()
        if not existing:
            return hn

        attempts = 1
        while hn in existing and attempts < self.max_attempts:
            hn = self.generate()
            attempts += 1

        logger.log_hn_generation(attempts=attempts, unique=hn not in existing, roster_size=len(existing))
        return hn
