"""In-memory patient repository with a single-writer lock."""
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..exceptions import (
    ConcurrentModificationError,
    DuplicateHNError,
    InvalidPatientRecordError,
    PatientNotFoundError,
)
from ..matching.models import PatientRecord

logger = logging.getLogger(__name__)


class PatientRepository:
    """
    Explicit state container for the patient roster.

    Readers take immutable snapshots. Writers either hold :meth:`writer`
    around a check-then-write sequence, or pass the ``version`` they read
    to :meth:`add` so a concurrent commit is detected.
    """

    def __init__(self, patients: Iterable[PatientRecord] = ()):
        self._lock = threading.RLock()
        self._patients: List[PatientRecord] = []
        self._by_hn: Dict[str, int] = {}
        self._version = 0
        for patient in patients:
            self.add(patient)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._patients)

    def __iter__(self) -> Iterator[PatientRecord]:
        return iter(self.snapshot())

    def snapshot(self) -> Tuple[PatientRecord, ...]:
        with self._lock:
            return tuple(self._patients)

    @contextmanager
    def writer(self):
        """Hold the write lock for the duration of the block."""
        with self._lock:
            yield self

    def add(self, patient: PatientRecord, expected_version: Optional[int] = None) -> PatientRecord:
        if not patient.hn:
            raise InvalidPatientRecordError("Cannot commit a patient without a hospital number")

        with self._lock:
            if expected_version is not None and expected_version != self._version:
                raise ConcurrentModificationError(
                    f"Roster changed since snapshot (expected version {expected_version}, "
                    f"current {self._version})"
                )
            if patient.hn in self._by_hn:
                raise DuplicateHNError(f"Hospital number {patient.hn} is already registered")

            self._by_hn[patient.hn] = len(self._patients)
            self._patients.append(patient)
            self._version += 1
            logger.debug(f"Committed patient {patient.hn} (roster version {self._version})")
            return patient

    def update(self, hn: str, /, **changes: Any) -> PatientRecord:
        """Replace a patient with a copy carrying ``changes``. The HN itself cannot change."""
        if "hn" in changes:
            raise InvalidPatientRecordError("Hospital number cannot be changed")
        with self._lock:
            index = self._by_hn.get(hn)
            if index is None:
                raise PatientNotFoundError(hn)
            updated = replace(self._patients[index], **changes)
            self._patients[index] = updated
            self._version += 1
            return updated

    def get_by_hn(self, hn: str) -> Optional[PatientRecord]:
        with self._lock:
            index = self._by_hn.get(hn)
            return self._patients[index] if index is not None else None

    def find_by_national_id(self, national_id: str) -> Optional[PatientRecord]:
        if not national_id:
            return None
        for patient in self.snapshot():
            if patient.national_id == national_id:
                return patient
        return None
