"""Patient registration workflow: duplicate check, HN minting and commit."""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import (
    DEFAULT_IMPORT_GENDER,
    DOB_FORMAT,
    EMERGENCY_CONTACT_FIELDS,
    NATIONAL_ID_LENGTH,
    OPTIONAL_IMPORT_FIELDS,
    REQUIRED_IMPORT_FIELDS,
    STATUS_DUPLICATES_FOUND,
    STATUS_REGISTERED,
)
from ..exceptions import InvalidPatientRecordError
from ..matching import DuplicateMatcher, MatchResult, PatientRecord
from ..secure_logging import get_secure_logger
from .hn_generator import HNGenerator
from .repository import PatientRepository

logger = get_secure_logger(__name__)


def apply_import_defaults(details: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Shape the passthrough fields of an imported row like a registered patient.

    Optional columns default to empty strings, gender to male and allergies to
    an empty list. The flat emergency contact columns are nested under
    ``emergencyContact`` and ``lastVisit`` starts out unset.
    """
    shaped = dict(details)
    for key in OPTIONAL_IMPORT_FIELDS:
        shaped[key] = shaped.get(key) or ""
    shaped["gender"] = shaped.get("gender") or DEFAULT_IMPORT_GENDER
    shaped["allergies"] = shaped.get("allergies") or []
    shaped["emergencyContact"] = {
        nested: shaped.pop(column, None) or "" for column, nested in EMERGENCY_CONTACT_FIELDS.items()
    }
    shaped["lastVisit"] = None
    return shaped


@dataclass
class RegistrationResult:
    status: str
    patient: Optional[PatientRecord] = None
    matches: List[MatchResult] = field(default_factory=list)

    @property
    def registered(self) -> bool:
        return self.status == STATUS_REGISTERED


@dataclass
class ImportValidationResult:
    row: Dict[str, Any]
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    record: Optional[PatientRecord] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def row_number(self) -> Optional[int]:
        return self.row.get("_row_number")


@dataclass
class ImportSummary:
    results: List[ImportValidationResult] = field(default_factory=list)
    imported: List[PatientRecord] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return sum(1 for r in self.results if r.is_valid)

    @property
    def rejected(self) -> List[ImportValidationResult]:
        return [r for r in self.results if not r.is_valid]


class RegistrationService:
    """
    Registers new patients against a :class:`PatientRepository`.

    The duplicate check, HN generation and commit all run while holding the
    repository's write lock, so two registrations in the same process cannot
    both pass the check or receive the same HN.
    """

    def __init__(
        self,
        repository: PatientRepository,
        matcher: Optional[DuplicateMatcher] = None,
        generator: Optional[HNGenerator] = None,
    ):
        self.repository = repository
        self.matcher = matcher or DuplicateMatcher()
        self.generator = generator or HNGenerator()

    def check_duplicates(self, candidate: PatientRecord) -> List[MatchResult]:
        return self.matcher.find_similar(candidate, self.repository.snapshot())

    def register(self, candidate: PatientRecord, override_duplicates: bool = False) -> RegistrationResult:
        """
        Commit ``candidate`` under a freshly generated HN.

        If similar patients exist and ``override_duplicates`` is False nothing
        is committed; the matches are returned for a human to review.
        """
        with self.repository.writer():
            roster = self.repository.snapshot()
            version = self.repository.version
            matches = self.matcher.find_similar(candidate, roster)
            if matches and not override_duplicates:
                logger.log_registration(None, STATUS_DUPLICATES_FOUND, len(matches))
                return RegistrationResult(STATUS_DUPLICATES_FOUND, matches=matches)

            hn = self.generator.generate_unique(roster)
            details = dict(candidate.details)
            details.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
            record = PatientRecord(
                first_name=candidate.first_name,
                last_name=candidate.last_name,
                hn=hn,
                national_id=candidate.national_id,
                date_of_birth=candidate.date_of_birth,
                details=details,
            )
            self.repository.add(record, expected_version=version)

        logger.log_registration(hn, STATUS_REGISTERED, len(matches))
        return RegistrationResult(STATUS_REGISTERED, patient=record, matches=matches)

    def validate_import_row(self, row: Mapping[str, Any]) -> ImportValidationResult:
        """Check one CSV import row; errors block the import, warnings do not."""
        result = ImportValidationResult(row=dict(row))

        for key, message in REQUIRED_IMPORT_FIELDS.items():
            if not str(row.get(key) or "").strip():
                result.errors.append(message)

        national_id = str(row.get("nationalId") or "").strip()
        if national_id and len(national_id) != NATIONAL_ID_LENGTH:
            result.errors.append(f"National ID must be {NATIONAL_ID_LENGTH} digits")

        dob = str(row.get("dateOfBirth") or "").strip()
        if dob:
            try:
                datetime.strptime(dob, DOB_FORMAT)
            except ValueError:
                result.errors.append("Invalid date format")

        if national_id:
            existing = self.repository.find_by_national_id(national_id)
            if existing is not None:
                result.warnings.append(
                    f"Duplicate National ID - existing patient: {existing.first_name} {existing.last_name}"
                )

        if result.errors:
            return result

        try:
            record = PatientRecord.from_mapping(row)
            result.record = replace(record, details=apply_import_defaults(record.details))
        except InvalidPatientRecordError as e:
            result.errors.append(str(e))
            return result

        for match in self.check_duplicates(result.record):
            label = "Exact name match" if match.is_exact else f"Similar name ({match.similarity}%)"
            result.warnings.append(f"{label} - existing patient {match.patient.hn}")
        return result

    def import_patients(self, rows: Iterable[Mapping[str, Any]], dry_run: bool = False) -> ImportSummary:
        """
        Validate every row, then register the valid ones.

        Name duplicates only produce warnings during import, so registration
        overrides them. With ``dry_run`` only validation happens.
        """
        summary = ImportSummary()
        for row in rows:
            summary.results.append(self.validate_import_row(row))

        if not dry_run:
            for result in summary.results:
                if not result.is_valid:
                    continue
                outcome = self.register(result.record, override_duplicates=True)
                summary.imported.append(outcome.patient)

        logger.log_import(len(summary.results), summary.valid_count, len(summary.imported))
        return summary
