"""Patient records and duplicate match results."""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..config import ALLERGY_SEPARATOR, DOB_FORMAT
from ..exceptions import InvalidPatientRecordError


class MatchType:
    """How a roster patient matched a candidate name."""
    EXACT = "exact"
    SIMILAR = "similar"


# camelCase keys used by the clinic front end -> record attribute
_CORE_FIELD_KEYS = {
    "firstName": "first_name",
    "first_name": "first_name",
    "lastName": "last_name",
    "last_name": "last_name",
    "hn": "hn",
    "nationalId": "national_id",
    "national_id": "national_id",
    "dateOfBirth": "date_of_birth",
    "date_of_birth": "date_of_birth",
}


def parse_dob(value: Any) -> Optional[date]:
    """Coerce a date of birth value into a date, accepting YYYY-MM-DD strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), DOB_FORMAT).date()
        except ValueError:
            raise InvalidPatientRecordError(f"Invalid date of birth '{value}', expected YYYY-MM-DD")
    raise InvalidPatientRecordError(f"Unsupported date of birth type: {type(value).__name__}")


@dataclass(frozen=True)
class PatientRecord:
    """
    Read-only view of a registered (or about to be registered) patient.

    Only the name fields take part in duplicate detection. ``details`` carries
    display-only fields (English names, phone, allergies, ...) through
    unchanged.
    """
    first_name: str
    last_name: str
    hn: Optional[str] = None
    national_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    details: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        for attr in ("first_name", "last_name"):
            if not isinstance(getattr(self, attr), str):
                raise InvalidPatientRecordError(
                    f"{attr} must be a string, got {type(getattr(self, attr)).__name__}"
                )
        for attr in ("hn", "national_id"):
            value = getattr(self, attr)
            if value is not None and not isinstance(value, str):
                raise InvalidPatientRecordError(f"{attr} must be a string or None, got {type(value).__name__}")
        if self.date_of_birth is not None and not isinstance(self.date_of_birth, date):
            raise InvalidPatientRecordError("date_of_birth must be a date or None")
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def with_hn(self, hn: str) -> "PatientRecord":
        return replace(self, hn=hn)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatientRecord":
        """Build a record from a raw dict such as a CSV row or a front-end payload."""
        core: Dict[str, Any] = {}
        details: Dict[str, Any] = {}
        for key, value in data.items():
            if key.startswith("_"):  # bookkeeping keys such as _row_number
                continue
            attr = _CORE_FIELD_KEYS.get(key)
            if attr:
                core[attr] = value
            elif key == "allergies" and isinstance(value, str):
                details[key] = [a.strip() for a in value.split(ALLERGY_SEPARATOR) if a.strip()]
            else:
                details[key] = value

        if "first_name" not in core or "last_name" not in core:
            raise InvalidPatientRecordError("Patient record requires firstName and lastName")

        # Empty identifiers from CSV cells mean "not set"
        for attr in ("hn", "national_id"):
            if core.get(attr) == "":
                core[attr] = None
        core["date_of_birth"] = parse_dob(core.get("date_of_birth"))
        return cls(details=details, **core)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hn": self.hn,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "nationalId": self.national_id,
            "dateOfBirth": self.date_of_birth,
            **self.details,
        }


@dataclass(frozen=True)
class MatchResult:
    """A roster patient flagged as a possible duplicate, with its 0-100 similarity."""
    patient: PatientRecord
    match_type: str
    similarity: int  # 0-100

    @property
    def is_exact(self) -> bool:
        return self.match_type == MatchType.EXACT

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.patient.to_dict(),
            "matchType": self.match_type,
            "similarity": self.similarity,
        }
