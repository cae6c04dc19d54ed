"""Patient roster state, hospital number generation and registration."""

from .hn_generator import HNGenerator
from .registration import (
    ImportSummary,
    ImportValidationResult,
    RegistrationResult,
    RegistrationService,
)
from .repository import PatientRepository
from .seed import demo_patients

__all__ = [
    "HNGenerator",
    "PatientRepository",
    "RegistrationService",
    "RegistrationResult",
    "ImportValidationResult",
    "ImportSummary",
    "demo_patients",
]
