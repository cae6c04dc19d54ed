"""clinic_registry package"""
import logging

# Configure a null handler by default
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Expose public interface
from .exceptions import (
    ClinicRegistryError,
    ConcurrentModificationError,
    DuplicateHNError,
    InvalidPatientRecordError,
    PatientNotFoundError,
    RosterFileError,
)
from .matching import (
    DuplicateMatcher,
    MatchResult,
    MatchType,
    PatientRecord,
    calculate_similarity,
    levenshtein_distance,
)
from .registry import HNGenerator, PatientRepository, RegistrationService

__version__ = "0.1.0"

__all__ = [
    'PatientRecord',
    'MatchResult',
    'MatchType',
    'DuplicateMatcher',
    'calculate_similarity',
    'levenshtein_distance',
    'HNGenerator',
    'PatientRepository',
    'RegistrationService',
    'ClinicRegistryError',
    'InvalidPatientRecordError',
    'DuplicateHNError',
    'PatientNotFoundError',
    'ConcurrentModificationError',
    'RosterFileError',
]
