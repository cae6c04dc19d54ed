"""Custom exceptions for clinic_registry."""


class ClinicRegistryError(Exception):
    """Base class for all clinic_registry errors."""
    pass


class InvalidPatientRecordError(ClinicRegistryError, ValueError):
    """Raised when a patient record has missing or mistyped fields."""
    pass


class DuplicateHNError(ClinicRegistryError):
    """Raised when committing a record whose hospital number is already taken."""
    pass


class PatientNotFoundError(ClinicRegistryError, KeyError):
    """Raised when no patient exists for a given hospital number."""
    pass


class ConcurrentModificationError(ClinicRegistryError):
    """Raised when the roster changed between snapshot and commit."""
    pass


class RosterFileError(ClinicRegistryError):
    """Raised when a roster CSV file cannot be read."""
    pass
