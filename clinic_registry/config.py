"""Configuration constants and settings for clinic_registry."""
import logging
import os

logger = logging.getLogger(__name__)

# Application constants
APP_VERSION = "0.1.0"
DOB_FORMAT = "%Y-%m-%d"

# Hospital number (HN) generation
DEFAULT_HN_PREFIX = "HN"
DEFAULT_HN_TIME_DIGITS = 4
DEFAULT_HN_RANDOM_DIGITS = 2
DEFAULT_HN_MAX_ATTEMPTS = 100

# Duplicate detection, on a 0-100 scale; matches must be strictly above it
DEFAULT_SIMILARITY_THRESHOLD = 85

# Environment variable names
ENV_HN_PREFIX = "CLINIC_HN_PREFIX"
ENV_HN_MAX_ATTEMPTS = "CLINIC_HN_MAX_ATTEMPTS"
ENV_SIMILARITY_THRESHOLD = "CLINIC_SIMILARITY_THRESHOLD"
ENV_LOG_FILE = "CLINIC_REGISTRY_LOGFILE"

# Logging configuration
LOGGER_NAME = "clinic_registry.main"

# File handling
DEFAULT_FILE_ENCODING = 'utf-8'
CSV_READ_ENCODING = 'utf-8-sig'  # tolerate a BOM from spreadsheet exports
VALID_OUTPUT_FORMATS = ['json', 'csv', 'tsv', 'stdout']
FILE_EXTENSION_MAP = {
    '.json': 'json',
    '.csv': 'csv',
    '.tsv': 'tsv',
}

# Patient import
REQUIRED_IMPORT_FIELDS = {
    'firstName': 'First name is required',
    'lastName': 'Last name is required',
    'nationalId': 'National ID is required',
    'dateOfBirth': 'Date of birth is required',
    'phone': 'Phone number is required',
}
NATIONAL_ID_LENGTH = 13
ALLERGY_SEPARATOR = ';'
OPTIONAL_IMPORT_FIELDS = ['firstNameEn', 'lastNameEn', 'email', 'address', 'bloodType']
DEFAULT_IMPORT_GENDER = 'male'
# Flat template columns -> keys of the nested emergencyContact entry
EMERGENCY_CONTACT_FIELDS = {
    'emergencyContactName': 'name',
    'emergencyContactRelationship': 'relationship',
    'emergencyContactPhone': 'phone',
}

# Metadata parameter keys (for consistency)
METADATA_PARAM_KEYS = [
    'first_name', 'last_name', 'roster', 'threshold', 'strip_whitespace',
    'count', 'prefix', 'input_csv', 'dry_run',
]

# Status constants
STATUS_SUCCESS = "success"
STATUS_SUCCESS_NO_DATA = "success_no_data"
STATUS_DUPLICATES_FOUND = "duplicates_found"
STATUS_REGISTERED = "registered"
STATUS_IMPORT_ALL = "import_all_rows_valid"
STATUS_IMPORT_PARTIAL = "import_partial"
STATUS_IMPORT_NONE = "import_no_valid_rows"


def get_env_or_default(key: str, default: str = "") -> str:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_int_env_or_default(key: str, default: int) -> int:
    """Get an integer environment variable, falling back to default if unset or malformed."""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {key}; using default {default}.")
        return default


def get_hn_prefix() -> str:
    return get_env_or_default(ENV_HN_PREFIX, DEFAULT_HN_PREFIX)


def get_hn_max_attempts() -> int:
    return get_int_env_or_default(ENV_HN_MAX_ATTEMPTS, DEFAULT_HN_MAX_ATTEMPTS)


def get_similarity_threshold() -> int:
    return get_int_env_or_default(ENV_SIMILARITY_THRESHOLD, DEFAULT_SIMILARITY_THRESHOLD)

