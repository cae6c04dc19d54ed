"""Main module for the clinic_registry package."""
import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from dotenv import load_dotenv

from .config import (
    ENV_LOG_FILE,
    LOGGER_NAME,
    STATUS_DUPLICATES_FOUND,
    STATUS_IMPORT_ALL,
    STATUS_IMPORT_NONE,
    STATUS_IMPORT_PARTIAL,
    STATUS_SUCCESS_NO_DATA,
    VALID_OUTPUT_FORMATS,
    get_hn_max_attempts,
    get_hn_prefix,
    get_similarity_threshold,
)
from .exceptions import ClinicRegistryError
from .matching import DuplicateMatcher, PatientRecord
from .metadata import create_metadata_dict
from .output_handler import determine_output_format, handle_output
from .registry import HNGenerator, PatientRepository, RegistrationService, demo_patients
from .secure_logging import configure_secure_logging
from .utils import load_roster_from_csv, read_patient_rows_from_csv


def _add_common_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        '--roster', '-r', type=str, metavar='CSV_FILE_PATH',
        help='CSV file with the existing patient roster (firstName, lastName, hn, ...).\n'
             'The built-in demo roster is used when omitted.'
    )
    subparser.add_argument(
        '--output', '-o', type=str, metavar='FILE_PATH',
        help='Optional path to save results as a JSON, CSV, or TSV file.'
    )
    subparser.add_argument(
        '--format', '-f', type=str, choices=VALID_OUTPUT_FORMATS, default=None,
        help='Output format: json, csv, tsv, or stdout (table). Inferred from -o extension if not set.'
    )


def setup_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='clinic-registry',
        description="Patient registry tools: duplicate-name detection and hospital number generation.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        '--debug', '-v',
        action='store_true',
        help='Enable verbose debug output for troubleshooting.'
    )
    subparsers = parser.add_subparsers(
        dest='action', help='The action to perform.', required=True, metavar='ACTION'
    )

    # --- Sub-command: check-duplicates ---
    parser_check = subparsers.add_parser(
        'check-duplicates', help='List existing patients whose name matches a new patient.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_check.add_argument('--first-name', '-fn', type=str, required=True, metavar='NAME',
        help='First name of the patient about to be registered.')
    parser_check.add_argument('--last-name', '-ln', type=str, required=True, metavar='NAME',
        help='Last name of the patient about to be registered.')
    parser_check.add_argument('--threshold', type=int, default=None, metavar='0-100',
        help='Similarity a name must exceed to be reported (default: 85, or $CLINIC_SIMILARITY_THRESHOLD).')
    parser_check.add_argument('--strip-whitespace', action='store_true',
        help='Ignore leading/trailing whitespace in name fields when comparing.')
    _add_common_arguments(parser_check)

    # --- Sub-command: generate-hn ---
    parser_hn = subparsers.add_parser(
        'generate-hn', help='Generate hospital numbers unique against the roster.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_hn.add_argument('--count', '-n', type=int, default=1, metavar='N',
        help='Number of identifiers to generate; each is also unique against the previous ones (default: 1).')
    parser_hn.add_argument('--prefix', type=str, default=None,
        help='Identifier prefix (default: HN, or $CLINIC_HN_PREFIX).')
    _add_common_arguments(parser_hn)

    # --- Sub-command: import-patients ---
    parser_import = subparsers.add_parser(
        'import-patients', help='Validate a patient CSV and register the valid rows.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_import.add_argument('--input-csv', '-ic', type=str, required=True, metavar='CSV_FILE_PATH',
        help='CSV file of new patients in the import template layout.')
    parser_import.add_argument('--dry-run', action='store_true',
        help='Only validate; do not register anything.')
    _add_common_arguments(parser_import)

    return parser


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    # Patient data is only shown unmasked in debug runs; results stay on stdout
    configure_secure_logging(
        level=logging.DEBUG if debug else logging.INFO,
        log_file=log_file,
        production_mode=not debug,
    )


def load_roster(args: argparse.Namespace, logger: logging.Logger) -> List[PatientRecord]:
    if args.roster:
        return load_roster_from_csv(args.roster, logger)
    logger.info("No roster file given; using the demo roster.")
    return demo_patients()


def build_matcher(threshold: Optional[int] = None, strip_whitespace: bool = False) -> DuplicateMatcher:
    """Create the matcher, turning out-of-range settings into a ClinicRegistryError."""
    if threshold is None:
        threshold = get_similarity_threshold()
    try:
        return DuplicateMatcher(similarity_threshold=threshold, strip_whitespace=strip_whitespace)
    except ValueError as e:
        raise ClinicRegistryError(f"Invalid similarity threshold: {e}") from e


def build_generator(prefix: Optional[str] = None) -> HNGenerator:
    """Create the HN generator, turning out-of-range settings into a ClinicRegistryError."""
    try:
        return HNGenerator(
            prefix=prefix if prefix is not None else get_hn_prefix(),
            max_attempts=get_hn_max_attempts(),
        )
    except ValueError as e:
        raise ClinicRegistryError(f"Invalid HN generator settings: {e}") from e


def handle_check_duplicates(args, logger) -> Tuple[List[Any], str, Optional[str]]:
    matcher = build_matcher(args.threshold, args.strip_whitespace)

    candidate = PatientRecord(first_name=args.first_name, last_name=args.last_name)
    matches = matcher.find_similar(candidate, load_roster(args, logger))
    if matches:
        logger.warning(f"Found {len(matches)} possible duplicate(s); review before registering.")
    status = STATUS_DUPLICATES_FOUND if matches else STATUS_SUCCESS_NO_DATA
    return matches, "Duplicate Name Check", status


def handle_generate_hn(args, logger) -> Tuple[List[Any], str, Optional[str]]:
    if args.count < 1:
        raise ClinicRegistryError("--count must be at least 1")
    generator = build_generator(args.prefix)
    known = [p.hn for p in load_roster(args, logger) if p.hn]
    results = []
    for _ in range(args.count):
        hn = generator.generate_unique(known)
        known.append(hn)
        results.append({'hn': hn})
    return results, "Generated Hospital Numbers", None


def handle_import_patients(args, logger) -> Tuple[List[Any], str, Optional[str]]:
    service = RegistrationService(
        PatientRepository(load_roster(args, logger)),
        matcher=build_matcher(),
        generator=build_generator(),
    )
    rows = read_patient_rows_from_csv(args.input_csv, logger)
    summary = service.import_patients(rows, dry_run=args.dry_run)

    for rejected in summary.rejected:
        logger.warning(f"Row {rejected.row_number} rejected: {'; '.join(rejected.errors)}")

    if summary.valid_count == 0:
        status = STATUS_IMPORT_NONE
    elif summary.valid_count == len(summary.results):
        status = STATUS_IMPORT_ALL
    else:
        status = STATUS_IMPORT_PARTIAL

    if args.dry_run:
        return summary.results, "Patient Import Validation", status
    return summary.imported, "Imported Patients", status


ACTION_HANDLERS = {
    'check-duplicates': handle_check_duplicates,
    'generate-hn': handle_generate_hn,
    'import-patients': handle_import_patients,
}


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    parser = setup_arg_parser()
    args = parser.parse_args(argv)

    debug = getattr(args, 'debug', False)
    setup_logging(debug, os.getenv(ENV_LOG_FILE))
    logger = logging.getLogger(LOGGER_NAME)
    logger.debug(f"Parsed action: {args.action}")

    handler = ACTION_HANDLERS[args.action]
    start_time = datetime.now(timezone.utc)
    try:
        results, display_name, status = handler(args, logger)
    except ClinicRegistryError as e:
        logger.error(f"{args.action} failed: {e}", exc_info=debug)
        return 1

    execution_duration_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
    metadata_dict = create_metadata_dict(start_time, execution_duration_ms, args, display_name, results, status)

    effective_format = determine_output_format(args.format, args.output)
    handle_output(results, args.output, display_name, effective_format, metadata_dict)

    logger.info(f"--- {display_name} finished ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
