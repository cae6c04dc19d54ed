"""Shared pytest configuration and fixtures for clinic-registry tests."""

import csv
import random
import tempfile
from pathlib import Path
from typing import Dict, List

import pytest

from clinic_registry.matching import DuplicateMatcher, PatientRecord
from clinic_registry.registry import HNGenerator, PatientRepository, RegistrationService


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_patient_rows() -> List[Dict[str, str]]:
    """Raw roster rows in the clinic's camelCase layout."""
    return [
        {
            "hn": "HN000001",
            "firstName": "สมชาย",
            "lastName": "ใจดี",
            "nationalId": "1234567890123",
            "dateOfBirth": "1985-06-15",
            "phone": "081-234-5678",
            "allergies": "Penicillin;Seafood",
        },
        {
            "hn": "HN000002",
            "firstName": "สมหญิง",
            "lastName": "สวยงาม",
            "nationalId": "2345678901234",
            "dateOfBirth": "1990-03-22",
            "phone": "082-345-6789",
        },
        {
            "hn": "HN000003",
            "firstName": "John",
            "lastName": "Smith",
            "nationalId": "3456789012345",
            "dateOfBirth": "1978-01-30",
            "phone": "083-456-7890",
        },
        {
            "hn": "HN000004",
            "firstName": "Anna",
            "lastName": "Schmidt",
            "nationalId": "4567890123456",
            "dateOfBirth": "1975-12-03",
            "phone": "084-567-8901",
        },
    ]


@pytest.fixture
def sample_roster(sample_patient_rows) -> List[PatientRecord]:
    return [PatientRecord.from_mapping(row) for row in sample_patient_rows]


@pytest.fixture
def duplicate_matcher():
    """DuplicateMatcher with the default 85 threshold."""
    return DuplicateMatcher()


@pytest.fixture
def hn_generator():
    """HNGenerator using the real clock and a seeded random source."""
    return HNGenerator(rng=random.Random(1234))


@pytest.fixture
def repository(sample_roster):
    return PatientRepository(sample_roster)


@pytest.fixture
def registration_service(repository, duplicate_matcher, hn_generator):
    return RegistrationService(repository, matcher=duplicate_matcher, generator=hn_generator)


@pytest.fixture
def write_csv(temp_dir):
    """Write a list of dict rows to a CSV file and return its path."""

    def _write(name: str, rows: List[Dict[str, str]], encoding: str = "utf-8") -> Path:
        path = temp_dir / name
        fieldnames: List[str] = []
        for row in rows:
            for key in row:
                if key not in fieldnames:
                    fieldnames.append(key)
        with open(path, "w", newline="", encoding=encoding) as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, restval="")
            writer.writeheader()
            writer.writerows(rows)
        return path

    return _write


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Keep configuration overrides from the host environment out of tests."""
    for key in (
        "CLINIC_HN_PREFIX",
        "CLINIC_HN_MAX_ATTEMPTS",
        "CLINIC_SIMILARITY_THRESHOLD",
        "CLINIC_REGISTRY_LOGFILE",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
