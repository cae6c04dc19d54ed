"""Unit tests for the clinic_registry command line interface."""

import json
import logging
import re

import pytest

from clinic_registry import secure_logging
from clinic_registry.main import main, setup_arg_parser


@pytest.fixture(autouse=True)
def restore_root_logging(monkeypatch):
    """main() reconfigures the root logger; put the original handlers back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    monkeypatch.setattr(secure_logging, "_PRODUCTION_MODE", True)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def roster_csv(write_csv, sample_patient_rows):
    return str(write_csv("roster.csv", sample_patient_rows))


def _run_json(capsys, argv):
    exit_code = main(argv + ["--format", "json"])
    return exit_code, json.loads(capsys.readouterr().out)


class TestArgParser:
    """Test command line parsing."""

    def test_action_required(self):
        with pytest.raises(SystemExit):
            setup_arg_parser().parse_args([])

    def test_check_duplicates_requires_names(self):
        with pytest.raises(SystemExit):
            setup_arg_parser().parse_args(["check-duplicates", "-fn", "John"])

    def test_defaults(self):
        args = setup_arg_parser().parse_args(["generate-hn"])
        assert args.count == 1
        assert args.prefix is None
        assert args.roster is None
        assert args.format is None


class TestCheckDuplicatesCommand:
    """Test the check-duplicates action."""

    def test_reports_similar_patient(self, capsys, roster_csv):
        exit_code, output = _run_json(
            capsys, ["check-duplicates", "-fn", "John", "-ln", "Smyth", "--roster", roster_csv]
        )

        assert exit_code == 0
        assert output["metadata"]["status"] == "duplicates_found"
        assert output["metadata"]["action"] == "check-duplicates"
        assert output["data"][0]["hn"] == "HN000003"
        assert output["data"][0]["matchType"] == "similar"
        assert output["data"][0]["similarity"] == 90

    def test_no_matches(self, capsys, roster_csv):
        exit_code, output = _run_json(
            capsys, ["check-duplicates", "-fn", "Malee", "-ln", "Srisuk", "--roster", roster_csv]
        )

        assert exit_code == 0
        assert output["data"] == []
        assert output["metadata"]["status"] == "success_no_data"

    def test_demo_roster_table(self, capsys):
        """Test the built-in roster and the default table output."""
        exit_code = main(["check-duplicates", "-fn", "สมชาย", "-ln", "ใจดี"])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "EXACT MATCH" in out
        assert "HN000001" in out
        assert "# status: duplicates_found" in out

    def test_threshold_from_environment(self, capsys, roster_csv, monkeypatch):
        """Test a stricter threshold from the environment drops the 90% match."""
        monkeypatch.setenv("CLINIC_SIMILARITY_THRESHOLD", "95")
        _, output = _run_json(capsys, ["check-duplicates", "-fn", "John", "-ln", "Smyth", "-r", roster_csv])
        assert output["data"] == []

    def test_invalid_threshold(self, capsys):
        assert main(["check-duplicates", "-fn", "John", "-ln", "Smith", "--threshold", "150"]) == 1
        assert capsys.readouterr().out == ""

    def test_missing_roster(self, temp_dir):
        argv = ["check-duplicates", "-fn", "John", "-ln", "Smith", "--roster", str(temp_dir / "missing.csv")]
        assert main(argv) == 1

    def test_debug_disables_masking(self):
        """Test --debug switches the process to unmasked logging."""
        assert main(["--debug", "check-duplicates", "-fn", "John", "-ln", "Smith"]) == 0
        assert not secure_logging.is_production_mode()

    def test_default_run_masks_patient_data(self):
        assert main(["check-duplicates", "-fn", "John", "-ln", "Smith"]) == 0
        assert secure_logging.is_production_mode()


class TestGenerateHNCommand:
    """Test the generate-hn action."""

    def test_generates_distinct_numbers(self, capsys, roster_csv):
        exit_code, output = _run_json(capsys, ["generate-hn", "--count", "3", "--roster", roster_csv])

        hns = [row["hn"] for row in output["data"]]
        assert exit_code == 0
        assert len(set(hns)) == 3
        assert all(re.match(r"^HN\d{6}$", hn) for hn in hns)
        assert not set(hns) & {"HN000001", "HN000002", "HN000003", "HN000004"}
        assert output["metadata"]["result_count"] == 3
        assert output["metadata"]["parameters"]["count"] == "3"

    def test_custom_prefix(self, capsys):
        _, output = _run_json(capsys, ["generate-hn", "--prefix", "PT"])
        assert re.match(r"^PT\d{6}$", output["data"][0]["hn"])

    def test_invalid_count(self):
        assert main(["generate-hn", "--count", "0"]) == 1

    def test_invalid_max_attempts_from_environment(self, capsys, monkeypatch):
        """Test a non-positive retry bound from the environment exits with an error."""
        monkeypatch.setenv("CLINIC_HN_MAX_ATTEMPTS", "0")
        assert main(["generate-hn"]) == 1
        assert capsys.readouterr().out == ""

    def test_write_to_file(self, temp_dir):
        path = temp_dir / "numbers.csv"
        assert main(["generate-hn", "-n", "2", "-o", str(path)]) == 0

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "hn"
        assert len(lines) == 3


class TestImportPatientsCommand:
    """Test the import-patients action."""

    @pytest.fixture
    def import_csv(self, write_csv):
        rows = [
            {"firstName": "Malee", "lastName": "Srisuk", "nationalId": "5678901234567",
             "dateOfBirth": "1992-11-02", "phone": "089-111-2222", "allergies": "Latex"},
            {"firstName": "Somsak", "lastName": "Dee", "nationalId": "6789012345678",
             "dateOfBirth": "1988-04-09", "phone": ""},
        ]
        return str(write_csv("import.csv", rows))

    def test_imports_valid_rows(self, capsys, roster_csv, import_csv):
        exit_code, output = _run_json(capsys, ["import-patients", "-ic", import_csv, "-r", roster_csv])

        assert exit_code == 0
        assert output["metadata"]["status"] == "import_partial"
        assert len(output["data"]) == 1
        imported = output["data"][0]
        assert imported["firstName"] == "Malee"
        assert re.match(r"^HN\d{6}$", imported["hn"])
        assert imported["allergies"] == "Latex"
        assert "createdAt" in imported
        assert imported["gender"] == "male"
        assert imported["emergencyContact.name"] == ""
        assert imported["lastVisit"] is None

    def test_dry_run_reports_validation(self, capsys, roster_csv, import_csv):
        exit_code, output = _run_json(
            capsys, ["import-patients", "-ic", import_csv, "-r", roster_csv, "--dry-run"]
        )

        assert exit_code == 0
        assert [row["valid"] for row in output["data"]] == [True, False]
        assert output["data"][1]["errors"] == "Phone number is required"
        assert output["data"][1]["row"] == 2

    def test_missing_input_file(self, temp_dir):
        assert main(["import-patients", "-ic", str(temp_dir / "missing.csv")]) == 1

    def test_invalid_threshold_from_environment(self, capsys, monkeypatch, import_csv):
        """Test an out-of-range threshold from the environment exits with an error."""
        monkeypatch.setenv("CLINIC_SIMILARITY_THRESHOLD", "200")
        assert main(["import-patients", "-ic", import_csv]) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_max_attempts_from_environment(self, monkeypatch, import_csv):
        monkeypatch.setenv("CLINIC_HN_MAX_ATTEMPTS", "-5")
        assert main(["import-patients", "-ic", import_csv]) == 1
