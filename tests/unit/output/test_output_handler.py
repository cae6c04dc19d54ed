"""Unit tests for clinic_registry.output_handler and clinic_registry.metadata modules."""

import json
from argparse import Namespace
from datetime import datetime, timezone
from io import StringIO

import pytest

from clinic_registry.config import APP_VERSION
from clinic_registry.metadata import create_metadata_dict, extract_parameters
from clinic_registry.output_handler import (
    determine_output_format,
    format_metadata_summary,
    handle_output,
    render_results,
)


class TestDetermineOutputFormat:
    """Test output format inference."""

    def test_explicit_format_wins(self):
        assert determine_output_format("csv", "out.json") == "csv"

    @pytest.mark.parametrize(
        "path,expected",
        [("out.json", "json"), ("out.CSV", "csv"), ("out.tsv", "tsv")],
    )
    def test_from_extension(self, path, expected):
        assert determine_output_format(None, path) == expected

    def test_unknown_extension_defaults_to_json(self):
        assert determine_output_format(None, "out.xlsx") == "json"

    def test_no_extension_defaults_to_json(self):
        assert determine_output_format(None, "results") == "json"

    def test_no_file_means_stdout(self):
        assert determine_output_format(None, None) == "stdout"


class TestRenderResults:
    """Test text rendering dispatch."""

    def test_render_json(self):
        parsed = json.loads(render_results([{"hn": "HN1"}], "json", {"status": "success"}))
        assert parsed["metadata"]["status"] == "success"

    def test_render_unknown(self):
        with pytest.raises(ValueError, match="Unsupported output format"):
            render_results([], "xml")


class TestHandleOutput:
    """Test writing results to files and streams."""

    def test_stdout_table_with_metadata(self):
        stream = StringIO()
        handle_output([{"hn": "HN1"}], None, "Test", "stdout", {"status": "success"}, stream=stream)
        output = stream.getvalue()

        assert "# status: success" in output
        assert "HN1" in output

    def test_print_json_to_stream(self):
        stream = StringIO()
        handle_output([{"hn": "HN1"}], None, "Test", "json", stream=stream)
        assert json.loads(stream.getvalue())["data"] == [{"hn": "HN1"}]

    def test_write_file(self, temp_dir):
        path = temp_dir / "nested" / "out.csv"
        handle_output([{"hn": "HN1"}], str(path), "Test", "csv")
        assert path.read_text(encoding="utf-8").splitlines() == ["hn", "HN1"]

    def test_stdout_format_with_file_writes_json(self, temp_dir):
        path = temp_dir / "out"
        handle_output([{"hn": "HN1"}], str(path), "Test", "stdout")
        assert json.loads(path.read_text(encoding="utf-8"))["data"] == [{"hn": "HN1"}]


class TestMetadata:
    """Test metadata generation."""

    def test_format_metadata_summary(self):
        assert format_metadata_summary({"a": 1, "b": "x"}) == "# a: 1\n# b: x"
        assert format_metadata_summary(None) == ""

    def test_extract_parameters(self):
        args = Namespace(action="check-duplicates", first_name="John", last_name="Smith",
                         roster=None, debug=False, threshold=85)
        assert extract_parameters(args) == {"first_name": "John", "last_name": "Smith", "threshold": "85"}

    def test_create_metadata_dict(self):
        start = datetime(2024, 12, 20, 9, 0, tzinfo=timezone.utc)
        args = Namespace(action="generate-hn", count=2, prefix=None)
        metadata = create_metadata_dict(start, 12, args, "Generated Hospital Numbers", [{"hn": "HN1"}])

        assert metadata["timestamp_utc"] == "2024-12-20T09:00:00+00:00"
        assert metadata["action"] == "generate-hn"
        assert metadata["tool_version"] == APP_VERSION
        assert metadata["execution_duration_ms"] == 12
        assert metadata["result_count"] == 1
        assert metadata["parameters"] == {"count": "2"}
        assert metadata["status"] == "success"

    def test_status_defaults(self):
        start = datetime.now(timezone.utc)
        args = Namespace(action="check-duplicates")
        assert create_metadata_dict(start, 0, args, "x", [])["status"] == "success_no_data"
        assert create_metadata_dict(start, 0, args, "x", [], status="custom")["status"] == "custom"
