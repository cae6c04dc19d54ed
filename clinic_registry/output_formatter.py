import csv
import io
import json
import logging
import sys
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from tabulate import tabulate

from .matching.models import MatchResult, PatientRecord
from .registry.registration import ImportValidationResult

logger = logging.getLogger(__name__)


class OutputFormatter:
    """Formats registry results (match results, records, plain dicts) for display or saving."""

    @staticmethod
    def to_row(item: Any) -> Dict[str, Any]:
        """Flatten a result object into a single-level dictionary."""
        if isinstance(item, (MatchResult, PatientRecord)):
            row = item.to_dict()
        elif isinstance(item, ImportValidationResult):
            row = {
                'row': item.row_number,
                'valid': item.is_valid,
                'firstName': item.row.get('firstName'),
                'lastName': item.row.get('lastName'),
                'errors': '; '.join(item.errors),
                'warnings': '; '.join(item.warnings),
            }
        elif isinstance(item, dict):
            row = dict(item)
        else:
            raise TypeError(f"Cannot format object of type {type(item).__name__}")

        # Nested entries (e.g. emergencyContact) become dotted columns and lists
        # (e.g. allergies) are joined so every value fits a CSV cell
        flat: Dict[str, Any] = {}
        for key, value in row.items():
            if isinstance(value, Mapping):
                for sub_key, sub_value in value.items():
                    flat[f"{key}.{sub_key}"] = sub_value
            elif isinstance(value, (list, tuple)):
                flat[key] = "; ".join(map(str, value))
            else:
                flat[key] = value
        return flat

    @staticmethod
    def to_rows(data: List[Any]) -> List[Dict[str, Any]]:
        return [OutputFormatter.to_row(item) for item in data]

    @staticmethod
    def _datetime_serializer(obj: Any) -> str:
        """
        Custom serializer for converting datetime.datetime and datetime.date
        objects into ISO 8601 string format for JSON compatibility.
        """
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    @staticmethod
    def format_as_json(data: List[Any], metadata: Optional[Dict[str, Any]] = None, indent: Optional[int] = 4) -> str:
        """
        Formats the data and metadata into a structured JSON string.

        The output JSON has two top-level keys: "metadata" and "data".
        Non-ASCII names (e.g. Thai) are written as-is rather than escaped.
        """
        structured_output = {
            "metadata": metadata or {},
            "data": OutputFormatter.to_rows(data),
        }
        return json.dumps(
            structured_output,
            default=OutputFormatter._datetime_serializer,
            indent=indent,
            ensure_ascii=False,
        )

    @staticmethod
    def _format_delimited(data: List[Any], delimiter: str) -> str:
        rows = OutputFormatter.to_rows(data)
        if not rows:
            return ""

        # Records can carry different detail fields; keep first-seen column order
        fieldnames: List[str] = []
        for row in rows:
            for key in row:
                if key not in fieldnames:
                    fieldnames.append(key)

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fieldnames, delimiter=delimiter, restval='')
        writer.writeheader()
        for row in rows:
            writer.writerow({k: v.isoformat() if isinstance(v, (datetime, date)) else v for k, v in row.items()})
        return output.getvalue()

    @staticmethod
    def format_as_csv(data: List[Any]) -> str:
        return OutputFormatter._format_delimited(data, ',')

    @staticmethod
    def format_as_tsv(data: List[Any]) -> str:
        return OutputFormatter._format_delimited(data, '\t')

    @staticmethod
    def format_as_console_table(data: List[Any], stream=sys.stdout) -> None:
        """Formats data as a console table and writes to the given stream."""
        if not data:
            logger.info("No data to display.")
            print("No data to display.", file=stream)
            return

        if isinstance(data[0], MatchResult):
            headers = ["HN", "Name", "DOB", "Match", "Similarity"]
            rows = [
                [
                    m.patient.hn,
                    m.patient.full_name,
                    m.patient.date_of_birth,
                    "EXACT MATCH" if m.is_exact else "SIMILAR",
                    f"{m.similarity}%",
                ]
                for m in data
            ]
        else:
            dict_rows = OutputFormatter.to_rows(data)
            headers = list(dict_rows[0].keys())
            rows = [[row.get(h, "") for h in headers] for row in dict_rows]

        print(tabulate(rows, headers=headers, tablefmt="grid"), file=stream)
