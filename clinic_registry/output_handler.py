"""Output handling utilities for formatting and writing results."""
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .config import DEFAULT_FILE_ENCODING, FILE_EXTENSION_MAP
from .output_formatter import OutputFormatter

logger = logging.getLogger(__name__)


def determine_output_format(user_format: Optional[str], output_file_path: Optional[str]) -> str:
    """Determines the effective output format based on user input and file extension."""
    if user_format:
        return user_format

    if output_file_path:
        _, ext = os.path.splitext(output_file_path)
        ext = ext.lower()

        if ext in FILE_EXTENSION_MAP:
            return FILE_EXTENSION_MAP[ext]
        if ext:
            logger.warning(
                f"Output file extension '{ext}' for '{output_file_path}' is not recognized. "
                f"Defaulting to 'json' format."
            )
        else:
            logger.warning(f"No file extension for '{output_file_path}'. Defaulting to 'json' format.")
        return 'json'

    return 'stdout'


def format_metadata_summary(metadata_dict: Optional[Dict[str, Any]]) -> str:
    """Format metadata dictionary as comment lines."""
    if not metadata_dict:
        return ''
    return '\n'.join(f"# {k}: {v}" for k, v in metadata_dict.items())


def render_results(results: List[Any], output_format: str, metadata_dict: Optional[Dict[str, Any]] = None) -> str:
    """Render results as text in a file format (json, csv or tsv)."""
    if output_format == 'json':
        return OutputFormatter.format_as_json(results, metadata_dict)
    if output_format == 'csv':
        return OutputFormatter.format_as_csv(results)
    if output_format == 'tsv':
        return OutputFormatter.format_as_tsv(results)
    raise ValueError(f"Unsupported output format: {output_format}")


def handle_output(
    results: List[Any],
    output_file_path: Optional[str],
    display_name: str,
    output_format: str,
    metadata_dict: Optional[Dict[str, Any]] = None,
    stream=None,
) -> None:
    """
    Write results to a file, or print them to ``stream`` (stdout by default).

    The 'stdout' format prints a metadata summary followed by a grid table.
    """
    stream = stream or sys.stdout

    if output_format == 'stdout' and not output_file_path:
        summary = format_metadata_summary(metadata_dict)
        if summary:
            print(summary, file=stream)
        OutputFormatter.format_as_console_table(results, stream=stream)
        return

    if output_format == 'stdout':
        # A file was requested without a file format; fall back to json
        output_format = 'json'

    content = render_results(results, output_format, metadata_dict)

    if output_file_path:
        output_dir = os.path.dirname(output_file_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output_file_path, 'w', encoding=DEFAULT_FILE_ENCODING, newline='') as f:
            f.write(content)
        logger.info(f"{display_name}: wrote {len(results)} results to '{output_file_path}' ({output_format}).")
    else:
        print(content, file=stream)
