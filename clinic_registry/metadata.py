"""Metadata generation utilities for clinic_registry."""
from datetime import datetime
from typing import Any, Dict, Optional

from .config import APP_VERSION, METADATA_PARAM_KEYS, STATUS_SUCCESS, STATUS_SUCCESS_NO_DATA


def extract_parameters(args: Any) -> Dict[str, str]:
    """Extract relevant parameters from parsed CLI args for metadata."""
    return {
        k: str(v) for k, v in vars(args).items()
        if k in METADATA_PARAM_KEYS and v is not None
    }


def create_metadata_dict(
    start_time: datetime,
    execution_duration_ms: int,
    args: Any,
    display_name: str,
    results: Any,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    """Create the metadata dictionary attached to command output."""
    results_count = len(results) if results else 0
    if status is None:
        status = STATUS_SUCCESS if results else STATUS_SUCCESS_NO_DATA

    return {
        'timestamp_utc': start_time.isoformat(),
        'action': args.action,
        'display_name': display_name,
        'tool_version': APP_VERSION,
        'execution_duration_ms': execution_duration_ms,
        'result_count': results_count,
        'parameters': extract_parameters(args),
        'status': status,
    }
