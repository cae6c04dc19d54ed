"""
Secure logging utilities for patient registry operations.

This module provides logging helpers that keep patient identifiers out of
log output while still leaving an audit trail of duplicate checks, hospital
number generation and registrations.
"""

import logging
import re
from typing import Any, Optional


class SecureLogger:
    """
    Secure logging wrapper that sanitizes sensitive data before logging.

    Names are never passed to the audit helpers; free-text messages are
    scrubbed of credentials and, in production mode, of dates, national
    IDs and phone numbers.
    """

    # Patterns that should never appear in logs
    SENSITIVE_PATTERNS = [
        r'(?i)(password)[\'"]?\s*[:=]\s*[\'"]?([^\s\'"]+)',
        r'(?i)(secret)[\'"]?\s*[:=]\s*[\'"]?([^\s\'"]+)',
        r'(?i)(token)[\'"]?\s*[:=]\s*[\'"]?([^\s\'"]+)',
    ]

    # Patient data patterns that should be minimized in logs
    PATIENT_DATA_PATTERNS = [
        (r"\b\d{4}-\d{2}-\d{2}\b", "***DATE***"),  # ISO dates (DOB)
        (r"\b\d{1,2}/\d{1,2}/\d{4}\b", "***DATE***"),  # DD/MM/YYYY
        (r"\b\d{13}\b", "***NATIONAL_ID***"),  # Thai national ID
        (r"\b0\d{1,2}-\d{3}-\d{4}\b", "***PHONE***"),  # Thai phone numbers
    ]

    def __init__(self, logger: logging.Logger, production_mode: Optional[bool] = None):
        """
        Initialize secure logger wrapper.

        Args:
            logger: The underlying logger instance
            production_mode: If True, applies strict security filtering. None
                follows the process-wide setting from configure_secure_logging.
        """
        self.logger = logger
        self.production_mode = production_mode

    @property
    def masks_patient_data(self) -> bool:
        if self.production_mode is None:
            return is_production_mode()
        return self.production_mode

    def _sanitize_message(self, message: str) -> str:
        """
        Sanitize log message by removing/masking sensitive data.

        Args:
            message: Original log message

        Returns:
            Sanitized message safe for logging
        """
        sanitized = message

        for pattern in self.SENSITIVE_PATTERNS:
            sanitized = re.sub(pattern, r"\1=***REDACTED***", sanitized)

        if self.masks_patient_data:
            for pattern, replacement in self.PATIENT_DATA_PATTERNS:
                sanitized = re.sub(pattern, replacement, sanitized)

        return sanitized

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with security filtering."""
        if self.logger.isEnabledFor(logging.DEBUG):
            sanitized = self._sanitize_message(message)
            self.logger.debug(sanitized, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with security filtering."""
        sanitized = self._sanitize_message(message)
        self.logger.info(sanitized, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with security filtering."""
        sanitized = self._sanitize_message(message)
        self.logger.warning(sanitized, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message with security filtering."""
        sanitized = self._sanitize_message(message)
        self.logger.error(sanitized, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception message with security filtering."""
        sanitized = self._sanitize_message(message)
        self.logger.exception(sanitized, **kwargs)

    def log_duplicate_check(
        self,
        roster_size: int,
        exact_count: int,
        similar_count: int,
        duration_ms: Optional[float] = None,
    ) -> None:
        """
        Log a duplicate-name check without exposing the names compared.

        Args:
            roster_size: Number of existing patients compared against
            exact_count: Number of exact name matches
            similar_count: Number of similar name matches
            duration_ms: Check duration in milliseconds
        """
        duration_str = f" ({duration_ms:.2f}ms)" if duration_ms is not None else ""
        self.info(
            f"DUPLICATE_CHECK: roster={roster_size} exact={exact_count} "
            f"similar={similar_count}{duration_str}",
        )

    def log_hn_generation(self, attempts: int, unique: bool, roster_size: int) -> None:
        """
        Log a hospital number generation.

        A non-unique result means the retry bound was exhausted and the last
        candidate was returned anyway, so it is logged as a warning.
        """
        message = f"HN_GENERATION: attempts={attempts} roster={roster_size} unique={unique}"
        if unique:
            self.debug(message)
        else:
            self.warning(message)

    def log_registration(self, hn: Optional[str], status: str, match_count: int = 0) -> None:
        """Log the outcome of a registration attempt."""
        hn_str = f" hn={hn}" if hn else ""
        self.info(f"REGISTRATION: {status}{hn_str} matches={match_count}")

    def log_import(self, total_rows: int, valid_rows: int, imported: int) -> None:
        """Log a bulk patient import summary."""
        self.info(f"IMPORT: rows={total_rows} valid={valid_rows} imported={imported}")


def get_secure_logger(name: str, production_mode: Optional[bool] = None) -> SecureLogger:
    """
    Get a secure logger instance.

    Args:
        name: Logger name (typically __name__)
        production_mode: Enable production security filtering; None follows
            the process-wide setting

    Returns:
        SecureLogger instance
    """
    base_logger = logging.getLogger(name)
    return SecureLogger(base_logger, production_mode=production_mode)


def configure_secure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    production_mode: bool = True,
) -> None:
    """
    Configure root logging and the process-wide production mode.

    Args:
        level: Logging level
        log_file: Optional log file path
        production_mode: Enable production security filtering
    """
    if production_mode:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    global _PRODUCTION_MODE
    _PRODUCTION_MODE = production_mode


# Module-level variable to track production mode
_PRODUCTION_MODE = True


def is_production_mode() -> bool:
    """Check if logging is in production mode."""
    return _PRODUCTION_MODE
