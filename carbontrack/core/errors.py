"""
carbontrack/core/errors.py
==========================
CarbonTrack — Typed error hierarchy.

Every error carries a machine-readable ``code`` class attribute and the
structured values that caused it, so callers can catch by type and report
without parsing messages.

::

    CarbonLedgerError
    ├── InvalidVehicleType         (also ValueError)
    ├── InvalidAmount              (also ValueError)
    ├── NotAuthorized              (also PermissionError)
    ├── RecordNotFound             (also LookupError)
    ├── SubmissionNotFound         (also LookupError)
    └── SubmissionAlreadyResolved

All errors are local and recoverable: the ledger is left in its prior state.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "CarbonLedgerError",
    "InvalidVehicleType",
    "InvalidAmount",
    "NotAuthorized",
    "RecordNotFound",
    "SubmissionNotFound",
    "SubmissionAlreadyResolved",
]


class CarbonLedgerError(Exception):
    """Base class for all carbon ledger errors."""

    code: str = "CARBON_LEDGER_ERROR"


class InvalidVehicleType(CarbonLedgerError, ValueError):
    """Vehicle type identifier is outside the emission catalog."""

    code: str = "INVALID_VEHICLE_TYPE"

    def __init__(self, vehicle_type: Any, catalog_size: int):
        self.vehicle_type = vehicle_type
        self.catalog_size = catalog_size
        super().__init__(
            f"Invalid vehicle type {vehicle_type!r}: "
            f"expected an identifier in 0..{catalog_size - 1}"
        )


class InvalidAmount(CarbonLedgerError, ValueError):
    """Distance or offset amount is not acceptable."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: float, reason: str = "must be > 0"):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field} {reason}, got {value!r}")


class NotAuthorized(CarbonLedgerError, PermissionError):
    """Mutating call made without a bound identity."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires a bound identity (connect a wallet first)")


class RecordNotFound(CarbonLedgerError, LookupError):
    """No trip record with the given id exists."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Trip record not found: {record_id}")


class SubmissionNotFound(CarbonLedgerError, LookupError):
    """No submission with the given id exists."""

    code: str = "SUBMISSION_NOT_FOUND"

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission not found: {submission_id}")


class SubmissionAlreadyResolved(CarbonLedgerError):
    """Submission was already confirmed or failed."""

    code: str = "SUBMISSION_ALREADY_RESOLVED"

    def __init__(self, submission_id: str, status: str):
        self.submission_id = submission_id
        self.status = status
        super().__init__(f"Submission {submission_id} already resolved as {status}")
