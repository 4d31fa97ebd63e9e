"""
carbontrack/ledger/records.py
=============================
CarbonTrack — Ledger record model.

* ``TripRecord``       : one completed journey; emissions frozen at creation.
* ``GlobalAggregate``  : running totals over all records.
* ``Submission``       : a trip or offset event awaiting confirmation from
  the external ledger-submission service.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

__all__ = [
    "SubmissionKind",
    "SubmissionStatus",
    "TripRecord",
    "GlobalAggregate",
    "Submission",
]


_WRITE_ONCE_FIELDS = frozenset(
    {"id", "vehicle_type", "vehicle_name", "distance_km", "carbon_grams", "created_at"}
)


class SubmissionKind(str, Enum):
    TRIP = "trip"
    OFFSET = "offset"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class TripRecord:
    """Represents one recorded journey.

    Attributes:
        id:            Ledger-assigned identifier, never reused.
        vehicle_type:  VehicleType identifier.
        vehicle_name:  Catalog display name at creation time.
        distance_km:   Distance travelled (km > 0).
        carbon_grams:  Emissions computed once at creation (gCO₂).
        offset_kg:     Offsets purchased against this trip (kgCO₂, only grows).
        created_at:    UTC Unix timestamp of creation.
        status:        Confirmation status of the trip submission.
        tx_digest:     Transaction digest once confirmed.
    """
    id: str
    vehicle_type: int
    vehicle_name: str
    distance_km: float
    carbon_grams: float
    offset_kg: float = 0.0
    created_at: float = field(default_factory=time.time)
    status: SubmissionStatus = SubmissionStatus.PENDING
    tx_digest: str | None = None

    def __setattr__(self, name: str, value: object) -> None:
        # Identity and emissions are write-once; offsets only grow.
        if name in _WRITE_ONCE_FIELDS and name in self.__dict__:
            raise AttributeError(f"TripRecord.{name} cannot be changed after creation")
        if name == "offset_kg" and name in self.__dict__ and value < self.offset_kg:
            raise ValueError(
                f"TripRecord.offset_kg cannot decrease ({self.offset_kg} -> {value})"
            )
        super().__setattr__(name, value)

    @property
    def date(self) -> str:
        """Calendar date (UTC, ISO-8601) of ``created_at``."""
        return datetime.fromtimestamp(self.created_at, tz=timezone.utc).date().isoformat()

    @property
    def carbon_kg(self) -> float:
        return self.carbon_grams / 1000

    @property
    def remaining_kg(self) -> float:
        """Carbon not yet offset; negative when over-offset."""
        return self.carbon_kg - self.offset_kg

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vehicle_type": int(self.vehicle_type),
            "vehicle_name": self.vehicle_name,
            "distance_km": self.distance_km,
            "carbon_grams": self.carbon_grams,
            "carbon_kg": self.carbon_kg,
            "offset_kg": self.offset_kg,
            "remaining_kg": self.remaining_kg,
            "created_at": self.created_at,
            "date": self.date,
            "status": self.status.value,
            "tx_digest": self.tx_digest,
        }


@dataclass
class GlobalAggregate:
    """Running totals over every record in a ledger."""
    total_distance_km: float = 0.0
    total_carbon_grams: float = 0.0
    record_count: int = 0

    @property
    def total_carbon_kg(self) -> float:
        return self.total_carbon_grams / 1000

    def add(self, record: TripRecord) -> None:
        self.total_distance_km += record.distance_km
        self.total_carbon_grams += record.carbon_grams
        self.record_count += 1

    def to_dict(self) -> dict:
        return {
            "total_distance_km": self.total_distance_km,
            "total_carbon_grams": self.total_carbon_grams,
            "total_carbon_kg": self.total_carbon_kg,
            "record_count": self.record_count,
        }


@dataclass
class Submission:
    """A mutation handed to the caller for submission to the external ledger.

    The local state is already applied when a Submission is created; a
    failure reported later does not roll it back.
    """
    kind: SubmissionKind
    record_id: str
    amount: float
    submission_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: SubmissionStatus = SubmissionStatus.PENDING
    tx_digest: str | None = None
    error: str | None = None
    created_at: float = field(default_factory=time.time)
    resolved_at: float | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is SubmissionStatus.PENDING

    def confirm(self, tx_digest: str) -> None:
        self.status = SubmissionStatus.CONFIRMED
        self.tx_digest = tx_digest
        self.resolved_at = time.time()

    def fail(self, error: str) -> None:
        self.status = SubmissionStatus.FAILED
        self.error = error
        self.resolved_at = time.time()

    def to_dict(self) -> dict:
        return {
            "submission_id": self.submission_id,
            "kind": self.kind.value,
            "record_id": self.record_id,
            "amount": self.amount,
            "status": self.status.value,
            "tx_digest": self.tx_digest,
            "error": self.error,
            "created_at": self.created_at,
            "resolved_at": self.resolved_at,
        }
