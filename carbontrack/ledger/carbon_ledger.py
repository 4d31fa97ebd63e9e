"""
carbontrack/ledger/carbon_ledger.py
===================================
CarbonTrack — In-memory carbon ledger for one owner.

Records trips, applies purchased offsets and derives statistics over the
record collection.  The ledger is a monotonic accumulator: records are
never deleted, emissions are frozen at creation and offsets only grow.

Submission lifecycle:
  Every successful mutation is applied locally first and registered as a
  PENDING ``Submission``.  The calling layer broadcasts it to the external
  ledger service and feeds the outcome back with ``confirm_submission`` or
  ``fail_submission``.  A failure is recorded but never rolls back local
  state.

Access model:
  One caller context per ledger, one mutation at a time.  Callers with
  several asynchronous producers must serialise access themselves.

Usage::

    ledger = CarbonLedger(owner="0xabc...")
    trip = ledger.record_trip(VehicleType.CAR_GASOLINE, 15)
    ledger.apply_offset(trip.id, 1.0)
    for sub in ledger.pending_submissions():
        ledger.confirm_submission(sub.submission_id, tx_digest="...")
    print(ledger.net_carbon_kg())
"""

from __future__ import annotations

import itertools
import math
import time
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from carbontrack.core.errors import (
    CarbonLedgerError,
    InvalidAmount,
    InvalidVehicleType,
    NotAuthorized,
    RecordNotFound,
    SubmissionAlreadyResolved,
    SubmissionNotFound,
)
from carbontrack.interfaces.metrics import (
    LEDGER_CARBON_KG,
    LEDGER_ERRORS_TOTAL,
    LEDGER_NET_CARBON_KG,
    OFFSET_KG_TOTAL,
    OFFSETS_APPLIED_TOTAL,
    PENDING_SUBMISSIONS,
    SUBMISSIONS_RESOLVED_TOTAL,
    TRIP_DISTANCE_KM_TOTAL,
    TRIPS_RECORDED_TOTAL,
)

from . import analytics
from .catalog import DEFAULT_CATALOG, EmissionCatalog, VehicleType
from .records import (
    GlobalAggregate,
    Submission,
    SubmissionKind,
    SubmissionStatus,
    TripRecord,
)

if TYPE_CHECKING:
    from carbontrack.core.config import Settings

__all__ = ["CarbonLedger"]

log = structlog.get_logger(__name__)


class CarbonLedger:
    """Trip and offset ledger for a single identity.

    Parameters:
        owner:             Identity token from the wallet layer; ``None`` until bound.
        catalog:           Emission factors applied to newly recorded trips.
        ledger_id:         Prometheus label for this ledger.
        allow_over_offset: Accept offsets beyond a trip's emissions.
        clock:             Source of Unix timestamps for ``created_at``.
    """

    def __init__(
        self,
        owner: Optional[str] = None,
        catalog: EmissionCatalog = DEFAULT_CATALOG,
        ledger_id: str = "default",
        allow_over_offset: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ledger_id = ledger_id
        self.allow_over_offset = allow_over_offset
        self._owner: Optional[str] = owner or None
        self._catalog = catalog
        self._clock = clock
        self._records: list[TripRecord] = []  # newest first
        self._by_id: dict[str, TripRecord] = {}
        self._aggregate = GlobalAggregate()
        self._submissions: dict[str, Submission] = {}
        self._open: dict[str, Submission] = {}  # pending only, oldest first
        self._ids = itertools.count(1)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        owner: Optional[str] = None,
        catalog: EmissionCatalog = DEFAULT_CATALOG,
    ) -> CarbonLedger:
        return cls(
            owner=owner,
            catalog=catalog,
            ledger_id=settings.LEDGER_ID,
            allow_over_offset=settings.ALLOW_OVER_OFFSET,
        )

    # ------------------------------------------------------------------
    # Identity & catalog
    # ------------------------------------------------------------------

    def bind_identity(self, token: str) -> None:
        """Bind the identity supplied by the wallet layer."""
        if not token:
            raise self._reject("bind_identity", NotAuthorized("bind_identity"))
        self._owner = token
        log.info("ledger.identity_bound", ledger_id=self.ledger_id)

    def unbind_identity(self) -> None:
        self._owner = None
        log.info("ledger.identity_unbound", ledger_id=self.ledger_id)

    @property
    def owner(self) -> Optional[str]:
        return self._owner

    @property
    def is_authorized(self) -> bool:
        return self._owner is not None

    @property
    def catalog(self) -> EmissionCatalog:
        return self._catalog

    def use_catalog(self, catalog: EmissionCatalog) -> None:
        """Apply *catalog* to trips recorded from now on; existing trips keep their emissions."""
        self._catalog = catalog
        log.info("ledger.catalog_changed", ledger_id=self.ledger_id, catalog=repr(catalog))

    # ------------------------------------------------------------------
    # Record management
    # ------------------------------------------------------------------

    def record_trip(self, vehicle_type: int, distance_km: float) -> TripRecord:
        """Record a completed journey.

        Args:
            vehicle_type: VehicleType identifier.
            distance_km:  Distance travelled (km > 0).

        Returns:
            The new TripRecord, also first in ``records``.

        Raises:
            NotAuthorized:      no identity bound.
            InvalidVehicleType: identifier outside the catalog.
            InvalidAmount:      non-positive or non-finite distance.
        """
        op = "record_trip"
        if not self.is_authorized:
            raise self._reject(op, NotAuthorized(op))
        factor = self._catalog.get(vehicle_type)
        if factor is None:
            raise self._reject(op, InvalidVehicleType(vehicle_type, len(self._catalog)))
        if not _is_positive(distance_km):
            raise self._reject(op, InvalidAmount("distance_km", distance_km))

        record = TripRecord(
            id=str(next(self._ids)),
            vehicle_type=VehicleType(int(vehicle_type)),
            vehicle_name=factor.name,
            distance_km=distance_km,
            carbon_grams=self._catalog.estimate_grams(vehicle_type, distance_km),
            created_at=self._clock(),
        )
        self._records.insert(0, record)
        self._by_id[record.id] = record
        self._aggregate.add(record)
        submission = self._register(SubmissionKind.TRIP, record.id, distance_km)

        TRIPS_RECORDED_TOTAL.labels(
            ledger_id=self.ledger_id, vehicle_type=record.vehicle_type.name
        ).inc()
        TRIP_DISTANCE_KM_TOTAL.labels(ledger_id=self.ledger_id).inc(distance_km)
        self._publish_gauges()

        log.info(
            "ledger.trip_recorded",
            ledger_id=self.ledger_id,
            record_id=record.id,
            vehicle=record.vehicle_type.name,
            distance_km=distance_km,
            carbon_g=round(record.carbon_grams, 3),
            submission_id=submission.submission_id[:8],
        )
        return record

    def apply_offset(self, record_id: str, offset_kg: float) -> TripRecord:
        """Credit *offset_kg* of purchased offsets against a trip.

        Raises:
            NotAuthorized:  no identity bound.
            InvalidAmount:  non-positive amount, or over-offset when disallowed.
            RecordNotFound: unknown *record_id*.
        """
        op = "apply_offset"
        if not self.is_authorized:
            raise self._reject(op, NotAuthorized(op))
        if not _is_positive(offset_kg):
            raise self._reject(op, InvalidAmount("offset_kg", offset_kg))
        record = self._by_id.get(record_id)
        if record is None:
            raise self._reject(op, RecordNotFound(record_id))
        if not self.allow_over_offset and record.offset_kg + offset_kg > record.carbon_kg:
            raise self._reject(
                op,
                InvalidAmount(
                    "offset_kg",
                    offset_kg,
                    reason=f"would exceed the trip's {record.carbon_kg:g} kg of emissions",
                ),
            )

        record.offset_kg += offset_kg
        submission = self._register(SubmissionKind.OFFSET, record.id, offset_kg)

        OFFSETS_APPLIED_TOTAL.labels(ledger_id=self.ledger_id).inc()
        OFFSET_KG_TOTAL.labels(ledger_id=self.ledger_id).inc(offset_kg)
        self._publish_gauges()

        log.info(
            "ledger.offset_applied",
            ledger_id=self.ledger_id,
            record_id=record.id,
            offset_kg=offset_kg,
            record_offset_kg=round(record.offset_kg, 6),
            submission_id=submission.submission_id[:8],
        )
        return record

    def get_record(self, record_id: str) -> TripRecord:
        record = self._by_id.get(record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    @property
    def records(self) -> tuple[TripRecord, ...]:
        """All records, newest first."""
        return tuple(self._records)

    @property
    def aggregate(self) -> GlobalAggregate:
        """Snapshot of the running totals."""
        agg = self._aggregate
        return GlobalAggregate(agg.total_distance_km, agg.total_carbon_grams, agg.record_count)

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def pending_submissions(self) -> list[Submission]:
        """Submissions still awaiting an outcome, oldest first."""
        return list(self._open.values())

    def get_submission(self, submission_id: str) -> Submission:
        submission = self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)
        return submission

    def confirm_submission(self, submission_id: str, tx_digest: str) -> Submission:
        """Mark a submission as accepted by the external ledger."""
        if not tx_digest:
            raise ValueError("tx_digest must be a non-empty string")
        submission = self._pending(submission_id, "confirm_submission")
        submission.confirm(tx_digest)
        if submission.kind is SubmissionKind.TRIP:
            record = self._by_id[submission.record_id]
            record.status = SubmissionStatus.CONFIRMED
            record.tx_digest = tx_digest
        self._resolved(submission)
        log.info(
            "ledger.submission_confirmed",
            ledger_id=self.ledger_id,
            submission_id=submission_id[:8],
            kind=submission.kind.value,
            tx_digest=tx_digest,
        )
        return submission

    def fail_submission(self, submission_id: str, error: str) -> Submission:
        """Record that the external ledger rejected a submission.

        Local state stays as applied; reconciling it is the caller's concern.
        """
        submission = self._pending(submission_id, "fail_submission")
        submission.fail(error)
        if submission.kind is SubmissionKind.TRIP:
            self._by_id[submission.record_id].status = SubmissionStatus.FAILED
        self._resolved(submission)
        log.warning(
            "ledger.submission_failed",
            ledger_id=self.ledger_id,
            submission_id=submission_id[:8],
            kind=submission.kind.value,
            record_id=submission.record_id,
            error=error[:120],
        )
        return submission

    # ------------------------------------------------------------------
    # Derived statistics
    # ------------------------------------------------------------------

    def total_user_carbon_kg(self) -> float:
        return sum(r.carbon_grams for r in self._records) / 1000

    def total_user_offset_kg(self) -> float:
        return sum(r.offset_kg for r in self._records)

    def net_carbon_kg(self) -> float:
        """Emissions minus offsets, never below zero."""
        return max(0.0, self.total_user_carbon_kg() - self.total_user_offset_kg())

    def average_carbon_kg_per_trip(self) -> str:
        """Mean kgCO₂ per recorded trip, 2 decimals (``"0.00"`` when empty)."""
        agg = self._aggregate
        if agg.record_count == 0:
            return analytics.to_fixed(0, 2)
        return analytics.to_fixed(agg.total_carbon_grams / agg.record_count / 1000, 2)

    def estimate_grams(self, vehicle_type: int, distance_km: float) -> float:
        return self._catalog.estimate_grams(vehicle_type, distance_km)

    def compare_vehicles(
        self, type_a: int, type_b: int, distance_km: float
    ) -> analytics.VehicleComparison:
        return analytics.compare_vehicles(type_a, type_b, distance_km, self._catalog)

    def yearly_impact(
        self,
        vehicle_type: int,
        daily_distance_km: float,
        days_per_week: float,
        weeks_per_year: float,
    ) -> analytics.YearlyImpact:
        return analytics.yearly_impact(
            vehicle_type, daily_distance_km, days_per_week, weeks_per_year, self._catalog
        )

    def suggest_alternatives(
        self, current_vehicle_type: int, distance_km: float
    ) -> list[analytics.Alternative]:
        return analytics.suggest_alternatives(current_vehicle_type, distance_km, self._catalog)

    def calculate_equivalents(self, carbon_kg: float) -> analytics.CarbonEquivalents:
        return analytics.calculate_equivalents(carbon_kg)

    def summary(self) -> dict:
        return {
            "ledger_id": self.ledger_id,
            "authorized": self.is_authorized,
            "total_carbon_kg": self.total_user_carbon_kg(),
            "total_offset_kg": self.total_user_offset_kg(),
            "net_carbon_kg": self.net_carbon_kg(),
            "average_carbon_kg": self.average_carbon_kg_per_trip(),
            "aggregate": self._aggregate.to_dict(),
            "pending_submissions": len(self._open),
            "records": [r.to_dict() for r in self._records],
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register(self, kind: SubmissionKind, record_id: str, amount: float) -> Submission:
        submission = Submission(kind=kind, record_id=record_id, amount=amount)
        self._submissions[submission.submission_id] = submission
        self._open[submission.submission_id] = submission
        return submission

    def _pending(self, submission_id: str, op: str) -> Submission:
        submission = self._submissions.get(submission_id)
        if submission is None:
            raise self._reject(op, SubmissionNotFound(submission_id))
        if not submission.is_pending:
            raise self._reject(
                op, SubmissionAlreadyResolved(submission_id, submission.status.value)
            )
        return submission

    def _resolved(self, submission: Submission) -> None:
        self._open.pop(submission.submission_id, None)
        SUBMISSIONS_RESOLVED_TOTAL.labels(
            ledger_id=self.ledger_id,
            kind=submission.kind.value,
            status=submission.status.value,
        ).inc()
        PENDING_SUBMISSIONS.labels(ledger_id=self.ledger_id).set(len(self._open))

    def _publish_gauges(self) -> None:
        LEDGER_CARBON_KG.labels(ledger_id=self.ledger_id).set(self._aggregate.total_carbon_kg)
        LEDGER_NET_CARBON_KG.labels(ledger_id=self.ledger_id).set(self.net_carbon_kg())
        PENDING_SUBMISSIONS.labels(ledger_id=self.ledger_id).set(len(self._open))

    def _reject(self, op: str, exc: CarbonLedgerError) -> CarbonLedgerError:
        """Log and count a rejected operation; returns *exc* for raising."""
        LEDGER_ERRORS_TOTAL.labels(ledger_id=self.ledger_id, code=exc.code).inc()
        log.warning(
            "ledger.operation_rejected",
            ledger_id=self.ledger_id,
            operation=op,
            code=exc.code,
            error=str(exc),
        )
        return exc


def _is_positive(value: float) -> bool:
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False
