"""
carbontrack/interfaces/metrics.py
=================================
CarbonTrack — Prometheus Metrics Registry.

Exposes ledger activity via the ``prometheus_client`` library.  The
counters / gauges defined here are updated by ``CarbonLedger`` on every
mutating operation; serving them (e.g. on ``/metrics``) is left to the
embedding application through ``generate_metrics()``.

All series are labelled by ``ledger_id``.
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    generate_latest,
)

__all__ = [
    "TRIPS_RECORDED_TOTAL",
    "TRIP_DISTANCE_KM_TOTAL",
    "OFFSETS_APPLIED_TOTAL",
    "OFFSET_KG_TOTAL",
    "LEDGER_ERRORS_TOTAL",
    "SUBMISSIONS_RESOLVED_TOTAL",
    "LEDGER_CARBON_KG",
    "LEDGER_NET_CARBON_KG",
    "PENDING_SUBMISSIONS",
    "CONTENT_TYPE_LATEST",
    "generate_metrics",
]

# ---------------------------------------------------------------------------
# Counters: monotonically increasing
# ---------------------------------------------------------------------------

TRIPS_RECORDED_TOTAL: Counter = Counter(
    "carbon_trips_recorded_total",
    "Total number of trips recorded in the ledger.",
    ["ledger_id", "vehicle_type"],
)

TRIP_DISTANCE_KM_TOTAL: Counter = Counter(
    "carbon_trip_distance_km_total",
    "Total distance (km) of recorded trips.",
    ["ledger_id"],
)

OFFSETS_APPLIED_TOTAL: Counter = Counter(
    "carbon_offsets_applied_total",
    "Total number of offset purchases applied to trips.",
    ["ledger_id"],
)

OFFSET_KG_TOTAL: Counter = Counter(
    "carbon_offset_kg_total",
    "Total CO₂ (kg) offset across all trips.",
    ["ledger_id"],
)

LEDGER_ERRORS_TOTAL: Counter = Counter(
    "carbon_ledger_errors_total",
    "Number of rejected ledger operations.",
    ["ledger_id", "code"],
)

SUBMISSIONS_RESOLVED_TOTAL: Counter = Counter(
    "carbon_submissions_resolved_total",
    "Submissions resolved by the external ledger service.",
    ["ledger_id", "kind", "status"],
)

# ---------------------------------------------------------------------------
# Gauges: current state after the last mutation
# ---------------------------------------------------------------------------

LEDGER_CARBON_KG: Gauge = Gauge(
    "carbon_ledger_total_kg",
    "Total CO₂ (kg) emitted by all recorded trips.",
    ["ledger_id"],
)

LEDGER_NET_CARBON_KG: Gauge = Gauge(
    "carbon_ledger_net_kg",
    "Net CO₂ (kg) after offsets, floored at zero.",
    ["ledger_id"],
)

PENDING_SUBMISSIONS: Gauge = Gauge(
    "carbon_pending_submissions",
    "Submissions awaiting confirmation from the external ledger service.",
    ["ledger_id"],
)


def generate_metrics() -> bytes:
    """Return the current metrics snapshot as Prometheus text format."""
    return generate_latest(REGISTRY)
