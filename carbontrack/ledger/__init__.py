"""
carbontrack/ledger/__init__.py
==============================
CarbonTrack — Carbon-accounting engine.

Modules:
    catalog:       EmissionCatalog: transport emission factors by VehicleType.
    records:       TripRecord, GlobalAggregate and Submission state model.
    carbon_ledger: CarbonLedger: trips, offsets and derived statistics.
    analytics:     Comparisons, projections, alternatives and equivalents.
"""

from .analytics import (
    calculate_equivalents,
    compare_vehicles,
    format_carbon,
    suggest_alternatives,
    yearly_impact,
)
from .carbon_ledger import CarbonLedger
from .catalog import DEFAULT_CATALOG, EmissionCatalog, EmissionFactor, VehicleType
from .records import GlobalAggregate, Submission, SubmissionKind, SubmissionStatus, TripRecord

__all__ = [
    "CarbonLedger",
    "DEFAULT_CATALOG",
    "EmissionCatalog",
    "EmissionFactor",
    "GlobalAggregate",
    "Submission",
    "SubmissionKind",
    "SubmissionStatus",
    "TripRecord",
    "VehicleType",
    "calculate_equivalents",
    "compare_vehicles",
    "format_carbon",
    "suggest_alternatives",
    "yearly_impact",
]
