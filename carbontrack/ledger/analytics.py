"""
carbontrack/ledger/analytics.py
===============================
CarbonTrack — Derived carbon statistics.

Pure functions over the emission catalog: vehicle comparison, yearly
projection, lower-carbon alternatives, everyday equivalents and the
display formatting convention for gram quantities.

Rounding convention:
  Fixed-decimal strings and integer percentages round half away from zero
  on the exact binary value of the float (not banker's rounding), so that
  ``to_fixed(0.125, 2) == "0.13"``.

Equivalence constants:
  - 1 tree absorbs ~21 kgCO₂/year
  - 1 kgCO₂ ≈ 24 smartphone charges
  - 1 kgCO₂ ≈ 100 hours of TV
  - gasoline car reference: 170 gCO₂/km

Usage::

    cmp = compare_vehicles(VehicleType.CAR_GASOLINE, VehicleType.BIKE, 10)
    print(cmp.better_vehicle_name, cmp.percentage)
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from .catalog import DEFAULT_CATALOG, EmissionCatalog

__all__ = [
    "CO2_KG_PER_TREE_YEAR",
    "SMARTPHONE_CHARGES_PER_KG",
    "TV_HOURS_PER_KG",
    "REFERENCE_CAR_G_KM",
    "MAX_ALTERNATIVES",
    "to_fixed",
    "round_half_up",
    "format_carbon",
    "VehicleEmission",
    "VehicleComparison",
    "YearlyImpact",
    "Alternative",
    "CarbonEquivalents",
    "compare_vehicles",
    "yearly_impact",
    "suggest_alternatives",
    "calculate_equivalents",
]

# ---------------------------------------------------------------------------
# Conversion constants
# ---------------------------------------------------------------------------
CO2_KG_PER_TREE_YEAR: float = 21.0
SMARTPHONE_CHARGES_PER_KG: float = 24.0
TV_HOURS_PER_KG: float = 100.0
REFERENCE_CAR_G_KM: float = 170.0

WEEKS_PER_MONTH: int = 4  # approximation, not calendar-accurate
MAX_ALTERNATIVES: int = 3


# ---------------------------------------------------------------------------
# Rounding & formatting
# ---------------------------------------------------------------------------

def to_fixed(value: float, digits: int) -> str:
    """Format *value* with exactly *digits* decimals, rounding half away from zero."""
    rounded = _quantize(value, digits)
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return f"{rounded:f}"


def round_half_up(value: float) -> int:
    """Nearest integer, ties rounded away from zero."""
    return int(_quantize(value, 0))


def _quantize(value: float, digits: int) -> Decimal:
    exact = Decimal(value)
    with localcontext() as ctx:
        # Enough precision for every integer digit plus the requested decimals.
        ctx.prec = max(ctx.prec, len(str(int(abs(exact)))) + digits + 2)
        return exact.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def format_carbon(grams: float) -> str:
    """Render a gram quantity for display.

    Below 1000 g the value is shown as integer grams, otherwise as kilograms
    with two decimals::

        format_carbon(900)   -> "900 g"
        format_carbon(2550)  -> "2.55 kg"
    """
    if grams < 1000:
        return f"{round_half_up(grams)} g"
    return f"{to_fixed(grams / 1000, 2)} kg"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VehicleEmission:
    vehicle_type: int
    name: str
    carbon_grams: float
    carbon_kg: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class VehicleComparison:
    """Side-by-side emissions of two vehicles over the same distance.

    Attributes:
        vehicle_a / vehicle_b: Per-vehicle emissions.
        saving:             |carbon_a − carbon_b| in grams.
        saving_kg:          ``saving`` in kg, 2 decimals.
        better_vehicle:     Lower-emitting type (ties resolve to ``vehicle_a``).
        better_vehicle_name: Display name of ``better_vehicle``.
        percentage:         Saving relative to the higher emitter, integer %.
    """
    vehicle_a: VehicleEmission
    vehicle_b: VehicleEmission
    saving: float
    saving_kg: str
    better_vehicle: int
    better_vehicle_name: str
    percentage: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class YearlyImpact:
    """Annual projection of a regular travel pattern.

    Attributes:
        weekly_distance:  km per week.
        yearly_distance:  km per year.
        yearly_carbon:    gCO₂ per year.
        yearly_carbon_kg: kgCO₂ per year, 1 decimal.
        trees_needed:     Trees required to absorb the yearly emissions.
        daily_carbon_kg / weekly_carbon_kg / monthly_carbon_kg: kgCO₂, 2 decimals.
    """
    weekly_distance: float
    yearly_distance: float
    yearly_carbon: float
    yearly_carbon_kg: str
    trees_needed: int
    daily_carbon_kg: str
    weekly_carbon_kg: str
    monthly_carbon_kg: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Alternative:
    vehicle_type: int
    name: str
    carbon: float
    saving: float
    factor: float
    percentage: int  # reduction relative to the current vehicle

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CarbonEquivalents:
    trees: int
    smartphone_charges: int
    tv_hours: int
    car_km_equivalent: str

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Calculations
# ---------------------------------------------------------------------------

def _emission(catalog: EmissionCatalog, vehicle_type: int, distance_km: float) -> VehicleEmission:
    grams = catalog.estimate_grams(vehicle_type, distance_km)
    return VehicleEmission(
        vehicle_type=vehicle_type,
        name=catalog.display_name(vehicle_type),
        carbon_grams=grams,
        carbon_kg=to_fixed(grams / 1000, 2),
    )


def compare_vehicles(
    type_a: int,
    type_b: int,
    distance_km: float,
    catalog: EmissionCatalog = DEFAULT_CATALOG,
) -> VehicleComparison:
    """Compare emissions of two vehicle types over *distance_km*.

    The percentage is 0 when the higher emitter emits nothing (0/0 → 0).
    """
    a = _emission(catalog, type_a, distance_km)
    b = _emission(catalog, type_b, distance_km)

    saving = abs(a.carbon_grams - b.carbon_grams)
    better = type_a if a.carbon_grams <= b.carbon_grams else type_b
    worst = max(a.carbon_grams, b.carbon_grams)
    percentage = round_half_up(saving / worst * 100) if worst > 0 else 0

    return VehicleComparison(
        vehicle_a=a,
        vehicle_b=b,
        saving=saving,
        saving_kg=to_fixed(saving / 1000, 2),
        better_vehicle=better,
        better_vehicle_name=catalog.display_name(better),
        percentage=percentage,
    )


def yearly_impact(
    vehicle_type: int,
    daily_distance_km: float,
    days_per_week: float,
    weeks_per_year: float,
    catalog: EmissionCatalog = DEFAULT_CATALOG,
) -> YearlyImpact:
    """Project annual emissions from a daily commute pattern."""
    weekly = daily_distance_km * days_per_week
    yearly = weekly * weeks_per_year
    yearly_carbon = catalog.estimate_grams(vehicle_type, yearly)
    yearly_kg = yearly_carbon / 1000
    monthly = daily_distance_km * days_per_week * WEEKS_PER_MONTH

    return YearlyImpact(
        weekly_distance=weekly,
        yearly_distance=yearly,
        yearly_carbon=yearly_carbon,
        yearly_carbon_kg=to_fixed(yearly_kg, 1),
        trees_needed=math.ceil(yearly_kg / CO2_KG_PER_TREE_YEAR),
        daily_carbon_kg=to_fixed(catalog.estimate_grams(vehicle_type, daily_distance_km) / 1000, 2),
        weekly_carbon_kg=to_fixed(catalog.estimate_grams(vehicle_type, weekly) / 1000, 2),
        monthly_carbon_kg=to_fixed(catalog.estimate_grams(vehicle_type, monthly) / 1000, 2),
    )


def suggest_alternatives(
    current_vehicle_type: int,
    distance_km: float,
    catalog: EmissionCatalog = DEFAULT_CATALOG,
    limit: int = MAX_ALTERNATIVES,
) -> list[Alternative]:
    """Up to *limit* strictly lower-carbon vehicles, largest saving first.

    Entries with equal saving keep catalog order.
    """
    current = catalog.estimate_grams(current_vehicle_type, distance_km)

    candidates: list[Alternative] = []
    for vehicle_type, factor in catalog.items():
        carbon = factor.grams_per_km * distance_km
        saving = current - carbon
        if saving > 0:
            candidates.append(
                Alternative(
                    vehicle_type=vehicle_type,
                    name=factor.name,
                    carbon=carbon,
                    saving=saving,
                    factor=factor.grams_per_km,
                    percentage=round_half_up(saving / current * 100) if current > 0 else 0,
                )
            )

    candidates.sort(key=lambda alt: alt.saving, reverse=True)
    return candidates[:limit]


def calculate_equivalents(carbon_kg: float) -> CarbonEquivalents:
    """Express *carbon_kg* in everyday terms."""
    return CarbonEquivalents(
        trees=math.ceil(carbon_kg / CO2_KG_PER_TREE_YEAR),
        smartphone_charges=math.ceil(carbon_kg * SMARTPHONE_CHARGES_PER_KG),
        tv_hours=math.ceil(carbon_kg * TV_HOURS_PER_KG),
        car_km_equivalent=to_fixed(carbon_kg * 1000 / REFERENCE_CAR_G_KM, 1),
    )
