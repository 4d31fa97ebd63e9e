"""
carbontrack/ledger/catalog.py
=============================
CarbonTrack — Transport Emission Factor Catalog.

Fixed table mapping a transportation mode to its tailpipe-equivalent
emission factor and display name.

Units: gCO₂/km per passenger (well-to-wheel, rounded)

Usage::

    from carbontrack.ledger.catalog import DEFAULT_CATALOG, VehicleType

    factor = DEFAULT_CATALOG.lookup(VehicleType.BUS)
    grams = DEFAULT_CATALOG.estimate_grams(VehicleType.BUS, 12.0)
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Mapping

import structlog

from carbontrack.core.errors import InvalidVehicleType

__all__ = [
    "VehicleType",
    "EmissionFactor",
    "EmissionCatalog",
    "DEFAULT_CATALOG",
    "lookup",
    "estimate_grams",
]

log = structlog.get_logger(__name__)


class VehicleType(IntEnum):
    CAR_GASOLINE = 0
    CAR_DIESEL = 1
    CAR_ELECTRIC = 2
    MOTORCYCLE = 3
    BUS = 4
    TRAIN = 5
    BIKE = 6
    WALKING = 7


@dataclass(frozen=True)
class EmissionFactor:
    """Emission factor for one transportation mode.

    Attributes:
        name:         Human-readable mode name.
        grams_per_km: gCO₂ emitted per kilometre travelled (≥ 0).
    """
    name: str
    grams_per_km: float


# ---------------------------------------------------------------------------
# Default factors: gCO₂/km
# ---------------------------------------------------------------------------
_DEFAULT_FACTORS: dict[VehicleType, EmissionFactor] = {
    VehicleType.CAR_GASOLINE: EmissionFactor("Gasoline Car", 170.0),
    VehicleType.CAR_DIESEL: EmissionFactor("Diesel Car", 160.0),
    VehicleType.CAR_ELECTRIC: EmissionFactor("Electric Car", 50.0),  # grid mix
    VehicleType.MOTORCYCLE: EmissionFactor("Motorcycle", 100.0),
    VehicleType.BUS: EmissionFactor("Bus", 90.0),  # per passenger
    VehicleType.TRAIN: EmissionFactor("Train", 30.0),  # per passenger
    VehicleType.BIKE: EmissionFactor("Bicycle", 0.0),
    VehicleType.WALKING: EmissionFactor("Walking", 0.0),
}

UNKNOWN_VEHICLE_NAME = "Unknown"


class EmissionCatalog:
    """Immutable lookup table of emission factors indexed by VehicleType.

    Parameters:
        factors: One EmissionFactor per VehicleType member.
    """

    def __init__(self, factors: Mapping[VehicleType, EmissionFactor]) -> None:
        missing = [vt.name for vt in VehicleType if vt not in factors]
        if missing:
            raise ValueError(f"catalog is missing factors for: {', '.join(missing)}")
        for vt, factor in factors.items():
            if factor.grams_per_km < 0:
                raise ValueError(
                    f"{VehicleType(vt).name} factor must be >= 0, got {factor.grams_per_km}"
                )
        self._factors: tuple[EmissionFactor, ...] = tuple(
            factors[vt] for vt in VehicleType
        )

    def _index(self, vehicle_type: int) -> int | None:
        try:
            idx = operator.index(vehicle_type)
        except TypeError:
            return None
        if 0 <= idx < len(self._factors):
            return idx
        return None

    def lookup(self, vehicle_type: int) -> EmissionFactor:
        """Return the factor for *vehicle_type*.

        Raises:
            InvalidVehicleType: identifier outside the catalog range.
        """
        idx = self._index(vehicle_type)
        if idx is None:
            log.warning(
                "catalog.lookup_failed",
                vehicle_type=vehicle_type,
                catalog_size=len(self._factors),
            )
            raise InvalidVehicleType(vehicle_type, len(self._factors))
        return self._factors[idx]

    def get(self, vehicle_type: int) -> EmissionFactor | None:
        """Like ``lookup`` but returns ``None`` for unknown identifiers, silently."""
        idx = self._index(vehicle_type)
        return None if idx is None else self._factors[idx]

    def estimate_grams(self, vehicle_type: int, distance_km: float) -> float:
        """Emissions in grams for a trip; ``0`` for unknown vehicle types.

        Distance is not validated, callers guard positivity.
        """
        idx = self._index(vehicle_type)
        if idx is None:
            return 0
        return self._factors[idx].grams_per_km * distance_km

    def display_name(self, vehicle_type: int) -> str:
        idx = self._index(vehicle_type)
        if idx is None:
            return UNKNOWN_VEHICLE_NAME
        return self._factors[idx].name

    def with_overrides(self, grams_per_km: Mapping[int, float]) -> EmissionCatalog:
        """Return a new catalog with some factors replaced (e.g. regional data).

        The receiver is left unchanged.
        """
        factors = dict(self.items())
        for vehicle_type, grams in grams_per_km.items():
            self.lookup(vehicle_type)
            vt = VehicleType(int(vehicle_type))
            factors[vt] = EmissionFactor(factors[vt].name, float(grams))
        return EmissionCatalog(factors)

    def items(self) -> Iterator[tuple[VehicleType, EmissionFactor]]:
        for vt in VehicleType:
            yield vt, self._factors[vt]

    def __iter__(self) -> Iterator[VehicleType]:
        return iter(VehicleType)

    def __len__(self) -> int:
        return len(self._factors)

    def __repr__(self) -> str:
        body = ", ".join(f"{vt.name}={f.grams_per_km:g}" for vt, f in self.items())
        return f"EmissionCatalog({body})"


DEFAULT_CATALOG = EmissionCatalog(_DEFAULT_FACTORS)


def lookup(vehicle_type: int) -> EmissionFactor:
    """Strict lookup against the default catalog."""
    return DEFAULT_CATALOG.lookup(vehicle_type)


def estimate_grams(vehicle_type: int, distance_km: float) -> float:
    """Lenient estimate against the default catalog."""
    return DEFAULT_CATALOG.estimate_grams(vehicle_type, distance_km)
