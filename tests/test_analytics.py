"""
tests/test_analytics.py
=======================
Unit tests for the derived-statistics functions and display formatting.

Covers:
* Fixed-decimal rounding (half away from zero).
* format_carbon g / kg switch at 1000 g.
* compare_vehicles saving, winner, percentage and 0/0 handling.
* yearly_impact projections and tree count.
* suggest_alternatives filtering, ordering and limit.
* calculate_equivalents constants.
"""

from __future__ import annotations

import pytest
from carbontrack.ledger.analytics import (
    calculate_equivalents,
    compare_vehicles,
    format_carbon,
    round_half_up,
    suggest_alternatives,
    to_fixed,
    yearly_impact,
)
from carbontrack.ledger.catalog import DEFAULT_CATALOG, VehicleType

# ---------------------------------------------------------------------------
# Rounding & formatting
# ---------------------------------------------------------------------------


class TestRounding:
    def test_to_fixed_pads_decimals(self) -> None:
        assert to_fixed(816, 1) == "816.0"
        assert to_fixed(0, 2) == "0.00"

    def test_to_fixed_rounds_exact_half_up(self) -> None:
        # 0.125 is exactly representable; banker's rounding would give 0.12
        assert to_fixed(0.125, 2) == "0.13"
        assert to_fixed(2.5, 0) == "3"

    def test_to_fixed_uses_binary_value(self) -> None:
        # 1.005 is stored as 1.00499999...
        assert to_fixed(1.005, 2) == "1.00"

    def test_to_fixed_never_negative_zero(self) -> None:
        assert to_fixed(-0.0001, 2) == "0.00"

    def test_round_half_up(self) -> None:
        assert round_half_up(12.5) == 13
        assert round_half_up(66.6) == 67
        assert round_half_up(0.4) == 0


class TestFormatCarbon:
    def test_grams_below_threshold(self) -> None:
        assert format_carbon(900) == "900 g"
        assert format_carbon(0) == "0 g"

    def test_grams_rendered_as_integer(self) -> None:
        assert format_carbon(312.4) == "312 g"

    def test_kilograms_at_threshold(self) -> None:
        assert format_carbon(1000) == "1.00 kg"

    def test_kilograms_two_decimals(self) -> None:
        assert format_carbon(2550) == "2.55 kg"
        assert format_carbon(816000) == "816.00 kg"

    def test_very_large_values(self) -> None:
        # more digits than the default 28-digit decimal context holds
        assert format_carbon(1e30) == f"{int(1e30 / 1000)}.00 kg"
        assert to_fixed(1e30, 2) == f"{int(1e30)}.00"
        assert round_half_up(1e30) == int(1e30)


# ---------------------------------------------------------------------------
# compare_vehicles
# ---------------------------------------------------------------------------


class TestCompareVehicles:
    def test_gasoline_vs_bike(self) -> None:
        cmp = compare_vehicles(VehicleType.CAR_GASOLINE, VehicleType.BIKE, 10)
        assert cmp.saving == pytest.approx(1700)
        assert cmp.better_vehicle == VehicleType.BIKE
        assert cmp.better_vehicle_name == "Bicycle"
        assert cmp.percentage == 100
        assert cmp.saving_kg == "1.70"
        assert cmp.vehicle_a.carbon_kg == "1.70"
        assert cmp.vehicle_b.carbon_kg == "0.00"

    def test_order_of_arguments_does_not_change_saving(self) -> None:
        ab = compare_vehicles(VehicleType.TRAIN, VehicleType.BUS, 10)
        ba = compare_vehicles(VehicleType.BUS, VehicleType.TRAIN, 10)
        assert ab.saving == ba.saving == pytest.approx(600)
        assert ab.better_vehicle == ba.better_vehicle == VehicleType.TRAIN
        assert ab.percentage == ba.percentage == 67

    def test_percentage_rounding(self) -> None:
        cmp = compare_vehicles(VehicleType.CAR_GASOLINE, VehicleType.CAR_DIESEL, 100)
        assert cmp.better_vehicle == VehicleType.CAR_DIESEL
        assert cmp.percentage == 6

    def test_percentage_exact_half_rounds_up(self) -> None:
        catalog = DEFAULT_CATALOG.with_overrides({VehicleType.BUS: 87.5})
        cmp = compare_vehicles(VehicleType.MOTORCYCLE, VehicleType.BUS, 1, catalog)
        assert cmp.saving == pytest.approx(12.5)
        assert cmp.percentage == 13

    def test_both_zero_gives_zero_percentage(self) -> None:
        cmp = compare_vehicles(VehicleType.BIKE, VehicleType.WALKING, 5)
        assert cmp.saving == 0
        assert cmp.percentage == 0

    def test_tie_resolves_to_first_vehicle(self) -> None:
        cmp = compare_vehicles(VehicleType.WALKING, VehicleType.BIKE, 5)
        assert cmp.better_vehicle == VehicleType.WALKING

    def test_unknown_vehicle_counts_as_zero(self) -> None:
        cmp = compare_vehicles(VehicleType.BUS, 42, 10)
        assert cmp.vehicle_b.name == "Unknown"
        assert cmp.better_vehicle == 42
        assert cmp.percentage == 100

    def test_to_dict_is_nested(self) -> None:
        d = compare_vehicles(VehicleType.BUS, VehicleType.TRAIN, 1).to_dict()
        assert d["vehicle_a"]["name"] == "Bus"
        assert "percentage" in d


# ---------------------------------------------------------------------------
# yearly_impact
# ---------------------------------------------------------------------------


class TestYearlyImpact:
    def test_commuter_gasoline(self) -> None:
        impact = yearly_impact(VehicleType.CAR_GASOLINE, 20, 5, 48)
        assert impact.weekly_distance == pytest.approx(100)
        assert impact.yearly_distance == pytest.approx(4800)
        assert impact.yearly_carbon == pytest.approx(816000)
        assert impact.yearly_carbon_kg == "816.0"
        assert impact.trees_needed == 39

    def test_period_breakdown(self) -> None:
        impact = yearly_impact(VehicleType.CAR_GASOLINE, 20, 5, 48)
        assert impact.daily_carbon_kg == "3.40"
        assert impact.weekly_carbon_kg == "17.00"
        # month approximated as four weeks
        assert impact.monthly_carbon_kg == "68.00"

    def test_zero_emission_mode(self) -> None:
        impact = yearly_impact(VehicleType.BIKE, 10, 5, 52)
        assert impact.yearly_carbon_kg == "0.0"
        assert impact.trees_needed == 0
        assert impact.monthly_carbon_kg == "0.00"

    def test_trees_round_up(self) -> None:
        # 21.03 kg/year needs a second tree
        impact = yearly_impact(VehicleType.TRAIN, 701, 1, 1)
        assert impact.yearly_carbon_kg == "21.0"
        assert impact.trees_needed == 2


# ---------------------------------------------------------------------------
# suggest_alternatives
# ---------------------------------------------------------------------------


class TestSuggestAlternatives:
    def test_top_three_for_gasoline(self) -> None:
        alts = suggest_alternatives(VehicleType.CAR_GASOLINE, 10)
        assert [a.vehicle_type for a in alts] == [
            VehicleType.BIKE,
            VehicleType.WALKING,
            VehicleType.TRAIN,
        ]
        assert [a.saving for a in alts] == pytest.approx([1700, 1700, 1400])

    def test_sorted_by_descending_saving(self) -> None:
        alts = suggest_alternatives(VehicleType.CAR_DIESEL, 25)
        savings = [a.saving for a in alts]
        assert savings == sorted(savings, reverse=True)

    def test_never_suggests_current_vehicle(self) -> None:
        for vt in VehicleType:
            alts = suggest_alternatives(vt, 12)
            assert vt not in [a.vehicle_type for a in alts]
            assert len(alts) <= 3
            assert all(a.saving > 0 for a in alts)

    def test_only_strictly_cheaper(self) -> None:
        alts = suggest_alternatives(VehicleType.TRAIN, 10)
        assert [a.vehicle_type for a in alts] == [VehicleType.BIKE, VehicleType.WALKING]

    def test_zero_emission_has_no_alternatives(self) -> None:
        assert suggest_alternatives(VehicleType.WALKING, 10) == []

    def test_unknown_vehicle_has_no_alternatives(self) -> None:
        assert suggest_alternatives(99, 10) == []

    def test_entry_fields(self) -> None:
        alt = suggest_alternatives(VehicleType.BUS, 10)[0]
        assert alt.name == "Bicycle"
        assert alt.carbon == 0
        assert alt.factor == 0
        assert alt.saving == pytest.approx(900)
        assert alt.percentage == 100

    def test_reduction_percentage(self) -> None:
        # gasoline 170 g/km vs train 30 g/km: 140/170 = 82.35 %
        alts = suggest_alternatives(VehicleType.CAR_GASOLINE, 10)
        assert [a.percentage for a in alts] == [100, 100, 82]

    def test_negative_distance_does_not_divide_by_zero(self) -> None:
        alts = suggest_alternatives(VehicleType.BIKE, -5)
        assert alts
        assert all(a.percentage == 0 for a in alts)


# ---------------------------------------------------------------------------
# calculate_equivalents
# ---------------------------------------------------------------------------


class TestEquivalents:
    def test_example_trip(self) -> None:
        eq = calculate_equivalents(2.55)
        assert eq.trees == 1
        assert eq.smartphone_charges == 62
        assert eq.tv_hours == 255
        assert eq.car_km_equivalent == "15.0"

    def test_zero(self) -> None:
        eq = calculate_equivalents(0)
        assert (eq.trees, eq.smartphone_charges, eq.tv_hours) == (0, 0, 0)
        assert eq.car_km_equivalent == "0.0"

    def test_exactly_one_tree(self) -> None:
        eq = calculate_equivalents(21)
        assert eq.trees == 1
        assert eq.smartphone_charges == 504
        assert eq.tv_hours == 2100
        assert eq.car_km_equivalent == "123.5"
