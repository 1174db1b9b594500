"""Tests for simulated and static binding values."""

from __future__ import annotations

import math

import pytest

from dxascend.runtime.values import (
    analog_base,
    simulate_datapoint_value,
    static_unit,
    static_value,
)


class TestDigitalSimulation:
    def test_square_wave_has_twenty_second_cycle(self) -> None:
        dp = {"id": 0, "function": "coil"}
        assert simulate_datapoint_value(dp, 0.0) is True
        assert simulate_datapoint_value(dp, 9.5) is True
        assert simulate_datapoint_value(dp, 10.0) is False
        assert simulate_datapoint_value(dp, 19.5) is False
        assert simulate_datapoint_value(dp, 20.0) is True

    def test_id_shifts_phase(self) -> None:
        assert simulate_datapoint_value({"id": 1, "function": "coil"}, 0.0) is False
        assert simulate_datapoint_value({"id": 2, "function": "coil"}, 0.0) is True

    def test_function_is_case_insensitive(self) -> None:
        value = simulate_datapoint_value({"id": 0, "function": "Discrete_Input"}, 3.0)
        assert value is True

    @pytest.mark.parametrize("t", [0.0, 4.2, 13.7, 1_700_000_000.25])
    def test_repeats_every_period(self, t: float) -> None:
        dp = {"id": 3, "function": "coil"}
        assert simulate_datapoint_value(dp, t) == simulate_datapoint_value(dp, t + 20.0)


class TestAnalogSimulation:
    @pytest.mark.parametrize(
        "unit, base",
        [("°C", 20.0), ("deg C", 20.0), ("%", 50.0), ("bar", 10.0), (None, 10.0), ("", 10.0)],
    )
    def test_unit_selects_base(self, unit, base) -> None:
        assert analog_base(unit) == base

    def test_value_at_origin_is_base(self) -> None:
        dp = {"id": 0, "function": "holding_register", "unit": "°C"}
        assert simulate_datapoint_value(dp, 0.0) == pytest.approx(20.0)

    def test_scale_and_offset(self) -> None:
        dp = {"id": 2, "function": "input_register", "unit": "%", "scale": 0.5, "offset": 3}
        expected = (50 + 5 * math.sin(7.0 / 10 + 2)) * 0.5 + 3
        assert simulate_datapoint_value(dp, 7.0) == pytest.approx(expected)

    def test_non_numeric_scale_and_offset_fall_back(self) -> None:
        dp = {"id": 1, "function": "input_register", "scale": "x", "offset": None}
        expected = 10 + 5 * math.sin(1)
        assert simulate_datapoint_value(dp, 0.0) == pytest.approx(expected)

    def test_missing_id_counts_as_zero(self) -> None:
        assert simulate_datapoint_value({"function": "holding_register"}, 0.0) == 10.0

    def test_pure_function_of_descriptor_and_time(self) -> None:
        dp = {"id": 9, "function": "holding_register", "unit": "kW", "scale": 2.0}
        first = simulate_datapoint_value(dp, 1234.5)
        second = simulate_datapoint_value(dict(dp), 1234.5)
        assert first == second


class TestStaticValues:
    @pytest.mark.parametrize(
        "properties, expected",
        [
            ({"value": 5}, 5),
            ({"value": "12.5"}, 12.5),
            ({"value": "12"}, 12),
            ({"value": None, "default": "7"}, 7),
            ({"default": False}, False),
            ({"value": "on"}, "on"),
            ({}, None),
        ],
    )
    def test_static_value(self, properties, expected) -> None:
        assert static_value(properties) == expected

    def test_value_wins_over_default(self) -> None:
        assert static_value({"value": 1, "default": 2}) == 1

    def test_unit_lookup_order(self) -> None:
        assert static_unit({"unit": "kW", "unitText": "kilowatt"}) == "kW"
        assert static_unit({"units": "", "unitsText": "bar"}) == "bar"
        assert static_unit({}) is None
