"""Tests for identifier synthesis and topic names."""

import pytest

from modbus_regmap import synthesize_identifier, topic_name
from modbus_regmap.naming import is_valid_identifier


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Water Pump Status", "WaterPumpStatus"),
        ("Target Temp (°C)", "TargetTempC"),
        ("dhw heating status (on/off)", "DhwHeatingStatusOnOff"),
        ("Operation Mode", "OperationMode"),
        ("DHW Target Temp", "DHWTargetTemp"),
        ("Backup Heater (Step 1) Status", "BackupHeaterStep1Status"),
        ("Enable/Disable (Heating/Cooling)", "EnableDisableHeatingCooling"),
        ("On-Command Step 2", "OnCommandStep2"),
        ("  leading   and trailing  ", "LeadingAndTrailing"),
        ("under_score", "UnderScore"),
        ("camelCase word", "CamelCaseWord"),
    ],
)
def test_synthesize_identifier(description: str, expected: str) -> None:
    assert synthesize_identifier(description) == expected


def test_synthesize_identifier_is_deterministic() -> None:
    text = "Shift Value (Target) in Auto Mode Circuit 1"
    assert synthesize_identifier(text) == synthesize_identifier(text) == "ShiftValueTargetInAutoModeCircuit1"


def test_synthesize_identifier_merges_adjacent_tokens() -> None:
    """Symbol-only words vanish, so neighbouring tokens merge."""
    assert synthesize_identifier("1 / 2") == "12"
    assert synthesize_identifier("A - B") == "AB"


def test_synthesize_identifier_empty_inputs() -> None:
    assert synthesize_identifier("") == ""
    assert synthesize_identifier("   ") == ""
    assert synthesize_identifier("(%)") == ""


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("WaterInletTemperature", "water_inlet_temperature"),
        ("DHWTargetTemp", "d_h_w_target_temp"),
        ("DHWHeatingStatusDHWThermalOnOff", "d_h_w_heating_status_d_h_w_thermal_on_off"),
        ("RoomAirTempCircuit1", "room_air_temp_circuit1"),
        ("Status", "status"),
    ],
)
def test_topic_name(identifier: str, expected: str) -> None:
    assert topic_name(identifier) == expected


@pytest.mark.parametrize(
    ("name", "valid"),
    [
        ("OperationMode", True),
        ("Heating", True),
        ("", False),
        ("1stStage", False),
        ("None", False),
        ("True", False),
        ("_Hidden", False),
    ],
)
def test_is_valid_identifier(name: str, valid: bool) -> None:
    assert is_valid_identifier(name) is valid
