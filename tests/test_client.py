"""Tests for RegisterClient pymodbus dispatch, retries and writes (mocked client)."""

from unittest.mock import MagicMock, patch

import pytest

from modbus_regmap import RegisterClient, RegisterMap
from modbus_regmap.errors import EncodeError, ModbusIOError


@pytest.fixture
def regmap() -> RegisterMap:
    return RegisterMap()


@pytest.fixture
def mock_modbus_client() -> MagicMock:
    client = MagicMock()
    client.connect.return_value = True
    client.read_coils.return_value = MagicMock(isError=lambda: False, bits=[True, False, False, False, False, False, False, False])
    client.read_discrete_inputs.return_value = MagicMock(isError=lambda: False, bits=[False] * 8)
    client.read_input_registers.return_value = MagicMock(isError=lambda: False, registers=[215])
    client.read_holding_registers.return_value = MagicMock(isError=lambda: False, registers=[4])
    client.write_coil.return_value = MagicMock(isError=lambda: False)
    client.write_register.return_value = MagicMock(isError=lambda: False)
    return client


@pytest.fixture
def plc(mock_modbus_client: MagicMock) -> RegisterClient:
    with patch("modbus_regmap.client.ModbusTcpClient", return_value=mock_modbus_client):
        client = RegisterClient(host="127.0.0.1", retry_delay=0)
        client.connect()
    return client


def test_requires_endpoint() -> None:
    with pytest.raises(ValueError, match="tty_path or host"):
        RegisterClient()


def test_serial_client_created(mock_modbus_client: MagicMock) -> None:
    with patch("modbus_regmap.client.ModbusSerialClient", return_value=mock_modbus_client) as serial:
        client = RegisterClient(tty_path="/dev/ttyUSB0", unit_id=2)
        client.connect()
    serial.assert_called_once_with(port="/dev/ttyUSB0", baudrate=9600, timeout=1.0)
    assert client.endpoint == "/dev/ttyUSB0"


def test_tcp_client_created(mock_modbus_client: MagicMock) -> None:
    with patch("modbus_regmap.client.ModbusTcpClient", return_value=mock_modbus_client) as tcp:
        client = RegisterClient(host="10.0.0.5", port=5020, timeout=2.0)
        client.connect()
    tcp.assert_called_once_with(host="10.0.0.5", port=5020, timeout=2.0)
    assert client.endpoint == "10.0.0.5:5020"


def test_connect_failure(mock_modbus_client: MagicMock) -> None:
    mock_modbus_client.connect.return_value = False
    with patch("modbus_regmap.client.ModbusTcpClient", return_value=mock_modbus_client):
        client = RegisterClient(host="127.0.0.1")
        with pytest.raises(ModbusIOError, match="Failed to connect"):
            client.connect()


def test_read_holding_enum(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    OperationMode = regmap.find("OperationMode")
    assert plc.read(OperationMode) is OperationMode.Heating
    mock_modbus_client.read_holding_registers.assert_called_once_with(0, count=1, device_id=1)


def test_read_input_float(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    value = plc.read(regmap.find("WaterInletTemperature"))
    assert value.value == pytest.approx(21.5)
    mock_modbus_client.read_input_registers.assert_called_once_with(2, count=1, device_id=1)


def test_read_coil_slices_padded_bits(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    value = plc.read(regmap.find("coil.EmergencyStop"))
    assert str(value) == "Stop"
    mock_modbus_client.read_coils.assert_called_once_with(3, count=1, device_id=1)


def test_read_discrete(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    value = plc.read(regmap.find("WaterPumpStatus"))
    assert value.value is False
    mock_modbus_client.read_discrete_inputs.assert_called_once()


def test_read_many_keys(plc: RegisterClient, regmap: RegisterMap) -> None:
    results = plc.read_many([regmap.find("OperationMode"), regmap.find("WaterInletTemperature")])
    assert list(results) == ["holding.OperationMode", "input.WaterInletTemperature"]


def test_read_retries_once(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    mock_modbus_client.read_holding_registers.side_effect = [
        MagicMock(isError=lambda: True),
        MagicMock(isError=lambda: False, registers=[3]),
    ]
    OperationMode = regmap.find("OperationMode")
    assert plc.read(OperationMode) is OperationMode.Auto
    assert mock_modbus_client.read_holding_registers.call_count == 2


def test_read_gives_up_after_retries(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    mock_modbus_client.read_holding_registers.return_value = MagicMock(isError=lambda: True)
    with pytest.raises(ModbusIOError) as exc_info:
        plc.read(regmap.find("OperationMode"))
    assert exc_info.value.category == "holding"
    assert exc_info.value.address == 0
    assert mock_modbus_client.read_holding_registers.call_count == 2


def test_short_response(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    mock_modbus_client.read_input_registers.return_value = MagicMock(isError=lambda: False, registers=[])
    with pytest.raises(ModbusIOError, match="Short register response"):
        plc.read(regmap.find("ErrorCode"))


def test_write_coil(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    plc.write(regmap.find("SilentModeSet"), "On")
    mock_modbus_client.write_coil.assert_called_once_with(2, True, device_id=1)


def test_write_holding_enum(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    OperationMode = regmap.find("OperationMode")
    plc.write(OperationMode, OperationMode.Cooling)
    mock_modbus_client.write_register.assert_called_once_with(0, 0, device_id=1)


def test_write_holding_float(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    plc.write(regmap.find("DHWTargetTemp"), 48.5)
    mock_modbus_client.write_register.assert_called_once_with(8, 485, device_id=1)


def test_write_read_only_rejected(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    with pytest.raises(ModbusIOError, match="Write not supported for input"):
        plc.write(regmap.find("ErrorCode"), 1)
    mock_modbus_client.write_register.assert_not_called()


def test_write_bad_value(plc: RegisterClient, regmap: RegisterMap, mock_modbus_client: MagicMock) -> None:
    with pytest.raises(EncodeError):
        plc.write(regmap.find("OperationMode"), "Off")
    mock_modbus_client.write_register.assert_not_called()


def test_close(plc: RegisterClient, mock_modbus_client: MagicMock) -> None:
    plc.close()
    mock_modbus_client.close.assert_called_once()
    plc.close()
    mock_modbus_client.close.assert_called_once()
