"""RegisterClient: thin pymodbus wrapper that reads/writes compiled register types."""

import logging
import time
from typing import Any, Iterator, Sequence

from pymodbus.client import ModbusSerialClient, ModbusTcpClient
from pymodbus.exceptions import ModbusException as PymodbusException

from .errors import ModbusIOError
from .registers import UNITS_PER_REGISTER, RegisterType
from .types import RegisterCategory

logger = logging.getLogger(__name__)

DEFAULT_BAUD_RATE = 9600
DEFAULT_TIMEOUT = 1.0

_READ_FUNCTIONS: dict[RegisterCategory, str] = {
    RegisterCategory.COIL: "read_coils",
    RegisterCategory.DISCRETE: "read_discrete_inputs",
    RegisterCategory.HOLDING: "read_holding_registers",
    RegisterCategory.INPUT: "read_input_registers",
}


def qualified_name(register_type: RegisterType) -> str:
    return f"{register_type.category.value}.{register_type.__name__}"


class RegisterClient:
    """
    Modbus client that reads and writes by register type (e.g. holding.OperationMode).
    Serial RTU when tty_path is given, otherwise Modbus TCP to host:port.
    A failed read is retried `retries` times, `retry_delay` seconds apart.
    """

    def __init__(
        self,
        tty_path: str | None = None,
        host: str | None = None,
        port: int = 502,
        unit_id: int = 1,
        baudrate: int = DEFAULT_BAUD_RATE,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = 1,
        retry_delay: float = 0.05,
    ) -> None:
        if not tty_path and not host:
            raise ValueError("Either tty_path or host is required")
        self._tty_path = tty_path
        self._host = host
        self._port = port
        self._unit_id = unit_id
        self._baudrate = baudrate
        self._timeout = timeout
        self._retries = retries
        self._retry_delay = retry_delay
        self._client: ModbusSerialClient | ModbusTcpClient | None = None

    @property
    def endpoint(self) -> str:
        return self._tty_path if self._tty_path else f"{self._host}:{self._port}"

    def _get_client(self) -> ModbusSerialClient | ModbusTcpClient:
        if self._client is None:
            if self._tty_path:
                self._client = ModbusSerialClient(
                    port=self._tty_path,
                    baudrate=self._baudrate,
                    timeout=self._timeout,
                )
            else:
                self._client = ModbusTcpClient(
                    host=self._host,
                    port=self._port,
                    timeout=self._timeout,
                )
            if not self._client.connect():
                self._client = None
                raise ModbusIOError(f"Failed to connect to {self.endpoint}")
        return self._client

    def _read_once(self, category: RegisterCategory, address: int, count: int) -> list[bool] | list[int]:
        client = self._get_client()
        read = getattr(client, _READ_FUNCTIONS[category])
        try:
            rr = read(address, count=count, device_id=self._unit_id)
        except PymodbusException as e:
            raise ModbusIOError(str(e), category=category.value, address=address, cause=e) from e
        if rr.isError():
            raise ModbusIOError(
                str(rr),
                category=category.value,
                address=address,
                cause=getattr(rr, "exception", None),
            )
        if category.is_bit:
            bits = getattr(rr, "bits", None)
            # bit responses are padded to whole bytes
            if not bits or len(bits) < count:
                raise ModbusIOError("Short bit response", category=category.value, address=address)
            return [bool(b) for b in bits[:count]]
        registers = getattr(rr, "registers", None)
        if not registers or len(registers) < count:
            raise ModbusIOError("Short register response", category=category.value, address=address)
        return [int(w) for w in registers[:count]]

    def read_raw(
        self,
        category: RegisterCategory | str,
        address: int,
        count: int = UNITS_PER_REGISTER,
    ) -> list[bool] | list[int]:
        """Read `count` raw bits or words; retries a failed read before giving up."""
        category = RegisterCategory(category)
        attempt = 0
        while True:
            try:
                return self._read_once(category, address, count)
            except ModbusIOError as e:
                if attempt >= self._retries:
                    raise
                attempt += 1
                logger.warning(
                    "Read %s@%d failed (%s), retry %d/%d",
                    category.value,
                    address,
                    e,
                    attempt,
                    self._retries,
                )
                time.sleep(self._retry_delay)

    def read(self, register_type: RegisterType) -> Any:
        """Read and decode one register; returns the register value object or enum member."""
        raw = self.read_raw(register_type.category, register_type.address)
        value = register_type.decode(raw)
        logger.debug("%s %d=%s", qualified_name(register_type), register_type.address, value)
        return value

    def read_many(self, register_types: Sequence[RegisterType]) -> dict[str, Any]:
        """Read several registers one at a time, keyed by "category.Name"."""
        return {qualified_name(t): self.read(t) for t in register_types}

    def write(self, register_type: RegisterType, value: Any) -> None:
        """Encode and write a value to a coil or holding register."""
        category = register_type.category
        address = register_type.address
        name = qualified_name(register_type)
        if not category.is_writable:
            raise ModbusIOError(
                f"Write not supported for {category.value} registers",
                register=name,
                category=category.value,
                address=address,
            )
        raw = register_type.encode(value)
        client = self._get_client()
        try:
            if category == RegisterCategory.COIL:
                rr = client.write_coil(address, raw[0], device_id=self._unit_id)
            else:
                rr = client.write_register(address, raw[0], device_id=self._unit_id)
        except PymodbusException as e:
            raise ModbusIOError(str(e), register=name, category=category.value, address=address, cause=e) from e
        if rr.isError():
            raise ModbusIOError(
                str(rr),
                register=name,
                category=category.value,
                address=address,
                cause=getattr(rr, "exception", None),
            )
        logger.info("Wrote %s %d=%r", name, address, raw[0])

    def connect(self) -> None:
        """Open the serial port or TCP connection."""
        self._get_client()

    def close(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            except Exception as e:
                logger.warning("Error closing Modbus client: %s", e)
            self._client = None

    def __enter__(self) -> "RegisterClient":
        self.connect()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def poll_iter(self, register_types: Sequence[RegisterType], interval_s: float) -> Iterator[dict[str, Any]]:
        """Yield read_many(register_types) every interval_s seconds indefinitely."""
        while True:
            yield self.read_many(register_types)
            time.sleep(interval_s)
