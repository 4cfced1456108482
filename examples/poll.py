#!/usr/bin/env python3
"""Example: poll a few heat pump registers over Modbus RTU using poll_iter; graceful shutdown on Ctrl+C."""

import sys

from modbus_regmap import RegisterClient, RegisterMap
from modbus_regmap.errors import ModbusIOError, UnknownRegisterError


def main() -> None:
    tty_path = "/dev/ttyUSB0"  # change to your RS-485 adapter
    unit_id = 1
    names = ["OperationMode", "WaterInletTemperature", "WaterOutletTemperature", "CompressorStatus"]
    interval_s = 5.0

    try:
        regmap = RegisterMap()
        register_types = [regmap.find(name) for name in names]
        with RegisterClient(tty_path=tty_path, unit_id=unit_id) as client:
            print(f"Polling {names} every {interval_s}s (Ctrl+C to stop)...")
            for snapshot in client.poll_iter(register_types, interval_s):
                print(", ".join(f"{name}={value}" for name, value in snapshot.items()))
    except KeyboardInterrupt:
        print("\nStopped.")
    except UnknownRegisterError as e:
        print(f"Unknown register: {e}", file=sys.stderr)
        sys.exit(1)
    except ModbusIOError as e:
        print(f"Modbus/connection error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
