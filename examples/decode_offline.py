#!/usr/bin/env python3
"""Example: compile the packaged schema and decode captured raw words without a device."""

import sys

from modbus_regmap import RegisterMap, write_package
from modbus_regmap.errors import DecodeError, SchemaFormatError


def main() -> None:
    try:
        regmap = RegisterMap()
    except SchemaFormatError as e:
        print(f"Schema error: {e}", file=sys.stderr)
        sys.exit(1)

    # Raw words as captured from a bus trace
    captured = {
        "holding.OperationMode": [4],
        "input.ODUOperatingCycle": [2],
        "input.WaterInletTemperature": [352],
        "input.OutdoorAirTemperature": [0xFFFF],
        "discrete.CompressorStatus": [True],
    }

    for name, raw in captured.items():
        register_type = regmap.find(name)
        try:
            value = register_type.decode(raw)
        except DecodeError as e:
            print(f"{name}: {e}", file=sys.stderr)
            continue
        print(f"{name:<32} reg={register_type.reg():<3} raw={raw} -> {value}")

    # Unlisted codes decode to Unknown
    print(f"OperationMode code 7 -> {regmap.find('OperationMode').decode([7])}")

    # Same registers as importable source
    written = write_package(regmap.compiled, "therma_v_registers", source_name=regmap.source)
    print(f"Wrote {len(written)} files to therma_v_registers/")


if __name__ == "__main__":
    main()
