#!/usr/bin/env python3
"""CLI for modbus-regmap using Typer: inspect, decode, and generate register types; poll devices."""

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

import typer
from typing_extensions import Annotated

from . import __version__
from .client import RegisterClient, qualified_name
from .descriptors import BooleanDescriptor, EnumDescriptor, FloatDescriptor
from .emit import write_package
from .errors import (
    DecodeError,
    EncodeError,
    ModbusIOError,
    SchemaFormatError,
    SchemaIOError,
    UnknownRegisterError,
)
from .registers import (
    BooleanRegister,
    EnumRegister,
    FloatRegister,
    ModbusRegister,
    RegisterType,
    SignedRegister,
)
from .regmap import RegisterMap
from .schema import DEFAULT_PROFILE
from .types import RegisterCategory

app = typer.Typer(
    name="regmap",
    help="Compile Modbus register schemas into typed accessors; decode and poll registers.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Shared options and helpers
# ============================================================================

SchemaOption = Annotated[
    Optional[Path],
    typer.Option("--schema", "-s", help="Register schema JSON file (overrides --profile)", envvar="REGMAP_SCHEMA"),
]
ProfileOption = Annotated[
    str,
    typer.Option("--profile", help="Packaged register schema profile", envvar="REGMAP_PROFILE"),
]
TtyOption = Annotated[
    Optional[str],
    typer.Option("--tty", help="Serial device for Modbus RTU (e.g. /dev/ttyUSB0)", envvar="REGMAP_TTY"),
]
HostOption = Annotated[
    Optional[str],
    typer.Option("--host", "-h", help="Modbus TCP gateway hostname or IP address", envvar="REGMAP_HOST"),
]
PortOption = Annotated[
    int,
    typer.Option("--port", "-p", help="Modbus TCP port", envvar="REGMAP_PORT"),
]
UnitIdOption = Annotated[
    int,
    typer.Option("--unit-id", "-u", help="Modbus slave/unit ID", envvar="REGMAP_UNIT_ID"),
]
BaudrateOption = Annotated[
    int,
    typer.Option("--baudrate", "-b", help="Serial baud rate", envvar="REGMAP_BAUDRATE"),
]
TimeoutOption = Annotated[
    float,
    typer.Option("--timeout", "-t", help="Request timeout in seconds", envvar="REGMAP_TIMEOUT"),
]
RetriesOption = Annotated[
    int,
    typer.Option("--retries", "-r", help="Number of retries on a failed read", envvar="REGMAP_RETRIES"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not verbose else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@contextmanager
def cli_errors(verbose: bool) -> Iterator[None]:
    """Map library errors to exit codes: 2 schema/usage, 3 Modbus I/O, 4 unexpected."""
    try:
        yield
    except typer.Exit:
        raise
    except (SchemaIOError, SchemaFormatError) as e:
        typer.echo(f"Error: Schema error: {e}", err=True)
        raise typer.Exit(2)
    except UnknownRegisterError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    except (DecodeError, EncodeError) as e:
        typer.echo(f"Error: Invalid value: {e}", err=True)
        raise typer.Exit(2)
    except ModbusIOError as e:
        typer.echo(f"Error: Connection/Modbus error: {e}", err=True)
        raise typer.Exit(3)
    except Exception as e:
        typer.echo(f"Error: Unexpected error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(4)


def load_regmap(profile: str, schema: Optional[Path]) -> RegisterMap:
    """Compile the schema file if given, else the packaged profile."""
    if schema is not None:
        return RegisterMap(schema_path=schema)
    return RegisterMap(profile=profile)


def create_client(
    tty: Optional[str],
    host: Optional[str],
    port: int,
    unit_id: int,
    baudrate: int,
    timeout: float,
    retries: int,
) -> RegisterClient:
    """Create and return a RegisterClient instance."""
    if not tty and not host:
        typer.echo("Error: --tty or --host is required for this command", err=True)
        raise typer.Exit(2)
    return RegisterClient(
        tty_path=tty,
        host=host,
        port=port,
        unit_id=unit_id,
        baudrate=baudrate,
        timeout=timeout,
        retries=retries,
    )


def parse_bool(value: str) -> bool:
    """Parse boolean value from string."""
    v = value.lower().strip()
    if v in ("true", "1", "on", "yes"):
        return True
    if v in ("false", "0", "off", "no"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_int(value: str, signed: bool = False) -> int:
    """Parse integer value from string, supporting hex and validation."""
    v = value.strip()
    if v.lower().startswith("0x"):
        num = int(v, 16)
    else:
        num = int(v)

    if signed:
        if not (-32768 <= num <= 32767):
            raise ValueError(f"Signed 16-bit integer out of range: {num}")
    else:
        if not (0 <= num <= 65535):
            raise ValueError(f"Unsigned 16-bit integer out of range: {num}")

    return num


def parse_raw(register_type: RegisterType, values: list[str]) -> list[bool] | list[int]:
    """Raw units from the command line: bits for coil/discrete, 16-bit words otherwise."""
    if register_type.category.is_bit:
        return [parse_bool(v) for v in values]
    return [parse_int(v) for v in values]


def parse_register_value(register_type: RegisterType, value: str) -> Any:
    """Parse a value to write, according to the register's kind."""
    if issubclass(register_type, EnumRegister):
        if value in register_type.__members__:
            return register_type[value]
        member = register_type(parse_int(value))
        if member.value is None:
            raise ValueError(f"{value!r} is not a variant of {register_type.__name__}")
        return member
    if issubclass(register_type, BooleanRegister):
        if value in (register_type.true_label, register_type.false_label):
            return value
        return parse_bool(value)
    if issubclass(register_type, FloatRegister):
        return float(value)
    return parse_int(value, signed=issubclass(register_type, SignedRegister))


def json_value(value: Any) -> Any:
    """Plain JSON value of a decoded register: variant name for enums, value otherwise."""
    if isinstance(value, EnumRegister):
        return value.name
    if isinstance(value, ModbusRegister):
        return value.value
    return value


def describe(regmap: RegisterMap, register_type: RegisterType) -> dict[str, Any]:
    """Descriptor details as a JSON-friendly dict."""
    d = regmap.descriptor(register_type)
    info: dict[str, Any] = {
        "name": d.name,
        "category": d.category.value,
        "address": d.address,
        "kind": d.kind.value,
        "topic": d.topic,
        "description": d.description,
    }
    if isinstance(d, FloatDescriptor):
        info["gain"] = d.gain
    elif isinstance(d, EnumDescriptor):
        info["variants"] = [{"name": v.name, "label": v.label, "code": v.code} for v in d.variants]
    elif isinstance(d, BooleanDescriptor):
        info["values"] = {"true": d.true_label, "false": d.false_label}
    return info


# ============================================================================
# Commands
# ============================================================================


@app.command()
def info(
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show package version, schema source, and register counts per category.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        info_data = {
            "version": __version__,
            "profile": regmap.profile,
            "source": regmap.source,
            "registers": {c.value: len(regmap.registers(c)) for c in RegisterCategory},
        }

        if json_output:
            typer.echo(json.dumps(info_data, indent=2))
        else:
            typer.echo(f"modbus-regmap version: {info_data['version']}")
            typer.echo(f"Profile: {info_data['profile']}")
            typer.echo(f"Source: {info_data['source']}")
            for category, count in info_data["registers"].items():
                typer.echo(f"{category + ':':<10} {count}")


@app.command()
def validate(
    schema_file: Annotated[Path, typer.Argument(help="Register schema JSON file to check")],
    verbose: VerboseOption = False,
) -> None:
    """
    Load and compile a schema file without touching any device.

    Exits 0 when the schema compiles, 2 on any schema error.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = RegisterMap(schema_path=schema_file)
        typer.echo(f"OK: {schema_file} compiles to {len(regmap)} registers")


@app.command(name="list")
def list_registers(
    category: Annotated[
        Optional[RegisterCategory],
        typer.Option("--category", "-c", help="Only list this category", case_sensitive=False),
    ] = None,
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    List compiled registers: category, address, name, kind, and topic.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        categories = [category] if category is not None else list(RegisterCategory)
        rows = [describe(regmap, t) for c in categories for t in regmap.registers(c)]

        if json_output:
            typer.echo(json.dumps(rows, indent=2))
        else:
            for row in rows:
                typer.echo(
                    f"{row['category']:<9} {row['address']:>5}  {row['name']:<40} {row['kind']:<6} {row['topic']}"
                )


@app.command()
def explain(
    name: Annotated[str, typer.Argument(help="Register name, e.g. OperationMode or holding.OperationMode")],
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show category, address, kind, topic, and decode parameters of one register.

    Does not require a connection; uses the compiled schema only.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        info_data = describe(regmap, regmap.find(name))

        if json_output:
            typer.echo(json.dumps(info_data, indent=2))
        else:
            typer.echo(f"Register:     {info_data['category']}.{info_data['name']}")
            typer.echo(f"Description:  {info_data['description']}")
            typer.echo(f"Address:      {info_data['address']}")
            typer.echo(f"Kind:         {info_data['kind']}")
            typer.echo(f"Topic:        {info_data['topic']}")
            if "gain" in info_data:
                typer.echo(f"Gain:         {info_data['gain']}")
            if "values" in info_data:
                typer.echo(f"True label:   {info_data['values']['true']}")
                typer.echo(f"False label:  {info_data['values']['false']}")
            if "variants" in info_data:
                typer.echo("Variants:")
                for v in info_data["variants"]:
                    code = "*" if v["code"] is None else v["code"]
                    typer.echo(f"  {code:>5}  {v['name']}")


@app.command()
def decode(
    name: Annotated[str, typer.Argument(help="Register name, e.g. OperationMode or input.WaterInletTemperature")],
    raw: Annotated[list[str], typer.Argument(help="Raw units: words (decimal or 0x hex) or bits (true/false/1/0)")],
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Decode raw register units offline, exactly as a poller would.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        register_type = regmap.find(name)
        try:
            units = parse_raw(register_type, raw)
        except ValueError as e:
            typer.echo(f"Error: Invalid raw value: {e}", err=True)
            raise typer.Exit(2)
        value = register_type.decode(units)

        if json_output:
            typer.echo(
                json.dumps(
                    {
                        "register": qualified_name(register_type),
                        "raw": units,
                        "value": json_value(value),
                        "text": str(value),
                    }
                )
            )
        else:
            typer.echo(str(value))


@app.command()
def generate(
    out_dir: Annotated[Path, typer.Argument(help="Directory to write the generated package into")],
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Emit one Python module per register category plus __init__.py.

    Output is deterministic: the same schema always produces identical files.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        written = write_package(regmap.compiled, out_dir, source_name=regmap.source)
        typer.echo(f"OK: Wrote {len(written)} files to {out_dir}")


@app.command()
def read(
    name: Annotated[str, typer.Argument(help="Register to read, e.g. OperationMode")],
    tty: TtyOption = None,
    host: HostOption = None,
    port: PortOption = 502,
    unit_id: UnitIdOption = 1,
    baudrate: BaudrateOption = 9600,
    timeout: TimeoutOption = 1.0,
    retries: RetriesOption = 1,
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Read and decode a single register from the device.
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        register_type = regmap.find(name)
        client = create_client(tty, host, port, unit_id, baudrate, timeout, retries)

        with client:
            value = client.read(register_type)

        if json_output:
            typer.echo(json.dumps({"register": qualified_name(register_type), "value": json_value(value)}))
        else:
            typer.echo(str(value))


@app.command()
def write(
    name: Annotated[str, typer.Argument(help="Coil or holding register to write, e.g. SilentModeSet")],
    value: Annotated[str, typer.Argument(help="Value: number, variant name, label, or true/false")],
    tty: TtyOption = None,
    host: HostOption = None,
    port: PortOption = 502,
    unit_id: UnitIdOption = 1,
    baudrate: BaudrateOption = 9600,
    timeout: TimeoutOption = 1.0,
    retries: RetriesOption = 1,
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Encode and write a value to a coil or holding register.

    Enum registers take a variant name (or its code), boolean registers take a label
    or true/false, float registers take engineering units (divided by gain).
    """
    setup_logging(verbose)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        register_type = regmap.find(name)
        try:
            parsed_value = parse_register_value(register_type, value)
        except ValueError as e:
            typer.echo(f"Error: Invalid value: {e}", err=True)
            raise typer.Exit(2)
        client = create_client(tty, host, port, unit_id, baudrate, timeout, retries)

        with client:
            client.write(register_type, parsed_value)
            typer.echo(f"OK: Wrote {qualified_name(register_type)} = {value}")


@app.command()
def poll(
    names: Annotated[list[str], typer.Argument(help="Registers to poll, e.g. OperationMode WaterInletTemperature")],
    tty: TtyOption = None,
    host: HostOption = None,
    port: PortOption = 502,
    unit_id: UnitIdOption = 1,
    baudrate: BaudrateOption = 9600,
    timeout: TimeoutOption = 1.0,
    retries: RetriesOption = 1,
    profile: ProfileOption = DEFAULT_PROFILE,
    schema: SchemaOption = None,
    verbose: VerboseOption = False,
    interval: Annotated[float, typer.Option("--interval", "-i", help="Polling interval in seconds")] = 2.0,
    once: Annotated[bool, typer.Option("--once", help="Poll once and exit")] = False,
    format: Annotated[str, typer.Option("--format", "-f", help="Output format: text, json, csv")] = "text",
) -> None:
    """
    Continuously poll registers at the given interval.

    Outputs format:
    - text: timestamp + name=value pairs (default)
    - json: NDJSON with {"timestamp": "...", "values": {...}} per line
    - csv: register names as columns, one row per poll cycle

    Use --once to poll once and exit.
    Press Ctrl+C to stop gracefully.
    """
    setup_logging(verbose)

    if format not in ("text", "json", "csv"):
        typer.echo(f"Error: Invalid format '{format}'. Must be text, json, or csv.", err=True)
        raise typer.Exit(2)

    if interval <= 0:
        typer.echo(f"Error: Interval must be positive, got {interval}", err=True)
        raise typer.Exit(2)

    with cli_errors(verbose):
        regmap = load_regmap(profile, schema)
        register_types = [regmap.find(n) for n in names]
        display_names = [qualified_name(t) for t in register_types]
        client = create_client(tty, host, port, unit_id, baudrate, timeout, retries)

        if format == "csv":
            typer.echo("timestamp," + ",".join(display_names))

        try:
            with client:
                while True:
                    results = client.read_many(register_types)
                    timestamp = datetime.now(timezone.utc).isoformat()

                    if format == "text":
                        pairs = " ".join(f"{n}={results[n]}" for n in display_names)
                        typer.echo(f"{timestamp} {pairs}")
                    elif format == "json":
                        values = {n: json_value(results[n]) for n in display_names}
                        typer.echo(json.dumps({"timestamp": timestamp, "values": values}))
                    elif format == "csv":
                        typer.echo(timestamp + "," + ",".join(str(results[n]) for n in display_names))

                    if once:
                        break

                    time.sleep(interval)
        except KeyboardInterrupt:
            typer.echo("\nStopped by user", err=True)
            raise typer.Exit(0)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"modbus-regmap {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """regmap - compile Modbus register schemas into typed accessors."""
    pass


if __name__ == "__main__":
    app()
