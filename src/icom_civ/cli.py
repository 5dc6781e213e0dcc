"""
Icom CI-V CLI

Diagnostic command-line interface: one CI-V operation per invocation.
"""

import sys
import logging
import json
from typing import Any, Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.logging import RichHandler

from icom_civ.core.actions import run_operation
from icom_civ.core.parsing import parse_address, parse_frequency, parse_on_off
from icom_civ.core.results import OperationResult
from icom_civ.models import (
    VFO,
    Band,
    Capability,
    MemoryChannel,
    Mode,
    get_capabilities as registry_get_capabilities,
    get_model as registry_get_model,
    list_models as registry_list_models,
)
from icom_civ.protocol import IcomCIVProtocol, list_serial_ports

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger("icom_civ")

# Setup Rich console
console = Console()

app = typer.Typer(help="📻 Icom CI-V - CAT control for Icom transceivers")

DEFAULT_MODEL = "IC-7300"

# Shared options
MODEL_OPTION = typer.Option(
    DEFAULT_MODEL, "--model", "-m", envvar="ICOM_CIV_MODEL", help="Radio model (see list-models)"
)
PORT_OPTION = typer.Option(
    ..., "--port", "-p", envvar="ICOM_CIV_PORT", help="Serial port (e.g., /dev/ttyUSB0, COM3)"
)
BAUD_OPTION = typer.Option(None, "--baud", "-b", help="Baud rate (default: model default)")
ADDRESS_OPTION = typer.Option(None, "--address", "-a", help="CI-V address in hex (default: model default)")
TIMEOUT_OPTION = typer.Option(1.0, "--timeout", "-t", help="Reply timeout in seconds")
JSON_OPTION = typer.Option(False, "--json", "-j", help="Output as JSON for scripting")
VFO_OPTION = typer.Option(None, "--vfo", help="VFO to select first: A, B, Main or Sub")


def print_header(text: str) -> None:
    """Print fancy header."""
    console.print(Panel(text, expand=False, style="bold blue"))


def print_success(text: str) -> None:
    """Print success message."""
    console.print(f"✓ {text}", style="green")


def print_warning(text: str) -> None:
    """Print warning message."""
    console.print(f"⚠️  {text}", style="yellow")


def print_error(text: str) -> None:
    """Print error message."""
    console.print(f"❌ {text}", style="red")


def _parse_or_exit(parser: Callable[[str], Any], value: str) -> Any:
    try:
        return parser(value)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)


def _parse_vfo(value: Optional[str]) -> Optional[VFO]:
    if value is None:
        return None
    for vfo in VFO:
        if vfo.value.lower() == value.strip().lower():
            return vfo
    raise ValueError(f"Unknown VFO '{value}'. Valid: A, B, Main, Sub")


def _format_frequency(hz: int) -> str:
    return f"{hz / 1_000_000:.6f} MHz"


def _report(result: OperationResult, output_json: bool, message: Optional[str] = None) -> None:
    """Print result and exit non-zero on failure."""
    if output_json:
        console.print(json.dumps(result.to_dict(), indent=2), soft_wrap=True, markup=False, highlight=False)
    else:
        for warning in result.warnings:
            print_warning(warning)
        if result.ok:
            print_success(message or result.to_summary())
        else:
            for error in result.errors:
                print_error(error)

    if not result.ok:
        sys.exit(1)


def _run(
    operation: str,
    action: Callable[[IcomCIVProtocol], Any],
    model: str,
    port: str,
    baud: Optional[int],
    address: Optional[str],
    timeout: float,
    requires: Optional[Capability] = None,
) -> OperationResult:
    return run_operation(
        operation,
        action,
        model=model,
        port=port,
        baud=baud,
        address=_parse_or_exit(parse_address, address) if address else None,
        timeout=timeout,
        requires=requires,
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every frame sent and received"),
) -> None:
    """Icom CI-V command-line tool."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


@app.command()
def ports() -> None:
    """List available serial ports."""
    print_header("Available Serial Ports")

    ports_list = list_serial_ports()
    if not ports_list:
        print_warning("No serial ports found")
        return

    table = Table(title="Serial Ports")
    table.add_column("Port", style="cyan")
    table.add_column("Description", style="green")

    for device, description in ports_list:
        table.add_row(device, description)

    console.print(table)


@app.command("list-models")
def list_models() -> None:
    """List supported radio models and their bus defaults."""
    print_header("Supported Radio Models")

    table = Table(title="Icom CI-V Models")
    table.add_column("Model", style="cyan")
    table.add_column("Address", style="yellow")
    table.add_column("Baud", style="green")
    table.add_column("VFO Model", style="magenta")
    table.add_column("Filter Byte", style="blue")
    table.add_column("Echo", style="red")

    for name in registry_list_models():
        config = registry_get_model(name)
        behavior = config.behavior
        table.add_row(
            config.name,
            f"0x{config.civ_address:02X}",
            str(config.baud_rate),
            behavior.vfo_model.name,
            "Yes" if behavior.requires_mode_filter else "No",
            "Yes" if behavior.echoes_commands else "No",
        )

    console.print(table)
    console.print()
    console.print("Use [cyan]show-model <model>[/cyan] for detailed configuration.")


@app.command("show-model")
def show_model(
    model: str = typer.Argument(..., help="Model name (e.g., IC-7300)"),
    output_json: bool = JSON_OPTION,
) -> None:
    """Show configuration and capabilities for a specific model."""
    config = registry_get_model(model)
    if config is None:
        if output_json:
            console.print(json.dumps({"error": f"Model '{model}' not found"}, indent=2))
        else:
            print_error(f"Model '{model}' not found.")
            console.print()
            console.print("Available models:")
            for name in registry_list_models():
                console.print(f"  - {name}")
        sys.exit(1)

    caps = registry_get_capabilities(config.name)

    if output_json:
        report = caps.to_dict()
        report["civ_address"] = f"0x{config.civ_address:02X}"
        report["baud_rate"] = config.baud_rate
        report["vfo_model"] = config.behavior.vfo_model.name
        console.print(json.dumps(report, indent=2), soft_wrap=True, markup=False, highlight=False)
        return

    print_header(f"Model Configuration: {config.name}")

    behavior = config.behavior
    table = Table(title=f"{config.name} CI-V Config")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Default Address", f"0x{config.civ_address:02X}")
    table.add_row("Default Baud", str(config.baud_rate))
    table.add_row("VFO Model", behavior.vfo_model.name)
    table.add_row("Mode Filter Byte", "Yes" if behavior.requires_mode_filter else "No")
    table.add_row("Echoes Commands", "Yes" if behavior.echoes_commands else "No")
    table.add_row("Power Units", behavior.power_units.value)
    table.add_row("Reply Layout", behavior.response_layout.name)
    table.add_row("Max Power", f"{config.max_power_watts} W")
    console.print(table)

    console.print()
    cap_table = Table(title="Capabilities")
    cap_table.add_column("Capability", style="cyan")
    cap_table.add_column("Supported")
    cap_table.add_column("Details", style="dim")
    for info in caps.capabilities:
        mark = "[green]Yes[/green]" if info.supported else "[red]No[/red]"
        cap_table.add_row(info.capability.name, mark, info.reason)
    console.print(cap_table)

    for note in caps.notes:
        console.print(f"  • {note}")


@app.command()
def freq(
    frequency: Optional[str] = typer.Argument(None, help="Frequency to set (e.g., 14.230M, 7074k). Omit to read."),
    vfo: Optional[str] = VFO_OPTION,
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read or set the operating frequency."""
    target = _parse_or_exit(_parse_vfo, vfo) if vfo else None

    if frequency is None:
        result = _run(
            "get_frequency", lambda radio: radio.get_frequency(target),
            model, port, baud, address, timeout,
        )
        message = f"Frequency: {_format_frequency(result.value)}" if result.ok else None
    else:
        hz = _parse_or_exit(parse_frequency, frequency)
        result = _run(
            "set_frequency", lambda radio: radio.set_frequency(hz, target),
            model, port, baud, address, timeout,
        )
        result.value = hz
        message = f"Frequency set to {_format_frequency(hz)}"

    _report(result, output_json, message)


@app.command()
def mode(
    new_mode: Optional[str] = typer.Argument(None, metavar="MODE", help="Mode to set (USB, LSB, CW, FM...). Omit to read."),
    filter_index: Optional[int] = typer.Option(None, "--filter", "-f", min=1, max=3, help="IF filter 1-3"),
    vfo: Optional[str] = VFO_OPTION,
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read or set the operating mode."""
    target = _parse_or_exit(_parse_vfo, vfo) if vfo else None

    if new_mode is None:
        result = _run(
            "get_mode", lambda radio: radio.get_mode(target),
            model, port, baud, address, timeout,
        )
        if result.ok:
            result.value = result.value.label
        message = f"Mode: {result.value}"
    else:
        parsed = _parse_or_exit(Mode.from_label, new_mode)
        result = _run(
            "set_mode", lambda radio: radio.set_mode(parsed, filter_index, target),
            model, port, baud, address, timeout,
        )
        result.value = parsed.label
        message = f"Mode set to {parsed.label}"

    _report(result, output_json, message)


@app.command()
def power(
    percent: Optional[int] = typer.Argument(None, help="RF power 0-100 %. Omit to read."),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read or set RF power."""
    if percent is None:
        result = _run(
            "get_power", lambda radio: radio.get_power(),
            model, port, baud, address, timeout, Capability.POWER_CONTROL,
        )
        message = f"RF power: {result.value}%"
    else:
        if not 0 <= percent <= 100:
            print_warning(f"{percent}% is outside 0-100 and will be clamped")
        result = _run(
            "set_power", lambda radio: radio.set_power(percent),
            model, port, baud, address, timeout, Capability.POWER_CONTROL,
        )
        result.value = max(0, min(100, percent))
        message = f"RF power set to {result.value}%"

    _report(result, output_json, message)


@app.command()
def ptt(
    state: str = typer.Argument(..., help="on/tx or off/rx"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Key or unkey the transmitter."""
    transmit = _parse_or_exit(parse_on_off, state)
    result = _run(
        "set_ptt", lambda radio: radio.set_ptt(transmit),
        model, port, baud, address, timeout, Capability.PTT,
    )
    result.value = transmit
    _report(result, output_json, "Transmitting" if transmit else "Receiving")


@app.command()
def smeter(
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read the S-meter."""
    result = _run(
        "get_signal_strength", lambda radio: radio.get_signal_strength(),
        model, port, baud, address, timeout,
    )
    message = None
    if result.ok:
        strength = result.value
        result.metadata["raw"] = strength.raw
        result.metadata["decibels"] = strength.decibels
        message = f"Signal: {strength} (raw {strength.raw})"
    _report(result, output_json, message)


@app.command()
def split(
    state: Optional[str] = typer.Argument(None, help="on or off. Omit to read."),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read or set split operation."""
    if state is None:
        result = _run(
            "get_split", lambda radio: radio.get_split(),
            model, port, baud, address, timeout, Capability.SPLIT,
        )
    else:
        enabled = _parse_or_exit(parse_on_off, state)
        result = _run(
            "set_split", lambda radio: radio.set_split(enabled),
            model, port, baud, address, timeout, Capability.SPLIT,
        )
        result.value = enabled
    _report(result, output_json, f"Split: {'ON' if result.value else 'OFF'}")


def _offset_command(
    name: str,
    state: Optional[str],
    offset: int,
    model: str,
    port: str,
    baud: Optional[int],
    address: Optional[str],
    timeout: float,
    output_json: bool,
) -> None:
    capability = Capability.RIT if name == "rit" else Capability.XIT
    if state is None:
        result = _run(
            f"get_{name}", lambda radio: getattr(radio, f"get_{name}")(),
            model, port, baud, address, timeout, capability,
        )
    else:
        enabled = _parse_or_exit(parse_on_off, state)
        result = _run(
            f"set_{name}", lambda radio: getattr(radio, f"set_{name}")(enabled, offset),
            model, port, baud, address, timeout, capability,
        )
        result.value = f"{'ON' if enabled else 'OFF'} ({offset:+d} Hz)"
    _report(result, output_json, f"{name.upper()}: {result.value}")


@app.command()
def rit(
    state: Optional[str] = typer.Argument(None, help="on or off. Omit to read."),
    offset: int = typer.Option(0, "--offset", "-o", help="Offset in Hz, -9999 to 9999"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read or set RIT (receiver incremental tuning)."""
    _offset_command("rit", state, offset, model, port, baud, address, timeout, output_json)


@app.command()
def xit(
    state: Optional[str] = typer.Argument(None, help="on or off. Omit to read."),
    offset: int = typer.Option(0, "--offset", "-o", help="Offset in Hz, -9999 to 9999"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read or set XIT (transmitter incremental tuning)."""
    _offset_command("xit", state, offset, model, port, baud, address, timeout, output_json)


@app.command()
def band(
    action: str = typer.Argument(..., help="main, sub, swap, or equalize (copy VFO A to B)"),
    vfo: Optional[str] = typer.Option(None, "--vfo", help="VFO A or B on the selected band (IC-9700)"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Main/Sub receiver control on dual-receiver radios."""
    action = action.strip().lower()
    if action in ("main", "sub"):
        selected = Band.MAIN if action == "main" else Band.SUB
        selected_vfo = _parse_or_exit(_parse_vfo, vfo) if vfo else None
        if selected_vfo is None:
            operation, run, label = (
                "select_band", lambda radio: radio.select_band(selected), selected.value,
            )
        else:
            operation, run, label = (
                "select_band_vfo",
                lambda radio: radio.select_band_vfo(selected, selected_vfo),
                f"{selected.value}-{selected_vfo.value}",
            )
    elif action == "swap":
        operation, run, label = "exchange_bands", lambda radio: radio.exchange_bands(), "Main <-> Sub"
    elif action == "equalize":
        operation, run, label = "equalize_vfos", lambda radio: radio.equalize_vfos(), "A = B"
    else:
        print_error(f"Unknown band action '{action}'. Valid: main, sub, swap, equalize")
        sys.exit(1)

    result = _run(operation, run, model, port, baud, address, timeout, Capability.DUAL_RECEIVER)
    if result.ok:
        result.value = label
    _report(result, output_json, f"Band: {label}")


@app.command()
def dualwatch(
    state: str = typer.Argument(..., help="on or off"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Receive on Main and Sub at once."""
    enabled = _parse_or_exit(parse_on_off, state)
    result = _run(
        "set_dualwatch", lambda radio: radio.set_dualwatch(enabled),
        model, port, baud, address, timeout, Capability.DUAL_RECEIVER,
    )
    result.value = enabled
    _report(result, output_json, f"Dualwatch: {'ON' if enabled else 'OFF'}")


@app.command("memory-read")
def memory_read(
    channel: int = typer.Argument(..., help="Memory channel number"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read one memory channel."""
    result = _run(
        "read_memory_channel", lambda radio: radio.read_memory_channel(channel),
        model, port, baud, address, timeout, Capability.MEMORY,
    )
    if result.ok:
        memory = result.value
        result.metadata.update({
            "frequency": memory.frequency,
            "mode": memory.mode.label,
            "duplex_offset_hz": memory.duplex_offset_hz,
            "tone_hz": memory.tone_hz,
            "name": memory.name,
        })
    _report(result, output_json, str(result.value))


@app.command("memory-write")
def memory_write(
    channel: int = typer.Argument(..., help="Memory channel number"),
    frequency: str = typer.Argument(..., help="Frequency (e.g., 145.500M)"),
    new_mode: str = typer.Argument(..., metavar="MODE", help="Mode (FM, USB, ...)"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Channel name, max 10 characters"),
    duplex: int = typer.Option(0, "--duplex", "-d", help="Repeater shift in Hz, multiple of 100"),
    tone: Optional[float] = typer.Option(None, "--tone", help="CTCSS tone in Hz"),
    filter_index: Optional[int] = typer.Option(None, "--filter", "-f", min=1, max=3, help="IF filter 1-3"),
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Write one memory channel."""
    config = registry_get_model(model)
    if config is not None and not config.channel_in_range(channel):
        low, high = config.memory_channels
        print_warning(f"{config.name} memory channels are {low}-{high}")
    if name and len(name) > 10:
        print_warning(f"Name '{name}' will be truncated to '{name[:10]}'")

    memory = MemoryChannel(
        number=channel,
        frequency=_parse_or_exit(parse_frequency, frequency),
        mode=_parse_or_exit(Mode.from_label, new_mode),
        filter_index=filter_index,
        duplex_offset_hz=duplex or None,
        tone_hz=tone,
        name=name,
    )
    result = _run(
        "write_memory_channel", lambda radio: radio.write_memory_channel(memory),
        model, port, baud, address, timeout, Capability.MEMORY,
    )
    result.value = str(memory)
    _report(result, output_json, f"Wrote {memory}")


@app.command("id")
def transceiver_id(
    model: str = MODEL_OPTION,
    port: str = PORT_OPTION,
    baud: Optional[int] = BAUD_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    timeout: float = TIMEOUT_OPTION,
    output_json: bool = JSON_OPTION,
) -> None:
    """Read the CI-V address the radio reports for itself."""
    result = _run(
        "read_transceiver_id", lambda radio: radio.read_transceiver_id(),
        model, port, baud, address, timeout,
    )
    message = f"Transceiver ID: 0x{result.value:02X}" if result.ok else None
    _report(result, output_json, message)


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        console.print(f"\n[red bold]Fatal error:[/red bold] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
