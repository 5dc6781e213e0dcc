"""
Icom CI-V protocol engine.

Turns high-level operations into CI-V frames and replies into typed values.
Request/response plumbing is shared by every model; per-model differences
come from the ``RadioBehavior`` descriptor and the ``CommandSet``.

Exchange rules:
- One request outstanding at a time. A frame is written and its reply read
  up to the terminator before anything else is sent.
- Set operations require an ACK (0xFB). Anything else is ``CommandRejected``.
- Radios that echo commands on the bus return a copy of each request ahead
  of the reply; when the descriptor says so, one leading echo is dropped.
- Nothing is retried. Composite operations stop at the first failing frame
  and leave the radio in whatever state the frames already sent produced.

Example:
    transport = SerialTransport("/dev/ttyUSB0", baudrate=115200)
    radio = IcomCIVProtocol.for_model(RadioModel.IC7300, transport)
    radio.connect()
    radio.set_frequency(14_230_000)
    print(radio.get_signal_strength())
    radio.disconnect()
"""

import logging
from typing import Optional, Union

from ..models.behavior import RadioBehavior
from ..models.registry import RadioModel, get_model
from ..models.types import VFO, Band, MemoryChannel, Mode, RITXITState, SignalStrength
from .command_set import CommandSet, Request, command_set_for
from .errors import (
    CommandRejected,
    InvalidParameter,
    NotConnected,
    UnsupportedOperation,
)
from .frame import CONTROLLER_ADDRESS, PREAMBLE, TERMINATOR, CIVFrame, build_frame, parse_frame

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_TIMEOUT = 1.0


class IcomCIVProtocol:
    """
    CI-V engine for one radio on the bus.

    The transport must provide ``open()``, ``close()``, ``flush()``,
    ``write(data)`` and ``read_until(terminator, timeout)``.
    """

    def __init__(
        self,
        transport,
        civ_address: int,
        behavior: RadioBehavior,
        command_set: Optional[CommandSet] = None,
        controller_address: int = CONTROLLER_ADDRESS,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
    ):
        """
        Args:
            transport: Byte transport to the radio
            civ_address: Radio's CI-V address
            behavior: Behavior descriptor of the radio
            command_set: Command set override (default: generic for ``behavior``)
            controller_address: Our address on the bus
            response_timeout: Seconds to wait for each reply
        """
        if not 0 <= civ_address <= 0xFF:
            raise InvalidParameter(f"CI-V address must be 0x00-0xFF, got {civ_address}")
        self.transport = transport
        self.civ_address = civ_address
        self.behavior = behavior
        self.commands = command_set or CommandSet(behavior)
        self.controller_address = controller_address
        self.response_timeout = response_timeout
        self._connected = False

    @classmethod
    def for_model(
        cls,
        model: Union[RadioModel, str],
        transport,
        civ_address: Optional[int] = None,
        **kwargs,
    ) -> "IcomCIVProtocol":
        """
        Build an engine from the model registry.

        Args:
            model: RadioModel or model name
            transport: Byte transport to the radio
            civ_address: Override the model's default address

        Raises:
            InvalidParameter: Unknown model
        """
        config = get_model(model)
        if config is None:
            raise InvalidParameter(f"Unknown radio model: {model}")
        return cls(
            transport,
            config.civ_address if civ_address is None else civ_address,
            config.behavior,
            command_set=command_set_for(config),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        """Open the transport and discard stale input. No-op when connected."""
        if self._connected:
            return
        self.transport.open()
        try:
            self.transport.flush()
        except Exception:
            self.transport.close()
            raise
        self._connected = True
        logger.debug(f"Connected to radio at 0x{self.civ_address:02X}")

    def disconnect(self) -> None:
        """Close the transport. Safe to call twice."""
        if not self._connected:
            return
        self._connected = False
        self.transport.close()
        logger.debug(f"Disconnected from radio at 0x{self.civ_address:02X}")

    def __enter__(self) -> "IcomCIVProtocol":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    # ------------------------------------------------------------------
    # Exchange
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise NotConnected()

    def _send(self, request: Request) -> None:
        self.transport.write(
            build_frame(
                self.civ_address,
                request.command,
                request.payload,
                source=self.controller_address,
            )
        )

    def _read_frame(self) -> CIVFrame:
        raw = self.transport.read_until(bytes([TERMINATOR]), self.response_timeout)
        start = raw.find(PREAMBLE)
        if start > 0:
            logger.debug(f"Skipping {start} bytes ahead of preamble")
            raw = raw[start:]
        return parse_frame(raw)

    def _receive(self) -> CIVFrame:
        frame = self._read_frame()
        if self.behavior.echoes_commands and frame.is_echo(self.controller_address):
            logger.debug(f"Absorbed echo {frame!r}")
            frame = self._read_frame()
        return frame

    def _transact(self, request: Request) -> CIVFrame:
        self._ensure_connected()
        self._send(request)
        return self._receive()

    def _transact_set(self, request: Request, operation: str) -> None:
        reply = self._transact(request)
        if reply.is_ack:
            return
        detail = "NAK" if reply.is_nak else f"unexpected reply {reply!r}"
        logger.warning(f"Radio rejected {operation}: {detail}")
        raise CommandRejected(operation, detail)

    def _transact_get(self, request: Request, operation: str) -> CIVFrame:
        reply = self._transact(request)
        if reply.is_nak:
            logger.warning(f"Radio rejected {operation}: NAK")
            raise CommandRejected(operation, "NAK")
        return reply

    # ------------------------------------------------------------------
    # VFO
    # ------------------------------------------------------------------

    def _vfo_request(self, vfo: VFO) -> Request:
        request = self.commands.select_vfo(vfo)
        if request is None:
            raise UnsupportedOperation(
                f"VFO {vfo.value} cannot be selected on a "
                f"{self.behavior.vfo_model.name} radio"
            )
        return request

    def _select_before(self, vfo: Optional[VFO]) -> None:
        if vfo is None or not self.behavior.requires_vfo_selection:
            return
        request = self._vfo_request(vfo)
        self._transact_set(request, "select_vfo")

    def select_vfo(self, vfo: VFO) -> bool:
        """
        Make ``vfo`` the active VFO.

        Returns:
            False if the radio has no VFO selection (nothing is sent),
            True once the radio acknowledged the switch.

        Raises:
            UnsupportedOperation: ``vfo`` does not exist on this radio
        """
        self._ensure_connected()
        if not self.behavior.requires_vfo_selection:
            return False
        self._transact_set(self._vfo_request(vfo), "select_vfo")
        return True

    # ------------------------------------------------------------------
    # Dual receiver
    # ------------------------------------------------------------------

    def _dual_request(self, request, operation: str):
        if request is None:
            raise UnsupportedOperation(
                f"{operation} is not available on a "
                f"{self.behavior.vfo_model.name} radio"
            )
        return request

    def select_band(self, band: Band) -> None:
        """Make Main or Sub the active receiver (07 D0/D1)."""
        self._ensure_connected()
        request = self._dual_request(self.commands.select_band(band), "select_band")
        self._transact_set(request, "select_band")

    def select_band_vfo(self, band: Band, vfo: VFO) -> None:
        """
        Select a band, then VFO A or B on that band.

        Only radios with an A/B pair per band (IC-9700) accept this. A rejected
        VFO frame leaves the new band selected.

        Raises:
            UnsupportedOperation: Radio has no per-band VFOs, or ``vfo`` is not A/B
        """
        self._ensure_connected()
        band_request, vfo_request = self._dual_request(
            self.commands.select_band_vfo(band, vfo), "select_band_vfo"
        )
        self._transact_set(band_request, "select_band")
        self._transact_set(vfo_request, "select_vfo")

    def exchange_bands(self) -> None:
        self._ensure_connected()
        request = self._dual_request(self.commands.exchange_bands(), "exchange_bands")
        self._transact_set(request, "exchange_bands")

    def equalize_vfos(self) -> None:
        """Copy VFO A to VFO B on the selected band."""
        self._ensure_connected()
        request = self._dual_request(self.commands.equalize_vfos(), "equalize_vfos")
        self._transact_set(request, "equalize_vfos")

    def set_dualwatch(self, enabled: bool) -> None:
        self._ensure_connected()
        request = self._dual_request(self.commands.set_dualwatch(enabled), "set_dualwatch")
        self._transact_set(request, "set_dualwatch")

    # ------------------------------------------------------------------
    # Frequency / mode
    # ------------------------------------------------------------------

    def set_frequency(self, hz: int, vfo: Optional[VFO] = None) -> None:
        """Tune to ``hz``, selecting ``vfo`` first when given."""
        self._ensure_connected()
        request = self.commands.set_frequency(hz)
        self._select_before(vfo)
        self._transact_set(request, "set_frequency")

    def get_frequency(self, vfo: Optional[VFO] = None) -> int:
        self._ensure_connected()
        self._select_before(vfo)
        reply = self._transact_get(self.commands.read_frequency(), "get_frequency")
        return self.commands.parse_frequency(reply)

    def set_mode(
        self,
        mode: Mode,
        filter_index: Optional[int] = None,
        vfo: Optional[VFO] = None,
    ) -> None:
        self._ensure_connected()
        request = self.commands.set_mode(mode, filter_index)
        self._select_before(vfo)
        self._transact_set(request, "set_mode")

    def get_mode(self, vfo: Optional[VFO] = None) -> Mode:
        self._ensure_connected()
        self._select_before(vfo)
        reply = self._transact_get(self.commands.read_mode(), "get_mode")
        mode, _filter = self.commands.parse_mode(reply)
        return mode

    # ------------------------------------------------------------------
    # Power / PTT / split / meter
    # ------------------------------------------------------------------

    def set_power(self, percent: int) -> None:
        """RF power in percent of the radio's maximum, clamped to 0-100."""
        self._transact_set(self.commands.set_power(percent), "set_power")

    def get_power(self) -> int:
        reply = self._transact_get(self.commands.read_power(), "get_power")
        return self.commands.parse_power(reply)

    def set_ptt(self, transmit: bool) -> None:
        self._transact_set(self.commands.set_ptt(transmit), "set_ptt")

    def get_ptt(self) -> bool:
        reply = self._transact_get(self.commands.read_ptt(), "get_ptt")
        return self.commands.parse_ptt(reply)

    def set_split(self, enabled: bool) -> None:
        self._transact_set(self.commands.set_split(enabled), "set_split")

    def get_split(self) -> bool:
        reply = self._transact_get(self.commands.read_split(), "get_split")
        return self.commands.parse_split(reply)

    def get_s_meter(self) -> int:
        """Raw S-meter reading, 0-255."""
        reply = self._transact_get(self.commands.read_s_meter(), "get_s_meter")
        return self.commands.parse_s_meter(reply)

    def get_signal_strength(self) -> SignalStrength:
        return SignalStrength.from_raw(self.get_s_meter())

    # ------------------------------------------------------------------
    # RIT / XIT
    # ------------------------------------------------------------------

    def set_rit(self, enabled: bool, offset_hz: int = 0) -> None:
        """
        Set RIT offset, then switch RIT on or off.

        A rejected enable frame leaves the new offset in place.
        """
        self._ensure_connected()
        self._transact_set(self.commands.set_rit_offset(offset_hz), "set_rit_offset")
        self._transact_set(self.commands.set_rit_enabled(enabled), "set_rit_enabled")

    def get_rit(self) -> RITXITState:
        offset = self.commands.parse_rit_offset(
            self._transact_get(self.commands.read_rit_offset(), "get_rit_offset")
        )
        enabled = self.commands.parse_rit_enabled(
            self._transact_get(self.commands.read_rit_enabled(), "get_rit_enabled")
        )
        return RITXITState(enabled=enabled, offset_hz=offset)

    def set_xit(self, enabled: bool, offset_hz: int = 0) -> None:
        """
        Set the shared RIT/XIT offset, then switch XIT on or off.

        Raises:
            UnsupportedOperation: The radio NAKs the offset frame
            CommandRejected: Any other failed frame
        """
        self._ensure_connected()
        reply = self._transact(self.commands.set_rit_offset(offset_hz))
        if reply.is_nak:
            raise UnsupportedOperation("Radio does not support XIT")
        if not reply.is_ack:
            raise CommandRejected("set_xit_offset", f"unexpected reply {reply!r}")
        self._transact_set(self.commands.set_xit_enabled(enabled), "set_xit_enabled")

    def get_xit(self) -> RITXITState:
        reply = self._transact(self.commands.read_xit_enabled())
        if reply.is_nak:
            raise UnsupportedOperation("Radio does not support XIT")
        enabled = self.commands.parse_xit_enabled(reply)
        offset = self.commands.parse_rit_offset(
            self._transact_get(self.commands.read_rit_offset(), "get_xit_offset")
        )
        return RITXITState(enabled=enabled, offset_hz=offset)

    # ------------------------------------------------------------------
    # Memory / identification
    # ------------------------------------------------------------------

    def read_memory_channel(self, number: int) -> MemoryChannel:
        """
        Read one memory channel.

        Raises:
            EmptyChannel: Channel is blank
        """
        self._ensure_connected()
        request = self.commands.read_memory(number)
        reply = self._transact_get(request, "read_memory_channel")
        return self.commands.parse_memory(reply)

    def write_memory_channel(self, channel: MemoryChannel) -> None:
        self._ensure_connected()
        request = self.commands.write_memory(channel)
        self._transact_set(request, "write_memory_channel")

    def read_transceiver_id(self) -> int:
        """CI-V address the radio reports (command 19 00)."""
        reply = self._transact_get(self.commands.read_transceiver_id(), "read_transceiver_id")
        return self.commands.parse_transceiver_id(reply)
