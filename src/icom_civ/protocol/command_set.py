"""
Command formatter and response parser.

One generic ``CommandSet`` covers every supported radio. It reads the
``RadioBehavior`` descriptor for the few places models differ (VFO codes,
mode filter byte, sub-command placement in replies) and never branches on a
model name. Radios that are genuine outliers get a narrow subclass that
overrides only the differing piece.

Formatters return a ``Request`` (command bytes plus payload); the engine adds
addressing. Parsers take the ``CIVFrame`` the radio replied with.
"""

import logging
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Tuple, Type

from ..models.behavior import RadioBehavior, ResponseLayout, VFOModel
from ..models.registry import ModelConfig, RadioModel
from ..models.types import VFO, Band, MemoryChannel, Mode
from . import bcd
from .commands import (
    DEFAULT_FILTER,
    MEMORY_CONTENTS,
    PTT_STATE,
    RF_POWER,
    RIT_ENABLE,
    RIT_OFFSET,
    S_METER,
    TRANSCEIVER_ID,
    XIT_ENABLE,
    Command,
    VFOCode,
)
from .errors import MalformedData, MalformedFrame
from .frame import SUBCOMMAND_GROUPS, CIVFrame
from .memory import decode_memory_channel, encode_memory_channel

logger = logging.getLogger(__name__)

# RIT/XIT offset field: +/-9999 Hz
OFFSET_DIGITS = 4

POWER_PERCENT_MAX = 100


class Request(NamedTuple):
    """Command bytes and payload of one outgoing frame."""
    command: bytes
    payload: bytes = b""


def response_data(
    frame: CIVFrame,
    command: bytes,
    layout: ResponseLayout = ResponseLayout.STANDARD,
    length: Optional[int] = None,
) -> bytes:
    """
    Extract the data bytes of a reply to ``command``.

    The sub-command of a two-byte command arrives either in the frame's
    command field (0x14/0x15/0x1C groups, split by the frame codec) or as the
    first payload byte (every other group). With
    ``ResponseLayout.SUBCOMMAND_ECHOED`` a copy of the sub-command may also
    lead the payload of a split frame; it is dropped when the data is one
    byte longer than ``length``.

    Args:
        frame: Reply frame
        command: Command bytes of the request
        layout: Reply layout of the radio
        length: Expected data length, checked when given

    Raises:
        MalformedFrame: Reply is for another command, or has the wrong length
    """
    if frame.command == command:
        data = frame.payload
    elif (
        len(command) == 2
        and frame.command == command[:1]
        and frame.payload[:1] == command[1:]
    ):
        data = frame.payload[1:]
    else:
        raise MalformedFrame(
            f"Expected reply to {command.hex().upper()}, got {frame!r}"
        )

    if (
        layout is ResponseLayout.SUBCOMMAND_ECHOED
        and len(command) == 2
        and command[0] in SUBCOMMAND_GROUPS
        and length is not None
        and len(data) == length + 1
        and data[:1] == command[1:]
    ):
        data = data[1:]

    if length is not None and len(data) != length:
        raise MalformedFrame(
            f"Reply to {command.hex().upper()} carries {len(data)} data bytes, "
            f"expected {length}: {frame!r}"
        )
    return data


def _on_off(enabled: bool) -> bytes:
    return b"\x01" if enabled else b"\x00"


def _parse_on_off(data: bytes) -> bool:
    if data[0] not in (0x00, 0x01):
        raise MalformedData(f"Expected 00 or 01, got 0x{data[0]:02X}")
    return data[0] == 0x01


class CommandSet:
    """
    Generic Icom command set driven by a behavior descriptor.

    Example:
        commands = CommandSet(STANDARD_BEHAVIOR)
        request = commands.set_frequency(14_230_000)
        # Request(command=b'\\x05', payload=b'\\x00\\x00\\x23\\x14\\x00')
    """

    frequency_length = bcd.FREQUENCY_BYTES

    def __init__(self, behavior: RadioBehavior):
        self.behavior = behavior

    def _data(self, frame: CIVFrame, command: bytes, length: Optional[int] = None) -> bytes:
        return response_data(frame, command, self.behavior.response_layout, length)

    # ------------------------------------------------------------------
    # VFO
    # ------------------------------------------------------------------

    def select_vfo(self, vfo: VFO) -> Optional[Request]:
        """
        Format VFO selection, or None if the radio cannot address ``vfo``.

        Radios without VFO selection also return None.
        """
        code = self.vfo_code(vfo)
        if code is None:
            return None
        return self._vfo_command(code)

    def vfo_code(self, vfo: VFO) -> Optional[int]:
        vfo_model = self.behavior.vfo_model
        if vfo_model in (VFOModel.TARGETABLE, VFOModel.CURRENT_ONLY):
            if vfo in (VFO.A, VFO.MAIN):
                return VFOCode.VFO_A
            return VFOCode.VFO_B
        if vfo_model is VFOModel.MAIN_SUB:
            return {VFO.MAIN: VFOCode.MAIN, VFO.SUB: VFOCode.SUB}.get(vfo)
        if vfo_model is VFOModel.MAIN_SUB_DUAL_VFO:
            return {
                VFO.A: VFOCode.VFO_A,
                VFO.B: VFOCode.VFO_B,
                VFO.MAIN: VFOCode.MAIN,
                VFO.SUB: VFOCode.SUB,
            }[vfo]
        return None

    def _vfo_command(self, code: int) -> Request:
        return Request(bytes([Command.SELECT_VFO]), bytes([code]))

    # ------------------------------------------------------------------
    # Dual receiver (Main/Sub)
    # ------------------------------------------------------------------

    def select_band(self, band: Band) -> Optional[Request]:
        if not self.behavior.has_dual_receiver:
            return None
        return self._vfo_command(VFOCode.MAIN if band is Band.MAIN else VFOCode.SUB)

    def select_band_vfo(self, band: Band, vfo: VFO) -> Optional[Tuple[Request, Request]]:
        """
        Band selection followed by VFO A/B selection on that band.

        None unless each band has its own A/B pair, or if ``vfo`` is not A/B.
        """
        if not self.behavior.has_vfos_per_band or vfo not in (VFO.A, VFO.B):
            return None
        code = VFOCode.VFO_A if vfo is VFO.A else VFOCode.VFO_B
        return self.select_band(band), self._vfo_command(code)

    def exchange_bands(self) -> Optional[Request]:
        """Swap Main and Sub (07 B0)."""
        if not self.behavior.has_dual_receiver:
            return None
        return self._vfo_command(VFOCode.EXCHANGE_BANDS)

    def equalize_vfos(self) -> Optional[Request]:
        """Copy VFO A to VFO B on the selected band (07 A0)."""
        if not self.behavior.has_vfos_per_band:
            return None
        return self._vfo_command(VFOCode.EQUALIZE_VFOS)

    def set_dualwatch(self, enabled: bool) -> Optional[Request]:
        if not self.behavior.has_dual_receiver:
            return None
        return self._vfo_command(VFOCode.DUALWATCH_ON if enabled else VFOCode.DUALWATCH_OFF)

    # ------------------------------------------------------------------
    # Frequency and mode
    # ------------------------------------------------------------------

    def set_frequency(self, hz: int) -> Request:
        return Request(
            bytes([Command.SET_FREQUENCY]),
            bcd.encode_frequency(hz, self.frequency_length),
        )

    def read_frequency(self) -> Request:
        return Request(bytes([Command.READ_FREQUENCY]))

    def parse_frequency(self, frame: CIVFrame) -> int:
        data = self._data(frame, bytes([Command.READ_FREQUENCY]), self.frequency_length)
        return bcd.decode_frequency(data)

    def set_mode(self, mode: Mode, filter_index: Optional[int] = None) -> Request:
        payload = bytes([mode.value])
        if self.behavior.requires_mode_filter:
            payload += bytes([filter_index or DEFAULT_FILTER])
        return Request(bytes([Command.SET_MODE]), payload)

    def read_mode(self) -> Request:
        return Request(bytes([Command.READ_MODE]))

    def parse_mode(self, frame: CIVFrame) -> Tuple[Mode, Optional[int]]:
        """Return (mode, filter) from a mode reply; filter is None if absent."""
        data = self._data(frame, bytes([Command.READ_MODE]))
        if len(data) not in (1, 2):
            raise MalformedFrame(f"Mode reply carries {len(data)} data bytes: {frame!r}")
        try:
            mode = Mode(data[0])
        except ValueError:
            raise MalformedData(f"Unknown mode code 0x{data[0]:02X}") from None
        filter_index = data[1] if len(data) == 2 else None
        return mode, filter_index

    # ------------------------------------------------------------------
    # Levels
    # ------------------------------------------------------------------

    def set_power(self, percent: int) -> Request:
        """RF power 0-100 %, clamped, sent as a 0-255 level."""
        percent = max(0, min(POWER_PERCENT_MAX, int(percent)))
        level = percent * bcd.LEVEL_MAX // POWER_PERCENT_MAX
        return Request(RF_POWER, bcd.encode_level(level))

    def read_power(self) -> Request:
        return Request(RF_POWER)

    def parse_power(self, frame: CIVFrame) -> int:
        level = bcd.decode_level(self._data(frame, RF_POWER, 2))
        return level * POWER_PERCENT_MAX // bcd.LEVEL_MAX

    def read_s_meter(self) -> Request:
        return Request(S_METER)

    def parse_s_meter(self, frame: CIVFrame) -> int:
        """Raw 0-255 meter value."""
        return bcd.decode_level(self._data(frame, S_METER, 2))

    # ------------------------------------------------------------------
    # Switches
    # ------------------------------------------------------------------

    def set_ptt(self, transmit: bool) -> Request:
        return Request(PTT_STATE, _on_off(transmit))

    def read_ptt(self) -> Request:
        return Request(PTT_STATE)

    def parse_ptt(self, frame: CIVFrame) -> bool:
        return _parse_on_off(self._data(frame, PTT_STATE, 1))

    def set_split(self, enabled: bool) -> Request:
        return Request(bytes([Command.SPLIT]), _on_off(enabled))

    def read_split(self) -> Request:
        return Request(bytes([Command.SPLIT]))

    def parse_split(self, frame: CIVFrame) -> bool:
        return _parse_on_off(self._data(frame, bytes([Command.SPLIT]), 1))

    # ------------------------------------------------------------------
    # RIT / XIT
    # ------------------------------------------------------------------

    def set_rit_offset(self, hz: int) -> Request:
        return Request(RIT_OFFSET, bcd.encode_signed_offset(hz, OFFSET_DIGITS))

    def read_rit_offset(self) -> Request:
        return Request(RIT_OFFSET)

    def parse_rit_offset(self, frame: CIVFrame) -> int:
        data = self._data(frame, RIT_OFFSET, bcd.signed_offset_length(OFFSET_DIGITS))
        return bcd.decode_signed_offset(data, OFFSET_DIGITS)

    def set_rit_enabled(self, enabled: bool) -> Request:
        return Request(RIT_ENABLE, _on_off(enabled))

    def read_rit_enabled(self) -> Request:
        return Request(RIT_ENABLE)

    def parse_rit_enabled(self, frame: CIVFrame) -> bool:
        return _parse_on_off(self._data(frame, RIT_ENABLE, 1))

    def set_xit_enabled(self, enabled: bool) -> Request:
        return Request(XIT_ENABLE, _on_off(enabled))

    def read_xit_enabled(self) -> Request:
        return Request(XIT_ENABLE)

    def parse_xit_enabled(self, frame: CIVFrame) -> bool:
        return _parse_on_off(self._data(frame, XIT_ENABLE, 1))

    # ------------------------------------------------------------------
    # Memory and identification
    # ------------------------------------------------------------------

    def read_memory(self, number: int) -> Request:
        return Request(MEMORY_CONTENTS, bcd.encode_bcd_be(number, 2))

    def write_memory(self, channel: MemoryChannel) -> Request:
        return Request(MEMORY_CONTENTS, encode_memory_channel(channel))

    def parse_memory(self, frame: CIVFrame) -> MemoryChannel:
        return decode_memory_channel(self._data(frame, MEMORY_CONTENTS))

    def read_transceiver_id(self) -> Request:
        return Request(TRANSCEIVER_ID)

    def parse_transceiver_id(self, frame: CIVFrame) -> int:
        """CI-V address the radio reports for itself."""
        return self._data(frame, TRANSCEIVER_ID, 1)[0]


class FourByteFrequencyCommandSet(CommandSet):
    """IC-731/IC-735 generation: frequency field is 4 BCD bytes (8 digits)."""

    frequency_length = 4


# Models whose wire format departs from the generic command set
COMMAND_SET_OVERRIDES: Mapping[RadioModel, Type[CommandSet]] = MappingProxyType({
    RadioModel.IC735: FourByteFrequencyCommandSet,
})


def command_set_for(config: ModelConfig) -> CommandSet:
    """Build the command set for a registered model."""
    cls = COMMAND_SET_OVERRIDES.get(config.model, CommandSet)
    if cls is not CommandSet:
        logger.debug(f"{config.name}: using {cls.__name__}")
    return cls(config.behavior)
