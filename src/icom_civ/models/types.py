"""
Value types exchanged with the CI-V engine.

These are plain immutable records; none of them knows about bytes on the
wire. Wire mapping lives in ``icom_civ.protocol``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class VFO(Enum):
    """Logical VFO reference."""
    A = "A"
    B = "B"
    MAIN = "Main"
    SUB = "Sub"


class Band(Enum):
    """Receiver of a dual-receiver radio."""
    MAIN = "Main"
    SUB = "Sub"


class Mode(Enum):
    """Operating modes with their CI-V mode code."""
    LSB = 0x00
    USB = 0x01
    AM = 0x02
    CW = 0x03
    RTTY = 0x04
    FM = 0x05
    WFM = 0x06
    CW_R = 0x07
    RTTY_R = 0x08
    PSK = 0x12
    PSK_R = 0x13
    DV = 0x17

    @property
    def label(self) -> str:
        return self.name.replace("_", "-")

    @classmethod
    def from_label(cls, label: str) -> "Mode":
        """Look up a mode by display label ("USB", "CW-R", ...)."""
        key = label.strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            valid = ", ".join(m.label for m in cls)
            raise ValueError(f"Unknown mode '{label}'. Valid: {valid}") from None


@dataclass(frozen=True)
class SignalStrength:
    """
    S-meter reading.

    Icom meters report 0-255: 0 = S0, 120 = S9, 241 = S9+60 dB.
    """
    raw: int
    s_units: int
    over_s9_db: int = 0

    S9_RAW = 120
    S9_PLUS_60_RAW = 241

    @classmethod
    def from_raw(cls, raw: int) -> "SignalStrength":
        raw = max(0, min(255, raw))
        if raw <= cls.S9_RAW:
            return cls(raw=raw, s_units=raw * 9 // cls.S9_RAW)
        over = (raw - cls.S9_RAW) * 60 // (cls.S9_PLUS_60_RAW - cls.S9_RAW)
        return cls(raw=raw, s_units=9, over_s9_db=min(over, 60))

    @property
    def decibels(self) -> int:
        """Approximate dB over S0 (6 dB per S-unit)."""
        if self.s_units < 9:
            return self.s_units * 6
        return 54 + self.over_s9_db

    def __str__(self) -> str:
        if self.s_units < 9 or self.over_s9_db == 0:
            return f"S{self.s_units}"
        return f"S9+{self.over_s9_db}"


@dataclass(frozen=True)
class RITXITState:
    """RIT or XIT state: on/off plus offset in Hz."""
    enabled: bool
    offset_hz: int = 0

    def __str__(self) -> str:
        if not self.enabled:
            return "OFF"
        return f"ON ({self.offset_hz:+d} Hz)"

MAX_NAME_LENGTH = 10


@dataclass(frozen=True)
class MemoryChannel:
    """
    Contents of one memory channel.

    Attributes:
        number: Channel number
        frequency: Frequency in Hz
        mode: Operating mode
        filter_index: IF filter 1-3 (FIL1..FIL3), None for radio default
        data_mode: Data sub-mode (USB-D etc.)
        duplex_offset_hz: Repeater shift, positive for + duplex
        tone_hz: CTCSS tone, None for no tone
        name: Channel name, at most 10 characters on the radio
    """
    number: int
    frequency: int
    mode: Mode
    filter_index: Optional[int] = None
    data_mode: Optional[bool] = None
    duplex_offset_hz: Optional[int] = None
    tone_hz: Optional[float] = None
    name: Optional[str] = None

    @property
    def is_simplex(self) -> bool:
        return not self.duplex_offset_hz

    def __str__(self) -> str:
        desc = f"Ch {self.number}"
        if self.name:
            desc += f" ({self.name})"
        desc += f": {self.frequency / 1_000_000:.6f} MHz {self.mode.label}"
        if self.duplex_offset_hz:
            desc += f" shift {self.duplex_offset_hz:+d} Hz"
        if self.tone_hz:
            desc += f" tone {self.tone_hz:.1f} Hz"
        return desc
