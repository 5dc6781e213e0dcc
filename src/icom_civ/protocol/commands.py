"""Command codes and fixed sub-command values used by the CI-V engine."""

from __future__ import annotations

from enum import IntEnum


class Command(IntEnum):
    """Top-level CI-V command codes."""

    READ_FREQUENCY = 0x03
    READ_MODE = 0x04
    SET_FREQUENCY = 0x05
    SET_MODE = 0x06
    SELECT_VFO = 0x07
    SPLIT = 0x0F
    SETTINGS = 0x14
    READ_LEVEL = 0x15
    READ_ID = 0x19
    ADVANCED = 0x1A
    PTT = 0x1C
    RIT = 0x21


class VFOCode(IntEnum):
    """Data byte following SELECT_VFO."""

    VFO_A = 0x00
    VFO_B = 0x01
    EQUALIZE_VFOS = 0xA0
    EXCHANGE_BANDS = 0xB0
    DUALWATCH_OFF = 0xC0
    DUALWATCH_ON = 0xC1
    MAIN = 0xD0
    SUB = 0xD1


# Two-byte commands
RF_POWER = bytes([Command.SETTINGS, 0x0A])
S_METER = bytes([Command.READ_LEVEL, 0x02])
PTT_STATE = bytes([Command.PTT, 0x00])
RIT_OFFSET = bytes([Command.RIT, 0x00])
RIT_ENABLE = bytes([Command.RIT, 0x01])
XIT_ENABLE = bytes([Command.RIT, 0x02])
MEMORY_CONTENTS = bytes([Command.ADVANCED, 0x00])
TRANSCEIVER_ID = bytes([Command.READ_ID, 0x00])

# FIL1; 0x00 is not a valid filter code and gets a NAK
DEFAULT_FILTER = 0x01

# Payload byte that marks a blank memory channel
BLANK_CHANNEL = 0xFF
