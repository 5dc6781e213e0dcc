"""
Memory channel record codec (command 0x1A 0x00).

Record layout, 25 bytes::

    offset  size  field
    0       2     channel number, big-endian BCD
    2       5     frequency, little-endian BCD (Hz)
    7       1     mode code
    8       1     filter (0 = radio default)
    9       1     data mode (0/1)
    10      3     duplex offset, signed BCD in 100 Hz units (5 digits)
    13      2     CTCSS tone, big-endian BCD in 0.1 Hz (0 = no tone)
    15      10    name, ASCII, space padded

A blank channel is answered with the channel number followed by a single
0xFF byte.
"""

from typing import Optional

from ..models.types import MAX_NAME_LENGTH, MemoryChannel, Mode
from . import bcd
from .commands import BLANK_CHANNEL
from .errors import EmptyChannel, InvalidParameter, MalformedData, MalformedFrame

CHANNEL_BYTES = 2
DUPLEX_UNIT_HZ = 100
DUPLEX_DIGITS = 5
TONE_BYTES = 2
RECORD_LENGTH = (
    CHANNEL_BYTES
    + bcd.FREQUENCY_BYTES
    + 3
    + bcd.signed_offset_length(DUPLEX_DIGITS)
    + TONE_BYTES
    + MAX_NAME_LENGTH
)


def _encode_duplex(offset_hz: Optional[int]) -> bytes:
    offset_hz = offset_hz or 0
    if offset_hz % DUPLEX_UNIT_HZ:
        raise InvalidParameter(
            f"Duplex offset {offset_hz} Hz is not a multiple of {DUPLEX_UNIT_HZ} Hz"
        )
    return bcd.encode_signed_offset(offset_hz // DUPLEX_UNIT_HZ, DUPLEX_DIGITS)


def _encode_name(name: Optional[str]) -> bytes:
    text = (name or "")[:MAX_NAME_LENGTH]
    try:
        raw = text.encode("ascii")
    except UnicodeEncodeError:
        raise InvalidParameter(f"Channel name must be ASCII: {name!r}") from None
    return raw.ljust(MAX_NAME_LENGTH, b" ")


def encode_memory_channel(channel: MemoryChannel) -> bytes:
    """Serialize a channel to the 25-byte record the radio expects."""
    tone = round(channel.tone_hz * 10) if channel.tone_hz else 0
    return (
        bcd.encode_bcd_be(channel.number, CHANNEL_BYTES)
        + bcd.encode_frequency(channel.frequency)
        + bytes([
            channel.mode.value,
            channel.filter_index or 0,
            1 if channel.data_mode else 0,
        ])
        + _encode_duplex(channel.duplex_offset_hz)
        + bcd.encode_bcd_be(tone, TONE_BYTES)
        + _encode_name(channel.name)
    )


def decode_memory_channel(data: bytes) -> MemoryChannel:
    """
    Parse a memory record.

    Args:
        data: Reply data following the 1A 00 command bytes

    Returns:
        Decoded ``MemoryChannel``

    Raises:
        EmptyChannel: The radio reports the channel blank
        MalformedFrame: Record has the wrong length
        MalformedData: A field holds an undecodable value
    """
    if len(data) < CHANNEL_BYTES:
        raise MalformedFrame(f"Memory reply too short: {data.hex().upper()}")
    number = bcd.decode_bcd_be(data[:CHANNEL_BYTES])

    if data[CHANNEL_BYTES:] == bytes([BLANK_CHANNEL]):
        raise EmptyChannel(number)
    if len(data) != RECORD_LENGTH:
        raise MalformedFrame(
            f"Memory record must be {RECORD_LENGTH} bytes, got {len(data)}"
        )

    pos = CHANNEL_BYTES
    frequency = bcd.decode_frequency(data[pos:pos + bcd.FREQUENCY_BYTES])
    pos += bcd.FREQUENCY_BYTES

    mode_code, filter_code, data_code = data[pos:pos + 3]
    pos += 3
    try:
        mode = Mode(mode_code)
    except ValueError:
        raise MalformedData(f"Unknown mode code 0x{mode_code:02X}") from None

    duplex_len = bcd.signed_offset_length(DUPLEX_DIGITS)
    duplex = bcd.decode_signed_offset(data[pos:pos + duplex_len], DUPLEX_DIGITS)
    pos += duplex_len

    tone = bcd.decode_bcd_be(data[pos:pos + TONE_BYTES])
    pos += TONE_BYTES

    try:
        name = data[pos:pos + MAX_NAME_LENGTH].decode("ascii").rstrip(" ")
    except UnicodeDecodeError:
        raise MalformedData(f"Channel {number} name is not ASCII") from None

    return MemoryChannel(
        number=number,
        frequency=frequency,
        mode=mode,
        filter_index=filter_code or None,
        data_mode=bool(data_code),
        duplex_offset_hz=duplex * DUPLEX_UNIT_HZ or None,
        tone_hz=tone / 10 if tone else None,
        name=name or None,
    )
