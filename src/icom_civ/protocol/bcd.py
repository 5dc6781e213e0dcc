"""
Binary Coded Decimal helpers for the CI-V wire format.

Icom firmware reads numeric fields as packed BCD: each nibble is one decimal
digit. There is no checksum on the bus, so a digit packed into the wrong
nibble is silently accepted as a different value. Every layout here mirrors
what the radios put on the wire.

Layouts:
    frequency      5 bytes, little-endian digit pairs
                   14.230 MHz -> 00 00 23 14 00
    level          2 bytes, hundreds digit first, then tens/units
                   255 -> 02 55
    signed offset  magnitude digits little-endian, sign flag in bit 7 of
                   the last byte; zero is all-zero
                   -500 (4 digits) -> 00 05 80
    big-endian     plain BCD, most significant pair first
                   105 (2 bytes) -> 01 05
"""

from .errors import InvalidParameter, MalformedData

FREQUENCY_BYTES = 5
LEVEL_MAX = 255
SIGN_FLAG = 0x80


def _check_nibbles(byte: int) -> None:
    if (byte & 0x0F) > 9 or (byte >> 4) > 9:
        raise MalformedData(f"Invalid BCD byte 0x{byte:02X}")


def encode_frequency(hz: int, length: int = FREQUENCY_BYTES) -> bytes:
    """
    Encode a frequency in Hz as little-endian BCD.

    Args:
        hz: Frequency in Hertz
        length: Field width in bytes (5 on current radios, 4 on IC-735 era)

    Returns:
        ``length`` bytes, least significant digit pair first
    """
    if hz < 0 or hz >= 10 ** (length * 2):
        raise InvalidParameter(
            f"Frequency {hz} Hz does not fit in {length * 2} BCD digits"
        )

    out = bytearray(length)
    value = hz
    for i in range(length):
        low = value % 10
        value //= 10
        high = value % 10
        value //= 10
        out[i] = (high << 4) | low
    return bytes(out)


def decode_frequency(data: bytes) -> int:
    """
    Decode a little-endian BCD frequency back to Hz.

    Raises:
        MalformedData: If any nibble exceeds 9
    """
    hz = 0
    multiplier = 1
    for byte in data:
        _check_nibbles(byte)
        hz += (byte & 0x0F) * multiplier
        multiplier *= 10
        hz += (byte >> 4) * multiplier
        multiplier *= 10
    return hz


def encode_level(value: int) -> bytes:
    """Encode a 0-255 level (RF power, AF gain, meter...) as two BCD bytes."""
    if not 0 <= value <= LEVEL_MAX:
        raise InvalidParameter(f"Level must be 0-{LEVEL_MAX}, got {value}")
    hundreds = value // 100
    tens = (value // 10) % 10
    ones = value % 10
    return bytes([hundreds, (tens << 4) | ones])


def decode_level(data: bytes) -> int:
    """Decode a two-byte BCD level."""
    if len(data) != 2:
        raise MalformedData(f"Level field must be 2 bytes, got {len(data)}")
    for byte in data:
        _check_nibbles(byte)
    hundreds = data[0] & 0x0F
    return hundreds * 100 + (data[1] >> 4) * 10 + (data[1] & 0x0F)


def signed_offset_length(max_digits: int) -> int:
    """Byte width of a signed offset field holding ``max_digits`` digits."""
    return max_digits // 2 + 1


def encode_signed_offset(hz: int, max_digits: int = 4) -> bytes:
    """
    Encode a signed offset (RIT/XIT, duplex shift) as BCD plus sign flag.

    The magnitude is packed little-endian, two digits per byte. One extra
    nibble pair is reserved at the end so bit 7 of the last byte is never
    used by a digit; it carries the sign. Zero is all-zero bytes.

    Args:
        hz: Signed offset
        max_digits: Number of magnitude digits the field holds

    Raises:
        InvalidParameter: If ``abs(hz)`` needs more than ``max_digits`` digits
    """
    magnitude = abs(hz)
    if magnitude >= 10 ** max_digits:
        raise InvalidParameter(
            f"Offset {hz} outside +/-{10 ** max_digits - 1}"
        )

    out = bytearray(signed_offset_length(max_digits))
    value = magnitude
    for i in range(max_digits):
        digit = value % 10
        value //= 10
        if i % 2:
            out[i // 2] |= digit << 4
        else:
            out[i // 2] |= digit
    if hz < 0:
        out[-1] |= SIGN_FLAG
    return bytes(out)


def decode_signed_offset(data: bytes, max_digits: int = 4) -> int:
    """
    Inverse of :func:`encode_signed_offset`.

    When the last byte holds no digits (even ``max_digits``), radios that use
    the older ``00``/``01`` direction byte are also understood.
    """
    expected = signed_offset_length(max_digits)
    if len(data) != expected:
        raise MalformedData(
            f"Offset field must be {expected} bytes, got {len(data)}"
        )

    negative = bool(data[-1] & SIGN_FLAG)
    digits = bytearray(data)
    digits[-1] &= ~SIGN_FLAG & 0xFF
    if max_digits % 2 == 0:
        negative = negative or digits[-1] == 0x01
        digits[-1] = 0

    magnitude = 0
    multiplier = 1
    for i in range(max_digits):
        byte = digits[i // 2]
        digit = (byte >> 4) if i % 2 else (byte & 0x0F)
        if digit > 9:
            raise MalformedData(f"Invalid BCD byte 0x{byte:02X}")
        magnitude += digit * multiplier
        multiplier *= 10
    return -magnitude if negative else magnitude


def encode_bcd_be(value: int, length: int) -> bytes:
    """Encode a non-negative integer as big-endian BCD of ``length`` bytes."""
    if value < 0 or value >= 10 ** (length * 2):
        raise InvalidParameter(
            f"Value {value} does not fit in {length * 2} BCD digits"
        )
    out = bytearray(length)
    for i in range(length - 1, -1, -1):
        low = value % 10
        value //= 10
        high = value % 10
        value //= 10
        out[i] = (high << 4) | low
    return bytes(out)


def decode_bcd_be(data: bytes) -> int:
    """Decode big-endian BCD."""
    value = 0
    for byte in data:
        _check_nibbles(byte)
        value = value * 100 + (byte >> 4) * 10 + (byte & 0x0F)
    return value
