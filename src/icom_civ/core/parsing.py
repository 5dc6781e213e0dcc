"""
Centralized parsing helpers for user-entered values.

The CLI imports these rather than re-implementing them.
"""

from typing import Optional

_FREQUENCY_SUFFIXES = {
    "hz": 1,
    "k": 1_000,
    "khz": 1_000,
    "m": 1_000_000,
    "mhz": 1_000_000,
    "g": 1_000_000_000,
    "ghz": 1_000_000_000,
}

_TRUE_WORDS = {"on", "1", "true", "yes", "tx"}
_FALSE_WORDS = {"off", "0", "false", "no", "rx"}


def parse_address(value: Optional[str]) -> Optional[int]:
    """
    Parse a CI-V address.

    Accepts:
        - Hex with 0x prefix: "0x94"
        - Hex with h suffix: "94h"
        - Bare hex, as printed in radio menus: "94", "A4"
        - None or empty for the model default

    Raises:
        ValueError: If value cannot be parsed or is outside 0x00-0xFF.
    """
    if value is None:
        return None

    value = value.strip()
    if not value:
        return None

    text = value.lower()
    if text.startswith("0x"):
        text = text[2:]
    elif text.endswith("h"):
        text = text[:-1]

    try:
        address = int(text, 16)
    except ValueError:
        raise ValueError(
            f"Invalid CI-V address '{value}'. Use hex (0x94, 94h or 94)."
        ) from None
    if not 0 <= address <= 0xFF:
        raise ValueError(f"CI-V address '{value}' is outside 00-FF")
    return address


def parse_frequency(value: str) -> int:
    """
    Parse a frequency into Hz.

    Accepts:
        - Plain Hz: "14230000"
        - Decimal with unit: "14.230M", "14.23 MHz", "7074k", "145.5mhz"

    Raises:
        ValueError: If value cannot be parsed or is negative.
    """
    text = value.strip().lower().replace(" ", "").replace("_", "")
    multiplier = 1
    for suffix in sorted(_FREQUENCY_SUFFIXES, key=len, reverse=True):
        if text.endswith(suffix):
            multiplier = _FREQUENCY_SUFFIXES[suffix]
            text = text[: -len(suffix)]
            break

    try:
        if "." in text or multiplier != 1:
            hz = round(float(text) * multiplier)
        else:
            hz = int(text)
    except ValueError:
        raise ValueError(
            f"Invalid frequency '{value}'. Use Hz (14230000) or a unit (14.230M, 7074k)."
        ) from None

    if hz < 0:
        raise ValueError(f"Frequency must be positive: '{value}'")
    return hz


def parse_on_off(value: str) -> bool:
    """Parse on/off style switches ("on", "off", "tx", "rx", "1", "0")."""
    text = value.strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"Expected on/off, got '{value}'")
