"""
CI-V frame builder and parser.

Frame layout::

    +---------+------+------+-----------+------------------+------------+
    | FE FE   | dest | src  | cmd (1-2) | payload (0..n)   | FD         |
    +---------+------+------+-----------+------------------+------------+

- Preamble: 0xFE 0xFE
- dest/src: CI-V bus addresses (controller is conventionally 0xE0)
- Command: one byte, or two for the command groups that carry a sub-command
- Terminator: 0xFD

There is no length field and no escaping. The split between command and
payload on receive is a fixed heuristic: the 0x14, 0x15 and 0x1C groups take
the following byte as their sub-command when one is present. A one-byte
command whose first payload byte happens to equal one of those codes is
indistinguishable on the wire, and is parsed the same way the radios' own
software parses it.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import MalformedFrame

PREAMBLE = b"\xFE\xFE"
TERMINATOR = 0xFD
CONTROLLER_ADDRESS = 0xE0
ACK = 0xFB
NAK = 0xFA
MIN_FRAME_LENGTH = 6

# Command groups whose second byte is a sub-command
SUBCOMMAND_GROUPS = frozenset({0x14, 0x15, 0x1C})


@dataclass(frozen=True)
class CIVFrame:
    """A single CI-V frame."""

    destination: int
    source: int
    command: bytes
    payload: bytes = b""

    def __post_init__(self) -> None:
        if not 1 <= len(self.command) <= 2:
            raise ValueError(
                f"Command must be 1 or 2 bytes, got {len(self.command)}"
            )

    def to_bytes(self) -> bytes:
        """Serialize to wire form, preamble through terminator."""
        return (
            PREAMBLE
            + bytes([self.destination, self.source])
            + self.command
            + self.payload
            + bytes([TERMINATOR])
        )

    @property
    def is_ack(self) -> bool:
        return self.command == bytes([ACK])

    @property
    def is_nak(self) -> bool:
        return self.command == bytes([NAK])

    def is_echo(self, controller: int = CONTROLLER_ADDRESS) -> bool:
        """True if this is a copy of a frame the controller itself sent."""
        return self.source == controller and self.destination != controller

    def __repr__(self) -> str:
        return (
            f"CIVFrame(dest=0x{self.destination:02X}, src=0x{self.source:02X}, "
            f"command={self.command.hex(' ').upper()}, "
            f"payload={self.payload.hex(' ').upper() if self.payload else '(empty)'})"
        )


def build_frame(
    destination: int,
    command: bytes,
    payload: bytes = b"",
    source: int = CONTROLLER_ADDRESS,
) -> bytes:
    """Build wire bytes for a command addressed to ``destination``."""
    return CIVFrame(destination, source, bytes(command), bytes(payload)).to_bytes()


def parse_frame(data: bytes) -> CIVFrame:
    """
    Parse one CI-V frame.

    Args:
        data: Raw frame bytes including preamble and terminator

    Returns:
        Parsed ``CIVFrame``

    Raises:
        MalformedFrame: On bad preamble, missing terminator or short frame
    """
    if len(data) < MIN_FRAME_LENGTH:
        raise MalformedFrame(
            f"Frame too short ({len(data)} bytes): {data.hex().upper() or 'empty'}"
        )
    if data[:2] != PREAMBLE:
        raise MalformedFrame(f"Invalid preamble: {data.hex().upper()}")
    if data[-1] != TERMINATOR:
        raise MalformedFrame(f"Missing terminator: {data.hex().upper()}")

    destination = data[2]
    source = data[3]
    body = data[4:-1]
    if not body:
        raise MalformedFrame(f"Frame has no command byte: {data.hex().upper()}")

    if body[0] in SUBCOMMAND_GROUPS and len(body) > 1:
        command, payload = body[:2], body[2:]
    else:
        command, payload = body[:1], body[1:]

    return CIVFrame(
        destination=destination,
        source=source,
        command=bytes(command),
        payload=bytes(payload),
    )
