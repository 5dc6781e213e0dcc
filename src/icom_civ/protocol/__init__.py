"""CI-V protocol layer - codecs, command set, engine and serial transport."""

from .errors import (
    CIVError,
    CIVTimeout,
    CommandRejected,
    EmptyChannel,
    InvalidParameter,
    MalformedData,
    MalformedFrame,
    NotConnected,
    TransportError,
    UnsupportedOperation,
)
from .frame import (
    ACK,
    CONTROLLER_ADDRESS,
    NAK,
    CIVFrame,
    build_frame,
    parse_frame,
)
from .command_set import (
    CommandSet,
    FourByteFrequencyCommandSet,
    Request,
    command_set_for,
    response_data,
)
from .memory import decode_memory_channel, encode_memory_channel
from .engine import IcomCIVProtocol
from .transport import SerialTransport, list_serial_ports, open_serial

__all__ = [
    # Errors
    "CIVError",
    "CIVTimeout",
    "CommandRejected",
    "EmptyChannel",
    "InvalidParameter",
    "MalformedData",
    "MalformedFrame",
    "NotConnected",
    "TransportError",
    "UnsupportedOperation",
    # Frames
    "CIVFrame",
    "build_frame",
    "parse_frame",
    "ACK",
    "NAK",
    "CONTROLLER_ADDRESS",
    # Commands
    "CommandSet",
    "FourByteFrequencyCommandSet",
    "Request",
    "command_set_for",
    "response_data",
    "encode_memory_channel",
    "decode_memory_channel",
    # Engine / transport
    "IcomCIVProtocol",
    "SerialTransport",
    "open_serial",
    "list_serial_ports",
]
