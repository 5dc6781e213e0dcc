"""Shared fixtures: an in-memory CI-V bus and engines bound to it."""

from typing import List, Optional

import pytest

from icom_civ.models import RadioModel
from icom_civ.protocol import IcomCIVProtocol
from icom_civ.protocol.errors import CIVTimeout
from icom_civ.protocol.frame import ACK, CONTROLLER_ADDRESS, NAK, build_frame

IC7300_ADDRESS = 0x94
IC7100_ADDRESS = 0x88


def reply(command: bytes, payload: bytes = b"", source: int = IC7300_ADDRESS) -> bytes:
    """Wire bytes of a frame sent by the radio to the controller."""
    return build_frame(CONTROLLER_ADDRESS, command, payload, source=source)


def ack(source: int = IC7300_ADDRESS) -> bytes:
    return reply(bytes([ACK]), source=source)


def nak(source: int = IC7300_ADDRESS) -> bytes:
    return reply(bytes([NAK]), source=source)


class MockTransport:
    """Records written frames and replays queued responses."""

    def __init__(self, responses: Optional[List[bytes]] = None):
        self.responses = list(responses or [])
        self.written: List[bytes] = []
        self.is_open = False
        self.open_count = 0
        self.flush_count = 0
        self.timeouts: List[Optional[float]] = []

    def queue(self, *responses: bytes) -> None:
        self.responses.extend(responses)

    def open(self) -> None:
        self.is_open = True
        self.open_count += 1

    def close(self) -> None:
        self.is_open = False

    def flush(self) -> None:
        self.flush_count += 1

    def write(self, data: bytes) -> None:
        assert self.is_open, "write on closed transport"
        self.written.append(bytes(data))

    def read_until(self, terminator: bytes = b"\xFD", timeout: Optional[float] = None) -> bytes:
        self.timeouts.append(timeout)
        if not self.responses:
            raise CIVTimeout("No response from radio")
        return self.responses.pop(0)


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def radio(transport):
    """Connected IC-7300 engine (targetable VFOs, filter byte, no echo)."""
    engine = IcomCIVProtocol.for_model(RadioModel.IC7300, transport)
    engine.connect()
    return engine


@pytest.fixture
def echo_radio(transport):
    """Connected IC-7100 engine (echoes commands, no filter byte)."""
    engine = IcomCIVProtocol.for_model(RadioModel.IC7100, transport)
    engine.connect()
    return engine
