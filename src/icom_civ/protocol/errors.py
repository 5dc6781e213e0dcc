"""
CI-V error kinds.

Every failure the engine can surface derives from ``CIVError`` so callers can
catch the whole family with one clause. The engine never retries and never
recovers internally: these are raised at the first failing frame and passed
to the caller untouched.
"""


class CIVError(Exception):
    """Base exception for CI-V protocol errors"""
    pass


class TransportError(CIVError):
    """Serial port could not be opened, written or read"""
    pass


class NotConnected(CIVError):
    """Operation attempted before connect() or after disconnect()"""

    def __init__(self, message: str = "Radio is not connected, call connect() first"):
        super().__init__(message)


class CIVTimeout(CIVError, TimeoutError):
    """No terminator byte observed within the response window"""
    pass


class MalformedFrame(CIVError):
    """Received bytes are not a valid frame, or not the expected reply"""
    pass


class MalformedData(MalformedFrame):
    """Frame payload holds a value that cannot be decoded (e.g. BCD nibble > 9)"""
    pass


class CommandRejected(CIVError):
    """Radio replied NAK (or anything but ACK) to a set operation"""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"Radio rejected {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedOperation(CIVError):
    """Operation is not meaningful for this radio's behavior"""
    pass


class InvalidParameter(CIVError, ValueError):
    """Caller-supplied value outside the operation's legal domain"""
    pass


class EmptyChannel(CIVError):
    """Memory channel is reported blank by the radio"""

    def __init__(self, channel: int):
        self.channel = channel
        super().__init__(f"Memory channel {channel} is empty")
