"""
Core radio actions.

Each action opens the engine on a serial port, performs one operation,
closes the port and reports an ``OperationResult``. CI-V errors become failed
results; anything else propagates.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Optional

from ..models.registry import Capability, get_model
from ..protocol.engine import IcomCIVProtocol
from ..protocol.errors import CIVError
from ..protocol.transport import SerialTransport
from .results import OperationResult

logger = logging.getLogger(__name__)


class _ListLogHandler(logging.Handler):
    """Capture log records into a list of formatted strings."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.records = []
        self.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(self.format(record))


@contextmanager
def _capture_logs(logger_name: str = "icom_civ"):
    """Capture logs for core operations into a list."""
    target_logger = logging.getLogger(logger_name)
    handler = _ListLogHandler()
    target_logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        target_logger.removeHandler(handler)


def run_operation(
    operation: str,
    action: Callable[[IcomCIVProtocol], Any],
    model: str,
    port: str,
    baud: Optional[int] = None,
    address: Optional[int] = None,
    timeout: float = 1.0,
    requires: Optional[Capability] = None,
) -> OperationResult:
    """
    Connect, run ``action`` against the engine, disconnect.

    Args:
        operation: Name reported in the result
        action: Callable receiving the connected engine; its return value
            becomes ``result.value``
        model: Model name from the registry
        port: Serial port path
        baud: Baud rate (default: model default)
        address: CI-V address (default: model default)
        timeout: Per-reply timeout in seconds
        requires: Capability the model should list; a warning is added if not

    Returns:
        OperationResult; ``ok`` is False when the radio or port failed
    """
    config = get_model(model)
    if config is None:
        return OperationResult.failure(
            operation=operation,
            error=f"Unknown model '{model}'. Use list-models to see known models.",
            model=model,
            port=port,
        )

    warnings = []
    if requires is not None and not config.supports(requires):
        warnings.append(f"{config.name} does not list {requires.name}")

    with _capture_logs() as logs:
        baud = baud or config.baud_rate
        civ_address = config.civ_address if address is None else address
        transport = SerialTransport(port, baudrate=baud, timeout=timeout)
        radio = IcomCIVProtocol.for_model(
            config.model,
            transport,
            civ_address=civ_address,
            response_timeout=timeout,
        )

        try:
            with radio:
                value = action(radio)
        except CIVError as e:
            logger.error(f"{operation} failed: {e}")
            result = OperationResult.failure(
                operation=operation,
                error=str(e),
                model=config.name,
                port=port,
                warnings=warnings,
            )
            result.metadata["error_type"] = type(e).__name__
            result.logs = logs
            return result

        result = OperationResult.success(
            operation=operation,
            model=config.name,
            port=port,
            value=value,
            warnings=warnings,
        )
        result.metadata["address"] = f"0x{civ_address:02X}"
        result.metadata["baud"] = baud
        result.logs = logs
        return result
