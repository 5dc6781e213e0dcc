"""
Result objects for core operations.

Provides a unified result structure that the CLI (and any other front end)
uses to display operation outcomes consistently.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass
class OperationResult:
    """
    Unified result object for all radio operations.

    Attributes:
        ok: Whether the operation completed successfully
        operation: Name of the operation (e.g., "set_frequency", "get_s_meter")
        model: Radio model name
        port: Serial port used
        value: Value read from the radio, or the value that was set
        warnings: Non-blocking issues encountered
        errors: Blocking errors that caused failure
        metadata: Additional operation-specific data
        logs: Captured log lines from the operation
    """
    ok: bool
    operation: str
    model: str = ""
    port: str = ""
    value: Any = None
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)

    def to_summary(self) -> str:
        """
        Generate a human-readable summary string.

        Suitable for CLI output or simple logging.
        """
        status = "SUCCESS" if self.ok else "FAILED"
        lines = [f"[{status}] {self.operation}"]

        if self.model:
            lines.append(f"  Model: {self.model}")
        if self.port:
            lines.append(f"  Port: {self.port}")
        if self.value is not None:
            lines.append(f"  Value: {self.value}")

        for name, value in self.metadata.items():
            lines.append(f"  {name}: {value}")

        if self.warnings:
            lines.append("  Warnings:")
            for warn in self.warnings:
                lines.append(f"    - {warn}")

        if self.errors:
            lines.append("  Errors:")
            for err in self.errors:
                lines.append(f"    - {err}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        value = self.value
        if value is not None and not isinstance(value, (bool, int, float, str, dict, list)):
            value = str(value)
        return {
            "ok": self.ok,
            "operation": self.operation,
            "model": self.model,
            "port": self.port,
            "value": value,
            "warnings": self.warnings,
            "errors": self.errors,
            "metadata": self.metadata,
            "logs": self.logs,
        }

    @classmethod
    def success(
        cls,
        operation: str,
        model: str = "",
        port: str = "",
        value: Any = None,
        **kwargs,
    ) -> "OperationResult":
        """Create a successful result."""
        return cls(
            ok=True,
            operation=operation,
            model=model,
            port=port,
            value=value,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        operation: str,
        error: str,
        model: str = "",
        **kwargs,
    ) -> "OperationResult":
        """Create a failed result."""
        result = cls(
            ok=False,
            operation=operation,
            model=model,
            **kwargs,
        )
        result.errors.append(error)
        return result
