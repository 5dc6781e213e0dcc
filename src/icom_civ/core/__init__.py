"""
Core module for Icom CI-V.

This module provides the single source of truth for:
- Value parsing from user input (parsing.py)
- Result objects (results.py)
- Connect/operate/disconnect workflows (actions.py)

Front ends call into this module rather than implementing their own logic.
"""

from .parsing import parse_address, parse_frequency, parse_on_off
from .results import OperationResult
from .actions import run_operation

__all__ = [
    "parse_address",
    "parse_frequency",
    "parse_on_off",
    "OperationResult",
    "run_operation",
]
