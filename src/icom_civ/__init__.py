"""
Icom CI-V - CAT control engine for Icom transceivers

Frame and BCD codecs, per-model behavior table and a request/response engine
for the CI-V bus.
"""

__version__ = "0.1.0"

from icom_civ.models import RadioModel, get_model, list_models
from icom_civ.protocol import IcomCIVProtocol, SerialTransport

__all__ = [
    "IcomCIVProtocol",
    "SerialTransport",
    "RadioModel",
    "get_model",
    "list_models",
    "__version__",
]
