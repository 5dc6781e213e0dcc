"""
Model registry and value types for Icom radios.

Provides the behavior descriptors, per-model configuration and the typed
values exchanged with the engine.
"""

from .behavior import (
    IC7100_BEHAVIOR,
    STANDARD_BEHAVIOR,
    PowerUnits,
    RadioBehavior,
    ResponseLayout,
    VFOModel,
)
from .registry import (
    Capability,
    CapabilityInfo,
    ModelCapabilities,
    ModelConfig,
    RadioModel,
    get_capabilities,
    get_model,
    get_models_by_vfo_model,
    list_models,
)
from .types import (
    MAX_NAME_LENGTH,
    VFO,
    Band,
    MemoryChannel,
    Mode,
    RITXITState,
    SignalStrength,
)

__all__ = [
    # Behavior
    "RadioBehavior",
    "VFOModel",
    "PowerUnits",
    "ResponseLayout",
    "STANDARD_BEHAVIOR",
    "IC7100_BEHAVIOR",
    # Registry
    "RadioModel",
    "ModelConfig",
    "Capability",
    "CapabilityInfo",
    "ModelCapabilities",
    "list_models",
    "get_model",
    "get_models_by_vfo_model",
    "get_capabilities",
    # Types
    "VFO",
    "Band",
    "Mode",
    "SignalStrength",
    "RITXITState",
    "MemoryChannel",
    "MAX_NAME_LENGTH",
]
