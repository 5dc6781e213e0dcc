"""
Model registry for Icom CI-V radios.

Provides a single source of truth for:
- Default CI-V address and baud rate per model
- Behavior descriptor (VFO model, filter byte, echo, power units)
- Memory channel range and maximum RF power
- Capabilities (what the engine can be asked to do and why)

Usage:
    from icom_civ.models import RadioModel, list_models, get_model

    # List all known models
    names = list_models()

    # Look up by enum or by display name
    config = get_model(RadioModel.IC7300)
    config = get_model("IC-7300")

CI-V addresses are user-configurable on the radio; the value here is only
the factory default.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from .behavior import (
    IC7100_BEHAVIOR,
    STANDARD_BEHAVIOR,
    PowerUnits,
    RadioBehavior,
    VFOModel,
)


class RadioModel(Enum):
    """Closed set of supported transceivers."""
    IC7300 = "IC-7300"
    IC7610 = "IC-7610"
    IC7600 = "IC-7600"
    IC7700 = "IC-7700"
    IC7800 = "IC-7800"
    IC7851 = "IC-7851"
    IC7200 = "IC-7200"
    IC7410 = "IC-7410"
    IC7000 = "IC-7000"
    IC7100 = "IC-7100"
    IC705 = "IC-705"
    IC9100 = "IC-9100"
    IC9700 = "IC-9700"
    IC910H = "IC-910H"
    IC756PRO = "IC-756 Pro"
    IC756PROII = "IC-756 Pro II"
    IC756PROIII = "IC-756 Pro III"
    IC746 = "IC-746"
    IC746PRO = "IC-746PRO"
    IC706 = "IC-706"
    IC706MKII = "IC-706MKII"
    IC706MKIIG = "IC-706MKIIG"
    IC735 = "IC-735"
    ICR75 = "IC-R75"
    ICR8600 = "IC-R8600"


class Capability(Enum):
    """Operations a model accepts over CI-V."""
    PTT = auto()            # Can key the transmitter
    POWER_CONTROL = auto()  # RF power level settable
    SPLIT = auto()          # Split TX/RX
    RIT = auto()            # Receiver incremental tuning
    XIT = auto()            # Transmitter incremental tuning
    MEMORY = auto()         # Memory contents read/write (0x1A 0x00)
    DUAL_RECEIVER = auto()  # Main/Sub receivers


TRANSCEIVER = frozenset({
    Capability.PTT,
    Capability.POWER_CONTROL,
    Capability.SPLIT,
    Capability.RIT,
    Capability.MEMORY,
})


@dataclass(frozen=True)
class ModelConfig:
    """
    Static configuration for a radio model.

    Consolidates bus parameters, behavior descriptor and capability flags.
    """
    model: RadioModel
    civ_address: int
    baud_rate: int = 19200
    behavior: RadioBehavior = STANDARD_BEHAVIOR
    memory_channels: Tuple[int, int] = (1, 99)
    max_power_watts: int = 100
    capabilities: FrozenSet[Capability] = TRANSCEIVER
    notes: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.model.value

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def channel_in_range(self, number: int) -> bool:
        low, high = self.memory_channels
        return low <= number <= high


@dataclass(frozen=True)
class CapabilityInfo:
    """A capability and its status for a model."""
    capability: Capability
    supported: bool
    reason: str


@dataclass
class ModelCapabilities:
    """Complete capabilities report for a model."""
    model_name: str
    capabilities: List[CapabilityInfo]
    notes: List[str]

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return {
            "model": self.model_name,
            "capabilities": [
                {
                    "name": c.capability.name,
                    "supported": c.supported,
                    "reason": c.reason,
                }
                for c in self.capabilities
            ],
            "notes": self.notes,
        }


# ============================================================================
# MODEL TABLE
# ============================================================================

_MAIN_SUB = RadioBehavior(vfo_model=VFOModel.MAIN_SUB)
_CURRENT_ONLY = RadioBehavior(vfo_model=VFOModel.CURRENT_ONLY)
_LEGACY = RadioBehavior(requires_mode_filter=False)

_MODELS: Tuple[ModelConfig, ...] = (
    # HF / 50 MHz, VFO A/B targetable
    ModelConfig(
        RadioModel.IC7300, 0x94, baud_rate=115200,
        capabilities=TRANSCEIVER | {Capability.XIT},
        notes=("USB CI-V echo back must be OFF (menu default)",),
    ),
    ModelConfig(
        RadioModel.IC7700, 0x74, max_power_watts=200,
        capabilities=TRANSCEIVER | {Capability.XIT},
    ),
    ModelConfig(RadioModel.IC7000, 0x70),

    # Dual receiver, Main/Sub
    ModelConfig(
        RadioModel.IC7610, 0x98, baud_rate=115200, behavior=_MAIN_SUB,
        capabilities=TRANSCEIVER | {Capability.XIT, Capability.DUAL_RECEIVER},
    ),
    ModelConfig(
        RadioModel.IC7600, 0x7A,
        behavior=RadioBehavior(vfo_model=VFOModel.MAIN_SUB, echoes_commands=True),
        memory_channels=(0, 99),
        capabilities=TRANSCEIVER | {Capability.XIT, Capability.DUAL_RECEIVER},
        notes=("Echoes commands over the USB port",),
    ),
    ModelConfig(
        RadioModel.IC7800, 0x6A, behavior=_MAIN_SUB, max_power_watts=200,
        capabilities=TRANSCEIVER | {Capability.XIT, Capability.DUAL_RECEIVER},
    ),
    ModelConfig(
        RadioModel.IC7851, 0x8E, behavior=_MAIN_SUB, max_power_watts=200,
        capabilities=TRANSCEIVER | {Capability.XIT, Capability.DUAL_RECEIVER},
    ),
    ModelConfig(
        RadioModel.IC9100, 0x7C, baud_rate=115200, behavior=_MAIN_SUB,
        capabilities=TRANSCEIVER | {Capability.XIT, Capability.DUAL_RECEIVER},
    ),
    ModelConfig(
        RadioModel.IC910H, 0x60, behavior=_MAIN_SUB,
        capabilities=TRANSCEIVER | {Capability.DUAL_RECEIVER},
        notes=("Satellite transceiver, VHF/UHF only",),
    ),
    ModelConfig(
        RadioModel.IC756PRO, 0x5C, behavior=_MAIN_SUB,
        capabilities=TRANSCEIVER | {Capability.DUAL_RECEIVER},
    ),
    ModelConfig(
        RadioModel.IC756PROII, 0x64, behavior=_MAIN_SUB,
        capabilities=TRANSCEIVER | {Capability.DUAL_RECEIVER},
    ),
    ModelConfig(
        RadioModel.IC756PROIII, 0x6E, behavior=_MAIN_SUB,
        capabilities=TRANSCEIVER | {Capability.DUAL_RECEIVER},
    ),

    # Current VFO only
    ModelConfig(RadioModel.IC7200, 0x76, behavior=_CURRENT_ONLY, memory_channels=(1, 201)),
    ModelConfig(RadioModel.IC7410, 0x80, behavior=_CURRENT_ONLY),
    ModelConfig(
        RadioModel.IC7100, 0x88, behavior=IC7100_BEHAVIOR,
        memory_channels=(1, 109),
        notes=(
            "Mode command rejects the filter byte",
            "Every command is echoed before the reply",
        ),
    ),
    ModelConfig(
        RadioModel.IC705, 0xA4, baud_rate=115200, behavior=IC7100_BEHAVIOR,
        memory_channels=(0, 499), max_power_watts=10,
    ),
    ModelConfig(
        RadioModel.IC9700, 0xA2, baud_rate=115200,
        behavior=RadioBehavior(
            vfo_model=VFOModel.MAIN_SUB_DUAL_VFO,
            requires_mode_filter=False,
            echoes_commands=True,
        ),
        memory_channels=(1, 109),
        capabilities=TRANSCEIVER | {Capability.XIT, Capability.DUAL_RECEIVER},
        notes=("Main/Sub bands, each with its own VFO A/B",),
    ),

    # Legacy CI-V, no filter byte in mode commands
    ModelConfig(RadioModel.IC746, 0x56, behavior=_LEGACY),
    ModelConfig(RadioModel.IC746PRO, 0x66, behavior=_LEGACY),
    ModelConfig(RadioModel.IC706, 0x48, behavior=_LEGACY),
    ModelConfig(RadioModel.IC706MKII, 0x4E, behavior=_LEGACY),
    ModelConfig(RadioModel.IC706MKIIG, 0x58, behavior=_LEGACY),
    ModelConfig(
        RadioModel.IC735, 0x04, baud_rate=1200, behavior=_LEGACY,
        memory_channels=(1, 12),
        capabilities=frozenset({Capability.SPLIT}),
        notes=("Four-byte frequency field",),
    ),

    # Receivers
    ModelConfig(
        RadioModel.ICR75, 0x5A,
        behavior=RadioBehavior(vfo_model=VFOModel.NONE),
        capabilities=frozenset({Capability.MEMORY}),
        notes=("Receiver only",),
    ),
    ModelConfig(
        RadioModel.ICR8600, 0x96, baud_rate=115200,
        capabilities=frozenset({Capability.MEMORY}),
        notes=("Receiver only",),
    ),
)

_MODEL_REGISTRY: Mapping[RadioModel, ModelConfig] = MappingProxyType(
    {config.model: config for config in _MODELS}
)


# ============================================================================
# PUBLIC API
# ============================================================================

def list_models() -> List[str]:
    """
    List all registered model names.

    Returns:
        Sorted list of display names.
    """
    return sorted(model.value for model in _MODEL_REGISTRY)


def get_model(model: Union[RadioModel, str]) -> Optional[ModelConfig]:
    """
    Get configuration for a specific model.

    Args:
        model: RadioModel member, or display name (case-insensitive)

    Returns:
        ModelConfig or None if not found.
    """
    if isinstance(model, RadioModel):
        return _MODEL_REGISTRY.get(model)

    wanted = model.strip().upper().replace(" ", "")
    for candidate in RadioModel:
        if candidate.value.upper().replace(" ", "") == wanted or candidate.name == wanted:
            return _MODEL_REGISTRY.get(candidate)
    return None


def get_models_by_vfo_model(vfo_model: VFOModel) -> List[ModelConfig]:
    """
    Get all models sharing a VFO addressing model.

    Args:
        vfo_model: VFO model to filter by

    Returns:
        List of ModelConfig instances.
    """
    return [
        config for config in _MODEL_REGISTRY.values()
        if config.behavior.vfo_model == vfo_model
    ]


def get_capabilities(model_name: str) -> ModelCapabilities:
    """
    Get capabilities report for a model.

    Args:
        model_name: Model name to check

    Returns:
        ModelCapabilities report with supported operations and reasons.
    """
    config = get_model(model_name)

    if config is None:
        return ModelCapabilities(
            model_name=model_name,
            capabilities=[],
            notes=["Model not found in registry. Use list-models to see known models."],
        )

    caps = []
    for capability in Capability:
        supported = config.supports(capability)
        if capability is Capability.POWER_CONTROL and supported:
            unit = "%" if config.behavior.power_units is PowerUnits.PERCENTAGE else "W"
            reason = f"0-100 {unit} of {config.max_power_watts} W"
        elif capability is Capability.MEMORY and supported:
            low, high = config.memory_channels
            reason = f"Channels {low}-{high}"
        elif capability is Capability.XIT and not supported:
            reason = "Not listed; the radio is asked and a NAK means unsupported"
        elif supported:
            reason = "Supported"
        else:
            reason = "Not available on this model"
        caps.append(CapabilityInfo(capability, supported, reason))

    return ModelCapabilities(
        model_name=config.name,
        capabilities=caps,
        notes=list(config.notes),
    )
