"""
Radio behavior descriptor.

A handful of enumerated axes is enough to classify every supported Icom
transceiver. The engine and the generic command set read these fields
instead of branching on a model name.
"""

from dataclasses import dataclass
from enum import Enum, auto


class VFOModel(Enum):
    """How a radio addresses its VFOs."""
    TARGETABLE = auto()         # VFO A/B selectable directly (IC-7300, IC-7700)
    CURRENT_ONLY = auto()       # operates on current VFO, switch first (IC-7100, IC-705)
    MAIN_SUB = auto()           # Main/Sub receivers instead of A/B (IC-7600, IC-9100)
    MAIN_SUB_DUAL_VFO = auto()  # Main/Sub bands, each with its own A/B (IC-9700)
    NONE = auto()               # no VFO selection (receivers, scanners)


class PowerUnits(Enum):
    """Unit the radio's front panel shows for RF power."""
    PERCENTAGE = "percentage"
    WATTS = "watts"


class ResponseLayout(Enum):
    """Where a reply carries the sub-command of a two-byte command."""
    STANDARD = auto()           # command field for 14/15/1C, first payload byte otherwise
    SUBCOMMAND_ECHOED = auto()  # may also repeat the sub-command at the head of the payload


@dataclass(frozen=True)
class RadioBehavior:
    """Behavioral classification of one transceiver model."""
    vfo_model: VFOModel = VFOModel.TARGETABLE
    requires_mode_filter: bool = True
    echoes_commands: bool = False
    power_units: PowerUnits = PowerUnits.PERCENTAGE
    response_layout: ResponseLayout = ResponseLayout.STANDARD

    @property
    def requires_vfo_selection(self) -> bool:
        return self.vfo_model is not VFOModel.NONE

    @property
    def has_dual_receiver(self) -> bool:
        """Main/Sub band commands (select, exchange, dualwatch) apply."""
        return self.vfo_model in (VFOModel.MAIN_SUB, VFOModel.MAIN_SUB_DUAL_VFO)

    @property
    def has_vfos_per_band(self) -> bool:
        return self.vfo_model is VFOModel.MAIN_SUB_DUAL_VFO


# Modern HF radios: filter byte, no echo, VFO A/B targetable
STANDARD_BEHAVIOR = RadioBehavior()

# IC-7100 / IC-705: no filter byte, echoes every command, current VFO only
IC7100_BEHAVIOR = RadioBehavior(
    vfo_model=VFOModel.CURRENT_ONLY,
    requires_mode_filter=False,
    echoes_commands=True,
    response_layout=ResponseLayout.SUBCOMMAND_ECHOED,
)
