"""
Reactor Constants for the Graphite Chamber Model

This module contains the tuned constants that drive the chamber simulation:
neutron kinetics, fission energy release, coolant pressure limits and the
thresholds of the safety state machine.

The values are gameplay-scaled rather than physical. Where a physical
quantity is involved (temperatures, fission energy) it is derived from
``scipy.constants`` so the scaling stays visible.
"""

from dataclasses import dataclass

from scipy.constants import eV, zero_Celsius


# Energy released by one U-235 fission [J] (~200 MeV)
ENERGY_PER_FISSION_J = 200.0e6 * eV

# Gameplay scale applied to the fission energy so a few million neutrons
# noticeably heat a pipe of coolant
FISSION_ENERGY_SCALE = 1.0e9

# Largest magnitude of the original 128-bit decimal pressure register
DECIMAL_MAX = 79228162514264337593543950335.0


@dataclass(frozen=True)
class ReactorConstants:
    """Tunable constants of a graphite reactor chamber."""

    # Number of rod slots in the chamber
    SLOT_COUNT: int = 16

    # Tuned scale turning absorption probability into k
    K_FACTOR_SCALE: float = 0.85217022

    # Spontaneous neutron roll: one neutron when
    # LIKELIHOOD > randint[0, ROLL_RANGE) / ROLL_SCALE
    SPONTANEOUS_NEUTRON_LIKELIHOOD: float = 0.1
    SPONTANEOUS_ROLL_RANGE: int = 10001
    SPONTANEOUS_ROLL_SCALE: float = 1000.0

    # Neutron leakage published to the radiation field
    NEUTRON_LEAKING_CHANCE: float = 0.0397
    LEAK_CURVE_EXPONENT: float = 0.82
    LEAK_OUTPUT_SCALE: float = 36000.0

    # Population above which the chamber explodes
    NEUTRON_SINGULARITY: float = 76488300000.0

    # Explosion yield handed to the explosion effects
    EXPLOSION_YIELD: float = 120000.0

    # Control rod insertion limits (1.0 = fully inserted)
    MIN_CONTROL_ROD_DEPTH: float = 0.1
    MAX_CONTROL_ROD_DEPTH: float = 1.0

    # Temperature above which the rods melt [K]
    ROD_MELTING_TEMPERATURE: float = 1100.0

    # Coolant boiling point used for boil-off while ruptured [K]
    BOILING_POINT: float = zero_Celsius + 100.0

    # Temperature at which the coolant exerts no pressure [K]
    PRESSURE_REFERENCE_TEMPERATURE: float = zero_Celsius + 20.0

    # Pressure above which the pipe ruptures
    MAX_PRESSURE: float = 120000.0

    # Saturation bounds of the pressure register
    PRESSURE_CLAMP_MIN: float = -DECIMAL_MAX
    PRESSURE_CLAMP_MAX: float = DECIMAL_MAX

    # Energy needed to evaporate one mole of vented coolant [J]
    ENERGY_TO_EVAPORATE_PER_MOLE: float = 2000.0

    # Softening term of the melted-down absorption probability
    MELTDOWN_PRESSURE_SOFTENING: float = 100.0

    # Construct material dropped when an intact chamber is taken apart
    DROPPED_MATERIAL_AMOUNT: int = 40

    def __post_init__(self):
        """Validate that the constants describe a usable chamber."""
        if self.SLOT_COUNT < 1:
            raise ValueError(
                f"Slot count must be at least 1, got {self.SLOT_COUNT}"
            )
        if self.SPONTANEOUS_ROLL_RANGE < 1 or self.SPONTANEOUS_ROLL_SCALE <= 0:
            raise ValueError("Spontaneous neutron roll range and scale must be positive")
        if not 0.0 < self.MIN_CONTROL_ROD_DEPTH <= self.MAX_CONTROL_ROD_DEPTH:
            raise ValueError(
                "Control rod depth limits must satisfy 0 < min <= max, got "
                f"[{self.MIN_CONTROL_ROD_DEPTH}, {self.MAX_CONTROL_ROD_DEPTH}]"
            )
        if self.NEUTRON_SINGULARITY <= 0 or self.MAX_PRESSURE <= 0:
            raise ValueError("Singularity threshold and max pressure must be positive")
        if self.PRESSURE_CLAMP_MIN >= self.PRESSURE_CLAMP_MAX:
            raise ValueError("Pressure clamp minimum must be below its maximum")
        if self.ENERGY_TO_EVAPORATE_PER_MOLE <= 0:
            raise ValueError("Evaporation energy must be positive")
        if self.MELTDOWN_PRESSURE_SOFTENING <= 0:
            raise ValueError("Meltdown pressure softening must be positive")


# Default energy per absorbed neutron of a fuel rod [J]
DEFAULT_ENERGY_PER_NEUTRON = ENERGY_PER_FISSION_J * FISSION_ENERGY_SCALE

# Default fuel and control rod parameters
DEFAULT_FUEL_NEUTRON_YIELD = 1.7
DEFAULT_CONTROL_ABSORPTION_POWER = 8.0
DEFAULT_STARTER_GENERATION = 10.0

# Materials spawned when a chamber is torn down
TEARDOWN_MATERIALS = {
    "fuel": "uranium ore",
    "control": "metal ore",
    "intact": "construct material",
}
