"""
Rods and Pipes for the Graphite Chamber

This module defines the items that occupy the chamber slots:
- Fuel rods, which turn absorbed neutrons into heat and new neutrons
- Control rods, which absorb neutrons
- Starter rods, which seed the chain reaction with a fixed neutron rate
- The reactor pipe, which connects the chamber to the coolant loop

Every rod carries a ``rod_type`` tag so the simulation can dispatch on the
kind of rod explicitly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Tuple

from .constants import (
    DEFAULT_CONTROL_ABSORPTION_POWER,
    DEFAULT_ENERGY_PER_NEUTRON,
    DEFAULT_FUEL_NEUTRON_YIELD,
    DEFAULT_STARTER_GENERATION,
)


class RodType(Enum):
    """Kinds of rod a chamber slot can hold."""

    FUEL = "fuel"
    CONTROL = "control"
    STARTER = "starter"


@dataclass(eq=False)
class Rod:
    """
    Base class of all chamber rods.

    Rods compare by identity: two rods with the same parameters are still
    distinct physical items.

    Attributes:
        name: Human readable name of the rod
    """

    rod_type: ClassVar[RodType]

    name: str = "rod"


@dataclass(eq=False)
class FuelRod(Rod):
    """
    Fissile fuel rod.

    Attributes:
        energy_per_neutron: Energy released per absorbed neutron [J]
        neutron_yield: Secondary neutrons produced per absorbed neutron
    """

    rod_type: ClassVar[RodType] = RodType.FUEL

    name: str = "uranium fuel rod"
    energy_per_neutron: float = DEFAULT_ENERGY_PER_NEUTRON
    neutron_yield: float = DEFAULT_FUEL_NEUTRON_YIELD

    def __post_init__(self):
        if self.energy_per_neutron < 0:
            raise ValueError(
                f"Energy per neutron must be non-negative, got {self.energy_per_neutron}"
            )
        if self.neutron_yield < 0:
            raise ValueError(
                f"Neutron yield must be non-negative, got {self.neutron_yield}"
            )

    def process_hit(self, absorbed_neutrons: float) -> Tuple[float, float]:
        """
        Fission the neutrons absorbed by this rod.

        Args:
            absorbed_neutrons: Neutrons hitting this rod during the tick

        Returns:
            Tuple of (energy released [J], secondary neutrons)
        """
        energy = absorbed_neutrons * self.energy_per_neutron
        neutrons = absorbed_neutrons * self.neutron_yield
        return energy, neutrons


@dataclass(eq=False)
class ControlRod(Rod):
    """
    Neutron absorbing control rod.

    Attributes:
        absorption_power: Strength of absorption, scaled by insertion depth
    """

    rod_type: ClassVar[RodType] = RodType.CONTROL

    name: str = "boron control rod"
    absorption_power: float = DEFAULT_CONTROL_ABSORPTION_POWER

    def __post_init__(self):
        if self.absorption_power < 0:
            raise ValueError(
                f"Absorption power must be non-negative, got {self.absorption_power}"
            )


@dataclass(eq=False)
class StarterRod(Rod):
    """
    Neutron source used to start the chain reaction.

    Inserting one requires a control console linked to the chamber.

    Attributes:
        neutron_generation_per_second: Neutrons added every tick
    """

    rod_type: ClassVar[RodType] = RodType.STARTER

    name: str = "engine starter rod"
    neutron_generation_per_second: float = DEFAULT_STARTER_GENERATION

    def __post_init__(self):
        if self.neutron_generation_per_second < 0:
            raise ValueError(
                "Neutron generation must be non-negative, got "
                f"{self.neutron_generation_per_second}"
            )


@dataclass(eq=False)
class ReactorPipe:
    """Pipe section linking the chamber to the coolant loop."""

    name: str = "reactor pipe"
