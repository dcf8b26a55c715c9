"""
Thermal-Pressure Coupling for the Graphite Chamber

This module couples the chamber's fission energy to the coolant in its pipe:
- Heating the coolant's internal energy
- Deriving the pipe pressure from temperature and coolant amount
- Detecting over-pressure and ejecting the pipe
- Boiling coolant off to atmosphere once the pipe has ruptured

The pressure model is deliberately simple:
    P = clamp((T - T_ref) * n, P_min, P_max)

where T_ref is the no-pressure reference temperature and n the coolant
moles. The clamp bounds only keep the value representable.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

import numpy as np

from .constants import ReactorConstants
from .registry import RodRegistry
from .rods import ReactorPipe
from .utils import celsius_to_kelvin, finite_or_zero

logger = logging.getLogger(__name__)


@dataclass
class CoolantMix:
    """
    Coolant held in the chamber pipe.

    Temperature and internal energy are tied together through the whole
    heat capacity (moles * molar heat capacity). Setting the internal energy
    of a mix with no heat capacity has no effect.

    Attributes:
        total_moles: Amount of coolant [mol]
        temperature: Coolant temperature [K]
        molar_heat_capacity: Heat capacity per mole [J/mol/K] (water)
    """

    total_moles: float = 2000.0
    temperature: float = celsius_to_kelvin(20.0)
    molar_heat_capacity: float = 75.3

    def __post_init__(self):
        if self.total_moles < 0:
            raise ValueError(f"Coolant moles must be non-negative, got {self.total_moles}")
        if self.temperature < 0:
            raise ValueError(f"Temperature must be non-negative, got {self.temperature} K")

    @property
    def whole_heat_capacity(self) -> float:
        """Heat capacity of the whole mix [J/K]."""
        return self.total_moles * self.molar_heat_capacity

    @property
    def internal_energy(self) -> float:
        """Internal energy of the mix [J]."""
        return self.temperature * self.whole_heat_capacity

    @internal_energy.setter
    def internal_energy(self, energy: float) -> None:
        capacity = self.whole_heat_capacity
        if capacity > 0:
            self.temperature = max(energy / capacity, 0.0)

    def remove_mass(self, amount: float) -> float:
        """
        Remove coolant from the mix at constant temperature.

        Args:
            amount: Moles to remove

        Returns:
            Moles actually removed
        """
        removed = min(max(amount, 0.0), self.total_moles)
        self.total_moles -= removed
        return removed


@dataclass
class ThermalResult:
    """
    Outcome of one thermal coupling step.

    Attributes:
        energy_applied: Energy added to the coolant [J]
        pressure: Pipe pressure after heating
        over_pressure: Pressure exceeded the maximum this tick
        pipe_ejected: Pipe thrown out of its slot this tick
        boiled_off: Coolant vented to atmosphere [mol]
    """

    energy_applied: float = 0.0
    pressure: float = 0.0
    over_pressure: bool = False
    pipe_ejected: Optional[ReactorPipe] = None
    boiled_off: float = 0.0


@dataclass
class ThermalPressureCoupler:
    """
    Applies fission energy to a thermal fluid and tracks pipe pressure.

    Attributes:
        fluid: Coolant collaborator
        registry: Registry holding the pipe slot
        constants: Chamber constants
        inventory: Receives a pipe ejected by over-pressure
        current_pressure: Pressure computed on the last step
    """

    fluid: object
    registry: RodRegistry
    constants: ReactorConstants = field(default_factory=ReactorConstants)
    inventory: Optional[object] = None
    current_pressure: float = 0.0

    @property
    def max_pressure(self) -> float:
        return self.constants.MAX_PRESSURE

    def calculate_pressure(self) -> float:
        """Pressure of the fluid in its present state."""
        raw = (
            (self.fluid.temperature - self.constants.PRESSURE_REFERENCE_TEMPERATURE) *
            self.fluid.total_moles
        )
        return float(np.clip(
            raw,
            self.constants.PRESSURE_CLAMP_MIN,
            self.constants.PRESSURE_CLAMP_MAX,
        ))

    def apply(self, energy: float, pipes_ruptured: bool = False) -> ThermalResult:
        """
        Heat the coolant and evaluate the pipe.

        Args:
            energy: Fission energy released this tick [J]
            pipes_ruptured: Whether the pipe had already ruptured

        Returns:
            ThermalResult describing the step
        """
        result = ThermalResult()
        energy = finite_or_zero(energy, "energy released")

        if self.fluid.whole_heat_capacity != 0:
            self.fluid.internal_energy = self.fluid.internal_energy + energy
            result.energy_applied = energy

        self.current_pressure = self.calculate_pressure()
        result.pressure = self.current_pressure

        if self.current_pressure > self.constants.MAX_PRESSURE:
            result.over_pressure = True
            result.pipe_ejected = self.eject_pipe()

        if pipes_ruptured or result.over_pressure:
            result.boiled_off = self.boil_off()

        return result

    def eject_pipe(self) -> Optional[ReactorPipe]:
        """Throw the pipe out of its slot, handing it to the inventory."""
        pipe = self.registry.remove_pipe()
        if pipe is None:
            return None

        logger.info(
            "Pipe burst at %.1f (max %.1f)",
            self.current_pressure, self.constants.MAX_PRESSURE,
        )
        if self.inventory is not None:
            self.inventory.accept_pipe(pipe)
        return pipe

    def boil_off(self) -> float:
        """
        Vent coolant hotter than the boiling point to atmosphere.

        Returns:
            Moles of coolant removed
        """
        capacity = self.fluid.whole_heat_capacity
        temperature = self.fluid.temperature
        boiling_point = self.constants.BOILING_POINT

        if capacity <= 0 or temperature <= boiling_point:
            return 0.0

        excess_energy = (temperature - boiling_point) * capacity
        amount = excess_energy / self.constants.ENERGY_TO_EVAPORATE_PER_MOLE
        removed = self.fluid.remove_mass(amount)
        logger.debug("Boiled off %.2f mol of coolant", removed)
        return removed

    def reset(self) -> None:
        self.current_pressure = 0.0
