"""
Neutron Kinetics Module for the Graphite Chamber

This module advances the chamber's neutron population by one tick:
- Spontaneous neutron generation (seeded random roll)
- Neutron injection from starter rods and the ambient radiation field
- Neutron leakage published back to the radiation field
- Multiplication by the k-factor derived from control rod absorption

The multiplication factor k determines whether the population:
- Decays (k < 1)
- Holds steady (k = 1)
- Grows (k > 1), until it reaches the singularity threshold

k-factor model:
    k = C * P_na

    P_na = N_rods / (N_slots + sum(A_control) * depth)          (intact)
    P_na = S / (S + n_coolant) * N_rods / N_slots               (melted)

where:
    C = tuned k-factor scale
    P_na = non-absorption probability
    N_rods = inserted rods that are not control rods
    A_control = absorption power of each control rod
    depth = control rod insertion fraction
    S = meltdown pressure softening
    n_coolant = total moles of coolant
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

import numpy as np

from .constants import ReactorConstants
from .registry import RodRegistry
from .utils import clamp

logger = logging.getLogger(__name__)


@dataclass
class KineticsResult:
    """
    Outcome of one kinetics step.

    Attributes:
        injected: Neutrons added before multiplication
        k_factor: Multiplication factor applied this tick
        population: Neutron population after multiplication
        leak_level: Radiation level published to the field
        singularity_reached: Population exceeded the singularity threshold
    """

    injected: float
    k_factor: float
    population: float
    leak_level: float
    singularity_reached: bool


def leaked_radiation_level(
    population: float,
    leaking_chance: float = 0.0397,
    exponent: float = 0.82,
    output_scale: float = 36000.0,
) -> float:
    """
    Radiation level emitted by a neutron population.

    The leaked fraction L = population * chance is compressed with a
    saturating curve that approaches 1 as L grows:

        level = (L / (L + L^exponent) - 0.5) * 2 * output_scale

    Small populations, where L^exponent exceeds L, give no radiation.

    Args:
        population: Present neutrons
        leaking_chance: Fraction of neutrons escaping the chamber
        exponent: Compression exponent of the curve (< 1)
        output_scale: Radiation level the curve saturates towards

    Returns:
        Radiation level, between 0 and ``output_scale``
    """
    if population <= 0:
        return 0.0

    leaked = population * leaking_chance
    fraction = leaked / (leaked + leaked ** exponent)
    return max(0.0, (fraction - 0.5) * 2.0 * output_scale)


@dataclass
class NeutronKinetics:
    """
    Neutron population model of a chamber.

    Attributes:
        registry: Rod registry providing absorption data
        constants: Chamber constants
        rng: Seeded random generator for spontaneous neutrons
        present_neutrons: Current neutron population
        control_rod_depth: Control rod insertion fraction [0.1, 1.0]
    """

    registry: RodRegistry
    constants: ReactorConstants = field(default_factory=ReactorConstants)
    rng: np.random.Generator = field(default_factory=np.random.default_rng, repr=False)
    present_neutrons: float = 0.0
    control_rod_depth: float = 1.0
    last_external_flux: float = field(default=0.0, init=False)

    def set_control_rod_depth(self, depth: float) -> float:
        """
        Set the control rod depth, clamped to the allowed range.

        Returns:
            The depth actually applied
        """
        self.control_rod_depth = clamp(
            float(depth),
            self.constants.MIN_CONTROL_ROD_DEPTH,
            self.constants.MAX_CONTROL_ROD_DEPTH,
        )
        return self.control_rod_depth

    def roll_spontaneous_neutron(self) -> float:
        """Return 1.0 when a spontaneous neutron appears this tick, else 0.0."""
        draw = int(self.rng.integers(0, self.constants.SPONTANEOUS_ROLL_RANGE))
        threshold = draw / self.constants.SPONTANEOUS_ROLL_SCALE
        if self.constants.SPONTANEOUS_NEUTRON_LIKELIHOOD > threshold:
            return 1.0
        return 0.0

    def starter_generation(self) -> float:
        """Neutrons added by every inserted starter rod."""
        return sum(
            rod.neutron_generation_per_second for rod in self.registry.starter_rods
        )

    def absorption_probability(
        self,
        melted_down: bool = False,
        total_moles: float = 0.0,
    ) -> float:
        """
        Calculate the probability that a neutron escapes absorption.

        Args:
            melted_down: Whether the core has melted down
            total_moles: Coolant moles, which soften a melted core

        Returns:
            Non-absorption probability
        """
        rods = self.registry.non_control_rod_count
        slots = self.registry.slot_count

        if not melted_down:
            absorption = self.registry.total_absorption_power * self.control_rod_depth
            return rods / (slots + absorption)

        softening = self.constants.MELTDOWN_PRESSURE_SOFTENING
        pressure_factor = softening / (softening + max(total_moles, 0.0))
        return pressure_factor * (rods / slots)

    def k_factor(self, melted_down: bool = False, total_moles: float = 0.0) -> float:
        """Calculate the multiplication factor k."""
        return self.constants.K_FACTOR_SCALE * self.absorption_probability(
            melted_down, total_moles
        )

    def step(
        self,
        external_flux: float = 0.0,
        melted_down: bool = False,
        total_moles: float = 0.0,
        radiation_field=None,
        core_id: Optional[str] = None,
    ) -> KineticsResult:
        """
        Advance the neutron population by one tick.

        Args:
            external_flux: Neutrons arriving from the ambient radiation field
            melted_down: Whether the core has melted down
            total_moles: Coolant moles, used by the melted-down k-factor
            radiation_field: Field receiving this chamber's leak level
            core_id: Identity of the chamber in the radiation field

        Returns:
            KineticsResult describing the step
        """
        injected = self.roll_spontaneous_neutron()
        injected += self.starter_generation()
        injected += max(float(external_flux), 0.0)
        self.last_external_flux = float(external_flux)
        self.present_neutrons += injected

        leak_level = leaked_radiation_level(
            self.present_neutrons,
            self.constants.NEUTRON_LEAKING_CHANCE,
            self.constants.LEAK_CURVE_EXPONENT,
            self.constants.LEAK_OUTPUT_SCALE,
        )
        if radiation_field is not None and self.present_neutrons > 0:
            radiation_field.set_leak_level(core_id, leak_level)

        k = self.k_factor(melted_down, total_moles)
        self.present_neutrons *= k

        singular = self.present_neutrons > self.constants.NEUTRON_SINGULARITY
        if singular:
            logger.warning(
                "Neutron population %.3e exceeded singularity threshold %.3e",
                self.present_neutrons,
                self.constants.NEUTRON_SINGULARITY,
            )

        logger.debug(
            "Kinetics: injected=%.1f k=%.5f population=%.3e",
            injected, k, self.present_neutrons,
        )
        return KineticsResult(
            injected=injected,
            k_factor=k,
            population=self.present_neutrons,
            leak_level=leak_level,
            singularity_reached=singular,
        )

    def reset(self) -> None:
        """Return the population and rods to their initial state."""
        self.present_neutrons = 0.0
        self.control_rod_depth = self.constants.MAX_CONTROL_ROD_DEPTH
        self.last_external_flux = 0.0
