"""
Fuel Energy Conversion

Turns the neutron population of a tick into thermal energy and the next
tick's population. Neutrons are spread evenly over the fuel rods; each rod
fissions its share according to its own yield.
"""

from dataclasses import dataclass

from .registry import RodRegistry


@dataclass
class FissionOutput:
    """
    Energy and neutrons produced by the fuel rods in one tick.

    Attributes:
        energy: Thermal energy released [J]
        secondary_neutrons: Neutron population carried into the next tick
    """

    energy: float = 0.0
    secondary_neutrons: float = 0.0


class FuelEnergyConverter:
    """Distributes absorbed neutrons across the fuel rods of a registry."""

    def __init__(self, registry: RodRegistry):
        self.registry = registry

    def convert(self, population: float) -> FissionOutput:
        """
        Fission ``population`` neutrons in the inserted fuel rods.

        With no fuel rods nothing is fissioned and both outputs are zero.

        Args:
            population: Neutrons available for absorption

        Returns:
            FissionOutput with the released energy and secondary neutrons
        """
        fuel_rods = self.registry.fuel_rods
        if not fuel_rods:
            return FissionOutput()

        share = population / len(fuel_rods)
        output = FissionOutput()
        for rod in fuel_rods:
            energy, neutrons = rod.process_hit(share)
            output.energy += energy
            output.secondary_neutrons += neutrons
        return output
