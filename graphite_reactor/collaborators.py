"""
External Collaborators of the Chamber

The chamber simulation consumes the surrounding world through these narrow
contracts. Each contract comes with a small in-memory implementation that
lets the chamber run standalone, in tests and in the example script.
"""

from typing import Dict, List, Protocol, Tuple

from .rods import ReactorPipe, Rod

Position = Tuple[float, float, float]


class ThermalFluid(Protocol):
    """Coolant the chamber heats. ``thermal.CoolantMix`` implements it."""

    temperature: float
    total_moles: float
    internal_energy: float

    @property
    def whole_heat_capacity(self) -> float:
        ...

    def remove_mass(self, amount: float) -> float:
        ...


class RadiationField(Protocol):
    def external_neutron_flux(self, core_id: str) -> float:
        """Neutrons reaching the chamber from other sources."""
        ...

    def set_leak_level(self, core_id: str, level: float) -> None:
        """Publish the radiation leaking out of the chamber."""
        ...


class Inventory(Protocol):
    def accept_rod(self, rod: Rod) -> None:
        ...

    def accept_pipe(self, pipe: ReactorPipe) -> None:
        ...

    def spawn_material(self, material: str, position: Position, count: int = 1) -> None:
        ...


class ExplosionEffects(Protocol):
    def trigger_explosion(self, position: Position, yield_magnitude: float) -> None:
        ...


class Despawner(Protocol):
    def destroy(self, instance: object) -> None:
        ...


class ConsoleLink(Protocol):
    def connected_console_count(self) -> int:
        ...


class StaticRadiationField:
    """
    Radiation field with a fixed external flux per chamber.

    Attributes:
        flux: External neutron flux by chamber id
        leak_levels: Last leak level published by each chamber
    """

    def __init__(self, flux: Dict[str, float] = None):
        self.flux = dict(flux or {})
        self.leak_levels: Dict[str, float] = {}

    def external_neutron_flux(self, core_id: str) -> float:
        return self.flux.get(core_id, 0.0)

    def set_leak_level(self, core_id: str, level: float) -> None:
        self.leak_levels[core_id] = level


class StorageInventory:
    """Collects everything the chamber hands out."""

    def __init__(self):
        self.rods: List[Rod] = []
        self.pipes: List[ReactorPipe] = []
        self.materials: Dict[str, int] = {}

    def accept_rod(self, rod: Rod) -> None:
        self.rods.append(rod)

    def accept_pipe(self, pipe: ReactorPipe) -> None:
        self.pipes.append(pipe)

    def spawn_material(self, material: str, position: Position, count: int = 1) -> None:
        self.materials[material] = self.materials.get(material, 0) + count


class ExplosionLog:
    """Records explosions instead of damaging anything."""

    def __init__(self):
        self.explosions: List[Tuple[Position, float]] = []

    def trigger_explosion(self, position: Position, yield_magnitude: float) -> None:
        self.explosions.append((position, yield_magnitude))


class DespawnLog:
    """Records destroy requests."""

    def __init__(self):
        self.destroyed: List[object] = []

    def destroy(self, instance: object) -> None:
        self.destroyed.append(instance)


class ConsoleLinks:
    """Control consoles linked to a chamber by multitool."""

    def __init__(self):
        self.consoles: List[str] = []

    def connect(self, console_id: str) -> None:
        if console_id not in self.consoles:
            self.consoles.append(console_id)

    def disconnect(self, console_id: str) -> None:
        if console_id in self.consoles:
            self.consoles.remove(console_id)

    def connected_console_count(self) -> int:
        return len(self.consoles)
