"""
Graphite Reactor Chamber Model

This module provides the top-level chamber model that ticks every
physics component in a fixed order:

    kinetics -> fuel conversion -> thermal coupling -> safety evaluation

and exposes the chamber's external contract: inserting and removing rods
and pipes, moving the control rods, taking the chamber apart, and
querying its state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
import json
import logging
import threading
from datetime import datetime

import numpy as np

from . import events as ev
from .collaborators import (
    ConsoleLink,
    ConsoleLinks,
    Despawner,
    DespawnLog,
    ExplosionEffects,
    ExplosionLog,
    Inventory,
    RadiationField,
    StaticRadiationField,
    StorageInventory,
    ThermalFluid,
)
from .constants import ReactorConstants, TEARDOWN_MATERIALS
from .errors import InvalidOperation
from .events import EventBus
from .fission import FuelEnergyConverter
from .neutronics import NeutronKinetics
from .registry import RodRegistry
from .rods import ReactorPipe, Rod, RodType
from .safety import ReactorSafetyState, SafetyStateMachine
from .scheduler import PeriodicScheduler, SchedulerHandle
from .thermal import CoolantMix, ThermalPressureCoupler
from .utils import finite_or_zero, format_scientific, kelvin_to_celsius

logger = logging.getLogger(__name__)

_STATE_EVENTS = {
    ReactorSafetyState.MELTED_DOWN: ev.MELTED_DOWN,
    ReactorSafetyState.PIPES_RUPTURED: ev.PIPES_RUPTURED,
    ReactorSafetyState.EXPLODED: ev.EXPLODED,
}


@dataclass
class NeutronState:
    """Snapshot of the chamber's neutron population."""

    present_neutrons: float
    k_factor: float
    spontaneous_likelihood: float
    external_flux: float
    control_rod_depth: float


@dataclass
class ThermalState:
    """Snapshot of the coolant and pipe pressure."""

    temperature: float  # [K]
    whole_heat_capacity: float  # [J/K]
    internal_energy: float  # [J]
    total_moles: float  # [mol]
    current_pressure: float
    max_pressure: float


@dataclass
class TickReport:
    """
    Result of one chamber tick.

    Attributes:
        tick: Tick number, starting at 1
        k_factor: Multiplication factor applied
        multiplied_neutrons: Population right after multiplication
        present_neutrons: Population carried into the next tick
        energy_released: Fission energy added to the coolant [J]
        pressure: Pipe pressure after heating
        state: Dominant safety state after the tick
        transitions: Safety states entered during the tick
    """

    tick: int
    k_factor: float
    multiplied_neutrons: float
    present_neutrons: float
    energy_released: float
    pressure: float
    state: ReactorSafetyState
    transitions: List[ReactorSafetyState] = field(default_factory=list)


@dataclass(eq=False)
class ReactorCore:
    """
    Graphite reactor chamber.

    Every mutation and every tick run under a per-chamber lock, so a tick
    never overlaps a rod or pipe change. Observers subscribed through
    ``subscribe`` are notified after the lock is released.

    Attributes:
        core_id: Identity of the chamber in the radiation field
        position: World position, used for explosions and dropped material
        constants: Chamber constants
        fluid: Coolant in the chamber pipe
        radiation_field: Ambient radiation collaborator
        inventory: Receives ejected rods, pipes and material
        explosions: Receives the explosion effect
        despawner: Receives the destroy request
        consoles: Control consoles linked to the chamber
        scheduler: Periodic scheduler ticking the chamber, if any
        seed: Seed of the spontaneous neutron generator
        tick_period: Seconds between scheduled ticks
    """

    core_id: str = "graphite-chamber"
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    constants: ReactorConstants = field(default_factory=ReactorConstants)
    fluid: Optional[ThermalFluid] = None
    radiation_field: Optional[RadiationField] = None
    inventory: Optional[Inventory] = None
    explosions: Optional[ExplosionEffects] = None
    despawner: Optional[Despawner] = None
    consoles: Optional[ConsoleLink] = None
    scheduler: Optional[PeriodicScheduler] = None
    seed: Optional[int] = None
    tick_period: float = 1.0

    # Computed components (initialized in __post_init__)
    registry: RodRegistry = field(init=False, repr=False)
    kinetics: NeutronKinetics = field(init=False, repr=False)
    converter: FuelEnergyConverter = field(init=False, repr=False)
    coupler: ThermalPressureCoupler = field(init=False, repr=False)
    safety: SafetyStateMachine = field(init=False, repr=False)
    events: EventBus = field(init=False, repr=False)

    tick_count: int = field(default=0, init=False)
    energy_released: float = field(default=0.0, init=False)
    torn_down: bool = field(default=False, init=False)

    def __post_init__(self):
        """Initialize collaborators and physics components."""
        if self.fluid is None:
            self.fluid = CoolantMix()
        if self.radiation_field is None:
            self.radiation_field = StaticRadiationField()
        if self.inventory is None:
            self.inventory = StorageInventory()
        if self.explosions is None:
            self.explosions = ExplosionLog()
        if self.despawner is None:
            self.despawner = DespawnLog()
        if self.consoles is None:
            self.consoles = ConsoleLinks()

        self.registry = RodRegistry(self.constants.SLOT_COUNT)
        self.kinetics = NeutronKinetics(
            registry=self.registry,
            constants=self.constants,
            rng=np.random.default_rng(self.seed),
        )
        self.converter = FuelEnergyConverter(self.registry)
        self.coupler = ThermalPressureCoupler(
            fluid=self.fluid,
            registry=self.registry,
            constants=self.constants,
            inventory=self.inventory,
        )
        self.safety = SafetyStateMachine(self.constants, self.explosions)
        self.events = EventBus()

        self._lock = threading.RLock()
        self._ticking = False
        self._destroy_requested = False
        self._schedule: Optional[SchedulerHandle] = None
        if self.scheduler is not None:
            self._schedule = self.scheduler.register(self.tick, self.tick_period)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> ReactorSafetyState:
        return self.safety.state

    @property
    def active_states(self) -> FrozenSet[ReactorSafetyState]:
        return self.safety.flags.active_states

    @property
    def melted_down(self) -> bool:
        return self.safety.melted_down

    @property
    def pipes_ruptured(self) -> bool:
        return self.safety.pipes_ruptured

    @property
    def exploded(self) -> bool:
        return self.safety.exploded

    @property
    def present_neutrons(self) -> float:
        return self.kinetics.present_neutrons

    @property
    def k_factor(self) -> float:
        return self.kinetics.k_factor(self.melted_down, self.fluid.total_moles)

    @property
    def control_rod_depth(self) -> float:
        return self.kinetics.control_rod_depth

    @property
    def current_pressure(self) -> float:
        return self.coupler.current_pressure

    @property
    def temperature(self) -> float:
        return self.fluid.temperature

    @property
    def scheduled(self) -> bool:
        return self._schedule is not None and self._schedule.active

    def neutron_state(self) -> NeutronState:
        return NeutronState(
            present_neutrons=self.kinetics.present_neutrons,
            k_factor=self.k_factor,
            spontaneous_likelihood=self.constants.SPONTANEOUS_NEUTRON_LIKELIHOOD,
            external_flux=self.kinetics.last_external_flux,
            control_rod_depth=self.kinetics.control_rod_depth,
        )

    def thermal_state(self) -> ThermalState:
        return ThermalState(
            temperature=self.fluid.temperature,
            whole_heat_capacity=self.fluid.whole_heat_capacity,
            internal_energy=self.fluid.internal_energy,
            total_moles=self.fluid.total_moles,
            current_pressure=self.coupler.current_pressure,
            max_pressure=self.constants.MAX_PRESSURE,
        )

    def subscribe(self, event_name: str, callback) -> None:
        """Register an observer for one of the chamber events."""
        self.events.subscribe(event_name, callback)

    def unsubscribe(self, event_name: str, callback) -> None:
        self.events.unsubscribe(event_name, callback)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> Optional[TickReport]:
        """
        Advance the chamber by one update cycle.

        Physical outcomes (melt-down, rupture, explosion) are reported
        through the returned report and the chamber events, never raised.

        Returns:
            TickReport, or None when the tick was skipped because the
            chamber is torn down or already ticking
        """
        with self._lock:
            if self._ticking:
                logger.warning("Ignoring re-entrant tick of %s", self.core_id)
                return None
            if self.torn_down:
                logger.debug("Ignoring tick of torn down chamber %s", self.core_id)
                return None

            self._ticking = True
            try:
                report, pending = self._run_tick()
            finally:
                self._ticking = False

        self._publish(pending)
        return report

    def _run_tick(self) -> Tuple[TickReport, List[Tuple[str, Any]]]:
        before = self._visible_state()
        self.tick_count += 1
        flags = self.safety.flags

        external_flux = self.radiation_field.external_neutron_flux(self.core_id)
        kinetics = self.kinetics.step(
            external_flux=external_flux,
            melted_down=flags.melted_down,
            total_moles=self.fluid.total_moles,
            radiation_field=self.radiation_field,
            core_id=self.core_id,
        )

        # A chain reaction past the singularity is spent in the blast
        population = 0.0 if kinetics.singularity_reached else kinetics.population
        fission = self.converter.convert(population)
        self.kinetics.present_neutrons = finite_or_zero(
            fission.secondary_neutrons, "secondary neutron count"
        )
        self.energy_released = finite_or_zero(fission.energy, "energy released")

        thermal = self.coupler.apply(self.energy_released, flags.pipes_ruptured)

        transitions = self.safety.evaluate(
            temperature=self.fluid.temperature,
            singularity_reached=kinetics.singularity_reached,
            over_pressure=thermal.over_pressure,
            position=self.position,
        )
        pending = [(_STATE_EVENTS[state], self.core_id) for state in transitions]

        if ReactorSafetyState.EXPLODED in transitions:
            self.kinetics.present_neutrons = 0.0
            pending.extend(self._request_destroy())

        pending.extend(self._changed_since(before))

        logger.debug(
            "Tick %d of %s: k=%.5f neutrons=%.3e energy=%.3e J pressure=%.1f",
            self.tick_count, self.core_id, kinetics.k_factor,
            self.kinetics.present_neutrons, self.energy_released,
            self.coupler.current_pressure,
        )

        report = TickReport(
            tick=self.tick_count,
            k_factor=kinetics.k_factor,
            multiplied_neutrons=kinetics.population,
            present_neutrons=self.kinetics.present_neutrons,
            energy_released=self.energy_released,
            pressure=self.coupler.current_pressure,
            state=self.safety.state,
            transitions=transitions,
        )
        return report, pending

    # ------------------------------------------------------------------
    # Rods and pipes
    # ------------------------------------------------------------------

    def insert_rod(self, rod: Rod, slot_hint: Optional[int] = None) -> int:
        """
        Insert a rod into the chamber.

        Args:
            rod: Rod taken from the inventory
            slot_hint: Preferred slot

        Returns:
            Slot the rod now occupies

        Raises:
            SlotFull, StarterNotReady, InvalidOperation
        """
        with self._lock:
            self._check_alive()
            before = self._visible_state()
            slot = self.registry.insert_rod(
                rod, self.consoles.connected_console_count(), slot_hint
            )
            pending = self._changed_since(before)
        self._publish(pending)
        return slot

    def remove_rod(self, slot: int) -> Optional[Rod]:
        """
        Remove the rod in ``slot`` and hand it to the inventory.

        Returns:
            The removed rod, or None when the slot was empty
        """
        with self._lock:
            self._check_alive()
            before = self._visible_state()
            rod = self.registry.remove_rod(slot)
            if rod is not None:
                self.inventory.accept_rod(rod)
            pending = self._changed_since(before)
        self._publish(pending)
        return rod

    def pop_rod(self) -> Optional[Rod]:
        """Pull out the rod in the highest occupied slot."""
        with self._lock:
            self._check_alive()
            before = self._visible_state()
            removed = self.registry.pop_rod()
            rod = None
            if removed is not None:
                rod = removed[1]
                self.inventory.accept_rod(rod)
            pending = self._changed_since(before)
        self._publish(pending)
        return rod

    def insert_pipe(self, pipe: ReactorPipe) -> None:
        """
        Fit a pipe, which also seals a ruptured chamber.

        Raises:
            PipeOccupied, InvalidOperation
        """
        with self._lock:
            self._check_alive()
            before = self._visible_state()
            self.registry.insert_pipe(pipe)
            self.safety.clear_rupture()
            pending = self._changed_since(before)
        self._publish(pending)

    def remove_pipe(self) -> Optional[ReactorPipe]:
        """Take the pipe out and hand it to the inventory."""
        with self._lock:
            self._check_alive()
            before = self._visible_state()
            pipe = self.registry.remove_pipe()
            if pipe is not None:
                self.inventory.accept_pipe(pipe)
            pending = self._changed_since(before)
        self._publish(pending)
        return pipe

    def set_control_rod_depth(self, depth: float) -> float:
        """
        Move the control rods.

        Returns:
            Depth applied after clamping to [0.1, 1.0]
        """
        with self._lock:
            self._check_alive()
            before = self._visible_state()
            applied = self.kinetics.set_control_rod_depth(depth)
            pending = self._changed_since(before)
        self._publish(pending)
        return applied

    def scram(self) -> bool:
        """
        Slam the control rods fully in.

        A melted core has no working rods to move.

        Returns:
            True when the rods were moved
        """
        with self._lock:
            self._check_alive()
            if self.safety.melted_down:
                return False
            before = self._visible_state()
            self.kinetics.set_control_rod_depth(self.constants.MAX_CONTROL_ROD_DEPTH)
            pending = self._changed_since(before)
        self._publish(pending)
        return True

    # ------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------

    def deconstruct(self) -> None:
        """
        Take an intact, empty chamber apart.

        Raises:
            InvalidOperation: The core has melted down or still holds rods
        """
        with self._lock:
            self._check_alive()
            if self.safety.melted_down:
                raise InvalidOperation(
                    "The molten core cannot be welded apart, break it with a pickaxe"
                )
            if not self.registry.is_empty:
                raise InvalidOperation("The inserted rods make it impossible to deconstruct")
            pending = self._request_destroy()
        self._publish(pending)

    def axe(self) -> None:
        """
        Break a melted core to pieces.

        Raises:
            InvalidOperation: The core has not melted down
        """
        with self._lock:
            self._check_alive()
            if not self.safety.melted_down:
                raise InvalidOperation("Only a molten core can be broken apart")
            pending = self._request_destroy()
        self._publish(pending)

    def teardown(self) -> None:
        """
        Eject every rod and reset the chamber.

        Melted rods come out as ore; intact rods return to the inventory
        together with the chamber's construct material. Tearing down twice
        does nothing.
        """
        with self._lock:
            pending = self._teardown()
        self._publish(pending)

    def _request_destroy(self) -> List[Tuple[str, Any]]:
        if self._destroy_requested:
            return []
        self._destroy_requested = True
        self._release_schedule()
        self.despawner.destroy(self)
        return self._teardown()

    def _teardown(self) -> List[Tuple[str, Any]]:
        if self.torn_down:
            return []

        melted = self.safety.melted_down
        for _, rod in self.registry.clear():
            if not melted:
                self.inventory.accept_rod(rod)
            elif rod.rod_type is RodType.FUEL:
                self.inventory.spawn_material(TEARDOWN_MATERIALS["fuel"], self.position)
            elif rod.rod_type is RodType.CONTROL:
                self.inventory.spawn_material(TEARDOWN_MATERIALS["control"], self.position)
            elif rod.rod_type is RodType.STARTER:
                continue
            else:
                raise ValueError(f"Unknown rod type {rod.rod_type!r}")

        if not melted:
            self.inventory.spawn_material(
                TEARDOWN_MATERIALS["intact"],
                self.position,
                self.constants.DROPPED_MATERIAL_AMOUNT,
            )

        pipe = self.registry.remove_pipe()
        if pipe is not None:
            self.inventory.accept_pipe(pipe)

        self.safety.reset()
        self.kinetics.reset()
        self.coupler.reset()
        self.radiation_field.set_leak_level(self.core_id, 0.0)
        self.energy_released = 0.0
        self.torn_down = True
        self._release_schedule()

        logger.info(
            "Chamber %s torn down (%s)",
            self.core_id, "melted" if melted else "intact",
        )
        return [(ev.TORN_DOWN, self.core_id), (ev.STATE_CHANGED, None)]

    def _release_schedule(self) -> None:
        if self._schedule is not None:
            self._schedule.release()
            self._schedule = None

    def _check_alive(self) -> None:
        if self.torn_down:
            raise InvalidOperation(f"Chamber {self.core_id} has been torn down")
        # Collaborators called during a tick share the lock's thread
        if self._ticking:
            raise InvalidOperation(f"Chamber {self.core_id} is in the middle of a tick")

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def _visible_state(self) -> tuple:
        return (
            tuple(id(rod) if rod is not None else None for rod in self.registry.slots),
            id(self.registry.pipe) if self.registry.pipe is not None else None,
            self.safety.flags.active_states,
            self.coupler.current_pressure,
            self.kinetics.control_rod_depth,
        )

    def _changed_since(self, before: tuple) -> List[Tuple[str, Any]]:
        if self._visible_state() != before:
            return [(ev.STATE_CHANGED, None)]
        return []

    def _publish(self, pending: List[Tuple[str, Any]]) -> None:
        published_change = False
        for event_name, payload in pending:
            if event_name == ev.STATE_CHANGED:
                if published_change:
                    continue
                published_change = True
            self.events.publish(event_name, payload)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        """
        Get a complete snapshot of the chamber.

        Returns dictionary with:
        - Metadata (identity, tick count, timestamp)
        - Rod slots and pipe
        - Neutron population and k-factor
        - Coolant and pressure
        - Safety state
        """
        with self._lock:
            neutrons = self.neutron_state()
            thermal = self.thermal_state()
            slots = [
                None if rod is None else {"name": rod.name, "type": rod.rod_type.value}
                for rod in self.registry.slots
            ]

            return {
                "metadata": {
                    "model": "Graphite Reactor Chamber v1.0",
                    "timestamp": datetime.now().isoformat(),
                    "core_id": self.core_id,
                    "tick": self.tick_count,
                    "torn_down": self.torn_down,
                },
                "rods": {
                    "slots": slots,
                    "rod_count": self.registry.rod_count,
                    "fuel_rods": len(self.registry.fuel_rods),
                    "control_rods": len(self.registry.control_rods),
                    "starter_rods": len(self.registry.starter_rods),
                    "pipe_fitted": self.registry.pipe is not None,
                },
                "neutronics": {
                    "present_neutrons": neutrons.present_neutrons,
                    "k_factor": neutrons.k_factor,
                    "control_rod_depth": neutrons.control_rod_depth,
                    "external_flux": neutrons.external_flux,
                    "singularity_threshold": self.constants.NEUTRON_SINGULARITY,
                },
                "thermal": {
                    "temperature_K": thermal.temperature,
                    "temperature_C": kelvin_to_celsius(thermal.temperature),
                    "coolant_moles": thermal.total_moles,
                    "internal_energy_J": thermal.internal_energy,
                    "energy_released_J": self.energy_released,
                    "pressure": thermal.current_pressure,
                    "max_pressure": thermal.max_pressure,
                },
                "safety": {
                    "state": self.state.value,
                    "melted_down": self.melted_down,
                    "pipes_ruptured": self.pipes_ruptured,
                    "exploded": self.exploded,
                },
            }

    def print_summary(self):
        """Print formatted summary of the chamber state."""
        status = self.get_status()

        print("=" * 70)
        print("           GRAPHITE CHAMBER STATUS")
        print("=" * 70)

        rods = status["rods"]
        print(f"\n{'RODS':^70}")
        print("-" * 70)
        print(f"  Inserted Rods:          {rods['rod_count']:>10d} / {self.registry.slot_count}")
        print(f"  Fuel Rods:              {rods['fuel_rods']:>10d}")
        print(f"  Control Rods:           {rods['control_rods']:>10d}")
        print(f"  Starter Rods:           {rods['starter_rods']:>10d}")
        print(f"  Pipe Fitted:            {str(rods['pipe_fitted']):>10}")

        neutrons = status["neutronics"]
        print(f"\n{'NEUTRONICS':^70}")
        print("-" * 70)
        print(f"  Present Neutrons:       {format_scientific(neutrons['present_neutrons']):>10}")
        print(f"  k-factor:               {neutrons['k_factor']:>10.5f}")
        print(f"  Control Rod Depth:      {neutrons['control_rod_depth']:>10.2f}")

        thermal = status["thermal"]
        print(f"\n{'THERMAL':^70}")
        print("-" * 70)
        print(f"  Coolant Temperature:    {thermal['temperature_K']:>10.1f} K")
        print(f"  Coolant Amount:         {thermal['coolant_moles']:>10.1f} mol")
        print(f"  Energy Released:        {format_scientific(thermal['energy_released_J']):>10} J")
        print(f"  Pressure:               {thermal['pressure']:>10.1f} / {thermal['max_pressure']:.0f}")

        safety = status["safety"]
        print(f"\n{'SAFETY':^70}")
        print("-" * 70)
        print(f"  State:                  {safety['state']:>10}")
        print(f"  Melted Down:            {str(safety['melted_down']):>10}")
        print(f"  Pipes Ruptured:         {str(safety['pipes_ruptured']):>10}")

        print("\n" + "=" * 70)

    def to_json(self, filepath: Optional[str] = None) -> str:
        """
        Export the chamber status to JSON.

        Args:
            filepath: Optional file path to save JSON

        Returns:
            JSON string
        """
        json_str = json.dumps(self.get_status(), indent=2, default=str)

        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)

        return json_str


def create_reactor_core(
    core_id: str = "graphite-chamber",
    seed: Optional[int] = None,
    **kwargs
) -> ReactorCore:
    """
    Factory function to create a graphite chamber.

    Args:
        core_id: Identity of the chamber
        seed: Seed for the spontaneous neutron generator
        **kwargs: Additional parameters passed to ReactorCore

    Returns:
        Configured ReactorCore instance
    """
    return ReactorCore(core_id=core_id, seed=seed, **kwargs)
