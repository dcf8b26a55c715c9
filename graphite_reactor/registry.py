"""
Rod Registry

This module holds the chamber's fixed array of rod slots and its pipe slot.

The registry also keeps two derived lists, the fuel rods and the starter
rods, which later stages of the tick iterate over. They are caches of the
slot array and are rebuilt from it on every mutation.
"""

from typing import List, Optional, Tuple
import logging

from .errors import InvalidOperation, PipeOccupied, SlotFull, StarterNotReady
from .rods import ControlRod, FuelRod, ReactorPipe, Rod, RodType, StarterRod

logger = logging.getLogger(__name__)


class RodRegistry:
    """
    Fixed set of rod slots plus a single pipe slot.

    Attributes:
        fuel_rods: Fuel rods currently inserted, in slot order
        starter_rods: Starter rods currently inserted, in slot order
        pipe: Pipe in the pipe slot, if any
    """

    def __init__(self, slot_count: int = 16):
        if slot_count < 1:
            raise ValueError(f"Slot count must be at least 1, got {slot_count}")

        self._slots: List[Optional[Rod]] = [None] * slot_count
        self.fuel_rods: List[FuelRod] = []
        self.starter_rods: List[StarterRod] = []
        self.pipe: Optional[ReactorPipe] = None

    @property
    def slot_count(self) -> int:
        """Number of rod slots."""
        return len(self._slots)

    @property
    def slots(self) -> Tuple[Optional[Rod], ...]:
        """Snapshot of the slot array."""
        return tuple(self._slots)

    @property
    def rod_count(self) -> int:
        """Number of occupied rod slots."""
        return sum(1 for rod in self._slots if rod is not None)

    @property
    def is_empty(self) -> bool:
        """True when no rod is inserted."""
        return all(rod is None for rod in self._slots)

    @property
    def control_rods(self) -> List[ControlRod]:
        """Control rods currently inserted, in slot order."""
        return [
            rod for rod in self._slots
            if rod is not None and rod.rod_type is RodType.CONTROL
        ]

    @property
    def non_control_rod_count(self) -> int:
        """Number of inserted rods that do not absorb neutrons."""
        return sum(
            1 for rod in self._slots
            if rod is not None and rod.rod_type is not RodType.CONTROL
        )

    @property
    def total_absorption_power(self) -> float:
        """Sum of the absorption power of every inserted control rod."""
        return sum(rod.absorption_power for rod in self.control_rods)

    def rod_at(self, slot: int) -> Optional[Rod]:
        """Rod in ``slot``, or None when the slot is empty."""
        self._check_slot(slot)
        return self._slots[slot]

    def insert_rod(
        self,
        rod: Rod,
        consoles_connected: int = 0,
        slot_hint: Optional[int] = None,
    ) -> int:
        """
        Insert a rod into an empty slot.

        Args:
            rod: Rod to insert
            consoles_connected: Control consoles linked to the chamber
            slot_hint: Preferred slot, used when it exists and is empty

        Returns:
            Index of the slot the rod now occupies

        Raises:
            SlotFull: No slot is empty
            StarterNotReady: A starter rod was offered without a console
            InvalidOperation: The item is not a rod or is already inserted
        """
        if not isinstance(rod, Rod) or not hasattr(rod, "rod_type"):
            raise InvalidOperation(f"{rod!r} cannot be inserted as a rod")
        if any(existing is rod for existing in self._slots):
            raise InvalidOperation(f"{rod.name} is already inserted")

        slot = self._find_slot(slot_hint)
        if slot is None:
            raise SlotFull("Every rod slot is occupied")

        if rod.rod_type is RodType.STARTER and consoles_connected <= 0:
            raise StarterNotReady(
                "The hole for the starter rod is closed, link a control "
                "console to open it"
            )

        self._slots[slot] = rod
        self._rebuild_caches()
        logger.debug("Inserted %s into slot %d", rod.name, slot)
        return slot

    def remove_rod(self, slot: int) -> Optional[Rod]:
        """
        Remove the rod in ``slot``.

        Removing from an empty slot does nothing and returns None.

        Raises:
            InvalidOperation: ``slot`` is outside the slot array
        """
        self._check_slot(slot)
        rod = self._slots[slot]
        if rod is None:
            return None

        self._slots[slot] = None
        self._rebuild_caches()
        logger.debug("Removed %s from slot %d", rod.name, slot)
        return rod

    def pop_rod(self) -> Optional[Tuple[int, Rod]]:
        """
        Remove the rod in the highest occupied slot.

        Returns:
            Tuple of (slot, rod), or None when the chamber is empty
        """
        for slot in range(len(self._slots) - 1, -1, -1):
            if self._slots[slot] is not None:
                return slot, self.remove_rod(slot)
        return None

    def insert_pipe(self, pipe: ReactorPipe) -> None:
        """
        Fit a pipe into the pipe slot.

        Raises:
            PipeOccupied: The pipe slot already holds a pipe
            InvalidOperation: The item is not a pipe
        """
        if not isinstance(pipe, ReactorPipe):
            raise InvalidOperation(f"{pipe!r} is not a reactor pipe")
        if self.pipe is not None:
            raise PipeOccupied("The pipe slot is already occupied")
        self.pipe = pipe

    def remove_pipe(self) -> Optional[ReactorPipe]:
        """Empty the pipe slot, returning its pipe if there was one."""
        pipe, self.pipe = self.pipe, None
        return pipe

    def clear(self) -> List[Tuple[int, Rod]]:
        """
        Empty every rod slot.

        Returns:
            The removed rods with the slots they occupied
        """
        removed = [
            (slot, rod) for slot, rod in enumerate(self._slots) if rod is not None
        ]
        self._slots = [None] * len(self._slots)
        self._rebuild_caches()
        return removed

    def is_consistent(self) -> bool:
        """Check that the cached rod lists match the slot array."""
        fuel = [r for r in self._slots if r is not None and r.rod_type is RodType.FUEL]
        starters = [
            r for r in self._slots if r is not None and r.rod_type is RodType.STARTER
        ]
        return (
            [id(r) for r in fuel] == [id(r) for r in self.fuel_rods] and
            [id(r) for r in starters] == [id(r) for r in self.starter_rods]
        )

    def _find_slot(self, slot_hint: Optional[int]) -> Optional[int]:
        if (
            slot_hint is not None and
            0 <= slot_hint < len(self._slots) and
            self._slots[slot_hint] is None
        ):
            return slot_hint
        for slot, rod in enumerate(self._slots):
            if rod is None:
                return slot
        return None

    def _check_slot(self, slot: int) -> None:
        if not isinstance(slot, int) or not 0 <= slot < len(self._slots):
            raise InvalidOperation(
                f"Slot {slot!r} is outside the chamber (0-{len(self._slots) - 1})"
            )

    def _rebuild_caches(self) -> None:
        fuel_rods = []
        starter_rods = []
        for rod in self._slots:
            if rod is None:
                continue
            if rod.rod_type is RodType.FUEL:
                fuel_rods.append(rod)
            elif rod.rod_type is RodType.STARTER:
                starter_rods.append(rod)
            elif rod.rod_type is RodType.CONTROL:
                continue
            else:
                raise ValueError(f"Unknown rod type {rod.rod_type!r}")
        self.fuel_rods = fuel_rods
        self.starter_rods = starter_rods
