"""
Safety State Machine

This module owns the chamber-wide failure state:
- MELTED_DOWN once the coolant exceeds the rod melting temperature
- PIPES_RUPTURED once the pipe pressure exceeds its maximum
- EXPLODED once the neutron population passes the singularity threshold

Melt-down and rupture are independent flags that may both be set.
Melt-down is only cleared by tearing the chamber down, rupture by fitting a
new pipe. Explosion is terminal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple
import logging

from .constants import ReactorConstants

logger = logging.getLogger(__name__)


class ReactorSafetyState(Enum):
    """Failure states of a chamber."""

    NORMAL = "normal"
    MELTED_DOWN = "melted_down"
    PIPES_RUPTURED = "pipes_ruptured"
    EXPLODED = "exploded"


@dataclass
class SafetyFlags:
    """Independent failure flags of a chamber."""

    melted_down: bool = False
    pipes_ruptured: bool = False
    exploded: bool = False

    @property
    def state(self) -> ReactorSafetyState:
        """Dominant state: exploded, then melted down, then ruptured."""
        if self.exploded:
            return ReactorSafetyState.EXPLODED
        if self.melted_down:
            return ReactorSafetyState.MELTED_DOWN
        if self.pipes_ruptured:
            return ReactorSafetyState.PIPES_RUPTURED
        return ReactorSafetyState.NORMAL

    @property
    def active_states(self) -> FrozenSet[ReactorSafetyState]:
        """Every state that currently applies."""
        active = set()
        if self.melted_down:
            active.add(ReactorSafetyState.MELTED_DOWN)
        if self.pipes_ruptured:
            active.add(ReactorSafetyState.PIPES_RUPTURED)
        if self.exploded:
            active.add(ReactorSafetyState.EXPLODED)
        if not active:
            active.add(ReactorSafetyState.NORMAL)
        return frozenset(active)


class SafetyStateMachine:
    """
    Evaluates the chamber's transition guards once per tick.

    Args:
        constants: Chamber constants holding the thresholds
        explosions: Collaborator receiving the explosion effect
    """

    def __init__(self, constants: Optional[ReactorConstants] = None, explosions=None):
        self.constants = constants or ReactorConstants()
        self.explosions = explosions
        self.flags = SafetyFlags()

    @property
    def state(self) -> ReactorSafetyState:
        return self.flags.state

    @property
    def melted_down(self) -> bool:
        return self.flags.melted_down

    @property
    def pipes_ruptured(self) -> bool:
        return self.flags.pipes_ruptured

    @property
    def exploded(self) -> bool:
        return self.flags.exploded

    def evaluate(
        self,
        temperature: float,
        singularity_reached: bool = False,
        over_pressure: bool = False,
        position: Tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> List[ReactorSafetyState]:
        """
        Apply this tick's transition guards.

        Args:
            temperature: Coolant temperature after heating [K]
            singularity_reached: Neutron population passed the threshold
            over_pressure: Pipe pressure exceeded the maximum
            position: Chamber location, used for the explosion

        Returns:
            States newly entered this tick, in the order they occurred
        """
        if self.flags.exploded:
            return []

        raised = []

        if temperature > self.constants.ROD_MELTING_TEMPERATURE and not self.flags.melted_down:
            self.flags.melted_down = True
            logger.info(
                "Core melted down at %.1f K (limit %.1f K)",
                temperature, self.constants.ROD_MELTING_TEMPERATURE,
            )
            raised.append(ReactorSafetyState.MELTED_DOWN)

        if over_pressure and self.mark_ruptured():
            raised.append(ReactorSafetyState.PIPES_RUPTURED)

        if singularity_reached:
            self.flags.exploded = True
            logger.info("Chamber exploded at %s", position)
            if self.explosions is not None:
                self.explosions.trigger_explosion(position, self.constants.EXPLOSION_YIELD)
            raised.append(ReactorSafetyState.EXPLODED)

        return raised

    def mark_ruptured(self) -> bool:
        """Set the rupture flag. Returns True when it was not already set."""
        if self.flags.pipes_ruptured:
            return False
        self.flags.pipes_ruptured = True
        logger.info("Chamber pipes ruptured")
        return True

    def clear_rupture(self) -> bool:
        """Clear the rupture flag after a new pipe is fitted."""
        was_ruptured = self.flags.pipes_ruptured
        self.flags.pipes_ruptured = False
        return was_ruptured

    def reset(self) -> None:
        """
        Clear melt-down and rupture. Only teardown calls this.

        An exploded chamber stays exploded.
        """
        self.flags = SafetyFlags(exploded=self.flags.exploded)
