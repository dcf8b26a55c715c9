"""
Tests for the safety module.
"""

import unittest

from graphite_reactor.collaborators import ExplosionLog
from graphite_reactor.safety import (
    ReactorSafetyState,
    SafetyFlags,
    SafetyStateMachine,
)


class TestSafetyFlags(unittest.TestCase):
    """Test the dominant and combined states."""

    def test_normal(self):
        """Test no flags means NORMAL."""
        flags = SafetyFlags()
        self.assertIs(flags.state, ReactorSafetyState.NORMAL)
        self.assertEqual(flags.active_states, frozenset({ReactorSafetyState.NORMAL}))

    def test_co_occurring(self):
        """Test melt-down and rupture can both apply."""
        flags = SafetyFlags(melted_down=True, pipes_ruptured=True)
        self.assertIs(flags.state, ReactorSafetyState.MELTED_DOWN)
        self.assertEqual(
            flags.active_states,
            frozenset({ReactorSafetyState.MELTED_DOWN, ReactorSafetyState.PIPES_RUPTURED}),
        )

    def test_ruptured_only(self):
        """Test rupture alone is reported."""
        self.assertIs(SafetyFlags(pipes_ruptured=True).state, ReactorSafetyState.PIPES_RUPTURED)

    def test_exploded_dominates(self):
        """Test explosion outranks every other state."""
        flags = SafetyFlags(melted_down=True, pipes_ruptured=True, exploded=True)
        self.assertIs(flags.state, ReactorSafetyState.EXPLODED)


class TestSafetyStateMachine(unittest.TestCase):
    """Test transition guards."""

    def setUp(self):
        self.explosions = ExplosionLog()
        self.machine = SafetyStateMachine(explosions=self.explosions)

    def test_cool_core_stays_normal(self):
        """Test a cool core raises nothing."""
        self.assertEqual(self.machine.evaluate(600.0), [])
        self.assertIs(self.machine.state, ReactorSafetyState.NORMAL)

    def test_melt_down(self):
        """Test a core above the melting point melts down once."""
        self.assertEqual(self.machine.evaluate(1100.5), [ReactorSafetyState.MELTED_DOWN])
        self.assertTrue(self.machine.melted_down)
        self.assertEqual(self.machine.evaluate(1500.0), [])

    def test_melting_point_itself_is_safe(self):
        """Test the guard is strictly above the melting point."""
        self.assertEqual(self.machine.evaluate(1100.0), [])

    def test_melt_down_is_permanent(self):
        """Test cooling does not clear a melt-down."""
        self.machine.evaluate(2000.0)
        for _ in range(10):
            self.machine.evaluate(300.0)
        self.assertTrue(self.machine.melted_down)

    def test_rupture(self):
        """Test over-pressure ruptures the pipes once."""
        self.assertEqual(
            self.machine.evaluate(400.0, over_pressure=True),
            [ReactorSafetyState.PIPES_RUPTURED],
        )
        self.assertEqual(self.machine.evaluate(400.0, over_pressure=True), [])
        self.assertTrue(self.machine.pipes_ruptured)

    def test_clear_rupture(self):
        """Test fitting a pipe clears the rupture."""
        self.machine.mark_ruptured()
        self.assertTrue(self.machine.clear_rupture())
        self.assertFalse(self.machine.pipes_ruptured)
        self.assertFalse(self.machine.clear_rupture())

    def test_explosion(self):
        """Test the singularity explodes the chamber."""
        raised = self.machine.evaluate(300.0, singularity_reached=True, position=(1.0, 2.0, 0.0))
        self.assertEqual(raised, [ReactorSafetyState.EXPLODED])
        self.assertIs(self.machine.state, ReactorSafetyState.EXPLODED)
        self.assertEqual(self.explosions.explosions, [((1.0, 2.0, 0.0), 120000.0)])

    def test_explosion_is_terminal(self):
        """Test nothing happens after an explosion."""
        self.machine.evaluate(300.0, singularity_reached=True)
        self.assertEqual(self.machine.evaluate(5000.0, singularity_reached=True), [])
        self.assertFalse(self.machine.melted_down)
        self.assertEqual(len(self.explosions.explosions), 1)

    def test_all_transitions_in_one_tick(self):
        """Test simultaneous guards raise in order."""
        raised = self.machine.evaluate(1500.0, singularity_reached=True, over_pressure=True)
        self.assertEqual(
            raised,
            [
                ReactorSafetyState.MELTED_DOWN,
                ReactorSafetyState.PIPES_RUPTURED,
                ReactorSafetyState.EXPLODED,
            ],
        )

    def test_reset(self):
        """Test reset clears melt-down and rupture."""
        self.machine.evaluate(1500.0, over_pressure=True)
        self.machine.reset()
        self.assertIs(self.machine.state, ReactorSafetyState.NORMAL)

    def test_reset_keeps_explosion(self):
        """Test an exploded chamber stays exploded."""
        self.machine.evaluate(300.0, singularity_reached=True)
        self.machine.reset()
        self.assertTrue(self.machine.exploded)

    def test_without_explosion_effects(self):
        """Test the machine works without an explosion collaborator."""
        machine = SafetyStateMachine()
        self.assertEqual(
            machine.evaluate(300.0, singularity_reached=True),
            [ReactorSafetyState.EXPLODED],
        )


if __name__ == "__main__":
    unittest.main()
