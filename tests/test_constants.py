"""
Tests for the constants module.
"""

import unittest
from dataclasses import FrozenInstanceError

from graphite_reactor.constants import (
    DECIMAL_MAX,
    DEFAULT_ENERGY_PER_NEUTRON,
    ENERGY_PER_FISSION_J,
    ReactorConstants,
    TEARDOWN_MATERIALS,
)


class TestReactorConstants(unittest.TestCase):
    """Test chamber constants."""

    def setUp(self):
        self.constants = ReactorConstants()

    def test_default_slot_count(self):
        """Test the chamber has sixteen slots."""
        self.assertEqual(self.constants.SLOT_COUNT, 16)

    def test_k_factor_scale(self):
        """Test k-factor scale is below one."""
        self.assertAlmostEqual(self.constants.K_FACTOR_SCALE, 0.85217022, places=8)
        self.assertTrue(self.constants.K_FACTOR_SCALE < 1.0)

    def test_temperatures(self):
        """Test temperatures derived from the Celsius offset."""
        self.assertAlmostEqual(self.constants.BOILING_POINT, 373.15, places=6)
        self.assertAlmostEqual(
            self.constants.PRESSURE_REFERENCE_TEMPERATURE, 293.15, places=6
        )
        self.assertTrue(self.constants.ROD_MELTING_TEMPERATURE > self.constants.BOILING_POINT)

    def test_control_rod_limits(self):
        """Test control rod depth limits."""
        self.assertEqual(self.constants.MIN_CONTROL_ROD_DEPTH, 0.1)
        self.assertEqual(self.constants.MAX_CONTROL_ROD_DEPTH, 1.0)

    def test_pressure_clamp_is_symmetric(self):
        """Test the pressure register saturates at the decimal range."""
        self.assertEqual(self.constants.PRESSURE_CLAMP_MAX, DECIMAL_MAX)
        self.assertEqual(self.constants.PRESSURE_CLAMP_MIN, -DECIMAL_MAX)

    def test_frozen(self):
        """Test constants cannot be modified."""
        with self.assertRaises(FrozenInstanceError):
            self.constants.SLOT_COUNT = 8

    def test_override(self):
        """Test individual constants can be overridden."""
        constants = ReactorConstants(SLOT_COUNT=4, MAX_PRESSURE=500.0)
        self.assertEqual(constants.SLOT_COUNT, 4)
        self.assertEqual(constants.MAX_PRESSURE, 500.0)

    def test_invalid_slot_count(self):
        """Test that a chamber without slots raises error."""
        with self.assertRaises(ValueError):
            ReactorConstants(SLOT_COUNT=0)

    def test_invalid_depth_limits(self):
        """Test that inverted depth limits raise error."""
        with self.assertRaises(ValueError):
            ReactorConstants(MIN_CONTROL_ROD_DEPTH=0.8, MAX_CONTROL_ROD_DEPTH=0.5)

    def test_invalid_pressure_clamp(self):
        """Test that an empty pressure range raises error."""
        with self.assertRaises(ValueError):
            ReactorConstants(PRESSURE_CLAMP_MIN=10.0, PRESSURE_CLAMP_MAX=10.0)

    def test_invalid_singularity(self):
        """Test that a non-positive singularity raises error."""
        with self.assertRaises(ValueError):
            ReactorConstants(NEUTRON_SINGULARITY=0.0)


class TestFissionEnergy(unittest.TestCase):
    """Test fission energy constants."""

    def test_energy_per_fission(self):
        """Test 200 MeV in joules."""
        self.assertAlmostEqual(ENERGY_PER_FISSION_J / 3.204e-11, 1.0, places=3)

    def test_scaled_energy_per_neutron(self):
        """Test default fuel rod energy is the scaled fission energy."""
        self.assertAlmostEqual(DEFAULT_ENERGY_PER_NEUTRON, 0.03204, places=4)


class TestTeardownMaterials(unittest.TestCase):
    """Test teardown material names."""

    def test_materials(self):
        """Test every teardown outcome names a material."""
        self.assertEqual(TEARDOWN_MATERIALS["fuel"], "uranium ore")
        self.assertEqual(TEARDOWN_MATERIALS["control"], "metal ore")
        self.assertIn("intact", TEARDOWN_MATERIALS)


if __name__ == "__main__":
    unittest.main()
