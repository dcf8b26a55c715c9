"""
Tests for the neutronics module.
"""

import unittest
import numpy as np

from graphite_reactor.constants import ReactorConstants
from graphite_reactor.collaborators import StaticRadiationField
from graphite_reactor.neutronics import NeutronKinetics, leaked_radiation_level
from graphite_reactor.registry import RodRegistry
from graphite_reactor.rods import ControlRod, FuelRod, StarterRod

K_SCALE = 0.85217022


def quiet_constants(**overrides):
    """Constants with spontaneous neutrons switched off."""
    return ReactorConstants(SPONTANEOUS_NEUTRON_LIKELIHOOD=0.0, **overrides)


class TestAbsorptionProbability(unittest.TestCase):
    """Test the non-absorption probability."""

    def setUp(self):
        self.registry = RodRegistry(16)
        self.kinetics = NeutronKinetics(self.registry, quiet_constants())

    def test_empty_chamber(self):
        """Test an empty chamber absorbs everything."""
        self.assertEqual(self.kinetics.absorption_probability(), 0.0)
        self.assertEqual(self.kinetics.k_factor(), 0.0)

    def test_fuel_only(self):
        """Test a full fuel load has probability one."""
        for _ in range(16):
            self.registry.insert_rod(FuelRod())
        self.assertAlmostEqual(self.kinetics.absorption_probability(), 1.0)
        self.assertAlmostEqual(self.kinetics.k_factor(), K_SCALE)

    def test_control_rod_fully_inserted(self):
        """Test one fuel rod against one fully inserted control rod."""
        self.registry.insert_rod(FuelRod())
        self.registry.insert_rod(ControlRod(absorption_power=8.0))
        self.assertAlmostEqual(self.kinetics.absorption_probability(), 1.0 / 24.0)

    def test_control_rod_depth_scales_absorption(self):
        """Test withdrawing control rods raises the probability."""
        self.registry.insert_rod(FuelRod())
        self.registry.insert_rod(ControlRod(absorption_power=8.0))
        inserted = self.kinetics.absorption_probability()
        self.kinetics.set_control_rod_depth(0.5)
        withdrawn = self.kinetics.absorption_probability()
        self.assertAlmostEqual(withdrawn, 1.0 / 20.0)
        self.assertTrue(withdrawn > inserted)

    def test_melted_down_variant(self):
        """Test the melted core is penalized by coolant amount."""
        self.registry.insert_rod(FuelRod())
        self.registry.insert_rod(ControlRod(absorption_power=8.0))
        probability = self.kinetics.absorption_probability(melted_down=True, total_moles=100.0)
        self.assertAlmostEqual(probability, 0.5 * (1.0 / 16.0))

    def test_melted_down_ignores_control_rods(self):
        """Test control rods no longer absorb in a melted core."""
        self.registry.insert_rod(FuelRod())
        self.registry.insert_rod(ControlRod(absorption_power=50.0))
        probability = self.kinetics.absorption_probability(melted_down=True, total_moles=0.0)
        self.assertAlmostEqual(probability, 1.0 / 16.0)


class TestControlRodDepth(unittest.TestCase):
    """Test control rod depth clamping."""

    def setUp(self):
        self.kinetics = NeutronKinetics(RodRegistry(16))

    def test_default_fully_inserted(self):
        """Test rods start fully inserted."""
        self.assertEqual(self.kinetics.control_rod_depth, 1.0)

    def test_clamped_high(self):
        """Test depth above one is clamped."""
        self.assertEqual(self.kinetics.set_control_rod_depth(3.0), 1.0)

    def test_clamped_low(self):
        """Test depth below the minimum is clamped."""
        self.assertEqual(self.kinetics.set_control_rod_depth(0.0), 0.1)

    def test_within_range(self):
        """Test depth within range is kept."""
        self.assertEqual(self.kinetics.set_control_rod_depth(0.42), 0.42)


class TestSpontaneousNeutrons(unittest.TestCase):
    """Test the spontaneous neutron roll."""

    def test_never(self):
        """Test zero likelihood never adds a neutron."""
        kinetics = NeutronKinetics(RodRegistry(16), quiet_constants())
        self.assertEqual(sum(kinetics.roll_spontaneous_neutron() for _ in range(200)), 0.0)

    def test_always(self):
        """Test a likelihood above the roll range always adds one."""
        constants = ReactorConstants(SPONTANEOUS_NEUTRON_LIKELIHOOD=11.0)
        kinetics = NeutronKinetics(RodRegistry(16), constants)
        self.assertEqual(sum(kinetics.roll_spontaneous_neutron() for _ in range(50)), 50.0)

    def test_seeded_replay(self):
        """Test equal seeds give equal roll sequences."""
        constants = ReactorConstants(SPONTANEOUS_NEUTRON_LIKELIHOOD=5.0)
        first = NeutronKinetics(RodRegistry(16), constants, rng=np.random.default_rng(7))
        second = NeutronKinetics(RodRegistry(16), constants, rng=np.random.default_rng(7))
        rolls_first = [first.roll_spontaneous_neutron() for _ in range(100)]
        rolls_second = [second.roll_spontaneous_neutron() for _ in range(100)]
        self.assertEqual(rolls_first, rolls_second)
        self.assertIn(1.0, rolls_first)
        self.assertIn(0.0, rolls_first)


class TestKineticsStep(unittest.TestCase):
    """Test a full kinetics step."""

    def setUp(self):
        self.registry = RodRegistry(16)
        self.kinetics = NeutronKinetics(self.registry, quiet_constants())

    def test_multiplication(self):
        """Test the population is multiplied by k."""
        self.registry.insert_rod(FuelRod())
        self.registry.insert_rod(ControlRod(absorption_power=8.0))
        self.kinetics.present_neutrons = 1000.0
        result = self.kinetics.step()
        expected_k = K_SCALE / 24.0
        self.assertAlmostEqual(result.k_factor, expected_k)
        self.assertAlmostEqual(result.population, 1000.0 * expected_k)
        self.assertFalse(result.singularity_reached)

    def test_starter_injection(self):
        """Test starter rods add their generation before multiplication."""
        self.registry.insert_rod(StarterRod(neutron_generation_per_second=10.0), 1)
        result = self.kinetics.step()
        self.assertAlmostEqual(result.injected, 10.0)
        self.assertAlmostEqual(result.population, 10.0 * K_SCALE / 16.0)

    def test_external_flux(self):
        """Test external flux is injected."""
        self.registry.insert_rod(FuelRod())
        result = self.kinetics.step(external_flux=32.0)
        self.assertAlmostEqual(result.injected, 32.0)
        self.assertAlmostEqual(self.kinetics.last_external_flux, 32.0)

    def test_leak_published(self):
        """Test the leak level reaches the radiation field."""
        field = StaticRadiationField()
        self.registry.insert_rod(FuelRod())
        self.kinetics.present_neutrons = 1.0e6
        result = self.kinetics.step(radiation_field=field, core_id="core-1")
        self.assertIn("core-1", field.leak_levels)
        self.assertAlmostEqual(field.leak_levels["core-1"], result.leak_level)
        self.assertTrue(result.leak_level > 0)

    def test_no_leak_without_neutrons(self):
        """Test an idle chamber publishes nothing."""
        field = StaticRadiationField()
        self.kinetics.step(radiation_field=field, core_id="core-1")
        self.assertEqual(field.leak_levels, {})

    def test_singularity(self):
        """Test a population past the threshold is flagged."""
        self.registry.insert_rod(FuelRod())
        self.kinetics.present_neutrons = 1.0e13
        result = self.kinetics.step()
        self.assertTrue(result.singularity_reached)

    def test_reset(self):
        """Test reset restores the initial population and depth."""
        self.kinetics.present_neutrons = 55.0
        self.kinetics.set_control_rod_depth(0.3)
        self.kinetics.reset()
        self.assertEqual(self.kinetics.present_neutrons, 0.0)
        self.assertEqual(self.kinetics.control_rod_depth, 1.0)


class TestLeakCurve(unittest.TestCase):
    """Test the radiation leak curve."""

    def test_zero(self):
        """Test no neutrons leak no radiation."""
        self.assertEqual(leaked_radiation_level(0.0), 0.0)

    def test_small_population_clamped(self):
        """Test a tiny population gives no radiation."""
        self.assertEqual(leaked_radiation_level(1.0), 0.0)

    def test_saturates(self):
        """Test the curve approaches the output scale."""
        level = leaked_radiation_level(1.0e15)
        self.assertTrue(level < 36000.0)
        self.assertTrue(level > 0.9 * 36000.0)

    def test_monotonic(self):
        """Test more neutrons never leak less."""
        populations = np.logspace(2, 14, 25)
        levels = [leaked_radiation_level(p) for p in populations]
        self.assertTrue(all(b >= a for a, b in zip(levels, levels[1:])))

    def test_formula(self):
        """Test the curve against its closed form."""
        leaked = 1.0e6 * 0.0397
        expected = (leaked / (leaked + leaked ** 0.82) - 0.5) * 2 * 36000.0
        self.assertAlmostEqual(leaked_radiation_level(1.0e6), expected)


if __name__ == "__main__":
    unittest.main()
