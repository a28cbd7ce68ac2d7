import math
import unittest
from unittest import mock
import numpy as np

from config import config, ConfigurationError
from celestial_catalog import BodyCatalog, BodyConstants
from kinematics import PhysicsError
from solarsystem import CelestialBody, MotionState, create_body

EARTH_LIKE = BodyConstants('EARTH', radius=0.06371, rotation_period=1.0, axial_tilt=23.44,
                           semi_major_axis=1.0, eccentricity=0.0, orbital_period=365.25)
VENUS_LIKE = BodyConstants('VENUS', radius=0.06, rotation_period=-243.0, axial_tilt=177.4,
                           semi_major_axis=0.723, eccentricity=0.007, orbital_period=224.7)
SUN_LIKE = BodyConstants('SUN', radius=0.2321, rotation_period=27.0, axial_tilt=7.25)


class TestCelestialBodyConstruction(unittest.TestCase):

    def test_orbiting_body_initial_state(self):
        body = CelestialBody(EARTH_LIKE)
        self.assertIs(body.motion_state, MotionState.ORBITING)
        self.assertEqual(body.elapsed_time, 0.0)
        self.assertEqual(body.spin_angle, 0.0)
        np.testing.assert_array_almost_equal(body.position, [1.0, 0.0, 0.0])
        self.assertEqual(body.orbit_path.shape, (129, 3))
        self.assertAlmostEqual(body.rotation_speed, 2 * math.pi / 5184000)
        self.assertAlmostEqual(body.axial_tilt_rad, math.radians(23.44))

    def test_stationary_body_initial_state(self):
        body = CelestialBody(SUN_LIKE)
        self.assertIs(body.motion_state, MotionState.STATIONARY)
        self.assertFalse(body.is_orbiting)
        self.assertIsNone(body.orbit_path)
        np.testing.assert_array_equal(body.position, [0.0, 0.0, 0.0])

    def test_rejects_non_constants(self):
        with self.assertRaises(ConfigurationError):
            CelestialBody({'name': 'EARTH'})

    def test_rejects_bad_ticks_per_day(self):
        with self.assertRaises(ConfigurationError):
            CelestialBody(EARTH_LIKE, ticks_per_day=0)

    def test_create_body_uses_config(self):
        catalog = BodyCatalog.from_config(config)
        body = create_body(catalog.get('MARS'), catalog.appearance('MARS'), config)
        self.assertEqual(body.orbit_path.shape, (config.Orbit.PATH_SEGMENTS + 1, 3))
        self.assertEqual(body.appearance['color'], (193, 68, 14))
        self.assertEqual(body.name, 'MARS')


class TestCelestialBodyUpdate(unittest.TestCase):

    def test_quarter_period(self):
        body = CelestialBody(EARTH_LIKE)
        body.update(91.3125)
        np.testing.assert_array_almost_equal(body.position, [0.0, 0.0, 1.0])
        body.update(273.9375)
        np.testing.assert_array_almost_equal(body.position, [1.0, 0.0, 0.0])
        self.assertAlmostEqual(body.elapsed_time, 365.25)

    def test_stationary_body_never_moves(self):
        body = CelestialBody(SUN_LIKE)
        for delta in (0.5, 10.0, 1000.0, 1e6):
            body.update(delta)
            np.testing.assert_array_equal(body.position, [0.0, 0.0, 0.0])
        self.assertGreater(body.spin_angle, 0.0)

    def test_prograde_spin_strictly_increases(self):
        body = CelestialBody(EARTH_LIKE)
        previous = body.spin_angle
        for _ in range(20):
            body.update(1 / 3)
            self.assertGreater(body.spin_angle, previous)
            previous = body.spin_angle

    def test_retrograde_spin_strictly_decreases(self):
        body = CelestialBody(VENUS_LIKE)
        previous = body.spin_angle
        for _ in range(20):
            body.update(1 / 3)
            self.assertLess(body.spin_angle, previous)
            previous = body.spin_angle

    def test_spin_accumulates_per_tick(self):
        body = CelestialBody(EARTH_LIKE)
        for _ in range(10):
            body.update(0.25)
        self.assertAlmostEqual(body.spin_angle, 10 * body.rotation_speed)
        self.assertEqual(body.tick_count, 10)

    def test_zero_tick_leaves_state_unchanged(self):
        body = CelestialBody(EARTH_LIKE)
        body.update(12.0)
        before = body.to_dict()
        body.update(0.0)
        self.assertEqual(body.to_dict(), before)
        self.assertEqual(body.tick_count, 1)

    def test_invalid_deltas_rejected(self):
        body = CelestialBody(EARTH_LIKE)
        body.update(1.0)
        before = body.to_dict()
        for delta in (-0.1, float('nan'), float('inf')):
            with self.assertRaises(ValueError):
                body.update(delta)
        self.assertEqual(body.to_dict(), before)

    def test_failed_update_keeps_previous_state(self):
        body = CelestialBody(EARTH_LIKE)
        body.update(30.0)
        before = body.to_dict()
        with mock.patch('solarsystem.orbital_offset', side_effect=PhysicsError("boom")):
            with self.assertRaises(PhysicsError):
                body.update(5.0)
        self.assertEqual(body.to_dict(), before)
        self.assertEqual(body.tick_count, 1)

    def test_position_is_read_only(self):
        body = CelestialBody(EARTH_LIKE)
        body.update(3.0)
        with self.assertRaises(ValueError):
            body.position[0] = 9.0

    def test_spin_from_elapsed_time(self):
        body = CelestialBody(EARTH_LIKE, spin_from_elapsed_time=True)
        body.update(0.25)
        self.assertAlmostEqual(body.spin_angle, math.pi / 2)
        body.update(0.75)
        self.assertAlmostEqual(body.spin_angle, 2 * math.pi)
        self.assertAlmostEqual(body.wrapped_spin_angle, 0.0)

    def test_wrapped_spin_angle_range(self):
        body = CelestialBody(VENUS_LIKE, spin_from_elapsed_time=True)
        body.update(300.0)
        self.assertLess(body.spin_angle, 0.0)
        self.assertGreaterEqual(body.wrapped_spin_angle, 0.0)
        self.assertLess(body.wrapped_spin_angle, 2 * math.pi)

    def test_str(self):
        self.assertIn('EARTH', str(CelestialBody(EARTH_LIKE)))


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
