import math
import unittest
import numpy as np

from config import config, ConfigurationError, ROTATION_TICKS_PER_DAY
from celestial_catalog import BodyConstants
from kinematics import (PhysicsError, orbital_offset, rotation_speed_from_period, sample_orbit_path,
                        spin_angle_from_elapsed, wrap_angle, ensure_finite)


def make_planet(a=1.0, e=0.0, period=365.25):
    return BodyConstants('TESTPLANET', radius=0.05, rotation_period=1.0, axial_tilt=0.0,
                         semi_major_axis=a, eccentricity=e, orbital_period=period)


class TestOrbitalOffset(unittest.TestCase):

    def test_quarter_period_circular(self):
        np.testing.assert_array_almost_equal(orbital_offset(91.3125, 1.0, 0.0, 365.25), [0.0, 0.0, 1.0])

    def test_full_period_returns_to_start(self):
        np.testing.assert_array_almost_equal(orbital_offset(365.25, 1.0, 0.0, 365.25), [1.0, 0.0, 0.0])

    def test_start_of_orbit(self):
        np.testing.assert_array_almost_equal(orbital_offset(0.0, 2.5, 0.3, 100.0), [2.5, 0.0, 0.0])

    def test_periodicity(self):
        a, e, period = 1.524, 0.093, 687.0
        for t in (0.0, 13.7, 250.0, 600.5):
            np.testing.assert_array_almost_equal(
                orbital_offset(t, a, e, period), orbital_offset(t + period, a, e, period))
            np.testing.assert_array_almost_equal(
                orbital_offset(t, a, e, period), orbital_offset(t + 3 * period, a, e, period))

    def test_circular_orbit_keeps_constant_distance(self):
        times = np.linspace(0.0, 500.0, 37)
        offsets = orbital_offset(times, 5.203, 0.0, 4333.0)
        np.testing.assert_array_almost_equal(np.linalg.norm(offsets, axis=1), np.full(len(times), 5.203))

    def test_eccentricity_compresses_z_only(self):
        offset = orbital_offset(25.0, 2.0, 0.5, 100.0)  # quarter period
        np.testing.assert_array_almost_equal(offset, [0.0, 0.0, 1.0])
        offset = orbital_offset(50.0, 2.0, 0.5, 100.0)  # half period
        np.testing.assert_array_almost_equal(offset, [-2.0, 0.0, 0.0])

    def test_y_is_always_zero(self):
        offsets = orbital_offset(np.arange(0.0, 1000.0, 7.3), 0.723, 0.007, 224.7)
        np.testing.assert_array_equal(offsets[:, 1], 0.0)

    def test_central_body_sits_at_origin(self):
        np.testing.assert_array_equal(orbital_offset(123.4, None, None, None), [0.0, 0.0, 0.0])
        self.assertEqual(orbital_offset(np.zeros(5), None, None, None).shape, (5, 3))

    def test_vectorised_matches_scalar(self):
        times = np.array([0.0, 10.0, 44.0, 87.9])
        vectorised = orbital_offset(times, 0.387, 0.206, 88.0)
        self.assertEqual(vectorised.shape, (4, 3))
        for i, t in enumerate(times):
            np.testing.assert_array_almost_equal(vectorised[i], orbital_offset(t, 0.387, 0.206, 88.0))

    def test_non_finite_result_raises(self):
        with np.errstate(invalid='ignore'):
            with self.assertRaises(PhysicsError):
                orbital_offset(np.inf, 1.0, 0.0, 365.25)

    def test_ensure_finite(self):
        self.assertEqual(ensure_finite(3.0, "value"), 3.0)
        with self.assertRaises(PhysicsError):
            ensure_finite(np.array([1.0, np.nan]), "vector")


class TestRotation(unittest.TestCase):

    def test_rotation_constant(self):
        self.assertEqual(ROTATION_TICKS_PER_DAY, 24 * 60 * 60 * 60)

    def test_zero_period_does_not_spin(self):
        self.assertEqual(rotation_speed_from_period(0.0), 0.0)

    def test_prograde_speed(self):
        self.assertAlmostEqual(rotation_speed_from_period(1.0), 2 * math.pi / 5184000)
        self.assertGreater(rotation_speed_from_period(0.41), 0.0)

    def test_retrograde_speed_is_negative(self):
        speed = rotation_speed_from_period(-243.0)
        self.assertLess(speed, 0.0)
        self.assertAlmostEqual(speed, -rotation_speed_from_period(243.0))

    def test_custom_ticks_per_day(self):
        self.assertAlmostEqual(rotation_speed_from_period(2.0, ticks_per_day=10.0), 2 * math.pi / 20.0)

    def test_spin_from_elapsed(self):
        self.assertAlmostEqual(spin_angle_from_elapsed(0.5, 1.0), math.pi)
        self.assertAlmostEqual(spin_angle_from_elapsed(243.0, -243.0), -2 * math.pi)
        self.assertEqual(spin_angle_from_elapsed(10.0, 0.0), 0.0)

    def test_wrap_angle(self):
        self.assertAlmostEqual(wrap_angle(5 * math.pi), math.pi)
        self.assertAlmostEqual(wrap_angle(-0.1), 2 * math.pi - 0.1)
        self.assertEqual(wrap_angle(0.0), 0.0)


class TestOrbitPathSampler(unittest.TestCase):

    def test_default_resolution(self):
        path = sample_orbit_path(make_planet())
        self.assertEqual(path.shape, (129, 3))
        self.assertEqual(path.shape[0], config.Orbit.PATH_SEGMENTS + 1)

    def test_path_is_closed(self):
        path = sample_orbit_path(make_planet(1.524, 0.093, 687.0), segments=64)
        np.testing.assert_array_equal(path[0], path[-1])

    def test_samples_spread_over_one_period(self):
        path = sample_orbit_path(make_planet(2.0, 0.5, 100.0), segments=4)
        expected = np.array([
            [2.0, 0.0, 0.0],
            [0.0, 0.0, 1.0],
            [-2.0, 0.0, 0.0],
            [0.0, 0.0, -1.0],
            [2.0, 0.0, 0.0],
        ])
        np.testing.assert_array_almost_equal(path, expected)

    def test_path_is_read_only(self):
        path = sample_orbit_path(make_planet())
        with self.assertRaises(ValueError):
            path[0, 0] = 42.0

    def test_central_body_has_no_path(self):
        sun = BodyConstants('SUN', radius=0.23, rotation_period=27.0, axial_tilt=7.25)
        self.assertIsNone(sample_orbit_path(sun))

    def test_invalid_segment_counts(self):
        planet = make_planet()
        for segments in (0, -3, 2.5, True, "8"):
            with self.assertRaises(ConfigurationError):
                sample_orbit_path(planet, segments=segments)


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
