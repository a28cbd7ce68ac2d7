# kinematics.py

import math
from typing import Optional

import numpy as np

from config import ConfigurationError, DEFAULT_PATH_SEGMENTS, ROTATION_TICKS_PER_DAY

TWO_PI = 2.0 * math.pi


class PhysicsError(Exception):
    """Custom exception for kinematics errors, including non-finite results.

    Tick-time arithmetic only runs on constants that passed construction-time
    validation, so this signals a validation gap rather than a condition the
    caller is expected to recover from.
    """
    pass


def ensure_finite(values, what: str):
    """
    Raises PhysicsError if any element of `values` is NaN or infinite.

    Args:
        values (float or np.ndarray): The computed quantity to check.
        what (str): Description used in the error message.

    Returns:
        The unchanged `values`, so the check can wrap an expression.
    """
    if not np.all(np.isfinite(values)):
        raise PhysicsError(f"Non-finite {what}: {values}")
    return values


def orbital_progress(elapsed_time, orbital_period: float):
    """Fraction of the orbit completed at `elapsed_time`, in radians."""
    return (np.asarray(elapsed_time, dtype=np.float64) / orbital_period) * TWO_PI


def orbital_offset(elapsed_time, semi_major_axis: Optional[float], eccentricity: Optional[float],
                   orbital_period: Optional[float]) -> np.ndarray:
    """
    Planar offset of a body from the central star.

    Uses the simplified periodic parametrization of the orbit:

        progress = (t / P) * 2*pi
        x = a * cos(progress)
        z = a * sin(progress) * (1 - e)

    Only the z axis is compressed by (1 - e); this is not a Kepler solve and the
    curve is not an ellipse with the star at a focus.

    Args:
        elapsed_time (float or np.ndarray): Simulated days since the body was created.
        semi_major_axis (float | None): Scaled semi-major axis, `None` for the central body.
        eccentricity (float | None): Orbit eccentricity in [0, 1).
        orbital_period (float | None): Days per revolution.

    Returns:
        np.ndarray: `(x, 0, z)` for a scalar time, or an `(n, 3)` array for an array of times.
                    The central body always gets the origin.

    Raises:
        PhysicsError: If the result is not finite.
    """
    times = np.asarray(elapsed_time, dtype=np.float64)
    if semi_major_axis is None:
        return np.zeros(times.shape + (3,), dtype=np.float64)

    progress = orbital_progress(times, orbital_period)
    offset = np.stack((
        semi_major_axis * np.cos(progress),
        np.zeros_like(progress),
        semi_major_axis * np.sin(progress) * (1.0 - eccentricity),
    ), axis=-1)
    return ensure_finite(offset, "orbital offset")


def rotation_speed_from_period(rotation_period: float, ticks_per_day: float = ROTATION_TICKS_PER_DAY) -> float:
    """
    Converts a signed rotation period into a spin increment per tick.

    A zero period means the body does not rotate. Otherwise the magnitude is
    2*pi / (|period| * ticks_per_day) and the sign follows the period, so a
    negative (retrograde) period spins the body backwards.

    Args:
        rotation_period (float): Signed rotation period in days.
        ticks_per_day (float): Ticks that make up one day of rotation.

    Returns:
        float: Radians per tick.
    """
    if rotation_period == 0:
        return 0.0
    return math.copysign(TWO_PI / (abs(rotation_period) * ticks_per_day), rotation_period)


def spin_angle_from_elapsed(elapsed_time: float, rotation_period: float) -> float:
    """Spin angle after `elapsed_time` simulated days, one turn per rotation period."""
    if rotation_period == 0:
        return 0.0
    return TWO_PI * elapsed_time / rotation_period


def wrap_angle(angle: float) -> float:
    """Maps an angle onto [0, 2*pi)."""
    return angle % TWO_PI


def sample_orbit_path(constants, segments: int = DEFAULT_PATH_SEGMENTS) -> Optional[np.ndarray]:
    """
    Samples one full period of a body's orbit as a closed polyline.

    The same parametrization as `orbital_offset` is evaluated at
    `t = i / segments * P` for `i` in `[0, segments]`, so the samples are spread
    evenly over one period and do not depend on the simulation clock.

    Args:
        constants (BodyConstants): The body to sample.
        segments (int): Number of line segments; the path has `segments + 1` points.

    Returns:
        np.ndarray | None: Read-only `(segments + 1, 3)` array whose first and last
                           rows are identical, or `None` for the central body.

    Raises:
        ConfigurationError: If `segments` is not a positive integer.
    """
    if isinstance(segments, bool) or not isinstance(segments, (int, np.integer)) or segments < 1:
        raise ConfigurationError(f"Orbit path segments must be a positive integer, got {segments!r}.")
    if constants.semi_major_axis is None:
        return None

    times = np.linspace(0.0, constants.orbital_period, segments + 1)
    path = orbital_offset(times, constants.semi_major_axis, constants.eccentricity, constants.orbital_period)
    path[-1] = path[0]  # closes the loop exactly; sin(2*pi) is not exactly zero
    path.setflags(write=False)
    return path
