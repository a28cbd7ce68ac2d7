# solarsystem.py
import math
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import numpy as np

from config import ConfigurationError, ROTATION_TICKS_PER_DAY
from celestial_catalog import BodyConstants
from kinematics import (DEFAULT_PATH_SEGMENTS, ensure_finite, orbital_offset, rotation_speed_from_period,
                        sample_orbit_path, spin_angle_from_elapsed, wrap_angle)


class MotionState(Enum):
    """Fixed at construction: a body either sits at the origin or follows its orbit."""
    STATIONARY = "stationary"
    ORBITING = "orbiting"


def _frozen(vector: np.ndarray) -> np.ndarray:
    vector.setflags(write=False)
    return vector


@dataclass(eq=False)
class CelestialBody:
    """Mutable simulation record of one body instantiated from the catalog.

    Combines the body's shared, read-only `BodyConstants` with the state that
    changes every tick: elapsed simulated time, position and spin angle. The orbit
    path and per-tick rotation speed are derived once at construction.

    Attributes:
        constants (BodyConstants): Shared catalog entry this body was created from.
        appearance (Mapping | None): Opaque rendering descriptor, never inspected here.
        path_segments (int): Resolution of the sampled orbit path.
        ticks_per_day (float): Ticks per rotation-period day used for `rotation_speed`.
        spin_from_elapsed_time (bool): Derive the spin angle from `elapsed_time` instead of
                                       accumulating `rotation_speed` once per tick.
        motion_state (MotionState): STATIONARY when the constants have no semi-major axis.
        elapsed_time (float): Simulated days since creation; never decreases.
        rotation_speed (float): Signed spin increment in radians per tick.
        axial_tilt_rad (float): Fixed tilt of the spin axis, applied once by the renderer.
        position (np.ndarray): Read-only `(x, 0, z)` offset from the central body.
        spin_angle (float): Unbounded accumulated spin angle in radians.
        orbit_path (np.ndarray | None): Read-only closed path, `None` when stationary.
        tick_count (int): Number of ticks that advanced this body's time.
    """
    constants: BodyConstants
    appearance: Optional[Mapping[str, Any]] = None
    path_segments: int = DEFAULT_PATH_SEGMENTS
    ticks_per_day: float = ROTATION_TICKS_PER_DAY
    spin_from_elapsed_time: bool = False

    motion_state: MotionState = field(init=False)
    elapsed_time: float = field(default=0.0, init=False)
    rotation_speed: float = field(default=0.0, init=False)
    axial_tilt_rad: float = field(default=0.0, init=False)
    position: np.ndarray = field(init=False)
    spin_angle: float = field(default=0.0, init=False)
    orbit_path: Optional[np.ndarray] = field(default=None, init=False, repr=False)
    tick_count: int = field(default=0, init=False)

    def __post_init__(self):
        if not isinstance(self.constants, BodyConstants):
            raise ConfigurationError(f"CelestialBody needs BodyConstants, got {type(self.constants).__name__}.")
        if not (math.isfinite(self.ticks_per_day) and self.ticks_per_day > 0):
            raise ConfigurationError(f"ticks_per_day must be positive and finite, got {self.ticks_per_day}.")

        self.motion_state = MotionState.ORBITING if self.constants.is_orbiting else MotionState.STATIONARY
        self.rotation_speed = rotation_speed_from_period(self.constants.rotation_period, self.ticks_per_day)
        self.axial_tilt_rad = math.radians(self.constants.axial_tilt)
        self.position = _frozen(self.position_at(0.0))
        self.orbit_path = sample_orbit_path(self.constants, self.path_segments)

    @property
    def name(self) -> str:
        return self.constants.name

    @property
    def is_orbiting(self) -> bool:
        return self.motion_state is MotionState.ORBITING

    @property
    def wrapped_spin_angle(self) -> float:
        """Spin angle folded onto [0, 2*pi); renders identically to `spin_angle`."""
        return wrap_angle(self.spin_angle)

    def position_at(self, elapsed_time: float) -> np.ndarray:
        """Offset this body would have after `elapsed_time` simulated days."""
        c = self.constants
        return orbital_offset(elapsed_time, c.semi_major_axis, c.eccentricity, c.orbital_period)

    def update(self, sim_delta_days: float) -> None:
        """Advances the body by `sim_delta_days` of simulated time.

        The new elapsed time, spin angle and position are all computed before any of
        them is stored, so a failure leaves the previous state untouched. A zero delta
        (e.g. a paused clock) changes nothing, the spin angle included.

        Args:
            sim_delta_days (float): Simulated days to advance, >= 0.

        Raises:
            ValueError: If `sim_delta_days` is negative or not finite.
            PhysicsError: If the kinematics produce a non-finite value.
        """
        if not math.isfinite(sim_delta_days) or sim_delta_days < 0:
            raise ValueError(f"sim_delta_days must be finite and >= 0, got {sim_delta_days}.")
        if sim_delta_days == 0:
            return

        new_elapsed = self.elapsed_time + sim_delta_days
        if self.spin_from_elapsed_time:
            new_spin = spin_angle_from_elapsed(new_elapsed, self.constants.rotation_period)
        else:
            new_spin = self.spin_angle + self.rotation_speed
        ensure_finite(new_spin, f"spin angle of {self.name}")

        if self.is_orbiting:
            new_position = _frozen(self.position_at(new_elapsed))
        else:
            new_position = self.position

        self.elapsed_time = new_elapsed
        self.spin_angle = new_spin
        self.position = new_position
        self.tick_count += 1

    def to_dict(self) -> Dict[str, Any]:
        """Plain snapshot of the current state, for logging and inspection."""
        return {
            'name': self.name,
            'state': self.motion_state.value,
            'elapsed_time': self.elapsed_time,
            'position': self.position.tolist(),
            'spin_angle': self.spin_angle,
        }

    def __str__(self) -> str:
        x, _, z = self.position
        return f"{self.name}(t={self.elapsed_time:.3f}d, pos=({x:.4f}, {z:.4f}), spin={self.wrapped_spin_angle:.4f})"


def create_body(constants: BodyConstants, appearance: Optional[Mapping[str, Any]] = None, cfg=None) -> CelestialBody:
    """Instantiates a `CelestialBody` using the orbit and time settings of `cfg` (defaults when `None`)."""
    if cfg is None:
        body = CelestialBody(constants, appearance)
    else:
        body = CelestialBody(
            constants,
            appearance,
            path_segments=cfg.Orbit.PATH_SEGMENTS,
            ticks_per_day=cfg.Time.ROTATION_TICKS_PER_DAY,
            spin_from_elapsed_time=cfg.Time.SPIN_FROM_ELAPSED_TIME,
        )
    logging.debug(f"Created {body.name} ({body.motion_state.value}), rotation_speed={body.rotation_speed:.3e} rad/tick")
    return body
