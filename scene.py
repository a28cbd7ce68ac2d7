# scene.py
import math
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import ConfigurationError, DEFAULT_TIME_SCALE
from celestial_catalog import BodyCatalog, NotFoundError
from solarsystem import CelestialBody, create_body


class SimulationClock:
    """Turns real elapsed time into simulated elapsed time.

    Each call to `advance()` is one tick: the current `time_scale` (simulated days
    per real second) is read once and applied to that tick's real delta. The scale
    may be changed, paused or resumed between ticks; a paused clock yields zero
    simulated time.

    Attributes:
        tick_count (int): Number of ticks advanced so far.
        total_real_time (float): Sum of real deltas passed to `advance()`, in seconds.
        total_sim_time (float): Sum of simulated deltas produced, in days.
    """

    def __init__(self, time_scale: float = DEFAULT_TIME_SCALE, min_time_scale: float = 0.0,
                 max_time_scale: float = math.inf):
        if not (0 <= min_time_scale <= max_time_scale):
            raise ConfigurationError(
                f"Time scale bounds invalid: min ({min_time_scale}) must be >= 0 and <= max ({max_time_scale})."
            )
        self.min_time_scale = min_time_scale
        self.max_time_scale = max_time_scale
        self._time_scale = 0.0
        self.time_scale = time_scale
        self.paused = False
        self.tick_count = 0
        self.total_real_time = 0.0
        self.total_sim_time = 0.0

    @classmethod
    def from_config(cls, cfg, time_scale: Optional[float] = None) -> 'SimulationClock':
        return cls(
            time_scale=cfg.Time.DEFAULT_TIME_SCALE if time_scale is None else time_scale,
            min_time_scale=cfg.Time.MIN_TIME_SCALE,
            max_time_scale=cfg.Time.MAX_TIME_SCALE,
        )

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Time scale must be a number, got {value!r}.")
        if not math.isfinite(value) or value < 0:
            raise ConfigurationError(f"Time scale must be finite and >= 0, got {value}.")
        self._time_scale = value

    @property
    def effective_time_scale(self) -> float:
        return 0.0 if self.paused else self._time_scale

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        logging.info(f"Simulation {'paused' if self.paused else 'resumed'} at {self.total_sim_time:.2f} simulated days.")
        return self.paused

    def scale_by(self, factor: float) -> float:
        """Multiplies the time scale by `factor`, clamped to the configured bounds."""
        self.time_scale = min(self.max_time_scale, max(self.min_time_scale, self._time_scale * factor))
        logging.info(f"Time scale set to {self._time_scale:g} simulated days per second.")
        return self._time_scale

    def sim_delta(self, real_delta: float) -> float:
        """Simulated days the next tick would cover, without advancing the clock.

        Raises:
            ValueError: If `real_delta` is negative or not finite.
        """
        if not math.isfinite(real_delta) or real_delta < 0:
            raise ValueError(f"real_delta must be finite and >= 0, got {real_delta}.")
        return real_delta * self.effective_time_scale

    def commit(self, real_delta: float, sim_delta: float):
        self.tick_count += 1
        self.total_real_time += real_delta
        self.total_sim_time += sim_delta

    def advance(self, real_delta: float) -> float:
        """Advances the clock by one tick.

        Args:
            real_delta (float): Real seconds since the previous tick, >= 0.

        Returns:
            float: Simulated days elapsed during this tick.

        Raises:
            ValueError: If `real_delta` is negative or not finite.
        """
        sim_delta = self.sim_delta(real_delta)
        self.commit(real_delta, sim_delta)
        return sim_delta


class SceneComposer:
    """Owns the scene's bodies and advances them once per tick.

    Bodies are created from catalog entries at construction, kept in insertion
    (draw) order and never added or removed afterwards. `tick()` converts the
    driver's real delta into simulated days through the `SimulationClock` and
    applies it to every body in order; bodies never read one another, so the
    resulting values do not depend on that order.

    Attributes:
        catalog (BodyCatalog): Source of the bodies' constants and appearances.
        clock (SimulationClock): Time source shared by all bodies.
        tick_count (int): Ticks applied so far.
    """

    def __init__(self, catalog: BodyCatalog, body_names: Iterable[str], clock: Optional[SimulationClock] = None,
                 cfg=None):
        """Creates one `CelestialBody` per name.

        Args:
            catalog: Read-only body table.
            body_names: Catalog keys in draw order.
            clock: Time source; a default-scaled clock is created when omitted.
            cfg: Optional `SimulationConfig` supplying orbit sampling, rotation and
                debug logging settings.

        Raises:
            NotFoundError: If a name is not in the catalog.
            ConfigurationError: If a name is listed twice or the list is empty.
        """
        self.catalog = catalog
        self.clock = clock if clock is not None else SimulationClock()
        self.tick_count = 0
        self._log_interval = cfg.Debug.LOG_ORBIT_INTERVAL_TICKS if cfg is not None else 600
        self._log_names = [n.upper() for n in cfg.Debug.LOG_ORBIT_BODY_NAMES] if cfg is not None else []

        bodies: List[CelestialBody] = []
        index: Dict[str, CelestialBody] = {}
        for name in body_names:
            constants = catalog.get(name)
            key = constants.name.upper()
            if key in index:
                raise ConfigurationError(f"Body '{key}' appears more than once in the scene.")
            body = create_body(constants, catalog.appearance(key), cfg)
            bodies.append(body)
            index[key] = body
        if not bodies:
            raise ConfigurationError("A scene needs at least one body.")

        self._bodies: Tuple[CelestialBody, ...] = tuple(bodies)
        self._index = index
        logging.info(f"SceneComposer initialized with {len(bodies)} bodies: {', '.join(index)}.")

    @classmethod
    def from_config(cls, cfg, preset: Optional[str] = None, catalog: Optional[BodyCatalog] = None,
                    time_scale: Optional[float] = None) -> 'SceneComposer':
        """Builds a scene from a named preset in `cfg.Scenes.PRESETS`.

        Raises:
            ConfigurationError: If the preset is unknown.
        """
        preset = preset or cfg.Scenes.DEFAULT
        if preset not in cfg.Scenes.PRESETS:
            raise ConfigurationError(f"Unknown scene preset '{preset}'. Available: {sorted(cfg.Scenes.PRESETS)}.")
        catalog = catalog if catalog is not None else BodyCatalog.from_config(cfg)
        clock = SimulationClock.from_config(cfg, time_scale=time_scale)
        logging.info(f"Composing scene preset '{preset}'.")
        return cls(catalog, cfg.Scenes.PRESETS[preset], clock=clock, cfg=cfg)

    @property
    def bodies(self) -> Tuple[CelestialBody, ...]:
        return self._bodies

    @property
    def elapsed_time(self) -> float:
        return self.clock.total_sim_time

    def body(self, name: str) -> CelestialBody:
        """Returns the scene's body called `name`.

        Raises:
            NotFoundError: If the scene has no such body.
        """
        try:
            return self._index[str(name).upper()]
        except KeyError:
            raise NotFoundError(f"Celestial body '{name}' is not part of this scene.") from None

    def tick(self, real_delta: float) -> Tuple[CelestialBody, ...]:
        """Advances every body by one tick.

        The clock's totals and `tick_count` are only advanced once every body has
        been updated. Each body's update is atomic, but if one body raises, the
        bodies before it in draw order keep their new state.

        Args:
            real_delta (float): Real seconds since the previous tick, >= 0.

        Returns:
            Tuple[CelestialBody, ...]: The updated bodies in draw order.

        Raises:
            ValueError: If `real_delta` is negative or not finite.
            PhysicsError: If a body's kinematics produce a non-finite value.
        """
        sim_delta = self.clock.sim_delta(real_delta)
        for body in self._bodies:
            body.update(sim_delta)
        self.clock.commit(real_delta, sim_delta)
        self.tick_count += 1

        if self._log_names and self.tick_count % self._log_interval == 0:
            for name in self._log_names:
                if name in self._index:
                    logging.debug(f"Tick {self.tick_count}: {self._index[name]}")
        return self._bodies

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Name -> plain state dict for every body, in draw order."""
        return {body.name: body.to_dict() for body in self._bodies}

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self):
        return iter(self._bodies)
