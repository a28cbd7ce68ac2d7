# config.py
import math
import logging

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Fundamental Physical Constants (used across different config sections)
AU_KM = 149597870.7  # Astronomical Unit in kilometers
SECONDS_PER_DAY = 86400.0

# Frame rate the per-tick rotation speed is calibrated against. Spin is
# accumulated once per tick, so this fixes how many ticks make up one
# rotation period: a body with a 1 day period turns once every
# SECONDS_PER_DAY * ASSUMED_FRAME_RATE_HZ ticks.
ASSUMED_FRAME_RATE_HZ = 60.0
ROTATION_TICKS_PER_DAY = SECONDS_PER_DAY * ASSUMED_FRAME_RATE_HZ

DEFAULT_TIME_SCALE = 20.0  # Simulated days per real second
DEFAULT_PATH_SEGMENTS = 128  # Segments per sampled orbit line

# Visualization Scale Constants
SUN_SCALE_FACTOR = 1 / 3000000  # Scene units per km, central star only
SCALE_FACTOR = 1 / 100000  # Scene units per km, all other bodies
ORBIT_SCALE_FACTOR = 1.0  # Scene units per AU


class ConfigurationError(Exception):
    """Custom exception for simulation configuration errors.

    Raised by `SimulationConfig.validate()`, by `BodyConstants` construction and
    by other configuration-dependent components when settings are invalid,
    inconsistent, or missing. These are always construction-time failures; no
    component substitutes a default for a value that failed validation.

    Attributes:
        message (str): A human-readable explanation of the configuration error.
                       This is the first argument passed to the exception constructor.
    """
    pass


class SimulationConfig:
    """Centralized, hierarchical configuration for the orrery.

    Parameters are grouped into nested static classes (`SimulationConfig.Scale`,
    `SimulationConfig.Time`, `SimulationConfig.SolarSystem`, ...). A default
    instance named `config` is created at the end of this module for the driver
    (`main.py`); the catalog and scene receive their configuration explicitly
    and never import this instance themselves.

    Example Usage:
        >>> from config import config
        >>> config.Time.DEFAULT_TIME_SCALE
        20.0
        >>> config.Scenes.PRESETS['inner']
        ['SUN', 'MERCURY', 'VENUS', 'EARTH', 'MARS']
    """

    # --- Scale Configuration ---
    class Scale:
        """Unit conversion factors from physical units to scene units.

        Attributes:
            AU_KM (float): Kilometers per astronomical unit.
            SUN_SCALE_FACTOR (float): Scene units per km for the central star's radius.
                                      Much smaller than `SCALE_FACTOR` so the star
                                      does not dwarf the scene.
            SCALE_FACTOR (float): Scene units per km for every other body's radius.
            ORBIT_SCALE_FACTOR (float): Scene units per AU for semi-major axes.
        """
        AU_KM = AU_KM
        SUN_SCALE_FACTOR = SUN_SCALE_FACTOR
        SCALE_FACTOR = SCALE_FACTOR
        ORBIT_SCALE_FACTOR = ORBIT_SCALE_FACTOR

    # --- Time Configuration ---
    class Time:
        """Configuration related to simulated time progression.

        Attributes:
            DEFAULT_TIME_SCALE (float): Simulated days per real second. Each tick
                                        advances every body by `real_delta * time_scale`.
            MIN_TIME_SCALE (float): Lower bound used by the interactive speed controls.
            MAX_TIME_SCALE (float): Upper bound used by the interactive speed controls.
            ROTATION_TICKS_PER_DAY (float): Ticks per rotation-period day used to turn
                                            a rotation period into a per-tick speed.
            SPIN_FROM_ELAPSED_TIME (bool): If True, spin angles are derived from
                                           elapsed simulated time (one turn per rotation
                                           period) instead of accumulated per tick.
        """
        DEFAULT_TIME_SCALE = DEFAULT_TIME_SCALE
        MIN_TIME_SCALE = 0.125
        MAX_TIME_SCALE = 5120.0
        ROTATION_TICKS_PER_DAY = ROTATION_TICKS_PER_DAY
        SPIN_FROM_ELAPSED_TIME = False

    # --- Orbit Path Configuration ---
    class Orbit:
        """Configuration for static orbit path sampling.

        Attributes:
            PATH_SEGMENTS (int): Number of segments in each sampled orbit line. The
                                 path holds `PATH_SEGMENTS + 1` points, the last one
                                 closing the loop.
        """
        PATH_SEGMENTS = DEFAULT_PATH_SEGMENTS

    # --- Solar System Data ---
    class SolarSystem:
        """Raw per-body constants in physical units, before scaling.

        Attributes:
            PLANETARY_DATA (Dict[str, Dict]): Keyed by upper-case body name. Each entry
                holds `radius_km`, `rotation_period_days` (negative = retrograde),
                `axial_tilt_deg`, and for orbiting bodies `semi_major_axis_au`,
                `eccentricity` and `orbital_period_days`. The single entry without a
                semi-major axis is the central star. `appearance` is handed to the
                renderer untouched.
        """
        PLANETARY_DATA = {
            'SUN': {
                'radius_km': 696340.0, 'rotation_period_days': 27.0, 'axial_tilt_deg': 7.25,
                'appearance': {'color': (255, 204, 51), 'texture_map': '2k_sun.jpg', 'glow': True}
            },
            'MERCURY': {
                'radius_km': 2439.7, 'rotation_period_days': 58.6, 'axial_tilt_deg': 0.034,
                'semi_major_axis_au': 0.387, 'eccentricity': 0.206, 'orbital_period_days': 88.0,
                'appearance': {'color': (169, 169, 169), 'texture_map': 'celestial_maps/mercurymap.jpg'}
            },
            'VENUS': {
                'radius_km': 6051.8, 'rotation_period_days': -243.0, 'axial_tilt_deg': 177.4,
                'semi_major_axis_au': 0.723, 'eccentricity': 0.007, 'orbital_period_days': 224.7,
                'appearance': {'color': (255, 198, 73), 'texture_map': 'celestial_maps/venusmap.jpg'}
            },
            'EARTH': {
                'radius_km': 6371.0, 'rotation_period_days': 1.0, 'axial_tilt_deg': 23.44,
                'semi_major_axis_au': 1.0, 'eccentricity': 0.017, 'orbital_period_days': 365.25,
                'appearance': {'color': (100, 149, 237), 'texture_map': 'celestial_maps/earthmap1k.jpg'}
            },
            'MARS': {
                'radius_km': 3389.5, 'rotation_period_days': 1.03, 'axial_tilt_deg': 25.19,
                'semi_major_axis_au': 1.524, 'eccentricity': 0.093, 'orbital_period_days': 687.0,
                'appearance': {'color': (193, 68, 14), 'texture_map': 'celestial_maps/mars_1k_color.jpg'}
            },
            'JUPITER': {
                'radius_km': 69911.0, 'rotation_period_days': 0.41, 'axial_tilt_deg': 3.13,
                'semi_major_axis_au': 5.203, 'eccentricity': 0.048, 'orbital_period_days': 4333.0,
                'appearance': {'color': (200, 160, 120), 'texture_map': 'celestial_maps/jupiter2_1k.jpg'}
            },
            'SATURN': {
                'radius_km': 58232.0, 'rotation_period_days': 0.44, 'axial_tilt_deg': 26.73,
                'semi_major_axis_au': 9.537, 'eccentricity': 0.054, 'orbital_period_days': 10759.0,
                'appearance': {'color': (234, 214, 184), 'texture_map': 'celestial_maps/2k_saturn.jpg'}
            },
            'URANUS': {
                'radius_km': 25362.0, 'rotation_period_days': -0.72, 'axial_tilt_deg': 97.77,
                'semi_major_axis_au': 19.191, 'eccentricity': 0.047, 'orbital_period_days': 30687.0,
                'appearance': {'color': (155, 221, 221), 'texture_map': 'celestial_maps/2k_uranus.jpg'}
            },
            'NEPTUNE': {
                'radius_km': 24622.0, 'rotation_period_days': 0.67, 'axial_tilt_deg': 28.32,
                'semi_major_axis_au': 30.069, 'eccentricity': 0.009, 'orbital_period_days': 60190.0,
                'appearance': {'color': (63, 81, 181), 'texture_map': 'celestial_maps/neptunemap.jpg'}
            }
        }

    # --- Scene Presets ---
    class Scenes:
        """Named body line-ups that can be composed into a scene.

        Attributes:
            DEFAULT (str): Preset used when none is requested.
            PRESETS (Dict[str, List[str]]): Preset name -> body names in draw order.
        """
        DEFAULT = 'full'
        PRESETS = {
            'full': ['SUN', 'MERCURY', 'VENUS', 'EARTH', 'MARS', 'JUPITER', 'SATURN', 'URANUS', 'NEPTUNE'],
            'inner': ['SUN', 'MERCURY', 'VENUS', 'EARTH', 'MARS'],
            'outer': ['SUN', 'JUPITER', 'SATURN', 'URANUS', 'NEPTUNE'],
        }

    # --- Visualization Configuration ---
    class Visualization:
        """Configuration for the pygame renderer.

        Attributes:
            SCREEN_WIDTH_PX (int): Width of the display window in pixels.
            SCREEN_HEIGHT_PX (int): Height of the display window in pixels.
            FPS (int): Target frames per second; also the fixed tick rate in headless runs.
            PIXELS_PER_UNIT (float): Screen pixels per scene unit at zoom 1.0.
            BODY_RADIUS_EXAGGERATION (float): Multiplier applied to body radii on screen.
            MIN_BODY_RADIUS_PX (int): Smallest drawn body radius.
            MIN_ZOOM (float): Lower zoom clamp.
            MAX_ZOOM (float): Upper zoom clamp.
            STAR_COUNT (int): Number of background stars.
            SHOW_ORBITS (bool): Draw sampled orbit paths at startup.
            SHOW_SPIN_INDICATORS (bool): Draw a marker line showing each body's spin angle.
            GLOW_COLOR (Tuple[int, int, int]): Additive glow colour around the star.
            GLOW_RADIUS_FACTOR (float): Glow radius relative to the star's drawn radius.
            BACKGROUND_COLOR (Tuple[int, int, int]): Clear colour.
            ORBIT_LINE_COLOR (Tuple[int, int, int]): Orbit path colour.
            LABEL_COLOR (Tuple[int, int, int]): Body label and HUD text colour.
        """
        SCREEN_WIDTH_PX = 1400
        SCREEN_HEIGHT_PX = 900
        FPS = 60
        PIXELS_PER_UNIT = 14.0
        BODY_RADIUS_EXAGGERATION = 6.0
        MIN_BODY_RADIUS_PX = 2
        MIN_ZOOM = 0.05
        MAX_ZOOM = 200.0
        STAR_COUNT = 1000
        SHOW_ORBITS = True
        SHOW_SPIN_INDICATORS = True
        GLOW_COLOR = (255, 255, 153)
        GLOW_RADIUS_FACTOR = 1.2
        BACKGROUND_COLOR = (0, 0, 0)
        ORBIT_LINE_COLOR = (68, 68, 68)
        LABEL_COLOR = (220, 220, 220)

    # --- Monitoring Configuration ---
    class Monitoring:
        """Configuration for system resource monitoring.

        Attributes:
            MEMORY_USAGE_WARN_MB (int): Memory usage threshold in Megabytes. If exceeded,
                                        a warning is logged.
            MEMORY_CHECK_INTERVAL_TICKS (int): Frequency (in ticks) at which memory usage
                                               is checked.
        """
        MEMORY_USAGE_WARN_MB = 1024
        MEMORY_CHECK_INTERVAL_TICKS = 600

    # --- Debug Configuration ---
    class Debug:
        """Configuration for debugging features and logging verbosity.

        Attributes:
            DEBUG_MODE (bool): Master toggle; sets the root logger to DEBUG when enabled.
            LOG_ORBIT_INTERVAL_TICKS (int): Frequency (ticks) for logging body positions.
            LOG_ORBIT_BODY_NAMES (List[str]): Names of bodies whose positions are logged.
        """
        DEBUG_MODE = False
        LOG_ORBIT_INTERVAL_TICKS = 600
        LOG_ORBIT_BODY_NAMES = ["SUN", "EARTH"]

    def __init__(self):
        """Initializes the `SimulationConfig` instance and validates it.

        Raises:
            ConfigurationError: If `self.validate()` detects any issues with the
                                configuration settings.
        """
        if self.Debug.DEBUG_MODE:
            logging.getLogger().setLevel(logging.DEBUG)
        self.validate()

    def validate(self):
        """Validates the configuration for consistency and correctness.

        Checks scale factors, time settings, orbit sampling resolution, the
        structure of `SolarSystem.PLANETARY_DATA` (exactly one central body, every
        orbiting body carrying a semi-major axis, eccentricity and orbital period),
        scene presets, visualization and monitoring settings. Numeric validation of
        individual body constants happens again, more strictly, when the catalog
        builds its `BodyConstants`.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        # Scale checks
        for name in ('AU_KM', 'SUN_SCALE_FACTOR', 'SCALE_FACTOR', 'ORBIT_SCALE_FACTOR'):
            value = getattr(self.Scale, name)
            if not (math.isfinite(value) and value > 0):
                raise ConfigurationError(f"Scale.{name} must be a positive finite number, got {value}.")

        # Time checks
        if not (math.isfinite(self.Time.DEFAULT_TIME_SCALE) and self.Time.DEFAULT_TIME_SCALE >= 0):
            raise ConfigurationError(f"Time.DEFAULT_TIME_SCALE ({self.Time.DEFAULT_TIME_SCALE}) must be finite and >= 0.")
        if not (0 < self.Time.MIN_TIME_SCALE <= self.Time.MAX_TIME_SCALE):
            raise ConfigurationError(
                f"Time scale bounds invalid: MIN_TIME_SCALE ({self.Time.MIN_TIME_SCALE}) "
                f"must be > 0 and <= MAX_TIME_SCALE ({self.Time.MAX_TIME_SCALE})."
            )
        if self.Time.ROTATION_TICKS_PER_DAY <= 0:
            raise ConfigurationError("Time.ROTATION_TICKS_PER_DAY must be positive.")

        # Orbit sampling
        if not (isinstance(self.Orbit.PATH_SEGMENTS, int) and self.Orbit.PATH_SEGMENTS >= 1):
            raise ConfigurationError(f"Orbit.PATH_SEGMENTS ({self.Orbit.PATH_SEGMENTS}) must be a positive integer.")

        # Solar System Data Validation
        data = self.SolarSystem.PLANETARY_DATA
        if not data:
            raise ConfigurationError("SolarSystem.PLANETARY_DATA must not be empty.")
        central_bodies = [name for name, body in data.items() if body.get('semi_major_axis_au') is None]
        if len(central_bodies) != 1:
            raise ConfigurationError(
                f"PLANETARY_DATA must define exactly one central body (no semi_major_axis_au), found {central_bodies}."
            )
        for name, body in data.items():
            if name != name.upper():
                raise ConfigurationError(f"Body name '{name}' must be upper-case.")
            for key in ('radius_km', 'rotation_period_days', 'axial_tilt_deg'):
                if body.get(key) is None:
                    raise ConfigurationError(f"Celestial body '{name}' is missing '{key}'.")
            if body.get('semi_major_axis_au') is not None:
                for key in ('eccentricity', 'orbital_period_days'):
                    if body.get(key) is None:
                        raise ConfigurationError(f"Orbiting body '{name}' is missing '{key}'.")

        # Scene presets
        if self.Scenes.DEFAULT not in self.Scenes.PRESETS:
            raise ConfigurationError(f"Scenes.DEFAULT '{self.Scenes.DEFAULT}' is not a defined preset.")
        for preset, names in self.Scenes.PRESETS.items():
            unknown = [n for n in names if n not in data]
            if unknown:
                raise ConfigurationError(f"Scene preset '{preset}' references unknown bodies: {unknown}.")
            if len(set(names)) != len(names):
                raise ConfigurationError(f"Scene preset '{preset}' lists a body more than once.")

        # Visualization
        if self.Visualization.SCREEN_WIDTH_PX <= 0 or self.Visualization.SCREEN_HEIGHT_PX <= 0:
            raise ConfigurationError("Visualization screen dimensions (SCREEN_WIDTH_PX, SCREEN_HEIGHT_PX) must be positive.")
        if self.Visualization.FPS <= 0:
            raise ConfigurationError("Visualization.FPS must be positive.")
        if not (0 < self.Visualization.MIN_ZOOM <= self.Visualization.MAX_ZOOM):
            raise ConfigurationError("Visualization zoom bounds must satisfy 0 < MIN_ZOOM <= MAX_ZOOM.")
        if self.Visualization.PIXELS_PER_UNIT <= 0:
            raise ConfigurationError("Visualization.PIXELS_PER_UNIT must be positive.")

        # Monitoring / Debug
        if self.Monitoring.MEMORY_CHECK_INTERVAL_TICKS <= 0 or self.Debug.LOG_ORBIT_INTERVAL_TICKS <= 0:
            raise ConfigurationError("Monitoring and debug logging intervals must be positive.")

        logging.info("Configuration validated successfully.")


# --- Instantiate the configuration ---
# This makes the config object available for import and runs validation.
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
