# celestial_catalog.py
import math
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from config import ConfigurationError


class NotFoundError(LookupError):
    """Raised when a catalog or scene is queried for a body it does not hold."""
    pass


def _optional_float(value, field_name: str, body_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Field '{field_name}' of body '{body_name}' must be a number, got {value!r}.")
    if not math.isfinite(number):
        raise ConfigurationError(f"Field '{field_name}' of body '{body_name}' must be finite, got {number}.")
    return number


@dataclass(frozen=True)
class UnitScale:
    """Conversion factors from physical units to scene units.

    Attributes:
        au_km (float): Kilometers per astronomical unit.
        sun_scale_factor (float): Scene units per km applied to the central star's radius.
        scale_factor (float): Scene units per km applied to every other radius.
        orbit_scale_factor (float): Scene units per AU applied to semi-major axes.
    """
    au_km: float
    sun_scale_factor: float
    scale_factor: float
    orbit_scale_factor: float

    def __post_init__(self):
        for name in ('au_km', 'sun_scale_factor', 'scale_factor', 'orbit_scale_factor'):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise ConfigurationError(f"UnitScale.{name} must be a positive finite number, got {value}.")

    @classmethod
    def from_config(cls, cfg) -> 'UnitScale':
        return cls(
            au_km=cfg.Scale.AU_KM,
            sun_scale_factor=cfg.Scale.SUN_SCALE_FACTOR,
            scale_factor=cfg.Scale.SCALE_FACTOR,
            orbit_scale_factor=cfg.Scale.ORBIT_SCALE_FACTOR,
        )

    def radius_to_scene(self, radius_km: float, central: bool = False) -> float:
        return radius_km * (self.sun_scale_factor if central else self.scale_factor)

    def distance_to_scene(self, distance_au: float) -> float:
        return distance_au * self.orbit_scale_factor

    def km_to_au(self, distance_km: float) -> float:
        return distance_km / self.au_km


@dataclass(frozen=True)
class BodyConstants:
    """Immutable orbital and rotational constants of one catalog entry.

    Distances are already in scene units. A body without `semi_major_axis` is the
    central, non-orbiting body; it must not define an eccentricity or orbital period
    either. Every field is validated on construction and a `ConfigurationError` is
    raised instead of substituting a default.

    Attributes:
        name (str): Upper-case catalog key.
        radius (float): Scaled body radius, > 0.
        rotation_period (float): Signed rotation period in days; negative is retrograde,
                                 zero means the body does not spin.
        axial_tilt (float): Tilt of the spin axis in degrees.
        semi_major_axis (float | None): Scaled orbit radius, > 0.
        eccentricity (float | None): Orbit eccentricity in [0, 1).
        orbital_period (float | None): Days per revolution, > 0.
    """
    name: str
    radius: float
    rotation_period: float
    axial_tilt: float
    semi_major_axis: Optional[float] = None
    eccentricity: Optional[float] = None
    orbital_period: Optional[float] = None

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Celestial body name must be a non-empty string.")
        name = self.name

        radius = _optional_float(self.radius, 'radius', name)
        if radius is None:
            raise ConfigurationError(f"Celestial body '{name}' is missing its radius.")
        if radius <= 0:
            raise ConfigurationError(f"Radius of celestial body '{name}' must be positive, got {radius}.")

        rotation_period = _optional_float(self.rotation_period, 'rotation_period', name)
        if rotation_period is None:
            raise ConfigurationError(f"Celestial body '{name}' is missing its rotation period.")
        axial_tilt = _optional_float(self.axial_tilt, 'axial_tilt', name)
        if axial_tilt is None:
            raise ConfigurationError(f"Celestial body '{name}' is missing its axial tilt.")

        semi_major_axis = _optional_float(self.semi_major_axis, 'semi_major_axis', name)
        eccentricity = _optional_float(self.eccentricity, 'eccentricity', name)
        orbital_period = _optional_float(self.orbital_period, 'orbital_period', name)

        if semi_major_axis is None:
            if eccentricity is not None or orbital_period is not None:
                raise ConfigurationError(
                    f"Celestial body '{name}' has no semi-major axis but defines an eccentricity or orbital period."
                )
        else:
            if semi_major_axis <= 0:
                raise ConfigurationError(f"Semi-major axis of '{name}' must be positive, got {semi_major_axis}.")
            if orbital_period is None or orbital_period <= 0:
                raise ConfigurationError(f"Orbital period of '{name}' must be positive, got {orbital_period}.")
            if eccentricity is None or not (0.0 <= eccentricity < 1.0):
                raise ConfigurationError(f"Eccentricity of '{name}' ({eccentricity}) must be >= 0 and < 1.")

        # Frozen dataclass: store the normalised floats
        object.__setattr__(self, 'radius', radius)
        object.__setattr__(self, 'rotation_period', rotation_period)
        object.__setattr__(self, 'axial_tilt', axial_tilt)
        object.__setattr__(self, 'semi_major_axis', semi_major_axis)
        object.__setattr__(self, 'eccentricity', eccentricity)
        object.__setattr__(self, 'orbital_period', orbital_period)

    @property
    def is_orbiting(self) -> bool:
        return self.semi_major_axis is not None

    @property
    def is_retrograde(self) -> bool:
        return self.rotation_period < 0


class BodyCatalog:
    """Read-only table of `BodyConstants` keyed by body name.

    The catalog is populated once, from an explicit configuration object or raw
    data mapping, and never mutated afterwards. Lookups are case-insensitive and
    raise `NotFoundError` for unknown names. Exactly one entry must be the central
    (non-orbiting) body.

    Each entry can also carry an appearance descriptor (colour, texture map, glow
    flag). The catalog stores it read-only and never interprets it; it is handed
    through to the renderer.

    Example:
        >>> catalog = BodyCatalog.from_config(config)
        >>> catalog.get("EARTH").orbital_period
        365.25
        >>> catalog.get("PLUTO")
        Traceback (most recent call last):
        NotFoundError: ...
    """

    def __init__(self, bodies: Iterable[BodyConstants], appearances: Optional[Mapping[str, Mapping]] = None):
        entries: Dict[str, BodyConstants] = {}
        for body in bodies:
            key = body.name.upper()
            if key in entries:
                raise ConfigurationError(f"Duplicate catalog entry for body '{key}'.")
            entries[key] = body

        central = [body.name for body in entries.values() if not body.is_orbiting]
        if len(central) != 1:
            raise ConfigurationError(f"Catalog must contain exactly one central body, found {central}.")

        frozen_appearances: Dict[str, Mapping] = {}
        for name, appearance in (appearances or {}).items():
            key = name.upper()
            if key not in entries:
                raise ConfigurationError(f"Appearance given for unknown body '{name}'.")
            frozen_appearances[key] = MappingProxyType(dict(appearance))

        self._entries: Mapping[str, BodyConstants] = MappingProxyType(entries)
        self._appearances: Mapping[str, Mapping] = MappingProxyType(frozen_appearances)
        self._central_name: str = central[0].upper()
        logging.info(f"BodyCatalog initialized with {len(entries)} bodies (central body: {self._central_name}).")

    @classmethod
    def from_planetary_data(cls, planetary_data: Mapping[str, Mapping], unit_scale: UnitScale) -> 'BodyCatalog':
        """Builds a catalog from raw physical-unit entries.

        Args:
            planetary_data: Body name -> dict with `radius_km`, `rotation_period_days`,
                `axial_tilt_deg` and, for orbiting bodies, `semi_major_axis_au`,
                `eccentricity` and `orbital_period_days`. An optional `appearance`
                dict is passed through unchanged.
            unit_scale: Conversion factors applied to radii and distances.

        Raises:
            ConfigurationError: If any entry is missing a field or holds an invalid value.
        """
        bodies = []
        appearances = {}
        for name, raw in planetary_data.items():
            try:
                semi_major_axis_au = raw.get('semi_major_axis_au')
                central = semi_major_axis_au is None
                radius_km = _optional_float(raw.get('radius_km'), 'radius_km', name)
                bodies.append(BodyConstants(
                    name=name.upper(),
                    radius=None if radius_km is None else unit_scale.radius_to_scene(radius_km, central=central),
                    rotation_period=raw.get('rotation_period_days'),
                    axial_tilt=raw.get('axial_tilt_deg'),
                    semi_major_axis=None if central else unit_scale.distance_to_scene(
                        _optional_float(semi_major_axis_au, 'semi_major_axis_au', name)),
                    eccentricity=raw.get('eccentricity'),
                    orbital_period=raw.get('orbital_period_days'),
                ))
            except AttributeError as e_attr:  # entry is not a mapping
                raise ConfigurationError(f"Catalog entry for '{name}' is malformed: {e_attr}")
            if raw.get('appearance') is not None:
                appearances[name] = raw['appearance']
        return cls(bodies, appearances)

    @classmethod
    def from_config(cls, cfg) -> 'BodyCatalog':
        """Builds the catalog from a `SimulationConfig`'s scale and body data."""
        return cls.from_planetary_data(cfg.SolarSystem.PLANETARY_DATA, UnitScale.from_config(cfg))

    def get(self, name: str) -> BodyConstants:
        """Returns the constants for `name`.

        Raises:
            NotFoundError: If the catalog has no such body.
        """
        try:
            return self._entries[str(name).upper()]
        except KeyError:
            raise NotFoundError(f"Celestial body '{name}' is not in the catalog.") from None

    __getitem__ = get

    def appearance(self, name: str) -> Mapping:
        """Returns the read-only appearance descriptor for `name` (empty if none was given)."""
        key = self.get(name).name.upper()
        return self._appearances.get(key, MappingProxyType({}))

    def central_body(self) -> BodyConstants:
        return self._entries[self._central_name]

    def names(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.upper() in self._entries

    def __iter__(self) -> Iterator[BodyConstants]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
