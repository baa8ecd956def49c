"""Runtime settings read from the environment.

Entry points call ``load_dotenv()`` first, so a ``.env`` file in the working
directory can supply any of these:

    GLOBECLOCK_TIMEZONES     Timezone GeoJSON path or URL
    GLOBECLOCK_ZONE_PROPERTY Feature property holding the UTC offset
    GLOBECLOCK_EARTH_RADIUS  Globe radius in scene units
    GLOBECLOCK_AXIAL_TILT    Static globe tilt in radians
    GLOBECLOCK_HTTP_TIMEOUT  Dataset download timeout in seconds
    GLOBECLOCK_LOG_LEVEL     Logging level name
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from globeclock.globe import AXIAL_TILT_RAD, EARTH_RADIUS
from globeclock.timezones import DEFAULT_ZONE_PROPERTY

_ROOT = Path(__file__).parent.parent.parent
DEFAULT_TIMEZONES_PATH = _ROOT / "resources" / "timezones.geojson"


class ConfigError(ValueError):
    """An environment setting has an unusable value."""


@dataclass(frozen=True)
class Settings:
    timezones_source: str
    zone_property: str = DEFAULT_ZONE_PROPERTY
    earth_radius: float = EARTH_RADIUS
    axial_tilt_rad: float = AXIAL_TILT_RAD
    http_timeout: float = 10.0
    log_level: int = logging.INFO


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e


def _log_level(raw: str) -> int:
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ConfigError(f"GLOBECLOCK_LOG_LEVEL is not a logging level: {raw!r}")
    return level


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``environ`` (defaults to ``os.environ``).

    Raises:
        ConfigError: On a non-numeric number, a non-positive radius or
            timeout, or an unknown log level.
    """
    env = os.environ if environ is None else environ

    radius = _float(env, "GLOBECLOCK_EARTH_RADIUS", EARTH_RADIUS)
    if radius <= 0:
        raise ConfigError(f"GLOBECLOCK_EARTH_RADIUS must be positive, got {radius}")
    timeout = _float(env, "GLOBECLOCK_HTTP_TIMEOUT", 10.0)
    if timeout <= 0:
        raise ConfigError(f"GLOBECLOCK_HTTP_TIMEOUT must be positive, got {timeout}")

    return Settings(
        timezones_source=env.get("GLOBECLOCK_TIMEZONES") or str(DEFAULT_TIMEZONES_PATH),
        zone_property=env.get("GLOBECLOCK_ZONE_PROPERTY") or DEFAULT_ZONE_PROPERTY,
        earth_radius=radius,
        axial_tilt_rad=_float(env, "GLOBECLOCK_AXIAL_TILT", AXIAL_TILT_RAD),
        http_timeout=timeout,
        log_level=_log_level(env.get("GLOBECLOCK_LOG_LEVEL") or "INFO"),
    )
