"""Infrastructure layer for the refresh balancer.

Re-exports the configuration surface for convenience::

    from refresh_balancer.infrastructure import AnalyzerConfig, load_config

The wire serializer, the API record adapter and the JSON/YAML helpers live
in :mod:`~refresh_balancer.infrastructure.wire`,
:mod:`~refresh_balancer.infrastructure.records` and
:mod:`~refresh_balancer.infrastructure.serialization`; import them from
there.
"""

from refresh_balancer.infrastructure.config import (
    DEFAULT_HEALTH_THRESHOLDS,
    DEFAULT_TIMEZONE,
    TIMEZONE_ENV_VAR,
    AnalyzerConfig,
    BandThreshold,
    band_for,
    load_config,
    load_config_from_json,
    load_config_from_yaml,
)

__all__ = [
    "DEFAULT_HEALTH_THRESHOLDS",
    "DEFAULT_TIMEZONE",
    "TIMEZONE_ENV_VAR",
    "AnalyzerConfig",
    "BandThreshold",
    "band_for",
    "load_config",
    "load_config_from_json",
    "load_config_from_yaml",
]
