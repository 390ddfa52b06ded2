"""Configuration dataclasses for the refresh balancer.

Each config is a frozen ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid values.  File loaders wrap those failures, and any
parse failure, in :class:`ConfigurationError`.

The health-metric band thresholds are a lookup table keyed by metric name
(:data:`DEFAULT_HEALTH_THRESHOLDS`) so they can be tuned without touching the
metric code.
"""

from __future__ import annotations

import datetime
import json
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from refresh_balancer.domain.enums import HealthBand
from refresh_balancer.domain.exceptions import ConfigurationError

TIMEZONE_ENV_VAR = "REFRESH_BALANCER_TIMEZONE"
DEFAULT_TIMEZONE = "America/Chicago"


# ===================================================================== #
#  Health band thresholds                                                #
# ===================================================================== #

@dataclass(frozen=True)
class BandThreshold:
    """Green/yellow cut-offs for one metric.

    Attributes
    ----------
    green:
        Boundary of the green band (inclusive).
    yellow:
        Boundary of the yellow band (inclusive).  Anything beyond is red.
    higher_is_better:
        ``True`` when larger values are healthier (``value >= green`` is
        green); ``False`` when smaller values are healthier.
    """

    green: float
    yellow: float
    higher_is_better: bool = True

    def validate(self) -> None:
        if self.higher_is_better and self.green < self.yellow:
            raise ValueError(
                f"green ({self.green}) must be >= yellow ({self.yellow}) "
                "when higher is better"
            )
        if not self.higher_is_better and self.green > self.yellow:
            raise ValueError(
                f"green ({self.green}) must be <= yellow ({self.yellow}) "
                "when lower is better"
            )

    def band(self, value: float) -> HealthBand:
        if self.higher_is_better:
            if value >= self.green:
                return HealthBand.GREEN
            if value >= self.yellow:
                return HealthBand.YELLOW
            return HealthBand.RED
        if value <= self.green:
            return HealthBand.GREEN
        if value <= self.yellow:
            return HealthBand.YELLOW
        return HealthBand.RED

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BandThreshold:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        threshold = cls(**filtered)
        threshold.validate()
        return threshold


DEFAULT_HEALTH_THRESHOLDS: Mapping[str, BandThreshold] = {
    "load_balance_score": BandThreshold(green=75, yellow=50, higher_is_better=True),
    "peak_avg_ratio": BandThreshold(green=1.8, yellow=3.0, higher_is_better=False),
    "utilization": BandThreshold(green=60, yellow=40, higher_is_better=True),
    "busy_window_pct": BandThreshold(green=20, yellow=35, higher_is_better=False),
}


def band_for(
    metric_name: str,
    value: float,
    thresholds: Mapping[str, BandThreshold] | None = None,
) -> HealthBand:
    """Band *value* using the threshold registered for *metric_name*.

    Raises ``KeyError`` if no threshold exists for the metric.
    """
    table = DEFAULT_HEALTH_THRESHOLDS if thresholds is None else thresholds
    return table[metric_name].band(value)


# ===================================================================== #
#  Analyzer Configuration                                                #
# ===================================================================== #

@dataclass(frozen=True)
class AnalyzerConfig:
    """Parameters of one analysis run.

    Attributes
    ----------
    timezone:
        IANA zone treated as site-local time.  Used only to pick the current
        month for the calendar; schedule times are never converted.
    peak_hour_count:
        Number of peak hours reported.
    quiet_hour_count:
        Number of quiet hours reported.
    business_hours_start:
        First hour (inclusive) of the business-hours window.
    business_hours_end:
        Last hour (exclusive) of the business-hours window.
    health_thresholds:
        Band thresholds keyed by metric name.
    """

    timezone: str = DEFAULT_TIMEZONE
    peak_hour_count: int = 3
    quiet_hour_count: int = 3
    business_hours_start: int = 8
    business_hours_end: int = 18
    health_thresholds: dict[str, BandThreshold] = field(
        default_factory=lambda: dict(DEFAULT_HEALTH_THRESHOLDS)
    )

    def __post_init__(self) -> None:
        if self.health_thresholds is None:
            object.__setattr__(self, "health_thresholds", dict(DEFAULT_HEALTH_THRESHOLDS))

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"timezone must be a valid IANA zone name, got {self.timezone!r}") from None
        if self.peak_hour_count < 1:
            raise ValueError(f"peak_hour_count must be >= 1, got {self.peak_hour_count}")
        if self.quiet_hour_count < 1:
            raise ValueError(f"quiet_hour_count must be >= 1, got {self.quiet_hour_count}")
        if not 0 <= self.business_hours_start < self.business_hours_end <= 24:
            raise ValueError(
                "business hours must satisfy 0 <= start < end <= 24, got "
                f"{self.business_hours_start}..{self.business_hours_end}"
            )
        missing = set(DEFAULT_HEALTH_THRESHOLDS) - set(self.health_thresholds)
        if missing:
            raise ValueError(f"health_thresholds missing metrics: {sorted(missing)}")
        for threshold in self.health_thresholds.values():
            threshold.validate()

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def current_year_month(self, now: datetime.datetime | None = None) -> tuple[int, int]:
        """``(year, month)`` of *now* (default: the current instant) in site-local time."""
        moment = now or datetime.datetime.now(datetime.timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=datetime.timezone.utc)
        local = moment.astimezone(self.zone)
        return local.year, local.month

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnalyzerConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        overrides = filtered.pop("health_thresholds", None) or {}
        thresholds = dict(DEFAULT_HEALTH_THRESHOLDS)
        for name, value in overrides.items():
            thresholds[name] = value if isinstance(value, BandThreshold) else BandThreshold.from_dict(value)
        cfg = cls(health_thresholds=thresholds, **filtered)
        cfg.validate()
        return cfg

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AnalyzerConfig:
        """Defaults, with the timezone taken from ``REFRESH_BALANCER_TIMEZONE`` if set."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        if env.get(TIMEZONE_ENV_VAR):
            data["timezone"] = env[TIMEZONE_ENV_VAR]
        return cls.from_dict(data)


# ===================================================================== #
#  Config loaders                                                        #
# ===================================================================== #

_SECTION = "analyzer"


def _config_from_mapping(raw: Any, source: str) -> AnalyzerConfig:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Top-level configuration must be an object", source=source)
    section = raw.get(_SECTION, raw)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{_SECTION}' section must be an object", source=source)
    try:
        return AnalyzerConfig.from_dict(section)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(str(exc), source=source) from exc


def load_config_from_json(json_str: str, source: str = "<json>") -> AnalyzerConfig:
    """Parse a JSON document into an :class:`AnalyzerConfig`.

    The document may hold the fields at top level or under an ``analyzer``
    section.  Unknown keys are ignored.
    """
    try:
        raw = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON: {exc}", source=source) from exc
    return _config_from_mapping(raw, source)


def load_config_from_yaml(yaml_str: str, source: str = "<yaml>") -> AnalyzerConfig:
    """Parse a YAML document into an :class:`AnalyzerConfig`."""
    try:
        raw = yaml.safe_load(yaml_str)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML: {exc}", source=source) from exc
    return _config_from_mapping(raw, source)


def load_config(path: str | Path) -> AnalyzerConfig:
    """Load a ``.json``, ``.yaml`` or ``.yml`` config file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file: {exc}", source=str(path)) from exc
    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_config_from_json(text, source=str(path))
    if suffix in (".yaml", ".yml"):
        return load_config_from_yaml(text, source=str(path))
    raise ConfigurationError(
        f"Unsupported config format {suffix!r}; use .json, .yaml or .yml", source=str(path)
    )
