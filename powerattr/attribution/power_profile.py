"""
PowerAttr Power Profile

Calibration constants for the WiFi radio, loaded once from YAML.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import yaml


logger = logging.getLogger(__name__)


POWER_WIFI_ON = "wifi.on"
POWER_WIFI_SCAN = "wifi.scan"
POWER_WIFI_BATCHED_SCAN = "wifi.batchedscan"
POWER_WIFI_ACTIVE = "wifi.active"
POWER_WIFI_CONTROLLER_IDLE = "wifi.controller.idle"
POWER_WIFI_CONTROLLER_TX = "wifi.controller.tx"
POWER_WIFI_CONTROLLER_RX = "wifi.controller.rx"

POWER_KEYS = (
    POWER_WIFI_ON,
    POWER_WIFI_SCAN,
    POWER_WIFI_BATCHED_SCAN,
    POWER_WIFI_ACTIVE,
    POWER_WIFI_CONTROLLER_IDLE,
    POWER_WIFI_CONTROLLER_TX,
    POWER_WIFI_CONTROLLER_RX,
)

# Nominal link rate used to price packets when the controller is silent
DEFAULT_BIT_RATE_BPS = 1_000_000
DEFAULT_PACKET_SIZE_BYTES = 2048


@dataclass(frozen=True)
class CalibrationProfile:
    """
    Average current draw (mA) per WiFi power state.

    Keys follow the platform power profile names. A missing key or a value
    of 0 means the device does not measure that state.
    """

    name: str = "default"
    average_power: Mapping[str, float] = field(default_factory=dict)
    bit_rate_bps: int = DEFAULT_BIT_RATE_BPS
    packet_size_bytes: int = DEFAULT_PACKET_SIZE_BYTES

    def __post_init__(self):
        for key, value in self.average_power.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Power for '{key}' must be numeric, got {value!r}")
            if value < 0:
                raise ValueError(f"Power for '{key}' must be >= 0, got {value}")
        for key in ("bit_rate_bps", "packet_size_bytes"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{key} must be numeric, got {value!r}")
            if value <= 0:
                raise ValueError(f"{key} must be > 0, got {value}")
        object.__setattr__(
            self, "average_power", MappingProxyType(dict(self.average_power))
        )

    def get_average_power(self, key: str) -> float:
        return float(self.average_power.get(key, 0.0))

    def with_overrides(self, **average_power: float) -> "CalibrationProfile":
        """Copy of this profile with some coefficients replaced (dots as underscores)."""
        merged = dict(self.average_power)
        for key, value in average_power.items():
            merged[key.replace("_", ".")] = value
        return replace(self, average_power=merged)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "average_power": dict(self.average_power),
            "bit_rate_bps": self.bit_rate_bps,
            "packet_size_bytes": self.packet_size_bytes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CalibrationProfile":
        return cls(
            name=data.get("name", "default"),
            average_power=dict(data.get("average_power", {})),
            bit_rate_bps=data.get("bit_rate_bps", DEFAULT_BIT_RATE_BPS),
            packet_size_bytes=data.get("packet_size_bytes", DEFAULT_PACKET_SIZE_BYTES),
        )


class PowerProfileLoader:
    """
    Builds a CalibrationProfile from defaults plus an optional YAML file.

    The file may hold a ``power_profile:`` section or the same keys at the
    top level::

        power_profile:
          name: pixel
          bit_rate_bps: 1000000
          average_power:
            wifi.on: 3.0
            wifi.controller.idle: 1.0
    """

    DEFAULT_PROFILE = {
        "name": "default",
        "average_power": {
            POWER_WIFI_ON: 3.0,
            POWER_WIFI_SCAN: 100.0,
            POWER_WIFI_BATCHED_SCAN: 2.0,
            POWER_WIFI_ACTIVE: 120.0,
            POWER_WIFI_CONTROLLER_IDLE: 0.0,
            POWER_WIFI_CONTROLLER_TX: 0.0,
            POWER_WIFI_CONTROLLER_RX: 0.0,
        },
        "bit_rate_bps": DEFAULT_BIT_RATE_BPS,
        "packet_size_bytes": DEFAULT_PACKET_SIZE_BYTES,
    }

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path) if config_path else None

    def load(self) -> CalibrationProfile:
        """Load the profile, falling back to defaults when no file is usable."""
        data = {
            **self.DEFAULT_PROFILE,
            "average_power": dict(self.DEFAULT_PROFILE["average_power"]),
        }

        if self.config_path is not None:
            overlay = self._read_config(self.config_path)
            if overlay:
                average_power = overlay.pop("average_power", None) or {}
                if not isinstance(average_power, dict):
                    raise ValueError(f"'average_power' in {self.config_path} must be a mapping")
                data["average_power"].update(average_power)
                data.update(overlay)

        profile = CalibrationProfile.from_dict(data)
        logger.info(
            f"Loaded power profile '{profile.name}' "
            f"({sum(1 for v in profile.average_power.values() if v)} supported states)"
        )
        return profile

    def _read_config(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.warning(f"Power profile not found: {path}, using defaults")
            return {}

        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError(f"Power profile {path} must be a mapping")

        section = config.get("power_profile", config)
        if not isinstance(section, dict):
            raise ValueError(f"'power_profile' in {path} must be a mapping")
        return dict(section)


def load_profile(config_path: Optional[Union[str, Path]] = None) -> CalibrationProfile:
    """Convenience wrapper around PowerProfileLoader."""
    return PowerProfileLoader(config_path).load()
