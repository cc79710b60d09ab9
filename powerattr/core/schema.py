"""
PowerAttr Data Schema Definitions
Dataclasses for counter snapshots, attribution results and reports.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional, Tuple
from enum import Enum


# Batched scan time is tracked in this many bins per uid
NUM_WIFI_BATCHED_SCAN_BINS = 5

# uid of the WiFi driver process
WIFI_UID = 1010


class MeasurementMode(Enum):
    """How energy is derived for one accounting pass."""

    HARDWARE = "hardware"  # controller-reported idle/tx/rx time
    FALLBACK = "fallback"  # running time, scan time and packet counts


class StatsEpoch(Enum):
    """Statistics reset epoch the counters were measured over."""

    SINCE_CHARGED = "since_charged"
    CURRENT = "current"
    SINCE_UNPLUGGED = "since_unplugged"


class DrainType(Enum):
    """Drain categories in the legacy sipper list."""

    APP = "app"
    WIFI = "wifi"


class ConsumerComponent(Enum):
    """Components a battery consumer reports power and duration for."""

    WIFI = "wifi"


@dataclass(frozen=True)
class ControllerActivity:
    """Counters reported by the WiFi controller itself."""

    idle_time_ms: int = 0
    tx_time_ms: int = 0
    rx_time_ms: int = 0
    # 0 means the controller does not report energy
    energy_mams: int = 0

    @property
    def active_time_ms(self) -> int:
        return self.idle_time_ms + self.tx_time_ms + self.rx_time_ms

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ControllerActivity":
        return cls(
            idle_time_ms=int(data.get("idle_time_ms", 0)),
            tx_time_ms=int(data.get("tx_time_ms", 0)),
            rx_time_ms=int(data.get("rx_time_ms", 0)),
            energy_mams=int(data.get("energy_mams", 0)),
        )


@dataclass(frozen=True)
class EntityCounters:
    """Usage counters for one uid over one accounting interval."""

    running_time_us: int = 0
    scan_time_us: int = 0
    batched_scan_time_us: Tuple[int, ...] = (0,) * NUM_WIFI_BATCHED_SCAN_BINS

    rx_packets: int = 0
    tx_packets: int = 0
    rx_bytes: int = 0
    tx_bytes: int = 0

    controller: Optional[ControllerActivity] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["batched_scan_time_us"] = list(self.batched_scan_time_us)
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EntityCounters":
        controller = data.get("controller")
        bins = data.get("batched_scan_time_us") or (0,) * NUM_WIFI_BATCHED_SCAN_BINS
        return cls(
            running_time_us=int(data.get("running_time_us", 0)),
            scan_time_us=int(data.get("scan_time_us", 0)),
            batched_scan_time_us=tuple(int(b) for b in bins),
            rx_packets=int(data.get("rx_packets", 0)),
            tx_packets=int(data.get("tx_packets", 0)),
            rx_bytes=int(data.get("rx_bytes", 0)),
            tx_bytes=int(data.get("tx_bytes", 0)),
            controller=ControllerActivity.from_dict(controller) if controller else None,
        )


@dataclass(frozen=True)
class GlobalCounters:
    """System-wide counters for the same interval as the entity counters."""

    global_running_time_us: int = 0
    controller: Optional[ControllerActivity] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GlobalCounters":
        controller = data.get("controller")
        return cls(
            global_running_time_us=int(data.get("global_running_time_us", 0)),
            controller=ControllerActivity.from_dict(controller) if controller else None,
        )


@dataclass(frozen=True)
class CounterSnapshot:
    """
    One consistent set of counters for an accounting pass.

    Entity and global counters must come from the same epoch, otherwise
    subtracting one from the other is meaningless.
    """

    global_counters: GlobalCounters
    entities: Mapping[int, EntityCounters] = field(default_factory=dict)
    hardware_reporting: bool = False
    epoch: StatsEpoch = StatsEpoch.SINCE_CHARGED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hardware_reporting": self.hardware_reporting,
            "epoch": self.epoch.value,
            "global": self.global_counters.to_dict(),
            "entities": {str(uid): c.to_dict() for uid, c in self.entities.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CounterSnapshot":
        hardware_reporting = data.get("hardware_reporting", False)
        if not isinstance(hardware_reporting, bool):
            raise ValueError(f"hardware_reporting must be true or false, got {hardware_reporting!r}")
        entities = {
            int(uid): EntityCounters.from_dict(counters or {})
            for uid, counters in (data.get("entities") or {}).items()
        }
        return cls(
            global_counters=GlobalCounters.from_dict(data.get("global") or {}),
            entities=entities,
            hardware_reporting=hardware_reporting,
            epoch=StatsEpoch(data.get("epoch", StatsEpoch.SINCE_CHARGED.value)),
        )


@dataclass(frozen=True)
class AttributionResult:
    """Estimated WiFi duration and energy for one entity or bucket."""

    duration_ms: int = 0
    energy_mah: float = 0.0

    # Traffic is kept for reporting; it never feeds hardware-mode energy
    rx_packets: int = 0
    tx_packets: int = 0
    rx_bytes: int = 0
    tx_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AttributionReport:
    """Output of one accounting pass."""

    mode: MeasurementMode
    entities: Mapping[int, AttributionResult]
    remainder: AttributionResult
    total_entity_duration_ms: int = 0
    total_entity_energy_mah: float = 0.0

    # uids whose consumption is carried by the remainder bucket
    aggregated_uids: Tuple[int, ...] = ()
    # Their own figures, for display only; never part of the totals
    aggregated: Mapping[int, AttributionResult] = field(default_factory=dict)

    @property
    def total_energy_mah(self) -> float:
        return self.total_entity_energy_mah + self.remainder.energy_mah

    def top_entities(self, n: int = 10) -> List[Tuple[int, AttributionResult]]:
        """Entities sorted by descending energy."""
        ranked = sorted(self.entities.items(), key=lambda kv: kv[1].energy_mah, reverse=True)
        return ranked[:n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "entities": {str(uid): r.to_dict() for uid, r in self.entities.items()},
            "remainder": self.remainder.to_dict(),
            "total_entity_duration_ms": self.total_entity_duration_ms,
            "total_entity_energy_mah": self.total_entity_energy_mah,
            "aggregated_uids": list(self.aggregated_uids),
            "aggregated": {str(uid): r.to_dict() for uid, r in self.aggregated.items()},
        }
