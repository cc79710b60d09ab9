"""
PowerAttr Report Consumers

Folds an AttributionReport into the long-lived structures a caller keeps:
the live battery usage stats builder and the legacy sipper list.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from powerattr.core.schema import (
    AttributionReport,
    AttributionResult,
    ConsumerComponent,
    DrainType,
)
from powerattr.core.utils import format_charge


logger = logging.getLogger(__name__)


@dataclass
class UidBatteryConsumerBuilder:
    """Per-uid battery consumer under construction."""

    uid: int
    usage_duration_ms: Dict[ConsumerComponent, int] = field(default_factory=dict)
    consumed_power_mah: Dict[ConsumerComponent, float] = field(default_factory=dict)
    excluded: bool = False

    def set_usage_duration_millis(self, component: ConsumerComponent, duration_ms: int):
        self.usage_duration_ms[component] = duration_ms
        return self

    def set_consumed_power(self, component: ConsumerComponent, power_mah: float):
        self.consumed_power_mah[component] = power_mah
        return self

    def exclude_from_battery_usage_stats(self) -> None:
        self.excluded = True


@dataclass
class SystemBatteryConsumerBuilder:
    """Battery consumer for a system drain such as the WiFi subsystem."""

    drain_type: DrainType
    usage_duration_ms: Dict[ConsumerComponent, int] = field(default_factory=dict)
    consumed_power_mah: Dict[ConsumerComponent, float] = field(default_factory=dict)
    uid_consumers: List[UidBatteryConsumerBuilder] = field(default_factory=list)

    def set_usage_duration_millis(self, component: ConsumerComponent, duration_ms: int):
        self.usage_duration_ms[component] = duration_ms
        return self

    def set_consumed_power(self, component: ConsumerComponent, power_mah: float):
        self.consumed_power_mah[component] = power_mah
        return self

    def add_uid_battery_consumer(self, consumer: UidBatteryConsumerBuilder) -> None:
        self.uid_consumers.append(consumer)


class BatteryUsageStatsBuilder:
    """Collects uid and system consumers for a live usage view."""

    def __init__(self):
        self.uid_builders: Dict[int, UidBatteryConsumerBuilder] = {}
        self.system_builders: Dict[DrainType, SystemBatteryConsumerBuilder] = {}

    def get_or_create_uid_battery_consumer_builder(self, uid: int) -> UidBatteryConsumerBuilder:
        if uid not in self.uid_builders:
            self.uid_builders[uid] = UidBatteryConsumerBuilder(uid=uid)
        return self.uid_builders[uid]

    def get_or_create_system_battery_consumer_builder(
        self, drain_type: DrainType
    ) -> SystemBatteryConsumerBuilder:
        if drain_type not in self.system_builders:
            self.system_builders[drain_type] = SystemBatteryConsumerBuilder(drain_type=drain_type)
        return self.system_builders[drain_type]

    def included_uids(self) -> List[int]:
        return sorted(uid for uid, b in self.uid_builders.items() if not b.excluded)


def apply_to_usage_stats(report: AttributionReport, builder: BatteryUsageStatsBuilder) -> None:
    """
    Write a report into a usage stats builder.

    Aggregated uids keep their own WiFi figures but are moved under the
    WiFi system consumer and excluded from the per-app list. The system
    consumer reports the remainder, which already covers them.
    """
    system = builder.get_or_create_system_battery_consumer_builder(DrainType.WIFI)

    for uid, result in report.entities.items():
        app = builder.uid_builders.get(uid)
        if app is None:
            continue
        app.set_usage_duration_millis(ConsumerComponent.WIFI, result.duration_ms)
        app.set_consumed_power(ConsumerComponent.WIFI, result.energy_mah)

    for uid in report.aggregated_uids:
        app = builder.uid_builders.get(uid)
        if app is None:
            continue
        own = report.aggregated.get(uid)
        if own is not None:
            app.set_usage_duration_millis(ConsumerComponent.WIFI, own.duration_ms)
            app.set_consumed_power(ConsumerComponent.WIFI, own.energy_mah)
        system.add_uid_battery_consumer(app)
        app.exclude_from_battery_usage_stats()

    system.set_usage_duration_millis(ConsumerComponent.WIFI, report.remainder.duration_ms)
    system.set_consumed_power(ConsumerComponent.WIFI, report.remainder.energy_mah)


@dataclass
class PowerSipper:
    """Entry in the legacy per-drain battery usage list."""

    drain_type: DrainType
    uid: Optional[int] = None

    wifi_power_mah: float = 0.0
    wifi_running_time_ms: int = 0
    wifi_rx_packets: int = 0
    wifi_tx_packets: int = 0
    wifi_rx_bytes: int = 0
    wifi_tx_bytes: int = 0

    # Charge from components this calculator does not own
    other_power_mah: float = 0.0

    is_aggregated: bool = False
    members: List["PowerSipper"] = field(default_factory=list)

    def sum_power(self) -> float:
        return self.wifi_power_mah + self.other_power_mah

    def add(self, other: "PowerSipper") -> None:
        """Fold another sipper's non-WiFi usage into this one.

        WiFi charge is not summed: the remainder already covers it.
        """
        self.other_power_mah += other.other_power_mah
        self.members.append(other)


def _set_wifi_usage(sipper: PowerSipper, result: AttributionResult) -> None:
    sipper.wifi_power_mah = result.energy_mah
    sipper.wifi_running_time_ms = result.duration_ms
    sipper.wifi_rx_packets = result.rx_packets
    sipper.wifi_tx_packets = result.tx_packets
    sipper.wifi_rx_bytes = result.rx_bytes
    sipper.wifi_tx_bytes = result.tx_bytes


def apply_to_sippers(report: AttributionReport, sippers: List[PowerSipper]) -> Optional[PowerSipper]:
    """
    Write a report into a legacy sipper list.

    The WiFi sipper is appended to ``sippers`` and returned only when it
    carries some charge; otherwise None is returned.
    """
    wifi = PowerSipper(drain_type=DrainType.WIFI)
    aggregated = set(report.aggregated_uids)

    for app in sippers:
        if app.drain_type is not DrainType.APP:
            continue

        if app.uid in aggregated:
            logger.debug(f"WiFi adding sipper uid={app.uid}")
            own = report.aggregated.get(app.uid)
            if own is not None:
                _set_wifi_usage(app, own)
            app.is_aggregated = True
            wifi.add(app)
            continue

        result = report.entities.get(app.uid)
        if result is None:
            continue
        _set_wifi_usage(app, result)

    wifi.wifi_running_time_ms += report.remainder.duration_ms
    wifi.wifi_power_mah += report.remainder.energy_mah

    if wifi.sum_power() > 0:
        sippers.append(wifi)
        logger.debug(f"WiFi sipper power: {format_charge(wifi.sum_power())}")
        return wifi
    return None
