"""
PowerAttr Attribution Engine

Attributes WiFi radio energy to uids for one accounting pass.

Two measurement modes exist. When the controller reports its own idle/tx/rx
time, energy comes from those times. Otherwise it is priced from running
time, scan time and packet counts. The mode is picked once per pass and
passed down explicitly, so entity and global figures always agree on it.
Whatever the global counters show beyond the sum of entities lands in a
single remainder bucket.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from powerattr.core.schema import (
    AttributionReport,
    AttributionResult,
    ControllerActivity,
    CounterSnapshot,
    EntityCounters,
    GlobalCounters,
    MeasurementMode,
    StatsEpoch,
    WIFI_UID,
)
from powerattr.core.utils import format_charge, mams_to_mah, us_to_ms

from .estimator import UsageBasedPowerEstimator
from .power_profile import (
    CalibrationProfile,
    POWER_WIFI_ACTIVE,
    POWER_WIFI_BATCHED_SCAN,
    POWER_WIFI_CONTROLLER_IDLE,
    POWER_WIFI_CONTROLLER_RX,
    POWER_WIFI_CONTROLLER_TX,
    POWER_WIFI_ON,
    POWER_WIFI_SCAN,
)


logger = logging.getLogger(__name__)


class PowerAttributionEngine:
    """
    WiFi power calculator.

    Holds only the calibration-derived estimators; every pass works on its
    own snapshot and returns a fresh report.
    """

    def __init__(
        self,
        profile: CalibrationProfile,
        infrastructure_uids: Iterable[int] = (WIFI_UID,),
        epoch: StatsEpoch = StatsEpoch.SINCE_CHARGED,
    ):
        self.profile = profile
        self.infrastructure_uids = frozenset(infrastructure_uids)
        self.epoch = epoch

        self._power_on = UsageBasedPowerEstimator(profile.get_average_power(POWER_WIFI_ON))
        self._scan = UsageBasedPowerEstimator(profile.get_average_power(POWER_WIFI_SCAN))
        self._batch_scan = UsageBasedPowerEstimator(
            profile.get_average_power(POWER_WIFI_BATCHED_SCAN)
        )
        self._idle = UsageBasedPowerEstimator(
            profile.get_average_power(POWER_WIFI_CONTROLLER_IDLE)
        )
        self._tx = UsageBasedPowerEstimator(profile.get_average_power(POWER_WIFI_CONTROLLER_TX))
        self._rx = UsageBasedPowerEstimator(profile.get_average_power(POWER_WIFI_CONTROLLER_RX))

        self.power_per_packet = self._power_per_packet(profile)

        # Hardware mode needs all three controller states priced
        self.has_power_controller = (
            self._idle.is_supported() and self._tx.is_supported() and self._rx.is_supported()
        )

    @staticmethod
    def _power_per_packet(profile: CalibrationProfile) -> float:
        """Estimated mAh per packet, assuming transfer at the nominal bit rate."""
        packets_per_second = profile.bit_rate_bps / 8 / profile.packet_size_bytes
        if packets_per_second <= 0:
            raise ValueError("Packet rate derived from the power profile must be > 0")
        average_active_power = profile.get_average_power(POWER_WIFI_ACTIVE) / 3600
        return average_active_power / packets_per_second

    def resolve_mode(self, hardware_reporting: bool) -> MeasurementMode:
        """Pick the measurement mode for one pass from the live capability signal."""
        if hardware_reporting and self.has_power_controller:
            return MeasurementMode.HARDWARE
        return MeasurementMode.FALLBACK

    def calculate(self, snapshot: CounterSnapshot) -> AttributionReport:
        """
        Run one accounting pass.

        Args:
            snapshot: Entity and global counters from the same epoch

        Returns:
            AttributionReport with per-uid results and the remainder bucket
        """
        if snapshot.epoch != self.epoch:
            raise ValueError(
                f"Snapshot epoch {snapshot.epoch.value} does not match "
                f"engine epoch {self.epoch.value}"
            )

        mode = self.resolve_mode(snapshot.hardware_reporting)

        results: Dict[int, AttributionResult] = {}
        aggregated: Dict[int, AttributionResult] = {}
        total_duration_ms = 0
        total_energy_mah = 0.0

        for uid, counters in snapshot.entities.items():
            result = self.calculate_entity(counters, mode)

            if uid in self.infrastructure_uids:
                # Left out of the totals so the remainder carries it
                logger.debug(
                    f"WiFi aggregating uid {uid}: power={format_charge(result.energy_mah)}"
                )
                aggregated[uid] = result
                continue

            if result.energy_mah != 0:
                logger.debug(
                    f"UID {uid}: duration={result.duration_ms}ms "
                    f"power={format_charge(result.energy_mah)}"
                )

            results[uid] = result
            total_duration_ms += result.duration_ms
            total_energy_mah += result.energy_mah

        remainder = self.calculate_remainder(
            snapshot.global_counters, mode, total_duration_ms, total_energy_mah
        )

        return AttributionReport(
            mode=mode,
            entities=results,
            remainder=remainder,
            total_entity_duration_ms=total_duration_ms,
            total_entity_energy_mah=total_energy_mah,
            aggregated_uids=tuple(sorted(aggregated)),
            aggregated=aggregated,
        )

    def calculate_entity(self, counters: EntityCounters, mode: MeasurementMode) -> AttributionResult:
        """Duration and energy for a single uid under the given mode."""
        if mode is MeasurementMode.HARDWARE:
            duration_ms, energy_mah = self._controller_usage(counters.controller)
        else:
            duration_ms, energy_mah = self._fallback_usage(counters)

        return AttributionResult(
            duration_ms=duration_ms,
            energy_mah=energy_mah,
            rx_packets=counters.rx_packets,
            tx_packets=counters.tx_packets,
            rx_bytes=counters.rx_bytes,
            tx_bytes=counters.tx_bytes,
        )

    def calculate_remainder(
        self,
        global_counters: GlobalCounters,
        mode: MeasurementMode,
        total_entity_duration_ms: int = 0,
        total_entity_energy_mah: float = 0.0,
    ) -> AttributionResult:
        """Global usage not accounted for by the entity totals, clamped at zero."""
        if mode is MeasurementMode.HARDWARE:
            controller = global_counters.controller
            total_duration_ms, total_energy_mah = self._controller_usage(controller)
            if controller is not None and controller.energy_mams != 0:
                # Prefer the controller's own energy figure when it has one
                total_energy_mah = mams_to_mah(controller.energy_mams)
        else:
            total_duration_ms = us_to_ms(global_counters.global_running_time_us)
            total_energy_mah = self._power_on.calculate_power(total_duration_ms)

        remainder = AttributionResult(
            duration_ms=max(0, total_duration_ms - total_entity_duration_ms),
            energy_mah=max(0.0, total_energy_mah - total_entity_energy_mah),
        )
        logger.debug(f"left over WiFi power: {format_charge(remainder.energy_mah)}")
        return remainder

    def _controller_usage(self, controller: Optional[ControllerActivity]) -> Tuple[int, float]:
        if controller is None:
            return 0, 0.0

        energy_mah = (
            self._idle.calculate_power(controller.idle_time_ms)
            + self._tx.calculate_power(controller.tx_time_ms)
            + self._rx.calculate_power(controller.rx_time_ms)
        )
        return controller.active_time_ms, energy_mah

    def _fallback_usage(self, counters: EntityCounters) -> Tuple[int, float]:
        packet_power = (counters.rx_packets + counters.tx_packets) * self.power_per_packet
        running_time_ms = us_to_ms(counters.running_time_us)
        scan_time_ms = us_to_ms(counters.scan_time_us)
        batch_scan_time_ms = sum(us_to_ms(b) for b in counters.batched_scan_time_us)

        # Scan time is priced but does not count as usage duration
        energy_mah = (
            packet_power
            + self._power_on.calculate_power(running_time_ms)
            + self._scan.calculate_power(scan_time_ms)
            + self._batch_scan.calculate_power(batch_scan_time_ms)
        )
        return running_time_ms, energy_mah

    def describe(self) -> Dict[str, object]:
        """Derived coefficients, for display."""
        return {
            "profile": self.profile.name,
            "has_power_controller": self.has_power_controller,
            "power_per_packet_mah": self.power_per_packet,
            "estimators_ma": {
                "idle": self._idle.average_power_ma,
                "tx": self._tx.average_power_ma,
                "rx": self._rx.average_power_ma,
                "on": self._power_on.average_power_ma,
                "scan": self._scan.average_power_ma,
                "batch_scan": self._batch_scan.average_power_ma,
            },
            "infrastructure_uids": sorted(self.infrastructure_uids),
        }
