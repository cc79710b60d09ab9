"""
PowerAttr - WiFi Power Attribution

Per-uid energy attribution for a mobile device's WiFi radio, from
controller activity counters or a duration/packet cost model.

Licensed under the MIT License.
"""

__version__ = "1.0.0"

from powerattr.core.schema import (
    ControllerActivity,
    EntityCounters,
    GlobalCounters,
    CounterSnapshot,
    AttributionResult,
    AttributionReport,
    MeasurementMode,
    StatsEpoch,
    WIFI_UID,
)

from powerattr.attribution import (
    UsageBasedPowerEstimator,
    CalibrationProfile,
    PowerProfileLoader,
    load_profile,
    PowerAttributionEngine,
    BatteryUsageStatsBuilder,
    PowerSipper,
    apply_to_usage_stats,
    apply_to_sippers,
)

__all__ = [
    # Schema
    "ControllerActivity",
    "EntityCounters",
    "GlobalCounters",
    "CounterSnapshot",
    "AttributionResult",
    "AttributionReport",
    "MeasurementMode",
    "StatsEpoch",
    "WIFI_UID",
    # Attribution
    "UsageBasedPowerEstimator",
    "CalibrationProfile",
    "PowerProfileLoader",
    "load_profile",
    "PowerAttributionEngine",
    "BatteryUsageStatsBuilder",
    "PowerSipper",
    "apply_to_usage_stats",
    "apply_to_sippers",
    # Version
    "__version__",
]
