"""
PowerAttr Attribution Module

Converts WiFi usage counters into per-uid energy estimates and reconciles
them against system-wide counters.
"""

from .estimator import UsageBasedPowerEstimator

from .power_profile import (
    CalibrationProfile,
    PowerProfileLoader,
    load_profile,
)

from .attribution_engine import PowerAttributionEngine

from .consumers import (
    BatteryUsageStatsBuilder,
    UidBatteryConsumerBuilder,
    SystemBatteryConsumerBuilder,
    PowerSipper,
    apply_to_usage_stats,
    apply_to_sippers,
)

__all__ = [
    # Estimator
    "UsageBasedPowerEstimator",
    # Profile
    "CalibrationProfile",
    "PowerProfileLoader",
    "load_profile",
    # Engine
    "PowerAttributionEngine",
    # Consumers
    "BatteryUsageStatsBuilder",
    "UidBatteryConsumerBuilder",
    "SystemBatteryConsumerBuilder",
    "PowerSipper",
    "apply_to_usage_stats",
    "apply_to_sippers",
]
