"""
PowerAttr Usage-Based Power Estimator

Linear model converting time spent in a power state into charge.
"""

from powerattr.core.utils import MS_PER_HOUR


class UsageBasedPowerEstimator:
    """
    Estimates charge as ``average_power_ma * duration``.

    An average power of 0 marks the state as not measurable on this device.
    """

    def __init__(self, average_power_ma: float):
        self.average_power_ma = average_power_ma

    def is_supported(self) -> bool:
        return self.average_power_ma != 0

    def calculate_power(self, duration_ms: float) -> float:
        """Charge in mAh consumed over ``duration_ms`` at the average power."""
        return self.average_power_ma * duration_ms / MS_PER_HOUR

    def __repr__(self) -> str:
        return f"UsageBasedPowerEstimator({self.average_power_ma} mA)"
