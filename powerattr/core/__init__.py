"""
PowerAttr Core Module - Counter schemas and utilities.
"""

from powerattr.core.schema import *
from powerattr.core.utils import *

__all__ = [
    "ControllerActivity",
    "EntityCounters",
    "GlobalCounters",
    "CounterSnapshot",
    "AttributionResult",
    "AttributionReport",
    "MeasurementMode",
    "StatsEpoch",
]
