"""
PowerAttr Test Configuration and Fixtures
=========================================
Shared fixtures and configuration for all tests.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

from powerattr.attribution.power_profile import CalibrationProfile
from powerattr.attribution.attribution_engine import PowerAttributionEngine
from powerattr.core.schema import (
    ControllerActivity,
    CounterSnapshot,
    EntityCounters,
    GlobalCounters,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    path = Path(tempfile.mkdtemp(prefix="powerattr_test_"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def controller_profile() -> CalibrationProfile:
    """Profile with idle/tx/rx controller coefficients (hardware mode capable)."""
    return CalibrationProfile(
        name="controller",
        average_power={
            "wifi.on": 3.0,
            "wifi.scan": 100.0,
            "wifi.batchedscan": 2.0,
            "wifi.active": 120.0,
            "wifi.controller.idle": 1.0,
            "wifi.controller.tx": 2.0,
            "wifi.controller.rx": 3.0,
        },
    )


@pytest.fixture
def legacy_profile(controller_profile) -> CalibrationProfile:
    """Same profile with the controller rx coefficient unsupported."""
    return controller_profile.with_overrides(wifi_controller_rx=0.0)


@pytest.fixture
def hardware_engine(controller_profile) -> PowerAttributionEngine:
    return PowerAttributionEngine(controller_profile)


@pytest.fixture
def legacy_engine(legacy_profile) -> PowerAttributionEngine:
    return PowerAttributionEngine(legacy_profile)


@pytest.fixture
def sample_snapshot() -> CounterSnapshot:
    """Two apps plus the WiFi driver uid, with both counter families filled in."""
    return CounterSnapshot(
        hardware_reporting=True,
        global_counters=GlobalCounters(
            global_running_time_us=5_000_000,
            controller=ControllerActivity(
                idle_time_ms=4000, tx_time_ms=600, rx_time_ms=400
            ),
        ),
        entities={
            10001: EntityCounters(
                running_time_us=2_000_000,
                scan_time_us=500_000,
                batched_scan_time_us=(100_000, 0, 0, 0, 0),
                rx_packets=100,
                tx_packets=50,
                rx_bytes=204_800,
                tx_bytes=102_400,
                controller=ControllerActivity(
                    idle_time_ms=1000, tx_time_ms=500, rx_time_ms=300
                ),
            ),
            10002: EntityCounters(
                running_time_us=1_000_000,
                rx_packets=10,
                tx_packets=10,
                controller=ControllerActivity(
                    idle_time_ms=500, tx_time_ms=0, rx_time_ms=0
                ),
            ),
            1010: EntityCounters(
                running_time_us=5_000_000,
                rx_packets=1000,
                controller=ControllerActivity(
                    idle_time_ms=2000, tx_time_ms=50, rx_time_ms=50
                ),
            ),
        },
    )


@pytest.fixture
def random_snapshots():
    """Factory of randomized snapshots with non-negative counters."""
    import numpy as np

    def make(seed: int, n_entities: int = 20, hardware_reporting: bool = True):
        rng = np.random.default_rng(seed)
        entities = {}
        for i in range(n_entities):
            entities[10000 + i] = EntityCounters(
                running_time_us=int(rng.integers(0, 10_000_000)),
                scan_time_us=int(rng.integers(0, 1_000_000)),
                batched_scan_time_us=tuple(int(v) for v in rng.integers(0, 100_000, 5)),
                rx_packets=int(rng.integers(0, 10_000)),
                tx_packets=int(rng.integers(0, 10_000)),
                controller=ControllerActivity(
                    idle_time_ms=int(rng.integers(0, 10_000)),
                    tx_time_ms=int(rng.integers(0, 1_000)),
                    rx_time_ms=int(rng.integers(0, 1_000)),
                ),
            )
        global_counters = GlobalCounters(
            global_running_time_us=int(rng.integers(0, 100_000_000)),
            controller=ControllerActivity(
                idle_time_ms=int(rng.integers(0, 100_000)),
                tx_time_ms=int(rng.integers(0, 10_000)),
                rx_time_ms=int(rng.integers(0, 10_000)),
                energy_mams=int(rng.integers(0, 2)) * int(rng.integers(0, 10**9)),
            ),
        )
        return CounterSnapshot(
            global_counters=global_counters,
            entities=entities,
            hardware_reporting=hardware_reporting,
        )

    return make


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")
    config.addinivalue_line("markers", "integration: marks integration tests")
