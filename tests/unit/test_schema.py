"""
PowerAttr Unit Tests - Schema Module
"""

import json

import pytest

from powerattr.core.schema import (
    AttributionReport,
    AttributionResult,
    ControllerActivity,
    CounterSnapshot,
    EntityCounters,
    MeasurementMode,
    NUM_WIFI_BATCHED_SCAN_BINS,
    StatsEpoch,
)
from powerattr.core.utils import format_charge, format_duration_ms, mams_to_mah, us_to_ms


class TestSnapshotParsing:
    """Tests for building snapshots from plain data."""

    def test_from_dict(self):
        snapshot = CounterSnapshot.from_dict({
            "hardware_reporting": True,
            "epoch": "since_charged",
            "global": {
                "global_running_time_us": 1_000_000,
                "controller": {"idle_time_ms": 10, "energy_mams": 5},
            },
            "entities": {
                "10001": {
                    "running_time_us": 200,
                    "batched_scan_time_us": [1, 2, 3, 4, 5],
                    "rx_packets": 7,
                },
                "10002": {},
            },
        })

        assert snapshot.hardware_reporting is True
        assert snapshot.epoch is StatsEpoch.SINCE_CHARGED
        assert snapshot.global_counters.controller.energy_mams == 5
        assert set(snapshot.entities) == {10001, 10002}
        assert snapshot.entities[10001].batched_scan_time_us == (1, 2, 3, 4, 5)
        assert snapshot.entities[10001].controller is None
        assert snapshot.entities[10002] == EntityCounters()

    def test_missing_bins_keep_default_shape(self):
        counters = EntityCounters.from_dict({"running_time_us": 5})

        assert counters.batched_scan_time_us == (0,) * NUM_WIFI_BATCHED_SCAN_BINS
        assert EntityCounters.from_dict(counters.to_dict()) == counters

    @pytest.mark.parametrize("flag", ["false", "true", 1, 0, None])
    def test_non_bool_hardware_flag_rejected(self, flag):
        with pytest.raises(ValueError):
            CounterSnapshot.from_dict({"hardware_reporting": flag})

    def test_defaults(self):
        snapshot = CounterSnapshot.from_dict({})

        assert snapshot.hardware_reporting is False
        assert snapshot.entities == {}
        assert snapshot.global_counters.controller is None

    def test_unknown_epoch(self):
        with pytest.raises(ValueError):
            CounterSnapshot.from_dict({"epoch": "last_tuesday"})

    def test_to_dict_is_json_serializable(self, sample_snapshot):
        text = json.dumps(sample_snapshot.to_dict())
        assert "since_charged" in text

        parsed = CounterSnapshot.from_dict(json.loads(text))
        assert parsed == sample_snapshot


class TestControllerActivity:
    def test_active_time(self):
        activity = ControllerActivity(idle_time_ms=10, tx_time_ms=20, rx_time_ms=30)
        assert activity.active_time_ms == 60


class TestAttributionReport:
    def _report(self):
        return AttributionReport(
            mode=MeasurementMode.FALLBACK,
            entities={
                1: AttributionResult(duration_ms=10, energy_mah=0.1),
                2: AttributionResult(duration_ms=20, energy_mah=0.3),
                3: AttributionResult(duration_ms=30, energy_mah=0.2),
            },
            remainder=AttributionResult(duration_ms=5, energy_mah=0.05),
            total_entity_duration_ms=60,
            total_entity_energy_mah=0.6,
        )

    def test_top_entities(self):
        top = self._report().top_entities(2)
        assert [uid for uid, _ in top] == [2, 3]

    def test_total_energy(self):
        assert self._report().total_energy_mah == pytest.approx(0.65)

    def test_to_dict(self):
        d = self._report().to_dict()

        assert d["mode"] == "fallback"
        assert d["entities"]["2"]["energy_mah"] == 0.3
        assert d["remainder"]["duration_ms"] == 5
        json.dumps(d)


class TestUtils:
    def test_us_to_ms_truncates(self):
        assert us_to_ms(1999) == 1
        assert us_to_ms(999) == 0

    def test_mams_to_mah(self):
        assert mams_to_mah(3_600_000) == 1.0

    def test_format_charge(self):
        assert format_charge(0) == "0"
        assert format_charge(12.345) == "12.3"
        assert format_charge(0.5) == "0.500"

    def test_format_duration(self):
        assert format_duration_ms(500) == "500 ms"
        assert format_duration_ms(1500) == "1.50 s"
