#!/usr/bin/env python3
"""
PowerAttr - Attribute Snapshot Script
=====================================
Example script running one attribution pass and folding it into a
legacy sipper list.

Usage:
    python attribute_snapshot.py --snapshot ../snapshots/since_charged.json \
        --profile ../profiles/controller.yaml
"""

import argparse
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(
        description="Attribute WiFi energy to uids from a counter snapshot"
    )
    parser.add_argument(
        "--snapshot",
        type=str,
        required=True,
        help="Path to the counter snapshot (JSON or YAML)"
    )
    parser.add_argument(
        "--profile",
        type=str,
        default=None,
        help="Path to power profile YAML"
    )

    args = parser.parse_args()

    snapshot_path = Path(args.snapshot)
    if not snapshot_path.exists():
        print(f"Error: Snapshot not found: {snapshot_path}")
        sys.exit(1)

    from powerattr import CounterSnapshot, PowerAttributionEngine, load_profile
    from powerattr.attribution import PowerSipper, apply_to_sippers
    from powerattr.core.schema import DrainType
    from powerattr.core.utils import format_charge, load_structured

    engine = PowerAttributionEngine(load_profile(args.profile))
    snapshot = CounterSnapshot.from_dict(load_structured(snapshot_path))
    report = engine.calculate(snapshot)

    sippers = [PowerSipper(drain_type=DrainType.APP, uid=uid) for uid in snapshot.entities]
    apply_to_sippers(report, sippers)

    print(f"Mode: {report.mode.value}")
    for sipper in sippers:
        label = sipper.uid if sipper.drain_type is DrainType.APP else "WIFI"
        flag = " (aggregated)" if sipper.is_aggregated else ""
        print(f"  {label}: {format_charge(sipper.wifi_power_mah)} mAh, "
              f"{sipper.wifi_running_time_ms} ms{flag}")


if __name__ == "__main__":
    main()
