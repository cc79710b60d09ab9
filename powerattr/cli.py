"""
PowerAttr Command Line Interface
Runs attribution passes over counter snapshots and inspects power profiles.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml

from powerattr import __version__
from powerattr.core.schema import AttributionReport, CounterSnapshot
from powerattr.core.utils import (
    format_charge,
    format_duration_ms,
    load_structured,
    safe_json_dump,
)
from powerattr.attribution.power_profile import PowerProfileLoader
from powerattr.attribution.attribution_engine import PowerAttributionEngine


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_engine(profile_path: Optional[str]) -> PowerAttributionEngine:
    try:
        profile = PowerProfileLoader(profile_path).load()
        return PowerAttributionEngine(profile)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid power profile: {e}")


def _load_snapshot(path: str) -> CounterSnapshot:
    try:
        data = load_structured(path) or {}
        return CounterSnapshot.from_dict(data)
    except (ValueError, TypeError, AttributeError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid counter snapshot {path}: {e}")


def _echo_table(report: AttributionReport, top: int) -> None:
    click.echo(f"\nMeasurement mode: {report.mode.value}")
    click.echo("-" * 52)
    click.echo(f"{'UID':>8}  {'Duration':>14}  {'Energy (mAh)':>14}")
    click.echo("-" * 52)
    for uid, result in report.top_entities(top):
        click.echo(
            f"{uid:>8}  {format_duration_ms(result.duration_ms):>14}  "
            f"{format_charge(result.energy_mah):>14}"
        )
    click.echo("-" * 52)
    click.echo(
        f"{'apps':>8}  {format_duration_ms(report.total_entity_duration_ms):>14}  "
        f"{format_charge(report.total_entity_energy_mah):>14}"
    )
    click.echo(
        f"{'system':>8}  {format_duration_ms(report.remainder.duration_ms):>14}  "
        f"{format_charge(report.remainder.energy_mah):>14}"
    )
    if report.aggregated_uids:
        uids = ", ".join(str(u) for u in report.aggregated_uids)
        click.echo(f"\nFolded into system bucket: {uids}")


@click.group()
@click.version_option(__version__, prog_name="powerattr")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """
    PowerAttr - WiFi power attribution

    Attributes WiFi radio energy to uids from usage counter snapshots.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--profile", "-p", "profile_path", default=None,
              type=click.Path(dir_okay=False),
              help="Power profile YAML (defaults are used when omitted)")
@click.option("--format", "-f", "fmt", default="table",
              type=click.Choice(["table", "json"]),
              help="Output format")
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False),
              help="Write the JSON report to this file")
@click.option("--top", default=20, help="Number of uids to list in table output")
def attribute(
    snapshot: str,
    profile_path: Optional[str],
    fmt: str,
    output: Optional[str],
    top: int,
) -> None:
    """
    Run one attribution pass over a counter snapshot (JSON or YAML).
    """
    logger = logging.getLogger("powerattr.cli.attribute")

    engine = _build_engine(profile_path)
    counters = _load_snapshot(snapshot)

    logger.info(f"Attributing {len(counters.entities)} uids from {snapshot}")

    try:
        report = engine.calculate(counters)
    except ValueError as e:
        raise click.ClickException(str(e))

    if output:
        safe_json_dump(report.to_dict(), Path(output))
        logger.info(f"Report written to {output}")

    if fmt == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _echo_table(report, top)


@cli.command()
@click.option("--profile", "-p", "profile_path", default=None,
              type=click.Path(dir_okay=False),
              help="Power profile YAML (defaults are used when omitted)")
def profile(profile_path: Optional[str]) -> None:
    """
    Show the coefficients derived from a power profile.
    """
    engine = _build_engine(profile_path)
    info = engine.describe()

    click.echo(f"Profile: {info['profile']}")
    click.echo(f"Controller energy reporting supported: {info['has_power_controller']}")
    click.echo(f"Power per packet: {info['power_per_packet_mah']:.3e} mAh")
    for name, ma in info["estimators_ma"].items():
        state = "supported" if ma != 0 else "unsupported"
        click.echo(f"  {name:<12} {ma:>10.2f} mA  ({state})")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
