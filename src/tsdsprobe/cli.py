"""CLI for tsdsprobe."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from tsdsprobe import __version__
from tsdsprobe.core.config import ProbeConfig, load_config
from tsdsprobe.core.errors import ConfigError, ProbeError

console = Console()
error_console = Console(stderr=True)


def get_config(ctx: click.Context) -> ProbeConfig:
    """Load configuration once per invocation."""
    if "config" not in ctx.obj:
        config_file = ctx.obj.get("config_file")
        ctx.obj["config"] = load_config(Path(config_file) if config_file else None)
    return ctx.obj["config"]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True),
    help="Path to tsdsprobe.yml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_file: Optional[str], verbose: bool) -> None:
    """tsdsprobe - round-trip checks for time-series datastreams.

    Provisions an isolated TSDS datastream, writes documents with list fields
    and verifies they read back intact.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Check that the store is reachable."""
    from tsdsprobe.deployer.client import StoreClient

    try:
        config = get_config(ctx)
    except ConfigError as e:
        error_console.print(f"[red]ERROR[/red]: {e}")
        sys.exit(1)

    with StoreClient(config.store) as client:
        result = client.info()

    if not result.ok:
        error_console.print(
            f"[red]ERROR[/red]: Cannot reach store at {config.store.url}: {result.detail()}"
        )
        sys.exit(1)

    body = result.body if isinstance(result.body, dict) else {}
    version = body.get("version", {}).get("number", "unknown")
    console.print(
        f"[green]Connected to '{body.get('cluster_name', 'unknown')}' "
        f"(version {version}) at {config.store.url}[/green]"
    )


@main.command()
@click.pass_context
def plan(ctx: click.Context) -> None:
    """Show the resources a run would create."""
    from tsdsprobe.core.identity import new_run_identity
    from tsdsprobe.core.models import list_field_schema
    from tsdsprobe.deployer.templates import build_plan

    try:
        config = get_config(ctx)
        identity = new_run_identity(config.index_prefix)
    except (ConfigError, ValueError) as e:
        error_console.print(f"[red]ERROR[/red]: {e}")
        sys.exit(1)

    provision_plan = build_plan(identity, list_field_schema())

    table = Table(title=f"Run {identity.token}")
    table.add_column("Resource", style="cyan")
    table.add_column("Name", style="green")
    for kind, name in identity.names().items():
        table.add_row(kind, name)
    console.print(table)

    console.print(json.dumps(provision_plan.to_dict(), indent=2))


@main.command()
@click.option("--keep", is_flag=True, help="Keep templates and datastreams after the run")
@click.pass_context
def run(ctx: click.Context, keep: bool) -> None:
    """Run the list-of-strings round-trip cases."""
    from tsdsprobe.deployer.client import StoreClient
    from tsdsprobe.testing.runner import RoundTripRunner, default_cases

    try:
        config = get_config(ctx)
    except ConfigError as e:
        error_console.print(f"[red]ERROR[/red]: {e}")
        sys.exit(1)

    with StoreClient(config.store) as client:
        if not client.check_connection():
            error_console.print(f"[red]ERROR[/red]: Cannot reach store at {config.store.url}")
            sys.exit(1)

        runner = RoundTripRunner(
            client,
            keep_resources=keep or config.keep_resources,
            index_prefix=config.index_prefix,
        )
        results = runner.run(default_cases())

    table = Table(title="Round-trip Results")
    table.add_column("Case", style="cyan")
    table.add_column("Status")
    table.add_column("Datastream")
    table.add_column("Details")

    failed = 0
    for result in results:
        if result["status"] == "passed":
            status = "[green]PASSED[/green]"
        else:
            status = "[red]FAILED[/red]"
            failed += 1
        table.add_row(
            result["name"],
            status,
            result["datastream"],
            "; ".join(result["errors"] + result.get("warnings", [])),
        )
    console.print(table)

    if failed:
        error_console.print(f"[red]{failed} of {len(results)} case(s) failed[/red]")
        sys.exit(1)
    console.print(f"[green]All {len(results)} case(s) passed[/green]")


@main.command()
@click.argument("token")
@click.pass_context
def cleanup(ctx: click.Context, token: str) -> None:
    """Remove templates and datastream left behind by run TOKEN."""
    from tsdsprobe.core.identity import RunIdentity
    from tsdsprobe.deployer.client import StoreClient
    from tsdsprobe.deployer.provisioner import SchemaProvisioner

    try:
        config = get_config(ctx)
        with StoreClient(config.store) as client:
            deleted = SchemaProvisioner(client).teardown(RunIdentity(token=token))
    except ProbeError as e:
        error_console.print(f"[red]ERROR[/red]: {e}")
        sys.exit(1)

    if not deleted:
        console.print(f"[yellow]Nothing to remove for run '{token}'[/yellow]")
        return
    for name in deleted:
        console.print(f"  - {name}")
    console.print(f"[green]Removed {len(deleted)} resource(s)[/green]")


if __name__ == "__main__":
    main()
