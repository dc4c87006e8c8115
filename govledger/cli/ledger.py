#!/usr/bin/env python3
"""
govledger CLI

Replays governance scenarios against an in-memory ledger.

Usage:
    govledger run <scenario.toml> [--config FILE] [--json]
    govledger config [--config FILE]

A scenario file lists token deployments and the calls to replay:

    [[tokens]]
    contract = "ST3TEST"
    symbol = "GOV"
    balances = { ST1TEST = 1000 }

    [[steps]]
    height = 10
    caller = "ST1TEST"
    op = "vote_on_proposal"
    args = [0, true]
    expect = "ok"          # or an error label, e.g. "VotingClosed"
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from govledger.config import load_config
from govledger.exceptions import GovLedgerException
from govledger.governance import Result
from govledger.runtime import HostRuntime


def _outcome(result: Result) -> str:
    return "ok" if result.ok else result.error.label


def _load_scenario(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        try:
            return tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise click.ClickException(f"Malformed scenario {path}: {e}")


def run_scenario(host: HostRuntime, scenario: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Deploy the scenario's tokens and replay its steps on *host*.

    Returns one report dict per step.
    """
    for token in scenario.get("tokens", []):
        host.deploy_token(token["contract"], token.get("symbol", "GOV"), token.get("balances", {}))

    reports = []
    for i, step in enumerate(scenario.get("steps", [])):
        if "height" in step:
            host.set_block_height(step["height"])
        result = host.call(step["caller"], step["op"], *step.get("args", []))
        expected = step.get("expect")
        reports.append({
            "step": i,
            "height": host.block_height,
            "caller": step["caller"],
            "op": step["op"],
            "args": list(step.get("args", [])),
            "result": result.to_dict(),
            "outcome": _outcome(result),
            "expected": expected,
            "matched": expected is None or expected == _outcome(result),
        })
    return reports


@click.group()
@click.version_option(version="1.0.0", prog_name="govledger")
def cli():
    """govledger Command Line Interface

    Replay governance scenarios against an in-memory ledger.
    """
    pass


@cli.command("run")
@click.argument("scenario_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "-c", "config_file", type=click.Path(), help="govledger.toml path")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON")
def run_cmd(scenario_file: str, config_file: Optional[str], as_json: bool):
    """Replay a scenario file.

    Exits with status 1 when any step's outcome differs from its `expect`.

    Examples:

        govledger run scenarios/scholarship.toml

        govledger run scenario.toml --config govledger.toml --json
    """
    try:
        host = HostRuntime.from_config(load_config(config_file))
        reports = run_scenario(host, _load_scenario(Path(scenario_file)))
    except GovLedgerException as e:
        raise click.ClickException(str(e))
    except (KeyError, TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid scenario step: {e}")

    if as_json:
        click.echo(json.dumps({"steps": reports, "state": host.to_dict()}, indent=2, default=str))
    else:
        for r in reports:
            args = ", ".join(repr(a) for a in r["args"])
            line = f"[{r['height']:>6}] {r['caller']} {r['op']}({args}) → {r['outcome']}"
            if r["result"]["ok"] and r["result"]["value"] is not True:
                line += f" {r['result']['value']}"
            if not r["matched"]:
                click.echo(click.style(f"{line}  (expected {r['expected']})", fg="red"))
            else:
                click.echo(line)
        click.echo()
        click.echo(f"Proposals: {host.get_proposal_count()}")
        click.echo(f"Fee transfers: {len(host.fee_transfers)}")
        click.echo(f"Treasury transfers: {len(host.treasury_transfers)}")

    if not all(r["matched"] for r in reports):
        raise SystemExit(1)


@cli.command("config")
@click.option("--config", "-c", "config_file", type=click.Path(), help="govledger.toml path")
def config_cmd(config_file: Optional[str]):
    """Show the effective configuration (file + environment)."""
    try:
        cfg = load_config(config_file)
    except GovLedgerException as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(cfg.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
