"""
qash - command-line driver for the QASH token ledger.

Runs ledger operations against a JSON state file, one atomic invocation per
call. Results are printed as JSON; the exit code is 1 whenever an invocation
reverts.

Global options:
  --legacy                 Use the legacy variant (creator-bootstrapped mint,
                           idempotent pause, no transfer memo)
  --verbose / -v           Log host activity to stderr

Examples:
  qash info
  qash call init 1000000 --state ledger.json --caller 0x01...
  qash call transfer 0x02... 250 7 --state ledger.json --caller 0x01...
  qash call get_balance 0x02... --state ledger.json --caller 0x01...
  qash run scenario.json --state ledger.json
  qash state --state ledger.json
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .. import abi
from ..config import LedgerConfig, get_config
from ..errors import CorruptState, InvalidArgument
from ..runner import LedgerRunner, check_steps
from ..runtime.context import ADDRESS_SIZE, require_address
from ..runtime.storage import JsonFileStorage, MemoryStorage
from ..version import __version__

log = logging.getLogger(__name__)

app = typer.Typer(
    name="qash",
    help="QASH fungible-token ledger command-line interface",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.legacy: bool = False
        self.verbose: bool = False


_ctx = GlobalContext()


@app.callback()
def main_callback(
    legacy: bool = typer.Option(
        False,
        "--legacy",
        help="Use the legacy variant flags",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log host activity to stderr",
    ),
) -> None:
    """
    QASH CLI — run ledger operations against a JSON state file.

    Variant flags and token metadata come from QASH_* environment variables;
    --legacy switches the variant flags to the legacy preset.
    """
    _ctx.legacy = legacy
    _ctx.verbose = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _config() -> LedgerConfig:
    cfg = get_config()
    if _ctx.legacy:
        legacy = LedgerConfig.legacy()
        cfg = replace(
            cfg,
            require_explicit_init=legacy.require_explicit_init,
            allow_double_pause_noop=legacy.allow_double_pause_noop,
            memo_field_present=legacy.memo_field_present,
        )
    return cfg


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _address_or_exit(value: str, name: str) -> bytes:
    try:
        return require_address(value, name)
    except InvalidArgument as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(2)


def _load_scenario(path: Path) -> Dict[str, Any]:
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        typer.echo(f"Error: cannot read scenario {path}: {e}", err=True)
        raise typer.Exit(2)
    if not isinstance(doc, dict) or not isinstance(doc.get("steps"), list):
        typer.echo("Error: scenario must be an object with a 'steps' list", err=True)
        raise typer.Exit(2)
    try:
        doc["steps"] = check_steps(doc["steps"])
    except ValueError as e:
        typer.echo(f"Error: malformed scenario {path}: {e}", err=True)
        raise typer.Exit(2)
    return doc


def _open_state(path: Path) -> JsonFileStorage:
    try:
        return JsonFileStorage(path)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: cannot read state file {path}: {e}", err=True)
        raise typer.Exit(2)


# ---------------------------------------------------------------------------
# commands
# ---------------------------------------------------------------------------


@app.command()
def info() -> None:
    """Show version, active configuration and exported functions."""
    cfg = _config()
    typer.echo(
        _pretty(
            {
                "version": __version__,
                "config": cfg.to_dict(),
                "functions": [f.to_dict() for f in abi.exported_functions(cfg)],
            }
        )
    )


@app.command()
def call(
    function: str = typer.Argument(..., help="Ledger function name"),
    args: Optional[List[str]] = typer.Argument(None, help="Positional arguments"),
    state: Path = typer.Option(..., "--state", "-s", help="JSON state file (created if missing)"),
    caller: str = typer.Option(..., "--caller", help="Caller address (hex)"),
    creator: Optional[str] = typer.Option(
        None,
        "--creator",
        help="Contract creator address (hex); defaults to the caller",
    ),
) -> None:
    """Run one invocation and persist its writes on success."""
    caller_b = _address_or_exit(caller, "caller")
    creator_b = _address_or_exit(creator, "creator") if creator else caller_b

    storage = _open_state(state)
    runner = LedgerRunner(storage, _config(), creator=creator_b)
    result = runner.call(caller_b, function, *(args or []))

    typer.echo(_pretty(result.to_dict()))
    if not result.ok:
        raise typer.Exit(1)
    storage.flush()


@app.command()
def run(
    scenario: Path = typer.Argument(..., help="Scenario JSON: {creator?, steps: [{caller, function, args}]}"),
    state: Optional[Path] = typer.Option(
        None,
        "--state",
        "-s",
        help="JSON state file; in-memory when omitted",
    ),
) -> None:
    """Run every step of a scenario in order; reverted steps leave no trace."""
    doc = _load_scenario(scenario)
    steps: List[Dict[str, Any]] = doc["steps"]
    if not steps and "creator" not in doc:
        typer.echo(_pretty({"results": [], "reverted": 0}))
        return

    default_creator = doc.get("creator") or steps[0].get("caller")
    if not default_creator:
        typer.echo("Error: scenario needs a 'creator' or a caller on its first step", err=True)
        raise typer.Exit(2)
    creator_b = _address_or_exit(default_creator, "creator")

    storage = _open_state(state) if state is not None else MemoryStorage()
    runner = LedgerRunner(storage, _config(), creator=creator_b)
    results = runner.run_script(steps)

    reverted = sum(1 for r in results if not r.ok)
    typer.echo(
        _pretty(
            {
                "results": [r.to_dict() for r in results],
                "reverted": reverted,
                "total_supply": runner.view("get_total_supply"),
                "sum_of_balances": runner.sum_of_balances(),
            }
        )
    )
    if isinstance(storage, JsonFileStorage):
        storage.flush()
    if reverted:
        raise typer.Exit(1)


@app.command()
def state(
    path: Path = typer.Option(..., "--state", "-s", help="JSON state file"),
) -> None:
    """Decode a state file: owner, pause flag, supply, balances and allowances."""
    if not path.is_file():
        typer.echo(f"Error: no state file at {path}", err=True)
        raise typer.Exit(2)
    storage = _open_state(path)
    # The creator only matters for invocations; none run here.
    runner = LedgerRunner(storage, _config(), creator=b"\x00" * ADDRESS_SIZE)
    try:
        summary = runner.state_summary()
        summary["sum_of_balances"] = runner.sum_of_balances()
    except CorruptState as e:
        typer.echo(f"Error: {path}: {e.message}", err=True)
        raise typer.Exit(2)
    typer.echo(_pretty(summary))


def main() -> None:
    """Entry point for the qash CLI."""
    app()


if __name__ == "__main__":
    main()
