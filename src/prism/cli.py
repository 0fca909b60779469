import asyncio
import json
from collections.abc import Coroutine
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from prism.api.service import PrismService
from prism.clients.rpc import ChainRPC
from prism.codec.asset import decode_asset
from prism.core.config import ChainConfig, PrismConfig
from prism.core.errors import PrismError
from prism.dispersal.disperser import DisperseStats
from prism.log import setup_logging
from prism.storage.memory import InMemoryLedgerStore

console = Console()


@dataclass(frozen=True)
class CliState:
    state_path: Path
    config: PrismConfig


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        return asyncio.run(coro)
    except PrismError as e:
        raise click.ClickException(f"{e.code}: {e.message}") from e
    except RuntimeError as e:
        raise click.ClickException(str(e)) from e


def _read_feed(path: Path) -> list[Any]:
    """One JSON transaction per line; `null` lines are empty transactions."""
    out: list[Any] = []
    with path.open() as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                out.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise click.ClickException(f"{path}:{lineno}: invalid JSON ({e.msg})") from e
    return out


@click.group()
@click.option(
    "--state",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="PRISM_STATE",
    default=Path("prism-state.json"),
    show_default=True,
    help="JSON snapshot of the ledger store",
)
@click.option(
    "--withdraw-interval",
    type=int,
    envvar="PRISM_WITHDRAW_INTERVAL",
    default=PrismConfig.withdraw_interval_s,
    show_default=True,
    help="Seconds added to a withdrawal's stored payout time",
)
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level for prism loggers")
@click.pass_context
def cli(ctx: click.Context, state: Path, withdraw_interval: int, log_level: str) -> None:
    """Prism: ledger dispersal and vesting conversion for GOLOS."""
    setup_logging(log_level)
    ctx.obj = CliState(state_path=state, config=PrismConfig(withdraw_interval_s=withdraw_interval))


@cli.command("replay")
@click.argument("feed", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def replay_cmd(obj: CliState, feed: Path) -> None:
    """Disperse a JSON-lines transaction feed into the ledger snapshot."""
    transactions = _read_feed(feed)

    async def run() -> DisperseStats:
        store = await InMemoryLedgerStore.load(obj.state_path)
        service = PrismService(store, obj.config)
        total = DisperseStats()

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]dispersing[/]"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("•"),
            TimeElapsedColumn(),
            transient=False,
            expand=True,
            console=console,
        )
        with progress:
            task = progress.add_task(description=feed.name, total=len(transactions))
            for trx in transactions:
                stats = await service.disperse([trx])
                for name, value in asdict(stats).items():
                    setattr(total, name, getattr(total, name) + value)
                progress.advance(task, 1)

        await store.dump(obj.state_path)
        return total

    stats = _run(run())
    console.print(
        f"[bold]summary[/]: "
        f"[green]transactions[/]={stats.transactions}  "
        f"[yellow]skipped[/]={stats.skipped}  "
        f"routed={stats.routed}  ignored={stats.ignored}  "
        f"→ {obj.state_path}"
    )


@cli.command("balance")
@click.argument("user_id")
@click.option("--currency", "currencies", multiple=True, default=("all",), show_default=True, help="Symbol; repeat to OR")
@click.option("--type", "balance_type", type=click.Choice(["liquid", "vesting", "all"]), default="all", show_default=True)
@click.option("--stake/--no-stake", default=False, show_default=True, help="Fetch stake info from the chain node")
@click.option("--rpc", envvar="PRISM_RPC_URL", default="", help="Chain node URL (required with --stake)")
@click.pass_obj
def balance_cmd(
    obj: CliState,
    user_id: str,
    currencies: tuple[str, ...],
    balance_type: str,
    stake: bool,
    rpc: str,
) -> None:
    """Show liquid and vesting balances of an account."""
    if stake and not rpc:
        raise click.UsageError("Pass --rpc (or PRISM_RPC_URL) together with --stake")

    async def run() -> dict[str, Any]:
        store = await InMemoryLedgerStore.load(obj.state_path)
        chain = ChainRPC.from_config(ChainConfig(rpc_url=rpc)) if stake else None
        try:
            service = PrismService(store, obj.config, chain)
            return await service.get_balance(user_id, list(currencies), balance_type, stake)
        finally:
            if chain is not None:
                await chain.aclose()

    console.print_json(data=_run(run()), default=str)


@cli.command("vesting-info")
@click.pass_obj
def vesting_info_cmd(obj: CliState) -> None:
    """Show the global vesting stat."""

    async def run() -> dict[str, Any]:
        store = await InMemoryLedgerStore.load(obj.state_path)
        return await PrismService(store, obj.config).get_vesting_info()

    console.print_json(data=_run(run()), default=str)


@cli.command("convert")
@click.argument("amount")
@click.pass_obj
def convert_cmd(obj: CliState, amount: str) -> None:
    """Convert shares into tokens or tokens into shares, by the amount's symbol."""

    async def run() -> str:
        store = await InMemoryLedgerStore.load(obj.state_path)
        service = PrismService(store, obj.config)
        if decode_asset(amount).symbol == obj.config.share_symbol:
            return await service.convert_vesting_to_token(amount)
        return await service.convert_tokens_to_vesting(amount)

    console.print(_run(run()))


@cli.command("proposals")
@click.argument("user_id")
@click.option("--app", default=PrismConfig.community_id, show_default=True, help="Community scope")
@click.pass_obj
def proposals_cmd(obj: CliState, user_id: str, app: str) -> None:
    """List pending vesting delegation proposals addressed to an account."""

    async def run() -> list[dict[str, Any]]:
        store = await InMemoryLedgerStore.load(obj.state_path)
        return await PrismService(store, obj.config).get_vesting_delegation_proposals(app, user_id)

    proposals = _run(run())
    table = Table(title=f"delegation proposals for {user_id}")
    for col in ("proposalId", "proposer", "userId", "username", "expiration"):
        table.add_column(col)
    for p in proposals:
        table.add_row(*(str(p.get(col, "")) for col in ("proposalId", "proposer", "userId", "username", "expiration")))
    console.print(table)


if __name__ == "__main__":
    cli()
