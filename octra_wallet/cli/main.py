"""
octra-wallet - command-line wallet for the Octra network.

Commands:
  balance      Show balance and on-chain nonce
  history      List recent transactions
  send         Send one transfer
  multi-send   Send one transfer per "address:amount" line (file or stdin)
  export       Print the wallet backup or the raw private key
  relay        Run the HTTP passthrough relay

The account and endpoint come from WALLET_* environment variables (or a
.env file in the working directory); see `octra_wallet.config`.

Examples:
  octra-wallet balance
  octra-wallet send oct... 1.5 -m "thanks"
  octra-wallet multi-send payouts.txt
  cat payouts.txt | octra-wallet multi-send -
"""

from __future__ import annotations

import asyncio
import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from ..config import WalletSettings, get_settings
from ..errors import WalletError
from ..logging import setup_logging
from ..types import BatchEntry, BatchOutcome
from ..wallet.client import Wallet
from ..wallet.export import EXPORT_FORMATS, export_wallet

T = TypeVar("T")

app = typer.Typer(
    name="octra-wallet",
    help="Octra wallet: balance, history, transfers and export.",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.verbose: bool = False


_ctx = GlobalContext()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _settings() -> WalletSettings:
    try:
        s = get_settings()
    except ValidationError as exc:
        _fail(f"invalid configuration: {exc}")
    setup_logging(level="DEBUG" if _ctx.verbose else s.log_level, log_format=s.log_format)
    return s


def _run(fn: Callable[[Wallet], Awaitable[T]]) -> T:
    """Build a Wallet from settings, run `fn` with it, map errors to exit 1."""
    settings = _settings()

    async def _go() -> T:
        async with Wallet.from_settings(settings) as w:
            return await fn(w)

    try:
        return asyncio.run(_go())
    except WalletError as exc:
        _fail(f"error [{exc.kind}]: {exc}")


def _dump(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, default=str))


def _fmt_oct(amount: Decimal) -> str:
    return f"{amount:,.6f} OCT"


def _batch_table(outcome: BatchOutcome) -> Table:
    t = Table(title="Multi-send", box=box.SIMPLE)
    t.add_column("#", justify="right")
    t.add_column("to")
    t.add_column("amount", justify="right")
    t.add_column("nonce", justify="right")
    t.add_column("result")
    rows = sorted(outcome.success + outcome.failed, key=lambda e: e.line_no)
    for e in rows:
        if e.ok:
            status = f"[green]accepted[/green] {e.tx_hash or ''}".rstrip()
        else:
            status = f"[red]{e.error_kind}[/red] {e.error}"
        t.add_row(
            str(e.line_no),
            e.to or "-",
            e.amount or "-",
            "-" if e.nonce is None else str(e.nonce),
            status,
        )
    return t


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Octra wallet CLI."""
    _ctx.verbose = verbose


@app.command("balance")
def balance_cmd(
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Show the account balance and on-chain nonce."""

    async def _go(w: Wallet):
        return w.address, await w.balance()

    address, info = _run(_go)
    if json_out:
        _dump({"address": address, "balance": str(info.balance), "nonce": info.nonce})
        return
    typer.echo(f"address: {address}")
    typer.echo(f"balance: {_fmt_oct(info.balance)}")
    typer.echo(f"nonce:   {info.nonce}")


@app.command("history")
def history_cmd(
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List recent transactions of the account."""

    async def _go(w: Wallet):
        return await w.history()

    entries = _run(_go)
    if json_out:
        _dump([e.to_dict() for e in entries])
        return
    if not entries:
        typer.echo("no transactions")
        return
    t = Table(title="Recent transactions", box=box.SIMPLE)
    t.add_column("epoch", justify="right")
    t.add_column("hash", overflow="fold")
    t.add_column("url", overflow="fold")
    for e in entries:
        t.add_row(str(e.epoch if e.epoch is not None else "-"), e.hash, e.url or "")
    Console().print(t)


@app.command("send")
def send_cmd(
    to: str = typer.Argument(..., help="Destination address (oct...)"),
    amount: str = typer.Argument(..., help="Amount in OCT, e.g. 1.5"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Optional message"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Send one transfer."""

    async def _go(w: Wallet):
        return await w.send(to, amount, message)

    result = _run(_go)
    if json_out:
        _dump(result)
        return
    typer.echo(f"accepted: {result.get('tx_hash', '')}".rstrip())


@app.command("multi-send")
def multi_send_cmd(
    source: str = typer.Argument("-", help='File with "address:amount" lines, or - for stdin'),
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """
    Send one transfer per line. Every line is submitted independently; exit
    code is 1 when any line failed.
    """
    if source == "-":
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.is_file():
            _fail(f"no such file: {source}")
        text = path.read_text(encoding="utf-8")

    def _progress(entry: BatchEntry) -> None:
        if json_out:
            return
        mark = "ok" if entry.ok else f"failed ({entry.error_kind})"
        typer.echo(f"[{entry.line_no}] {entry.to or '-'} {entry.amount or '-'}: {mark}", err=True)

    async def _go(w: Wallet):
        return await w.send_many(text, on_result=_progress)

    outcome = _run(_go)
    if json_out:
        _dump(outcome.to_dict())
    else:
        Console().print(_batch_table(outcome))
        typer.echo(f"{len(outcome.success)} accepted, {len(outcome.failed)} failed")
    if outcome.failed:
        raise typer.Exit(code=1)


@app.command("export")
def export_cmd(
    fmt: str = typer.Option("wallet", "--format", "-f", help="wallet | privatekey"),
) -> None:
    """Print the wallet backup JSON or the base64 private key."""
    if fmt not in EXPORT_FORMATS:
        _fail(f"unknown format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}")
    settings = _settings()
    try:
        account = settings.account()
    except WalletError as exc:
        _fail(f"error [{exc.kind}]: {exc}")
    typer.echo(export_wallet(account, settings.rpc, fmt))


@app.command("relay")
def relay_cmd(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (RELAY_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (RELAY_PORT)"),
    upstream: Optional[str] = typer.Option(None, "--upstream", help="Upstream URL (RELAY_UPSTREAM_URL)"),
) -> None:
    """Run the /api/proxy passthrough relay."""
    from ..relay.app import serve

    serve(host=host, port=port, upstream=upstream)


def main() -> None:
    """Entry point for the octra-wallet CLI."""
    app()


if __name__ == "__main__":
    main()
