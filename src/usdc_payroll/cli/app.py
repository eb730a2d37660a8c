"""CLI for USDC Payroll - pay your team in USDC from the terminal."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from usdc_payroll.errors import PayrollError

app = typer.Typer(
    name="usdc-payroll",
    help="Pay an employee roster in USDC through a custodial CDP wallet.",
    no_args_is_help=True,
)
console = Console()

_base_dir: Optional[Path] = None


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"usdc-payroll {version('usdc-payroll')}")
        raise typer.Exit()


@app.callback()
def main(
    directory: Path = typer.Option(
        None,
        "--dir",
        "-d",
        help="Directory containing .usdc-payroll/ (default: current directory)",
        envvar="USDC_PAYROLL_DIR",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logs"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Pay an employee roster in USDC through a custodial CDP wallet."""
    global _base_dir
    _base_dir = directory
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def _load_service():
    from usdc_payroll.service import PayrollService

    try:
        return PayrollService.load(_base_dir)
    except PayrollError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


# ------------------------------------------------------------------
# init
# ------------------------------------------------------------------


@app.command()
def init(
    network: str = typer.Option("base-sepolia", "--network", "-n", help="Network to pay on"),
    account_name: str = typer.Option("my-trading-account", "--account-name", "-a", help="CDP account name"),
    expected_address: str = typer.Option(None, "--expected-address", "-e", help="Address the account should have"),
    roster: str = typer.Option("employees.json", "--roster", "-r", help="Roster JSON path"),
    pacing: float = typer.Option(2.0, "--pacing", help="Seconds between submissions"),
):
    """Write .usdc-payroll/config.yaml in the current (or --dir) directory."""
    from usdc_payroll.config import PayrollConfig, get_config_path, save_config
    from usdc_payroll.wallet.networks import list_network_names

    if network not in list_network_names():
        console.print(f"[red]Unknown network '{network}'. Available: {list_network_names()}[/red]")
        raise typer.Exit(1)

    config = PayrollConfig(
        network=network,
        account_name=account_name,
        expected_address=expected_address,
        roster_path=roster,
        pacing_seconds=pacing,
    )
    path = get_config_path(_base_dir)
    save_config(config, path)

    console.print(Panel(
        f"[bold green]Payroll initialized![/bold green]\n\n"
        f"Config: {path}\n"
        f"Network: [cyan]{network}[/cyan]\n"
        f"Account: [cyan]{account_name}[/cyan]\n\n"
        f"[dim]Credentials are read from CDP_API_KEY_ID, CDP_API_KEY_SECRET\n"
        f"and CDP_WALLET_SECRET.[/dim]\n\n"
        f"Next steps:\n"
        f"  usdc-payroll roster\n"
        f"  usdc-payroll balance\n"
        f"  usdc-payroll pay --all",
        title="USDC Payroll",
    ))


# ------------------------------------------------------------------
# roster
# ------------------------------------------------------------------


@app.command()
def roster():
    """Show the employee roster and total payroll."""
    from usdc_payroll.roster import total_amount

    service = _load_service()
    try:
        employees = service.load_roster()
    except PayrollError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not employees:
        console.print("[yellow]Roster is empty.[/yellow]")
        return

    symbol = service.config.token.symbol
    table = Table(title="Roster")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Department", style="cyan")
    table.add_column("Position")
    table.add_column("Address", style="dim")
    table.add_column(f"Salary ({symbol})", justify="right")

    for e in employees:
        table.add_row(
            str(e.id),
            e.name,
            e.department,
            e.position,
            e.address[:12] + "...",
            str(e.salary),
        )
    console.print(table)
    console.print(
        f"Total payroll: [bold]{total_amount(employees, service.config.token.decimals)} "
        f"{symbol}[/bold] for {len(employees)} employees"
    )


# ------------------------------------------------------------------
# account
# ------------------------------------------------------------------


@app.command()
def account():
    """Resolve the payroll account and show its address."""
    service = _load_service()

    async def _account():
        try:
            return await service.initialize()
        finally:
            await service.close()

    try:
        acct = _run(_account())
    except PayrollError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[cyan]{acct.address}[/cyan]\n\n"
        f"Name: {acct.name}\n"
        f"Explorer: {service.network.address_url(acct.address)}",
        title="Payroll Account",
    ))


# ------------------------------------------------------------------
# balance
# ------------------------------------------------------------------


@app.command()
def balance(
    address: str = typer.Option(None, "--address", "-a", help="Address to check (default: payroll account)"),
):
    """Show the payroll account's token balance."""
    service = _load_service()

    async def _balance():
        try:
            return await service.balance(address)
        finally:
            await service.close()

    try:
        snapshot = _run(_balance())
    except PayrollError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if snapshot.available:
        console.print(f"[bold]{service.network.name}:[/bold] {snapshot.balance} {snapshot.symbol}")
    else:
        console.print(
            f"[yellow]{service.network.name}:[/yellow] balance unavailable "
            f"({snapshot.error}) - showing {snapshot.balance} {snapshot.symbol}"
        )
        raise typer.Exit(1)


# ------------------------------------------------------------------
# pay
# ------------------------------------------------------------------


@app.command()
def pay(
    all_: bool = typer.Option(False, "--all", help="Pay every employee on the roster"),
    employee_ids: Optional[List[int]] = typer.Option(None, "--id", "-i", help="Employee id to pay (repeatable)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Send each selected employee their salary in USDC, one transfer at a time."""
    from usdc_payroll.disburser import summarize
    from usdc_payroll.roster import select_employees, total_amount

    if all_ == bool(employee_ids):
        console.print("[red]Pass either --all or one or more --id options.[/red]")
        raise typer.Exit(1)

    service = _load_service()
    try:
        roster_ = service.load_roster()
    except PayrollError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    employees = roster_ if all_ else select_employees(roster_, employee_ids or [])
    if not employees:
        console.print("[yellow]No matching employees to pay.[/yellow]")
        raise typer.Exit(1)

    symbol = service.config.token.symbol
    decimals = service.config.token.decimals
    console.print(
        f"\n[bold]Pay {len(employees)} employees "
        f"{total_amount(employees, decimals)} {symbol} on {service.network.name}[/bold]\n"
    )
    if not yes:
        typer.confirm("Send these payments?", abort=True)

    async def _pay():
        try:
            return await service.pay_all(employees)
        finally:
            await service.close()

    try:
        results = _run(_pay())
    except PayrollError as e:
        console.print(f"[red]Payroll aborted: {e}[/red]")
        raise typer.Exit(1)

    names = {e.id: e.name for e in employees}
    table = Table(title="Payroll Results")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column(f"Amount ({symbol})", justify="right")
    table.add_column("Status")
    table.add_column("Tx / Error")

    for r in results:
        if r.success:
            status = "[green]sent[/green]"
            detail = f"[cyan]{r.transaction_hash}[/cyan]"
        else:
            status = "[red]failed[/red]"
            detail = f"[red]{r.error}[/red]"
        table.add_row(str(r.employee_id), names.get(r.employee_id, "-"), r.amount, status, detail)

    console.print(table)
    summary = summarize(results, decimals=decimals)
    console.print(
        f"Payroll complete: [green]{summary.successful} successful[/green], "
        f"[red]{summary.failed} failed[/red]"
    )
    if summary.successful == 0:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
