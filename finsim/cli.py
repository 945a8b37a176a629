"""
Command-Line Interface for FinSim.

Purpose
-------
Runs the monthly simulation against a JSON data file without writing
Python code: seed a demo household, project it forward with scheduled
actions, reset it to baseline, and inspect loan amortization.

Commands
--------
- init-demo: Write the demo household to a data file
- simulate: Reset, simulate and write back one user's data
- reset: Restore original balances and clear simulation ledgers
- amortize: Print a loan's payment and payoff schedule
- report: Summarize or export a saved simulation result
- info: Show version and dependency information

Example Usage
-------------
    # Seed the demo user
    $ finsim init-demo --data finsim-data.json

    # Simulate two years with a missed payment in month 3
    $ finsim simulate --data finsim-data.json --months 24 --actions actions.json

    # Payoff table for a car loan
    $ finsim amortize --principal 25000 --apr 4.5 --term 60
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import Optional

import click
import pandas as pd
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .amortization import amortization_schedule, monthly_payment
from .config import AppSettings
from .demo import demo_profile
from .exceptions import FinSimError, PersistenceFailure
from .persistence import JsonFileStore
from .results import SimulationResult
from .serialization import load_actions, save_result
from .simulation import SimulationService, build_request

# Version
__version__ = "0.1.0"

DEMO_USER = "demo"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _resolve_user(ctx: click.Context, user: Optional[str]) -> str:
    settings: AppSettings = ctx.obj["settings"]
    return user or settings.default_user or DEMO_USER


def _resolve_data(ctx: click.Context, data: Optional[Path]) -> Path:
    settings: AppSettings = ctx.obj["settings"]
    return data or settings.data_file


def _open_store(path: Path) -> JsonFileStore:
    try:
        return JsonFileStore(path)
    except (FinSimError, OSError, json.JSONDecodeError) as e:
        _fail(f"could not read data file {path}: {e}")


@click.group()
@click.version_option(version=__version__, prog_name="finsim")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    FinSim - Monthly Personal Finance Simulator.

    Projects income, expenses, loans and investments month by month and
    scores credit health along the way.

    Use 'finsim COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    _configure_logging("WARNING" if quiet else settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console()


# ---------------------------------------------------------------------------
# init-demo
# ---------------------------------------------------------------------------

@main.command("init-demo")
@click.option(
    "--data", "-d",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Data file (default: FINSIM_DATA_FILE or ./finsim-data.json)"
)
@click.option("--user", "-u", type=str, default=None, help="User id (default: demo)")
@click.option("--force", "-f", is_flag=True, help="Replace the user if it already exists")
@click.pass_context
def init_demo(ctx: click.Context, data: Optional[Path], user: Optional[str], force: bool) -> None:
    """
    Write the demo household to a data file.

    Two incomes, four expenses (one billed annually), a car loan, a
    credit-card balance and two investment accounts.

    Example:
        finsim init-demo -d finsim-data.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    data = _resolve_data(ctx, data)
    user = _resolve_user(ctx, user)

    store = _open_store(data)
    if user in store.users and not force:
        _fail(f"user {user!r} already exists in {data} (use --force to replace)")

    try:
        store.add_user(user, demo_profile())
    except OSError as e:
        _fail(f"could not write {data}: {e}")

    if not quiet:
        console.print(f"[green]Created demo user {user!r} in {data}[/green]")


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--data", "-d",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Data file (default: FINSIM_DATA_FILE or ./finsim-data.json)"
)
@click.option("--user", "-u", type=str, default=None, help="User id (default: demo)")
@click.option(
    "--months", "-m",
    type=int,
    default=None,
    help="Simulation horizon in months, 1-360 (default: FINSIM_DEFAULT_MONTHS or 12)"
)
@click.option(
    "--actions", "-a",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with a list of actions"
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the full result (timeline + credit history) as JSON"
)
@click.pass_context
def simulate(
    ctx: click.Context,
    data: Optional[Path],
    user: Optional[str],
    months: Optional[int],
    actions: Optional[Path],
    output: Optional[Path],
) -> None:
    """
    Simulate a user's finances month by month.

    Resets the user to baseline, runs the simulation and stores final
    balances, ledgers and credit history back into the data file.

    Example:
        finsim simulate -d finsim-data.json -m 24 -a actions.json -o result.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings: AppSettings = ctx.obj["settings"]
    data = _resolve_data(ctx, data)
    user = _resolve_user(ctx, user)
    months = months if months is not None else settings.default_months

    try:
        raw_actions = load_actions(actions) if actions else []
        request = build_request(months, raw_actions)
    except (FinSimError, OSError, json.JSONDecodeError) as e:
        _fail(str(e))

    store = _open_store(data)

    if not quiet:
        console.print(f"[bold blue]Simulating {request.months} months for {user!r}...[/bold blue]")

    try:
        result = asyncio.run(SimulationService(store).run(user, request))
    except PersistenceFailure as e:
        if e.result is not None and not quiet:
            _print_result(console, e.result)
        _fail(str(e))
    except FinSimError as e:
        _fail(str(e))

    if quiet:
        click.echo(f"Final Net Worth: ${result.final_net_worth:,.2f}")
        click.echo(f"Final Credit Score: {result.final_credit_score}")
    else:
        _print_result(console, result)

    if output:
        save_result(result, output)
        if not quiet:
            click.echo(f"Results saved to {output}")


def _print_result(console: Console, result: SimulationResult) -> None:
    timeline = Table(title="Monthly Timeline", show_header=True)
    timeline.add_column("Month", justify="right")
    timeline.add_column("Income", justify="right")
    timeline.add_column("Expenses", justify="right")
    timeline.add_column("Loans", justify="right")
    timeline.add_column("Cashflow", justify="right")
    timeline.add_column("Net Worth", style="green", justify="right")
    timeline.add_column("Score", style="cyan", justify="right")

    for r in result.timeline:
        timeline.add_row(
            str(r.month),
            f"${r.income:,.2f}",
            f"${r.expenses:,.2f}",
            f"${r.loan_payments:,.2f}",
            f"${r.cashflow:,.2f}",
            f"${r.net_worth:,.2f}",
            f"{r.credit_score} {r.credit_category}",
        )
    console.print(timeline)

    summary = Table(title="Simulation Results", show_header=True)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="green", justify="right")
    summary.add_row("Horizon", f"{result.months} months")
    summary.add_row("Final Net Worth", f"${result.final_net_worth:,.2f}")
    summary.add_row("Final Credit Score", str(result.final_credit_score))
    if result.credit_history:
        last = result.credit_history[-1]
        summary.add_row("Category", last.category)
        summary.add_row("", "")
        for name, points in last.breakdown.to_dict().items():
            summary.add_row(name.replace("_", " ").title(), str(points))
    console.print(summary)


# ---------------------------------------------------------------------------
# reset
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--data", "-d",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Data file (default: FINSIM_DATA_FILE or ./finsim-data.json)"
)
@click.option("--user", "-u", type=str, default=None, help="User id (default: demo)")
@click.pass_context
def reset(ctx: click.Context, data: Optional[Path], user: Optional[str]) -> None:
    """
    Reset a user to baseline.

    Loans return to their original amounts, investments to their starting
    balances; simulation transactions, loan payments and credit history
    are removed.

    Example:
        finsim reset -d finsim-data.json -u demo
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    data = _resolve_data(ctx, data)
    user = _resolve_user(ctx, user)

    store = _open_store(data)
    try:
        asyncio.run(SimulationService(store).reset(user))
    except FinSimError as e:
        _fail(str(e))

    if not quiet:
        console.print(f"[green]Reset {user!r} to baseline[/green]")


# ---------------------------------------------------------------------------
# amortize
# ---------------------------------------------------------------------------

@main.command()
@click.option("--principal", "-p", type=click.FloatRange(min=0), required=True, help="Amount borrowed")
@click.option("--apr", "-r", type=click.FloatRange(min=0), required=True, help="Annual percentage rate (4.5 = 4.5%)")
@click.option("--term", "-t", type=click.IntRange(min=1), required=True, help="Term in months")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the schedule as CSV"
)
@click.pass_context
def amortize(
    ctx: click.Context,
    principal: float,
    apr: float,
    term: int,
    output: Optional[Path],
) -> None:
    """
    Show the fixed monthly payment and payoff schedule for a loan.

    Example:
        finsim amortize -p 25000 -r 4.5 -t 60
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    try:
        payment = monthly_payment(principal, apr, term)
        schedule = amortization_schedule(principal, apr, term, payment=payment)
    except ValueError as e:
        _fail(str(e))

    if quiet:
        click.echo(f"Monthly Payment: ${payment:,.2f}")
    else:
        table = Table(title=f"Amortization: ${principal:,.2f} at {apr}% over {term} months")
        table.add_column("Month", justify="right")
        table.add_column("Payment", justify="right")
        table.add_column("Interest", justify="right")
        table.add_column("Principal", justify="right")
        table.add_column("Balance", style="green", justify="right")
        for row in schedule.itertuples(index=False):
            table.add_row(
                str(row.month),
                f"${row.payment:,.2f}",
                f"${row.interest:,.2f}",
                f"${row.principal:,.2f}",
                f"${row.balance:,.2f}",
            )
        console.print(table)
        console.print(
            f"[bold]Monthly Payment:[/bold] ${payment:,.2f}   "
            f"[bold]Total Interest:[/bold] ${schedule['interest'].sum():,.2f}"
        )

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        schedule.round(2).to_csv(output, index=False)
        if not quiet:
            click.echo(f"Schedule saved to {output}")


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--result", "-r",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to a result file written by 'simulate --output'"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["summary", "csv"]),
    default="summary",
    help="Output format (default: summary)"
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (for csv format, default: ./report.csv)"
)
@click.pass_context
def report(ctx: click.Context, result: Path, format: str, output: Optional[Path]) -> None:
    """
    Summarize or export a saved simulation result.

    Example:
        finsim report -r result.json --format csv -o timeline.csv
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    try:
        with open(result, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        _fail(f"could not read {result}: {e}")

    timeline = pd.DataFrame(
        [{k: v for k, v in row.items() if k != "transactions"} for row in data.get("timeline", [])]
    )

    if format == "summary":
        table = Table(title="Simulation Summary")
        table.add_column("Statistic", style="cyan")
        table.add_column("Value", style="green", justify="right")
        table.add_row("Horizon", f"{len(timeline)} months")
        table.add_row("Final Net Worth", f"${data.get('finalNetWorth', 0):,.2f}")
        table.add_row("Final Credit Score", str(data.get("finalCreditScore", "N/A")))
        if not timeline.empty:
            table.add_row("", "")
            table.add_row("Total Income", f"${timeline['income'].sum():,.2f}")
            table.add_row("Total Expenses", f"${timeline['expenses'].sum():,.2f}")
            table.add_row("Total Loan Payments", f"${timeline['loanPayments'].sum():,.2f}")
            table.add_row("Total Investment Gains", f"${timeline['investmentGains'].sum():,.2f}")
            table.add_row("Lowest Credit Score", str(int(timeline["creditScore"].min())))
        console.print(table)

    elif format == "csv":
        if timeline.empty:
            _fail(f"no timeline found in {result}")
        if not output:
            output = Path("report.csv")
        timeline.to_csv(output, index=False)
        if not quiet:
            click.echo(f"CSV report saved to {output}")


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers, installed dependencies, and the active
    settings.
    """
    console = ctx.obj["console"]
    settings: AppSettings = ctx.obj["settings"]

    info_lines = [
        f"FinSim Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]

    for name in ("numpy", "pandas", "pydantic", "pydantic-settings", "click", "rich"):
        try:
            info_lines.append(f"{name}: {package_version(name)}")
        except PackageNotFoundError:
            info_lines.append(f"{name}: not installed")

    info_lines.append("")
    info_lines.append(f"Data file: {settings.data_file}")
    info_lines.append(f"Log level: {settings.log_level}")
    info_lines.append(f"Default horizon: {settings.default_months} months")

    console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
