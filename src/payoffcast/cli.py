"""Command-line interface for PayoffCast.

Every planning command reads its input from a JSON file, or from the local
database when no file is given.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import IO, Any

import click

from .config import BaseConfig
from .infra.database import bootstrap_database
from .logging_config import get_logger, setup_logging
from .serialization import (
    PayloadError,
    debts_from_payload,
    dumps,
    load_json,
    snapshot_from_payload,
    summary_from_payload,
)
from .services.charts import debt_payoff_chart_png, scenario_chart_png
from .services.debts import STRATEGIES, Debt, DebtRepaymentStrategy, compare_strategies, simulate_debt_repayment
from .services.forecast import FinancialSnapshot, project_financial_forecast
from .services.insights import FinancialSummary, generate_insights, summarize_insights
from .services.snapshot import build_snapshot, build_summary, repositories_from_session_factory

logger = get_logger("cli")


def _parse_date(ctx: click.Context, param: click.Parameter, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise click.BadParameter("expected YYYY-MM-DD") from exc


def _read_payload(source: IO[str]) -> Any:
    try:
        return load_json(source.read())
    except PayloadError as exc:
        raise click.ClickException(str(exc)) from exc


def _repositories(config: BaseConfig):
    _, session_factory = bootstrap_database(config)
    return repositories_from_session_factory(session_factory)


def _load_debts(config: BaseConfig, source: IO[str] | None) -> list[Debt]:
    if source is None:
        return list(build_snapshot(_repositories(config), lookback_months=config.SNAPSHOT_LOOKBACK_MONTHS).liabilities)
    try:
        return debts_from_payload(_read_payload(source))
    except PayloadError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_snapshot(config: BaseConfig, source: IO[str] | None, today: date | None) -> FinancialSnapshot:
    if source is None:
        return build_snapshot(
            _repositories(config), today=today, lookback_months=config.SNAPSHOT_LOOKBACK_MONTHS
        )
    try:
        return snapshot_from_payload(_read_payload(source))
    except PayloadError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_summary(config: BaseConfig, source: IO[str] | None, today: date | None) -> FinancialSummary:
    if source is None:
        return build_summary(
            _repositories(config), today=today, lookback_months=config.SNAPSHOT_LOOKBACK_MONTHS
        )
    try:
        return summary_from_payload(_read_payload(source))
    except PayloadError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_strategy(result: DebtRepaymentStrategy) -> None:
    click.echo(f"Strategy:       {result.strategy}")
    click.echo(f"Months:         {result.total_months}")
    click.echo(f"Total interest: {result.total_interest_paid:,.2f}")
    click.echo(f"Total paid:     {result.total_paid:,.2f}")
    click.echo(f"Debt-free by:   {result.payoff_date.isoformat()}")
    for plan in result.debt_plans:
        payoff = plan.payoff_date.isoformat() if plan.payoff_date else "-"
        click.echo(
            f"  {plan.name:<24} {plan.status.value:<9} {plan.months:>4} mo "
            f"interest {plan.total_interest:>12,.2f}  payoff {payoff}"
        )
    if not result.is_fully_payable:
        click.echo("Warning: some debts cannot be paid off under this allocation.", err=True)


input_argument = click.argument("source", type=click.File("r"), required=False)
today_option = click.option(
    "--today", callback=_parse_date, default=None, help="Simulation start date (YYYY-MM-DD)."
)


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Debt payoff and financial projection tools."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = config


@main.command("init-db")
@click.pass_obj
def init_db(config: BaseConfig) -> None:
    """Create the local database schema."""

    bootstrap_database(config)
    click.echo(f"Database ready: {config.DATABASE_URL}")


@main.command()
@input_argument
@click.option("--strategy", type=click.Choice(STRATEGIES), default=None, help="Payoff ordering.")
@click.option("--extra", type=click.FloatRange(min=0), default=0.0, show_default=True, help="Extra monthly payment.")
@today_option
@click.option("--json", "as_json", is_flag=True, help="Print the full schedule as JSON.")
@click.pass_obj
def simulate(
    config: BaseConfig,
    source: IO[str] | None,
    strategy: str | None,
    extra: float,
    today: date | None,
    as_json: bool,
) -> None:
    """Simulate paying off debts with the snowball or avalanche method."""

    result = simulate_debt_repayment(
        _load_debts(config, source), strategy or config.DEFAULT_STRATEGY, extra, today=today
    )
    if as_json:
        click.echo(dumps(result))
    else:
        _echo_strategy(result)


@main.command()
@input_argument
@click.option("--chosen", type=click.Choice(STRATEGIES), default=None, help="Strategy to measure.")
@click.option("--extra", type=click.FloatRange(min=0), default=0.0, show_default=True)
@today_option
@click.pass_obj
def compare(
    config: BaseConfig, source: IO[str] | None, chosen: str | None, extra: float, today: date | None
) -> None:
    """Compare the chosen strategy with the alternative ordering."""

    comparison = compare_strategies(
        _load_debts(config, source), extra, chosen=chosen or config.DEFAULT_STRATEGY, today=today
    )
    _echo_strategy(comparison.chosen)
    click.echo(
        f"Versus {comparison.alternate.strategy}: saves {comparison.interest_savings:,.2f} "
        f"in interest and {comparison.months_saved} months"
    )


@main.command()
@input_argument
@click.option("--horizon", type=click.FloatRange(min=0, min_open=True), default=None, help="Scenario horizon in years.")
@today_option
@click.pass_obj
def forecast(
    config: BaseConfig, source: IO[str] | None, horizon: float | None, today: date | None
) -> None:
    """Project savings, net worth and retirement figures as JSON."""

    snapshot = _load_snapshot(config, source, today)
    click.echo(dumps(project_financial_forecast(snapshot, horizon or config.HORIZON_YEARS, today=today)))


@main.command()
@input_argument
@today_option
@click.pass_obj
def insights(config: BaseConfig, source: IO[str] | None, today: date | None) -> None:
    """Print rule-based insights."""

    results = generate_insights(_load_summary(config, source, today))
    for insight in results:
        click.echo(f"[{insight.type.value}] {insight.title}: {insight.description}")
    counts = ", ".join(f"{name}={count}" for name, count in summarize_insights(results).items() if count)
    click.echo(f"({counts})")


@main.command()
@click.argument("kind", type=click.Choice(["payoff", "scenarios"]))
@input_argument
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True)
@click.option("--strategy", type=click.Choice(STRATEGIES), default=None)
@click.option("--extra", type=click.FloatRange(min=0), default=0.0)
@click.option("--horizon", type=click.FloatRange(min=0, min_open=True), default=None)
@today_option
@click.pass_obj
def chart(
    config: BaseConfig,
    kind: str,
    source: IO[str] | None,
    output: Path,
    strategy: str | None,
    extra: float,
    horizon: float | None,
    today: date | None,
) -> None:
    """Render a payoff or scenario chart to a PNG file."""

    if kind == "payoff":
        result = simulate_debt_repayment(
            _load_debts(config, source), strategy or config.DEFAULT_STRATEGY, extra, today=today
        )
        path = debt_payoff_chart_png(result, output)
    else:
        snapshot = _load_snapshot(config, source, today)
        path = scenario_chart_png(
            project_financial_forecast(snapshot, horizon or config.HORIZON_YEARS, today=today), output
        )
    logger.info("Chart written", extra={"kind": kind, "path": str(path)})
    click.echo(f"Chart written: {path}")


if __name__ == "__main__":  # pragma: no cover
    main()
