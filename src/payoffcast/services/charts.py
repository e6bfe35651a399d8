"""Chart rendering for payoff plans and forecasts."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from tempfile import NamedTemporaryFile

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
from matplotlib.figure import Figure

from .debts import DebtRepaymentStrategy, add_months
from .forecast import Forecast


def balance_timeline(strategy: DebtRepaymentStrategy) -> list[tuple[date, float]]:
    """Total remaining balance after each simulated month.

    Each debt contributes its balance as of its latest payment on or before
    that month. A debt that has not been paid yet (waiting or stalled) counts
    at its starting balance; a paid-off debt counts as zero.
    """

    if not strategy.debt_plans or strategy.total_months == 0:
        return []
    start = min(p.payments[0].date for p in strategy.debt_plans if p.payments)
    days = [add_months(start, month) for month in range(strategy.total_months)]
    totals = [0.0] * len(days)
    for plan in strategy.debt_plans:
        balance = plan.remaining_amount
        records = iter(plan.payments)
        upcoming = next(records, None)
        for i, day in enumerate(days):
            while upcoming is not None and upcoming.date <= day:
                balance = upcoming.remaining_balance
                upcoming = next(records, None)
            totals[i] += balance
    return list(zip(days, totals))


def _save(fig: Figure, output_path: Path | None) -> Path:
    if output_path is None:
        with NamedTemporaryFile(delete=False, suffix=".png") as tmp:
            output_path = Path(tmp.name)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, bbox_inches="tight", dpi=100)
    finally:
        plt.close(fig)
    return output_path


def build_debt_payoff_chart(strategy: DebtRepaymentStrategy) -> Figure:
    """Line chart of the total remaining balance with milestone markers."""

    timeline = balance_timeline(strategy)
    fig, ax = plt.subplots(figsize=(10, 6))

    if not timeline:
        ax.text(0.5, 0.5, "No payoff schedule", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")
        return fig

    labels = [d.strftime("%b %Y") for d, _ in timeline]
    totals = [total for _, total in timeline]
    x_vals = list(range(len(totals)))

    ax.plot(x_vals, totals, marker="o", color="#4F46E5", linewidth=2.5, markersize=4)
    ax.fill_between(x_vals, totals, color="#E0E7FF", alpha=0.5)

    starting_debt = sum(p.remaining_amount for p in strategy.debt_plans)
    half_point = starting_debt / 2
    for i, total in enumerate(totals):
        if total <= half_point:
            ax.axvline(x=i, color="#22C55E", linestyle="--", alpha=0.6, linewidth=1.5)
            ax.annotate(
                "50% Paid",
                (i, total),
                xytext=(10, 30),
                textcoords="offset points",
                fontsize=9,
                color="#22C55E",
                fontweight="bold",
            )
            break

    if strategy.is_fully_payable:
        ax.scatter([x_vals[-1]], [0], s=200, c="gold", marker="*", zorder=5, edgecolors="#F59E0B")
        ax.annotate(
            "DEBT FREE",
            (x_vals[-1], 0),
            xytext=(0, 25),
            textcoords="offset points",
            ha="center",
            fontsize=12,
            fontweight="bold",
            color="#16A34A",
        )

    ax.grid(True, linestyle="--", alpha=0.3)
    ax.set_axisbelow(True)
    ax.set_title(
        f"Debt Payoff Projection ({strategy.strategy.title()})", fontsize=14, fontweight="bold", pad=15
    )
    ax.set_ylabel("Remaining Balance", fontsize=11)
    ax.set_xlabel("Month", fontsize=11)

    # Set ticks before labels
    tick_step = max(1, len(x_vals) // 8)
    ax.set_xticks(x_vals[::tick_step])
    ax.set_xticklabels(labels[::tick_step], rotation=45, ha="right")
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda x, p: f"{x:,.0f}"))

    stats = (
        f"Starting Debt: {starting_debt:,.0f}\n"
        f"Months to Payoff: {strategy.total_months}\n"
        f"Total Interest: {strategy.total_interest_paid:,.0f}"
    )
    props = dict(boxstyle="round", facecolor="lavender", alpha=0.8)
    ax.text(0.98, 0.98, stats, transform=ax.transAxes, fontsize=9, ha="right", va="top", bbox=props)

    plt.tight_layout()
    return fig


def build_scenario_chart(forecast: Forecast) -> Figure:
    """Bar chart comparing projected net worth across the three return scenarios."""

    names = []
    values = []
    for name, outcome in forecast.scenarios.items():
        names.append(f"{name.title()}\n({outcome.annual_rate:.0f}%)")
        values.append(outcome.net_worth)

    fig, ax = plt.subplots(figsize=(8, 5))
    colors = ["#94A3B8", "#4F46E5", "#16A34A"]
    bars = ax.bar(names, values, color=colors, edgecolor="white", linewidth=1.5)
    for bar, value in zip(bars, values):
        ax.annotate(
            f"{value:,.0f}",
            (bar.get_x() + bar.get_width() / 2, bar.get_height()),
            xytext=(0, 4),
            textcoords="offset points",
            ha="center",
            fontsize=10,
            fontweight="bold",
        )
    ax.axhline(0, color="#374151", linewidth=0.8)
    ax.set_title(
        f"Projected Net Worth in {forecast.horizon_years:g} Years", fontsize=14, fontweight="bold", pad=15
    )
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda x, p: f"{x:,.0f}"))
    ax.grid(True, axis="y", linestyle="--", alpha=0.3)
    ax.set_axisbelow(True)
    plt.tight_layout()
    return fig


def debt_payoff_chart_png(strategy: DebtRepaymentStrategy, output_path: Path | None = None) -> Path:
    """Render the payoff chart to PNG and return its path."""
    return _save(build_debt_payoff_chart(strategy), output_path)


def scenario_chart_png(forecast: Forecast, output_path: Path | None = None) -> Path:
    """Render the scenario chart to PNG and return its path."""
    return _save(build_scenario_chart(forecast), output_path)


__all__ = [
    "balance_timeline",
    "build_debt_payoff_chart",
    "build_scenario_chart",
    "debt_payoff_chart_png",
    "scenario_chart_png",
]
