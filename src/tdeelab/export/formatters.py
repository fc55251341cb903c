"""Output formatters for estimator results."""

from __future__ import annotations

import json
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tdeelab.tracking.ema import estimate_weekly_change
from tdeelab.tracking.interpretation import confidence_tier, describe_flag, describe_window
from tdeelab.tracking.models import CalorieRecommendation, LinearResult, RegressionResult

TIER_COLORS = {
    "insufficient": "dim",
    "low": "yellow",
    "moderate": "blue",
    "high": "green",
}


def _fmt(value: Optional[float], spec: str = "", suffix: str = "") -> str:
    if value is None:
        return "-"
    return f"{value:{spec}}{suffix}"


class TableFormatter:
    """Format results as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def format_regression(self, result: RegressionResult) -> None:
        """Print a regression estimate."""
        tier = confidence_tier(result.confidence)
        color = TIER_COLORS[tier]

        if not result.is_sufficient:
            self.console.print(
                Panel(
                    f"[{color}]{result.interpretation}[/{color}]\n"
                    f"Valid days: {result.period_days}"
                    + (f" | Avg intake: {result.avg_intake_kcal} kcal" if result.avg_intake_kcal else ""),
                    title="Adaptive TDEE",
                )
            )
            return

        table = Table(title="Adaptive TDEE")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("TDEE", f"[bold]{result.tdee_kcal}[/bold] kcal/day")
        table.add_row("Avg intake", f"{result.avg_intake_kcal} kcal/day")
        table.add_row("Deficit/surplus", f"{result.deficit_kcal:+d} kcal/day")
        table.add_row("Weight change", f"{result.total_weight_change_kg:+.2f} kg")
        table.add_row("Rate", f"{result.weight_change_rate_kg_per_day:+.3f} kg/day")
        table.add_row("Projected", f"{result.projected_weekly_change_kg:+.2f} kg/week")
        table.add_row("Days analyzed", str(result.period_days))
        table.add_row("Confidence", f"[{color}]{result.confidence:.0%} ({tier})[/{color}]")
        self.console.print(table)
        self.console.print(result.interpretation)

    def format_linear(self, result: LinearResult, show_daily: bool = False) -> None:
        """Print a linearized model run: baseline, windows and optionally days."""
        if result.baseline is None:
            self.console.print("[yellow]" + "; ".join(result.notes) + "[/yellow]")
            return

        baseline = result.baseline
        header = [
            f"BW0: {baseline.bw0_kg:.1f} kg | BMR0: {baseline.bmr0_kcal:.0f} kcal | "
            f"PAL0: {baseline.pal0} | EE0: {baseline.ee0_kcal:.0f} kcal",
            f"ε = {result.params.eps_kcal_per_kg_day} kcal/kg/day | "
            f"ρ = {result.params.rho_kcal_per_kg} kcal/kg",
        ]
        latest = result.latest_expenditure
        if latest is not None:
            header.append(
                f"Latest modeled expenditure: [bold]{latest.modeled_expenditure_kcal}[/bold] "
                f"kcal ({latest.date.isoformat()})"
            )
        trended = [d for d in result.daily if d.smoothed_weight_kg is not None]
        if len(trended) >= 2:
            weekly = estimate_weekly_change(
                trended[0].smoothed_weight_kg,
                trended[-1].smoothed_weight_kg,
                (trended[-1].date - trended[0].date).days,
            )
            header.append(f"Trend: {weekly:+.2f} kg/week")
        self.console.print(Panel("\n".join(header), title="Energy Model"))

        if show_daily:
            daily_table = Table(title="Daily Estimates")
            daily_table.add_column("Date", style="cyan")
            daily_table.add_column("Weight", justify="right")
            daily_table.add_column("Trend", justify="right", style="blue")
            daily_table.add_column("dBW/dt", justify="right")
            daily_table.add_column("EI model", justify="right")
            daily_table.add_column("EE model", justify="right")
            daily_table.add_column("EI reported", justify="right")
            daily_table.add_column("Bias", justify="right")
            daily_table.add_column("Adherence", justify="right")
            for d in result.daily:
                daily_table.add_row(
                    d.date.isoformat(),
                    _fmt(d.weight_kg, ".1f"),
                    _fmt(d.smoothed_weight_kg, ".1f"),
                    _fmt(d.weight_slope_kg_per_day, "+.3f"),
                    _fmt(d.modeled_intake_kcal),
                    _fmt(d.modeled_expenditure_kcal),
                    _fmt(d.reported_intake_kcal),
                    _fmt(d.bias_kcal, "+d"),
                    _fmt(d.adherence, ".2f"),
                )
            self.console.print(daily_table)

        window_table = Table(title="Window Summaries")
        window_table.add_column("Window", style="cyan")
        window_table.add_column("Food/Weigh", justify="right")
        window_table.add_column("Bias (med)", justify="right")
        window_table.add_column("Adherence (med)", justify="right")
        window_table.add_column("EE model", justify="right")
        window_table.add_column("Confidence", justify="right")
        window_table.add_column("Flags")
        for w in result.windows:
            color = TIER_COLORS[confidence_tier(w.confidence)]
            window_table.add_row(
                f"{w.start.isoformat()} → {w.end.isoformat()}",
                f"{w.intake_days}/{w.weigh_in_days}",
                _fmt(w.bias_median, "+d"),
                _fmt(w.adherence_median, ".2f"),
                _fmt(w.modeled_expenditure_mean),
                f"[{color}]{w.confidence:.2f}[/{color}]",
                ", ".join(describe_flag(f) for f in w.flags) or "-",
            )
        self.console.print(window_table)

        window = result.latest_window
        if window is not None:
            self.console.print(
                describe_window(
                    window.bias_median, window.adherence_median, window.confidence, window.flags
                )
            )
        for note in result.notes:
            self.console.print(f"[dim]{note}[/dim]")

    def format_recommendation(self, recommendation: CalorieRecommendation) -> None:
        self.console.print(
            f"[green]Target:[/green] {recommendation.recommended_intake_kcal} kcal/day "
            f"({recommendation.adjustment_kcal:+d} kcal)"
        )
        self.console.print(recommendation.explanation)


class JSONFormatter:
    """Format results as the CLI's JSON response envelope."""

    def envelope(
        self,
        command: str,
        data: dict[str, Any],
        human_summary: str,
        success: bool = True,
    ) -> dict[str, Any]:
        return {
            "success": success,
            "command": command,
            "data": data,
            "human_summary": human_summary,
        }

    def error(self, command: str, errors: list[str]) -> dict[str, Any]:
        return {"success": False, "command": command, "errors": errors}

    def format_regression(self, result: RegressionResult) -> dict[str, Any]:
        return self.envelope("regression", result.to_dict(), result.interpretation)

    def format_linear(self, result: LinearResult) -> dict[str, Any]:
        window = result.latest_window
        if window is None:
            summary = "; ".join(result.notes) or "No windows"
        else:
            summary = describe_window(
                window.bias_median, window.adherence_median, window.confidence, window.flags
            )
        return self.envelope("linear", result.to_dict(), summary)

    def format_recommendation(self, recommendation: CalorieRecommendation) -> dict[str, Any]:
        return self.envelope("recommend", recommendation.to_dict(), recommendation.explanation)

    @staticmethod
    def dumps(response: dict[str, Any]) -> str:
        return json.dumps(response, indent=2, default=str)
