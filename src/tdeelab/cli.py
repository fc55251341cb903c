"""CLI interface using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from tdeelab.config import get_settings
from tdeelab.export import JSONFormatter, TableFormatter

app = typer.Typer(
    help="Adaptive TDEE estimation from food logs and weigh-ins",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show or initialise settings")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Adaptive TDEE estimation from food logs and weigh-ins."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict) -> None:
    """Output JSON response to stdout."""
    print(JSONFormatter.dumps(response))


def use_json(json_output: bool) -> bool:
    """--json wins; otherwise fall back to the configured output format."""
    return json_output or get_settings().defaults.output_format == "json"


def load_records(path: Path, command: str, as_json: bool):
    """Load a series CSV, exiting with a friendly message on bad input."""
    from tdeelab.data.series_loader import load_series_csv

    if not path.exists():
        fail(command, f"File not found: {path}", as_json)
    try:
        return load_series_csv(path)
    except ValueError as e:
        fail(command, str(e), as_json)


def fail(command: str, message: str, as_json: bool) -> None:
    if as_json:
        output_json(JSONFormatter().error(command, [message]))
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


# ============================================================================
# Estimation Commands
# ============================================================================


@app.command("regression")
def regression(
    series_file: Path = typer.Argument(..., help="CSV with date, reported_intake_kcal, weight_kg"),
    energy_density: Optional[float] = typer.Option(
        None, "--energy-density", help="kcal per kg of weight change"
    ),
    min_days: Optional[int] = typer.Option(None, "--min-days", help="Minimum valid days"),
    ideal_days: Optional[int] = typer.Option(None, "--ideal-days", help="Days for full coverage"),
    smoothing_window: Optional[int] = typer.Option(
        None, "--smoothing-window", help="Moving-average window for weights"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Estimate TDEE from the intake average and the weight trend."""
    from tdeelab.tracking.regression import estimate_regression_tdee

    as_json = use_json(json_output)
    try:
        cfg = get_settings().regression.with_overrides(
            energy_density_kcal_per_kg=energy_density,
            min_days=min_days,
            ideal_days=ideal_days,
            weight_smoothing_window=smoothing_window,
        )
    except ValueError as e:
        fail("regression", str(e), as_json)

    records = load_records(series_file, "regression", as_json)
    result = estimate_regression_tdee(records, cfg)

    if as_json:
        output_json(JSONFormatter().format_regression(result))
    else:
        TableFormatter(console).format_regression(result)


@app.command("linear")
def linear(
    series_file: Path = typer.Argument(..., help="CSV with date, reported_intake_kcal, weight_kg"),
    sex: str = typer.Option(..., "--sex", help="male or female"),
    age: int = typer.Option(..., "--age", help="Age in years"),
    height: float = typer.Option(..., "--height", help="Height in cm"),
    pal: Optional[float] = typer.Option(None, "--pal", help="Baseline physical activity level"),
    activity: Optional[str] = typer.Option(
        None,
        "--activity",
        help="sedentary, light, moderate, active, very_active (ignored with --pal)",
    ),
    window_days: Optional[int] = typer.Option(None, "--window-days", help="Window length"),
    step_days: Optional[int] = typer.Option(
        None, "--step-days", help="Window step (default: half a window)"
    ),
    smoothing: Optional[str] = typer.Option(None, "--smoothing", help="ema or ma7"),
    baseline_weight: Optional[float] = typer.Option(
        None, "--baseline-weight", help="BW0 in kg (default: first smoothed weight)"
    ),
    show_daily: bool = typer.Option(False, "--daily", help="Show per-day estimates"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Model expected intake and compare it with reported intake."""
    from tdeelab.tracking.linearized import estimate_linearized_energy
    from tdeelab.tracking.models import PatientProfile

    as_json = use_json(json_output)

    try:
        profile = PatientProfile.create(sex, age, height, pal if pal is not None else activity)
        cfg = get_settings().linear.with_overrides(
            window_days=window_days,
            window_step_days=step_days,
            smoothing=smoothing,
            baseline_weight_kg=baseline_weight,
        )
    except ValueError as e:
        fail("linear", str(e), as_json)

    records = load_records(series_file, "linear", as_json)
    result = estimate_linearized_energy(profile, records, cfg)

    if as_json:
        output_json(JSONFormatter().format_linear(result))
    else:
        TableFormatter(console).format_linear(result, show_daily=show_daily)


@app.command("recommend")
def recommend(
    tdee: float = typer.Argument(..., help="Estimated TDEE (kcal/day)"),
    current_intake: float = typer.Argument(..., help="Current intake (kcal/day)"),
    goal: float = typer.Argument(..., help="Target change in kg/week (negative to lose)"),
    energy_density: Optional[float] = typer.Option(
        None, "--energy-density", help="kcal per kg of weight change"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Recommend a daily intake for a weekly weight-change goal."""
    from tdeelab.tracking.regression import calorie_recommendation

    density = energy_density or get_settings().regression.energy_density_kcal_per_kg
    recommendation = calorie_recommendation(tdee, current_intake, goal, density)

    if use_json(json_output):
        output_json(JSONFormatter().format_recommendation(recommendation))
    else:
        TableFormatter(console).format_recommendation(recommendation)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the active settings."""
    import yaml

    data = get_settings().to_dict()
    if json_output:
        output_json({"success": True, "command": "config show", "data": data})
    else:
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Config file location"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a config file with the default settings."""
    from tdeelab.config.settings import Settings, default_config_path

    target = path or default_config_path()
    if target.exists() and not force:
        console.print(f"[yellow]{target} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    written = Settings().save(target)
    console.print(f"[green]Wrote default settings to {written}[/green]")


if __name__ == "__main__":
    app()
