"""SecGate CLI - security and quality gate for deployment bundles."""

from dataclasses import replace
from pathlib import Path

import typer
from rich.table import Table

from secgate import __version__
from secgate.catalog import CATALOG, GROUP_TITLES
from secgate.config import load_gate_config
from secgate.gate import classify_run, run_all
from secgate.report import TIMESTAMP_MODES, write_reports
from secgate.types import EXIT_ENV_ERROR, GateError
from secgate.ui import configure_logging, make_console, render_header, render_summary

cli = typer.Typer(
    name="secgate",
    help="SecGate - security and quality gate for container deployment bundles",
    no_args_is_help=True,
)


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show SecGate version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Security and quality gate checks for CI/CD pipelines."""


@cli.command(name="run")
def run_cmd(
    project_root: Path = typer.Argument(
        Path("."),
        help="Project root holding the Dockerfile, manifests and sources",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Gate config file (default: <root>/.secgate/gate.toml or gate.json)",
    ),
    out: Path | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Write SECURITY_GATE_REPORT.json/.md into this directory",
    ),
    timestamp_mode: str = typer.Option(
        "deterministic",
        "--timestamp-mode",
        help="Timestamp mode for report artifacts: deterministic or wallclock",
    ),
    tool_timeout: float | None = typer.Option(
        None,
        "--tool-timeout",
        min=0.1,
        help="Seconds before an advisory tool invocation is abandoned",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log tool invocations and skipped files",
    ),
) -> None:
    """Run every security and quality check against a project tree.

    Exit codes:
      0 - All checks passed, or passed with warnings
      1 - At least one check failed
      2 - Operational error (bad project root, bad config)
    """
    console = make_console()
    configure_logging(verbose, console)

    if timestamp_mode not in TIMESTAMP_MODES:
        typer.echo(f"❌ Unknown timestamp mode: {timestamp_mode}", err=True)
        raise typer.Exit(code=EXIT_ENV_ERROR)

    try:
        config = load_gate_config(project_root, config_path)
        if tool_timeout is not None:
            config = replace(config, tool_timeout=tool_timeout)

        render_header(console, str(project_root))
        report = run_all(project_root, config=config, console=console)
        verdict = classify_run(report)
        render_summary(console, report, verdict)

        if out is not None:
            json_path, md_path = write_reports(report, verdict, out, timestamp_mode)
            typer.echo("\nReports written to:")
            typer.echo(f"  {json_path}")
            typer.echo(f"  {md_path}")

    except GateError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=EXIT_ENV_ERROR) from e
    except OSError as e:
        typer.echo(f"❌ Security gate run failed: {e}", err=True)
        raise typer.Exit(code=EXIT_ENV_ERROR) from e

    raise typer.Exit(code=verdict.exit_code)


@cli.command(name="list-checks")
def list_checks_cmd() -> None:
    """List the check catalog in execution order."""
    console = make_console()
    table = Table(title="SecGate check catalog")
    table.add_column("#", justify="right")
    table.add_column("Check", no_wrap=True)
    table.add_column("Group")
    table.add_column("On violation")
    for index, spec in enumerate(CATALOG, start=1):
        table.add_row(
            str(index),
            spec.check_id,
            GROUP_TITLES.get(spec.group, spec.group),
            spec.on_violation.value.upper(),
        )
    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
