"""Main entry point for the Story Spoiler API test suite."""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import settings
from src.errors import AuthenticationError
from src.scenario.runner import SCENARIO, ScenarioReport, ScenarioStep, run_scenario
from src.session.bootstrap import Credentials, StorySession

app = typer.Typer(
    help="Story Spoiler API test suite - Authenticates once and runs the ordered Story CRUD scenario",
    no_args_is_help=False
)
console = Console()

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_SETUP_FAILED = 2


def configure_logging(verbose: bool = False) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def print_session_banner(base_url: str):
    """Print session start banner with timestamp."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    banner = Panel(
        Text(f"Story Spoiler API Tests\n{base_url}\nSession started: {timestamp}", justify="center"),
        border_style="bright_blue",
        title="[bold bright_blue]TEST SESSION[/bold bright_blue]"
    )
    console.print(banner)


def print_progress(current: int, total: int, step: ScenarioStep):
    """Print progress indicator."""
    console.print(f"[cyan][{current}/{total}][/cyan] {step.name}...")


def print_summary_report(report: ScenarioReport):
    """Print final summary report using Rich."""
    table = Table(title="Story Scenario — Session Report", show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Step", style="cyan")
    table.add_column("Result")
    table.add_column("Time", justify="right")
    table.add_column("Error", style="red")

    for result in report.results:
        outcome = "[green]PASSED[/green]" if result.passed else "[red]FAILED[/red]"
        table.add_row(str(result.index), result.name, outcome, f"{result.duration:.2f}s", result.error or "")

    console.print("\n")
    console.print(table)
    console.print(
        f"\n[bold]{len(report.passed)} passed[/bold], "
        f"[bold]{len(report.failed)} failed[/bold]"
    )

    written = [r.failure_file for r in report.failed if r.failure_file]
    if written:
        console.print("\n[bold red]FAILURE CONTEXT:[/bold red]")
        for path in written:
            console.print(f"  • {path}")


def _run_scenario(
    base_url: Optional[str],
    username: Optional[str],
    password: Optional[str],
    timeout: Optional[float],
    failures_dir: Optional[Path],
    verbose: bool,
) -> int:
    """
    Internal scenario execution function. Returns the process exit code.
    """
    configure_logging(verbose)

    credentials = Credentials(
        userName=username or settings.STORY_API_USERNAME,
        password=password or settings.STORY_API_PASSWORD,
    )
    session = StorySession.from_settings(base_url=base_url, credentials=credentials, timeout=timeout)
    failures_dir = failures_dir or Path(settings.STORY_API_FAILURES_DIR)

    print_session_banner(session.base_url)

    try:
        report = run_scenario(session, failures_dir=failures_dir, on_step=print_progress)
    except AuthenticationError as e:
        console.print(Panel(str(e), border_style="red", title="[bold red]Authentication failed[/bold red]"))
        return EXIT_SETUP_FAILED
    except httpx.HTTPError as e:
        console.print(Panel(str(e), border_style="red", title="[bold red]Could not reach the Story service[/bold red]"))
        return EXIT_SETUP_FAILED

    print_summary_report(report)
    return EXIT_OK if report.ok else EXIT_STEP_FAILED


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Story service origin"),
    username: Optional[str] = typer.Option(None, "--username", help="Login user name"),
    password: Optional[str] = typer.Option(None, "--password", help="Login password"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
    failures_dir: Optional[Path] = typer.Option(None, "--failures-dir", help="Where failure context JSON is written"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")
):
    """
    Run the Story scenario.

    Executes: Authenticate → Create → Edit → List → Delete → negative paths
    """
    if ctx.invoked_subcommand is None:
        raise typer.Exit(_run_scenario(base_url, username, password, timeout, failures_dir, verbose))


@app.command(name="run")
def run_cmd(
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Story service origin"),
    username: Optional[str] = typer.Option(None, "--username", help="Login user name"),
    password: Optional[str] = typer.Option(None, "--password", help="Login password"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
    failures_dir: Optional[Path] = typer.Option(None, "--failures-dir", help="Where failure context JSON is written"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")
):
    """
    Run the Story scenario (explicit command).

    Executes: Authenticate → Create → Edit → List → Delete → negative paths
    """
    raise typer.Exit(_run_scenario(base_url, username, password, timeout, failures_dir, verbose))


@app.command(name="steps")
def steps_cmd():
    """List the scenario steps in the order they run."""
    table = Table(title="Story Scenario", show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Step", style="cyan")
    table.add_column("Request / expectation", style="green")
    for index, step in enumerate(SCENARIO, 1):
        table.add_row(str(index), step.name, step.description)
    console.print(table)


if __name__ == "__main__":
    app()
