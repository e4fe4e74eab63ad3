"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.api_client import GameTimeApiClient
from ..adapters.mock_gametime_client import MockGameTimeClient
from ..config import AppConfig
from ..domain.exceptions import GameTimeError
from ..domain.models import DAY_ABBREVIATIONS, SlotStatus
from ..domain.overlay import CellDescriptor, CompositeGrid, OverlayCompositor, format_hour
from ..domain.recurrence import Frequency, generate_recurring_dates
from ..domain.suggestions import TimeSuggestionRanker
from ..services.gametime_service import GameTimeService

app = typer.Typer(
    name="gametime",
    help="Inspect weekly game time grids, recurring events and poll suggestions",
    add_completion=False
)

console = Console()

STATUS_STYLES = {
    SlotStatus.INACTIVE: ("·", "dim"),
    SlotStatus.AVAILABLE: ("■", "green"),
    SlotStatus.COMMITTED: ("■", "blue"),
    SlotStatus.BLOCKED: ("■", "red"),
    SlotStatus.FREED: ("□", "green"),
}


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config = AppConfig.load_or_default(config_file)
    logging.basicConfig(
        level=config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    return config


def _build_service(config: AppConfig, mock: bool, hour_range=None) -> GameTimeService:
    if mock:
        client = MockGameTimeClient()
    else:
        client = GameTimeApiClient(base_url=config.api_base_url, access_token=config.api_token)

    return GameTimeService(
        client=client,
        compositor=OverlayCompositor(hour_range or config.grid.hour_range()),
        ranker=TimeSuggestionRanker(timezone=config.timezone),
    )


def _render_cell(cell: CellDescriptor) -> str:
    """Render one cell as Rich markup."""
    if cell.event is not None:
        text = f"[bold]{cell.event.title[:10]}[/bold]"
        if cell.preview is not None:
            # Preview content is hidden behind the event; only its border remains
            text = f"[yellow]▌[/yellow]{text}"
        return text

    if cell.preview is not None:
        return f"[yellow]▌{(cell.preview.label or cell.preview.title or 'Preview')[:10]}[/yellow]"

    symbol, style = STATUS_STYLES[cell.status]
    text = f"[{style}]{symbol}[/{style}]"
    if cell.heatmap is not None:
        text += f" [cyan]{cell.heatmap.available}/{cell.heatmap.total}[/cyan]"
    return text


def render_grid(grid: CompositeGrid, title: str = "Game Time") -> Table:
    """Build a Rich table for a composed grid."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("", style="dim", justify="right", no_wrap=True)

    for day, abbreviation in enumerate(DAY_ABBREVIATIONS):
        header = abbreviation
        if grid.day_labels:
            header = f"{abbreviation} {grid.day_labels[day]}"
        if grid.today_index == day:
            header = f"[green]{header}[/green]"
        table.add_column(header, justify="center")

    for hour, cells in grid.rows():
        table.add_row(format_hour(hour), *[_render_cell(cell) for cell in cells])

    return table


@app.command()
def grid(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the API.")] = False,
    week: Annotated[Optional[str], typer.Option("--week", help="Week start date (YYYY-MM-DD, a Sunday)")] = None,
    heatmap: Annotated[Optional[int], typer.Option("--heatmap", help="Event id whose availability heatmap to overlay")] = None,
    start_hour: Annotated[Optional[int], typer.Option("--start-hour", help="First visible hour")] = None,
    end_hour: Annotated[Optional[int], typer.Option("--end-hour", help="Visible hours end (exclusive)")] = None,
):
    """
    Show the weekly game time grid with events and optional heatmap.

    Examples:

        gametime grid --mock
        gametime grid --mock --heatmap 101 --start-hour 17
    """
    try:
        config = _load_config(config_file)
        hour_range = (
            start_hour if start_hour is not None else config.grid.start_hour,
            end_hour if end_hour is not None else config.grid.end_hour,
        )
        service = _build_service(config, mock, hour_range)

        now = pendulum.now(config.timezone)
        today_index = now.isoweekday() % 7

        composed = asyncio.run(
            service.load_grid(
                week_start=week,
                heatmap_context=heatmap,
                today_index=today_index if week is None else None,
            )
        )

        console.print()
        console.print(render_grid(composed, title=f"Game Time ({config.timezone})"))
        console.print()

    except (GameTimeError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def recurrence(
    start: Annotated[str, typer.Argument(help="First occurrence (ISO date or datetime)")],
    frequency: Annotated[Frequency, typer.Argument(help="weekly, biweekly or monthly")],
    until: Annotated[str, typer.Argument(help="Repeat until (ISO date or datetime, inclusive)")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    Preview the occurrences a recurring event would create.
    """
    try:
        config = _load_config(config_file)
        dates = generate_recurring_dates(start, frequency, until)

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("UTC")
        table.add_column(config.timezone)

        for index, occurrence in enumerate(dates, 1):
            local = occurrence.in_timezone(config.timezone)
            table.add_row(
                str(index),
                occurrence.to_iso8601_string(),
                local.format("ddd, MMM D YYYY, h:mm A"),
            )

        console.print()
        console.print(table)
        console.print(f"\n[bold green]✓ {len(dates)} occurrence(s)[/bold green]\n")

    except (GameTimeError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def suggest(
    game_id: Annotated[Optional[int], typer.Option("--game-id", "-g", help="Game whose interested players to rank by")] = None,
    after: Annotated[Optional[str], typer.Option("--after", help="Only suggest times after this instant (default: now)")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the API.")] = False,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    Rank candidate poll times.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)

        response = asyncio.run(
            service.suggest_times(
                after=after or pendulum.now("UTC"),
                game_id=game_id,
                days_ahead=config.suggestions.days_ahead,
                top_n=config.suggestions.top_n,
                limit=config.suggestions.limit,
                evening_hours=config.suggestions.evening_hours,
            )
        )

        console.print()
        if not response.suggestions:
            console.print("[yellow]⚠ No suggestions available. Add custom times instead.[/yellow]\n")
            return

        table = Table(
            title=f"Suggestions ({response.source.value})",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Time", style="bold yellow")
        table.add_column("Available", justify="right")
        table.add_column("ISO", style="dim")

        for suggestion in response.suggestions:
            table.add_row(suggestion.label, str(suggestion.available_count), suggestion.date)

        console.print(table)
        if response.interested_player_count:
            console.print(f"{response.interested_player_count} interested player(s)")
        console.print()

    except (GameTimeError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]gametime[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
