"""
CLI Main - Typer command-line interface.
========================================

Commands:
- build: Build the catalog artifact from the admissions CSV
- search: Search departments by free text
- detail: Show the detail view of one department
- info: Show system information
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from deptcompass.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    name="deptcompass",
    help="""🧭 DeptCompass - Korean university department search

Search, rank and inspect undergraduate departments from the national
admissions dataset.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

COMMANDS OVERVIEW:

  build    Build the catalog from the admissions CSV
           -c, --csv          Source CSV (default from config)
           -o, --output       Catalog artifact path
           -y, --year         Reference year to keep
           --all-years        Keep rows of every year

  search   Search departments ("서울대", "의예과", "서울대 컴퓨터")
           -n, --limit        Rows to display (default: 20)

  detail   Detail view with a 3-year admission trend
           --ai/--no-ai       Use Gemini enrichment when configured

  info     Show configuration and catalog status

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

QUICK START:

  deptcompass build                       # Step 1: Build the catalog
  deptcompass search "서울대"              # Step 2: Search
  deptcompass detail 서울대학교 컴퓨터공학부  # Step 3: Inspect one department
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Configure logging before any command runs."""
    from deptcompass.shared.config import get_settings

    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.get_effective_log_level(),
        use_rich=settings.logging.rich_console,
        log_file=settings.logging.file or None,
        log_format=settings.logging.format,
    )


def _load_catalog_or_exit():
    from deptcompass.ingestion.catalog import CatalogNotFoundError, get_catalog

    try:
        return get_catalog()
    except CatalogNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Build Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def build(
    csv_file: Optional[Path] = typer.Option(
        None,
        "--csv", "-c",
        help="Source admissions CSV. Default: paths.csv_file from config.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Catalog artifact path. Default: paths.catalog_file from config.",
    ),
    year: Optional[int] = typer.Option(
        None,
        "--year", "-y",
        help="Reference year to keep. Default: catalog.target_year from config.",
    ),
    all_years: bool = typer.Option(
        False,
        "--all-years",
        help="Keep rows of every year instead of only the reference year.",
    ),
):
    """
    🏗️ Build the university catalog from the admissions CSV.

    Rows of other years, non-degree schools, graduate programs and
    malformed rows are skipped and counted.

    Examples:
        deptcompass build
        deptcompass build -c data/raw/admissions.csv -y 2024
    """
    from deptcompass.ingestion.catalog import build_catalog, save_catalog
    from deptcompass.shared.config import get_settings

    settings = get_settings()
    csv_path = csv_file or settings.resolved_paths.csv_file

    if not csv_path.exists():
        console.print(f"[red]Input file not found: {csv_path}[/red]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold]Build Configuration[/bold]\n"
        f"Input: {csv_path}\n"
        f"Year: {'all' if all_years else (year or settings.get_effective_target_year())}\n"
        f"Output: {output or settings.resolved_paths.catalog_file}",
        title="🏗️ Build",
    ))

    with console.status("Reading admissions dataset..."):
        catalog, report = build_catalog(
            csv_path,
            target_year=year,
            filter_year=False if all_years else None,
        )

    path = save_catalog(catalog, output)

    table = Table(title="Build Report")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    table.add_row("Rows read", str(report.rows_read))
    table.add_row("Rows accepted", str(report.rows_accepted))
    for reason, count in sorted(report.skipped.items()):
        table.add_row(f"Skipped ({reason})", str(count))
    table.add_row("Universities", str(len(catalog)))
    console.print(table)

    console.print(f"[green]✓ Catalog saved to {path}[/green]")


# ─────────────────────────────────────────────────────────────────────────────
# Search Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def search(
    query: str = typer.Argument("", help="Free-text query. Empty shows suggestions."),
    limit: int = typer.Option(20, "--limit", "-n", help="Rows to display."),
):
    """
    🔍 Search departments.

    Examples:
        deptcompass search 서울대
        deptcompass search 의예과
        deptcompass search "서울대 컴퓨터"
    """
    from deptcompass.search.service import DepartmentSearchService

    catalog = _load_catalog_or_exit()
    response = DepartmentSearchService(catalog).search(query)

    if response.is_empty:
        console.print(f"[yellow]No results for '{query}'.[/yellow]")
        return

    table = Table(title=f"'{query}' - {response.reported_match_count} matches" if query else "Suggestions")
    table.add_column("#", justify="right")
    table.add_column("University")
    table.add_column("Department")
    table.add_column("Location")
    table.add_column("Field")

    for i, record in enumerate(response.results[:limit], 1):
        table.add_row(
            str(i),
            record.university_name,
            record.department_name,
            record.location,
            record.field,
        )

    console.print(table)
    if len(response.results) > limit:
        console.print(f"[dim]Showing {limit} of {len(response.results)} results.[/dim]")


# ─────────────────────────────────────────────────────────────────────────────
# Detail Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def detail(
    university: str = typer.Argument(..., help="Exact university name, e.g. 서울대학교."),
    department: str = typer.Argument(..., help="Department name as shown by 'search'."),
    ai: bool = typer.Option(
        True,
        "--ai/--no-ai",
        help="Use Gemini enrichment when an API key is configured.",
    ),
):
    """
    📋 Show the detail view of one department.

    Examples:
        deptcompass detail 서울대학교 컴퓨터공학부
        deptcompass detail 연세대학교 의예과 --no-ai
    """
    from deptcompass.search.service import DepartmentSearchService

    catalog = _load_catalog_or_exit()
    service = DepartmentSearchService(catalog)

    with console.status("Analyzing department..."):
        record = service.get_department_details(university, department, use_enrichment=ai)

    if record.not_found:
        console.print(f"[yellow]University not found: {university}[/yellow]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold]{record.university_name} {record.department_name}[/bold]\n"
        f"Location: {record.location}\n"
        f"Field: {record.field}\n"
        f"Tuition: {record.tuition_fee}\n"
        f"Employment: {record.employment_rate}\n\n"
        f"{record.description}",
        title="📋 Detail",
    ))

    table = Table(title="Admission Trend")
    table.add_column("Year")
    table.add_column("수시 교과")
    table.add_column("수시 종합")
    table.add_column("정시")
    for entry in record.admission_data:
        table.add_row(entry.year, entry.susi_gyogwa, entry.susi_jonghap, entry.jeongsi)
    console.print(table)

    if record.ai_summary:
        console.print(Panel(record.ai_summary, title="Recruitment Summary"))


# ─────────────────────────────────────────────────────────────────────────────
# Info Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def info():
    """
    ℹ️ Show system information and configuration.

    Displays:
      • Version information
      • Reference year and enrichment status
      • Data paths and their existence status
    """
    from deptcompass import __version__
    from deptcompass.shared.config import get_settings

    settings = get_settings()

    console.print(Panel(
        f"[bold]DeptCompass[/bold]\n"
        f"Version: {__version__}\n"
        f"Config: config/settings.yaml",
        title="ℹ️ Info",
    ))

    table = Table()
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Target year", str(settings.get_effective_target_year()))
    table.add_row("Max results", str(settings.search.max_results))
    table.add_row("Gemini model", settings.get_effective_model())
    table.add_row("Enrichment", "enabled" if settings.is_enrichment_enabled() else "disabled")
    console.print(table)

    console.print("\n[bold]Data Paths:[/bold]")
    resolved_paths = settings.resolved_paths
    path_dict = {
        "data_dir": resolved_paths.data_dir,
        "csv_file": resolved_paths.csv_file,
        "catalog_file": resolved_paths.catalog_file,
    }
    for name, path in path_dict.items():
        exists = "✓" if path.exists() else "✗"
        console.print(f"  {name}: {path} [{exists}]")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
