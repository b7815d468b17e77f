"""Main CLI entry point for the leadpage command."""

import os
import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from typing import Optional

from .. import __version__
from ..analytics.aggregator import DashboardAggregator
from ..storage.database import PageDatabase
from ..storage.models import LeadFilters, LeadStatus

console = Console()


def get_db(db_path: Optional[str] = None) -> PageDatabase:
    """Get database instance."""
    path = db_path or os.getenv("LP_DATABASE_PATH")
    return PageDatabase(Path(path) if path else None)


@click.group()
@click.version_option(version=__version__, prog_name="leadpage")
def cli():
    """Leadpage Engine - landing pages and lead capture.

    \b
    Quick Start:
      leadpage migrate                      # Create or upgrade the database
      leadpage pages -u USER_ID             # A user's pages and counters
      leadpage leads -u USER_ID --status new
      leadpage stats -u USER_ID             # Dashboard summary
    """
    pass


@cli.command()
@click.option("--db", "db_path", help="Custom database path")
def migrate(db_path: Optional[str]):
    """Run pending database migrations."""
    from ..storage.migrations import run_migrations

    db = get_db(db_path)
    count = run_migrations(str(db.db_path))
    if count:
        console.print(f"[green]Applied {count} migration(s)[/green]")
    else:
        console.print(f"[dim]No pending migrations[/dim] ({db.db_path})")


@cli.command()
@click.option("--user", "-u", "user_id", required=True, help="Owner user id")
@click.option("--db", "db_path", help="Custom database path")
def pages(user_id: str, db_path: Optional[str]):
    """List a user's landing pages."""
    db = get_db(db_path)
    rows = db.list_pages(user_id, order_by="visits")

    if not rows:
        console.print("[yellow]No landing pages found[/yellow]")
        return

    table = Table(title=f"Landing pages ({len(rows)})")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Visits", justify="right")
    table.add_column("Leads", justify="right")
    table.add_column("Rate", justify="right")

    for page in rows:
        status_style = "green" if page.is_published else "yellow"
        table.add_row(
            page.id[:8],
            page.title,
            f"[{status_style}]{page.status.value}[/{status_style}]",
            str(page.visits),
            str(page.conversions),
            f"{page.conversion_rate:.2f}%",
        )

    console.print(table)


@cli.command()
@click.option("--user", "-u", "user_id", required=True, help="Owner user id")
@click.option("--page", "-p", "page_id", help="Only leads from this page")
@click.option("--status", type=click.Choice([s.value for s in LeadStatus]), help="Filter by status")
@click.option("--search", "-q", help="Match any submitted value")
@click.option("--limit", "-n", default=20, help="Number of leads to show")
@click.option("--db", "db_path", help="Custom database path")
def leads(user_id: str, page_id: Optional[str], status: Optional[str],
          search: Optional[str], limit: int, db_path: Optional[str]):
    """Show captured leads, newest first."""
    db = get_db(db_path)
    rows = db.list_leads(user_id, LeadFilters(
        landing_page_id=page_id,
        status=LeadStatus(status) if status else None,
        search=search,
        limit=limit,
    ))

    if not rows:
        console.print("[yellow]No leads found[/yellow]")
        return

    table = Table(title=f"Leads ({len(rows)})")
    table.add_column("Created")
    table.add_column("Page")
    table.add_column("Data")
    table.add_column("Status")
    table.add_column("Source")

    for lead in rows:
        data = ", ".join(f"{k}: {v}" for k, v in lead.form_data.items() if v not in ("", None))
        source = lead.source
        if lead.utm_campaign:
            source += f" / {lead.utm_campaign}"
        table.add_row(
            lead.created_at.astimezone().strftime("%d/%m/%Y %H:%M"),
            lead.landing_page_title or "-",
            data[:60],
            lead.status.value,
            source,
        )

    console.print(table)


@cli.command("set-status")
@click.argument("lead_id")
@click.argument("status", type=click.Choice([s.value for s in LeadStatus]))
@click.option("--db", "db_path", help="Custom database path")
def set_status(lead_id: str, status: str, db_path: Optional[str]):
    """Change a lead's status."""
    db = get_db(db_path)
    if db.update_lead_status(lead_id, LeadStatus(status)):
        console.print(f"[green]Lead {lead_id} is now {status}[/green]")
    else:
        console.print(f"[red]Lead {lead_id} not found[/red]")
        raise SystemExit(1)


@cli.command()
@click.option("--user", "-u", "user_id", required=True, help="Owner user id")
@click.option("--days", "-d", default=7, type=click.IntRange(min=1), help="Days in the daily series")
@click.option("--db", "db_path", help="Custom database path")
def stats(user_id: str, days: int, db_path: Optional[str]):
    """Dashboard summary and daily visits/leads."""
    db = get_db(db_path)
    aggregator = DashboardAggregator(db, days=days)
    summary = aggregator.summary(user_id)

    console.print(Panel.fit(
        f"Pages: [cyan]{summary['total_pages']}[/cyan] "
        f"([green]{summary['published_pages']} published[/green])\n"
        f"Visits: [cyan]{summary['total_visits']}[/cyan]\n"
        f"Leads: [cyan]{summary['total_conversions']}[/cyan]\n"
        f"Conversion rate: [cyan]{summary['conversion_rate']}%[/cyan]",
        title="Dashboard",
    ))

    table = Table(title=f"Last {days} days")
    table.add_column("Date")
    table.add_column("Visits", justify="right")
    table.add_column("Leads", justify="right")
    for day in aggregator.daily_stats(user_id):
        table.add_row(day.label, str(day.visits), str(day.conversions))
    console.print(table)

    top = aggregator.top_pages(user_id)
    if top:
        console.print("\n[bold]Top pages by visits:[/bold]")
        for rank in top:
            console.print(f"  {rank.title}: [cyan]{rank.visits}[/cyan]")


@cli.command()
@click.argument("user_id")
@click.option("--secret", envvar="LP_API_SECRET", required=True, help="Shared API secret")
def sign(user_id: str, secret: str):
    """Print the X-LP-Signature header value for a user id."""
    from ..website_api.middleware.auth import sign_user_id

    click.echo(sign_user_id(user_id, secret))


if __name__ == "__main__":
    cli()
