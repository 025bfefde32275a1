"""Command-line interface for the Company News Aggregator."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from company_news.aggregator.pipeline import aggregate_news
from company_news.config import get_settings
from company_news.errors import NewsAggregatorError
from company_news.models.schemas import Article
from company_news.sources.newsdata import NewsDataClient
from company_news.validation import parse_query

# Configure logging with Rich handler for better formatting
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
)
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="company-news",
    help="Company News Aggregator - Search, deduplicate, and rank company news",
)
console = Console()


@app.command()
def fetch(
    companies: List[str] = typer.Argument(..., help="Company names to search for"),
    from_date: Optional[str] = typer.Option(
        None, "--from", help="Archive start date (YYYY-MM-DD)"
    ),
    to_date: Optional[str] = typer.Option(
        None, "--to", help="Archive end date (YYYY-MM-DD)"
    ),
    pages: Optional[int] = typer.Option(
        None, "--pages", "-p", help="Pages per company (clamped to the configured maximum)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file path (JSON)"
    ),
    json_output: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON only"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """Fetch, deduplicate, and display news for one or more companies."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    settings = get_settings()
    if not settings.has_api_key:
        console.print("[red]Error:[/red] NEWS_API_KEY is not set")
        raise typer.Exit(1)

    payload = {"companies": companies, "from": from_date, "to": to_date}
    if pages is not None:
        payload["pagesPerCompany"] = pages

    try:
        query = parse_query(
            payload,
            default_pages=settings.default_pages_per_company,
            max_pages=settings.max_pages_per_company,
        )
    except NewsAggregatorError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    try:
        if json_output:
            articles = asyncio.run(aggregate_news(query))
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f"Fetching news for {len(query.companies)} companies...", total=None
                )
                articles = asyncio.run(aggregate_news(query))
                progress.update(task, completed=True)
    except NewsAggregatorError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    output_json = json.dumps([a.to_response() for a in articles], indent=2)

    if json_output:
        if output:
            output.write_text(output_json)
        else:
            print(output_json)
        return

    _display_articles(articles, mode=query.mode.value)

    if output:
        output.write_text(output_json)
        console.print(f"\n[green]Results saved to:[/green] {output}")


@app.command()
def check(
    company: str = typer.Argument("Apple", help="Company name to search for"),
):
    """Check connectivity and credentials with a single upstream request."""
    settings = get_settings()
    if not settings.has_api_key:
        console.print("[red]Error:[/red] NEWS_API_KEY is not set")
        raise typer.Exit(1)

    async def _first_page():
        client = NewsDataClient(api_key=settings.news_api_key)
        try:
            return await client.fetch_page(company)
        finally:
            await client.close()

    try:
        articles, cursor = asyncio.run(_first_page())
    except NewsAggregatorError as e:
        console.print(f"[red]Upstream check failed:[/red] {e.message}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] {settings.news_api_base_url}")
    console.print(f"  Results on first page: {len(articles)}")
    console.print(f"  Next page cursor: {'yes' if cursor else 'no'}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "company_news.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def _display_articles(articles: List[Article], mode: str) -> None:
    """Display aggregated articles in a table."""
    if not articles:
        console.print("[yellow]No articles found.[/yellow]")
        return

    table = Table(title=f"{len(articles)} articles ({mode})")
    table.add_column("Published", style="cyan", no_wrap=True)
    table.add_column("Title", max_width=60)
    table.add_column("Source", style="magenta")
    table.add_column("Companies", style="green")

    for article in articles:
        table.add_row(
            article.published_at or "N/A",
            article.title or article.description[:60] or "Untitled",
            article.source or "N/A",
            article.company_queried,
        )

    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
