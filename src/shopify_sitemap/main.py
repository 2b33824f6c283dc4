from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from shopify_sitemap.config import ConfigError, FileConfigProvider
from shopify_sitemap.core.scheduler import UpdateScheduler
from shopify_sitemap.core.service import SitemapService
from shopify_sitemap.core.updater import SitemapUpdater
from shopify_sitemap.fetching import DomainValidator, SafeFetcher, create_client
from shopify_sitemap.observability.logging import configure_logging, get_logger
from shopify_sitemap.storage import Database, SqliteSitemapCache, SqliteThrottle

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Coroutine

    import httpx

logger = get_logger(__name__)

app = typer.Typer(add_completion=False, help="Mirror a Shopify sitemap and serve it as sitemap XML.")

ConfigOption = Annotated[Path, typer.Option("-c", "--config", help="Path to the TOML config file.")]

EXIT_CONFIG_ERROR = 1
EXIT_UPDATE_FAILED = 2


@dataclass(frozen=True, slots=True)
class ApplicationComponents:
    config_provider: FileConfigProvider
    db: Database
    client: httpx.AsyncClient
    service: SitemapService
    updater: SitemapUpdater


@asynccontextmanager
async def create_application(config_path: Path) -> AsyncIterator[ApplicationComponents]:
    config_provider = FileConfigProvider(config_path, sink=get_logger("shopify_sitemap.config"))
    config_provider.get()

    db = Database(default_db_path(config_path))
    db.initialize()

    cache = SqliteSitemapCache(db, sink=get_logger("shopify_sitemap.storage"))
    client = create_client()
    validator = DomainValidator()
    fetcher = SafeFetcher(client, validator)
    updater = SitemapUpdater(
        config_provider=config_provider,
        validator=validator,
        fetcher=fetcher,
        cache=cache,
        sink=get_logger("shopify_sitemap.updater"),
    )
    service = SitemapService(
        config_provider=config_provider,
        updater=updater,
        cache=cache,
        throttle=SqliteThrottle(db),
        sink=get_logger("shopify_sitemap.service"),
    )

    try:
        yield ApplicationComponents(
            config_provider=config_provider,
            db=db,
            client=client,
            service=service,
            updater=updater,
        )
    finally:
        await client.aclose()
        db.close()


def default_db_path(config_path: Path) -> Path:
    return config_path.with_suffix(".sqlite")


def _run(coro: Coroutine[object, object, None]) -> None:
    try:
        asyncio.run(coro)
    except ConfigError as exc:
        logger.error("config_invalid", error=str(exc))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc


@app.command()
def update(
    config: ConfigOption,
    force: Annotated[bool, typer.Option("--force", help="Skip the manual update throttle.")] = False,
) -> None:
    """Fetch the remote sitemap now and refresh the cache."""
    configure_logging()
    _run(_update(config, manual=not force))


async def _update(config_path: Path, *, manual: bool) -> None:
    async with create_application(config_path) as components:
        outcome = await components.service.trigger_update(manual=manual)

    if outcome.rate_limited:
        typer.echo(f"Rate limited, retry in {outcome.retry_after_seconds:.0f}s", err=True)
        raise typer.Exit(code=EXIT_UPDATE_FAILED)
    if not outcome.ok or outcome.result is None:
        reason = outcome.reason.value if outcome.reason else "unknown"
        typer.echo(f"Update failed: {reason}", err=True)
        raise typer.Exit(code=EXIT_UPDATE_FAILED)
    typer.echo(f"Updated {outcome.result.item_count} {outcome.result.kind.value} items from {outcome.result.source_url}")


@app.command("render")
def render_command(
    config: ConfigOption,
    output: Annotated[Path | None, typer.Option("-o", "--output", help="Write here instead of output.filename.")] = None,
    page: Annotated[int | None, typer.Option("--page", min=1, help="Render a single page of the sitemap.")] = None,
    stdout: Annotated[bool, typer.Option("--stdout", help="Print the XML instead of writing a file.")] = False,
) -> None:
    """Render the cached sitemap as XML."""
    configure_logging()
    _run(_render(config, output=output, page=page, stdout=stdout))


async def _render(config_path: Path, *, output: Path | None, page: int | None, stdout: bool) -> None:
    async with create_application(config_path) as components:
        xml = await components.service.render_sitemap(page=page)
        filename = components.config_provider.get().output.filename

    if stdout:
        typer.echo(xml, nl=False)
        return
    target = output or config_path.parent / filename
    target.write_text(xml, encoding="utf-8")
    logger.info("sitemap_written", path=str(target), bytes=len(xml.encode("utf-8")))


@app.command()
def status(config: ConfigOption) -> None:
    """Show what is currently cached."""
    configure_logging()
    _run(_status(config))


async def _status(config_path: Path) -> None:
    async with create_application(config_path) as components:
        current = components.service.status()

    typer.echo(f"Sitemap URL: {current.sitemap_url}")
    if not current.has_data:
        typer.echo("No sitemap data yet. Run `update` to fetch it.")
        return
    kind = current.kind.value if current.kind else "unknown"
    typer.echo(f"Cached: {current.item_count} {kind} items in {current.page_count} page(s)")
    if current.expires_at is not None:
        typer.echo(f"Expires: {current.expires_at.isoformat()}")


@app.command()
def clear(config: ConfigOption) -> None:
    """Drop the cached sitemap."""
    configure_logging()
    _run(_clear(config))


async def _clear(config_path: Path) -> None:
    async with create_application(config_path) as components:
        components.service.clear()
    typer.echo("Cache cleared")


@app.command()
def run(config: ConfigOption) -> None:
    """Refresh the sitemap on the configured frequency until interrupted.

    A frequency change in the config file applies from the next cycle.
    """
    configure_logging()
    _run(_run_scheduler(config))


async def _run_scheduler(config_path: Path) -> None:
    async with create_application(config_path) as components:
        provider = components.config_provider

        def interval() -> float:
            return provider.get().source.frequency.interval.total_seconds()

        async def job() -> None:
            await components.service.trigger_update(manual=False)

        scheduler = UpdateScheduler(interval, job, run_immediately=True, sink=logger)
        await scheduler.start()
        logger.info("scheduler_started", interval_seconds=interval(), frequency=provider.get().source.frequency.value)
        try:
            await asyncio.Event().wait()
        finally:
            await scheduler.shutdown()


if __name__ == "__main__":
    app()
