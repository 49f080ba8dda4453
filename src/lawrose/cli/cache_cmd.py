"""CLI commands for inspecting and invalidating the cache.

Usage:
    lawrose cache stats
    lawrose cache health
    lawrose cache keys "product_data:*" --values --count 500
    lawrose cache clear-type product_data
    lawrose cache clear-pattern "product_data:list:*"
    lawrose cache flush --yes
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import orjson
import typer

from lawrose.cache.keys import KeyCodec
from lawrose.cache.redis import create_redis
from lawrose.cache.service import CacheService
from lawrose.cache.types import CacheKeyType
from lawrose.config import settings
from lawrose.observability.logging import configure_logging

T = TypeVar("T")

app = typer.Typer(help="Inspect and invalidate the Redis cache", no_args_is_help=True)


def _run(operation: Callable[[CacheService], Awaitable[T]]) -> T:
    """Run one operation against a fresh client, then close it."""

    async def runner() -> T:
        client = create_redis(settings)
        try:
            return await operation(CacheService(client, settings))
        finally:
            await client.aclose()

    return asyncio.run(runner())


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log cache operations"),
) -> None:
    """Inspect and invalidate the Redis cache."""
    configure_logging(json_format=False, level="DEBUG" if verbose else "WARNING")


@app.command("stats")
def stats(
    as_json: bool = typer.Option(False, "--json", help="Print stats as JSON"),
) -> None:
    """Show key count and memory usage."""
    from rich.console import Console

    console = Console()
    result = _run(lambda cache: cache.get_stats())
    if as_json:
        typer.echo(orjson.dumps(result.to_dict()).decode())
        return
    console.print(f"[blue]Total keys:[/blue]   {result.total_keys}")
    console.print(f"[blue]Memory usage:[/blue] {result.memory_usage}")


@app.command("health")
def health() -> None:
    """Round-trip a check key; exit code 1 if the cache is unhealthy."""
    from rich.console import Console

    console = Console()
    if not _run(lambda cache: cache.health_check()):
        console.print("[red]✗[/red] Cache is unhealthy")
        raise typer.Exit(code=1)
    console.print("[green]✓[/green] Cache is healthy")


@app.command("keys")
def keys(
    pattern: str = typer.Argument(..., help="Glob pattern relative to the key prefix"),
    values: bool = typer.Option(False, "--values", help="Also show values and TTLs"),
    count: int = typer.Option(100, "--count", "-c", help="SCAN batch size hint"),
    as_json: bool = typer.Option(False, "--json", help="With --values, print JSON lines"),
) -> None:
    """List keys matching a pattern."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    console = Console()

    if not values:
        found = _run(lambda cache: cache.search_keys(pattern, count))
        for key in sorted(found):
            console.print(escape(key), soft_wrap=True)
        console.print(f"[dim]{len(found)} key(s)[/dim]")
        return

    results = _run(lambda cache: cache.search_keys_with_values(pattern, count=count))
    if as_json:
        for item in sorted(results, key=lambda r: r.key):
            typer.echo(orjson.dumps(item.to_dict(), default=str).decode())
        return

    codec = KeyCodec(settings.redis_key_prefix)
    table = Table(title=f"Keys matching {escape(pattern)}")
    table.add_column("Key", style="cyan", overflow="fold")
    table.add_column("Type")
    table.add_column("TTL", justify="right")
    table.add_column("Value", overflow="fold")
    for item in sorted(results, key=lambda r: r.key):
        parsed = codec.parse(codec.render(item.key))
        table.add_row(
            escape(item.key),
            parsed.type.value if parsed else "raw",
            str(item.ttl),
            escape(orjson.dumps(item.value, default=str).decode()),
        )
    console.print(table)
    console.print(f"[dim]{len(results)} key(s)[/dim]")


@app.command("clear-type")
def clear_type(
    key_type: CacheKeyType = typer.Argument(..., help="Data category to clear"),
) -> None:
    """Delete every key of one data category."""
    from rich.console import Console

    console = Console()
    removed = _run(lambda cache: cache.clear_cache_type(key_type))
    console.print(f"[green]Cleared {removed} key(s) of type {key_type.value}[/green]")


@app.command("clear-pattern")
def clear_pattern(
    pattern: str = typer.Argument(..., help="Glob pattern relative to the key prefix"),
) -> None:
    """Delete every key matching a pattern."""
    from rich.console import Console
    from rich.markup import escape

    console = Console()
    removed = _run(lambda cache: cache.clear_pattern(pattern))
    console.print(f"[green]Cleared {removed} key(s) matching[/green] {escape(pattern)}")


@app.command("flush")
def flush(
    yes: bool = typer.Option(False, "--yes", help="Confirm dropping every key"),
) -> None:
    """Drop every key in the configured database."""
    from rich.console import Console

    console = Console()
    if not yes:
        console.print("[yellow]Refusing to flush without --yes[/yellow]")
        raise typer.Exit(code=2)

    if not _run(lambda cache: cache.flush_all()):
        console.print("[red]Flush failed[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Cache flushed[/green]")
