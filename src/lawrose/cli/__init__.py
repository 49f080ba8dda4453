"""CLI commands for Lawrose.

Provides command-line interface using Typer:
- lawrose cache stats: Key count and memory usage
- lawrose cache health: Read/write check against the backend
- lawrose cache keys: Search keys by pattern
- lawrose cache clear-type / clear-pattern: Invalidate a namespace
- lawrose cache flush: Drop everything (requires --yes)

Usage:
    lawrose --help
    lawrose cache keys "product_data:list:*" --values
    lawrose cache clear-type product_data
"""

import typer

from lawrose.cli.cache_cmd import app as cache_app

app = typer.Typer(
    name="lawrose",
    help="Lawrose: cache administration for the e-commerce backend",
    no_args_is_help=True,
)

app.add_typer(cache_app, name="cache")


@app.callback()
def callback() -> None:
    """Lawrose: cache administration for the e-commerce backend."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
