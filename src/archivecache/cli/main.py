"""Main CLI entry point for archivecache.

Provides command-line interface for restoring and saving cache archives.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import orjson
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from archivecache.api import restore_cache, save_cache
from archivecache.archive import get_cache_version, resolve_compression_method
from archivecache.cache.config import CacheConfig
from archivecache.cache.naming import get_cache_filename
from archivecache.options import DownloadOptions, UploadOptions
from archivecache.utils import format_size, is_exact_key_match, parse_list_input

# Global console for Rich output
console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Send archivecache log records to stderr through Rich."""
    logger = logging.getLogger("archivecache")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def load_config(config_path: Optional[str] = None) -> CacheConfig:
    """Load configuration from file, then apply environment variables.

    Args:
        config_path: Config file from the --config flag (default location if None)

    Returns:
        CacheConfig instance
    """
    file_config = CacheConfig.load(Path(config_path) if config_path else None)
    return CacheConfig.from_env(file_config)


def find_cache_dir(ctx_cache_dir: Optional[str], config: CacheConfig) -> Optional[str]:
    """Find the local cache directory.

    Priority:
    1. Explicit --cache-dir/-C flag
    2. ARCHIVECACHE_DIR environment variable or config file
    3. None (use the remote backend)
    """
    if ctx_cache_dir:
        return ctx_cache_dir
    if config.cache_dir:
        return str(config.cache_dir)
    return None


def _setup(ctx) -> tuple:
    try:
        config = load_config(ctx.obj.get("config_path"))
    except Exception as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}", style="red")
        sys.exit(1)
    return config, find_cache_dir(ctx.obj.get("cache_dir"), config)


@click.group()
@click.option(
    "--cache-dir",
    "-C",
    type=click.Path(file_okay=False),
    help="Local cache directory (default: ARCHIVECACHE_DIR or config; remote backend if unset)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to a JSON config file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, cache_dir, config_path, verbose):
    """archivecache CLI - Save and restore path archives by key.

    Use --cache-dir/-C for a local cache directory, or set ARCHIVECACHE_DIR.
    Without one, the remote backend (ARCHIVECACHE_REMOTE_URL) is used.
    """
    ctx.ensure_object(dict)
    ctx.obj["cache_dir"] = cache_dir
    ctx.obj["config_path"] = config_path
    configure_logging(verbose)


# ==================== Cache Commands ====================


@cli.command("restore")
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    required=True,
    help="Path or glob to restore (repeatable, or newline separated)",
)
@click.option("--key", "-k", required=True, help="Primary cache key")
@click.option(
    "--restore-key",
    "-r",
    "restore_keys",
    multiple=True,
    help="Fallback key tried after the primary key (repeatable, in order)",
)
@click.option("--lookup-only", is_flag=True, help="Check for a match without extracting")
@click.option("--cross-os", is_flag=True, help="Allow archives made on another OS")
@click.option(
    "--fail-on-cache-miss", is_flag=True, help="Exit with status 1 if no key matched"
)
@click.pass_context
def restore(ctx, paths, key, restore_keys, lookup_only, cross_os, fail_on_cache_miss):
    """Restore the first archive found for the key and restore keys.

    Example:
        archivecache -C /mnt/cache restore -p node_modules -k npm-abc123 -r npm-
    """
    config, cache_dir = _setup(ctx)
    paths = parse_list_input(paths)
    restore_keys = parse_list_input(restore_keys)

    matched_key = restore_cache(
        paths,
        key,
        restore_keys,
        DownloadOptions(lookup_only=lookup_only),
        cross_os,
        cache_dir,
        config,
    )

    if matched_key is None:
        message = f"Cache not found for input keys: {', '.join([key, *restore_keys])}"
        if fail_on_cache_miss:
            console.print(f"[red]✗[/red] {escape(message)}", style="red")
            sys.exit(1)
        console.print(f"[yellow]{escape(message)}[/yellow]")
        return

    verb = "found" if lookup_only else "restored"
    console.print(f"[green]✓[/green] Cache {verb} from key: [cyan]{escape(matched_key)}[/cyan]")
    console.print(f"  cache-hit: {str(is_exact_key_match(key, matched_key)).lower()}")


@cli.command("save")
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    required=True,
    help="Path or glob to cache (repeatable, or newline separated)",
)
@click.option("--key", "-k", required=True, help="Cache key")
@click.option("--cross-os", is_flag=True, help="Make the archive restorable on another OS")
@click.pass_context
def save(ctx, paths, key, cross_os):
    """Archive paths and save them under a key.

    Example:
        archivecache -C /mnt/cache save -p node_modules -k npm-abc123
    """
    config, cache_dir = _setup(ctx)
    paths = parse_list_input(paths)

    options = UploadOptions(upload_chunk_size=config.upload_chunk_size)
    cache_id = save_cache(paths, key, options, cross_os, cache_dir, config)

    if cache_id == -1:
        console.print(f"[red]✗[/red] Failed to save cache for key: {escape(key)}", style="red")
        sys.exit(1)

    console.print(f"[green]✓[/green] Cache saved with key: [cyan]{escape(key)}[/cyan]")
    if options.archive_size_bytes is not None:
        console.print(f"  Size: {format_size(options.archive_size_bytes)}")
    console.print(f"  Cache id: {cache_id}")


@cli.command("filename")
@click.option("--path", "-p", "paths", multiple=True, required=True, help="Cached path or glob")
@click.option("--key", "-k", required=True, help="Cache key")
@click.option("--cross-os", is_flag=True, help="Archive is restorable on another OS")
@click.pass_context
def filename(ctx, paths, key, cross_os):
    """Print the archive filename a key resolves to.

    Example:
        archivecache filename -p node_modules -k npm-abc123
    """
    config, _ = _setup(ctx)
    try:
        compression_method = resolve_compression_method(config.compression)
    except ValueError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}", style="red")
        sys.exit(1)

    version = get_cache_version(parse_list_input(paths), compression_method, cross_os)
    click.echo(get_cache_filename(key, version, compression_method))


# ==================== Config Commands ====================


@cli.group()
def config():
    """Inspect the effective configuration."""
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@click.pass_context
def config_show(ctx, as_json):
    """Show configuration after applying the config file and environment.

    Example:
        archivecache config show --json
    """
    cache_config, cache_dir = _setup(ctx)
    data = cache_config.to_dict()
    data["cache_dir"] = cache_dir

    if as_json:
        click.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())
        return

    table = Table(title="archivecache configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in data.items():
        table.add_row(name, "[dim]-[/dim]" if value is None else escape(str(value)))
    console.print(table)


if __name__ == "__main__":
    cli()
