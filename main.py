#!/usr/bin/env python3
"""
FeedForge - Syndication Feed Toolkit
====================================

Command line interface for inspecting, converting and serving feeds.

Usage:
    python main.py --help                       # Show all commands
    python main.py check-config                 # Validate configuration
    python main.py inspect feed.xml             # Show the normalized view of a feed
    python main.py convert feed.xml -o out.xml  # Decode and re-encode a feed
    python main.py roundtrip samples/           # Round-trip every *.xml in a folder
    python main.py serve                        # Run the HTTP feed server
"""

import sys
import asyncio
import traceback
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from feedforge.config.settings import get_settings
from feedforge.handlers.fetcher import FeedFetcher
from feedforge.model.rdf import RdfFeed
from feedforge.serialization.serializer import get_serializer
from feedforge.utils.exceptions import FeedForgeError, get_user_friendly_message, handle_exception
from feedforge.utils.logging import configure_application_logging, get_logger_for_component

console = Console()
logger = get_logger_for_component('cli')


def _setup_logging(debug: bool) -> None:
    settings = get_settings()
    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug mode')
@click.pass_context
def cli(ctx, debug):
    """FeedForge - Atom, RSS and RDF feed toolkit."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_context
def check_config(ctx):
    """Validate configuration and environment variables."""
    console.print("[bold blue]🔧 Checking FeedForge Configuration[/bold blue]")

    try:
        settings = get_settings()

        table = Table(title="Configuration Status")
        table.add_column("Component", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Details")

        checks = [
            ("Site", _check_site_config),
            ("XSLT", _check_xslt_config),
            ("Handler", _check_handler_config),
            ("Fetch", _check_fetch_config),
            ("Logging", _check_logging_config),
        ]

        all_passed = True
        for name, check_func in checks:
            status, details = check_func(settings)
            table.add_row(name, "✅ Valid" if status else "❌ Invalid", details)
            if not status:
                all_passed = False

        try:
            settings.validate_configuration()
        except FeedForgeError as e:
            table.add_row("Validation", "❌ Invalid", e.message)
            all_passed = False

        console.print(table)

        if all_passed:
            console.print("[bold green]✅ All configuration checks passed![/bold green]")
            sys.exit(0)
        else:
            console.print("[bold red]❌ Configuration validation failed[/bold red]")
            sys.exit(1)

    except FeedForgeError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('source')
@click.option('--items', '-n', default=20, show_default=True, help='Maximum items to list')
@click.pass_context
def inspect(ctx, source, items):
    """Decode a feed file or URL and show its normalized view."""
    _setup_logging(ctx.obj.get('debug', False))

    try:
        feed = get_serializer().decode(_read_source(source), source_name=source)
    except FeedForgeError as e:
        console.print(f"[bold red]❌ {get_user_friendly_message(e)}[/bold red]")
        sys.exit(1)

    info_table = Table(title=f"Feed ({type(feed.document).__name__})")
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    for key, value in feed.to_dict().items():
        info_table.add_row(key, "" if value is None else str(value))
    console.print(info_table)

    items_table = Table(title=f"Items ({len(feed.items)})")
    items_table.add_column("Title", style="cyan")
    items_table.add_column("Link")
    items_table.add_column("Published", style="green")
    items_table.add_column("Author")
    for item in feed.items[:items]:
        items_table.add_row(
            item.title or "",
            item.link or "",
            item.published.isoformat() if item.published else "",
            item.author or "",
        )
    console.print(items_table)

    if isinstance(feed.document, RdfFeed):
        dublin_core = feed.document.channel.extensions.dublin_core.as_dict()
        for term, value in dublin_core.items():
            console.print(f"  DublinCore {term}: {value}")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Output file (default: stdout)')
@click.option('--pretty/--compact', default=None, help='Indent output (default follows configuration)')
@click.option('--xslt', help='Stylesheet URL for an xml-stylesheet instruction')
@click.pass_context
def convert(ctx, path, output, pretty, xslt):
    """Decode a feed file and encode it again."""
    _setup_logging(ctx.obj.get('debug', False))
    settings = get_settings()
    serializer = get_serializer()

    try:
        document = serializer.decode_document(path, source_name=str(path))
        data = serializer.encode(
            document,
            xslt_url=xslt or settings.xslt.for_dialect(document.dialect),
            pretty_print=settings.effective_pretty_print if pretty is None else pretty,
        )
    except FeedForgeError as e:
        console.print(f"[bold red]❌ {get_user_friendly_message(e)}[/bold red]")
        sys.exit(1)

    if output is None:
        click.echo(data.decode('utf-8'), nl=False)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        console.print(f"[green]✅ Wrote {len(data)} bytes to {output}[/green]")


@cli.command()
@click.argument('folder', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--output-dir', type=click.Path(file_okay=False, path_type=Path), default=Path('Output'),
              show_default=True, help='Where round-tripped documents are written')
@click.pass_context
def roundtrip(ctx, folder, output_dir):
    """Decode and re-encode every *.xml under FOLDER.

    Each output mirrors its input path under OUTPUT_DIR. A document that
    fails is replaced by the error text so the run keeps going.
    """
    _setup_logging(ctx.obj.get('debug', False))
    serializer = get_serializer()
    output_dir.mkdir(parents=True, exist_ok=True)

    results_table = Table(title="Round-trip Results")
    results_table.add_column("File", style="cyan")
    results_table.add_column("Status", style="green")
    results_table.add_column("Details")

    failed = 0
    sources = sorted(folder.rglob('*.xml'))
    for source in sources:
        target = output_dir / source.relative_to(folder)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            document = serializer.decode_document(source, source_name=str(source))
            target.write_bytes(serializer.encode(document, pretty_print=True))
            results_table.add_row(str(source.relative_to(folder)), "✅ OK", type(document).__name__)
        except Exception as e:
            failed += 1
            target.write_text(traceback.format_exc(), encoding='utf-8')
            error = handle_exception(e, logger, f"Round-trip of {source.name}", {"source": str(source)})
            results_table.add_row(str(source.relative_to(folder)), "❌ FAILED", error.message)

    console.print(results_table)

    if failed:
        console.print(f"[bold red]❌ {failed} out of {len(sources)} documents failed[/bold red]")
        sys.exit(1)
    console.print(f"[bold green]🎉 All {len(sources)} documents round-tripped[/bold green]")


@cli.command()
@click.option('--host', help='Bind address (default from config)')
@click.option('--port', type=int, help='Bind port (default from config)')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP feed server."""
    from feedforge.web import run_app

    _setup_logging(ctx.obj.get('debug', False))
    settings = get_settings()
    if ctx.obj.get('debug'):
        settings.debug = True

    log = get_logger_for_component('server')
    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    log.info(f"Serving feeds on http://{bind_host}:{bind_port}")
    console.print(f"[bold blue]🚀 FeedForge listening on http://{bind_host}:{bind_port}[/bold blue]")
    run_app(settings, host=bind_host, port=bind_port)


def _read_source(source: str):
    """Bytes of a URL, or the path itself for files."""
    if source.startswith(('http://', 'https://')):
        return asyncio.run(FeedFetcher().fetch(source))
    path = Path(source)
    if not path.is_file():
        console.print(f"[bold red]❌ No such file: {source}[/bold red]")
        sys.exit(1)
    return path


def _check_site_config(settings) -> tuple[bool, str]:
    """Check site configuration."""
    site = settings.site
    return True, f"Title: {site.title}, Base URL: {site.base_url or 'not set'}"


def _check_xslt_config(settings) -> tuple[bool, str]:
    """Check stylesheet configuration."""
    configured = [d for d in ("atom", "rss", "rdf") if settings.xslt.for_dialect(d)]
    return True, f"Stylesheets: {', '.join(configured) or 'none'}"


def _check_handler_config(settings) -> tuple[bool, str]:
    """Check handler configuration."""
    handler = settings.handler
    return True, (
        f"Timeout: {handler.timeout_ms}ms, Cancel on timeout: {handler.cancel_on_timeout}, "
        f"Pretty print: {settings.effective_pretty_print}, "
        f"URL fetch: {settings.debug if handler.allow_url_fetch is None else handler.allow_url_fetch}"
    )


def _check_fetch_config(settings) -> tuple[bool, str]:
    """Check remote fetch configuration."""
    fetch = settings.fetch
    return True, f"Timeout: {fetch.request_timeout}s, Max size: {fetch.max_content_bytes} bytes"


def _check_logging_config(settings) -> tuple[bool, str]:
    """Check logging configuration."""
    try:
        if settings.logging.file_path:
            log_path = Path(settings.logging.file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
        return True, f"Level: {settings.logging.level.value}, Console: {settings.logging.console_logging}"
    except OSError as e:
        return False, str(e)


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 FeedForge interrupted by user[/yellow]")
        sys.exit(130)
