"""Command-line interface for sitemap-walker."""

import argparse
import json
import sys
import time
from typing import List
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from sitemap_walker import __version__
from sitemap_walker.config import load_config
from sitemap_walker.crawler.walker import SitemapWalker
from sitemap_walker.errors import MaxItemsReached, SitemapWalkerError
from sitemap_walker.models import OutputFormat, SitemapItem
from sitemap_walker.utils import format_duration, setup_logging, validate_url

console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog='sitemap-walker',
        description='Stream the URLs listed in a website\'s sitemaps',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration file (default: config.py in current dir)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Walk command
    walk_parser = subparsers.add_parser(
        'walk',
        help='Walk a sitemap, sitemap index or site root'
    )
    walk_parser.add_argument(
        'url',
        type=str,
        help='Sitemap URL, or a site root to probe /sitemap.xml'
    )
    walk_parser.add_argument(
        '--include',
        action='append',
        default=None,
        metavar='REGEX',
        help='Only emit URLs matching this pattern (repeatable)'
    )
    walk_parser.add_argument(
        '--exclude',
        action='append',
        default=None,
        metavar='REGEX',
        help='Never emit URLs matching this pattern (repeatable)'
    )
    walk_parser.add_argument(
        '--max-items',
        type=int,
        help='Stop after this many URLs (0 for no limit)'
    )
    walk_parser.add_argument(
        '--timeout',
        type=float,
        help='Per-request timeout in seconds'
    )
    walk_parser.add_argument(
        '--ignore-robots',
        action='store_true',
        help='Do not consult robots.txt'
    )
    walk_parser.add_argument(
        '--skip-non-200',
        action='store_true',
        help='Warn about and skip nested sitemaps that do not answer 200'
    )
    walk_parser.add_argument(
        '-f', '--format',
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TEXT.value,
        help='Output format (default: text)'
    )

    # Config command
    config_parser = subparsers.add_parser(
        'config',
        help='Manage configuration settings'
    )
    config_subparsers = config_parser.add_subparsers(dest='config_action')

    config_subparsers.add_parser(
        'show',
        help='Show current configuration'
    )

    config_init_parser = config_subparsers.add_parser(
        'init',
        help='Initialize default configuration file'
    )
    config_init_parser.add_argument(
        '--path',
        type=str,
        default='./config.py',
        help='Path for configuration file (default: ./config.py)'
    )

    return parser


def _print_item(item: SitemapItem, output_format: str):
    if output_format == OutputFormat.JSON.value:
        print(json.dumps(item.model_dump(mode='json')), flush=True)
    else:
        print(item.loc, flush=True)


def _render_table(items: List[SitemapItem]):
    table = Table(title="Sitemap URLs")
    table.add_column("URL", style="cyan")
    table.add_column("Last modified", style="magenta")
    table.add_column("Change freq")
    table.add_column("Priority", justify="right")

    for item in items:
        table.add_row(
            item.loc,
            item.lastmod.isoformat() if item.lastmod else '',
            item.changefreq or '',
            f"{item.priority:.1f}" if item.priority is not None else ''
        )

    Console().print(table)


def handle_walk(args) -> int:
    """Handle the walk command."""
    if not validate_url(args.url):
        console.print(f"[red]Error: {args.url} is not an http(s) URL[/red]")
        return 1

    config = load_config(args.config)
    walker_config = config.walker_config.model_copy()

    try:
        if args.include:
            walker_config.include = args.include
        if args.exclude:
            walker_config.exclude = args.exclude
        if args.max_items is not None:
            walker_config.max_items = args.max_items
        if args.timeout is not None:
            walker_config.timeout = args.timeout
    except ValidationError as e:
        for error in e.errors():
            field = '.'.join(str(part) for part in error['loc'])
            console.print(f"[red]Error: --{field.replace('_', '-')}: {error['msg']}[/red]")
        return 1
    if args.ignore_robots:
        walker_config.ignore_robots = True
    if args.skip_non_200:
        walker_config.skip_non_200 = True

    collected: List[SitemapItem] = []
    table_output = args.format == OutputFormat.TABLE.value

    started = time.monotonic()
    count = 0

    def on_item(item: SitemapItem):
        nonlocal count
        count += 1
        if table_output:
            collected.append(item)
        else:
            _print_item(item, args.format)

    exit_code = 0
    with SitemapWalker(walker_config) as walker:
        try:
            walker.walk(args.url, on_item)
        except MaxItemsReached as e:
            console.print(f"[yellow]Stopped after {e.limit} items (limit reached)[/yellow]")
        except SitemapWalkerError as e:
            console.print(f"[red]✗[/red] Walk failed: {e}")
            if args.verbose:
                console.print_exception()
            exit_code = 1

    if table_output:
        _render_table(collected)

    console.print(f"[green]✓[/green] {count} URL(s) in {format_duration(time.monotonic() - started)}")
    return exit_code


def handle_config(args) -> int:
    """Handle the config command."""
    if args.config_action == 'init':
        from sitemap_walker.config import create_default_config
        create_default_config(args.path)
        console.print(f"[green]✓[/green] Created configuration file at {args.path}")
        return 0

    config = load_config(args.config)

    if args.config_action == 'show':
        console.print("[bold]Current Configuration:[/bold]")
        for key, value in config.to_dict().items():
            if isinstance(value, dict):
                console.print(f"\n[cyan]{key}:[/cyan]")
                for k, v in value.items():
                    console.print(f"  {k}: {v}")
            else:
                console.print(f"{key}: {value}")
        return 0

    console.print("[yellow]Usage: sitemap-walker config {show,init}[/yellow]")
    return 1


def main(argv=None):
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging('DEBUG' if args.verbose else 'WARNING')

    try:
        if args.command == 'walk':
            return handle_walk(args)
        elif args.command == 'config':
            return handle_config(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
