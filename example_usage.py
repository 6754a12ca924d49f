#!/usr/bin/env python3
"""
Example usage of the sitemap-walker scriptable API.
"""

import logging
import threading

from sitemap_walker import (
    SitemapWalker, WalkerConfig, MaxItemsReached, SitemapWalkerError, collect_items
)
from sitemap_walker.utils import setup_logging


def example_streaming():
    """Stream items to a callback as they are discovered."""
    print("Streaming Example")
    print("-" * 40)

    def on_item(item):
        lastmod = item.lastmod.date() if item.lastmod else '-'
        print(f"{item.loc}  lastmod={lastmod}  priority={item.priority}")

    with SitemapWalker(WalkerConfig(max_items=20)) as walker:
        try:
            walker.walk('https://www.python.org', on_item)
        except MaxItemsReached as e:
            print(f"Stopped after {e.limit} items")
        except SitemapWalkerError as e:
            print(f"Walk failed: {e}")


def example_generator():
    """Consume a walk lazily and stop early without a limit."""
    print("Generator Example")
    print("-" * 40)

    config = WalkerConfig(include=[r'/downloads/'], skip_non_200=True)
    with SitemapWalker(config) as walker:
        for i, item in enumerate(walker.iter_items('https://www.python.org/sitemap.xml')):
            print(item.loc)
            if i == 9:
                break


def example_cancel():
    """Cancel a walk from another thread."""
    print("Cancellation Example")
    print("-" * 40)

    cancel = threading.Event()
    timer = threading.Timer(5.0, cancel.set)
    timer.start()

    try:
        items = collect_items('https://www.python.org', cancel=cancel)
        print(f"Collected {len(items)} items")
    except SitemapWalkerError as e:
        print(f"Walk ended: {e}")
    finally:
        timer.cancel()


def main():
    """Run examples."""
    setup_logging('INFO')
    logging.getLogger('SitemapWalker').setLevel(logging.WARNING)

    print("sitemap-walker API Examples")
    print("=" * 40)
    print()

    example_streaming()
    print()
    example_generator()
    print()
    example_cancel()


if __name__ == "__main__":
    main()
