#!/usr/bin/env python3
"""
Docs Harvester - capture documentation pages as PDF and text files.

Renders pages with Playwright, extracts their primary content and saves a
PDF plus a plain-text transcript per page, optionally logged in through
browser cookies.

Usage:
    python -m docs_harvester crawl https://example.com/learn/intro
    python -m docs_harvester crawl-navigation https://example.com/learn/intro --list-only
    python -m docs_harvester crawl-navigation https://example.com/learn/intro \\
        --cookies-file cookies.json --start-index 6 --max-pages 3
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List

from docs_harvester.crawler import (
    BrowserSession,
    CrawlRequest,
    CrawlResult,
    DocsCrawler,
    ExtractionRules,
    SessionConfig,
    load_credentials,
)
from docs_harvester.utils import constants
from docs_harvester.utils.errors import HarvesterError
from docs_harvester.utils.paths import validate_url
from docs_harvester.utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning,
)


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by every subcommand."""
    parser.add_argument(
        '--output', '-o',
        type=str,
        default=constants.DEFAULT_OUTPUT_DIR,
        help=f'Output directory (default: {constants.DEFAULT_OUTPUT_DIR})'
    )

    parser.add_argument(
        '--timeout', '-t',
        type=int,
        default=constants.DEFAULT_PAGE_TIMEOUT,
        help=f'Page load timeout in milliseconds (default: {constants.DEFAULT_PAGE_TIMEOUT})'
    )

    parser.add_argument(
        '--retries', '-r',
        type=int,
        default=constants.DEFAULT_RETRIES,
        help=f'Attempts per page before giving up (default: {constants.DEFAULT_RETRIES})'
    )

    parser.add_argument(
        '--strategy', '-s',
        choices=constants.PDF_STRATEGIES,
        default=constants.DEFAULT_STRATEGY,
        help=f'PDF generation strategy (default: {constants.DEFAULT_STRATEGY})'
    )

    parser.add_argument(
        '--user-agent', '-u',
        type=str,
        default=constants.DEFAULT_USER_AGENT,
        help='Custom user agent string'
    )

    parser.add_argument(
        '--cookies-file',
        type=str,
        default=None,
        help='Path to a JSON file containing an array of cookies'
    )

    parser.add_argument(
        '--delay',
        type=float,
        default=constants.DEFAULT_CRAWL_DELAY,
        help=f'Delay between pages in seconds (default: {constants.DEFAULT_CRAWL_DELAY})'
    )

    parser.add_argument(
        '--keep-boilerplate',
        action='store_true',
        help='Do not cut login prompts, discussion and footer text from transcripts'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Run browser in visible mode (PDF export needs headless Chromium)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )


def parse_arguments(argv: List[str] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (default: sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='docs-harvester',
        description='Harvest documentation pages into PDF and text files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s crawl https://www.hellointerview.com/learn/system-design/in-a-hurry/introduction
    %(prog)s crawl-navigation https://www.hellointerview.com/learn/system-design/in-a-hurry/introduction --list-only
    %(prog)s crawl-navigation <base-url> --filter scal --max-pages 5 -s clean
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    crawl = subparsers.add_parser('crawl', help='Harvest a single page')
    crawl.add_argument('url', help='URL of the page to harvest')
    add_common_arguments(crawl)

    navigation = subparsers.add_parser(
        'crawl-navigation',
        help='Harvest every page listed in the sidebar navigation'
    )
    navigation.add_argument(
        'base_url',
        help='Any documentation page that shows the sidebar navigation'
    )
    add_common_arguments(navigation)
    navigation.add_argument(
        '--max-pages', '-m',
        type=int,
        default=None,
        help='Maximum number of pages to harvest'
    )
    navigation.add_argument(
        '--filter',
        type=str,
        default=None,
        help='Only harvest links whose text or URL matches this regex (case-insensitive)'
    )
    navigation.add_argument(
        '--start-index',
        type=int,
        default=1,
        help='Start from this 1-based link index (useful for resuming)'
    )
    navigation.add_argument(
        '--list-only',
        action='store_true',
        help='Only list navigation links without harvesting'
    )

    return parser.parse_args(argv)


def build_session_config(args: argparse.Namespace) -> SessionConfig:
    """Build the session identity from CLI options."""
    credentials = load_credentials(args.cookies_file) if args.cookies_file else []
    if args.cookies_file and not credentials:
        print_warning(f"Cookies file {args.cookies_file} holds no cookies, browsing anonymously")
    elif not args.cookies_file and not args.quiet:
        print_info("No cookies file provided, browsing anonymously")

    return SessionConfig(
        user_agent=args.user_agent,
        credentials=credentials,
        timeout=args.timeout,
        retries=args.retries,
        headless=not args.no_headless,
    )


def build_crawler(session: BrowserSession, args: argparse.Namespace) -> DocsCrawler:
    """Build the crawler from CLI options."""
    rules = ExtractionRules()
    if args.keep_boilerplate:
        rules.boilerplate_markers = ()

    return DocsCrawler(
        session,
        output_dir=args.output,
        strategy=args.strategy,
        delay=args.delay,
        rules=rules,
    )


def print_summary(results: List[CrawlResult], output_dir: str) -> None:
    """
    Print the harvest summary.

    Args:
        results: One result per attempted page
        output_dir: Directory the artifacts were written to
    """
    print("\n" + "=" * 60)
    print_success("HARVEST SUMMARY")
    print("=" * 60)

    for position, result in enumerate(results, 1):
        label = result.index if result.index is not None else position
        print(f"\n{label}. {result.url}")
        if result.ok:
            print(f"   Title: {result.title}")
            print(f"   PDF:   {result.artifacts.pdf_path}")
            print(f"   Text:  {result.artifacts.text_path}")
            print(f"   Reading time: {result.content.reading_time} minutes")
        else:
            print(f"   Error: {result.error}")

    succeeded = sum(1 for r in results if r.ok)
    print(f"\n  Successful: {succeeded}")
    print(f"  Failed:     {len(results) - succeeded}")
    print(f"  Files saved to: {os.path.abspath(output_dir)}")
    print("=" * 60 + "\n")


async def list_navigation(crawler: DocsCrawler, base_url: str) -> int:
    """Print the numbered sidebar links without harvesting them."""
    links = await crawler.discover(base_url)

    print_status("\nNavigation Links Found:", "bold cyan")
    print("=" * 60)
    for position, link in enumerate(links, 1):
        print(f"{position}. {link.text}")
        print(f"   → {link.url}\n")
    print(f"Total: {len(links)} links")
    print_info("To start harvesting from a specific index, use: --start-index <number>")
    return EXIT_OK


async def main(argv: List[str] = None) -> int:
    """
    Main entry point for the harvester.

    Returns:
        Exit code (0 for success, 1 for error, 2 if some pages failed)
    """
    args = parse_arguments(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)

    try:
        target_url = validate_url(args.url if args.command == 'crawl' else args.base_url)
        config = build_session_config(args)

        async with BrowserSession(config) as session:
            crawler = build_crawler(session, args)

            if args.command == 'crawl':
                results = [await crawler.crawl_page(target_url)]
            elif args.list_only:
                return await list_navigation(crawler, target_url)
            else:
                request = CrawlRequest(
                    max_pages=args.max_pages,
                    filter_pattern=args.filter,
                    start_index=args.start_index,
                )
                results = await crawler.crawl_from_navigation(target_url, request)

        if not args.quiet:
            print_summary(results, args.output)

        if not results:
            print_warning("Nothing was harvested")
            return EXIT_OK
        if any(not r.ok for r in results):
            print_error(f"{sum(1 for r in results if not r.ok)} page(s) failed")
            return EXIT_PARTIAL

        print_success(f"Harvested {len(results)} page(s) to: {os.path.abspath(args.output)}")
        return EXIT_OK

    except KeyboardInterrupt:
        print_error("\nHarvest interrupted by user")
        return EXIT_ERROR
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return EXIT_ERROR
    except HarvesterError as e:
        print_error(str(e))
        return EXIT_ERROR
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_ERROR


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
