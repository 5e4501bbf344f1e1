#!/usr/bin/env python3
"""
Main entry point for the link crawler.
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, Optional

from linkcrawler import __version__
from linkcrawler.crawler.coordinator import CrawlCoordinator
from linkcrawler.crawler.fetcher import ContentFetcher
from linkcrawler.crawler.urls import coerce_seed_url, InvalidURLError
from linkcrawler.crawler.worker import FetchFunction
from linkcrawler.utils.config import Config, load_config, parse_depth, validate_config
from linkcrawler.utils.logger import setup_logging


DEFAULT_CONFIG_PATH = 'config.yaml'
SHUTDOWN_GRACE_PERIOD = 5.0


def request_number(message: str, minimum: int = 0,
                   input_func: Callable[[], str] = input,
                   output: Callable[[str], None] = print) -> int:
    """Ask for an integer until a valid one (not below `minimum`) is entered."""
    while True:
        output(message)
        raw = input_func()
        try:
            value = int(raw.strip())
        except ValueError:
            output("Value must be a number")
            continue
        if value < minimum:
            output(f"Value must be at least {minimum}")
            continue
        return value


def request_url(message: str,
                input_func: Callable[[], str] = input,
                output: Callable[[str], None] = print) -> str:
    """Ask for a seed URL until a valid one is entered."""
    while True:
        output(message)
        try:
            return coerce_seed_url(input_func())
        except InvalidURLError:
            output("Inputed string is not a valid URL")


class CrawlerApp:
    """Main application class for the link crawler."""

    def __init__(self, output: Callable[[str], None] = print):
        self.coordinator: Optional[CrawlCoordinator] = None
        self.logger = logging.getLogger(__name__)
        self.output = output
        self._shutdown_event = threading.Event()

    def setup_logging(self, config: Config):
        """Setup logging configuration."""
        setup_logging(config.logging.to_dict(), enable_json=config.logging.json)

    def setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            self._shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def request_shutdown(self):
        self._shutdown_event.set()

    def run(self, config: Config, url: str, fetch: Optional[FetchFunction] = None) -> int:
        """Crawl from `url` until every worker is done or shutdown is requested."""
        crawler_config = config.crawler

        self.logger.info("=== LINK CRAWLER STARTING ===")
        self.logger.info(f"Seed URL: {url}")
        self.logger.info(f"Task count: {crawler_config.task_count}")
        self.logger.info(f"Max depth: {crawler_config.max_depth if crawler_config.max_depth is not None else 'unbounded'}")

        if fetch is None:
            fetch = ContentFetcher(
                user_agent=crawler_config.user_agent,
                request_timeout=crawler_config.request_timeout,
                max_content_size=crawler_config.max_content_size
            )

        try:
            self.coordinator = CrawlCoordinator(
                task_count=crawler_config.task_count,
                max_depth=crawler_config.max_depth,
                fetch=fetch
            )
            self.coordinator.new_link_found.connect(self._on_new_link)
            self.coordinator.finished.connect(self._on_finished)
            self.coordinator.start_search(url)

            while not self.coordinator.wait(timeout=0.2):
                if self._shutdown_event.is_set():
                    self.logger.info("Shutdown requested, stopping crawler...")
                    self.coordinator.stop_search()
                    if not self.coordinator.wait(timeout=SHUTDOWN_GRACE_PERIOD):
                        self.logger.warning("Workers did not stop in time, exiting anyway")
                    break

        except Exception as e:
            self.logger.error(f"Fatal error: {e}", exc_info=True)
            return 1

        finally:
            self.logger.info("=== LINK CRAWLER FINISHED ===")

        return 0

    def _on_new_link(self, address: str, worker_id: str):
        self.output(f"#{worker_id} - {address}")

    def _on_finished(self):
        self.output(f"Searching is finished! {len(self.coordinator.storage)} addresses found")


def _task_count_arg(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid task count: {value!r}")
    if count < 1:
        raise argparse.ArgumentTypeError("task count must be at least 1")
    return count


def _depth_arg(value: str) -> Optional[int]:
    try:
        return parse_depth(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Concurrent link crawler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                  # Ask for every setting
  python main.py example.com --tasks 4 --depth 2  # Four workers, two levels deep
  python main.py --config my_config.yaml          # Settings from a file
        """
    )

    parser.add_argument(
        'url',
        nargs='?',
        help='Seed URL; a bare host gets the http:// scheme'
    )

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--tasks',
        type=_task_count_arg,
        help='Number of concurrent workers'
    )

    parser.add_argument(
        '--depth',
        type=_depth_arg,
        default=argparse.SUPPRESS,
        help="Search depth: 0 collects only the seed page's links, -1 or 'unbounded' for no limit"
    )

    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Write logs as JSON'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Link Crawler {__version__}'
    )

    return parser


def resolve_settings(args: argparse.Namespace,
                     input_func: Callable[[], str] = input,
                     output: Callable[[str], None] = print) -> Config:
    """
    Merge configuration file, command line options and interactive answers.

    Settings missing everywhere are asked for on the console when no seed
    URL is known yet.
    """
    if args.config:
        config = load_config(args.config)
    elif Path(DEFAULT_CONFIG_PATH).exists():
        config = load_config(DEFAULT_CONFIG_PATH)
    else:
        config = Config.default()

    crawler = config.crawler
    interactive = args.url is None and crawler.seed_url is None

    if args.tasks is not None:
        crawler.task_count = args.tasks
    elif interactive:
        crawler.task_count = request_number("Input thread count...", minimum=1,
                                            input_func=input_func, output=output)

    if hasattr(args, 'depth'):
        crawler.max_depth = args.depth
    elif interactive:
        level = request_number("Input search level (-1 for unbounded)...", minimum=-1,
                               input_func=input_func, output=output)
        crawler.max_depth = parse_depth(level)

    if args.url is not None:
        crawler.seed_url = args.url
    elif interactive:
        crawler.seed_url = request_url("Input url for searching...",
                                       input_func=input_func, output=output)

    if args.json_logs:
        config.logging.json = True

    validate_config(config)
    return config


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_settings(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user")
        return 1

    app = CrawlerApp()
    app.setup_logging(config)
    app.setup_signal_handlers()
    return app.run(config, config.crawler.seed_url)


if __name__ == '__main__':
    sys.exit(main())
