"""Command-line entry point for the catalog harvester."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_ROOT_URLS, HarvestConfig
from .orchestrator import run_all, run_discovery, run_harvest

logger = logging.getLogger("step_harvest.cli")

COMMANDS = {
    "discover": run_discovery,
    "harvest": run_harvest,
    "all": run_all,
}


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "roots",
        nargs="*",
        help="Catalog root URLs (defaults to the built-in goBILDA categories)",
    )
    parser.add_argument(
        "--output",
        default="files",
        type=Path,
        help="Directory where the breadcrumb tree of step files is written",
    )
    parser.add_argument(
        "--links-dir",
        default="links",
        type=Path,
        help="Directory holding one <root>Links.json file per catalog root",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Per-page navigation and element timeout in seconds",
    )
    parser.add_argument(
        "--download-timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for each archive download",
    )
    parser.add_argument(
        "--chrome-path",
        type=Path,
        default=None,
        help="Path to a Chrome/Chromium executable instead of Playwright's bundled one",
    )
    parser.add_argument(
        "--headful",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Stop expanding listing pages below this depth",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Discover catalog product pages and download their STEP archives.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_common_arguments(
        subparsers.add_parser("discover", help="Crawl catalog roots and save product links")
    )
    _add_common_arguments(
        subparsers.add_parser("harvest", help="Download archives for saved product links")
    )
    _add_common_arguments(
        subparsers.add_parser("all", help="Discover and then harvest each root")
    )

    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def build_config(args: argparse.Namespace) -> HarvestConfig:
    return HarvestConfig(
        save_dir=Path(args.output).resolve(),
        links_dir=Path(args.links_dir).resolve(),
        root_urls=list(args.roots or DEFAULT_ROOT_URLS),
        navigation_timeout=args.timeout,
        download_timeout=args.download_timeout,
        headless=not args.headful,
        browser_executable=args.chrome_path,
        max_depth=args.max_depth,
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = build_config(args)
    overall_start = time.perf_counter()
    asyncio.run(COMMANDS[args.command](config))
    logger.info(
        "Finished %s for %d root(s) in %.2fs",
        args.command,
        len(config.root_urls),
        time.perf_counter() - overall_start,
    )


if __name__ == "__main__":
    main()
