import argparse
import logging
from pathlib import Path
from typing import List, Optional

from ..browser.driver import PlaywrightDriver
from ..browser.search_form import apply_search_window, build_search_url, open_search_page
from ..config.facets import PRODUCTS, get_product
from ..config.settings import (
    CLOSE_TIMEOUT_MS,
    MAX_ROUNDS,
    OPEN_TIMEOUT_MS,
    OUTPUT_DIR,
    SEARCH_DURATION_MAX,
    SEARCH_DURATION_MIN,
    SEARCH_WINDOW_MONTHS,
    SETTLE_MS,
)
from ..harvest.cancel import CancelToken
from ..harvest.errors import HarvestError, NavigationError
from ..harvest.harvester import ListHarvester
from ..ingestion.orchestrator import open_product_page, run_harvest
from ..processing.results import collect_cruise_results
from ..storage.repository import export_csv, save_rows
from ..utils.logging import get_logger, set_console_level

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FACET_ISSUES = 1
EXIT_NAVIGATION = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facetharvest",
        description="Harvest option lists from the cruise search form",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every poll round")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("products", help="List products and their facets")

    def add_browser_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--product", choices=sorted(PRODUCTS), default="ocean")
        p.add_argument("--headless", action="store_true", help="Run the browser headless")
        p.add_argument("--executable-path", type=Path, default=None,
                       help="Browser binary to use instead of bundled Chromium")

    h = sub.add_parser("harvest", help="Harvest facet option lists")
    add_browser_args(h)
    h.add_argument("--facet", dest="facets", action="append", default=None,
                   help="Only this facet (repeatable)")
    h.add_argument("--out", type=Path, default=None, help="Output JSON (default: product output file)")
    h.add_argument("--csv", type=Path, default=None, help="Also export a flat CSV")
    h.add_argument("--max-rounds", type=int, default=MAX_ROUNDS)
    h.add_argument("--settle-ms", type=int, default=SETTLE_MS)
    h.add_argument("--open-timeout-ms", type=int, default=OPEN_TIMEOUT_MS)
    h.add_argument("--close-timeout-ms", type=int, default=CLOSE_TIMEOUT_MS)
    h.add_argument("--deadline", type=float, default=None, help="Abort the run after N seconds")

    s = sub.add_parser("search", help="Apply the date window and collect result cards")
    add_browser_args(s)
    s.add_argument("--months", type=int, default=SEARCH_WINDOW_MONTHS)
    s.add_argument("--duration-min", type=int, default=SEARCH_DURATION_MIN)
    s.add_argument("--duration-max", type=int, default=SEARCH_DURATION_MAX)
    s.add_argument("--out", type=Path, default=None, help="Results file (.json or .csv)")
    return parser


def cmd_products(args) -> int:
    for product in PRODUCTS.values():
        print(f"{product.name}: {product.url}")
        for facet in product.facets:
            print(f"  - {facet.name:<22} rule={facet.id_rule:<12} source={facet.id_source}")
    return EXIT_OK


def cmd_harvest(args) -> int:
    product = get_product(args.product)
    try:
        facet_names = [f.name for f in product.select(args.facets)]
    except KeyError as e:
        logger.error("Unknown facet: %s", e.args[0])
        return EXIT_FACET_ISSUES
    output_path = args.out or OUTPUT_DIR / product.output_file
    cancel = CancelToken(timeout=args.deadline) if args.deadline is not None else None

    with PlaywrightDriver(headless=args.headless, executable_path=args.executable_path) as driver:
        harvester = ListHarvester(
            driver,
            settle_ms=args.settle_ms,
            max_rounds=args.max_rounds,
            open_timeout_ms=args.open_timeout_ms,
            close_timeout_ms=args.close_timeout_ms,
        )
        context = run_harvest(
            driver,
            product,
            output_path=output_path,
            harvester=harvester,
            facet_names=facet_names,
            cancel=cancel,
        )

    logger.info("All data saved to %s", output_path)
    if args.csv:
        export_csv(context.document, args.csv)

    for outcome in context.outcomes:
        print(f"{outcome.facet:<22} {outcome.status.value:<14} {outcome.count:>5} options")
    return EXIT_OK if context.ok else EXIT_FACET_ISSUES


def cmd_search(args) -> int:
    product = get_product(args.product)
    output_path = args.out or OUTPUT_DIR / f"{product.name}_results.json"

    with PlaywrightDriver(headless=args.headless, executable_path=args.executable_path) as driver:
        if product.search_path:
            open_search_page(driver, product, months=args.months)
        else:
            # No results page of its own; the form is submitted from the product page
            open_product_page(driver, product)
        window = apply_search_window(
            driver,
            months=args.months,
            duration_min=args.duration_min,
            duration_max=args.duration_max,
        )
        rows = collect_cruise_results(driver)

    save_rows(rows, output_path)
    print(f"{len(rows)} results saved to {output_path}")
    if product.search_path:
        url = build_search_url(product, window.start, window.end, window.duration_min, window.duration_max)
        logger.info("Shareable search URL: %s", url)
    return EXIT_OK


COMMANDS = {
    "products": cmd_products,
    "harvest": cmd_harvest,
    "search": cmd_search,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_console_level(logging.DEBUG)

    try:
        return COMMANDS[args.command](args)
    except NavigationError as e:
        logger.error("Page bootstrap failed: %s", e)
        return EXIT_NAVIGATION
    except HarvestError as e:
        logger.error("Run aborted: %s", e)
        return EXIT_FACET_ISSUES
