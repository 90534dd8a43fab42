"""Search form bootstrap: date window and duration range.

The form pre-fills ``#start_date``; the end date is pushed N months later
and the duration inputs opened wide before submitting.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional
from urllib.parse import urlencode

import pandas as pd

from ..config.facets import ProductConfig
from ..config.settings import (
    NAVIGATION_TIMEOUT_MS,
    SEARCH_DURATION_MAX,
    SEARCH_DURATION_MIN,
    SEARCH_WINDOW_MONTHS,
    SITE_URL,
)
from ..harvest.errors import SearchFormError, WaitTimeout
from ..utils.logging import get_logger
from .scripts import CLICK_SCRIPT, SET_VALUE_SCRIPT

logger = get_logger(__name__)

DATE_FORMAT = "%m/%d/%Y"

START_DATE_INPUT = "#start_date"
END_DATE_INPUT = "#end_date"
DURATION_MIN_INPUT = "#search\\[duration_min\\]"
DURATION_MAX_INPUT = "#search\\[duration_max\\]"
SUBMIT_BUTTON = 'button[type="submit"].icon-search'


@dataclass(frozen=True)
class SearchWindow:
    start: str
    end: str
    duration_min: int
    duration_max: int


def add_months(date_str: str, months: int = SEARCH_WINDOW_MONTHS) -> str:
    """Shift an ``MM/DD/YYYY`` date; overflow clamps to month end (01/31 + 3 -> 04/30)."""
    try:
        start = pd.to_datetime(date_str.strip(), format=DATE_FORMAT)
    except (ValueError, AttributeError) as exc:
        raise SearchFormError(f"Unparseable date {date_str!r}") from exc
    end = start + pd.DateOffset(months=months)
    return end.strftime(DATE_FORMAT)


def build_search_url(
    product: ProductConfig,
    start: str,
    end: str,
    duration_min: int = 1,
    duration_max: int = 9999,
) -> str:
    if not product.search_path:
        raise SearchFormError(f"{product.name} has no search results page")
    query = urlencode(
        [
            ("clear", "all"),
            ("search[duration_min]", duration_min),
            ("search[duration_max]", duration_max),
            ("search[start_date]", start),
            ("search[end_date]", end),
        ],
        safe="[]/",
    )
    return f"{SITE_URL}{product.search_path}?{query}"


def open_search_page(
    driver,
    product: ProductConfig,
    months: int = SEARCH_WINDOW_MONTHS,
    today: Optional[date] = None,
) -> str:
    """Navigate straight to the product's search results page.

    The initial window runs from today; ``apply_search_window`` then widens
    it from whatever start date the page settles on.
    """
    start = (today or date.today()).strftime(DATE_FORMAT)
    url = build_search_url(product, start, add_months(start, months))
    logger.info("Navigating to %s...", url)
    driver.navigate(url, wait_until="domcontentloaded", timeout_ms=NAVIGATION_TIMEOUT_MS)
    return url


def _set_value(driver, selector: str, value: str) -> None:
    driver.evaluate(SET_VALUE_SCRIPT, {"selector": selector, "value": value})


def _fill_window(driver, end: str, duration_min: int, duration_max: int) -> None:
    _set_value(driver, END_DATE_INPUT, end)
    driver.fill(DURATION_MIN_INPUT, str(duration_min))
    driver.fill(DURATION_MAX_INPUT, str(duration_max))


def apply_search_window(
    driver,
    months: int = SEARCH_WINDOW_MONTHS,
    duration_min: int = SEARCH_DURATION_MIN,
    duration_max: int = SEARCH_DURATION_MAX,
    timeout_ms: Optional[int] = 30000,
) -> SearchWindow:
    """Fill end date and durations on an open search page, then submit."""
    try:
        driver.wait_for(START_DATE_INPUT, state="visible", timeout_ms=timeout_ms)
    except WaitTimeout as exc:
        raise SearchFormError("Start date field never appeared") from exc

    start = (driver.read_value(START_DATE_INPUT) or "").strip()
    if not start:
        raise SearchFormError("Could not get start_date")
    end = add_months(start, months)
    logger.info("Search window %s -> %s (+%d months)", start, end, months)

    driver.wait_for(DURATION_MAX_INPUT, state="visible", timeout_ms=timeout_ms)
    _fill_window(driver, end, duration_min, duration_max)

    # Late page scripts reset the inputs; settle, then write them again
    try:
        driver.wait_for_load_state("networkidle", timeout_ms=timeout_ms)
    except WaitTimeout:
        logger.warning("Network never went idle; re-applying search fields anyway")
    _fill_window(driver, end, duration_min, duration_max)

    driver.evaluate(CLICK_SCRIPT, SUBMIT_BUTTON)
    logger.info("Search submitted (durations %d-%d)", duration_min, duration_max)
    return SearchWindow(start=start, end=end, duration_min=duration_min, duration_max=duration_max)
