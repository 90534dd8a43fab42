from __future__ import annotations

from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from ..config.settings import RESULTS_TIMEOUT_MS
from ..harvest.models import normalize_label
from ..utils.logging import get_logger

logger = get_logger(__name__)

RESULT_CARD = ".cruise_result_item"
PAGE_HTML_SCRIPT = "() => document.documentElement.outerHTML"


def _text(card, selector: str) -> Optional[str]:
    node = card.select_one(selector)
    if node is None:
        return None
    return normalize_label(node.get_text()) or None


def parse_cruise_results(html: str) -> List[Dict[str, Optional[str]]]:
    """Title, dates and price of every result card on a search page."""
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    return [
        {
            "title": _text(card, "h3"),
            "dates": _text(card, ".cruise_dates"),
            "price": _text(card, ".cruise_price"),
        }
        for card in soup.select(RESULT_CARD)
    ]


def collect_cruise_results(driver, timeout_ms: int = RESULTS_TIMEOUT_MS) -> List[Dict[str, Optional[str]]]:
    driver.wait_for(RESULT_CARD, state="visible", timeout_ms=timeout_ms)
    rows = parse_cruise_results(driver.evaluate(PAGE_HTML_SCRIPT))
    logger.info("Collected %d cruise results", len(rows))
    return rows
