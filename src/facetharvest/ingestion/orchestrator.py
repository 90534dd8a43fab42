from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config.facets import ProductConfig
from ..config.settings import NAVIGATION_TIMEOUT_MS, READY_TIMEOUT_MS
from ..harvest.cancel import CancelToken
from ..harvest.errors import CloseTimeout, NavigationError, OpenTimeout, WaitTimeout
from ..harvest.harvester import ListHarvester
from ..harvest.models import FacetDescriptor
from ..storage.repository import save_document
from ..utils.logging import get_logger

logger = get_logger(__name__)


class FacetStatus(Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    EMPTY = "empty"
    OPEN_TIMEOUT = "open_timeout"
    CLOSE_TIMEOUT = "close_timeout"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class FacetOutcome:
    facet: str
    status: FacetStatus
    count: int = 0
    rounds: int = 0
    detail: Optional[str] = None


@dataclass
class RunContext:
    """Everything one run produces; passed explicitly to each facet step."""

    product: str
    output_path: Optional[Path]
    document: Dict[str, List[dict]] = field(default_factory=dict)
    outcomes: List[FacetOutcome] = field(default_factory=list)

    def record(self, outcome: FacetOutcome, records: Optional[List[dict]] = None) -> None:
        self.document[outcome.facet] = records or []
        self.outcomes.append(outcome)
        if self.output_path is not None:
            save_document(self.document, self.output_path)

    @property
    def ok(self) -> bool:
        return all(o.status is FacetStatus.COMPLETE for o in self.outcomes)

    def summary(self) -> Dict[str, str]:
        return {o.facet: o.status.value for o in self.outcomes}


def open_product_page(driver, product: ProductConfig) -> None:
    """Load the search page and wait for its first control; fatal on failure."""
    logger.info("Navigating to %s...", product.url)
    driver.navigate(product.url, wait_until="domcontentloaded", timeout_ms=NAVIGATION_TIMEOUT_MS)
    try:
        driver.wait_for(product.ready_locator, state="visible", timeout_ms=READY_TIMEOUT_MS)
    except WaitTimeout as exc:
        raise NavigationError(f"{product.name}: page never became ready ({exc})") from exc
    logger.info("Page ready (%s visible)", product.ready_locator)


def harvest_facet(
    harvester: ListHarvester,
    facet: FacetDescriptor,
    context: RunContext,
    cancel: Optional[CancelToken] = None,
) -> FacetOutcome:
    """Harvest one facet; every failure ends up as an outcome, never raised."""
    if cancel is not None and cancel.cancelled:
        outcome = FacetOutcome(facet.name, FacetStatus.SKIPPED, detail="run cancelled")
        logger.warning("[%s] skipped: run cancelled", facet.name)
        context.record(outcome)
        return outcome

    try:
        result = harvester.harvest(facet, cancel=cancel)
    except OpenTimeout as exc:
        outcome = FacetOutcome(facet.name, FacetStatus.OPEN_TIMEOUT, detail=str(exc))
        logger.warning("[%s] skipped: %s", facet.name, exc)
        context.record(outcome)
        return outcome
    except CloseTimeout as exc:
        rounds = exc.result.rounds if exc.result is not None else 0
        outcome = FacetOutcome(facet.name, FacetStatus.CLOSE_TIMEOUT, rounds=rounds, detail=str(exc))
        logger.warning("[%s] discarded: %s", facet.name, exc)
        context.record(outcome)
        return outcome
    except Exception as exc:
        outcome = FacetOutcome(facet.name, FacetStatus.FAILED, detail=str(exc))
        logger.error("[%s] failed: %s", facet.name, exc, exc_info=True)
        context.record(outcome)
        return outcome

    records = result.to_dicts()
    if result.is_partial:
        status = FacetStatus.PARTIAL
        logger.warning("[%s] partial harvest (%s): %d options kept", facet.name, result.reason, len(records))
    elif not records:
        status = FacetStatus.EMPTY
        logger.warning("[%s] list converged with no options", facet.name)
    else:
        status = FacetStatus.COMPLETE

    outcome = FacetOutcome(facet.name, status, count=len(records), rounds=result.rounds, detail=result.reason)
    context.record(outcome, records)
    return outcome


def run_harvest(
    driver,
    product: ProductConfig,
    output_path: Optional[Path] = None,
    harvester: Optional[ListHarvester] = None,
    facet_names: Optional[Sequence[str]] = None,
    cancel: Optional[CancelToken] = None,
) -> RunContext:
    """Harvest the facets of one product, persisting after each facet.

    Raises NavigationError when the page cannot be opened; facet failures
    are recorded in the returned context instead.
    """
    facets = product.select(facet_names)
    harvester = harvester or ListHarvester(driver)
    context = RunContext(product=product.name, output_path=output_path)
    # Every facet key exists from the start, in catalogue order
    context.document = {f.name: [] for f in facets}

    open_product_page(driver, product)

    for facet in facets:
        logger.info("Scraping %s...", facet.name)
        outcome = harvest_facet(harvester, facet, context, cancel=cancel)
        if output_path is not None and outcome.status is FacetStatus.COMPLETE:
            logger.info("%s saved to %s", facet.name, output_path.name)

    logger.info(
        "Run finished: %d/%d facets complete",
        sum(1 for o in context.outcomes if o.status is FacetStatus.COMPLETE),
        len(context.outcomes),
    )
    return context
