"""Lazy-loaded selection list harvester.

Collaborators:
  - models: OptionRecord, FacetDescriptor, HarvestSession, HarvestResult
  - extractor: DOM snapshot -> OptionRecord parsing
  - rules: id extraction rules
  - cancel: CancelToken
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..browser.scripts import SCROLL_TO_END_SCRIPT
from ..config.settings import CLOSE_TIMEOUT_MS, MAX_ROUNDS, OPEN_TIMEOUT_MS, SETTLE_MS
from ..utils.logging import get_logger
from .cancel import CancelToken
from .errors import CloseTimeout, OpenTimeout, WaitTimeout
from .extractor import RecordExtractor
from .models import FacetDescriptor, HarvestResult, HarvestSession, HarvestStatus
from .rules import get_rule

logger = get_logger(__name__)

REASON_ROUND_CAP = "round_cap"
REASON_CANCELLED = "cancelled"


class ListHarvester:
    """Open a facet's list, scroll until the option count settles, close it.

    One harvester serves every facet; all facet specifics come from the
    ``FacetDescriptor``. Driver calls are strictly sequential.
    """

    def __init__(
        self,
        driver,
        settle_ms: int = SETTLE_MS,
        max_rounds: int = MAX_ROUNDS,
        open_timeout_ms: int = OPEN_TIMEOUT_MS,
        close_timeout_ms: int = CLOSE_TIMEOUT_MS,
    ) -> None:
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        if settle_ms < 0:
            raise ValueError("settle_ms must not be negative")
        self.driver = driver
        self.settle_ms = settle_ms
        self.max_rounds = max_rounds
        self.open_timeout_ms = open_timeout_ms
        self.close_timeout_ms = close_timeout_ms

    def harvest(self, facet: FacetDescriptor, cancel: Optional[CancelToken] = None) -> HarvestResult:
        token = cancel or CancelToken()
        extractor = RecordExtractor(self.driver, facet, get_rule(facet.id_rule))
        session = HarvestSession(facet.name)

        logger.info("[%s] opening list", facet.name)
        self._open(facet)

        try:
            status, reason = self._poll(facet, extractor, session, token)
        except Exception:
            self._close_quietly(facet)
            raise

        result = session.finalize(status, reason)
        if reason == REASON_CANCELLED:
            self._close_quietly(facet)
        else:
            try:
                self._close(facet)
            except CloseTimeout as exc:
                exc.result = result
                raise

        logger.info(
            "[%s] %s: %d options after %d rounds%s",
            facet.name,
            result.status.value,
            len(result.records),
            result.rounds,
            f" ({reason})" if reason else "",
        )
        return result

    def _open(self, facet: FacetDescriptor) -> None:
        try:
            self.driver.wait_for(facet.trigger, state="visible", timeout_ms=self.open_timeout_ms)
            self.driver.click(facet.trigger)
            self.driver.wait_for(facet.list_container, state="visible", timeout_ms=self.open_timeout_ms)
        except WaitTimeout as exc:
            raise OpenTimeout(facet.name, str(exc)) from exc

    def _poll(
        self,
        facet: FacetDescriptor,
        extractor: RecordExtractor,
        session: HarvestSession,
        token: CancelToken,
    ) -> Tuple[HarvestStatus, Optional[str]]:
        settle_s = self.settle_ms / 1000.0
        for _ in range(self.max_rounds):
            if token.cancelled:
                return HarvestStatus.PARTIAL, REASON_CANCELLED

            self.driver.evaluate(SCROLL_TO_END_SCRIPT, facet.list_container)
            if token.wait(settle_s):
                return HarvestStatus.PARTIAL, REASON_CANCELLED

            added = session.merge(extractor.sample())
            state = session.observe_round()
            logger.debug(
                "[%s] round %d: +%d -> %d unique (%s)",
                facet.name,
                session.rounds,
                added,
                len(session.accumulated),
                state.value,
            )
            if session.converged:
                return HarvestStatus.COMPLETE, None

        logger.warning("[%s] round cap %d reached before the list settled", facet.name, self.max_rounds)
        return HarvestStatus.PARTIAL, REASON_ROUND_CAP

    def _close(self, facet: FacetDescriptor) -> None:
        try:
            self.driver.click(facet.close_control)
            self.driver.wait_for(facet.list_container, state="hidden", timeout_ms=self.close_timeout_ms)
        except WaitTimeout as exc:
            raise CloseTimeout(facet.name, str(exc)) from exc

    def _close_quietly(self, facet: FacetDescriptor) -> None:
        try:
            self._close(facet)
        except Exception as exc:
            logger.warning("[%s] could not close list: %s", facet.name, exc)
