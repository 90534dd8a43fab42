"""Exception hierarchy shared by the driver, the harvester and the orchestrator."""

from __future__ import annotations

from typing import Optional


class HarvestError(Exception):
    """Base class for every facetharvest failure."""


class NavigationError(HarvestError):
    """The product page could not be loaded; aborts the whole run."""


class WaitTimeout(HarvestError):
    """A locator did not reach the requested state in time."""

    def __init__(self, locator: str, state: str, timeout_ms: Optional[int]) -> None:
        super().__init__(f"{locator!r} not {state} within {timeout_ms} ms")
        self.locator = locator
        self.state = state
        self.timeout_ms = timeout_ms


class OpenTimeout(HarvestError):
    """A facet's selection list never became visible."""

    def __init__(self, facet: str, detail: str = "") -> None:
        super().__init__(f"{facet}: list did not open ({detail})" if detail else f"{facet}: list did not open")
        self.facet = facet


class CloseTimeout(HarvestError):
    """A facet's selection list never became hidden after closing.

    ``result`` holds the harvest that finished before the close failed.
    """

    def __init__(self, facet: str, detail: str = "", result=None) -> None:
        super().__init__(f"{facet}: list did not close ({detail})" if detail else f"{facet}: list did not close")
        self.facet = facet
        self.result = result


class SearchFormError(HarvestError):
    """The search form is missing a field it needs to be filled."""
