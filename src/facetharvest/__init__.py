"""facetharvest — option list harvester for lazily loaded search form facets.

Public API surface — import submodules directly for full access:
  facetharvest.harvest.harvester     — ListHarvester (open / poll / close)
  facetharvest.harvest.models        — OptionRecord, FacetDescriptor, HarvestSession
  facetharvest.harvest.rules         — id extraction rules
  facetharvest.config.facets         — product variants and their facets
  facetharvest.ingestion.orchestrator — multi-facet runs with incremental saves
  facetharvest.app.cli               — CLI entry point
"""

from .harvest.harvester import ListHarvester
from .harvest.models import FacetDescriptor, HarvestResult, HarvestStatus, OptionRecord
from .harvest.cancel import CancelToken
from .config.facets import PRODUCTS, get_product
from .ingestion.orchestrator import run_harvest


def main(argv=None):
    """CLI entry point."""
    from .app.main import main as _main
    return _main(argv)


__all__ = [
    "ListHarvester",
    "FacetDescriptor",
    "HarvestResult",
    "HarvestStatus",
    "OptionRecord",
    "CancelToken",
    "PRODUCTS",
    "get_product",
    "run_harvest",
    "main",
]
