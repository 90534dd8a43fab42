"""Product variants of the cruise search form and the facets each one exposes.

Selection lists are addressed through the form parameter they serve,
``search[<param>]``; the trigger input carries the parameter as its id.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from ..harvest.models import FacetDescriptor
from .settings import SITE_URL


@dataclass(frozen=True)
class ProductConfig:
    name: str
    url: str
    ready_locator: str
    facets: Tuple[FacetDescriptor, ...]
    output_file: str
    search_path: Optional[str] = None

    def facet(self, name: str) -> FacetDescriptor:
        for facet in self.facets:
            if facet.name == name:
                return facet
        known = ", ".join(f.name for f in self.facets)
        raise KeyError(f"{self.name} has no facet {name!r} (known: {known})")

    def select(self, names: Optional[Sequence[str]] = None) -> Tuple[FacetDescriptor, ...]:
        if not names:
            return self.facets
        return tuple(self.facet(n) for n in names)


def selection_list_facet(name: str, param: str, id_rule: str = "numeric") -> FacetDescriptor:
    root = f'div[data-serving="search[{param}]"]'
    return FacetDescriptor(
        name=name,
        trigger=f"#{param}",
        list_container=f"{root} .selection-list-results-list",
        close_control=f"{root} .selection-list-close",
        id_rule=id_rule,
        id_source="label_for",
    )


def panel_facet(name: str, param: str, field_scope: str) -> FacetDescriptor:
    """Filter panel lists with a "Done" button; ids sit on the checkboxes."""
    return FacetDescriptor(
        name=name,
        trigger=f'input#{param}[data-selection-list-trigger="search[{param}]"]',
        list_container=f"{field_scope} .selection-list-results-body",
        close_control=f"{field_scope} .selection-list-cta-close a.button",
        id_rule="pass_through",
        id_source="input_data_option",
    )


OCEAN = ProductConfig(
    name="ocean",
    url=f"{SITE_URL}/app/0/cruise/0/search.html?clear=all",
    ready_locator="#destination_ids",
    facets=(
        selection_list_facet("destination", "destination_ids"),
        selection_list_facet("cruise_line", "vendor_ids"),
        selection_list_facet("cruise_ship", "ship_ids"),
        selection_list_facet("departure_port", "departure_port_ids"),
    ),
    output_file="output.json",
    search_path="/app/0/cruise/0/search_cruises.html",
)

RIVER = ProductConfig(
    name="river",
    url=f"{SITE_URL}/app/0/river_cruise/0/search.html?clear=all",
    ready_locator="#destination_ids",
    facets=(
        selection_list_facet("destination", "destination_ids"),
        selection_list_facet("country", "country_codes", id_rule="alpha_code"),
        selection_list_facet("cruise_line", "vendor_ids"),
        selection_list_facet("cruise_ship", "ship_ids"),
    ),
    output_file="newriver.json",
    search_path="/app/0/river_cruise/0/search_cruises.html",
)

OCEAN_PANEL = ProductConfig(
    name="ocean_panel",
    url=f"{SITE_URL}/app/0/cruise/0/search.html",
    ready_locator=".cruise_result_item",
    facets=(
        panel_facet("destination", "destination_ids", '.form-field[data-component="selection-list"]'),
        panel_facet("cruise_line", "vendor_ids", ".form-field[data-param-vendors]"),
        panel_facet("cruise_ship", "ship_ids", ".form-field[data-param-ships]"),
        panel_facet("embarkation_port", "departure_port_ids", ".form-field.form-row-embarkation"),
        panel_facet("port_of_call", "port_of_call_ids", ".form-field:has(input#port_of_call_ids)"),
        panel_facet(
            "cruise_space_special",
            "promotion_tag_ids",
            ".form-field.search-form-marketing-code + .form-field:has(input#promotion_tag_ids)",
        ),
    ),
    output_file="panel.json",
)

PRODUCTS: Dict[str, ProductConfig] = {p.name: p for p in (OCEAN, RIVER, OCEAN_PANEL)}


def get_product(name: str) -> ProductConfig:
    try:
        return PRODUCTS[name]
    except KeyError:
        known = ", ".join(PRODUCTS)
        raise ValueError(f"Unknown product {name!r} (known: {known})") from None
