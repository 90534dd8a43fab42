from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..browser.scripts import OUTER_HTML_SCRIPT
from .models import FacetDescriptor, OptionRecord, normalize_label
from .rules import IdRule, get_rule

# "Select all" toggles and group headings live in the same <ul> as options
STRUCTURAL_CLASSES = frozenset({"select-all", "heading-group"})


def _is_structural(item: Tag) -> bool:
    classes = set(item.get("class") or [])
    return bool(classes & STRUCTURAL_CLASSES)


def _raw_id_source(item: Tag, label: Tag, id_source: str) -> Optional[str]:
    if id_source == "label_for":
        return label.get("for")
    checkbox = item.find("input", attrs={"type": "checkbox"})
    if checkbox is None:
        return None
    return checkbox.get("data-option")


def parse_list_items(html: str, id_source: str, rule: IdRule) -> List[OptionRecord]:
    """Parse a selection list snapshot into records, dropping incomplete items."""
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    records: List[OptionRecord] = []
    for item in soup.find_all("li"):
        if _is_structural(item) or item.find("li") is not None:
            continue
        label = item.find("label")
        if label is None:
            continue

        text = normalize_label(label.get_text())
        option_id = rule(_raw_id_source(item, label, id_source))
        if not text or not option_id:
            continue
        records.append(OptionRecord(label=text, id=option_id))
    return records


class RecordExtractor:
    """Samples the open list of one facet through the page driver."""

    def __init__(self, driver, facet: FacetDescriptor, rule: Optional[IdRule] = None) -> None:
        self.driver = driver
        self.facet = facet
        self.rule = rule or get_rule(facet.id_rule)

    def sample(self) -> List[OptionRecord]:
        html = self.driver.evaluate(OUTER_HTML_SCRIPT, self.facet.list_container)
        return parse_list_items(html or "", self.facet.id_source, self.rule)
