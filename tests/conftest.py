"""Shared fixtures for the facetharvest test suite."""

import sys
from pathlib import Path

import pytest

# Ensure src/ is on the path so "import facetharvest" works when running from repo root.
repo_root = Path(__file__).resolve().parents[1]
src_path = repo_root / "src"
for p in (src_path, repo_root):
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from facetharvest.browser.scripts import (  # noqa: E402
    CLICK_SCRIPT,
    OUTER_HTML_SCRIPT,
    SCROLL_TO_END_SCRIPT,
    SET_VALUE_SCRIPT,
)
from facetharvest.harvest.errors import NavigationError, WaitTimeout  # noqa: E402
from facetharvest.harvest.models import FacetDescriptor  # noqa: E402


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------

def make_list_html(items, prefix="search_destination_ids_", select_all=True, heading=None):
    """Selection list markup: items are (label, suffix) pairs."""
    parts = ['<ul class="selection-list-results-list">']
    if select_all:
        parts.append('<li class="select-all"><label for="select_all_0">Select All</label></li>')
    if heading:
        parts.append(f'<li class="heading-group"><label for="heading_1">{heading}</label></li>')
    for label, suffix in items:
        parts.append(
            f'<li><input type="checkbox" id="{prefix}{suffix}">'
            f'<label for="{prefix}{suffix}">{label}</label></li>'
        )
    parts.append("</ul>")
    return "".join(parts)


def numbered_items(n, start=1):
    return [(f"Option {i}", str(i)) for i in range(start, start + n)]


# ---------------------------------------------------------------------------
# Scripted page driver
# ---------------------------------------------------------------------------

class FakeDriver:
    """PageDriver stand-in replaying DOM snapshots per list container.

    ``snapshots`` maps a list locator to the HTML returned after the 1st,
    2nd, ... scroll; the last snapshot repeats once the script runs out.
    """

    def __init__(
        self,
        snapshots=None,
        never_opens=(),
        never_closes=(),
        nav_fails=False,
        missing=(),
        values=None,
        page_html="",
        on_scroll=None,
    ):
        self.snapshots = {k: list(v) for k, v in (snapshots or {}).items()}
        self.never_opens = set(never_opens)
        self.never_closes = set(never_closes)
        self.nav_fails = nav_fails
        self.missing = set(missing)
        self.values = dict(values or {})
        self.page_html = page_html
        self.on_scroll = on_scroll
        self.scrolls = {}
        self.calls = []
        self.filled = []
        self.load_states = []

    def navigate(self, url, wait_until="domcontentloaded", timeout_ms=None):
        self.calls.append(("navigate", url))
        if self.nav_fails:
            raise NavigationError(f"Could not load {url}")

    def wait_for(self, locator, state="visible", timeout_ms=None):
        self.calls.append(("wait_for", locator, state))
        if locator in self.missing:
            raise WaitTimeout(locator, state, timeout_ms)
        if state == "visible" and locator in self.never_opens:
            raise WaitTimeout(locator, state, timeout_ms)
        if state == "hidden" and locator in self.never_closes:
            raise WaitTimeout(locator, state, timeout_ms)

    def click(self, locator, timeout_ms=None):
        self.calls.append(("click", locator))

    def evaluate(self, script, arg=None):
        if script == SCROLL_TO_END_SCRIPT:
            self.scrolls[arg] = self.scrolls.get(arg, 0) + 1
            self.calls.append(("scroll", arg))
            if self.on_scroll is not None:
                self.on_scroll(arg, self.scrolls[arg])
            return 1000
        if script == OUTER_HTML_SCRIPT:
            script_for = self.snapshots.get(arg) or [""]
            idx = min(self.scrolls.get(arg, 1), len(script_for)) - 1
            return script_for[max(idx, 0)]
        if script == SET_VALUE_SCRIPT:
            self.values[arg["selector"]] = arg["value"]
            return True
        if script == CLICK_SCRIPT:
            self.calls.append(("js_click", arg))
            return True
        return self.page_html

    def fill(self, locator, value):
        self.filled.append((locator, value))
        self.values[locator] = value

    def read_value(self, locator):
        return self.values.get(locator)

    def wait_for_load_state(self, state="networkidle", timeout_ms=None):
        self.load_states.append(state)

    def count(self, kind):
        return sum(1 for c in self.calls if c[0] == kind)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_driver_cls():
    return FakeDriver


@pytest.fixture
def list_html():
    return make_list_html


@pytest.fixture
def items():
    return numbered_items


@pytest.fixture
def destination_facet():
    root = 'div[data-serving="search[destination_ids]"]'
    return FacetDescriptor(
        name="destination",
        trigger="#destination_ids",
        list_container=f"{root} .selection-list-results-list",
        close_control=f"{root} .selection-list-close",
        id_rule="numeric",
    )


@pytest.fixture
def snapshots_for_counts(items, list_html):
    """Build one snapshot per round holding the first N options."""
    def _build(counts):
        return [list_html(items(n)) for n in counts]
    return _build
