"""Unit tests for facetharvest.harvest.harvester — the open / poll / close protocol."""

import pytest

from facetharvest.harvest.cancel import CancelToken
from facetharvest.harvest.errors import CloseTimeout, OpenTimeout
from facetharvest.harvest.harvester import REASON_CANCELLED, REASON_ROUND_CAP, ListHarvester
from facetharvest.harvest.models import HarvestStatus


@pytest.fixture
def make_harvester(fake_driver_cls, destination_facet, snapshots_for_counts):
    def _make(counts, max_rounds=50, **driver_kwargs):
        driver = fake_driver_cls(
            snapshots={destination_facet.list_container: snapshots_for_counts(counts)},
            **driver_kwargs,
        )
        return driver, ListHarvester(driver, settle_ms=0, max_rounds=max_rounds)
    return _make


# ============================================================================
# Convergence
# ============================================================================
class TestConvergence:
    def test_counts_5_9_9_9(self, make_harvester, destination_facet):
        # A fifth snapshot that would grow the list must never be read
        driver, harvester = make_harvester([5, 9, 9, 9, 12])
        result = harvester.harvest(destination_facet)

        assert result.status is HarvestStatus.COMPLETE
        assert result.reason is None
        assert result.rounds == 4
        assert len(result.records) == 9
        assert driver.scrolls[destination_facet.list_container] == 4

    def test_single_equal_round_not_trusted(self, make_harvester, destination_facet):
        # A stall of one round in the middle of loading must not end the harvest
        driver, harvester = make_harvester([4, 4, 8, 8, 8])
        result = harvester.harvest(destination_facet)
        assert len(result.records) == 8
        assert result.rounds == 5

    def test_first_seen_order(self, fake_driver_cls, destination_facet, list_html):
        snapshots = [
            list_html([("Zanzibar", "30"), ("Alaska", "1")]),
            list_html([("Alaska", "1"), ("Bermuda", "7")]),
        ]
        driver = fake_driver_cls(snapshots={destination_facet.list_container: snapshots})
        result = ListHarvester(driver, settle_ms=0).harvest(destination_facet)
        assert [r.label for r in result.records] == ["Zanzibar", "Alaska", "Bermuda"]

    def test_virtualized_list_accumulates_across_rounds(self, fake_driver_cls, destination_facet, list_html, items):
        # Each snapshot only shows the current window of the list
        windows = [items(5, start=1), items(5, start=6), items(5, start=11)]
        driver = fake_driver_cls(
            snapshots={destination_facet.list_container: [list_html(w) for w in windows]}
        )
        result = ListHarvester(driver, settle_ms=0).harvest(destination_facet)
        assert [r.id for r in result.records] == [str(i) for i in range(1, 16)]

    def test_no_empty_label_or_id(self, fake_driver_cls, destination_facet):
        html = (
            '<ul><li><label for="x_">Blank id</label></li>'
            '<li><label for="x_3"> </label></li>'
            '<li><label for="x_4">Good</label></li></ul>'
        )
        driver = fake_driver_cls(snapshots={destination_facet.list_container: [html]})
        result = ListHarvester(driver, settle_ms=0).harvest(destination_facet)
        assert [(r.label, r.id) for r in result.records] == [("Good", "4")]


# ============================================================================
# Round cap
# ============================================================================
class TestRoundCap:
    def test_cap_returns_partial(self, make_harvester, destination_facet):
        driver, harvester = make_harvester(list(range(1, 61)), max_rounds=50)
        result = harvester.harvest(destination_facet)

        assert result.status is HarvestStatus.PARTIAL
        assert result.reason == REASON_ROUND_CAP
        assert result.rounds == 50
        assert len(result.records) == 50
        assert ("click", destination_facet.close_control) in driver.calls

    def test_invalid_cap(self, fake_driver_cls):
        with pytest.raises(ValueError):
            ListHarvester(fake_driver_cls(), max_rounds=0)


# ============================================================================
# Open / close protocol
# ============================================================================
class TestOpenClose:
    def test_call_sequence(self, make_harvester, destination_facet):
        driver, harvester = make_harvester([2, 2])
        harvester.harvest(destination_facet)

        assert driver.calls[:3] == [
            ("wait_for", destination_facet.trigger, "visible"),
            ("click", destination_facet.trigger),
            ("wait_for", destination_facet.list_container, "visible"),
        ]
        assert driver.calls[-2:] == [
            ("click", destination_facet.close_control),
            ("wait_for", destination_facet.list_container, "hidden"),
        ]

    def test_open_timeout(self, make_harvester, destination_facet):
        driver, harvester = make_harvester([3], never_opens={destination_facet.list_container})
        with pytest.raises(OpenTimeout) as excinfo:
            harvester.harvest(destination_facet)
        assert excinfo.value.facet == "destination"
        assert driver.count("scroll") == 0

    def test_missing_trigger_is_open_timeout(self, make_harvester, destination_facet):
        _, harvester = make_harvester([3], missing={destination_facet.trigger})
        with pytest.raises(OpenTimeout):
            harvester.harvest(destination_facet)

    def test_close_timeout_carries_result(self, make_harvester, destination_facet):
        _, harvester = make_harvester([3, 3], never_closes={destination_facet.list_container})
        with pytest.raises(CloseTimeout) as excinfo:
            harvester.harvest(destination_facet)
        assert excinfo.value.result is not None
        assert len(excinfo.value.result.records) == 3

    def test_driver_error_closes_and_propagates(self, fake_driver_cls, destination_facet):
        class BrokenDriver(fake_driver_cls):
            def evaluate(self, script, arg=None):
                raise RuntimeError("page crashed")

        driver = BrokenDriver()
        with pytest.raises(RuntimeError, match="page crashed"):
            ListHarvester(driver, settle_ms=0).harvest(destination_facet)
        assert ("click", destination_facet.close_control) in driver.calls


# ============================================================================
# Cancellation
# ============================================================================
class TestCancellation:
    def test_cancel_mid_poll_keeps_accumulated(self, fake_driver_cls, destination_facet, snapshots_for_counts):
        token = CancelToken()

        def cancel_on_third_scroll(locator, n):
            if n == 3:
                token.cancel()

        driver = fake_driver_cls(
            snapshots={destination_facet.list_container: snapshots_for_counts([2, 4, 6, 8])},
            on_scroll=cancel_on_third_scroll,
        )
        result = ListHarvester(driver, settle_ms=0).harvest(destination_facet, cancel=token)

        assert result.status is HarvestStatus.PARTIAL
        assert result.reason == REASON_CANCELLED
        assert len(result.records) == 4
        assert ("click", destination_facet.close_control) in driver.calls

    def test_expired_deadline_stops_before_first_round(self, make_harvester, destination_facet):
        driver, harvester = make_harvester([3, 3])
        result = harvester.harvest(destination_facet, cancel=CancelToken(timeout=0))
        assert result.status is HarvestStatus.PARTIAL
        assert result.records == ()
        assert driver.count("scroll") == 0

    def test_cancelled_close_timeout_not_raised(self, make_harvester, destination_facet):
        token = CancelToken()
        token.cancel()
        _, harvester = make_harvester([3], never_closes={destination_facet.list_container})
        result = harvester.harvest(destination_facet, cancel=token)
        assert result.reason == REASON_CANCELLED
