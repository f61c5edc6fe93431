"""Tests for the pagination controller."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Tuple, Union

import pytest

from animescraper import (
    ListingEntry,
    ListingResult,
    ListingStatus,
    NetworkError,
    PaginationController,
)

Outcome = Union[ListingResult, Exception]


def _result(prefix: str, total_pages: int = 1, count: int = 2) -> ListingResult:
    entries = [
        ListingEntry(title=f"{prefix}{i}", poster_url=f"https://img/{prefix}{i}.jpg", detail_url=f"/watch/{prefix}.{i}")
        for i in range(count)
    ]
    return ListingResult(entries=entries, no_results=not entries, total_pages=total_pages)


class DummyClient:
    def __init__(self, pages: Dict[Tuple[str, int], Outcome]) -> None:
        self.pages = pages
        self.calls: List[Tuple[str, int]] = []
        self.gates: Dict[Tuple[str, int], asyncio.Event] = {}

    async def fetch_listing(self, query: str = "", page: int = 1) -> ListingResult:
        self.calls.append((query, page))
        gate = self.gates.get((query, page))
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        outcome = self.pages[(query, page)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_set_query_applies_first_page():
    client = DummyClient({("naruto", 1): _result("n", total_pages=4)})
    controller = PaginationController(client)

    assert asyncio.run(controller.set_query("  naruto ")) is True

    state = controller.state
    assert (state.current_page, state.total_pages, state.active_query) == (1, 4, "naruto")
    assert [entry.title for entry in controller.entries] == ["n0", "n1"]
    assert controller.status is ListingStatus.OK
    assert client.calls == [("naruto", 1)]


def test_out_of_range_pages_are_no_ops():
    client = DummyClient({("", 1): _result("t", total_pages=3)})
    controller = PaginationController(client)

    async def scenario():
        await controller.set_query("")
        return await controller.go_to_page(4), await controller.go_to_page(0), await controller.previous_page()

    assert asyncio.run(scenario()) == (False, False, False)
    assert controller.state.current_page == 1
    assert client.calls == [("", 1)]


def test_navigation_replaces_entries_wholesale():
    client = DummyClient({("", 1): _result("a", total_pages=3), ("", 2): _result("b", total_pages=3, count=1)})
    controller = PaginationController(client)

    async def scenario():
        await controller.home()
        return await controller.next_page()

    assert asyncio.run(scenario()) is True
    assert controller.state.current_page == 2
    assert [entry.title for entry in controller.entries] == ["b0"]


def test_page_state_untouched_while_fetch_in_flight():
    client = DummyClient({("", 1): _result("a", total_pages=5), ("", 2): _result("b", total_pages=5)})
    controller = PaginationController(client)

    async def scenario():
        await controller.set_query("")
        client.gates[("", 2)] = asyncio.Event()
        task = asyncio.ensure_future(controller.go_to_page(2))
        await asyncio.sleep(0)
        during = (controller.state.current_page, controller.status, [e.title for e in controller.entries])
        client.gates[("", 2)].set()
        return during, await task

    during, applied = asyncio.run(scenario())

    assert during == (1, ListingStatus.LOADING, ["a0", "a1"])
    assert applied is True
    assert controller.state.current_page == 2


def test_set_query_resets_pages_before_result_arrives():
    client = DummyClient({("", 1): _result("a", total_pages=5), ("", 4): _result("d", total_pages=5), ("bleach", 1): _result("b", total_pages=2)})
    controller = PaginationController(client)

    async def scenario():
        await controller.set_query("")
        await controller.go_to_page(4)
        client.gates[("bleach", 1)] = asyncio.Event()
        task = asyncio.ensure_future(controller.set_query("bleach"))
        await asyncio.sleep(0)
        during = controller.state
        client.gates[("bleach", 1)].set()
        await task
        return during

    during = asyncio.run(scenario())

    assert (during.current_page, during.total_pages, during.active_query) == (1, 1, "bleach")
    assert controller.state.total_pages == 2


def test_result_for_superseded_query_is_discarded():
    client = DummyClient({("x", 1): _result("x"), ("y", 1): _result("y")})
    controller = PaginationController(client)

    async def scenario():
        client.gates[("x", 1)] = asyncio.Event()
        slow = asyncio.ensure_future(controller.set_query("x"))
        await asyncio.sleep(0)
        fast = await controller.set_query("y")
        client.gates[("x", 1)].set()
        return await slow, fast

    slow, fast = asyncio.run(scenario())

    assert slow is False
    assert fast is True
    assert controller.state.active_query == "y"
    assert [entry.title for entry in controller.entries] == ["y0", "y1"]


def test_failure_and_no_results_are_distinct():
    client = DummyClient(
        {
            ("", 1): _result("a", total_pages=2),
            ("", 2): NetworkError("timeout", "https://aniwave.se/trending-anime/?page=2"),
            ("zzz", 1): ListingResult(entries=[], no_results=True),
        }
    )
    controller = PaginationController(client)

    async def scenario():
        await controller.set_query("")
        failed = await controller.go_to_page(2)
        failed_status = controller.status
        failed_page = controller.state.current_page
        failed_entries = [e.title for e in controller.entries]
        empty = await controller.set_query("zzz")
        return failed, failed_status, failed_page, failed_entries, empty

    failed, failed_status, failed_page, failed_entries, empty = asyncio.run(scenario())

    assert failed is False
    assert failed_status is ListingStatus.FAILED
    assert failed_page == 1
    assert failed_entries == ["a0", "a1"]
    assert empty is True
    assert controller.status is ListingStatus.NO_RESULTS
    assert controller.entries == ()


def test_total_pages_never_below_current_page():
    client = DummyClient({("", 1): _result("a", total_pages=5), ("", 5): _result("e", total_pages=1)})
    controller = PaginationController(client)

    async def scenario():
        await controller.set_query("")
        await controller.go_to_page(5)

    asyncio.run(scenario())
    assert controller.state.current_page == 5
    assert controller.state.total_pages == 5


def test_refresh_and_change_notifications():
    seen = []
    client = DummyClient({("", 1): _result("a")})
    controller = PaginationController(client, on_change=seen.append)

    async def scenario():
        await controller.set_query("")
        await controller.refresh()

    asyncio.run(scenario())

    assert client.calls == [("", 1), ("", 1)]
    assert [snapshot.status for snapshot in seen] == [
        ListingStatus.LOADING,
        ListingStatus.OK,
        ListingStatus.LOADING,
        ListingStatus.OK,
    ]
    assert seen[-1].entries == controller.entries
    assert not seen[-1].has_next


def test_cancelled_caller_does_not_leave_controller_loading():
    client = DummyClient({("", 1): _result("a", total_pages=3), ("", 2): _result("b", total_pages=3)})
    controller = PaginationController(client)

    async def scenario():
        await controller.set_query("")
        client.gates[("", 2)] = asyncio.Event()
        task = asyncio.ensure_future(controller.go_to_page(2))
        await asyncio.sleep(0)
        loading = controller.status
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return loading

    loading = asyncio.run(scenario())

    assert loading is ListingStatus.LOADING
    assert controller.status is ListingStatus.OK
    assert controller.state.current_page == 1
    assert [entry.title for entry in controller.entries] == ["a0", "a1"]
