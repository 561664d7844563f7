import asyncio

import pytest

from n_observable import CollectionEvent, ObservableSet


def test_add_and_delete_events() -> None:
    items: ObservableSet[str] = ObservableSet()
    events: list[CollectionEvent[str, bool]] = []
    items.on_change(events.append)

    items.add("a").add("a").add("b")
    assert items.delete("a") is True
    assert items.delete("a") is False

    assert events == [
        CollectionEvent("add", "a", True),
        CollectionEvent("add", "b", True),
        CollectionEvent("delete", "a", old_value=True),
    ]
    assert items.to_list() == ["b"]


def test_clear() -> None:
    items = ObservableSet([1, 2])
    events: list[CollectionEvent[int, bool]] = []
    items.on_change(events.append)

    items.clear()
    items.clear()

    assert events == [CollectionEvent.clear()]
    assert items.size == 0


def test_insertion_order_and_membership() -> None:
    items = ObservableSet(["c", "a", "b", "a"])

    assert list(items) == ["c", "a", "b"]
    assert list(items.values()) == ["c", "a", "b"]
    assert items.has("a") and "b" in items
    assert not items.has("z")
    assert len(items) == 3
    assert items.to_json() == ["c", "a", "b"]


def test_set_algebra_accepts_plain_sets() -> None:
    items = ObservableSet([1, 2, 3])
    events: list[CollectionEvent[int, bool]] = []
    items.on_change(events.append)

    for other in ({2, 3, 4}, ObservableSet([2, 3, 4]), frozenset({2, 3, 4})):
        assert items.union(other).to_list() == [1, 2, 3, 4]
        assert items.intersection(other).to_list() == [2, 3]
        assert items.difference(other).to_list() == [1]
        assert items.symmetric_difference(other).to_list() == [1, 4]

    assert events == []
    assert items.to_list() == [1, 2, 3]


def test_set_predicates() -> None:
    items = ObservableSet([1, 2])

    assert items.is_subset_of({1, 2, 3})
    assert items.is_subset_of(ObservableSet([2, 1]))
    assert not items.is_subset_of({1})
    assert items.is_superset_of({1})
    assert items.is_superset_of(set())
    assert not items.is_superset_of(ObservableSet([3]))
    assert items.is_disjoint_from({3, 4})
    assert not items.is_disjoint_from(ObservableSet([2]))


def test_map_and_filter() -> None:
    items = ObservableSet([1, 2, 3, 4])

    assert items.map(lambda x: x % 2).to_list() == [1, 0]
    assert items.filter(lambda x: x > 2).to_list() == [3, 4]


@pytest.mark.asyncio
async def test_async_mutations_wait_for_handlers() -> None:
    items: ObservableSet[str] = ObservableSet()
    seen: list[tuple[str, object]] = []

    async def slow(event: CollectionEvent[str, bool]) -> None:
        await asyncio.sleep(0.01)
        seen.append((event.type, event.key))

    items.on_change(slow)

    assert await items.add_async("a") is items
    await items.add_async("a")
    assert await items.delete_async("a") is True
    assert await items.delete_async("a") is False
    await items.add_async("b")
    await items.clear_async()

    assert seen == [("add", "a"), ("delete", "a"), ("add", "b"), ("clear", None)]
    assert items.observer_count() == 1
