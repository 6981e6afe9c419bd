from __future__ import annotations

import pytest

from vpnlib.locations import Catalog
from vpnlib.navigation import ListState

COUNTRIES = ["Austria", "Belgium", "Denmark", "Finland", "Germany", "Italy", "Norway", "Spain", "Sweden", "Ukraine"]


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_entries([(name, name[:2].lower(), []) for name in COUNTRIES])


def make_state(catalog: Catalog, query: str = "", viewport: int = 0) -> ListState:
    state = ListState(viewport_height=viewport)
    state.recompute_visible(catalog, None, query)
    return state


def visible(state: ListState):
    return [e.name for e in state.visible_entries]


@pytest.mark.parametrize("delta", [1, 3, 9, 10, 250, -1, -250])
def test_move_cursor_saturates(catalog, delta):
    state = make_state(catalog)
    for _ in range(5):
        state.move_cursor(delta)
        assert 0 <= state.cursor <= len(COUNTRIES) - 1
    expected = max(0, min(len(COUNTRIES) - 1, 5 * delta))
    assert state.cursor == expected


def test_move_cursor_on_empty_list_is_noop(catalog):
    state = make_state(catalog, "zzz")
    state.move_cursor(3)
    assert state.cursor == 0


@pytest.mark.parametrize("length", [1, 2, 10])
def test_jump_top_and_bottom(length):
    catalog = Catalog.from_entries([(name, "", []) for name in COUNTRIES[:length]])
    state = make_state(catalog)
    state.jump_top()
    assert state.cursor == 0
    state.jump_bottom()
    assert state.cursor == length - 1


def test_jumps_on_empty_list_are_noops():
    state = make_state(Catalog())
    state.jump_bottom()
    assert state.cursor == 0
    state.jump_top()
    assert state.cursor == 0
    assert state.selected() is None


def test_scroll_follows_cursor(catalog):
    state = make_state(catalog, viewport=3)
    state.move_cursor(5)
    assert state.cursor == 5
    assert state.scroll_offset == 3

    state.move_cursor(-3)
    assert state.cursor == 2
    assert state.scroll_offset == 2

    state.jump_bottom()
    assert state.scroll_offset == 7
    assert [i for i, _ in state.window()] == [7, 8, 9]


def test_scroll_invariant_holds_for_any_walk(catalog):
    state = make_state(catalog, viewport=4)
    for delta in [1, 1, 1, 1, 1, 3, -2, 7, -9, 4, -1, 2]:
        state.move_cursor(delta)
        assert state.scroll_offset <= state.cursor < state.scroll_offset + 4


def test_no_scroll_when_list_fits(catalog):
    state = make_state(catalog, viewport=20)
    state.jump_bottom()
    assert state.scroll_offset == 0
    state.ensure_cursor_visible(len(COUNTRIES))
    assert state.scroll_offset == 0


def test_ensure_cursor_visible_with_explicit_height(catalog):
    state = make_state(catalog)
    state.jump_bottom()
    state.ensure_cursor_visible(2)
    assert state.scroll_offset == 8


def test_filter_is_case_insensitive_substring(catalog):
    state = make_state(catalog, "AN")
    assert visible(state) == [name for name in COUNTRIES if "an" in name.lower()]


def test_filter_is_idempotent(catalog):
    once = make_state(catalog, "e")
    twice = make_state(catalog, "e")
    twice.recompute_visible(catalog, None, "e")
    assert visible(once) == visible(twice)


def test_empty_query_restores_full_list(catalog):
    state = make_state(catalog)
    before = visible(state)
    state.recompute_visible(catalog, None, "sw")
    assert visible(state) == ["Sweden"]
    state.recompute_visible(catalog, None, "")
    assert visible(state) == before


def test_cursor_follows_entry_that_stays_visible(catalog):
    state = make_state(catalog)
    state.move_cursor(COUNTRIES.index("Sweden"))
    state.recompute_visible(catalog, None, "e")
    assert state.selected().name == "Sweden"


def test_cursor_resets_when_entry_filtered_out(catalog):
    state = make_state(catalog, viewport=3)
    state.jump_bottom()
    state.recompute_visible(catalog, None, "sw")
    assert state.cursor == 0
    assert state.scroll_offset == 0
    assert visible(state) == ["Sweden"]


def test_no_match_leaves_list_empty(catalog):
    state = make_state(catalog, "xyz")
    assert visible(state) == []
    assert state.cursor == 0
    assert state.selected() is None


def test_cities_context():
    catalog = Catalog.from_entries([("Sweden", "se", [("Stockholm", "sto"), ("Gothenburg", "got"), ("Malmo", "mma")])])
    state = ListState()
    state.recompute_visible(catalog, 0, "o")
    assert visible(state) == ["Stockholm", "Gothenburg", "Malmo"]
    state.recompute_visible(catalog, 0, "got")
    assert visible(state) == ["Gothenburg"]
