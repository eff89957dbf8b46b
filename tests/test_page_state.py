import pytest

from page_state import FilterSpec, PageState


def _bidder_state() -> PageState:
    return PageState(
        specs=[
            FilterSpec("geo", "Geo", preferred_default="uk", coerce=True),
            FilterSpec("device", "Device", preferred_default="mobile", coerce=True),
        ]
    )


def _list_state() -> PageState:
    return PageState(specs=[FilterSpec("geo", "Geo"), FilterSpec("device", "Device")])


ROWS = [
    {"slot": "top", "geo": "de", "device": "desktop", "page_type": "index"},
    {"slot": "top", "geo": "uk", "device": "desktop", "page_type": "index"},
    {"slot": "mpu", "geo": "uk", "device": "tablet", "page_type": "article"},
]


def test_initial_filters() -> None:
    assert _bidder_state().filters == {"geo": "uk", "device": "mobile"}
    assert _list_state().filters == {"geo": "All", "device": "All"}


def test_load_coerces_to_preferred_or_first_option() -> None:
    state = _bidder_state()
    state.load(ROWS)
    assert state.loaded
    assert state.options == {"geo": ["de", "uk"], "device": ["desktop", "tablet"]}
    # uk exists so it is kept; mobile does not so the first device wins.
    assert state.filters == {"geo": "uk", "device": "desktop"}
    assert state.filtered_rows() == [ROWS[1]]


def test_reload_recoerces_stale_choice() -> None:
    state = _bidder_state()
    state.load(ROWS)
    state.set_filter("geo", "de")
    state.load([r for r in ROWS if r["geo"] == "uk"])
    assert state.filters["geo"] == "uk"


def test_choice_survives_reload_when_still_valid() -> None:
    state = _bidder_state()
    state.load(ROWS)
    state.set_filter("geo", "de")
    state.load(ROWS)
    assert state.filters["geo"] == "de"


def test_options_come_from_unfiltered_rows() -> None:
    state = _bidder_state()
    state.load(ROWS)
    state.set_filter("geo", "de")
    assert state.options["device"] == ["desktop", "tablet"]


def test_empty_fetch_leaves_filters_alone() -> None:
    state = _bidder_state()
    state.load([])
    assert state.filters == {"geo": "uk", "device": "mobile"}
    assert state.filtered_rows() == []


def test_list_state_all_means_unconstrained() -> None:
    state = _list_state()
    state.load(ROWS)
    assert state.choices("geo") == ["All", "de", "uk"]
    assert state.filtered_rows() == ROWS
    state.set_filter("device", "tablet")
    assert state.filtered_rows() == [ROWS[2]]


def test_search_field() -> None:
    state = PageState(specs=[], search_field="bidder")
    state.load([{"bidder": "AppNexus"}, {"bidder": "rubicon"}])
    state.search = "NEX"
    assert state.filtered_rows() == [{"bidder": "AppNexus"}]


def test_error_is_kept_verbatim() -> None:
    state = _list_state()
    state.load([], "permission denied for table bidder_configs")
    assert state.error == "permission denied for table bidder_configs"


def test_reset_forces_refetch() -> None:
    state = _bidder_state()
    state.load(ROWS)
    state.reset()
    assert not state.loaded
    assert state.rows == []
    # Filter choices survive a reload.
    assert state.filters["geo"] == "uk"


def test_unknown_filter_raises() -> None:
    with pytest.raises(KeyError):
        _list_state().set_filter("page_type", "index")
