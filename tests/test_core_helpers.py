import pytest

from core_helpers import apply_filters, compute_options, matches_search, parse_int, resolve_filter


ROWS = [
    {"geo": "uk", "device": "mobile"},
    {"geo": " us ", "device": "desktop"},
    {"geo": "uk", "device": None},
    {"geo": "", "device": "tablet"},
    {"device": "mobile"},
]


def test_compute_options_sorted_distinct_non_blank() -> None:
    assert compute_options(ROWS, "geo") == ["uk", "us"]
    assert compute_options(ROWS, "device") == ["desktop", "mobile", "tablet"]


def test_compute_options_empty_input() -> None:
    assert compute_options([], "geo") == []
    assert compute_options(None, "geo") == []


def test_compute_options_with_selector() -> None:
    assert compute_options(ROWS, lambda r: r["geo"].upper()) == ["UK", "US"]


def test_compute_options_uses_ordinal_order() -> None:
    rows = [{"geo": "b"}, {"geo": "B"}, {"geo": "a"}]
    assert compute_options(rows, "geo") == ["B", "a", "b"]


@pytest.mark.parametrize(
    "options,current,preferred,expected",
    [
        ([], "uk", "uk", "uk"),
        ([], "", "uk", ""),
        (["de", "uk"], "de", "uk", "de"),
        (["de", "uk"], "fr", "uk", "uk"),
        (["de", "fr"], "us", "uk", "de"),
        (["de", "fr"], "", None, "de"),
    ],
)
def test_resolve_filter(options, current, preferred, expected) -> None:
    assert resolve_filter(options, current, preferred) == expected


@pytest.mark.parametrize("current", ["", "fr", "uk", "zz"])
def test_resolve_filter_is_idempotent(current) -> None:
    opts = ["de", "fr", "uk"]
    once = resolve_filter(opts, current, "uk")
    assert resolve_filter(opts, once, "uk") == once


def test_apply_filters_ignores_all_and_blank() -> None:
    assert apply_filters(ROWS, {"geo": "All", "device": ""}) == ROWS
    assert apply_filters(ROWS, {"geo": "us"}) == [ROWS[1]]
    assert apply_filters(ROWS, {"geo": "uk", "device": "mobile"}) == [ROWS[0]]


def test_matches_search_is_case_insensitive() -> None:
    assert matches_search("AppNexus", " nex ")
    assert matches_search("appnexus", "")
    assert not matches_search("rubicon", "nex")


def test_parse_int() -> None:
    assert parse_int("12") == 12
    assert parse_int(" 7 ") == 7
    assert parse_int("abc") is None
    assert parse_int(None) is None
