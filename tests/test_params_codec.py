from params_codec import (
    ABSENT,
    EMPTY,
    MAPPING,
    decode,
    decode_state,
    encode,
    format_params_json,
)


def test_blank_text_signals_deletion() -> None:
    assert decode("") is None
    assert decode("   \n  ") is None
    assert decode(None) is None


def test_integer_values_are_coerced() -> None:
    assert decode("floor: 150") == {"floor": 150}
    assert decode("floor: -3") == {"floor": -3}
    assert decode("floor: 15a") == {"floor": "15a"}
    assert decode("floor: 1.5") == {"floor": "1.5"}
    assert decode("floor: ١٢٣") == {"floor": "١٢٣"}


def test_splits_on_first_colon_only() -> None:
    assert decode("endpoint: https://example.com:8443/bid") == {"endpoint": "https://example.com:8443/bid"}


def test_skips_lines_without_separator_or_key() -> None:
    text = "placementId: 42\njust words\n: orphan value\n\n  siteId :  abc  "
    assert decode(text) == {"placementId": 42, "siteId": "abc"}


def test_mixed_line_endings() -> None:
    assert decode("a: 1\r\nb: 2\rc: x") == {"a": 1, "b": 2, "c": "x"}


def test_mediatypes_is_dropped_on_decode() -> None:
    assert decode("mediatypes: banner,video\nfloor: 100") == {"floor": 100}
    assert decode("MediaTypes: banner") == {}


def test_non_blank_text_without_pairs_is_empty_mapping() -> None:
    assert decode("nothing to see") == {}


def test_later_duplicate_key_wins() -> None:
    assert decode("a: 1\na: 2") == {"a": 2}


def test_encode() -> None:
    assert encode(None) == ""
    assert encode({}) == ""
    assert encode("not a mapping") == ""
    assert encode({"bid_id": "abc", "floor": 150}) == "bid_id: abc\nfloor: 150"


def test_encode_keeps_mediatypes() -> None:
    assert encode({"mediatypes": "banner", "floor": 1}) == "mediatypes: banner\nfloor: 1"


def test_round_trip() -> None:
    m = {"bid_id": "abc", "floor": 150}
    assert decode(encode(m)) == m


def test_integer_looking_strings_are_not_preserved() -> None:
    assert decode(encode({"zone": "007"})) == {"zone": 7}


def test_decode_state_kinds() -> None:
    absent = decode_state("  ")
    assert absent.kind == ABSENT
    assert absent.to_store() is None

    empty = decode_state("no separator here")
    assert empty.kind == EMPTY
    assert empty.to_store() == {}

    populated = decode_state("floor: 10")
    assert populated.kind == MAPPING
    assert populated.to_store() == {"floor": 10}



def test_null_values_encode_as_null() -> None:
    assert encode({"a": None, "b": True}) == "a: null\nb: true"
    assert decode(encode({"a": None})) == {"a": "null"}


def test_format_params_json() -> None:
    assert format_params_json(None) == ""
    assert format_params_json({"a": 1}) == '{\n  "a": 1\n}'
    assert format_params_json({}) == "{}"
