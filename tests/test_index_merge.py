from __future__ import annotations

import pytest

from ota_index.domain.index_merge import (
    OverridePosition,
    get_entry_key,
    merge_index_sources,
    to_index_entry,
)


def _pairs(merged: list[dict]) -> list[tuple]:
    return [(e.get("manufacturerCode"), e.get("imageType")) for e in merged]


def test_to_index_entry_rejects_non_objects() -> None:
    assert to_index_entry(None) is None
    assert to_index_entry("nope") is None
    assert to_index_entry([1, 2]) is None


def test_to_index_entry_accepts_objects_without_identity() -> None:
    entry = to_index_entry({"url": "./file.ota", "foo": "bar"})
    assert entry == {"url": "./file.ota", "foo": "bar"}


def test_entry_key_from_manufacturer_code_and_image_type() -> None:
    assert get_entry_key({"manufacturerCode": 1, "imageType": 2}) == "mc:1::it:2"


def test_entry_key_accepts_historical_spellings() -> None:
    assert get_entry_key({"manufactureCode": 4417, "image_type": 54179}) == "mc:4417::it:54179"


def test_entry_key_numbers_and_strings_are_equivalent() -> None:
    assert get_entry_key({"manufacturerCode": "1", "imageType": 2.0}) == get_entry_key(
        {"manufacturerCode": 1, "imageType": "2"}
    )


def test_entry_key_missing_fields() -> None:
    assert get_entry_key({"manufacturerName": "_TZE200_test", "modelId": "TS0601"}) is None
    assert get_entry_key({"manufacturerCode": 1}) is None
    assert get_entry_key({"imageType": 1}) is None


def test_entry_key_ignores_unusable_values() -> None:
    assert get_entry_key({"manufacturerCode": True, "imageType": 1}) is None
    assert get_entry_key({"manufacturerCode": "", "imageType": 1}) is None
    assert get_entry_key({"manufacturerCode": [1], "imageType": 1}) is None


def test_entry_key_primary_spelling_wins_even_if_unusable() -> None:
    assert get_entry_key({"manufacturerCode": [1], "manufactureCode": 1, "imageType": 1}) is None


def test_later_source_overrides_earlier() -> None:
    sources = [
        [
            {"manufacturerCode": 1, "imageType": 100, "value": "a"},
            {"manufacturerCode": 2, "imageType": 200, "value": "b"},
        ],
        [
            {"manufacturerCode": 1, "imageType": 100, "value": "c"},
            {"manufacturerCode": 3, "imageType": 300, "value": "d"},
        ],
    ]

    merged = merge_index_sources(sources)
    by_key = {(e["manufacturerCode"], e["imageType"]): e for e in merged}

    assert len(merged) == 3
    assert by_key[(1, 100)]["value"] == "c"
    assert by_key[(2, 200)]["value"] == "b"
    assert by_key[(3, 300)]["value"] == "d"
    # Overridden key keeps its first-seen slot.
    assert _pairs(merged) == [(1, 100), (2, 200), (3, 300)]


def test_move_to_end_places_override_at_its_insertion_point() -> None:
    sources = [
        [
            {"manufacturerCode": 1, "imageType": 100, "value": "a"},
            {"manufacturerCode": 2, "imageType": 200, "value": "b"},
        ],
        [
            {"manufacturerCode": 1, "imageType": 100, "value": "c"},
            {"manufacturerCode": 3, "imageType": 300, "value": "d"},
        ],
    ]

    merged = merge_index_sources(sources, OverridePosition.MOVE_TO_END)

    assert _pairs(merged) == [(2, 200), (1, 100), (3, 300)]
    assert merged[1]["value"] == "c"


def test_override_matches_across_spellings_and_types() -> None:
    merged = merge_index_sources(
        [
            [{"manufacturerCode": 1, "imageType": 100, "value": "old"}],
            [{"manufactureCode": "1", "image_type": "100", "value": "new"}],
        ]
    )
    assert merged == [{"manufactureCode": "1", "image_type": "100", "value": "new"}]


def test_keyless_entries_are_never_deduplicated() -> None:
    entry = {"manufacturerName": "_TZE200_test", "modelId": "TS0601"}
    sources = [
        [dict(entry), dict(entry)],
        [dict(entry), {**entry, "foo": "bar"}],
    ]
    merged = merge_index_sources(sources)
    assert len(merged) == 4


def test_keyless_entries_keep_arrival_position() -> None:
    sources = [
        [{"name": "p1"}, {"manufacturerCode": 1, "imageType": 1, "v": 1}],
        [{"name": "p2"}, {"manufacturerCode": 2, "imageType": 2}],
    ]
    merged = merge_index_sources(sources)
    assert [e.get("name") or e["manufacturerCode"] for e in merged] == ["p1", 1, "p2", 2]


def test_non_object_elements_are_dropped() -> None:
    good = {"manufacturerCode": 1, "imageType": 1}
    merged = merge_index_sources([[None, 1, "x", [good], good, True]])
    assert merged == [good]


def test_malformed_elements_do_not_affect_valid_ones() -> None:
    clean = [
        [{"manufacturerCode": 1, "imageType": 1, "v": "a"}],
        [{"manufacturerCode": 1, "imageType": 1, "v": "b"}, {"name": "x"}],
    ]
    dirty = [
        ["garbage", {"manufacturerCode": 1, "imageType": 1, "v": "a"}, 42],
        [None, {"manufacturerCode": 1, "imageType": 1, "v": "b"}, [], {"name": "x"}],
    ]
    assert merge_index_sources(dirty) == merge_index_sources(clean)


@pytest.mark.parametrize("policy", list(OverridePosition))
def test_unresolved_source_is_same_as_absent(policy: OverridePosition) -> None:
    a = [{"manufacturerCode": 1, "imageType": 1, "v": "a"}, {"name": "keyless"}]
    b = [{"manufacturerCode": 1, "imageType": 1, "v": "b"}]

    assert merge_index_sources([a, None, b], policy) == merge_index_sources([a, b], policy)
    assert merge_index_sources([None]) == []
    assert merge_index_sources([]) == []


def test_entries_are_returned_unmodified() -> None:
    entry = {"manufacturerCode": 1, "imageType": 1, "url": "https://x/fw.ota", "extra": {"nested": [1]}}
    merged = merge_index_sources([[entry]])
    assert merged[0] is entry
    assert merged[0] == {"manufacturerCode": 1, "imageType": 1, "url": "https://x/fw.ota", "extra": {"nested": [1]}}


def test_later_duplicate_within_same_source_wins() -> None:
    merged = merge_index_sources(
        [[{"manufacturerCode": 5, "imageType": 5, "v": 1}, {"manufacturerCode": 5, "imageType": 5, "v": 2}]]
    )
    assert merged == [{"manufacturerCode": 5, "imageType": 5, "v": 2}]
