"""태그 정규화 및 저장 형식 테스트"""

from snapshare.utils.tags import (
    decode_tags, encode_tags, encoded_fragment, normalize_tags, tags_contain_any
)


def test_normalize_splits_strips_and_dedupes():
    assert normalize_tags(" beach, sunset ,,beach") == ["beach", "sunset"]


def test_normalize_accepts_list_with_comma_items():
    assert normalize_tags(["a,b", " c ", ""]) == ["a", "b", "c"]


def test_normalize_none():
    assert normalize_tags(None) == []


def test_encode_keeps_unicode():
    assert encode_tags(["바다"]) == '["바다"]'


def test_decode_json_and_plain_text():
    assert decode_tags('["x", "y"]') == ["x", "y"]
    assert decode_tags("x, y") == ["x", "y"]
    assert decode_tags(None) == []
    assert decode_tags("") == []


def test_encoded_fragment_matches_stored_form():
    stored = encode_tags(['say "hi"', "c:\\tmp"])
    assert encoded_fragment('"hi"') in stored
    assert encoded_fragment("c:\\tmp") in stored


def test_tags_contain_any_compares_tag_values_only():
    stored = encode_tags(["Beach", "city"])
    assert tags_contain_any(stored, ["beach"])
    assert tags_contain_any(stored, ["IT"])
    assert not tags_contain_any(stored, ['"'])
    assert not tags_contain_any(stored, ["["])
    assert not tags_contain_any("[]", ["beach"])
