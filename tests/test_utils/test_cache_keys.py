"""Tests for cache key building."""

from utils.cache_keys import CacheKeys


def test_query_key_shape():
    key = CacheKeys.query("product", "all", 2, 20, {"in_stock": True, "category_id": 3})

    assert key == "product:all:2:20:category_id=3|in_stock=true"


def test_filter_order_does_not_change_key():
    first = CacheKeys.query("product", "all", 1, 10, {"a": 1, "b": None, "c": [3, 1]})
    second = CacheKeys.query("product", "all", 1, 10, {"c": [1, 3], "b": None, "a": 1})

    assert first == second


def test_unset_filter_differs_from_false():
    unset = CacheKeys.query("product", "all", 1, 10, {"in_stock": None})
    false = CacheKeys.query("product", "all", 1, 10, {"in_stock": False})

    assert unset != false
    assert unset.endswith("in_stock=all")


def test_separators_in_values_are_escaped():
    tricky = CacheKeys.query("product", "all", 1, 10, {"search": "a|b=c:d"})
    plain = CacheKeys.query("product", "all", 1, 10, {"search": "a", "b": "c"})

    assert tricky != plain
    assert "|" not in tricky.split(":", 4)[-1].split("=", 1)[1]


def test_whole_floats_match_ints():
    assert CacheKeys.canonical_value(10.0) == CacheKeys.canonical_value(10)
    assert CacheKeys.canonical_value(10.5) == "10.5"


def test_no_filters():
    assert CacheKeys.query("gender", "all", 1, 10) == "gender:all:1:10:none"


def test_entity_keys():
    assert CacheKeys.by_id("product", 7) == "product:id:7"
    assert CacheKeys.by_slug("category", "shirts", 1) == "category:slug:shirts:1"
    assert CacheKeys.by_slug("gender", "men") == "gender:slug:men:all"
    assert CacheKeys.scoped("product", "featured", 10) == "product:featured:10"
    assert CacheKeys.generation("offer") == "offer:__generation__"
    assert CacheKeys.invalidate_pattern("product") == "product:"


def test_guest_keys_are_outside_catalog_namespaces():
    key = CacheKeys.guest_cart("guest_abc")

    assert key == "guest:cart:guest_abc"
    for entity in ("gender", "category", "subcategory", "product", "offer"):
        assert not key.startswith(CacheKeys.invalidate_pattern(entity))


def test_literal_all_differs_from_unset_filter():
    unset = CacheKeys.query("product", "all", 1, 10, {"search": None})
    literal = CacheKeys.query("product", "all", 1, 10, {"search": "all"})

    assert unset != literal


def test_escaped_text_differs_from_separator():
    colon = CacheKeys.canonical_value(":")
    escaped_text = CacheKeys.canonical_value("%3A")

    assert colon != escaped_text
    assert ":" not in colon


def test_strings_never_read_as_other_types():
    assert CacheKeys.canonical_value("true") != CacheKeys.canonical_value(True)
    assert CacheKeys.canonical_value("3") != CacheKeys.canonical_value(3)
    assert CacheKeys.canonical_value(["a,b"]) != CacheKeys.canonical_value(["a", "b"])
    assert CacheKeys.canonical_value([3]) != CacheKeys.canonical_value(3)
