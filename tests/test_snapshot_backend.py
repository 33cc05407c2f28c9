"""
Tests for the snapshot backend against the bundled sample data.
"""
import asyncio

import pytest

from pricelist_resolver.backend.snapshot import SnapshotBackend
from pricelist_resolver.engine import ProductResolver


@pytest.fixture(scope="module")
def resolver(sample_snapshot_path):
    return ProductResolver(SnapshotBackend.from_file(sample_snapshot_path))


def resolve(resolver, code):
    return asyncio.run(resolver.resolve(code))


def ids(rules):
    return [r.id for r in rules]


def test_variant_with_category(resolver):
    """Classic Tee Red XL: inactive list and foreign category/variant rules are filtered out."""
    result = resolve(resolver, "7501000000010")

    assert result.product_name == "Classic Tee Red XL"
    assert result.list_price == 19.9
    assert result.category_id == 2
    assert result.active_pricelist_ids == [1, 2]
    assert ids(result.buckets.global_rules) == [1]
    assert ids(result.buckets.category) == [2]
    assert ids(result.buckets.product_template) == [5]
    assert ids(result.buckets.product_variant) == [4]
    assert result.candidate_rule_count == 4


def test_product_without_category(resolver):
    """The permissive filter fetches every category rule; classification drops them all."""
    result = resolve(resolver, "7501000000027")

    assert result.product_name == "Gift Card"
    assert result.category_id is None
    assert result.buckets.category == []
    assert ids(result.buckets.global_rules) == [1]
    assert ids(result.buckets.product_template) == [8]
    assert result.candidate_rule_count == 4, "Rules 2 and 3 are fetched as candidates"
    assert result.buckets.count() == 2


def test_ambiguous_barcode_uses_first_product(resolver):
    result = resolve(resolver, "7501000000099")

    assert result.variant_id == 12
    assert result.product_name == "Classic Tee Blue"
    assert result.buckets.product_variant == [], "Rule 7 belongs to variant 13"


def test_unknown_barcode(resolver):
    assert resolve(resolver, "0000000000000") is None


def test_inactive_pricelist_excluded():
    backend = SnapshotBackend({
        "pricelists": [
            {"id": 1, "x_studio_disponible": True},
            {"id": 2, "x_studio_disponible": False},
            {"id": 3},
        ],
    })
    pricelists = asyncio.run(backend.search_active_pricelists())
    assert [pl.id for pl in pricelists] == [1]


def test_custom_active_field():
    backend = SnapshotBackend({"pricelists": [{"id": 4, "available": True}]}, active_field="available")
    assert [pl.id for pl in asyncio.run(backend.search_active_pricelists())] == [4]


def test_missing_snapshot(tmp_path):
    with pytest.raises(FileNotFoundError):
        SnapshotBackend.from_file(tmp_path / "nope.json")


def test_describe(sample_snapshot_path):
    info = SnapshotBackend.from_file(sample_snapshot_path).describe()
    assert info["backend"] == "snapshot"
    assert info["rules"] == 8
