"""
Shared fixtures: a recording stub backend and rule record builders.
"""
import os
import sys
from pathlib import Path

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from pricelist_resolver.backend.base import PricingBackend
from pricelist_resolver.engine.models import PriceList
from pricelist_resolver.errors import BackendError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SAMPLE_SNAPSHOT = PROJECT_ROOT / 'data' / 'sample_snapshot.json'


def rule_record(rule_id, applied_on, pricelist_id=1, categ_id=None, tmpl_id=None, product_id=None, **extra):
    """Build a product.pricelist.item record the way search_read returns it."""
    record = {
        'id': rule_id,
        'pricelist_id': [pricelist_id, f"Pricelist {pricelist_id}"],
        'applied_on': applied_on,
        'categ_id': [categ_id, f"Category {categ_id}"] if categ_id is not None else False,
        'product_tmpl_id': [tmpl_id, f"Template {tmpl_id}"] if tmpl_id is not None else False,
        'product_id': [product_id, f"Variant {product_id}"] if product_id is not None else False,
        'min_quantity': 0,
        'fixed_price': 0.0,
        'percent_price': 0.0,
        'compute_price': 'fixed',
    }
    record.update(extra)
    return record


def product_record(variant_id=10, template_id=5, name="Classic Tee", lst_price=19.9, barcode="123", value_ids=None):
    return {
        'id': variant_id,
        'name': name,
        'barcode': barcode,
        'lst_price': lst_price,
        'product_tmpl_id': [template_id, name],
        'product_template_variant_value_ids': value_ids or [],
    }


class StubBackend(PricingBackend):
    """
    In-memory backend that records every call.

    search_rules returns the configured rules unfiltered, which lets tests
    feed the classifier over-broad candidate sets.
    """

    name = "stub"

    def __init__(self, products=None, category_id=None, variant_names=None, pricelist_ids=(1, 2), rules=None, fail_on=None):
        self.products = list(products or [])
        self.category_id = category_id
        self.variant_names = dict(variant_names or {})
        self.pricelist_ids = list(pricelist_ids)
        self.rules = list(rules or [])
        self.fail_on = fail_on
        self.calls = []
        self.domains = []

    def _record(self, operation):
        self.calls.append(operation)
        # fail_on is one operation name or a collection of them
        failing = {self.fail_on} if isinstance(self.fail_on, str) else set(self.fail_on or ())
        if operation in failing:
            raise BackendError("connection refused by 10.0.0.5:8069", operation)

    def called(self, operation) -> bool:
        return operation in self.calls

    async def find_products_by_code(self, code):
        self._record('find_products_by_code')
        return [dict(p) for p in self.products if p.get('barcode') in (None, code)]

    async def find_category_for_template(self, template_id):
        self._record('find_category_for_template')
        return self.category_id

    async def find_variant_value_names(self, value_ids):
        self._record('find_variant_value_names')
        return [self.variant_names[v] for v in value_ids if v in self.variant_names]

    async def search_active_pricelists(self):
        self._record('search_active_pricelists')
        return [PriceList(id=pl_id, name=f"Pricelist {pl_id}") for pl_id in self.pricelist_ids]

    async def search_rules(self, domain):
        self._record('search_rules')
        self.domains.append(domain)
        return [dict(r) for r in self.rules]


@pytest.fixture
def scenario_a_rules():
    """Candidates for variant 10 / template 5 / category 2 with active lists {1, 2}."""
    return [
        rule_record(1, '3_global', pricelist_id=1),
        rule_record(2, '2_product_category', pricelist_id=2, categ_id=2),
        rule_record(3, '2_product_category', pricelist_id=1, categ_id=9),
        rule_record(4, '0_product_variant', pricelist_id=1, product_id=10),
    ]


@pytest.fixture
def make_backend():
    """Factory for stub backends."""
    return StubBackend


@pytest.fixture
def make_rule():
    return rule_record


@pytest.fixture
def make_product():
    return product_record


@pytest.fixture(scope="session")
def sample_snapshot_path():
    return SAMPLE_SNAPSHOT
