"""
Data models for rule resolution.

Uses dataclasses for structured, type-safe data representation.
Backend records are plain dicts in the shape returned by Odoo's search_read:
many2one fields arrive as [id, display_name] pairs or False.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Optional


SCOPE_GLOBAL = 'global'
SCOPE_CATEGORY = 'category'
SCOPE_TEMPLATE = 'product_template'
SCOPE_VARIANT = 'product_variant'

# Output order of the buckets
SCOPES = (SCOPE_GLOBAL, SCOPE_CATEGORY, SCOPE_TEMPLATE, SCOPE_VARIANT)

# Backend applied_on discriminant -> scope
APPLIED_ON_SCOPES = {
    '3_global': SCOPE_GLOBAL,
    '2_product_category': SCOPE_CATEGORY,
    '1_product': SCOPE_TEMPLATE,
    '0_product_variant': SCOPE_VARIANT,
}
SCOPE_APPLIED_ON = {scope: code for code, scope in APPLIED_ON_SCOPES.items()}

RULE_FIELDS = [
    'min_quantity',
    'fixed_price',
    'percent_price',
    'compute_price',
    'pricelist_id',
    'applied_on',
    'categ_id',
    'product_tmpl_id',
    'product_id',
]


def many2one_id(value: Any) -> Optional[int]:
    """Extract the id from a many2one value ([id, name], id, or False)."""
    if value is None or value is False:
        return None
    if isinstance(value, (list, tuple)):
        return int(value[0]) if value else None
    if isinstance(value, bool):
        return None
    return int(value)


def many2one_name(value: Any) -> Optional[str]:
    """Extract the display name from a many2one value, if present."""
    if isinstance(value, (list, tuple)) and len(value) > 1:
        return str(value[1])
    return None


def _optional_float(value: Any) -> Optional[float]:
    # Odoo sends False for empty numeric fields
    if value is None or value is False:
        return None
    return float(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value is False or value == '':
        return None
    return str(value)


@dataclass
class TraceStep:
    """A single step in the resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class Product:
    """A sellable product variant as seen by the resolver."""
    variant_id: int
    template_id: int
    name: str
    list_price: float
    barcode: str
    variant_value_ids: list[int] = field(default_factory=list)
    variant_value_names: list[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: dict, barcode: str = '') -> 'Product':
        """Create a Product from a product.product search_read record."""
        template_id = many2one_id(record.get('product_tmpl_id'))
        if template_id is None:
            raise ValueError(f"Product {record.get('id')} has no template")

        # Value entries are ids, or {'id', 'name'} dicts when the backend expands them
        value_ids = []
        value_names = []
        for value in record.get('product_template_variant_value_ids') or []:
            if isinstance(value, dict):
                if value.get('id') is not None:
                    value_ids.append(int(value['id']))
                if value.get('name'):
                    value_names.append(str(value['name']))
            else:
                value_ids.append(int(value))

        return cls(
            variant_id=int(record['id']),
            template_id=template_id,
            name=str(record.get('name') or ''),
            list_price=float(record.get('lst_price') or 0.0),
            barcode=str(record.get('barcode') or barcode),
            variant_value_ids=value_ids,
            variant_value_names=value_names,
        )


@dataclass
class PriceList:
    """A price list and its eligibility flag."""
    id: int
    name: str = ''
    is_active: bool = True


@dataclass
class PricelistRule:
    """
    A single price-list item.

    Pricing mechanics (min_quantity, fixed/percent price, compute mode) are
    carried through unevaluated.
    """
    id: Optional[int]
    applied_on: Optional[str]
    scope: Optional[str]  # None when applied_on is not a known discriminant
    pricelist_id: Optional[int] = None
    pricelist_name: Optional[str] = None
    category_id: Optional[int] = None
    template_id: Optional[int] = None
    variant_id: Optional[int] = None
    min_quantity: float = 0.0
    fixed_price: Optional[float] = None
    percent_price: Optional[float] = None
    compute_price: Optional[str] = None
    product_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict) -> 'PricelistRule':
        """Create a rule from a product.pricelist.item search_read record."""
        applied_on = _optional_str(record.get('applied_on'))
        return cls(
            id=record.get('id'),
            applied_on=applied_on,
            scope=APPLIED_ON_SCOPES.get(applied_on),
            pricelist_id=many2one_id(record.get('pricelist_id')),
            pricelist_name=many2one_name(record.get('pricelist_id')),
            category_id=many2one_id(record.get('categ_id')),
            template_id=many2one_id(record.get('product_tmpl_id')),
            variant_id=many2one_id(record.get('product_id')),
            min_quantity=_optional_float(record.get('min_quantity')) or 0.0,
            fixed_price=_optional_float(record.get('fixed_price')),
            percent_price=_optional_float(record.get('percent_price')),
            compute_price=_optional_str(record.get('compute_price')),
        )

    def with_product_name(self, product_name: str) -> 'PricelistRule':
        """Return a copy stamped with the looked-up product's display name."""
        return replace(self, product_name=product_name)

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned by the API."""
        return {
            'id': self.id,
            'applied_on': self.applied_on,
            'scope': self.scope,
            'pricelist_id': self.pricelist_id,
            'pricelist_name': self.pricelist_name,
            'categ_id': self.category_id,
            'product_tmpl_id': self.template_id,
            'product_id': self.variant_id,
            'min_quantity': self.min_quantity,
            'fixed_price': self.fixed_price,
            'percent_price': self.percent_price,
            'compute_price': self.compute_price,
            'product_name': self.product_name,
        }


@dataclass
class RuleBuckets:
    """Classified rules, one ordered list per scope."""
    global_rules: list[PricelistRule] = field(default_factory=list)
    category: list[PricelistRule] = field(default_factory=list)
    product_template: list[PricelistRule] = field(default_factory=list)
    product_variant: list[PricelistRule] = field(default_factory=list)

    def get(self, scope: str) -> list[PricelistRule]:
        """Get the bucket for a scope name."""
        if scope == SCOPE_GLOBAL:
            return self.global_rules
        if scope in (SCOPE_CATEGORY, SCOPE_TEMPLATE, SCOPE_VARIANT):
            return getattr(self, scope)
        raise KeyError(scope)

    def items(self) -> list[tuple[str, list[PricelistRule]]]:
        """(scope, rules) pairs in output order."""
        return [(scope, self.get(scope)) for scope in SCOPES]

    def count(self) -> int:
        """Number of rules across all buckets."""
        return sum(len(rules) for _, rules in self.items())

    def with_product_name(self, product_name: str) -> 'RuleBuckets':
        """Return new buckets with every rule stamped with the product name."""
        return RuleBuckets(
            global_rules=[r.with_product_name(product_name) for r in self.global_rules],
            category=[r.with_product_name(product_name) for r in self.category],
            product_template=[r.with_product_name(product_name) for r in self.product_template],
            product_variant=[r.with_product_name(product_name) for r in self.product_variant],
        )

    def to_dict(self) -> dict[str, list[dict]]:
        return {scope: [rule.to_dict() for rule in rules] for scope, rules in self.items()}


@dataclass
class ResolutionResult:
    """Complete result of resolving a barcode."""
    barcode: str
    product_name: str
    list_price: float
    variant_id: int
    template_id: int
    category_id: Optional[int]
    buckets: RuleBuckets
    # Rules fetched as candidates, before classification dropped any
    candidate_rule_count: int
    active_pricelist_ids: list[int] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the resolution trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self, include_trace: bool = False) -> dict:
        """Convert to the API response payload."""
        payload = {
            'success': True,
            'barcode': self.barcode,
            'product_name': self.product_name,
            'lst_price': self.list_price,
            'rules_by_application': self.buckets.to_dict(),
            'candidate_rule_count': self.candidate_rule_count,
        }
        if include_trace:
            payload['trace'] = [
                {'step': t.step, 'description': t.description, 'value': t.value}
                for t in self.trace
            ]
        return payload
