"""Engine subpackage - rule selection and resolution logic."""
from .resolver import ProductResolver
from .models import PricelistRule, Product, ResolutionResult, RuleBuckets
from .rule_classifier import classify
from .scope_filter import build_filter

__all__ = [
    'ProductResolver',
    'PricelistRule',
    'Product',
    'ResolutionResult',
    'RuleBuckets',
    'classify',
    'build_filter',
]
