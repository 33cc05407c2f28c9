"""
Scope Filter Builder - Builds the backend domain that selects candidate rules.

The domain is deliberately permissive for products without a category: it
admits every category-scoped rule and leaves it to the classifier to drop
them. Classification is the authoritative check; this filter only narrows
what the backend sends back.
"""
from typing import Iterable, Optional

from ..errors import InvalidArgument
from .models import (
    SCOPE_APPLIED_ON,
    SCOPE_CATEGORY,
    SCOPE_GLOBAL,
    SCOPE_TEMPLATE,
    SCOPE_VARIANT,
)


def build_filter(
    active_pricelist_ids: Iterable[int],
    variant_id: int,
    template_id: int,
    category_id: Optional[int] = None,
) -> list:
    """
    Build the rule-selection domain for one product.

    Equivalent to:
        pricelist_id in active_pricelist_ids
        AND (global
             OR (category AND categ_id matches)
             OR (product_template AND product_tmpl_id == template_id)
             OR (product_variant AND product_id == variant_id))

    Args:
        active_pricelist_ids: Ids of the price lists whose rules are eligible
        variant_id: product.product id
        template_id: product.template id
        category_id: Template category, or None when it has none

    Returns:
        Domain in prefix notation, ready for search_read
    """
    pricelist_ids = sorted({int(pl_id) for pl_id in active_pricelist_ids})
    if not pricelist_ids:
        raise InvalidArgument(
            "Cannot build a rule filter without active price lists. "
            "Query the active price lists first."
        )

    if category_id is not None:
        category_clause = ('categ_id', '=', category_id)
    else:
        category_clause = ('categ_id', '!=', False)

    return [
        ('pricelist_id', 'in', pricelist_ids),
        '|', '|', '|',
        ('applied_on', '=', SCOPE_APPLIED_ON[SCOPE_GLOBAL]),
        '&', ('applied_on', '=', SCOPE_APPLIED_ON[SCOPE_CATEGORY]),
             category_clause,
        '&', ('applied_on', '=', SCOPE_APPLIED_ON[SCOPE_TEMPLATE]),
             ('product_tmpl_id', '=', template_id),
        '&', ('applied_on', '=', SCOPE_APPLIED_ON[SCOPE_VARIANT]),
             ('product_id', '=', variant_id),
    ]
