"""
Rule Classifier - Partitions candidate rules into scope buckets.

Every candidate is re-checked against the product's own identifiers, so a
backend that over-selects can never leak a foreign rule into the response.
"""
import logging
from typing import Iterable, Optional

from .models import (
    SCOPE_CATEGORY,
    SCOPE_GLOBAL,
    SCOPE_TEMPLATE,
    SCOPE_VARIANT,
    PricelistRule,
    RuleBuckets,
)

logger = logging.getLogger(__name__)


def classify(
    rules: Iterable[PricelistRule],
    variant_id: int,
    template_id: int,
    category_id: Optional[int] = None,
) -> RuleBuckets:
    """
    Split candidate rules by scope, keeping only those that target this product.

    - global: always kept
    - category: kept when the product has a category and it matches
    - product_template: kept when the template matches
    - product_variant: kept when the variant matches
    - anything else: dropped

    Bucket order follows input order.
    """
    buckets = RuleBuckets()

    for rule in rules:
        if rule.scope == SCOPE_GLOBAL:
            buckets.global_rules.append(rule)

        elif rule.scope == SCOPE_CATEGORY:
            if category_id is not None and rule.category_id == category_id:
                buckets.category.append(rule)
            else:
                logger.debug(
                    f"[CLASSIFY] Dropped category rule {rule.id}: "
                    f"categ_id={rule.category_id}, product category={category_id}"
                )

        elif rule.scope == SCOPE_TEMPLATE:
            if rule.template_id == template_id:
                buckets.product_template.append(rule)
            else:
                logger.debug(
                    f"[CLASSIFY] Dropped template rule {rule.id}: "
                    f"product_tmpl_id={rule.template_id}, expected {template_id}"
                )

        elif rule.scope == SCOPE_VARIANT:
            if rule.variant_id == variant_id:
                buckets.product_variant.append(rule)
            else:
                logger.debug(
                    f"[CLASSIFY] Dropped variant rule {rule.id}: "
                    f"product_id={rule.variant_id}, expected {variant_id}"
                )

        else:
            logger.debug(f"[CLASSIFY] Dropped rule {rule.id} with unknown applied_on={rule.applied_on!r}")

    return buckets
