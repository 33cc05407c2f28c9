"""
Product Resolver - Turns a scanned barcode into scope-partitioned pricing rules.

Resolution order:
1. Look the product up by barcode (no match -> None, nothing else is queried)
2. Read the template's category, the variant value names and the active
   price lists
3. Build the scope filter and fetch candidate rules
4. Classify candidates against the product's own identifiers
5. Stamp every kept rule with the product's display name
"""
import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from ..errors import BackendError
from .models import PricelistRule, Product, ResolutionResult
from .naming import compose_display_name
from .rule_classifier import classify
from .scope_filter import build_filter

if TYPE_CHECKING:
    from ..backend.base import PricingBackend

logger = logging.getLogger(__name__)


class ProductResolver:
    """
    Resolves the price-list rules that apply to one product.

    Holds no per-request state; one instance serves concurrent resolutions.
    Backend failures propagate as BackendError and nothing partial is returned.
    """

    def __init__(self, backend: 'PricingBackend'):
        self.backend = backend

    async def resolve(self, code: str) -> Optional[ResolutionResult]:
        """
        Resolve a barcode.

        Args:
            code: Scannable product code

        Returns:
            ResolutionResult, or None when no product has this barcode
        """
        code = str(code).strip()

        products = await self.backend.find_products_by_code(code)
        if not products:
            logger.info(f"[RESOLVER] No product for barcode {code}")
            return None

        if len(products) > 1:
            # Backend order decides; it is not guaranteed to be stable
            logger.warning(
                f"[RESOLVER] Barcode {code} matches {len(products)} products, "
                f"using the first (id={products[0].get('id')})"
            )

        try:
            product = Product.from_record(products[0], barcode=code)
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError(f"malformed product record: {e}", "find_product_by_code") from e

        # Let every read settle before failing so no task is left unawaited
        outcomes = await asyncio.gather(
            self.backend.find_category_for_template(product.template_id),
            self._variant_names(product),
            self.backend.search_active_pricelists(),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        category_id, variant_names, pricelists = outcomes
        active_ids = {pl.id for pl in pricelists}

        if active_ids:
            domain = build_filter(active_ids, product.variant_id, product.template_id, category_id)
            candidates = await self.backend.search_rules(domain)
        else:
            logger.warning("[RESOLVER] No active price lists, skipping rule search")
            candidates = []

        try:
            rules = [PricelistRule.from_record(record) for record in candidates]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise BackendError(f"malformed rule record: {e}", "search_rules") from e
        buckets = classify(rules, product.variant_id, product.template_id, category_id)

        product_name = compose_display_name(product.name, variant_names)
        buckets = buckets.with_product_name(product_name)

        result = ResolutionResult(
            barcode=code,
            product_name=product_name,
            list_price=product.list_price,
            variant_id=product.variant_id,
            template_id=product.template_id,
            category_id=category_id,
            buckets=buckets,
            candidate_rule_count=len(candidates),
            active_pricelist_ids=sorted(active_ids),
        )

        result.add_trace("Product Lookup", f"Found product for barcode {code}", f"variant {product.variant_id}")
        result.add_trace("Template", "Template of the variant", str(product.template_id))
        if category_id is not None:
            result.add_trace("Category", "Template category", str(category_id))
        else:
            result.add_trace("Category", "Template has no category; category rules will be dropped")
        result.add_trace(
            "Price Lists",
            "Active price lists",
            ", ".join(str(pl_id) for pl_id in result.active_pricelist_ids) or "none",
        )
        result.add_trace("Candidates", "Rules returned by the scope filter", str(len(candidates)))
        for scope, scope_rules in buckets.items():
            result.add_trace("Classified", f"{scope} rules kept", str(len(scope_rules)))

        logger.info(
            f"[RESOLVER] {code} -> '{product_name}': "
            f"{buckets.count()}/{len(candidates)} candidate rules kept"
        )
        return result

    async def _variant_names(self, product: Product) -> list[str]:
        """Variant value names, fetched only when the record did not carry them."""
        if product.variant_value_names:
            return list(product.variant_value_names)
        if not product.variant_value_ids:
            return []
        return await self.backend.find_variant_value_names(product.variant_value_ids)

