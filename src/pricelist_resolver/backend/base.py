"""
Backend boundary - the remote calls the resolver depends on.

Implementations return records in search_read shape and raise BackendError
when a call fails. They never retry.
"""
from abc import ABC, abstractmethod
from typing import Optional

from ..engine.models import PriceList


class PricingBackend(ABC):
    """Read-only access to products, categories, price lists and rules."""

    name = "abstract"

    @abstractmethod
    async def find_products_by_code(self, code: str) -> list[dict]:
        """Products whose barcode equals code, in backend order."""

    @abstractmethod
    async def find_category_for_template(self, template_id: int) -> Optional[int]:
        """Category id of a template, or None when it has none."""

    @abstractmethod
    async def find_variant_value_names(self, value_ids: list[int]) -> list[str]:
        """Names of variant attribute values, in the order of value_ids."""

    @abstractmethod
    async def search_active_pricelists(self) -> list[PriceList]:
        """Price lists currently flagged as eligible."""

    @abstractmethod
    async def search_rules(self, domain: list) -> list[dict]:
        """Price-list items matching a domain."""

    def describe(self) -> dict:
        """Status information for the system endpoint."""
        return {"backend": self.name}
