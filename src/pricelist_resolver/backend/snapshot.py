"""
Snapshot backend - serves lookups from a JSON export instead of a live server.

The snapshot holds search_read-shaped records under the keys 'products',
'templates', 'variant_values', 'pricelists' and 'rules'. Rule domains are
evaluated locally, so the resolver runs exactly as it does against Odoo.
"""
import copy
import json
import logging
from pathlib import Path
from typing import Optional

from ..engine.domain import evaluate_domain
from ..engine.models import PriceList, many2one_id
from .base import PricingBackend

logger = logging.getLogger(__name__)


class SnapshotBackend(PricingBackend):
    """PricingBackend over an in-memory snapshot."""

    name = "snapshot"

    def __init__(self, data: dict, active_field: str = "x_studio_disponible", source: Optional[Path] = None):
        self.products = list(data.get("products", []))
        self.templates = {int(t["id"]): t for t in data.get("templates", [])}
        self.variant_values = {int(v["id"]): v for v in data.get("variant_values", [])}
        self.pricelists = list(data.get("pricelists", []))
        self.rules = list(data.get("rules", []))
        self.active_field = active_field
        self.source = source

    @classmethod
    def from_file(cls, path: Path, active_field: str = "x_studio_disponible") -> 'SnapshotBackend':
        """Load a snapshot from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Snapshot not found at {path}.")

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        backend = cls(data, active_field=active_field, source=path)
        logger.info(
            f"[SNAPSHOT] Loaded {len(backend.products)} products and "
            f"{len(backend.rules)} rules from {path}"
        )
        return backend

    async def find_products_by_code(self, code: str) -> list[dict]:
        return [copy.deepcopy(p) for p in self.products if p.get("barcode") == code]

    async def find_category_for_template(self, template_id: int) -> Optional[int]:
        template = self.templates.get(int(template_id))
        if template is None:
            return None
        return many2one_id(template.get("categ_id"))

    async def find_variant_value_names(self, value_ids: list[int]) -> list[str]:
        names = []
        for value_id in value_ids:
            value = self.variant_values.get(int(value_id))
            if value and value.get("name"):
                names.append(str(value["name"]))
        return names

    async def search_active_pricelists(self) -> list[PriceList]:
        return [
            PriceList(id=int(pl["id"]), name=str(pl.get("name") or ""), is_active=True)
            for pl in self.pricelists
            if pl.get(self.active_field) is True
        ]

    async def search_rules(self, domain: list) -> list[dict]:
        return [copy.deepcopy(r) for r in self.rules if evaluate_domain(domain, r)]

    def describe(self) -> dict:
        return {
            "backend": self.name,
            "source": str(self.source) if self.source else None,
            "products": len(self.products),
            "rules": len(self.rules),
        }
