"""
Odoo backend - JSON-RPC access to products, price lists and rules.

OdooRPC wraps the raw JSON-RPC envelope; OdooBackend maps the resolver's
lookups onto search_read calls and gets its session from a SessionProvider.
Every failure surfaces as BackendError after a single attempt.
"""
import itertools
import logging
from typing import Any, Optional

import httpx

from ..config.settings import Settings
from ..engine.models import RULE_FIELDS, PriceList, many2one_id
from ..errors import BackendError
from .base import PricingBackend
from .session import SessionProvider

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ['id', 'name', 'barcode', 'lst_price', 'product_tmpl_id', 'product_template_variant_value_ids']


class OdooRPC:
    """Minimal JSON-RPC 2.0 client for Odoo's common/object services."""

    def __init__(self, client: httpx.AsyncClient, url: str, db: str, user: str, password: str):
        self.client = client
        self.url = url
        self.db = db
        self.user = user
        self.password = password
        self._ids = itertools.count(1)

    async def call(self, service: str, method: str, args: list, operation: str) -> Any:
        """POST a 'call' envelope and return its result member."""
        payload = {
            "jsonrpc": "2.0",
            "method": "call",
            "id": next(self._ids),
            "params": {"service": service, "method": method, "args": args},
        }
        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"[ODOO] {operation} transport error: {e}")
            raise BackendError(f"transport error ({type(e).__name__})", operation) from e
        except ValueError as e:
            logger.error(f"[ODOO] {operation} returned a non-JSON body")
            raise BackendError("invalid JSON response", operation) from e

        if not isinstance(data, dict):
            raise BackendError("unexpected response shape", operation)

        if data.get("error"):
            error = data["error"]
            if isinstance(error, dict):
                message = (error.get("data") or {}).get("message") or error.get("message")
            else:
                message = str(error)
            logger.error(f"[ODOO] {operation} failed: {message}")
            raise BackendError(f"remote error: {message}", operation)

        return data.get("result")

    async def login(self) -> int:
        """Authenticate and return the user id."""
        uid = await self.call("common", "login", [self.db, self.user, self.password], "login")
        if not uid:
            raise BackendError("authentication rejected", "login")
        return int(uid)

    async def search_read(self, uid: int, model: str, domain: list, fields: list[str], operation: str) -> list[dict]:
        result = await self.call(
            "object",
            "execute_kw",
            [self.db, uid, self.password, model, "search_read", [domain], {"fields": fields}],
            operation,
        )
        if not isinstance(result, list):
            raise BackendError(f"expected a record list from {model}", operation)
        return result


class OdooBackend(PricingBackend):
    """PricingBackend over an Odoo instance."""

    name = "odoo"

    def __init__(self, rpc: OdooRPC, session: SessionProvider, active_field: str = "x_studio_disponible"):
        self.rpc = rpc
        self.session = session
        self.active_field = active_field

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> 'OdooBackend':
        """Build the backend and its session provider from settings."""
        missing = settings.missing_odoo_settings()
        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

        rpc = OdooRPC(
            client=client,
            url=settings.odoo_url,
            db=settings.odoo_db,
            user=settings.odoo_user,
            password=settings.odoo_password,
        )
        return cls(rpc, SessionProvider(rpc.login), active_field=settings.pricelist_active_field)

    async def _search_read(self, model: str, domain: list, fields: list[str], operation: str) -> list[dict]:
        uid = await self.session.ensure()
        records = await self.rpc.search_read(uid, model, domain, fields, operation)
        logger.debug(f"[ODOO] {operation}: {len(records)} record(s) from {model}")
        return records

    async def find_products_by_code(self, code: str) -> list[dict]:
        return await self._search_read(
            "product.product", [("barcode", "=", code)], PRODUCT_FIELDS, "find_product_by_code"
        )

    async def find_category_for_template(self, template_id: int) -> Optional[int]:
        templates = await self._search_read(
            "product.template", [("id", "=", template_id)], ["categ_id"], "find_category_for_template"
        )
        if not templates:
            return None
        return many2one_id(templates[0].get("categ_id"))

    async def find_variant_value_names(self, value_ids: list[int]) -> list[str]:
        if not value_ids:
            return []
        records = await self._search_read(
            "product.template.attribute.value",
            [("id", "in", list(value_ids))],
            ["name"],
            "find_variant_value_names",
        )
        # search_read ignores the order of the id list
        names = {record["id"]: record.get("name") for record in records}
        return [str(names[value_id]) for value_id in value_ids if names.get(value_id)]

    async def search_active_pricelists(self) -> list[PriceList]:
        records = await self._search_read(
            "product.pricelist", [(self.active_field, "=", True)], ["id", "name"], "search_active_pricelists"
        )
        return [PriceList(id=int(r["id"]), name=str(r.get("name") or ""), is_active=True) for r in records]

    async def search_rules(self, domain: list) -> list[dict]:
        return await self._search_read("product.pricelist.item", domain, ["id"] + RULE_FIELDS, "search_rules")

    def describe(self) -> dict:
        return {
            "backend": self.name,
            "url": self.rpc.url,
            "database": self.rpc.db,
            "authenticated": self.session.is_authenticated,
        }
