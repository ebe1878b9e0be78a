"""Fixtures compartidas: configuración de prueba, regiones y gateway falso."""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from shipping_relay.core.config import Settings
from shipping_relay.domain.models import Region
from shipping_relay.services.regions import RegionRegistry

UK_DOMAIN = "acme-uk.myshopify.com"
EU_DOMAIN = "acme-eu.myshopify.com"
UK_SECRET = "flow-secret-uk"

ORDER_GID = "gid://shopify/Order/5512345678901"
CALCULATED_ORDER_GID = "gid://shopify/CalculatedOrder/777"
SHIPPING_LINE_GID = "gid://shopify/ShippingLine/111"


def make_settings(**overrides) -> Settings:
    """Settings aislados del entorno: dos tiendas, UK con secreto."""
    values: Dict[str, Any] = {
        "SHOP_DOMAIN_UK": UK_DOMAIN,
        "SHOPIFY_ADMIN_TOKEN_UK": "shpat_uktoken123",
        "FLOW_SECRET_UK": UK_SECRET,
        "SHOP_DOMAIN_EU": EU_DOMAIN,
        "SHOPIFY_ADMIN_TOKEN_EU": "shpat_eutoken456",
        "FLOW_SECRET_EU": None,
        "SHOP_DOMAIN_US": None,
        "SHOPIFY_ADMIN_TOKEN_US": None,
        "FLOW_SECRET_US": None,
        "SHOPIFY_API_VERSION": "2025-07",
        "FETCH_TIMEOUT_MS": 10000,
        "DEBUG_ERRORS": False,
        "ALLOW_ADD_MODE": True,
        "ALLOWED_HOSTS": None,
        "DEBUG": False,
        "ENVIRONMENT": "testing",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def order_payload(lines: Optional[List[Dict[str, Any]]] = None, name: str = "#1001") -> Dict[str, Any]:
    """Respuesta "data" de la query del pedido."""
    return {"order": {"id": ORDER_GID, "name": name, "shippingLines": {"nodes": lines or []}}}


def shipping_line_node(title: str = "Standard", amount: Any = "5.00", line_id: str = SHIPPING_LINE_GID):
    return {
        "id": line_id,
        "title": title,
        "originalPriceSet": {"shopMoney": {"amount": amount, "currencyCode": "GBP"}},
    }


def begin_payload(calculated_order_id: Optional[str] = CALCULATED_ORDER_GID, user_errors=None):
    calculated = {"id": calculated_order_id} if calculated_order_id else None
    return {"orderEditBegin": {"calculatedOrder": calculated, "userErrors": user_errors or []}}


def mutation_payload(step: str, user_errors=None):
    return {step: {"userErrors": user_errors or []}}


class FakeGateway:
    """
    Gateway falso: devuelve las respuestas en orden y registra cada llamada.

    Una respuesta que es una excepción se lanza en lugar de devolverse.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.initialize = AsyncMock()
        self.close = AsyncMock()

    async def call(self, region: Region, query: str, variables: Optional[Dict[str, Any]] = None):
        self.calls.append({"region": region, "query": query, "variables": variables})
        if not self.responses:
            raise AssertionError(f"Unexpected gateway call #{len(self.calls)}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def queries(self) -> List[str]:
        return [c["query"] for c in self.calls]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def uk_region() -> Region:
    return Region(code="UK", shop_domain=UK_DOMAIN, admin_token="shpat_uktoken123", flow_secret=UK_SECRET)


@pytest.fixture
def eu_region() -> Region:
    return Region(code="EU", shop_domain=EU_DOMAIN, admin_token="shpat_eutoken456")


@pytest.fixture
def registry(uk_region, eu_region) -> RegionRegistry:
    return RegionRegistry([uk_region, eu_region])


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()
