"""Tests de integración HTTP para /health y /flow/edit-shipping-lines."""

import json
import sys
from unittest.mock import patch

import pytest
from conftest import (
    EU_DOMAIN,
    ORDER_GID,
    SHIPPING_LINE_GID,
    UK_DOMAIN,
    UK_SECRET,
    FakeGateway,
    begin_payload,
    make_settings,
    mutation_payload,
    order_payload,
    shipping_line_node,
)
from fastapi.testclient import TestClient

from shipping_relay.main import create_application
from shipping_relay.services.shipping_lines.orchestrator import STEP_ADD, STEP_COMMIT, STEP_REMOVE
from shipping_relay.utils.error_handler import GatewayException

ENDPOINT = "/flow/edit-shipping-lines"
TARGET_TITLE = "DHL_PAKET::Standard"


def make_client(gateway=None, **settings_overrides):
    gateway = gateway or FakeGateway()
    app = create_application(settings=make_settings(**settings_overrides), gateway=gateway)
    return TestClient(app, raise_server_exceptions=False), gateway


def edit_body(**overrides):
    body = {"shopDomain": EU_DOMAIN, "orderGid": ORDER_GID, "targetShippingTitle": TARGET_TITLE}
    body.update(overrides)
    return body


def replace_responses():
    return [
        order_payload([shipping_line_node("Standard", "5.00")]),
        begin_payload(),
        mutation_payload(STEP_ADD),
        mutation_payload(STEP_REMOVE),
        mutation_payload(STEP_COMMIT),
    ]


class TestHealth:
    def test_health_lists_shops(self):
        """Debe listar tiendas y tokens configurados sin exponer secretos."""
        client, gateway = make_client()

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "shops": [UK_DOMAIN, EU_DOMAIN],
            "shopifyConfigured": {"UK": True, "EU": True},
            "apiVersion": "2025-07",
        }
        assert "shpat_" not in response.text
        assert gateway.calls == []

    def test_health_with_missing_token(self):
        client, _ = make_client(SHOPIFY_ADMIN_TOKEN_EU=None)

        assert client.get("/health").json()["shopifyConfigured"] == {"UK": True, "EU": False}


class TestEditShippingLinesSuccess:
    def test_replace(self):
        """Reemplazo completo: 200 con la línea anterior y la nueva."""
        client, gateway = make_client(FakeGateway(replace_responses()))

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "shopDomain": EU_DOMAIN,
            "orderName": "#1001",
            "mode": "replace",
            "from": {"id": SHIPPING_LINE_GID, "title": "Standard", "price": 5.0},
            "to": {"title": TARGET_TITLE, "price": 5.0},
        }
        assert len(gateway.calls) == 5

    def test_add_with_numeric_order_id(self):
        gateway = FakeGateway(
            [order_payload([]), begin_payload(), mutation_payload(STEP_ADD), mutation_payload(STEP_COMMIT)]
        )
        client, _ = make_client(gateway)

        response = client.post(
            ENDPOINT, json=edit_body(orderGid=None, orderId="5512345678901", targetShippingPrice="3.95")
        )

        assert response.status_code == 200
        assert response.json()["mode"] == "add"
        assert response.json()["from"] is None
        assert response.json()["to"] == {"title": TARGET_TITLE, "price": 3.95}
        assert gateway.calls[0]["variables"] == {"id": ORDER_GID}

    def test_dry_run(self):
        """dryRun solo consulta el pedido y marca la respuesta."""
        client, gateway = make_client(FakeGateway([order_payload([shipping_line_node()])]))

        response = client.post(ENDPOINT, json=edit_body(dryRun=True))

        assert response.status_code == 200
        assert response.json()["dryRun"] is True
        assert len(gateway.calls) == 1

    @pytest.mark.parametrize("flag", [2, "y", "preview"])
    def test_unrecognized_dry_run_flag_is_preview(self, flag):
        """Un dryRun no reconocido solo consulta el pedido."""
        client, gateway = make_client(FakeGateway([order_payload([shipping_line_node()])]))

        response = client.post(ENDPOINT, json=edit_body(dryRun=flag))

        assert response.status_code == 200
        assert response.json()["dryRun"] is True
        assert len(gateway.calls) == 1

    def test_secret_accepted(self):
        client, _ = make_client(FakeGateway([order_payload([shipping_line_node()])]))

        response = client.post(
            ENDPOINT, json=edit_body(shopDomain=UK_DOMAIN, dryRun=True), headers={"X-Flow-Secret": UK_SECRET}
        )

        assert response.status_code == 200

    def test_request_id_header(self):
        client, _ = make_client()

        response = client.get("/health", headers={"X-Request-ID": "abc12345"})

        assert response.headers["X-Request-ID"] == "abc12345"
        assert "X-Process-Time" in response.headers


class TestEditShippingLinesValidation:
    """Los errores de validación responden antes de llamar a Shopify."""

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"shopDomain": "not-a-shop"}, "Missing/invalid shopDomain"),
            ({"shopDomain": None}, "Missing/invalid shopDomain"),
            ({"shopDomain": "other.myshopify.com"}, "Shop not recognized: other.myshopify.com"),
            ({"orderGid": "abc"}, "Missing/invalid orderGid/orderId"),
            ({"orderGid": None}, "Missing/invalid orderGid/orderId"),
            ({"targetShippingTitle": "   "}, "Missing targetShippingTitle"),
        ],
    )
    def test_bad_request(self, overrides, message):
        client, gateway = make_client()

        response = client.post(ENDPOINT, json=edit_body(**overrides))

        assert response.status_code == 400
        assert response.json() == {"error": message}
        assert gateway.calls == []

    @pytest.mark.parametrize("headers", [{}, {"X-Flow-Secret": ""}, {"X-Flow-Secret": "wrong"}])
    def test_bad_secret(self, headers):
        client, gateway = make_client()

        response = client.post(ENDPOINT, json=edit_body(shopDomain=UK_DOMAIN), headers=headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Bad X-Flow-Secret"}
        assert gateway.calls == []

    def test_invalid_json_body(self):
        client, gateway = make_client()

        response = client.post(ENDPOINT, content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}
        assert gateway.calls == []

    def test_json_array_body(self):
        client, _ = make_client()

        response = client.post(ENDPOINT, content=b"[1, 2]", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON body"

    def test_empty_body(self):
        """Un body vacío se trata como {} y falla en shopDomain."""
        client, _ = make_client()

        response = client.post(ENDPOINT)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing/invalid shopDomain"

    def test_payload_too_large(self):
        client, gateway = make_client(MAX_BODY_BYTES=64)

        response = client.post(ENDPOINT, content=json.dumps(edit_body(padding="x" * 200)).encode())

        assert response.status_code == 413
        assert response.json() == {"error": "Payload too large"}
        assert gateway.calls == []

    def test_chunked_payload_too_large(self):
        """Un body chunked sin Content-Length también respeta el límite."""
        client, gateway = make_client(MAX_BODY_BYTES=64)

        def chunks():
            for _ in range(10):
                yield b"x" * 32

        response = client.post(ENDPOINT, content=chunks(), headers={"Content-Type": "application/json"})

        assert response.status_code == 413
        assert response.json() == {"error": "Payload too large"}
        assert gateway.calls == []

    def test_invalid_caller_price(self):
        client, gateway = make_client(FakeGateway([order_payload([])]))

        response = client.post(ENDPOINT, json=edit_body(targetShippingPrice="abc"))

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid targetShippingPrice"}
        assert len(gateway.calls) == 1


class TestEditShippingLinesFailures:
    def test_order_not_found(self):
        client, _ = make_client(FakeGateway([{"order": None}]))

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}

    def test_replace_only_mode(self):
        client, _ = make_client(FakeGateway([order_payload([])]), ALLOW_ADD_MODE=False)

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 404
        assert response.json() == {"error": "Order has no shipping line to replace"}

    def test_gateway_error(self):
        error = GatewayException("Shopify GraphQL HTTP 502: Bad Gateway", shop_domain=EU_DOMAIN)
        client, _ = make_client(FakeGateway([error]))

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 500
        assert response.json() == {"error": "Shopify GraphQL HTTP 502: Bad Gateway"}

    def test_user_errors_name_the_step(self):
        responses = replace_responses()
        responses[3] = mutation_payload(STEP_REMOVE, [{"field": ["shippingLineId"], "message": "not found"}])
        client, gateway = make_client(FakeGateway(responses))

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 500
        assert response.json()["error"].startswith("orderEditRemoveShippingLine userErrors: ")
        assert len(gateway.calls) == 4

    def test_unexpected_error_is_generic(self):
        """Una excepción no prevista responde 500 genérico sin detalles."""
        client, _ = make_client(FakeGateway([RuntimeError("kaboom")]))

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 500
        assert response.json() == {"error": "Server error"}

    def test_unknown_route(self):
        client, _ = make_client()

        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


class TestDebugErrors:
    """details solo aparece con DEBUG_ERRORS."""

    def test_details_hidden_by_default(self):
        client, _ = make_client()

        response = client.post(ENDPOINT, json=edit_body(shopDomain="bad"))

        assert "details" not in response.json()

    def test_details_included_when_enabled(self):
        client, _ = make_client(DEBUG_ERRORS=True)

        response = client.post(ENDPOINT, json=edit_body(shopDomain="bad"))

        assert response.json() == {"error": "Missing/invalid shopDomain", "details": "bad"}

    def test_traceback_included_for_unexpected_errors(self):
        client, _ = make_client(FakeGateway([RuntimeError("kaboom")]), DEBUG_ERRORS=True)

        response = client.post(ENDPOINT, json=edit_body())

        assert response.status_code == 500
        assert response.json()["error"] == "Server error"
        assert "RuntimeError: kaboom" in response.json()["details"]


class TestLifespan:
    def test_gateway_opened_and_closed(self):
        """El ciclo de vida abre y cierra la sesión y restaura los hooks."""
        gateway = FakeGateway()
        app = create_application(settings=make_settings(), gateway=gateway)
        original_hook = sys.excepthook

        with patch("shipping_relay.core.lifespan.setup_logging"):
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200
                gateway.initialize.assert_awaited_once()

        gateway.close.assert_awaited_once()
        assert sys.excepthook is original_hook
