"""Tests unitarios para CommerceGateway (Shopify Admin GraphQL)."""

import asyncio
import json
from unittest.mock import patch

import aiohttp
import pytest

from shipping_relay.db.shopify_clients import CommerceGateway
from shipping_relay.domain.models import Region
from shipping_relay.utils.error_handler import ErrorCode, GatewayException

QUERY = "query($id: ID!) { order(id: $id) { id } }"


class FakeResponse:
    def __init__(self, status: int, raw: bytes):
        self.status = status
        self._raw = raw

    async def read(self):
        return self._raw


class FakeRequestContext:
    """Imita el context manager que devuelve aiohttp.ClientSession.post()."""

    def __init__(self, response=None, delay: float = 0, error: Exception = None):
        self.response = response
        self.delay = delay
        self.error = error
        self.cancelled = False

    async def __aenter__(self):
        if self.error:
            raise self.error
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        return self.response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, context: FakeRequestContext):
        self.context = context
        self.closed = False
        self.posts = []

    def post(self, url, json=None, headers=None):
        self.posts.append({"url": url, "json": json, "headers": headers})
        return self.context


def make_gateway(status=200, body=None, text=None, raw=None, delay=0, error=None, timeout_seconds=10.0):
    if raw is None:
        if text is None:
            text = json.dumps(body if body is not None else {"data": {"order": {"id": "1"}}})
        raw = text.encode("utf-8")
    session = FakeSession(FakeRequestContext(FakeResponse(status, raw), delay=delay, error=error))
    gateway = CommerceGateway("2025-07", timeout_seconds=timeout_seconds, user_agent="Test-Agent/1.0", session=session)
    return gateway, session


class TestCommerceGatewayCall:
    """Tests para la llamada autenticada."""

    @pytest.mark.asyncio
    async def test_returns_data_member(self, uk_region):
        gateway, _ = make_gateway(body={"data": {"order": {"id": "gid://shopify/Order/1"}}})

        data = await gateway.call(uk_region, QUERY, {"id": "gid://shopify/Order/1"})

        assert data == {"order": {"id": "gid://shopify/Order/1"}}

    @pytest.mark.asyncio
    async def test_request_shape(self, uk_region):
        """Debe hacer POST al endpoint versionado con token y body {query, variables}."""
        gateway, session = make_gateway()

        await gateway.call(uk_region, QUERY, {"id": "x"})

        assert len(session.posts) == 1
        post = session.posts[0]
        assert post["url"] == "https://acme-uk.myshopify.com/admin/api/2025-07/graphql.json"
        assert post["json"] == {"query": QUERY, "variables": {"id": "x"}}
        assert post["headers"]["X-Shopify-Access-Token"] == "shpat_uktoken123"
        assert post["headers"]["Content-Type"] == "application/json"
        assert post["headers"]["Accept"] == "application/json"
        assert post["headers"]["User-Agent"] == "Test-Agent/1.0"

    @pytest.mark.asyncio
    async def test_missing_data_returns_empty_dict(self, uk_region):
        gateway, _ = make_gateway(body={"data": None})

        assert await gateway.call(uk_region, QUERY) == {}

    @pytest.mark.asyncio
    async def test_missing_token(self):
        """Sin token no se hace ninguna llamada."""
        region = Region(code="US", shop_domain="acme-us.myshopify.com", admin_token=None)
        gateway, session = make_gateway()

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(region, QUERY)

        assert exc_info.value.message == "Shopify token not configured for shop (US)"
        assert session.posts == []

    @pytest.mark.asyncio
    async def test_http_error_status(self, uk_region):
        gateway, _ = make_gateway(status=502, text="Bad Gateway")

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message == "Shopify GraphQL HTTP 502: Bad Gateway"
        assert exc_info.value.api_response_code == 502
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_http_error_body_is_truncated(self, uk_region):
        gateway, _ = make_gateway(status=500, text="x" * 5000)

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message == "Shopify GraphQL HTTP 500: " + "x" * 800

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["<html>oops</html>", "", "[1, 2]", "\"string\""])
    async def test_non_json_body(self, uk_region, text):
        gateway, _ = make_gateway(text=text)

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message.startswith("Shopify GraphQL non-JSON: ")

    @pytest.mark.asyncio
    async def test_body_not_utf8(self, uk_region):
        """Un body con bytes no UTF-8 es un error non-JSON del gateway."""
        gateway, _ = make_gateway(raw=b"<html>\xff\xfe bad gateway</html>")

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message.startswith("Shopify GraphQL non-JSON: <html>")
        assert "bad gateway" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_http_error_with_non_utf8_body(self, uk_region):
        gateway, _ = make_gateway(status=502, raw=b"\xff\xfe")

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message.startswith("Shopify GraphQL HTTP 502: ")

    @pytest.mark.asyncio
    async def test_top_level_errors(self, uk_region):
        errors = [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]
        gateway, _ = make_gateway(body={"data": None, "errors": errors})

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message == f"Shopify GraphQL errors: {json.dumps(errors)}"

    @pytest.mark.asyncio
    async def test_empty_errors_list_is_not_a_failure(self, uk_region):
        gateway, _ = make_gateway(body={"data": {"ok": True}, "errors": []})

        assert await gateway.call(uk_region, QUERY) == {"ok": True}

    @pytest.mark.asyncio
    async def test_timeout_cancels_request(self, uk_region):
        """Una llamada lenta se cancela al vencer el timeout."""
        gateway, session = make_gateway(delay=5, timeout_seconds=0.05)

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message == "Shopify GraphQL timeout after 50ms"
        assert exc_info.value.timed_out is True
        assert exc_info.value.error_code == ErrorCode.SHOPIFY_TIMEOUT
        assert session.context.cancelled is True

    @pytest.mark.asyncio
    async def test_network_error(self, uk_region):
        gateway, _ = make_gateway(error=aiohttp.ClientConnectionError("connection refused"))

        with pytest.raises(GatewayException) as exc_info:
            await gateway.call(uk_region, QUERY)

        assert exc_info.value.message.startswith("Shopify GraphQL network error")
        assert exc_info.value.timed_out is False


class TestCommerceGatewayLifecycle:
    def test_graphql_url(self, eu_region):
        gateway = CommerceGateway("2024-10")

        assert gateway.graphql_url(eu_region) == "https://acme-eu.myshopify.com/admin/api/2024-10/graphql.json"

    @pytest.mark.asyncio
    async def test_initialize_and_close(self):
        gateway = CommerceGateway("2025-07", timeout_seconds=1.0)

        await gateway.initialize()
        session = gateway.session
        assert session is not None and not session.closed

        await gateway.close()
        assert session.closed
        assert gateway.session is None

    @pytest.mark.asyncio
    async def test_initialize_keeps_open_session(self):
        gateway = CommerceGateway("2025-07")
        await gateway.initialize()
        session = gateway.session

        await gateway.initialize()

        assert gateway.session is session
        await gateway.close()

    @pytest.mark.asyncio
    async def test_concurrent_initialize_creates_one_session(self):
        """Varias inicializaciones simultáneas comparten una sola sesión."""
        gateway = CommerceGateway("2025-07")
        created = []
        original_session_class = aiohttp.ClientSession

        def tracking_session(*args, **kwargs):
            session = original_session_class(*args, **kwargs)
            created.append(session)
            return session

        with patch("shipping_relay.db.shopify_clients.gateway.aiohttp.ClientSession", side_effect=tracking_session):
            await asyncio.gather(*(gateway.initialize() for _ in range(5)))

        assert len(created) == 1
        assert gateway.session is created[0]
        await gateway.close()
