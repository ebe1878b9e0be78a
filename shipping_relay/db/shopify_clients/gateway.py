"""
Commerce gateway for the Shopify Admin GraphQL API.

This module provides the single authenticated call used by the order edit
orchestrator: one POST per invocation, bounded by a timeout, with uniform
error surfacing and no retries (the caller decides whether to retry).
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout

from shipping_relay.core.logging_config import log_api_call
from shipping_relay.domain.models import Region
from shipping_relay.utils.error_handler import MAX_BODY_SNIPPET, MAX_ERRORS_SNIPPET, GatewayException, truncate

logger = logging.getLogger(__name__)


class CommerceGateway:
    """
    Gateway for Shopify Admin GraphQL calls on behalf of a resolved region.

    Implements:
    - Token authentication per region
    - Per-call timeout through cooperative cancellation (asyncio.timeout)
    - HTTP status, JSON shape and top-level GraphQL errors validation
    """

    def __init__(
        self,
        api_version: str,
        timeout_seconds: float = 10.0,
        user_agent: str = "Flow-Shipping-Relay",
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the gateway.

        Args:
            api_version: Shopify Admin API version (e.g. "2025-07")
            timeout_seconds: Maximum duration of one call
            user_agent: User-Agent header sent to Shopify
            session: Existing HTTP session (created lazily when omitted)
        """
        self.api_version = api_version
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.session = session
        # Serializa la creación perezosa de la sesión
        self._session_lock = asyncio.Lock()

        logger.info(f"Commerce gateway initialized - API {api_version}, timeout {timeout_seconds}s")

    async def initialize(self):
        """Inicializa el cliente HTTP con configuración optimizada."""
        async with self._session_lock:
            if self.session and not self.session.closed:
                return

            # The per-call limit is enforced by asyncio.timeout in call()
            timeout = ClientTimeout(total=None, connect=self.timeout_seconds)
            connector = aiohttp.TCPConnector(limit=100, ttl_dns_cache=300)
            self.session = aiohttp.ClientSession(timeout=timeout, connector=connector)
            logger.info("Shopify HTTP client initialized successfully")

    async def close(self):
        """Cierra el cliente HTTP de forma segura."""
        if self.session:
            if not self.session.closed:
                await self.session.close()
            self.session = None
            logger.info("Shopify HTTP client closed successfully")

    def graphql_url(self, region: Region) -> str:
        """Versioned GraphQL endpoint of the region's shop."""
        return f"https://{region.shop_domain}/admin/api/{self.api_version}/graphql.json"

    def _get_headers(self, region: Region) -> Dict[str, str]:
        """
        Obtiene los headers necesarios para las peticiones GraphQL.

        Returns:
            Dict con headers de autenticación y contenido
        """
        return {
            "X-Shopify-Access-Token": region.admin_token or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    async def call(self, region: Region, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute one GraphQL query/mutation against the region's shop.

        Args:
            region: Resolved region (provides shop domain and token)
            query: GraphQL document
            variables: Query variables

        Returns:
            Dict: The "data" member of the response

        Raises:
            GatewayException: Missing token, timeout, network error, non-2xx status,
                              non-JSON body or top-level GraphQL errors
        """
        if not region.has_token:
            raise GatewayException(
                f"Shopify token not configured for shop ({region.code or '??'})",
                shop_domain=region.shop_domain,
            )

        if not self.session or self.session.closed:
            logger.warning("Session not initialized, creating new session")
            await self.initialize()

        url = self.graphql_url(region)
        payload = {"query": query, "variables": variables or {}}
        start_time = time.monotonic()

        try:
            async with asyncio.timeout(self.timeout_seconds):
                async with self.session.post(url, json=payload, headers=self._get_headers(region)) as response:
                    status = response.status
                    raw = await response.read()
        except TimeoutError as e:
            timeout_ms = int(self.timeout_seconds * 1000)
            logger.error(f"⏱️ Shopify GraphQL timeout after {timeout_ms}ms - {region.shop_domain}")
            raise GatewayException(
                f"Shopify GraphQL timeout after {timeout_ms}ms",
                shop_domain=region.shop_domain,
                timed_out=True,
            ) from e
        except aiohttp.ClientError as e:
            raise GatewayException(
                f"Shopify GraphQL network error: {truncate(e, MAX_BODY_SNIPPET)}",
                shop_domain=region.shop_domain,
            ) from e

        log_api_call("POST", url, status, time.monotonic() - start_time, shop=region.shop_domain)

        # Bytes inválidos se reemplazan: un body ilegible termina como non-JSON
        text = raw.decode("utf-8", errors="replace")

        if not 200 <= status < 300:
            raise GatewayException(
                f"Shopify GraphQL HTTP {status}: {truncate(text, MAX_BODY_SNIPPET)}",
                shop_domain=region.shop_domain,
                api_response_code=status,
            )

        data = _safe_json(text)
        if data is None:
            raise GatewayException(
                f"Shopify GraphQL non-JSON: {truncate(text, MAX_BODY_SNIPPET)}",
                shop_domain=region.shop_domain,
                api_response_code=status,
            )

        errors = data.get("errors")
        if errors:
            raise GatewayException(
                f"Shopify GraphQL errors: {truncate(json.dumps(errors, ensure_ascii=False), MAX_ERRORS_SNIPPET)}",
                shop_domain=region.shop_domain,
                api_response_code=status,
            )

        return data.get("data") or {}

    def __repr__(self):
        return (
            f"CommerceGateway(api_version='{self.api_version}', "
            f"timeout_seconds={self.timeout_seconds}, "
            f"initialized={self.session is not None})"
        )


def _safe_json(text: str) -> Optional[Dict[str, Any]]:
    """Parse a JSON object; anything else (invalid JSON, arrays, scalars) is None."""
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None
