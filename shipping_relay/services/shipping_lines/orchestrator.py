"""
ShippingLineEditOrchestrator - replaces or adds the shipping line of an order.

Flow (strictly sequential, each step gates the next):
1. Fetch the order and its shipping lines
2. Decide the mode (add vs. replace) and the price
3. Dry run: stop here and return the preview
4. orderEditBegin -> calculated order session
5. orderEditAddShippingLine with the target title and price
6. orderEditRemoveShippingLine for the previous line (replace mode only)
7. orderEditCommit without notifying the customer

A failure aborts the remaining steps. Nothing is rolled back: if the add
succeeds and a later step fails, the uncommitted edit session is left to
Shopify's own expiry and the error names the failing step.
"""

import logging
import math
from typing import Any

from shipping_relay.db.queries import (
    GET_ORDER_SHIPPING_LINES_QUERY,
    ORDER_EDIT_ADD_SHIPPING_LINE_MUTATION,
    ORDER_EDIT_BEGIN_MUTATION,
    ORDER_EDIT_COMMIT_MUTATION,
    ORDER_EDIT_REMOVE_SHIPPING_LINE_MUTATION,
)
from shipping_relay.domain.models import (
    EditMode,
    EditRequest,
    EditResult,
    Region,
    ShippingLine,
    TargetShippingLine,
)
from shipping_relay.services.shipping_lines.interfaces import ICommerceGateway
from shipping_relay.utils.error_handler import (
    InvalidPriceException,
    MissingCalculatedOrderException,
    OrderNotFoundException,
    RemoteUserErrorException,
)
from shipping_relay.utils.id_utils import graphql_to_rest_id

logger = logging.getLogger(__name__)

DEFAULT_STAFF_NOTE = "Normalized shipping line via Flow"

STEP_BEGIN = "orderEditBegin"
STEP_ADD = "orderEditAddShippingLine"
STEP_REMOVE = "orderEditRemoveShippingLine"
STEP_COMMIT = "orderEditCommit"


def parse_price(raw: Any) -> float | None:
    """
    Parse a price amount to a finite float.

    Returns:
        The float value, or None when the value is not a finite number
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def assert_no_user_errors(step: str, payload: dict[str, Any] | None) -> None:
    """
    Abort the sequence when a mutation payload carries userErrors.

    Raises:
        RemoteUserErrorException: Naming the step and the serialized errors
    """
    errors = (payload or {}).get("userErrors") or []
    if errors:
        logger.error(f"❌ {step} returned userErrors: {errors}")
        raise RemoteUserErrorException(step, errors)


class ShippingLineEditOrchestrator:
    """
    Orchestrates the shipping line normalization of one order.

    The gateway is injected via constructor; the orchestrator holds no
    per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        gateway: ICommerceGateway,
        allow_add_mode: bool = True,
        staff_note: str = DEFAULT_STAFF_NOTE,
    ):
        """
        Initialize orchestrator.

        Args:
            gateway: Authenticated Shopify GraphQL gateway
            allow_add_mode: Add a line when the order has none; when False only
                            replacement is supported
            staff_note: Annotation stored with the committed edit
        """
        self.gateway = gateway
        self.allow_add_mode = allow_add_mode
        self.staff_note = staff_note

    async def execute(self, region: Region, request: EditRequest) -> EditResult:
        """
        Run the edit sequence for a validated request.

        Args:
            region: Region resolved for the request's shop
            request: Validated edit request

        Returns:
            EditResult: Mode, order name, previous line and target line

        Raises:
            OrderNotFoundException: The order does not exist
            InvalidPriceException: Unparseable caller (400) or existing (500) price
            MissingCalculatedOrderException: orderEditBegin returned no session
            RemoteUserErrorException: A mutation returned userErrors
            GatewayException: Any transport/protocol failure
        """
        order_ref = graphql_to_rest_id(request.order_gid)
        logger.info(f"Starting shipping line edit for order {order_ref} on {request.shop_domain}")

        # Step 1: Fetch order and its current shipping line
        order = await self._fetch_order(region, request.order_gid)
        current = self._current_shipping_line(order)

        # Step 2: Mode and price
        mode, price = self._resolve_mode_and_price(current, request)
        target = TargetShippingLine(title=request.target_title, price=price)

        result = EditResult(
            mode=mode,
            shop_domain=request.shop_domain,
            order_name=order.get("name"),
            before=current,
            after=target,
            dry_run=request.dry_run,
        )

        # Step 3: Dry run, no mutation
        if request.dry_run:
            logger.info(f"🔍 Dry run for order {result.order_name}: {mode.value} -> '{target.title}' ({price})")
            return result

        # Step 4: Begin edit session
        calculated_order_id = await self._begin_edit(region, request.order_gid)

        # Step 5: Add new shipping line
        data = await self.gateway.call(
            region,
            ORDER_EDIT_ADD_SHIPPING_LINE_MUTATION,
            {"id": calculated_order_id, "title": target.title, "price": target.price},
        )
        assert_no_user_errors(STEP_ADD, data.get(STEP_ADD))

        # Step 6: Remove previous shipping line (replace only)
        if current is not None:
            data = await self.gateway.call(
                region,
                ORDER_EDIT_REMOVE_SHIPPING_LINE_MUTATION,
                {"id": calculated_order_id, "shippingLineId": current.id},
            )
            assert_no_user_errors(STEP_REMOVE, data.get(STEP_REMOVE))

        # Step 7: Commit
        data = await self.gateway.call(
            region,
            ORDER_EDIT_COMMIT_MUTATION,
            {"id": calculated_order_id, "staffNote": self.staff_note},
        )
        assert_no_user_errors(STEP_COMMIT, data.get(STEP_COMMIT))

        logger.info(
            f"✅ Shipping line {mode.value} committed for order {result.order_name}: "
            f"'{current.title if current else None}' -> '{target.title}' ({price})"
        )
        return result

    async def _fetch_order(self, region: Region, order_gid: str) -> dict[str, Any]:
        data = await self.gateway.call(region, GET_ORDER_SHIPPING_LINES_QUERY, {"id": order_gid})
        order = data.get("order")
        if not order:
            logger.warning(f"Order {order_gid} not found on {region.shop_domain}")
            raise OrderNotFoundException(order_gid)
        return order

    @staticmethod
    def _current_shipping_line(order: dict[str, Any]) -> ShippingLine | None:
        """
        First shipping line of the order, or None.

        Raises:
            InvalidPriceException: 500 when the existing amount is not a finite number
        """
        nodes = (order.get("shippingLines") or {}).get("nodes") or []
        if not nodes:
            return None

        node = nodes[0]
        shop_money = (node.get("originalPriceSet") or {}).get("shopMoney") or {}
        amount = shop_money.get("amount")
        price = parse_price(amount)
        if price is None:
            logger.error(f"Existing shipping line {node.get('id')} has an invalid price: {amount!r}")
            raise InvalidPriceException(amount, from_caller=False)

        return ShippingLine(
            id=node.get("id"),
            title=node.get("title"),
            price=price,
            currency_code=shop_money.get("currencyCode"),
        )

    def _resolve_mode_and_price(
        self, current: ShippingLine | None, request: EditRequest
    ) -> tuple[EditMode, float]:
        # Replace keeps the existing price; add uses the caller price or 0
        if current is not None:
            return EditMode.REPLACE, current.price

        if not self.allow_add_mode:
            raise OrderNotFoundException(request.order_gid, message="Order has no shipping line to replace")

        if request.target_price is None:
            return EditMode.ADD, 0.0

        price = parse_price(request.target_price)
        if price is None:
            raise InvalidPriceException(request.target_price, from_caller=True)
        return EditMode.ADD, price

    async def _begin_edit(self, region: Region, order_gid: str) -> str:
        data = await self.gateway.call(region, ORDER_EDIT_BEGIN_MUTATION, {"id": order_gid})
        payload = data.get(STEP_BEGIN)
        assert_no_user_errors(STEP_BEGIN, payload)

        calculated_order_id = ((payload or {}).get("calculatedOrder") or {}).get("id")
        if not calculated_order_id:
            raise MissingCalculatedOrderException(order_gid)
        return calculated_order_id


# Factory function to create orchestrator with all dependencies
def create_orchestrator(gateway: ICommerceGateway, settings) -> ShippingLineEditOrchestrator:
    """
    Factory function to create an orchestrator configured from settings.

    Args:
        gateway: Commerce gateway shared by all requests
        settings: Application settings (ALLOW_ADD_MODE, STAFF_NOTE)

    Returns:
        ShippingLineEditOrchestrator: Fully configured orchestrator
    """
    return ShippingLineEditOrchestrator(
        gateway=gateway,
        allow_add_mode=settings.ALLOW_ADD_MODE,
        staff_note=settings.STAFF_NOTE,
    )
