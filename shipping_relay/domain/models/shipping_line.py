"""
Shipping line domain models.

Describe the current shipping line of an order, the edit requested by Flow
and the outcome returned to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EditMode(str, Enum):
    """How the target shipping line is applied to the order."""

    ADD = "add"
    REPLACE = "replace"


@dataclass(frozen=True)
class ShippingLine:
    """
    Shipping line currently present on the order.

    Attributes:
        id: Shopify shipping line global ID
        title: Shipping line title
        price: Original price amount parsed to float
        currency_code: Shop currency of the price
    """

    id: str
    title: str
    price: float
    currency_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "price": self.price}


@dataclass(frozen=True)
class TargetShippingLine:
    """Shipping line the order ends up with."""

    title: str
    price: float

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "price": self.price}


@dataclass(frozen=True)
class EditRequest:
    """
    Validated edit request.

    Attributes:
        shop_domain: Storefront domain the order belongs to
        order_gid: Canonical order global ID
        target_title: Title of the new shipping line (sent as provided)
        target_price: Raw caller price, only used when the order has no shipping line
        dry_run: Preview only, no mutation is sent
    """

    shop_domain: str
    order_gid: str
    target_title: str
    target_price: Any = None
    dry_run: bool = False


@dataclass(frozen=True)
class EditResult:
    """Outcome of a shipping line edit (or of its preview)."""

    mode: EditMode
    shop_domain: str
    order_name: str | None
    before: ShippingLine | None
    after: TargetShippingLine
    dry_run: bool = False

    def to_response(self) -> dict[str, Any]:
        """
        Render the JSON body returned to Flow.

        Returns:
            dict: {ok, dryRun?, shopDomain, orderName, mode, from, to}
        """
        body: dict[str, Any] = {"ok": True}
        if self.dry_run:
            body["dryRun"] = True
        body.update(
            {
                "shopDomain": self.shop_domain,
                "orderName": self.order_name,
                "mode": self.mode.value,
                "from": self.before.to_dict() if self.before else None,
                "to": self.after.to_dict(),
            }
        )
        return body
