"""
Modelos Pydantic para el endpoint de Shopify Flow.

Documentan el contrato HTTP en OpenAPI. La validación real del body la hace
RequestValidator, que produce los mensajes de error esperados por Flow.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EditShippingLinesBody(BaseModel):
    """Body enviado por la acción "Send HTTP request" de Flow."""

    model_config = ConfigDict(extra="allow")

    shopDomain: str = Field(..., description="Dominio myshopify.com de la tienda", examples=["acme-uk.myshopify.com"])
    orderGid: Optional[str] = Field(default=None, description="gid://shopify/Order/… (preferido)")
    orderId: Optional[str] = Field(default=None, description="ID numérico del pedido (fallback)")
    targetShippingTitle: str = Field(..., description="Título normalizado para el 3PL", examples=["DHL_PAKET::Standard"])
    targetShippingPrice: Optional[float] = Field(
        default=None, description="Precio a usar solo si el pedido no tiene línea de envío (por defecto 0)"
    )
    dryRun: bool = Field(default=False, description="true = solo vista previa, sin modificar el pedido")


class ShippingLineOut(BaseModel):
    """Línea de envío previa."""

    id: str
    title: str
    price: float


class TargetLineOut(BaseModel):
    """Línea de envío resultante."""

    title: str
    price: float


class EditShippingLinesResponse(BaseModel):
    """Respuesta exitosa de /flow/edit-shipping-lines."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    dryRun: Optional[bool] = None
    shopDomain: str
    orderName: Optional[str] = None
    mode: Literal["add", "replace"]
    from_: Optional[ShippingLineOut] = Field(default=None, alias="from")
    to: TargetLineOut


class ErrorResponse(BaseModel):
    """Respuesta de error; details solo con DEBUG_ERRORS."""

    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    """Respuesta de /health."""

    ok: bool = True
    shops: List[str]
    shopifyConfigured: Dict[str, bool]
    apiVersion: Optional[str] = None
