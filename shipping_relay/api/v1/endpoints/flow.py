"""
Endpoint para Shopify Flow: normalización de la línea de envío.

Flow (trigger "Order created") llama a POST /flow/edit-shipping-lines con el
dominio de la tienda y el pedido; el token de la Admin API se resuelve del
lado del servidor según shopDomain, Flow nunca lo envía.

Modos:
- REPLACE: el pedido ya tiene línea de envío. Se agrega una nueva con
  targetShippingTitle y el mismo precio, y se elimina la anterior.
- ADD: el pedido no tiene línea de envío. Se agrega una con targetShippingTitle
  y targetShippingPrice (0 si no se envía).

dryRun=true devuelve el modo y el precio calculados sin modificar el pedido.
El "code" de la línea de envío no se modifica: el 3PL debe mapear por título
(formato recomendado CODE::Nombre).
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from shipping_relay.api.v1.schemas import EditShippingLinesBody, EditShippingLinesResponse, ErrorResponse
from shipping_relay.core.config import Settings
from shipping_relay.services.shipping_lines.orchestrator import ShippingLineEditOrchestrator
from shipping_relay.services.shipping_lines.validators import RequestValidator
from shipping_relay.utils.error_handler import PayloadTooLargeException, ValidationException

logger = logging.getLogger(__name__)

# Crear router
router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_request_validator(request: Request) -> RequestValidator:
    return request.app.state.request_validator


def get_orchestrator(request: Request) -> ShippingLineEditOrchestrator:
    return request.app.state.orchestrator


async def read_json_body(request: Request, max_bytes: int) -> Dict[str, Any]:
    """
    Lee el body como objeto JSON respetando el límite de tamaño.

    Args:
        request: Request de FastAPI
        max_bytes: Tamaño máximo aceptado

    Returns:
        Dict: Body parseado ({} si está vacío)

    Raises:
        PayloadTooLargeException: Body por encima del límite
        ValidationException: Body que no es un objeto JSON
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLargeException(int(declared), max_bytes)

    # Sin Content-Length (chunked) el límite se aplica mientras se lee
    buffer = bytearray()
    async for chunk in request.stream():
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise PayloadTooLargeException(len(buffer), max_bytes)
    raw = bytes(buffer)

    if not raw.strip():
        return {}

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise ValidationException("Invalid JSON body", field="body", invalid_value=str(e)) from e

    if not isinstance(payload, dict):
        raise ValidationException("Invalid JSON body", field="body", invalid_value=type(payload).__name__)
    return payload


@router.post(
    "/edit-shipping-lines",
    status_code=status.HTTP_200_OK,
    summary="Normalize the shipping line of an order",
    responses={
        200: {"model": EditShippingLinesResponse},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": EditShippingLinesBody.model_json_schema()}},
        }
    },
)
async def edit_shipping_lines(
    request: Request,
    x_flow_secret: Optional[str] = Header(default=None, alias="X-Flow-Secret"),
    settings: Settings = Depends(get_app_settings),
    validator: RequestValidator = Depends(get_request_validator),
    orchestrator: ShippingLineEditOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """
    Reemplaza o agrega la línea de envío del pedido indicado.

    Args:
        request: Request HTTP con el body de Flow
        x_flow_secret: Secreto compartido (solo si la región lo tiene configurado)

    Returns:
        JSONResponse: {ok, dryRun?, shopDomain, orderName, mode, from, to}
    """
    body = await read_json_body(request, settings.MAX_BODY_BYTES)

    # Validación completa antes de cualquier llamada a Shopify
    region, edit_request = validator.validate(body, x_flow_secret)

    result = await orchestrator.execute(region, edit_request)

    return JSONResponse(status_code=200, content=result.to_response())
