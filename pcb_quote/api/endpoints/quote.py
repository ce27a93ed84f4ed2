# pcb_quote/api/endpoints/quote.py

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from pcb_quote.core.config import settings
from pcb_quote.core.exceptions import raise_invalid_parameter
from pcb_quote.schemas.pcb import QuoteRequest, QuoteResponse, UrgentOptionsRequest
from pcb_quote.services.quantity_resolver import resolve
from pcb_quote.services.quote_service import QuoteService, quote_service
from pcb_quote.services.urgent_delivery import NotSupported, lookup_urgent_config, urgent_fee

logger = logging.getLogger(__name__)

router = APIRouter()


def get_quote_service(request: Request) -> QuoteService:
    """Service configured at start-up, or the default one."""
    return getattr(request.app.state, "quote_service", quote_service)


@router.get(
    "/health/",
    summary="Health Check",
    description="Check the health of the quotation service"
)
async def health_check(service: QuoteService = Depends(get_quote_service)):
    """Health check endpoint with the active price table and calendar."""
    return JSONResponse(content={
        "status": "healthy",
        "service": "pcb-quote-engine",
        "version": settings.API_VERSION,
        "table_version": service.config.table_version,
        "order_cutoff_hour": service.config.order_cutoff_hour,
        "handlers": len(service.engine.handlers),
    })


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Quote a PCB order",
    description="Price breakdown, production cycle and estimated finish date for one order specification."
)
async def create_quote(
    request: QuoteRequest,
    service: QuoteService = Depends(get_quote_service),
):
    """
    Quote one order. Monetary values are in the base currency unless an
    exchange rate is supplied, in which case every amount is converted.
    """
    if request.currency and request.exchange_rate is None:
        raise_invalid_parameter("currency", request.currency, "a currency label together with exchange_rate")

    quote = service.quote(
        request.spec,
        request.order_time,
        shipping_cost=request.shipping_cost,
        exchange_rate=request.exchange_rate,
        currency=request.currency,
    )
    return QuoteResponse(**quote.to_dict())


@router.post(
    "/urgent-options",
    summary="List urgent delivery options",
    description="Lead time reductions the urgent matrix offers for this specification, with their fees."
)
async def urgent_options(
    request: UrgentOptionsRequest,
    service: QuoteService = Depends(get_quote_service),
):
    spec = request.spec
    quantity = resolve(spec)
    area = quantity.total_area_m2
    config = lookup_urgent_config(spec, area, service.tables)

    if isinstance(config, NotSupported):
        logger.info(f"No urgent options for {config.key}: {config.reason}")
        return JSONResponse(content={
            "supported": False,
            "reason": config.reason,
            "total_area_m2": area,
            "options": [],
        })

    options = []
    for option in config.options:
        fee_info = urgent_fee(spec, area, option.reduce_days, service.tables)
        options.append({
            "reduce_days": option.reduce_days,
            "fee": fee_info.fee,
            "fee_basis": fee_info.fee_basis,
            "description": fee_info.description,
        })

    return JSONResponse(content={
        "supported": True,
        "total_area_m2": area,
        "max_reduce_days": config.max_reduce_days,
        "currency": settings.BASE_CURRENCY,
        "options": options,
    })
