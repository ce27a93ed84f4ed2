# pcb_quote/services/quote_service.py

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from pcb_quote.schemas.pcb import OrderSpecification
from pcb_quote.services.config_loader import DEFAULT_ENGINE_CONFIG, EngineConfig
from pcb_quote.services.delivery_date import project_finish_date
from pcb_quote.services.price_tables import DEFAULT_TABLES, PriceTables
from pcb_quote.services.pricing_engine import PricingEngine
from pcb_quote.services.pricing_models import LeadTimeResult, PriceBreakdown, ResolvedQuantity
from pcb_quote.services.production_cycle import calc_lead_time
from pcb_quote.services.quantity_resolver import resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    """Price, lead time and finish date for one order."""
    price_breakdown: PriceBreakdown
    lead_time: LeadTimeResult
    estimated_finish_date: date
    quantity: ResolvedQuantity
    table_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_breakdown": self.price_breakdown.to_dict(),
            "lead_time": self.lead_time.to_dict(),
            "estimated_finish_date": self.estimated_finish_date.isoformat(),
            "currency": self.price_breakdown.currency,
            "total_count": self.quantity.total_count,
            "total_area_m2": self.quantity.total_area_m2,
            "table_version": self.table_version,
        }


class QuoteService:
    """Combines the pricing engine, the production cycle and the calendar into one quote."""

    def __init__(
        self,
        engine: Optional[PricingEngine] = None,
        tables: PriceTables = DEFAULT_TABLES,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ):
        self.tables = tables
        self.engine = engine or PricingEngine(tables=tables)
        self.config = config

    def quote(
        self,
        spec: OrderSpecification,
        order_time: datetime,
        shipping_cost: Optional[float] = None,
        exchange_rate: Optional[float] = None,
        currency: Optional[str] = None,
    ) -> Quote:
        """
        Build a complete quote.

        Args:
            spec: The order specification
            order_time: Reference timestamp of the order, local time
            shipping_cost: Shipping cost already computed by the caller, base currency
            exchange_rate: Applied uniformly to the total and every detail entry
            currency: Label of the converted currency

        Returns:
            Quote ready to serialize
        """
        quantity = resolve(spec)

        breakdown = self.engine.calculate(spec, quantity)
        breakdown = breakdown.with_shipping(shipping_cost)
        breakdown = breakdown.convert(exchange_rate, currency)

        lead_time = calc_lead_time(spec, order_time, quantity=quantity, tables=self.tables, config=self.config)
        # the cycle already carries the cut-off day
        projection = project_finish_date(order_time, lead_time.cycle_days, self.config, apply_cutoff=False)

        logger.info(
            f"Quote: {breakdown.total_extra_price:.2f} {breakdown.currency}, "
            f"{lead_time.cycle_days} days, finish {projection.finish_date.isoformat()}"
        )
        return Quote(
            price_breakdown=breakdown,
            lead_time=lead_time,
            estimated_finish_date=projection.finish_date,
            quantity=quantity,
            table_version=self.config.table_version,
        )


quote_service = QuoteService()
