# Quotation services
from .pricing_engine import PricingEngine, pricing_engine
from .production_cycle import calc_lead_time
from .delivery_date import project_finish_date
from .quote_service import Quote, QuoteService, quote_service

__all__ = [
    "PricingEngine",
    "pricing_engine",
    "calc_lead_time",
    "project_finish_date",
    "Quote",
    "QuoteService",
    "quote_service",
]
