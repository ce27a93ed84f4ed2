# pcb_quote/services/pricing_engine.py

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from pcb_quote.schemas.pcb import OrderSpecification
from pcb_quote.services.base_price import engineering_fee, film_fee
from pcb_quote.services.price_handlers import DEFAULT_HANDLERS, Handler
from pcb_quote.services.price_tables import DEFAULT_TABLES, PriceTables
from pcb_quote.services.pricing_models import HandlerResult, PriceBreakdown, ResolvedQuantity
from pcb_quote.services.quantity_resolver import resolve
from pcb_quote.core.exceptions import raise_pricing_error

logger = logging.getLogger(__name__)

ZERO_QUANTITY_NOTE = "Quantity is 0, no price calculated."

# (designs below, uplift) for orders that accept X-out boards
CROSS_OUT_STEPS = ((10, 0.1), (20, 0.2), (30, 0.3))


class Aggregator:
    """
    Running totals for handler results.

    ``extra`` and ``detail`` are tracked in parallel: a handler may add to
    the total without a matching detail entry, so the total is never
    recomputed from ``detail``.
    """

    def __init__(self):
        self.extra = 0.0
        self.detail: Dict[str, float] = {}
        self.notes: List[str] = []

    def add(self, result: HandlerResult) -> None:
        self.extra += result.extra or 0
        # later handlers overwrite earlier keys
        self.detail.update(result.detail)
        self.notes.extend(result.notes)

    def breakdown(self) -> PriceBreakdown:
        return PriceBreakdown(
            total_extra_price=self.extra,
            detail=dict(self.detail),
            notes=list(self.notes),
        )


def cross_out_uplift(design_count: int) -> Tuple[float, Optional[str]]:
    """Percentage added to the process price when X-out boards are accepted."""
    for limit, percent in CROSS_OUT_STEPS:
        if design_count < limit:
            return percent, (
                f"Cross-outs accepted: {design_count} design(s), +{percent:.0%} on process price "
                f"(excludes engineering/film fee)"
            )
    return 0.0, None


class PricingEngine:
    """
    Runs the surcharge handlers over one order and aggregates the result.
    Tables and handlers are injected so alternate rule sets can be priced
    side by side.
    """

    def __init__(
        self,
        tables: PriceTables = DEFAULT_TABLES,
        handlers: Sequence[Tuple[str, Handler]] = DEFAULT_HANDLERS,
    ):
        self.tables = tables
        self.handlers = tuple(handlers)

        logger.info(
            f"PricingEngine initialized with {len(self.handlers)} handlers, tables {tables.version}"
        )

    def calculate(self, spec: OrderSpecification, quantity: Optional[ResolvedQuantity] = None) -> PriceBreakdown:
        """
        Price one order.

        Args:
            spec: The order specification
            quantity: Pre-resolved quantity, resolved from ``spec`` when omitted

        Returns:
            PriceBreakdown in the base currency
        """
        # 1. Resolve count and area
        quantity = quantity or resolve(spec)
        if quantity.total_count <= 0:
            return PriceBreakdown(total_extra_price=0.0, detail={}, notes=[ZERO_QUANTITY_NOTE])

        area = quantity.total_area_m2
        aggregator = Aggregator()

        # 2. Run every handler in registration order
        for name, handler in self.handlers:
            try:
                result = handler(spec, area, quantity.total_count, self.tables)
            except Exception as e:
                logger.error(f"Price handler '{name}' failed: {e}")
                raise_pricing_error(
                    "Price calculation failed",
                    technical_details=f"{name}: {e}",
                    context={"handler": name},
                )
            logger.debug(f"Handler {name}: extra={result.extra}, detail={result.detail}")
            aggregator.add(result)

        # 3. Cross-outs uplift on the process price only
        if spec.cross_outs_accepted:
            percent, note = cross_out_uplift(spec.different_design_count)
            if percent:
                uplift = aggregator.extra * percent
                aggregator.add(HandlerResult.fee("crossOuts", uplift, note))

        # 4. One-off tooling fees, never uplifted
        aggregator.add(engineering_fee(spec, area, self.tables))
        aggregator.add(film_fee(spec, quantity.single_area_m2, self.tables))

        breakdown = aggregator.breakdown()
        logger.info(
            f"Price calculated: {breakdown.total_extra_price:.2f} CNY for {quantity.total_count} pcs "
            f"({area}m2), needs_review={breakdown.needs_review}"
        )
        return breakdown


pricing_engine = PricingEngine()
