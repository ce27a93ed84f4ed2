# pcb_quote/services/urgent_delivery.py
"""
Urgent delivery: which lead time reductions a configuration supports and
what they cost.

Lookups return either an ``UrgentConfig`` or an explicit ``NotSupported``;
callers must handle both. The pricing handler never refuses an urgent order:
configurations without matrix options are priced with a coarse fallback.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

from ..schemas.pcb import OrderSpecification
from .pricing_models import HandlerResult, UrgentFee, UrgentOption
from .price_tables import DEFAULT_TABLES, PriceTables, area_bracket

logger = logging.getLogger(__name__)

FALLBACK_SAMPLE_FEE = 100
FALLBACK_RATE_PER_M2 = 50
FALLBACK_MIN_FEE = 100
FALLBACK_REDUCE_DAYS = 2

UrgentKey = Tuple[int, str, str]


@dataclass(frozen=True)
class UrgentConfig:
    key: UrgentKey
    options: Tuple[UrgentOption, ...]

    @property
    def max_reduce_days(self) -> int:
        return max(option.reduce_days for option in self.options)

    def option_for(self, reduce_days: int):
        for option in self.options:
            if option.reduce_days == reduce_days:
                return option
        return None


@dataclass(frozen=True)
class NotSupported:
    key: UrgentKey
    reason: str


def copper_class(spec: OrderSpecification) -> str:
    """Urgent matrix copper class from the heavier of outer and inner copper."""
    heaviest = spec.max_copper_oz
    if heaviest >= 4:
        return "4oz"
    if heaviest >= 3:
        return "3oz"
    if heaviest >= 2:
        return "2oz"
    return "1oz"


def urgent_key(spec: OrderSpecification, area: float) -> UrgentKey:
    return (spec.layer_count, copper_class(spec), area_bracket(area))


def lookup_urgent_config(
    spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES
) -> Union[UrgentConfig, NotSupported]:
    """Find the urgent options for this layer count, copper class and area bracket."""
    key = urgent_key(spec, area)
    options = tables.urgent_matrix.get(key)
    if options is None:
        return NotSupported(key, "no urgent delivery entry for this configuration")
    if not options:
        return NotSupported(key, "urgent delivery not available for this configuration")
    return UrgentConfig(key, options)


def available_urgent_options(
    spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES
) -> List[UrgentOption]:
    config = lookup_urgent_config(spec, area, tables)
    if isinstance(config, NotSupported):
        return []
    return list(config.options)


def is_urgent_supported(spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES) -> bool:
    return isinstance(lookup_urgent_config(spec, area, tables), UrgentConfig)


def max_reduce_days(spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES) -> int:
    config = lookup_urgent_config(spec, area, tables)
    if isinstance(config, NotSupported):
        return 0
    return config.max_reduce_days


def urgent_fee(
    spec: OrderSpecification, area: float, reduce_days: int, tables: PriceTables = DEFAULT_TABLES
) -> UrgentFee:
    """
    Fee for cutting ``reduce_days`` days from the lead time.

    Args:
        spec: The order specification
        area: Total board area in m2
        reduce_days: Requested reduction in days

    Returns:
        UrgentFee; ``supported`` is False when the matrix has no such option
    """
    config = lookup_urgent_config(spec, area, tables)
    if isinstance(config, NotSupported):
        return UrgentFee(fee=0, fee_basis="fixed", description=config.reason, supported=False)

    option = config.option_for(reduce_days)
    if option is None:
        return UrgentFee(
            fee=0,
            fee_basis="fixed",
            description=f"reducing {reduce_days} days is not supported for this configuration",
            supported=False,
        )

    if option.per_area:
        fee = option.fee * area
        description = f"-{reduce_days} days: {option.fee} CNY/㎡ × {area:.2f}㎡ = {fee:.0f} CNY"
    else:
        fee = option.fee
        description = f"-{reduce_days} days: {fee} CNY"
    return UrgentFee(fee=fee, fee_basis=option.fee_basis, description=description, supported=True)


@dataclass(frozen=True)
class UrgentDecision:
    """Days taken off the production cycle and the fee charged for them."""
    reduce_days: int = 0
    fee: float = 0
    notes: Tuple[str, ...] = ()


NO_URGENT = UrgentDecision()


def _fallback_decision(area: float, *lead_notes: str) -> UrgentDecision:
    if area < 1:
        fee = FALLBACK_SAMPLE_FEE
        note = f"Urgent delivery: sample +{fee} CNY/lot (fallback pricing)"
    else:
        fee = max(FALLBACK_MIN_FEE, FALLBACK_RATE_PER_M2 * area)
        note = (
            f"Urgent delivery: +{FALLBACK_RATE_PER_M2} CNY/㎡ × {area:.2f} = {FALLBACK_RATE_PER_M2 * area:.2f} CNY, "
            f"minimum {FALLBACK_MIN_FEE} CNY, actual fee: {fee:.2f} CNY (fallback pricing)"
        )
    return UrgentDecision(
        reduce_days=FALLBACK_REDUCE_DAYS,
        fee=fee,
        notes=lead_notes + (
            note,
            f"Urgent delivery: lead time reduced by {FALLBACK_REDUCE_DAYS} days (minimum 1 day)",
        ),
    )


def resolve_urgent(
    spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES
) -> UrgentDecision:
    """
    Decide what an urgent order gets. The pricing handler and the production
    cycle both read this decision, so days are only taken off when paid for.

    Args:
        spec: The order specification
        area: Total board area in m2
        tables: Lookup tables to price against

    Returns:
        UrgentDecision; empty for standard delivery or an empty order
    """
    if not spec.is_urgent or area <= 0:
        return NO_URGENT

    requested = spec.urgent_reduce_days
    if requested <= 0:
        return UrgentDecision(notes=(
            "Urgent delivery requested without a lead time reduction, no fee charged, "
            "manual evaluation required",
        ))

    config = lookup_urgent_config(spec, area, tables)
    if isinstance(config, NotSupported):
        logger.warning(f"Urgent fallback pricing for {config.key}: {config.reason}")
        return _fallback_decision(area)

    fee_info = urgent_fee(spec, area, requested, tables)
    if not fee_info.supported:
        logger.warning(f"Urgent fallback pricing for {config.key}: no {requested} day option")
        return _fallback_decision(
            area, f"Urgent delivery: reducing {requested} days is not supported for this configuration"
        )

    plural = "s" if requested > 1 else ""
    return UrgentDecision(
        reduce_days=requested,
        fee=fee_info.fee,
        notes=(
            f"Urgent delivery: {fee_info.description}",
            f"Lead time reduced by {requested} day{plural}",
        ),
    )


def urgent_delivery_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Pricing handler for the urgent delivery option."""
    decision = resolve_urgent(spec, area, tables)
    if not decision.fee:
        return HandlerResult(notes=list(decision.notes))
    return HandlerResult.fee("urgentDelivery", decision.fee, *decision.notes)
