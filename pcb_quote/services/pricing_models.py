# pcb_quote/services/pricing_models.py

from dataclasses import dataclass, field, replace
from typing import Dict, Any, Iterable, List, Optional, Tuple

# A note containing any of these words means a human has to look at the quote.
REVIEW_MARKERS: Tuple[str, ...] = ("manual", "not supported", "contact sales", "evaluation")

SHIPPING_COST_KEY = "shippingCost"


def has_review_marker(notes: Iterable[str]) -> bool:
    """True when any note asks for manual review."""
    for note in notes:
        lowered = note.lower()
        if any(marker in lowered for marker in REVIEW_MARKERS):
            return True
    return False


@dataclass(frozen=True)
class ResolvedQuantity:
    """Board count and areas derived from the order dimensions."""
    total_count: int
    single_area_m2: float
    total_area_m2: float

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0 or self.total_area_m2 <= 0

    @property
    def is_sample(self) -> bool:
        return self.total_area_m2 < 1


@dataclass(frozen=True)
class HandlerResult:
    """Contribution of a single surcharge handler."""
    extra: float = 0.0
    detail: Dict[str, float] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "HandlerResult":
        return cls()

    @classmethod
    def note(cls, message: str) -> "HandlerResult":
        return cls(notes=[message])

    @classmethod
    def fee(cls, key: str, amount: float, *notes: str) -> "HandlerResult":
        return cls(extra=amount, detail={key: amount}, notes=list(notes))


@dataclass(frozen=True)
class PriceBreakdown:
    """Itemised price of one order in the computation currency."""
    total_extra_price: float
    detail: Dict[str, float] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)
    currency: str = "CNY"

    @property
    def needs_review(self) -> bool:
        return has_review_marker(self.notes)

    def with_shipping(self, cost: Optional[float]) -> "PriceBreakdown":
        """Add an externally computed shipping cost to the breakdown."""
        if not cost:
            return self
        detail = dict(self.detail)
        detail[SHIPPING_COST_KEY] = cost
        return replace(self, total_extra_price=self.total_extra_price + cost, detail=detail)

    def convert(self, rate: Optional[float], currency: Optional[str] = None) -> "PriceBreakdown":
        """Multiply every amount by ``rate`` to present the quote in ``currency``."""
        if rate is None:
            return self
        detail = {key: value * rate for key, value in self.detail.items()}
        return replace(
            self,
            total_extra_price=self.total_extra_price * rate,
            detail=detail,
            currency=currency or self.currency,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_extra_price": self.total_extra_price,
            "detail": dict(self.detail),
            "notes": list(self.notes),
            "needs_review": self.needs_review,
        }


@dataclass(frozen=True)
class UrgentOption:
    """One row of the urgent matrix: reduce lead time by ``reduce_days`` for ``fee``."""
    reduce_days: int
    fee: float
    per_area: bool

    @property
    def fee_basis(self) -> str:
        return "per_m2" if self.per_area else "fixed"


@dataclass(frozen=True)
class UrgentFee:
    fee: float
    fee_basis: str
    description: str
    supported: bool


@dataclass(frozen=True)
class LeadTimeResult:
    """Production cycle in days with the reason behind every adjustment."""
    cycle_days: int
    reasons: List[str] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        return has_review_marker(self.reasons)

    def to_dict(self) -> Dict[str, Any]:
        return {"cycle_days": self.cycle_days, "reasons": list(self.reasons)}
