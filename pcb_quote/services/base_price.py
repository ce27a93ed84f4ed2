# pcb_quote/services/base_price.py
"""
Board base price, engineering fee and film fee.

The base price comes from one of two tables (1 oz class or heavier copper),
picked per layer count and area step, then adjusted for board thickness.
Engineering and film fees are one-off tooling charges that the pipeline adds
after every surcharge, so they are kept out of the handler registry.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from ..schemas.pcb import OrderSpecification
from .pricing_models import HandlerResult
from .price_tables import (
    DEFAULT_TABLES,
    ENG_FEE_MAX_AREA,
    ENG_FEE_MID_AREA,
    ENG_FEE_MIN_AREA,
    FILM_MIN_SINGLE_AREA,
    PACK_PRICE_MAX_AREA,
    PriceTables,
    nearest_layer_key,
)

logger = logging.getLogger(__name__)

NORMAL_THICKNESS_MM = 1.6
MAX_THICKNESS_MM = 3.2
THICKNESS_STEP_MM = 0.4


def is_heavy_copper(spec: OrderSpecification) -> bool:
    """True when either copper layer is heavier than 1 oz."""
    inner = spec.inner_copper_weight_oz or 0
    return spec.outer_copper_weight_oz > 1 or inner > 1


def _thickness_adjustment(
    spec: OrderSpecification, area: float, base: float
) -> Tuple[float, Optional[str], Optional[str]]:
    """Return (fee, detail key, note) for the board thickness, fee may be negative."""
    thickness = spec.board_thickness_mm
    layers = spec.layer_count
    billable = max(1, area)
    is_sample = area < 1

    if layers <= 2 and 0.2 <= thickness <= 0.4:
        if is_sample:
            return 300, "thickness_sample", "Thickness 0.2-0.4mm (1-2L) sample: +300 CNY/lot"
        fee = base * 0.5
        return fee, "thickness", f"Thickness {thickness}mm (1-2L): +50% base price = +{fee:.2f} CNY"

    if NORMAL_THICKNESS_MM < thickness <= MAX_THICKNESS_MM and (layers <= 2 or layers >= 4):
        # half steps round up
        step = math.floor((thickness - NORMAL_THICKNESS_MM) / THICKNESS_STEP_MM + 0.5)
        if step <= 0:
            return 0, None, None
        rate = 100 if layers <= 2 else 80
        fee = step * rate * billable
        return fee, "thickness", (
            f"Thickness {thickness}mm ({layers}L): +{step * rate} CNY/㎡ × {billable:.2f} = {fee:.2f} CNY"
        )

    if thickness > MAX_THICKNESS_MM:
        return 0, None, f"Thickness {thickness}mm exceeds {MAX_THICKNESS_MM}mm, manual evaluation required"

    if layers <= 2 and area > 5:
        if 0.6 <= thickness <= 1.0:
            fee = -15 * billable
            return fee, "thickness", f"Thickness {thickness}mm (1-2L): -15 CNY/㎡ × {billable:.2f} = {fee:.2f} CNY"
        if thickness == 1.2:
            fee = -10 * billable
            return fee, "thickness", f"Thickness 1.2mm (1-2L): -10 CNY/㎡ × {billable:.2f} = {fee:.2f} CNY"

    return 0, None, None


def base_price(
    spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES
) -> HandlerResult:
    """
    Price the bare board.

    Args:
        spec: The order specification
        area: Total board area in m2
        tables: Lookup tables to price against

    Returns:
        HandlerResult with ``basePrice`` (thickness adjustment folded in)
    """
    if area <= 0:
        return HandlerResult.empty()

    table = tables.base_price_2oz if is_heavy_copper(spec) else tables.base_price_1oz
    layer_key = nearest_layer_key(table, spec.layer_count)
    if layer_key is None:
        logger.warning(f"No base price table for {spec.layer_count} layers")
        return HandlerResult.note(
            "This layer count is not supported, please contact sales for manual evaluation"
        )

    pack_price, steps = table[layer_key]
    detail: Dict[str, float] = {}
    notes: List[str] = []

    if area <= PACK_PRICE_MAX_AREA:
        price = pack_price
        notes.append(f"Base price (package): {pack_price} CNY for area ≤ {PACK_PRICE_MAX_AREA}㎡")
    else:
        unit_price = next(unit for max_area, unit in steps if area <= max_area)
        price = unit_price * area
        notes.append(f"Base price: {unit_price} CNY/㎡ × {area:.2f} = {price:.2f} CNY")
    detail["basePrice"] = price

    fee, key, note = _thickness_adjustment(spec, area, price)
    if key:
        detail[key] = fee
    if note:
        notes.append(note)
    if fee:
        price += fee
        detail["basePrice"] = price

    logger.debug(f"Base price for {spec.layer_count}L (table {layer_key}L) at {area}m2: {price}")
    return HandlerResult(extra=price, detail=detail, notes=notes)


def engineering_fee(
    spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES
) -> HandlerResult:
    """One-off engineering fee; free up to 0.2 m2 and above 3 m2."""
    heavy = is_heavy_copper(spec)
    table = tables.engineering_fee_high_copper if heavy else tables.engineering_fee
    fees = table.get(spec.layer_count)
    if fees is None:
        return HandlerResult.note(
            "This layer count is not supported for engineering fee, please contact sales for manual evaluation"
        )

    suffix = " (copper >1oz)" if heavy else ""
    if area <= ENG_FEE_MIN_AREA:
        return HandlerResult.note(
            f"Engineering fee: area≤{ENG_FEE_MIN_AREA}㎡, no engineering fee (pack price only)"
        )
    if area <= ENG_FEE_MID_AREA:
        fee = fees[0]
        note = f"Engineering fee: {ENG_FEE_MIN_AREA}㎡<area≤{ENG_FEE_MID_AREA}㎡, engFee={fee}{suffix}"
    elif area <= ENG_FEE_MAX_AREA:
        fee = fees[1]
        note = f"Engineering fee: {ENG_FEE_MID_AREA}㎡<area≤{ENG_FEE_MAX_AREA}㎡, engFee={fee}{suffix}"
    else:
        return HandlerResult.note(f"Engineering fee: area>{ENG_FEE_MAX_AREA}㎡, engFee=0")

    return HandlerResult.fee("engFee", fee, note)


def film_fee(
    spec: OrderSpecification, single_area: float, tables: PriceTables = DEFAULT_TABLES
) -> HandlerResult:
    """Photo tooling charge, only for large single units."""
    sheets = tables.film_sheet_count(spec.layer_count)
    if single_area <= FILM_MIN_SINGLE_AREA:
        return HandlerResult.note(
            f"Film fee: single area {single_area:.3f}㎡ ≤ {FILM_MIN_SINGLE_AREA}㎡, no charge"
        )
    fee = round(single_area * sheets * tables.film_unit_price, 2)
    return HandlerResult.fee(
        "filmFee",
        fee,
        f"Film fee: {single_area:.3f}㎡ × {sheets} sheets × {tables.film_unit_price} = {fee} CNY",
    )
