# pcb_quote/services/quantity_resolver.py

import logging

from ..schemas.pcb import OrderSpecification, ShipmentMode
from .pricing_models import ResolvedQuantity

logger = logging.getLogger(__name__)

MM2_PER_M2 = 1_000_000
AREA_DECIMALS = 4

EMPTY_QUANTITY = ResolvedQuantity(total_count=0, single_area_m2=0.0, total_area_m2=0.0)


def single_board_area_m2(spec: OrderSpecification) -> float:
    """Area of one board unit in m2, rounded to 4 decimals; 0 when a dimension is missing."""
    length = spec.single_board_length_mm
    width = spec.single_board_width_mm
    if not length or not width:
        return 0.0
    return round(length * width / MM2_PER_M2, AREA_DECIMALS)


def resolve(spec: OrderSpecification) -> ResolvedQuantity:
    """
    Derive piece count and board areas from the shipment mode.

    Args:
        spec: The order specification

    Returns:
        ResolvedQuantity, all zeros when dimensions or counts are missing
    """
    single_area = single_board_area_m2(spec)

    if spec.shipment_mode == ShipmentMode.single:
        total_count = spec.single_board_count
        unit_count = total_count
    elif spec.shipment_mode == ShipmentMode.panel_by_gerber:
        total_count = spec.panel_rows * spec.panel_columns * spec.panel_set_count
        unit_count = total_count
    else:
        # the platform fixes the panel layout, customers order whole panels
        total_count = spec.panel_set_count
        unit_count = spec.panel_rows * spec.panel_columns * spec.panel_set_count

    if single_area <= 0 or total_count <= 0:
        logger.debug(
            f"Insufficient quantity data: mode={spec.shipment_mode.value}, "
            f"single_area={single_area}, count={total_count}"
        )
        return EMPTY_QUANTITY

    total_area = round(single_area * unit_count, AREA_DECIMALS)
    logger.debug(f"Resolved quantity: count={total_count}, single={single_area}m2, total={total_area}m2")
    return ResolvedQuantity(
        total_count=total_count,
        single_area_m2=single_area,
        total_area_m2=total_area,
    )
