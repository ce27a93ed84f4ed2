# pcb_quote/services/production_cycle.py
"""
Production cycle (lead time) calculator.

Base days come from a layer/area table; feature extras are multiplied by an
area factor; urgent delivery and the order cut-off hour adjust the total.
Every adjustment leaves a customer-facing reason.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from pcb_quote.schemas.pcb import (
    DeliveryMode,
    HdiStep,
    MaterialType,
    OrderSpecification,
    ProductReport,
    QualityInspection,
    SurfaceFinish,
)
from pcb_quote.services.config_loader import DEFAULT_ENGINE_CONFIG, EngineConfig
from pcb_quote.services.price_tables import (
    DEFAULT_TABLES,
    LEAD_TIME_AREA_STEPS,
    LEAD_TIME_MAX_DAYS,
    PriceTables,
    nearest_layer_key,
)
from pcb_quote.services.pricing_models import LeadTimeResult, ResolvedQuantity
from pcb_quote.services.quantity_resolver import resolve
from pcb_quote.services.urgent_delivery import resolve_urgent
from pcb_quote.utils.enum_helpers import get_trace_value

logger = logging.getLogger(__name__)

SURFACE_FINISH_DAYS = {
    SurfaceFinish.enig: 1,
    SurfaceFinish.immersion_silver: 2,
    SurfaceFinish.immersion_tin: 2,
}

HDI_DAYS = {HdiStep.step_1: 1, HdiStep.step_2: 2, HdiStep.step_3: 2}


def area_factor(area: float) -> int:
    """Multiplier for feature extra days: whole m2, at least 1."""
    return math.ceil(max(1, area))


def uses_high_copper_table(spec: OrderSpecification) -> bool:
    if spec.layer_count >= 4:
        inner = spec.inner_copper_weight_oz or 1.0
        return spec.outer_copper_weight_oz > 1 or inner > 1
    return spec.outer_copper_weight_oz > 1


def base_days(spec: OrderSpecification, area: float, tables: PriceTables = DEFAULT_TABLES) -> Tuple[int, bool]:
    """Table lead time and whether it was clamped to the evaluation ceiling."""
    table = tables.lead_time_high_copper if uses_high_copper_table(spec) else tables.lead_time_normal
    layer_key = nearest_layer_key(table, spec.layer_count) or 2
    days = table[layer_key][-1]
    for max_area, step_days in zip(LEAD_TIME_AREA_STEPS, table[layer_key]):
        if area <= max_area:
            days = step_days
            break
    if days >= LEAD_TIME_MAX_DAYS:
        return LEAD_TIME_MAX_DAYS, True
    return days, False


def _feature_days(spec: OrderSpecification) -> List[Tuple[int, str]]:
    """(days per area unit, label) for every feature that slows production."""
    features = []
    if spec.material_type != MaterialType.fr4:
        features.append((1, f"Material {spec.material_type.value}"))

    finish_days = SURFACE_FINISH_DAYS.get(spec.surface_finish, 0)
    if finish_days:
        features.append((finish_days, f"Surface finish {spec.surface_finish.value}"))

    trace = get_trace_value(spec.min_trace_spacing)
    if 0 < trace <= 4:
        features.append((1, "Min trace/spacing ≤4mil"))
    if spec.min_hole_diameter_mm <= 0.2:
        features.append((1, "Min hole ≤0.2mm"))

    hdi_days = HDI_DAYS.get(spec.hdi_steps, 0)
    if hdi_days:
        features.append((hdi_days, f"HDI {spec.hdi_steps.value}"))

    if spec.gold_fingers:
        features.append((1, "Gold fingers"))
    if spec.impedance_control:
        features.append((1, "Impedance control"))
    if spec.edge_plating:
        features.append((1, "Edge plating"))
    if spec.castellated_holes:
        features.append((1, "Castellated holes"))
    if spec.smt_assembly:
        features.append((2, "SMT assembly"))
    if spec.quality_inspection == QualityInspection.full:
        features.append((1, "Full quality inspection"))
    if any(report != ProductReport.none for report in spec.product_reports):
        features.append((1, "Product report"))
    return features


def calc_lead_time(
    spec: OrderSpecification,
    order_time: datetime,
    delivery_mode: Optional[DeliveryMode] = None,
    quantity: Optional[ResolvedQuantity] = None,
    tables: PriceTables = DEFAULT_TABLES,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> LeadTimeResult:
    """
    Compute the production cycle in days.

    Args:
        spec: The order specification
        order_time: Reference timestamp of the order, local time
        delivery_mode: Overrides ``spec.delivery_mode`` when given
        quantity: Pre-resolved quantity, resolved from ``spec`` when omitted
        tables: Lead time tables
        config: Engine configuration (cut-off hour)

    Returns:
        LeadTimeResult with at least 1 day and the ordered reasons
    """
    quantity = quantity or resolve(spec)
    if quantity.is_empty:
        return LeadTimeResult(
            cycle_days=1,
            reasons=["Quantity is required to calculate production cycle, manual evaluation required"],
        )

    area = quantity.total_area_m2
    factor = area_factor(area)
    reasons: List[str] = []

    # 1. Table lead time
    days, clamped = base_days(spec, area, tables)
    if clamped:
        reasons.append(f"Lead time ≥{LEAD_TIME_MAX_DAYS} days requires evaluation, capped at {LEAD_TIME_MAX_DAYS} days")
    reasons.append(f"Base delivery days: {days}")
    reasons.append(f"Area factor: {factor}x")

    # 2. Thick copper
    heaviest = spec.max_copper_oz
    extra = 0
    if heaviest >= 3:
        if area >= 1:
            reasons.append(
                f"Batch thick copper (≥3oz) requires delivery evaluation, set to max {LEAD_TIME_MAX_DAYS} days"
            )
            logger.debug(f"Thick copper batch order ({heaviest}oz, {area}m2) forced to {LEAD_TIME_MAX_DAYS} days")
            return LeadTimeResult(cycle_days=LEAD_TIME_MAX_DAYS, reasons=reasons)
        copper_days = 3 if heaviest >= 4 else 2
        extra += copper_days
        reasons.append(f"Sample {heaviest:g}oz copper: +{copper_days} days")

    # 3. Feature extras
    for feature_days, label in _feature_days(spec):
        add = feature_days * factor
        extra += add
        reasons.append(f"{label}: +{feature_days} day × {factor} = +{add} days")

    total = days + extra

    # 4. Urgent delivery
    mode = delivery_mode or spec.delivery_mode
    if mode == DeliveryMode.urgent:
        if not spec.is_urgent:
            spec = spec.model_copy(update={"delivery_mode": mode})
        decision = resolve_urgent(spec, area, tables)
        actual = min(decision.reduce_days, total - 1)
        if actual > 0:
            total -= actual
            reasons.append(f"Urgent: -{actual} days (requested: {spec.urgent_reduce_days} days)")
        elif decision.reduce_days == 0:
            reasons.append("Urgent: no lead time reduction requested, manual evaluation required")

    # 5. Cut-off hour
    if order_time.hour >= config.order_cutoff_hour:
        total += 1
        reasons.append(f"Order after {config.order_cutoff_hour}:00: +1 day")

    total = max(1, total)
    logger.debug(f"Lead time for {spec.layer_count}L at {area}m2: {total} days")
    return LeadTimeResult(cycle_days=total, reasons=reasons)
