# pcb_quote/services/price_handlers.py
"""
Surcharge handler catalog.

Every handler has the signature ``(spec, area, total_count, tables)`` and
returns a HandlerResult. Handlers are pure and independent; the pricing
engine runs all of them in ``DEFAULT_HANDLERS`` order and merges the results.

"Sample" means a total area below 1 m2: most surcharges charge a flat
per-lot price for samples and a per-m2 rate for batches, often billed on at
least 1 m2.
"""

import functools
import logging
import math
from typing import Callable, Tuple

from ..schemas.pcb import (
    EdgeCover,
    EnigThickness,
    MaskCover,
    OrderSpecification,
    ProductReport,
    ShipmentMode,
    SolderMaskColor,
    SurfaceFinish,
    TestMethod,
    TgClass,
)
from ..utils.enum_helpers import format_oz, get_trace_value
from .base_price import base_price
from .pricing_models import HandlerResult
from .price_tables import DEFAULT_TABLES, PriceTables
from .urgent_delivery import urgent_delivery_handler

logger = logging.getLogger(__name__)

SAMPLE_AREA_LIMIT = 1.0

Handler = Callable[[OrderSpecification, float, int, PriceTables], HandlerResult]


def is_sample(area: float) -> bool:
    return area < SAMPLE_AREA_LIMIT


def billable_area(area: float) -> float:
    """Orders under 1 m2 are billed as 1 m2."""
    return max(1, area)


def priced_by_area(handler: Handler) -> Handler:
    """An order without board area pays nothing for this surcharge."""
    @functools.wraps(handler)
    def wrapper(spec, area, total_count, tables=DEFAULT_TABLES):
        if area <= 0:
            return HandlerResult.empty()
        return handler(spec, area, total_count, tables)
    return wrapper


def _sample_or_batch(key: str, label: str, area: float, sample_price: float, batch_rate: float) -> HandlerResult:
    """Flat price per lot for samples, rate x area for batches."""
    if is_sample(area):
        return HandlerResult.fee(key, sample_price, f"{label}: sample +{sample_price} CNY/lot")
    fee = batch_rate * area
    return HandlerResult.fee(key, fee, f"{label}: +{batch_rate} CNY/㎡ × {area:.2f} = {fee:.2f} CNY")


# ===================================================================
#  Board construction
# ===================================================================
def base_price_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    return base_price(spec, area, tables)


@priced_by_area
def castellated_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Edge plating and castellated (half) holes share one plating step."""
    if not (spec.edge_plating or spec.castellated_holes):
        return HandlerResult.empty()
    return _sample_or_batch("edgePlating", "Edge plating/castellated holes", area, 100, 100)


@priced_by_area
def edge_cover_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if spec.edge_cover == EdgeCover.none:
        return HandlerResult.empty()
    return HandlerResult.fee("edgeCover", 20, "Edge cover: +20 CNY")


@priced_by_area
def mask_cover_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if spec.mask_cover == MaskCover.non_conductive_fill_cap:
        return _sample_or_batch("maskCover", "Mask cover: Non-Conductive Fill & Cap (VII)", area, 600, 500)

    if spec.mask_cover == MaskCover.solder_mask_plug:
        if spec.layer_count != 2:
            return HandlerResult.note("Mask cover: Solder Mask Plug (IV-B) - no charge for non-2L boards")
        billed = billable_area(area)
        fee = 50 * billed
        notes = [f"Mask cover: Solder Mask Plug (IV-B) +50 CNY/㎡ × {billed:.2f} = {fee:.2f} CNY"]
        if is_sample(area):
            notes.append("Solder Mask Plug: minimum billing area 1㎡")
        return HandlerResult(extra=fee, detail={"maskCover": fee}, notes=notes)

    return HandlerResult.empty()


# layers -> (rate per extra design, designs at that rate, rate beyond, max designs or None)
PANEL_DESIGN_RATES = {
    1: (60, 4, 150, None),
    2: (60, 4, 150, None),
    4: (110, 3, 150, None),
    6: (220, 2, None, 2),
    8: (350, 2, None, 2),
}


@priced_by_area
def panel_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Surcharge for several different designs sharing one customer panel."""
    designs = spec.different_design_count
    if spec.shipment_mode != ShipmentMode.panel_by_gerber or designs <= 1:
        return HandlerResult.empty()

    layers = spec.layer_count
    rates = PANEL_DESIGN_RATES.get(layers)
    if rates is None:
        return HandlerResult.note(f"Different designs: not supported for {layers}L boards")

    rate, included, overflow_rate, max_designs = rates
    if max_designs is not None and designs > max_designs:
        return HandlerResult.note(
            f"Different designs ({layers}L): maximum {max_designs} designs, not supported"
        )

    billed = billable_area(area)
    if designs <= included:
        fee = (designs - 1) * rate * billed
        note = f"Different designs ({layers}L): +{rate} CNY/㎡/design × {designs - 1} × {billed:.2f}㎡ = {fee:.2f} CNY"
    else:
        first = included - 1
        fee = (first * rate + (designs - included) * overflow_rate) * billed
        note = (
            f"Different designs ({layers}L): (+{rate} CNY/㎡/design × {first} + {overflow_rate} CNY/㎡/design"
            f" × {designs - included}) × {billed:.2f}㎡ = {fee:.2f} CNY"
        )
    return HandlerResult.fee("differentDesigns", fee, note)


@priced_by_area
def special_mask_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if spec.solder_mask_color == SolderMaskColor.yellow:
        result = _sample_or_batch("yellowMask", "Yellow mask", area, 120, 100)
        if is_sample(area):
            result.notes.append("Yellow mask: lead time +2 days")
        return result

    if spec.solder_mask_color == SolderMaskColor.matt_green:
        billed = billable_area(area)
        fee = 50 * billed
        notes = [f"Matt Green mask: +50 CNY/㎡ × {billed:.2f} = {fee:.2f} CNY"]
        if is_sample(area):
            notes.append("Matt Green mask: minimum billing area 1㎡")
        return HandlerResult(extra=fee, detail={"mattGreenMask": fee}, notes=notes)

    return HandlerResult.empty()


# ===================================================================
#  Materials
# ===================================================================
SHENGYI_RATES = {TgClass.tg135: 80, TgClass.tg150: 120, TgClass.tg170: 150}

# tg -> (single/double layer, multilayer) -> (sample, batch)
TG_RATES = {
    TgClass.tg150: ((80, 60), (100, 80)),
    TgClass.tg170: ((100, 80), (150, 100)),
}


@priced_by_area
def sy_material_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if not spec.use_shengyi_material:
        return HandlerResult.empty()
    price = SHENGYI_RATES[spec.tg_class]
    return _sample_or_batch("syMaterial", f"Shengyi material ({spec.tg_class.value})", area, price, price)


@priced_by_area
def tg_material_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    rates = TG_RATES.get(spec.tg_class)
    if rates is None:
        return HandlerResult.empty()
    multilayer = spec.layer_count > 2
    sample_price, batch_rate = rates[1] if multilayer else rates[0]
    kind = "multilayer" if multilayer else "single/double layer"
    return _sample_or_batch("tgMaterial", f"{spec.tg_class.value}, {kind}", area, sample_price, batch_rate)


# ===================================================================
#  Drilling
# ===================================================================
@priced_by_area
def hole_count_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    holes = spec.hole_count or 0
    if holes <= 100_000:
        return HandlerResult.empty()
    fee = math.ceil((holes - 100_000) / 10_000) * 10 * billable_area(area)
    return HandlerResult.fee("holeCount", fee, f"Drill count >100k: +{fee} CNY")


@priced_by_area
def hole_count_015_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    holes = spec.hole_count or 0
    if spec.min_hole_diameter_mm != 0.15 or holes <= 10_000:
        return HandlerResult.empty()
    fee = math.ceil((holes - 10_000) / 10_000) * 30 * billable_area(area)
    return HandlerResult.fee("holeCount015", fee, f"Drill 0.15mm >10k: +{fee} CNY")


@priced_by_area
def drill_and_thickness_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Minimum hole surcharge, depends on layer count and board thickness."""
    layers = spec.layer_count
    hole = spec.min_hole_diameter_mm
    thick = spec.board_thickness_mm >= 1.6
    thickness_label = "thickness>=1.6mm" if thick else "thickness<1.6mm"

    if layers == 1:
        if hole < 0.3:
            return HandlerResult.note(f"Min hole <0.3mm not supported for 1L, {thickness_label}")
        return HandlerResult.empty()

    if thick:
        if layers != 2:
            return HandlerResult.empty()
        if hole == 0.2:
            return _sample_or_batch("minHole", "Min hole 0.2mm", area, 50, 50)
        if hole < 0.2:
            return HandlerResult.note(f"Min hole <0.2mm not supported for 2L, {thickness_label}")
        return HandlerResult.empty()

    if layers == 2:
        if hole == 0.15:
            return _sample_or_batch("minHole", "Min hole 0.15mm", area, 150, 130)
        if 0.2 <= hole <= 0.25:
            return _sample_or_batch("minHole", "Min hole 0.2-0.25mm", area, 50, 50)
        if hole < 0.15:
            return HandlerResult.note(f"Min hole <0.15mm not supported for 2L, {thickness_label}")
        return HandlerResult.empty()

    if hole == 0.15 and layers >= 4:
        rate = 60 if layers == 4 else 50
        return _sample_or_batch("minHole", "Min hole 0.15mm", area, rate, rate)
    return HandlerResult.empty()


# ===================================================================
#  Finish and process options
# ===================================================================
def silkscreen_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    # every silkscreen color is included in the base price
    return HandlerResult.empty()


ENIG_RATES = {
    EnigThickness.enig_1u: (140, 140),
    EnigThickness.enig_2u: (190, 190),
    EnigThickness.enig_3u: (230, 240),
}


@priced_by_area
def surface_finish_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    finish = spec.surface_finish
    if finish == SurfaceFinish.enig:
        tier = spec.enig_thickness or EnigThickness.enig_1u
        sample_price, batch_rate = ENIG_RATES[tier]
        result = _sample_or_batch("surfaceFinish", f"ENIG {tier.value.upper()}", area, sample_price, batch_rate)
        if tier == EnigThickness.enig_3u:
            result.notes.insert(0, "ENIG 3U: gold thicker than 3U is re-priced by sales on request")
        return result

    if finish in (SurfaceFinish.immersion_silver, SurfaceFinish.immersion_tin):
        result = _sample_or_batch("surfaceFinish", finish.value, area, 120, 100)
        result.notes.append(f"{finish.value}: lead time +2 days")
        return result

    return HandlerResult.empty()


@priced_by_area
def impedance_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if not spec.impedance_control:
        return HandlerResult.empty()
    if is_sample(area):
        return HandlerResult.fee("impedance", 50, "Impedance control: sample +50 CNY/lot")
    return HandlerResult.note("Impedance control: batch, free")


def gold_fingers_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if not spec.gold_fingers:
        return HandlerResult.empty()
    return HandlerResult.note("Gold fingers: manual quotation required")


def yin_yang_pins_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if not spec.yin_yang_pins:
        return HandlerResult.empty()
    return HandlerResult.note("Yin-yang pins: manual quotation required")


@priced_by_area
def bga_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if not spec.bga_fine_pitch:
        return HandlerResult.empty()
    return HandlerResult.fee("bga", 50, "BGA (≤0.25mm pitch): +50 CNY")


def _resolve_test_method(spec: OrderSpecification, area: float) -> Tuple[TestMethod, list]:
    """Pick the test that will actually run; multilayer boards are always tested."""
    requested = spec.test_method
    if area <= 0.5:
        return TestMethod.none, ["Test method auto-adjusted: none (≤0.5㎡ free)"]

    if spec.layer_count == 1:
        if requested is None:
            return TestMethod.none, ["Test method auto-adjusted: none (invalid input)"]
        return requested, []

    if requested in (None, TestMethod.none):
        if area <= 5:
            return TestMethod.flying_probe, ["Test method auto-adjusted: flying_probe (area≤5㎡)"]
        return TestMethod.fixture, ["Test method auto-adjusted: fixture (area>5㎡)"]
    if requested == TestMethod.flying_probe and area > 5:
        return TestMethod.fixture, ["Test method auto-adjusted: fixture (area>5㎡)"]
    return requested, []


@priced_by_area
def electrical_test_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Electrical test fee; always writes ``testMethod`` so the chosen test is visible."""
    method, notes = _resolve_test_method(spec, area)
    layers = spec.layer_count

    fee = 0
    if method == TestMethod.flying_probe:
        rate = 100 if layers >= 8 else 60
        fee = rate * billable_area(area)
    elif method == TestMethod.fixture:
        if layers <= 6:
            fee = 500
        elif layers == 8:
            fee = 800
        else:
            fee = 1000

    notes.append(f"Actual test method: {method.value}, test fee: {fee} CNY")
    return HandlerResult(extra=fee, detail={"testMethod": fee}, notes=notes)


@priced_by_area
def product_report_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    count = len([report for report in spec.product_reports if report != ProductReport.none])
    if count == 0:
        return HandlerResult.empty()
    fee = count * 20
    return HandlerResult.fee("productReport", fee, f"Product report: {count} × 20 = +{fee} CNY")


@priced_by_area
def hole_cu_25um_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    if not spec.hole_copper_25um:
        return HandlerResult.empty()
    return _sample_or_batch("holeCu25um", "Hole Cu 25um", area, 20, 20)


# ===================================================================
#  Copper weight
# ===================================================================
@priced_by_area
def copper_weight_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Outer copper surcharge for single and double layer boards."""
    if spec.layer_count > 2:
        return HandlerResult.empty()
    outer = spec.outer_copper_weight_oz
    if outer <= 1:
        return HandlerResult.empty()

    rates = tables.copper_weight_1_2_layers.get(int(outer)) if float(outer).is_integer() else None
    if rates is None:
        return HandlerResult.note(
            f"Copper {format_oz(outer)}oz ({spec.layer_count}L): not supported for automatic pricing, manual evaluation required"
        )

    sample = is_sample(area)
    unit = rates[0] if sample else rates[1]
    billed = billable_area(area)
    fee = unit * billed
    return HandlerResult.fee(
        "copperWeight",
        fee,
        f"Copper {format_oz(outer)}oz ({spec.layer_count}L, {'sample' if sample else 'batch'}): "
        f"{unit} CNY/㎡ × {billed:.2f}㎡ = {fee:.2f} CNY",
    )


@priced_by_area
def multilayer_copper_weight_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    """Outer/inner copper surcharge for boards with 4 or more layers."""
    layers = spec.layer_count
    if layers < 4:
        return HandlerResult.empty()

    outer = spec.outer_copper_weight_oz
    inner = spec.inner_copper_weight_oz or 1.0
    key = f"{format_oz(outer)}-{format_oz(inner)}"
    table = tables.multilayer_copper.get(layers, {})
    rates = table.get(key)
    if rates is None:
        logger.debug(f"No multilayer copper entry for {layers}L key {key}")
        return HandlerResult.note(
            f"Copper {key}oz ({layers}L, outer-inner) not supported for automatic pricing, "
            f"please contact sales for manual evaluation"
        )

    sample = is_sample(area)
    unit = rates[0] if sample else rates[1]
    if unit == 0:
        return HandlerResult.empty()
    billed = billable_area(area)
    fee = unit * billed
    return HandlerResult.fee(
        "multilayerCopperWeight",
        fee,
        f"Copper {key}oz ({layers}L, {'sample' if sample else 'batch'}): "
        f"{unit} CNY/㎡ × {billed:.2f}㎡ = {fee:.2f} CNY",
    )


# ===================================================================
#  Trace width
# ===================================================================
@priced_by_area
def trace_handler(spec, area, total_count, tables=DEFAULT_TABLES) -> HandlerResult:
    layers = spec.layer_count
    trace = get_trace_value(spec.min_trace_spacing)

    if layers <= 2:
        if trace == 4:
            return _sample_or_batch("minTrace", "Trace/space 4/4mil", area, 60, 60)
        if trace < 4:
            return HandlerResult.note("Trace/space <4/4mil, not supported")
        return HandlerResult.empty()

    if layers == 4:
        if trace == 3.5:
            return _sample_or_batch("minTrace", "Trace/space 3.5/3.5mil", area, 60, 60)
        if trace < 3.5:
            return HandlerResult.note("Trace/space <3.5/3.5mil, not supported")
        return HandlerResult.empty()

    if layers >= 6:
        if trace < 3.5:
            return HandlerResult.note("Trace/space <3.5/3.5mil, not supported")
        if trace == 3.5:
            return HandlerResult.note("Trace/space 3.5/3.5mil, no extra fee")
    return HandlerResult.empty()


# Registration order is the order of notes in the breakdown.
DEFAULT_HANDLERS: Tuple[Tuple[str, Handler], ...] = (
    ("base", base_price_handler),
    ("castellated", castellated_handler),
    ("edgeCover", edge_cover_handler),
    ("maskCover", mask_cover_handler),
    ("panel", panel_handler),
    ("specialMask", special_mask_handler),
    ("syMaterial", sy_material_handler),
    ("tgMaterial", tg_material_handler),
    ("holeCount", hole_count_handler),
    ("holeCount015", hole_count_015_handler),
    ("silkscreen", silkscreen_handler),
    ("surfaceFinish", surface_finish_handler),
    ("impedance", impedance_handler),
    ("goldFingers", gold_fingers_handler),
    ("yinYangPins", yin_yang_pins_handler),
    ("bga", bga_handler),
    ("testMethod", electrical_test_handler),
    ("productReport", product_report_handler),
    ("holeCu25um", hole_cu_25um_handler),
    ("copperWeight", copper_weight_handler),
    ("multilayerCopperWeight", multilayer_copper_weight_handler),
    ("trace", trace_handler),
    ("drillAndThickness", drill_and_thickness_handler),
    ("urgentDelivery", urgent_delivery_handler),
)
