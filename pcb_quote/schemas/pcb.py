# pcb_quote/schemas/pcb.py

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShipmentMode(str, Enum):
    single = "single"
    panel_by_gerber = "panel_by_gerber"      # customer supplies the panel in the Gerber
    panel_by_platform = "panel_by_platform"  # we design the panel, layout is fixed

class MaterialType(str, Enum):
    fr4 = "fr4"
    aluminum = "aluminum"
    rogers = "rogers"
    flex = "flex"
    rigid_flex = "rigid-flex"

class TgClass(str, Enum):
    tg135 = "TG135"
    tg150 = "TG150"
    tg170 = "TG170"

class SurfaceFinish(str, Enum):
    hasl = "HASL"
    leadfree_hasl = "Leadfree HASL"
    enig = "ENIG"
    osp = "OSP"
    immersion_silver = "Immersion Silver"
    immersion_tin = "Immersion Tin"

class EnigThickness(str, Enum):
    enig_1u = "1u"
    enig_2u = "2u"
    enig_3u = "3u"

class MinTrace(str, Enum):
    t_10_10 = "10/10"
    t_8_8 = "8/8"
    t_6_6 = "6/6"
    t_5_5 = "5/5"
    t_4_4 = "4/4"
    t_3_5 = "3.5/3.5"
    t_3_3 = "3/3"
    t_2_2 = "2/2"

class SolderMaskColor(str, Enum):
    green = "Green"
    matt_green = "Matt Green"
    blue = "Blue"
    red = "Red"
    black = "Black"
    matt_black = "Matt Black"
    white = "White"
    yellow = "Yellow"

class SilkscreenColor(str, Enum):
    white = "White"
    black = "Black"
    yellow = "Yellow"

class MaskCover(str, Enum):
    tented_vias = "Tented Vias"
    opened_vias = "Opened Vias"
    solder_mask_plug = "Solder Mask Plug (IV-B)"
    non_conductive_fill_cap = "Non-Conductive Fill & Cap (VII)"

class EdgeCover(str, Enum):
    none = "None"
    left_right = "Left and Right"
    top_bottom = "Top and Bottom"
    all = "All"

class TestMethod(str, Enum):
    none = "none"
    flying_probe = "flying_probe"
    fixture = "fixture"

class HdiStep(str, Enum):
    none = "none"
    step_1 = "1step"
    step_2 = "2step"
    step_3 = "3step"

class QualityInspection(str, Enum):
    standard = "standard"
    full = "full"

class ProductReport(str, Enum):
    none = "none"
    production_report = "Production Report"
    impedance_report = "Impedance Report"
    microsection_report = "Microsection Report"

class DeliveryMode(str, Enum):
    standard = "standard"
    urgent = "urgent"


# ===================================================================
#  Main Pydantic Model for an Order Specification
# ===================================================================
class OrderSpecification(BaseModel):
    """Everything the engine needs to price and schedule one PCB order."""
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    layer_count: int = Field(2, ge=1, le=20, description="Number of copper layers.")
    board_thickness_mm: float = Field(1.6, gt=0, description="Finished board thickness in mm.")

    outer_copper_weight_oz: float = Field(1.0, gt=0, description="Outer layer copper weight (oz).")
    inner_copper_weight_oz: Optional[float] = Field(
        None, gt=0, description="Inner layer copper weight (oz). Only meaningful for 4+ layers."
    )

    shipment_mode: ShipmentMode = Field(ShipmentMode.single)
    single_board_length_mm: Optional[float] = Field(None, ge=0)
    single_board_width_mm: Optional[float] = Field(None, ge=0)
    single_board_count: int = Field(0, ge=0, description="Pieces ordered in single-board mode.")
    panel_rows: int = Field(1, ge=1)
    panel_columns: int = Field(1, ge=1)
    panel_set_count: int = Field(0, ge=0, description="Number of panels ordered.")
    different_design_count: int = Field(
        1, ge=1, description="Distinct designs sharing one panel."
    )

    material_type: MaterialType = Field(MaterialType.fr4)
    tg_class: TgClass = Field(TgClass.tg135)
    surface_finish: SurfaceFinish = Field(SurfaceFinish.hasl)
    enig_thickness: Optional[EnigThickness] = Field(
        None, description="Gold thickness tier, only read when surface_finish is ENIG."
    )

    min_trace_spacing: MinTrace = Field(MinTrace.t_6_6, description="Minimum trace/space in mil.")
    min_hole_diameter_mm: float = Field(0.3, gt=0)
    hole_count: Optional[int] = Field(None, ge=0)

    solder_mask_color: SolderMaskColor = Field(SolderMaskColor.green)
    silkscreen_color: SilkscreenColor = Field(SilkscreenColor.white)
    mask_cover: MaskCover = Field(MaskCover.tented_vias)
    edge_cover: EdgeCover = Field(EdgeCover.none)
    test_method: Optional[TestMethod] = Field(
        None, description="Requested electrical test. Multilayer boards are always tested."
    )

    impedance_control: bool = False
    gold_fingers: bool = False
    edge_plating: bool = False
    castellated_holes: bool = False
    hole_copper_25um: bool = False
    bga_fine_pitch: bool = Field(False, description="BGA with pitch of 0.25mm or less.")
    smt_assembly: bool = False
    use_shengyi_material: bool = False
    yin_yang_pins: bool = False
    hdi_steps: HdiStep = Field(HdiStep.none)
    quality_inspection: QualityInspection = Field(QualityInspection.standard)
    product_reports: FrozenSet[ProductReport] = Field(default_factory=frozenset)
    cross_outs_accepted: bool = Field(
        False, description="Customer accepts X-out boards in panels."
    )

    delivery_mode: DeliveryMode = Field(DeliveryMode.standard)
    urgent_reduce_days: int = Field(0, ge=0, description="Requested lead time reduction in days.")

    @field_validator("product_reports", mode="before")
    @classmethod
    def _coerce_reports(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, (list, tuple, set)):
            return frozenset(value)
        return value

    @property
    def max_copper_oz(self) -> float:
        inner = self.inner_copper_weight_oz or 1.0
        return max(self.outer_copper_weight_oz, inner)

    @property
    def is_urgent(self) -> bool:
        return self.delivery_mode == DeliveryMode.urgent


# ===================================================================
#  API models
# ===================================================================
class QuoteRequest(BaseModel):
    """Request body for the quote endpoint."""
    spec: OrderSpecification
    order_time: datetime = Field(..., description="Reference timestamp of the order (local time).")
    shipping_cost: Optional[float] = Field(
        None, ge=0, description="Shipping cost already computed by the shipping estimator."
    )
    exchange_rate: Optional[float] = Field(
        None, gt=0, description="Multiply every amount by this rate to get the display currency."
    )
    currency: Optional[str] = Field(
        None, description="Label of the display currency, only used with exchange_rate."
    )

class UrgentOptionsRequest(BaseModel):
    spec: OrderSpecification

class PriceBreakdownModel(BaseModel):
    total_extra_price: float
    detail: Dict[str, float]
    notes: List[str]
    needs_review: bool = False

class LeadTimeModel(BaseModel):
    cycle_days: int
    reasons: List[str]

class QuoteResponse(BaseModel):
    """The complete quote returned to callers."""
    price_breakdown: PriceBreakdownModel
    lead_time: LeadTimeModel
    estimated_finish_date: str = Field(..., description="ISO-8601 date.")
    currency: str
    total_count: int
    total_area_m2: float
    table_version: str
