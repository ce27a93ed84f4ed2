# pcb_quote/services/price_tables.py
"""
Static, versioned lookup tables for pricing and lead time.

All tables are read-only (``MappingProxyType`` over tuples) and bundled into
a frozen ``PriceTables`` instance that engines receive at construction time.
Swap in another ``PriceTables`` to test an alternate table version.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from .pricing_models import UrgentOption

TABLE_VERSION = "2025.1"

INF = math.inf

# (max_area_m2, unit_price_per_m2) steps, the last one unbounded
PriceSteps = Tuple[Tuple[float, float], ...]

BASE_AREA_STEPS = (0.5, 1, 3, 5, 10, 30, INF)
PACK_PRICE_MAX_AREA = 0.2


def _steps(limits, *prices) -> PriceSteps:
    return tuple(zip(limits, prices))


def _freeze(mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


# ===================================================================
#  Base price: layers -> (pack price for area <= 0.2, per-m2 steps)
# ===================================================================
_HIGH_LAYER_STEPS = {
    12: _steps(BASE_AREA_STEPS, 2600, 2600, 2500, 2500, 2400, 2200, 2100),
    14: _steps(BASE_AREA_STEPS, 4000, 4000, 3800, 3600, 3600, 3400, 3400),
    16: _steps(BASE_AREA_STEPS, 4500, 4500, 4300, 4300, 4300, 4200, 4100),
    18: _steps(BASE_AREA_STEPS, 5500, 5500, 5300, 5000, 5000, 4800, 4600),
    20: _steps(BASE_AREA_STEPS, 6500, 6500, 6200, 6000, 6000, 5800, 5700),
}

BASE_PRICE_1OZ = _freeze({
    1: (300, _steps(BASE_AREA_STEPS, 550, 500, 400, 420, 330, 330, 330)),
    2: (300, _steps(BASE_AREA_STEPS, 560, 450, 460, 435, 380, 340, 320)),
    4: (610, _steps(BASE_AREA_STEPS, 850, 800, 700, 700, 630, 600, 570)),
    6: (1150, _steps(BASE_AREA_STEPS, 1100, 1000, 920, 1200, 1000, 900, 870)),
    8: (1400, _steps(BASE_AREA_STEPS, 1600, 1600, 1500, 1600, 1300, 1300, 1300)),
    10: (2200, _steps(BASE_AREA_STEPS, 2500, 2500, 2000, 2150, 1900, 1900, 1800)),
    12: (2600, _HIGH_LAYER_STEPS[12]),
    14: (3150, _HIGH_LAYER_STEPS[14]),
    16: (3750, _HIGH_LAYER_STEPS[16]),
    18: (4200, _HIGH_LAYER_STEPS[18]),
    20: (4800, _HIGH_LAYER_STEPS[20]),
})

BASE_PRICE_2OZ = _freeze({
    1: (300, _steps(BASE_AREA_STEPS, 510, 450, 400, 340, 280, 290, 280)),
    2: (330, _steps(BASE_AREA_STEPS, 550, 500, 470, 440, 400, 370, 320)),
    4: (610, _steps(BASE_AREA_STEPS, 850, 810, 770, 730, 630, 560, 540)),
    6: (1300, _steps(BASE_AREA_STEPS, 1300, 1200, 1150, 1100, 1000, 950, 930)),
    8: (1800, _steps(BASE_AREA_STEPS, 2000, 1900, 1900, 1700, 1700, 1700, 1600)),
    10: (2400, _steps(BASE_AREA_STEPS, 2500, 2500, 2400, 2400, 2300, 2000, 1850)),
    12: (3000, _HIGH_LAYER_STEPS[12]),
    14: (3900, _HIGH_LAYER_STEPS[14]),
    16: (4100, _HIGH_LAYER_STEPS[16]),
    18: (4900, _HIGH_LAYER_STEPS[18]),
    20: (5500, _HIGH_LAYER_STEPS[20]),
})

# ===================================================================
#  Engineering fee: layers -> (fee for 0.2-0.5 m2, fee for 0.5-3 m2)
#  Orders up to 0.2 m2 pay the pack price instead; above 3 m2 it is waived.
# ===================================================================
ENG_FEE_MIN_AREA = 0.2
ENG_FEE_MID_AREA = 0.5
ENG_FEE_MAX_AREA = 3

ENGINEERING_FEE = _freeze({
    1: (210, 142), 2: (210, 142), 4: (500, 425), 6: (850, 850), 8: (1050, 710),
    10: (1500, 1500), 12: (1600, 1600), 14: (2000, 2000), 16: (2500, 2500),
    18: (3000, 3000), 20: (3500, 3500),
})

ENGINEERING_FEE_HIGH_COPPER = _freeze({
    1: (180, 180), 2: (210, 210), 4: (500, 500), 6: (1100, 1100), 8: (1350, 1350),
    10: (1500, 1500), 12: (1600, 1600), 14: (2000, 2000), 16: (2500, 2500),
    18: (3000, 3000), 20: (3500, 3500),
})

# ===================================================================
#  Film (photo tooling) fee
# ===================================================================
FILM_SHEETS = _freeze({1: 6, 2: 6, 4: 8, 6: 11, 8: 13, 10: 15})
FILM_UNIT_PRICE = 200
FILM_MIN_SINGLE_AREA = 0.06

# ===================================================================
#  Copper weight surcharges
# ===================================================================
# 1-2 layer boards: outer oz -> (sample per lot, batch per m2)
COPPER_WEIGHT_1_2_LAYERS = _freeze({2: (100, 100), 3: (320, 310), 4: (550, 510)})

# >= 4 layer boards: layers -> "outer-inner" -> (sample, batch) per m2
_FREE_1OZ = {"1-0.5": (0, 0), "1-1": (0, 0)}

MULTILAYER_COPPER = _freeze({
    4: _freeze({
        **_FREE_1OZ,
        "2-0.5": (100, 100), "2-1": (100, 100), "2-2": (230, 220),
        "3-0.5": (300, 300), "3-1": (300, 300), "3-2": (450, 420), "3-3": (610, 550),
        "4-0.5": (550, 550), "4-1": (550, 550), "4-2": (700, 700), "4-3": (800, 900),
        "4-4": (1200, 1200),
    }),
    6: _freeze({
        **_FREE_1OZ,
        "2-0.5": (100, 100), "2-1": (100, 100), "2-2": (400, 380), "2-3": (750, 700),
        "3-0.5": (320, 320), "3-1": (320, 320), "3-2": (630, 630), "3-3": (1100, 900),
        "3-4": (1500, 1300),
        "4-0.5": (650, 650), "4-1": (650, 650), "4-4": (1900, 1700),
    }),
    8: _freeze({**_FREE_1OZ, "2-0.5": (100, 100), "2-1": (100, 100), "2-2": (700, 700)}),
    10: _freeze({**_FREE_1OZ, "2-0.5": (100, 100), "2-1": (100, 100), "2-2": (760, 760)}),
    12: _freeze(_FREE_1OZ),
    14: _freeze(_FREE_1OZ),
    16: _freeze(_FREE_1OZ),
    18: _freeze(_FREE_1OZ),
    20: _freeze(_FREE_1OZ),
})

# ===================================================================
#  Urgent delivery matrix: (layers, copper class, area bracket) -> options
#  An empty tuple marks a configuration that cannot be expedited.
# ===================================================================
AREA_BRACKETS = (("0-0.5", 0.5), ("0.5-1", 1), ("1-3", 3), ("3+", INF))


def _fixed(*pairs) -> Tuple[UrgentOption, ...]:
    return tuple(UrgentOption(days, fee, per_area=False) for days, fee in pairs)


def _per_m2(*pairs) -> Tuple[UrgentOption, ...]:
    return tuple(UrgentOption(days, fee, per_area=True) for days, fee in pairs)


URGENT_MATRIX = _freeze({
    (1, "1oz", "0-0.5"): _fixed((1, 50), (2, 200), (3, 500)),
    (1, "1oz", "0.5-1"): _fixed((1, 50), (2, 200), (3, 500)),
    (1, "1oz", "1-3"): _per_m2((1, 200), (2, 300), (3, 400)),
    (1, "2oz", "0-0.5"): _fixed((1, 50), (2, 200), (3, 500)),
    (1, "2oz", "0.5-1"): _fixed((1, 100), (2, 300), (3, 600)),
    (1, "2oz", "1-3"): _per_m2((1, 200), (2, 300), (3, 400)),

    (2, "1oz", "0-0.5"): _fixed((1, 100), (2, 300), (3, 600)),
    (2, "1oz", "0.5-1"): _fixed((1, 100), (2, 300), (3, 600)),
    (2, "1oz", "1-3"): _per_m2((1, 200), (2, 300), (3, 400)),
    (2, "2oz", "0-0.5"): _fixed((1, 100), (2, 200), (3, 500)),
    (2, "2oz", "0.5-1"): _fixed((1, 100), (2, 300), (3, 600)),
    (2, "2oz", "1-3"): _per_m2((1, 200), (2, 300), (3, 400)),

    (4, "1oz", "0-0.5"): _fixed((1, 200), (2, 400), (3, 500), (4, 600)),
    (4, "1oz", "0.5-1"): _fixed((1, 200), (2, 500), (3, 600), (4, 800)),
    (4, "1oz", "1-3"): _per_m2((1, 50), (2, 100), (3, 200), (4, 400), (5, 600)),
    (4, "2oz", "0-0.5"): _fixed((1, 100), (2, 200), (3, 400), (4, 600)),
    (4, "2oz", "0.5-1"): _fixed((1, 100), (2, 300), (3, 600), (4, 800)),
    (4, "2oz", "1-3"): _per_m2((1, 100), (2, 200), (3, 300), (4, 600)),

    (6, "1oz", "0-0.5"): _fixed((2, 500), (3, 700), (4, 1000)),
    (6, "1oz", "0.5-1"): _fixed((2, 600), (3, 800), (4, 1500)),
    (6, "1oz", "1-3"): _per_m2((1, 50), (2, 100), (3, 200), (4, 400), (5, 600), (6, 800)),
    (6, "2oz", "0-0.5"): _fixed((2, 400), (3, 600), (4, 800), (5, 1500)),
    (6, "2oz", "0.5-1"): _fixed((2, 400), (3, 600), (4, 1500)),
    (6, "2oz", "1-3"): _per_m2((1, 100), (2, 200), (3, 400)),

    (8, "1oz", "0-0.5"): _fixed((4, 700), (5, 1200), (6, 1500)),
    (8, "1oz", "0.5-1"): _fixed((4, 800), (5, 1500), (6, 2000)),
    (8, "1oz", "1-3"): _per_m2(
        (1, 50), (2, 100), (3, 200), (4, 400), (5, 600), (6, 800), (7, 1000), (8, 1200)
    ),
    (8, "2oz", "0-0.5"): _fixed((4, 600), (5, 1100), (6, 1600)),
    (8, "2oz", "0.5-1"): _fixed((4, 600), (5, 1200), (6, 1700)),

    (10, "1oz", "0-0.5"): _fixed((5, 1500), (6, 1800)),
    (10, "1oz", "1-3"): _per_m2((1, 50), (2, 100), (3, 200), (4, 400), (5, 600), (6, 800)),

    (12, "1oz", "0-0.5"): (),
    (12, "1oz", "0.5-1"): (),
    (12, "1oz", "1-3"): (),
    (14, "1oz", "0-0.5"): (),
    (14, "1oz", "0.5-1"): (),
    (14, "1oz", "1-3"): (),
    (16, "1oz", "0-0.5"): (),
    (18, "1oz", "0-0.5"): (),
    (20, "1oz", "0-0.5"): (),
})

# ===================================================================
#  Lead time (days) by layers and area, normal and high copper variants
# ===================================================================
LEAD_TIME_AREA_STEPS = (0.5, 1, 3, 5, 10, 20, 30, INF)
LEAD_TIME_MAX_DAYS = 20

LEAD_TIME_NORMAL = _freeze({
    1: (5, 5, 7, 8, 10, 15, 15, 20),
    2: (5, 5, 7, 9, 11, 13, 15, 20),
    4: (7, 7, 9, 11, 13, 15, 17, 20),
    6: (8, 8, 11, 13, 15, 17, 19, 21),
    8: (10, 10, 12, 14, 16, 18, 20, 22),
    10: (11, 11, 13, 15, 17, 18, 22, 25),
    12: (12, 12, 14, 16, 18, 20, 22, 25),
    14: (13, 13, 15, 17, 19, 21, 23, 25),
    16: (15, 15, 17, 19, 21, 23, 25, 27),
    18: (17, 17, 19, 21, 23, 25, 27, 29),
    20: (18, 18, 20, 22, 24, 26, 28, 30),
})

LEAD_TIME_HIGH_COPPER = _freeze({
    **LEAD_TIME_NORMAL,
    1: (5, 5, 7, 10, 12, 15, 15, 20),
    6: (8, 8, 11, 13, 15, 17, 19, 22),
    8: (10, 10, 12, 14, 16, 18, 20, 25),
    12: (12, 14, 16, 18, 19, 20, 22, 25),
})

# ===================================================================
#  Working calendar (mainland China public holidays and make-up days)
# ===================================================================
def _day_range(year: int, month: int, first: int, last: int, end_month: Optional[int] = None):
    """Dates from month/first to end_month/last inclusive."""
    start = date(year, month, first)
    end = date(year, end_month or month, last)
    return tuple(date.fromordinal(d) for d in range(start.toordinal(), end.toordinal() + 1))


HOLIDAYS: FrozenSet[date] = frozenset(
    _day_range(2024, 1, 1, 1)
    + _day_range(2024, 2, 10, 17)
    + _day_range(2024, 4, 4, 6)
    + _day_range(2024, 5, 1, 3)
    + _day_range(2024, 6, 10, 10)
    + _day_range(2024, 9, 15, 17)
    + _day_range(2024, 10, 1, 7)
    + _day_range(2025, 1, 1, 1)
    + _day_range(2025, 1, 28, 4, end_month=2)
    + _day_range(2025, 4, 5, 7)
    + _day_range(2025, 5, 1, 3)
    + _day_range(2025, 5, 31, 31)
    + _day_range(2025, 10, 1, 7)
)

WORKING_WEEKENDS: FrozenSet[date] = frozenset([
    date(2024, 2, 4), date(2024, 2, 18), date(2024, 4, 7), date(2024, 4, 28),
    date(2024, 9, 14), date(2024, 9, 29),
    date(2025, 1, 26), date(2025, 2, 8), date(2025, 4, 27), date(2025, 9, 27),
])


@dataclass(frozen=True)
class PriceTables:
    """Every lookup table the engines read, bundled under one version tag."""
    version: str = TABLE_VERSION
    base_price_1oz: Mapping = field(default_factory=lambda: BASE_PRICE_1OZ)
    base_price_2oz: Mapping = field(default_factory=lambda: BASE_PRICE_2OZ)
    engineering_fee: Mapping = field(default_factory=lambda: ENGINEERING_FEE)
    engineering_fee_high_copper: Mapping = field(default_factory=lambda: ENGINEERING_FEE_HIGH_COPPER)
    film_sheets: Mapping = field(default_factory=lambda: FILM_SHEETS)
    film_unit_price: float = FILM_UNIT_PRICE
    copper_weight_1_2_layers: Mapping = field(default_factory=lambda: COPPER_WEIGHT_1_2_LAYERS)
    multilayer_copper: Mapping = field(default_factory=lambda: MULTILAYER_COPPER)
    urgent_matrix: Mapping = field(default_factory=lambda: URGENT_MATRIX)
    lead_time_normal: Mapping = field(default_factory=lambda: LEAD_TIME_NORMAL)
    lead_time_high_copper: Mapping = field(default_factory=lambda: LEAD_TIME_HIGH_COPPER)

    def film_sheet_count(self, layer_count: int) -> int:
        return self.film_sheets.get(layer_count, layer_count + 5)


DEFAULT_TABLES = PriceTables()


def nearest_layer_key(table: Mapping, layer_count: int) -> Optional[int]:
    """Exact layer count if present, else the closest lower supported count."""
    if layer_count in table:
        return layer_count
    lower = [layers for layers in table if layers < layer_count]
    return max(lower) if lower else None


def step_for_area(steps, area: float):
    """Return the value of the first ``(max_area, value)`` step covering ``area``."""
    for max_area, value in steps:
        if area <= max_area:
            return value
    return steps[-1][1]


def area_bracket(area: float) -> str:
    for label, max_area in AREA_BRACKETS:
        if area <= max_area:
            return label
    return AREA_BRACKETS[-1][0]
