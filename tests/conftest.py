# tests/conftest.py

import pytest
from datetime import datetime

from pcb_quote.schemas.pcb import OrderSpecification


def build_spec(**overrides) -> OrderSpecification:
    """A 2-layer, 100x100mm, 10 piece FR4 order; keyword arguments override any field."""
    data = {
        "layer_count": 2,
        "single_board_length_mm": 100,
        "single_board_width_mm": 100,
        "single_board_count": 10,
    }
    data.update(overrides)
    return OrderSpecification(**data)


def spec_with_area(area_m2: float, **overrides) -> OrderSpecification:
    """Single order of one board measuring ``area_m2`` (1000mm long)."""
    return build_spec(
        single_board_length_mm=1000,
        single_board_width_mm=area_m2 * 1000,
        single_board_count=1,
        **overrides,
    )


@pytest.fixture
def make_spec():
    """Factory fixture for order specifications."""
    return build_spec


@pytest.fixture
def area_spec():
    """Factory fixture for single board orders of a given total area."""
    return spec_with_area


@pytest.fixture
def reference_spec():
    """The standard 2-layer sample order: 0.1 m2, quoted at 300 CNY and 5 days."""
    return build_spec()


@pytest.fixture
def morning():
    """Monday 2025-06-09 10:00, well before the cut-off hour."""
    return datetime(2025, 6, 9, 10, 0)
