# tests/test_quantity_resolver.py

from pcb_quote.schemas.pcb import ShipmentMode
from pcb_quote.services.quantity_resolver import EMPTY_QUANTITY, resolve, single_board_area_m2


def test_single_mode_counts_boards(make_spec):
    quantity = resolve(make_spec())

    assert quantity.total_count == 10
    assert quantity.single_area_m2 == 0.01
    assert quantity.total_area_m2 == 0.1
    assert quantity.is_sample


def test_panel_by_gerber_counts_every_unit(make_spec):
    spec = make_spec(
        shipment_mode=ShipmentMode.panel_by_gerber,
        single_board_length_mm=50,
        single_board_width_mm=40,
        panel_rows=2,
        panel_columns=3,
        panel_set_count=5,
    )
    quantity = resolve(spec)

    assert quantity.total_count == 30
    assert quantity.single_area_m2 == 0.002
    assert quantity.total_area_m2 == 0.06


def test_panel_by_platform_counts_panels_but_bills_all_units(make_spec):
    spec = make_spec(
        shipment_mode=ShipmentMode.panel_by_platform,
        single_board_length_mm=50,
        single_board_width_mm=40,
        panel_rows=2,
        panel_columns=3,
        panel_set_count=5,
    )
    quantity = resolve(spec)

    assert quantity.total_count == 5
    assert quantity.total_area_m2 == 0.06


def test_single_area_is_rounded_to_four_decimals(make_spec):
    spec = make_spec(single_board_length_mm=33.3, single_board_width_mm=33.3)
    assert single_board_area_m2(spec) == 0.0011


def test_missing_dimension_gives_empty_quantity(make_spec):
    quantity = resolve(make_spec(single_board_width_mm=None))

    assert quantity == EMPTY_QUANTITY
    assert quantity.is_empty


def test_zero_count_gives_empty_quantity(make_spec):
    assert resolve(make_spec(single_board_count=0)).is_empty
    assert resolve(make_spec(shipment_mode=ShipmentMode.panel_by_gerber)).is_empty


def test_one_square_metre_is_a_batch(area_spec):
    assert resolve(area_spec(0.9999)).is_sample
    assert not resolve(area_spec(1.0)).is_sample
