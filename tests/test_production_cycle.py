# tests/test_production_cycle.py

from datetime import datetime

import pytest

from pcb_quote.schemas.pcb import DeliveryMode, HdiStep, ProductReport, SurfaceFinish
from pcb_quote.services.config_loader import EngineConfig
from pcb_quote.services.production_cycle import area_factor, base_days, calc_lead_time


def test_reference_order_takes_five_days(reference_spec, morning):
    result = calc_lead_time(reference_spec, morning)

    assert result.cycle_days == 5
    assert not result.needs_review


def test_cutoff_adds_one_day(reference_spec):
    before = calc_lead_time(reference_spec, datetime(2025, 6, 9, 19, 59))
    after = calc_lead_time(reference_spec, datetime(2025, 6, 9, 20, 0))

    assert after.cycle_days == before.cycle_days + 1
    assert after.reasons[-1] == "Order after 20:00: +1 day"


def test_cutoff_hour_comes_from_config(reference_spec):
    config = EngineConfig(order_cutoff_hour=18)
    result = calc_lead_time(reference_spec, datetime(2025, 6, 9, 18, 30), config=config)

    assert result.cycle_days == 6


def test_empty_order_still_has_a_cycle(make_spec, morning):
    result = calc_lead_time(make_spec(single_board_count=0), morning)

    assert result.cycle_days == 1
    assert result.needs_review


@pytest.mark.parametrize("area, expected", [(0.1, 1), (1, 1), (1.01, 2), (2.5, 3)])
def test_area_factor(area, expected):
    assert area_factor(area) == expected


def test_feature_days_scale_with_area(make_spec, morning):
    spec = make_spec(single_board_count=250, surface_finish=SurfaceFinish.enig)
    result = calc_lead_time(spec, morning)

    # 7 base days for 2.5 m2, ENIG +1 day x 3
    assert result.cycle_days == 10


def test_all_features_add_up(make_spec, morning):
    spec = make_spec(
        surface_finish=SurfaceFinish.immersion_silver,
        hdi_steps=HdiStep.step_2,
        gold_fingers=True,
        impedance_control=True,
        smt_assembly=True,
        product_reports=[ProductReport.production_report, ProductReport.microsection_report],
    )
    result = calc_lead_time(spec, morning)

    # 5 + silver 2 + HDI 2 + gold 1 + impedance 1 + SMT 2 + one report day
    assert result.cycle_days == 14


def test_thick_copper_sample_adds_days(make_spec, morning):
    assert calc_lead_time(make_spec(outer_copper_weight_oz=3), morning).cycle_days == 7
    assert calc_lead_time(make_spec(outer_copper_weight_oz=4), morning).cycle_days == 8


def test_thick_copper_batch_is_fixed_at_20_days(make_spec):
    spec = make_spec(
        layer_count=6,
        inner_copper_weight_oz=3,
        single_board_count=100,
        single_board_length_mm=100,
        single_board_width_mm=100,
        surface_finish=SurfaceFinish.enig,
        smt_assembly=True,
        delivery_mode=DeliveryMode.urgent,
        urgent_reduce_days=2,
    )
    result = calc_lead_time(spec, datetime(2025, 6, 9, 21, 0))

    assert result.cycle_days == 20
    assert result.needs_review


def test_long_table_entries_are_capped(make_spec):
    days, clamped = base_days(make_spec(layer_count=20), 2)

    assert (days, clamped) == (20, True)


def test_capped_lead_time_needs_review(make_spec, morning):
    result = calc_lead_time(make_spec(layer_count=20, single_board_count=200), morning)

    assert result.cycle_days == 20
    assert result.needs_review


def test_urgent_reduces_by_requested_days(make_spec, morning):
    spec = make_spec(delivery_mode=DeliveryMode.urgent, urgent_reduce_days=1)
    assert calc_lead_time(spec, morning).cycle_days == 4


def test_unpriced_urgent_request_takes_the_fallback_reduction(make_spec, morning):
    # no 5 day option in the matrix, so the paid fallback of 2 days applies
    spec = make_spec(delivery_mode=DeliveryMode.urgent, urgent_reduce_days=5)
    assert calc_lead_time(spec, morning).cycle_days == 3


def test_urgent_without_reduction_keeps_the_standard_cycle(make_spec, morning):
    spec = make_spec(delivery_mode=DeliveryMode.urgent, urgent_reduce_days=0)
    result = calc_lead_time(spec, morning)

    assert result.cycle_days == 5
    assert result.needs_review


def test_delivery_mode_argument_overrides_spec(make_spec, morning):
    spec = make_spec(urgent_reduce_days=3)

    assert calc_lead_time(spec, morning).cycle_days == 5
    assert calc_lead_time(spec, morning, delivery_mode=DeliveryMode.urgent).cycle_days == 2


def test_urgent_never_goes_below_one_day(make_spec, morning):
    spec = make_spec(layer_count=1, delivery_mode=DeliveryMode.urgent, urgent_reduce_days=3)
    result = calc_lead_time(spec, morning)

    assert result.cycle_days >= 1
