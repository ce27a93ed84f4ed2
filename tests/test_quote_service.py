# tests/test_quote_service.py

from datetime import date, datetime

import pytest

from pcb_quote.schemas.pcb import DeliveryMode
from pcb_quote.services.pricing_models import PriceBreakdown
from pcb_quote.services.quote_service import QuoteService, quote_service


def test_quote_combines_price_and_schedule(reference_spec, morning):
    quote = quote_service.quote(reference_spec, morning)

    assert quote.price_breakdown.total_extra_price == 300
    assert quote.lead_time.cycle_days == 5
    assert quote.estimated_finish_date == date(2025, 6, 16)
    assert quote.quantity.total_count == 10


def test_cutoff_is_counted_once(reference_spec):
    quote = quote_service.quote(reference_spec, datetime(2025, 6, 13, 20, 30))

    # Friday evening: 6 working days from Monday 16th
    assert quote.lead_time.cycle_days == 6
    assert quote.estimated_finish_date == date(2025, 6, 23)


def test_to_dict_contract(reference_spec, morning):
    data = quote_service.quote(reference_spec, morning).to_dict()

    assert set(data) == {
        "price_breakdown",
        "lead_time",
        "estimated_finish_date",
        "currency",
        "total_count",
        "total_area_m2",
        "table_version",
    }
    assert data["estimated_finish_date"] == "2025-06-16"
    assert data["price_breakdown"]["detail"] == {"basePrice": 300, "testMethod": 0}


def test_conversion_applies_to_total_and_detail():
    breakdown = PriceBreakdown(total_extra_price=330, detail={"basePrice": 300, "edgeCover": 20}, notes=["n"])
    converted = breakdown.convert(0.14, "USD")

    assert converted.currency == "USD"
    assert converted.total_extra_price == pytest.approx(46.2)
    assert converted.detail == pytest.approx({"basePrice": 42, "edgeCover": 2.8})
    assert converted.notes == ["n"]
    assert breakdown.convert(None) is breakdown


def test_shipping_is_added_before_conversion(reference_spec, morning):
    quote = QuoteService().quote(reference_spec, morning, shipping_cost=40, exchange_rate=2)

    assert quote.price_breakdown.total_extra_price == 680
    assert quote.price_breakdown.detail["shippingCost"] == 80


def test_empty_order(make_spec, morning):
    quote = quote_service.quote(make_spec(single_board_count=0), morning)

    assert quote.price_breakdown.total_extra_price == 0
    assert quote.lead_time.cycle_days == 1
    assert quote.estimated_finish_date == date(2025, 6, 10)


@pytest.mark.parametrize("reduce_days", [0, 1, 2, 3, 5])
@pytest.mark.parametrize("layer_count", [2, 12])
def test_shorter_lead_time_is_always_paid_for(make_spec, morning, reduce_days, layer_count):
    standard = quote_service.quote(make_spec(layer_count=layer_count), morning)
    urgent = quote_service.quote(
        make_spec(layer_count=layer_count, delivery_mode=DeliveryMode.urgent, urgent_reduce_days=reduce_days),
        morning,
    )

    if urgent.lead_time.cycle_days < standard.lead_time.cycle_days:
        assert urgent.price_breakdown.detail["urgentDelivery"] > 0
    else:
        assert "urgentDelivery" not in urgent.price_breakdown.detail
        assert urgent.price_breakdown.needs_review
