# tests/test_urgent_delivery.py

import pytest

from pcb_quote.schemas.pcb import DeliveryMode
from pcb_quote.services.pricing_models import has_review_marker
from pcb_quote.services.urgent_delivery import (
    FALLBACK_REDUCE_DAYS,
    NO_URGENT,
    NotSupported,
    UrgentConfig,
    available_urgent_options,
    copper_class,
    is_urgent_supported,
    lookup_urgent_config,
    max_reduce_days,
    resolve_urgent,
    urgent_delivery_handler,
    urgent_fee,
)


@pytest.fixture
def urgent_spec(make_spec):
    def _urgent_spec(reduce_days=2, **overrides):
        return make_spec(delivery_mode=DeliveryMode.urgent, urgent_reduce_days=reduce_days, **overrides)
    return _urgent_spec


@pytest.mark.parametrize(
    "outer, inner, expected",
    [
        (1, None, "1oz"),
        (2, None, "2oz"),
        (1, 3, "3oz"),
        (4, 2, "4oz"),
    ],
)
def test_copper_class_uses_heaviest_layer(make_spec, outer, inner, expected):
    spec = make_spec(layer_count=4, outer_copper_weight_oz=outer, inner_copper_weight_oz=inner)
    assert copper_class(spec) == expected


def test_lookup_returns_config(make_spec):
    config = lookup_urgent_config(make_spec(), 0.1)

    assert isinstance(config, UrgentConfig)
    assert config.key == (2, "1oz", "0-0.5")
    assert [option.reduce_days for option in config.options] == [1, 2, 3]


def test_high_layer_counts_are_not_supported(make_spec):
    spec = make_spec(layer_count=12)

    assert isinstance(lookup_urgent_config(spec, 0.1), NotSupported)
    assert not is_urgent_supported(spec, 0.1)
    assert available_urgent_options(spec, 0.1) == []
    assert max_reduce_days(spec, 0.1) == 0


def test_missing_matrix_entry_is_not_supported(make_spec):
    # no 2 m2+ bracket for 10-layer 2oz boards
    spec = make_spec(layer_count=10, outer_copper_weight_oz=2)
    assert isinstance(lookup_urgent_config(spec, 2), NotSupported)


def test_max_reduce_days(make_spec):
    assert max_reduce_days(make_spec(layer_count=4), 0.1) == 4


def test_fixed_fee(make_spec):
    fee = urgent_fee(make_spec(), 0.1, 2)

    assert fee.supported
    assert fee.fee == 300
    assert fee.fee_basis == "fixed"


def test_per_area_fee(make_spec):
    fee = urgent_fee(make_spec(layer_count=4), 2, 3)

    assert fee.supported
    assert fee.fee == 400
    assert fee.fee_basis == "per_m2"


def test_unknown_reduction_is_not_supported(make_spec):
    assert not urgent_fee(make_spec(), 0.1, 5).supported


def test_matrix_option_is_charged_and_granted(urgent_spec):
    decision = resolve_urgent(urgent_spec(3), 0.1)

    assert decision.reduce_days == 3
    assert decision.fee == urgent_fee(urgent_spec(3), 0.1, 3).fee > 0


@pytest.mark.parametrize(
    "reduce_days, overrides",
    [(5, {}), (2, {"layer_count": 12})],
    ids=["missing_option", "missing_config"],
)
def test_unpriced_request_falls_back_to_paid_reduction(urgent_spec, reduce_days, overrides):
    decision = resolve_urgent(urgent_spec(reduce_days, **overrides), 0.1)

    assert decision.reduce_days == FALLBACK_REDUCE_DAYS
    assert decision.fee == 100


def test_urgent_without_reduction_is_free_and_flagged(urgent_spec):
    decision = resolve_urgent(urgent_spec(0), 0.1)

    assert decision.reduce_days == 0
    assert decision.fee == 0
    assert has_review_marker(decision.notes)


def test_standard_or_empty_orders_get_nothing(make_spec, urgent_spec):
    assert resolve_urgent(make_spec(urgent_reduce_days=2), 0.1) == NO_URGENT
    assert resolve_urgent(urgent_spec(2), 0.0) == NO_URGENT


def test_handler_ignores_standard_delivery(make_spec):
    result = urgent_delivery_handler(make_spec(urgent_reduce_days=2), 0.1, 10)

    assert result.extra == 0
    assert result.notes == []


def test_handler_charges_matrix_fee(urgent_spec):
    result = urgent_delivery_handler(urgent_spec(2), 0.1, 10)

    assert result.detail == {"urgentDelivery": 300}
    assert any("reduced by 2 days" in note for note in result.notes)


def test_handler_prices_unsupported_reduction_with_fallback(urgent_spec):
    result = urgent_delivery_handler(urgent_spec(5), 0.1, 10)

    assert result.detail == {"urgentDelivery": 100}
    assert has_review_marker(result.notes)
    assert any("reduced by 2 days" in note for note in result.notes)


def test_handler_notes_urgent_without_reduction(urgent_spec):
    result = urgent_delivery_handler(urgent_spec(0), 0.1, 10)

    assert result.extra == 0
    assert result.detail == {}
    assert has_review_marker(result.notes)


def test_handler_falls_back_for_samples(urgent_spec):
    result = urgent_delivery_handler(urgent_spec(2, layer_count=12), 0.1, 10)
    assert result.detail == {"urgentDelivery": 100}


def test_handler_falls_back_for_batches(urgent_spec):
    result = urgent_delivery_handler(urgent_spec(2, layer_count=12), 5, 10)
    assert result.detail == {"urgentDelivery": 250}


def test_fallback_has_a_minimum_fee(urgent_spec):
    result = urgent_delivery_handler(urgent_spec(2, layer_count=12), 1.2, 10)
    assert result.detail == {"urgentDelivery": 100}
