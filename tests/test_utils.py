# tests/test_utils.py

import logging

import pytest
from pydantic import ValidationError

from pcb_quote.logging import setup_logging
from pcb_quote.schemas.pcb import MinTrace, OrderSpecification, ProductReport
from pcb_quote.utils.enum_helpers import format_oz, get_trace_value


@pytest.mark.parametrize(
    "trace, expected",
    [(MinTrace.t_6_6, 6.0), (MinTrace.t_3_5, 3.5), ("4/4", 4.0), ("4mil/4mil", 4.0), ("n/a", 0.0)],
)
def test_get_trace_value(trace, expected):
    assert get_trace_value(trace) == expected


@pytest.mark.parametrize("value, expected", [(1.0, "1"), (2, "2"), (0.5, "0.5")])
def test_format_oz(value, expected):
    assert format_oz(value) == expected


def test_product_reports_accept_lists():
    spec = OrderSpecification(product_reports=["Production Report", "Production Report"])
    assert spec.product_reports == frozenset([ProductReport.production_report])


def test_specification_is_immutable():
    spec = OrderSpecification()
    with pytest.raises(ValidationError):
        spec.layer_count = 4


def test_setup_logging_without_config_file(tmp_path):
    log_dir = tmp_path / "logs"
    root = setup_logging(config_path=str(tmp_path / "missing.conf"), log_dir=str(log_dir))

    assert log_dir.is_dir()
    assert root is logging.getLogger()
