# pcb_quote/utils/enum_helpers.py

from typing import Union
from pcb_quote.schemas.pcb import MinTrace
import logging

logger = logging.getLogger(__name__)

def get_trace_value(trace: Union[MinTrace, str]) -> float:
    """
    Convert a trace/space choice to its width in mil for comparisons.

    Args:
        trace: Trace/space as MinTrace enum or a "4/4" style string

    Returns:
        float: The trace width in mil, 0 when the value cannot be read
    """
    try:
        trace_str = trace.value if isinstance(trace, MinTrace) else str(trace)
        # "3.5/3.5" -> 3.5, width and spacing are always equal
        return float(trace_str.split("/")[0].replace("mil", "").strip())
    except (ValueError, AttributeError) as e:
        logger.warning(f"Failed to convert trace {trace} to float: {e}")
        return 0.0

def format_oz(value: float) -> str:
    """Render a copper weight for table keys: 1.0 -> "1", 0.5 -> "0.5"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"
