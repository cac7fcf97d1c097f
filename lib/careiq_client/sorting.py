from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def sort_order_value(value: Any) -> float:
    """Numeric value of a ``sort_order`` field, NaN when it has none.

    Strings are read up to the first non-digit, so ``"10"`` and ``"10a"``
    both give 10. Integers too large for a float give +/- infinity.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return -math.inf if value < 0 else math.inf
    if isinstance(value, float):
        return float(math.trunc(value)) if math.isfinite(value) else math.nan
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        if m:
            # float() of a digit string saturates to inf instead of raising
            return float(m.group(1))
    return math.nan


def _sort_key(item: Any) -> tuple[int, float]:
    value = sort_order_value(item.get("sort_order") if isinstance(item, dict) else None)
    if math.isnan(value):
        return 1, 0.0
    return 0, value


def reorder_subsections(raw: str) -> str:
    """Sort every section's subsections by ``sort_order``.

    The sort is stable; entries without a numeric sort order go last. Input
    that is not valid JSON is logged and returned unchanged.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error("Error sorting subsections: %s", e)
        return raw

    sections = data.get("sections") if isinstance(data, dict) else None
    if isinstance(sections, list):
        for section in sections:
            if not isinstance(section, dict):
                continue
            subsections = section.get("subsections")
            if isinstance(subsections, list) and len(subsections) > 1:
                subsections.sort(key=_sort_key)

    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
