from typing import Any, Optional

import numpy as np


def to_float(v: Any) -> Optional[float]:
    try:
        if v is None or v == "" or str(v).strip().lower() == "null":
            return None
        result = float(v)
    except (TypeError, ValueError, OverflowError):
        return None
    if not np.isfinite(result):
        return None
    return result


def to_number(v: Any) -> float:
    """Unset, blank and unparseable values count as zero."""
    result = to_float(v)
    return 0.0 if result is None else result


def to_int(v: Any) -> Optional[int]:
    result = to_float(v)
    return None if result is None else int(result)


def to_str(v: Any) -> str:
    return "" if v is None else str(v)
