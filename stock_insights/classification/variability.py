"""
Demand Variability

Coefficient of variation over a demand history, used as the XYZ input when
the reporting source supplies raw monthly demand instead of a ready-made
variability figure.
"""

from typing import Optional, Sequence

import numpy as np


def coefficient_of_variation(values: Optional[Sequence[float]]) -> float:
    """
    Population coefficient of variation (std / mean) of a demand series.

    Returns 0.0 for an empty series or a series whose mean is zero, so a
    title that never sold is treated as perfectly stable rather than NaN.

    Args:
        values: Demand per period (e.g. units sold per month)

    Returns:
        Coefficient of variation rounded to 4 decimals
    """
    if values is None or len(values) == 0:
        return 0.0

    demand = np.asarray(values, dtype=float)
    demand = np.clip(np.nan_to_num(demand, nan=0.0), 0.0, None)
    mean = demand.mean()

    if mean <= 0:
        return 0.0

    return round(float(demand.std() / mean), 4)
