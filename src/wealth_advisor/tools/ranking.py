"""
Sort keys and stable ids shared by the analyzers.

Each by_* function is a `key=` for sorted(); all of them sort "best first"
under the default ascending order so callers never pass reverse=True.
"""

from __future__ import annotations

import re
from typing import Any

from wealth_advisor.config.constants import PRIORITY_ORDER


def slugify(text: str) -> str:
    """'Oil & Gas' -> 'oil_gas'; used to build stable recommendation and insight ids."""
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_") or "unknown"


def by_priority_then_impact(rec: Any) -> tuple[int, float]:
    """High before medium before low, then larger impact_score first."""
    return (-PRIORITY_ORDER.get(rec.priority, 0), -rec.impact_score)


def by_exposure_desc(item: Any) -> float:
    """Largest portfolio exposure first (SectorAnalysis.user_exposure or SectorExposure.percentage)."""
    exposure = getattr(item, "user_exposure", None)
    if exposure is None:
        exposure = item.percentage
    return -exposure


def by_abs_impact_desc(item: Any) -> float:
    """Largest absolute rupee impact first, gains and losses alike."""
    return -abs(item.impact)
