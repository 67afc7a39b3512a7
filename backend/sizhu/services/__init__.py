"""服務模組

包含節氣資料與四柱推算的業務邏輯。
"""

from sizhu.services.chart import FourPillarsChart, calculate_chart
from sizhu.services.pillars import (
    resolve_day_pillar,
    resolve_hour_pillar,
    resolve_month_pillar,
    resolve_year_pillar,
)
from sizhu.services.term_source import SolarTermSource, get_solar_term_source

__all__ = [
    "FourPillarsChart",
    "calculate_chart",
    "resolve_day_pillar",
    "resolve_hour_pillar",
    "resolve_month_pillar",
    "resolve_year_pillar",
    "SolarTermSource",
    "get_solar_term_source",
]
