# backend/sizhu/schemas/__init__.py
"""Pydantic Schema 模組"""

from sizhu.schemas.common import ApiResponse
from sizhu.schemas.bazi import (
    PillarInfo,
    YearPillarResponse,
    MonthPillarResponse,
    HourPillarResponse,
    ChartResponse,
)
from sizhu.schemas.solar_term import (
    SolarTermResponse,
    SolarTermEntryResponse,
    SolarTermTableResponse,
    SolarTermAtResponse,
)

__all__ = [
    "ApiResponse",
    "PillarInfo",
    "YearPillarResponse",
    "MonthPillarResponse",
    "HourPillarResponse",
    "ChartResponse",
    "SolarTermResponse",
    "SolarTermEntryResponse",
    "SolarTermTableResponse",
    "SolarTermAtResponse",
]
