# backend/sizhu/services/chart.py
"""八字命盤

組合年、月、日、時四柱，並附上：
- 生肖與日主
- 五行與陰陽統計
- 所處節氣與資料來源
- 農曆日期（cnlunar）
"""

from dataclasses import dataclass, field
from typing import Optional

from sizhu.services.ganzhi import ELEMENTS, StemBranch
from sizhu.services.lunar import get_lunar_date
from sizhu.services.pillars import (
    HourPillar,
    MonthPillar,
    YearResolution,
    day_pillar,
    hour_pillar,
    resolve_year_and_month,
    validate_moment,
)
from sizhu.services.solar_term import Provenance
from sizhu.services.term_source import SolarTermSource


@dataclass(frozen=True)
class ElementAnalysis:
    """五行統計（天干與地支本氣）"""
    counts: dict[str, int]
    yin: int
    yang: int

    @property
    def dominant(self) -> str:
        # 同數時依木火土金水順序
        return max(ELEMENTS, key=lambda e: self.counts[e])

    @property
    def missing(self) -> list[str]:
        return [e for e in ELEMENTS if self.counts[e] == 0]


@dataclass(frozen=True)
class FourPillarsChart:
    """四柱命盤"""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    year_pillar: YearResolution
    month_pillar: MonthPillar
    day_pillar: StemBranch
    hour_pillar: HourPillar
    elements: ElementAnalysis
    lunar_date: Optional[dict] = field(default=None)

    @property
    def pillars(self) -> list[StemBranch]:
        return [
            self.year_pillar.pillar,
            self.month_pillar.pillar,
            self.day_pillar,
            self.hour_pillar.pillar,
        ]

    @property
    def formatted(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d} {self.hour:02d}:{self.minute:02d}"

    @property
    def zodiac(self) -> str:
        return self.year_pillar.pillar.branch_info.animal

    @property
    def day_master(self) -> str:
        return self.day_pillar.stem

    @property
    def solar_term(self) -> str:
        return self.month_pillar.term_name

    @property
    def provenance(self) -> Provenance:
        return self.month_pillar.provenance


def analyze_elements(pillars: list[StemBranch]) -> ElementAnalysis:
    """統計四柱的五行與陰陽

    Args:
        pillars: 四柱干支

    Returns:
        五行統計
    """
    counts = {element: 0 for element in ELEMENTS}
    yin = yang = 0

    for pillar in pillars:
        stem_info = pillar.stem_info
        counts[stem_info.element] += 1
        if stem_info.yin:
            yin += 1
        else:
            yang += 1
        counts[pillar.branch_info.element] += 1

    return ElementAnalysis(counts=counts, yin=yin, yang=yang)


def calculate_chart(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    source: Optional[SolarTermSource] = None,
) -> FourPillarsChart:
    """推算完整八字命盤

    Raises:
        InvalidInputError: 日期時間欄位不合法
        UnsupportedYearError: 沒有可用的節氣資料
    """
    moment = validate_moment(year, month, day, hour, minute)

    year_resolution, month_result = resolve_year_and_month(moment, source)
    day_result = day_pillar(moment.date())
    hour_result = hour_pillar(day_result.stem_index, hour)

    pillars = [year_resolution.pillar, month_result.pillar, day_result, hour_result.pillar]
    return FourPillarsChart(
        year=year,
        month=month,
        day=day,
        hour=hour,
        minute=minute,
        year_pillar=year_resolution,
        month_pillar=month_result,
        day_pillar=day_result,
        hour_pillar=hour_result,
        elements=analyze_elements(pillars),
        lunar_date=get_lunar_date(moment),
    )
