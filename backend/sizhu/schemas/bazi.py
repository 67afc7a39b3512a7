# backend/sizhu/schemas/bazi.py
"""八字 API Schema"""

from typing import Optional

from pydantic import BaseModel, Field


class StemInfoResponse(BaseModel):
    """天干資訊"""
    name: str = Field(..., description="天干")
    pinyin: str = Field(..., description="拼音")
    element: str = Field(..., description="五行")
    element_en: str = Field(..., description="五行（英文）")
    yin: bool = Field(..., description="是否為陰干")


class BranchInfoResponse(BaseModel):
    """地支資訊"""
    name: str = Field(..., description="地支")
    pinyin: str = Field(..., description="拼音")
    element: str = Field(..., description="五行")
    element_en: str = Field(..., description="五行（英文）")
    animal: str = Field(..., description="生肖")
    animal_en: str = Field(..., description="生肖（英文）")


class PillarInfo(BaseModel):
    """單柱干支"""
    ganzhi: str = Field(..., description="干支")
    stem: str = Field(..., description="天干")
    branch: str = Field(..., description="地支")
    stem_index: int = Field(..., ge=0, le=9, description="天干索引 (甲=0)")
    branch_index: int = Field(..., ge=0, le=11, description="地支索引 (子=0)")
    cycle_index: int = Field(..., ge=0, le=59, description="六十甲子序號 (甲子=0)")
    stem_info: Optional[StemInfoResponse] = Field(None, description="天干資訊")
    branch_info: Optional[BranchInfoResponse] = Field(None, description="地支資訊")


class YearPillarResponse(BaseModel):
    """年柱回應"""
    pillar: PillarInfo = Field(..., description="年柱")
    effective_year: int = Field(..., description="八字年（立春前屬前一年）")
    li_chun: str = Field(..., description="該公曆年立春時刻 (UTC+8)")
    provenance: str = Field(..., description="資料來源: table, approximate, estimated")


class MonthPillarResponse(BaseModel):
    """月柱回應"""
    pillar: PillarInfo = Field(..., description="月柱")
    month_index: int = Field(..., ge=1, le=12, description="節氣月 (1=寅月)")
    term_name: str = Field(..., description="最後交入的節")
    term_timestamp: str = Field(..., description="交節時刻 (UTC+8)")
    effective_year: int = Field(..., description="八字年")
    provenance: str = Field(..., description="資料來源: table, approximate, estimated")
    from_previous_year: bool = Field(False, description="是否取自前一年的節氣表")


class HourPillarResponse(BaseModel):
    """時柱回應"""
    pillar: PillarInfo = Field(..., description="時柱")
    double_hour: str = Field(..., description="時辰")


class ElementAnalysisResponse(BaseModel):
    """五行統計"""
    counts: dict[str, int] = Field(..., description="五行數量")
    dominant: str = Field(..., description="最旺五行")
    missing: list[str] = Field(default_factory=list, description="缺少的五行")
    yin: int = Field(..., description="陰干數")
    yang: int = Field(..., description="陽干數")


class LunarDateResponse(BaseModel):
    """農曆日期"""
    year: int = Field(..., description="農曆年")
    month: int = Field(..., description="農曆月")
    day: int = Field(..., description="農曆日")
    year_cn: str = Field(..., description="農曆年中文")
    month_cn: str = Field(..., description="農曆月中文")
    day_cn: str = Field(..., description="農曆日中文")
    zodiac: str = Field(..., description="生肖")
    is_leap: bool = Field(..., description="是否閏月")


class FourPillars(BaseModel):
    """四柱干支"""
    year: str = Field(..., description="年柱")
    month: str = Field(..., description="月柱")
    day: str = Field(..., description="日柱")
    hour: str = Field(..., description="時柱")


class ChartResponse(BaseModel):
    """八字命盤回應"""
    datetime: str = Field(..., description="出生時刻 (UTC+8)")
    four_pillars: FourPillars = Field(..., description="四柱")
    year: YearPillarResponse = Field(..., description="年柱詳細")
    month: MonthPillarResponse = Field(..., description="月柱詳細")
    day: PillarInfo = Field(..., description="日柱")
    hour: HourPillarResponse = Field(..., description="時柱詳細")
    zodiac: str = Field(..., description="生肖")
    day_master: str = Field(..., description="日主")
    solar_term: str = Field(..., description="所處的節")
    provenance: str = Field(..., description="節氣資料來源")
    elements: ElementAnalysisResponse = Field(..., description="五行統計")
    lunar_date: Optional[LunarDateResponse] = Field(None, description="農曆日期（1901-2100）")

    class Config:
        json_schema_extra = {
            "example": {
                "datetime": "1967-10-09 10:45",
                "four_pillars": {
                    "year": "丁未",
                    "month": "庚戌",
                    "day": "丙午",
                    "hour": "癸巳"
                },
                "solar_term": "寒露",
                "provenance": "table"
            }
        }
