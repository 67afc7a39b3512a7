# backend/sizhu/schemas/solar_term.py
"""節氣 API Schema"""

from typing import Optional

from pydantic import BaseModel, Field


class SolarTermResponse(BaseModel):
    """節氣基本資料回應"""
    name: str = Field(..., description="節氣名稱")
    name_en: str = Field(..., description="英文名稱")
    order: int = Field(..., description="序號 (1-24)")
    solar_longitude: int = Field(..., description="太陽黃經度數")
    typical_date: str = Field(..., description="典型日期 (MM-DD)")
    season: str = Field(..., description="所屬季節")
    kind: str = Field(..., description="jie（節）或 qi（氣）")
    month_index: Optional[int] = Field(None, description="節所開始的節氣月")


class SolarTermEntryResponse(BaseModel):
    """交節時刻"""
    timestamp: str = Field(..., description="交節時刻 (UTC+8)")
    name: str = Field(..., description="節氣名稱")
    kind: str = Field(..., description="jie（節）或 qi（氣）")
    month_index: Optional[int] = Field(None, description="節所開始的節氣月")


class SolarTermTableResponse(BaseModel):
    """某一年的節氣表"""
    year: int = Field(..., description="公曆年")
    provenance: str = Field(..., description="資料來源: table, approximate")
    terms: list[SolarTermEntryResponse] = Field(..., description="依時間排序的節氣")


class SolarTermAtResponse(BaseModel):
    """某一時刻的節氣狀態"""
    datetime: str = Field(..., description="查詢時刻 (UTC+8)")
    sun_longitude: float = Field(..., description="近似太陽視黃經（度）")
    band_term: str = Field(..., description="黃經所在 15° 區段的節氣")
    month_index: int = Field(..., ge=1, le=12, description="節氣月")
    jie: str = Field(..., description="最後交入的節")
    jie_timestamp: str = Field(..., description="該節的交節時刻")
    provenance: str = Field(..., description="節的資料來源")
