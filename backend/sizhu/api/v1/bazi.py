# backend/sizhu/api/v1/bazi.py
"""八字 API 路由"""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query

from sizhu.exceptions import InvalidInputError, UnsupportedYearError
from sizhu.schemas.bazi import (
    BranchInfoResponse,
    ChartResponse,
    ElementAnalysisResponse,
    FourPillars,
    HourPillarResponse,
    LunarDateResponse,
    MonthPillarResponse,
    PillarInfo,
    StemInfoResponse,
    YearPillarResponse,
)
from sizhu.schemas.common import ApiResponse
from sizhu.services.cache import ChartCache, get_chart_cache
from sizhu.services.chart import FourPillarsChart, calculate_chart
from sizhu.services.ganzhi import StemBranch
from sizhu.services.pillars import (
    HourPillar,
    MonthPillar,
    YearResolution,
    resolve_day_pillar,
    resolve_hour_pillar,
    resolve_month_pillar,
    resolve_year_pillar,
)
from sizhu.services.term_source import SolarTermSource, get_solar_term_source

router = APIRouter()

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


# ============================================
# 轉換函式
# ============================================

def _pillar_info(pillar: StemBranch) -> PillarInfo:
    stem_info = pillar.stem_info
    branch_info = pillar.branch_info
    return PillarInfo(
        ganzhi=pillar.ganzhi,
        stem=pillar.stem,
        branch=pillar.branch,
        stem_index=pillar.stem_index,
        branch_index=pillar.branch_index,
        cycle_index=pillar.cycle_index,
        stem_info=StemInfoResponse(
            name=stem_info.name,
            pinyin=stem_info.pinyin,
            element=stem_info.element,
            element_en=stem_info.element_en,
            yin=stem_info.yin,
        ),
        branch_info=BranchInfoResponse(
            name=branch_info.name,
            pinyin=branch_info.pinyin,
            element=branch_info.element,
            element_en=branch_info.element_en,
            animal=branch_info.animal,
            animal_en=branch_info.animal_en,
        ),
    )


def _year_response(result: YearResolution) -> YearPillarResponse:
    return YearPillarResponse(
        pillar=_pillar_info(result.pillar),
        effective_year=result.effective_year,
        li_chun=result.li_chun.strftime(TIMESTAMP_FORMAT),
        provenance=result.provenance.value,
    )


def _month_response(result: MonthPillar) -> MonthPillarResponse:
    return MonthPillarResponse(
        pillar=_pillar_info(result.pillar),
        month_index=result.month_index,
        term_name=result.term_name,
        term_timestamp=result.term_timestamp.strftime(TIMESTAMP_FORMAT),
        effective_year=result.effective_year,
        provenance=result.provenance.value,
        from_previous_year=result.from_previous_year,
    )


def _hour_response(result: HourPillar) -> HourPillarResponse:
    return HourPillarResponse(
        pillar=_pillar_info(result.pillar),
        double_hour=result.double_hour,
    )


def _chart_response(chart: FourPillarsChart) -> ChartResponse:
    elements = chart.elements
    return ChartResponse(
        datetime=chart.formatted,
        four_pillars=FourPillars(
            year=chart.year_pillar.pillar.ganzhi,
            month=chart.month_pillar.pillar.ganzhi,
            day=chart.day_pillar.ganzhi,
            hour=chart.hour_pillar.pillar.ganzhi,
        ),
        year=_year_response(chart.year_pillar),
        month=_month_response(chart.month_pillar),
        day=_pillar_info(chart.day_pillar),
        hour=_hour_response(chart.hour_pillar),
        zodiac=chart.zodiac,
        day_master=chart.day_master,
        solar_term=chart.solar_term,
        provenance=chart.provenance.value,
        elements=ElementAnalysisResponse(
            counts=elements.counts,
            dominant=elements.dominant,
            missing=elements.missing,
            yin=elements.yin,
            yang=elements.yang,
        ),
        lunar_date=LunarDateResponse(**chart.lunar_date) if chart.lunar_date else None,
    )


def _raise_http(e: Exception) -> NoReturn:
    if isinstance(e, InvalidInputError):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, UnsupportedYearError):
        raise HTTPException(status_code=404, detail=str(e))
    raise e


# ============================================
# API Endpoints
# ============================================

@router.get(
    "/",
    response_model=ApiResponse[ChartResponse],
    summary="推算八字命盤",
    description="依出生時刻 (UTC+8) 推算年、月、日、時四柱，月柱以節氣交節時刻為界"
)
def get_chart(
    year: int = Query(..., description="公曆年", example=1967),
    month: int = Query(..., ge=1, le=12, description="月", example=10),
    day: int = Query(..., ge=1, le=31, description="日", example=9),
    hour: int = Query(0, ge=0, le=23, description="時"),
    minute: int = Query(0, ge=0, le=59, description="分"),
    source: SolarTermSource = Depends(get_solar_term_source),
    cache: ChartCache = Depends(get_chart_cache),
) -> ApiResponse[ChartResponse]:
    """推算八字命盤（結果會快取）

    同步函式，於執行緒池中執行。
    """
    try:
        chart, cached = cache.get_or_compute(
            (year, month, day, hour, minute),
            lambda: calculate_chart(year, month, day, hour, minute, source),
        )
    except (InvalidInputError, UnsupportedYearError) as e:
        _raise_http(e)

    return ApiResponse(success=True, data=_chart_response(chart), cached=cached)


@router.get(
    "/month-pillar",
    response_model=ApiResponse[MonthPillarResponse],
    summary="推算月柱",
    description="以十二節的交節時刻（精確到分）推算節氣月與月柱"
)
async def get_month_pillar(
    year: int = Query(..., description="公曆年", example=1967),
    month: int = Query(..., ge=1, le=12, description="月", example=10),
    day: int = Query(..., ge=1, le=31, description="日", example=9),
    hour: int = Query(0, ge=0, le=23, description="時"),
    minute: int = Query(0, ge=0, le=59, description="分"),
    source: SolarTermSource = Depends(get_solar_term_source),
) -> ApiResponse[MonthPillarResponse]:
    """推算月柱"""
    try:
        result = resolve_month_pillar(year, month, day, hour, minute, source)
    except (InvalidInputError, UnsupportedYearError) as e:
        _raise_http(e)

    return ApiResponse(success=True, data=_month_response(result))


@router.get(
    "/year-pillar",
    response_model=ApiResponse[YearPillarResponse],
    summary="推算年柱",
    description="以立春交節時刻為界推算八字年與年柱"
)
async def get_year_pillar(
    year: int = Query(..., description="公曆年", example=2025),
    month: int = Query(..., ge=1, le=12, description="月", example=2),
    day: int = Query(..., ge=1, le=31, description="日", example=3),
    hour: int = Query(0, ge=0, le=23, description="時"),
    minute: int = Query(0, ge=0, le=59, description="分"),
    source: SolarTermSource = Depends(get_solar_term_source),
) -> ApiResponse[YearPillarResponse]:
    """推算年柱"""
    try:
        result = resolve_year_pillar(year, month, day, hour, minute, source)
    except InvalidInputError as e:
        _raise_http(e)

    return ApiResponse(success=True, data=_year_response(result))


@router.get(
    "/day-pillar",
    response_model=ApiResponse[PillarInfo],
    summary="推算日柱",
    description="以 1900-01-01 甲戌日為基準推算日柱"
)
async def get_day_pillar(
    year: int = Query(..., description="公曆年", example=2000),
    month: int = Query(..., ge=1, le=12, description="月", example=1),
    day: int = Query(..., ge=1, le=31, description="日", example=1),
) -> ApiResponse[PillarInfo]:
    """推算日柱"""
    try:
        result = resolve_day_pillar(year, month, day)
    except InvalidInputError as e:
        _raise_http(e)

    return ApiResponse(success=True, data=_pillar_info(result))


@router.get(
    "/hour-pillar",
    response_model=ApiResponse[HourPillarResponse],
    summary="推算時柱",
    description="由日干與小時推算時柱與時辰"
)
async def get_hour_pillar(
    day_stem: str = Query(..., min_length=1, max_length=1, description="日干", example="甲"),
    hour: int = Query(..., ge=0, le=23, description="時", example=23),
) -> ApiResponse[HourPillarResponse]:
    """推算時柱"""
    try:
        result = resolve_hour_pillar(day_stem, hour)
    except InvalidInputError as e:
        _raise_http(e)

    return ApiResponse(success=True, data=_hour_response(result))


@router.post(
    "/cache/clear",
    response_model=ApiResponse[dict],
    summary="清除命盤快取"
)
async def clear_cache(cache: ChartCache = Depends(get_chart_cache)):
    """清除命盤快取"""
    cleared = cache.clear()
    return ApiResponse(success=True, data={"entries_cleared": cleared})
