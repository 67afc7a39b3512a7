# backend/sizhu/api/v1/solar_term.py
"""節氣 API 路由"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from sizhu.exceptions import InvalidInputError, UnsupportedYearError
from sizhu.schemas.common import ApiResponse
from sizhu.schemas.solar_term import (
    SolarTermAtResponse,
    SolarTermEntryResponse,
    SolarTermResponse,
    SolarTermTableResponse,
)
from sizhu.services.astronomy import sun_longitude, term_band
from sizhu.services.pillars import resolve_month, validate_moment
from sizhu.services.solar_term import (
    SolarTermDefinition,
    get_all_solar_terms,
    get_solar_term_info,
    get_solar_terms_by_season,
)
from sizhu.services.term_source import SolarTermSource, get_solar_term_source

router = APIRouter()

VALID_SEASONS = ["春", "夏", "秋", "冬"]


def _convert_to_response(info: SolarTermDefinition) -> SolarTermResponse:
    """將 SolarTermDefinition 轉換為回應格式"""
    return SolarTermResponse(
        name=info.name,
        name_en=info.name_en,
        order=info.order,
        solar_longitude=info.solar_longitude,
        typical_date=info.typical_date,
        season=info.season,
        kind=info.kind.value,
        month_index=info.month_index,
    )


# ============================================
# API Endpoints
# ============================================

@router.get(
    "/all",
    response_model=ApiResponse[list[SolarTermResponse]],
    summary="取得所有節氣資訊",
    description="取得二十四節氣的基本資料（黃經、節／氣、節氣月）"
)
async def get_all_terms():
    """取得所有節氣資訊"""
    return ApiResponse(
        success=True,
        data=[_convert_to_response(t) for t in get_all_solar_terms()]
    )


@router.get(
    "/by-name/{name}",
    response_model=ApiResponse[SolarTermResponse],
    summary="依名稱查詢節氣"
)
async def get_term_by_name(name: str):
    """依名稱查詢節氣

    Args:
        name: 節氣名稱（如：立春、驚蟄）
    """
    info = get_solar_term_info(name)
    if not info:
        return ApiResponse(
            success=False,
            error=f"找不到節氣：{name}"
        )

    return ApiResponse(success=True, data=_convert_to_response(info))


@router.get(
    "/by-season/{season}",
    response_model=ApiResponse[list[SolarTermResponse]],
    summary="依季節查詢節氣"
)
async def get_terms_by_season(
    season: str = Path(..., description="季節 (春/夏/秋/冬)", example="春")
):
    """依季節查詢節氣"""
    if season not in VALID_SEASONS:
        return ApiResponse(
            success=False,
            error=f"無效的季節：{season}，有效選項：{', '.join(VALID_SEASONS)}"
        )

    return ApiResponse(
        success=True,
        data=[_convert_to_response(t) for t in get_solar_terms_by_season(season)]
    )


@router.get(
    "/at",
    response_model=ApiResponse[SolarTermAtResponse],
    summary="查詢某一時刻的節氣",
    description="回傳近似太陽黃經所在的節氣區段，以及依節氣表最後交入的節"
)
async def get_term_at(
    year: int = Query(..., description="公曆年", example=1967),
    month: int = Query(..., ge=1, le=12, description="月", example=10),
    day: int = Query(..., ge=1, le=31, description="日", example=9),
    hour: int = Query(0, ge=0, le=23, description="時"),
    minute: int = Query(0, ge=0, le=59, description="分"),
    source: SolarTermSource = Depends(get_solar_term_source),
):
    """查詢某一時刻的節氣"""
    try:
        moment = validate_moment(year, month, day, hour, minute)
        resolution = resolve_month(moment, source)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnsupportedYearError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ApiResponse(
        success=True,
        data=SolarTermAtResponse(
            datetime=moment.strftime("%Y-%m-%d %H:%M"),
            sun_longitude=round(sun_longitude(moment), 4),
            band_term=term_band(moment).name,
            month_index=resolution.month_index,
            jie=resolution.term_name,
            jie_timestamp=resolution.term_timestamp.strftime("%Y-%m-%d %H:%M"),
            provenance=resolution.provenance.value,
        )
    )


@router.get(
    "/{year}",
    response_model=ApiResponse[SolarTermTableResponse],
    summary="取得某一年的節氣表",
    description="依時間排序的二十四節氣交節時刻 (UTC+8)；provenance 標示資料來源"
)
async def get_year_terms(
    year: int = Path(..., description="公曆年", example=2025),
    source: SolarTermSource = Depends(get_solar_term_source),
):
    """取得某一年的節氣表"""
    try:
        table = source.lookup(year)
    except UnsupportedYearError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ApiResponse(
        success=True,
        data=SolarTermTableResponse(
            year=table.year,
            provenance=table.provenance.value,
            terms=[SolarTermEntryResponse(**entry.to_dict()) for entry in table.entries],
        )
    )
