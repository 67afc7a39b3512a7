# backend/sizhu/services/astronomy.py
"""太陽黃經近似計算

查無預先計算的節氣表時的降級方案：
- 公曆 → 儒略日（標準的前推格里曆公式）
- 太陽視黃經：平黃經 + 中心差（平近點角前三階諧波）+ 章動與光行差修正
- 以二分法求出每個節氣的交節時刻

精確度僅約數十分鐘，交節附近的結果可能差到一日，
因此計算結果一律標記為 Provenance.APPROXIMATE。
"""

import logging
import math
from datetime import datetime, timedelta

from sizhu.exceptions import UnsupportedYearError
from sizhu.services.solar_term import (
    SOLAR_TERMS,
    Provenance,
    SolarTermDefinition,
    SolarTermEntry,
    SolarTermTable,
    validate_entries,
)


logger = logging.getLogger(__name__)

# 中國標準時間與世界時的差
CST_OFFSET = timedelta(hours=8)

J2000 = 2451545.0
# J2000.0 (2000-01-01 12:00 UT) 對應的 UTC+8 時刻
J2000_CST = datetime(2000, 1, 1, 20, 0)

# 二分搜尋的範圍：典型日期前後幾天（太陽每日約移動 1°）
SEARCH_WINDOW_DAYS = 7
BISECTION_STEPS = 40


def julian_day(moment: datetime) -> float:
    """將 UTC+8 時刻轉換為儒略日

    Args:
        moment: 中國標準時間的無時區 datetime

    Returns:
        儒略日 (JD)
    """
    ut = moment - CST_OFFSET
    a = (14 - ut.month) // 12
    y = ut.year + 4800 - a
    m = ut.month + 12 * a - 3

    jdn = (
        ut.day + (153 * m + 2) // 5 + 365 * y
        + y // 4 - y // 100 + y // 400 - 32045
    )
    day_fraction = (ut.hour - 12) / 24 + ut.minute / 1440 + ut.second / 86400
    return jdn + day_fraction


def from_julian_day(jd: float) -> datetime:
    """將儒略日轉回 UTC+8 時刻（四捨五入到分）"""
    moment = J2000_CST + timedelta(days=jd - J2000)
    rounded = moment + timedelta(seconds=30)
    return rounded.replace(second=0, microsecond=0)


def sun_longitude_jd(jd: float) -> float:
    """太陽視黃經（度，0-360）"""
    t = (jd - J2000) / 36525

    mean_longitude = 280.46646 + 36000.76983 * t + 0.0003032 * t * t
    mean_anomaly = math.radians(357.52911 + 35999.05029 * t - 0.0001537 * t * t)

    # 中心差，只取前三階
    center = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(mean_anomaly)
        + (0.019993 - 0.000101 * t) * math.sin(2 * mean_anomaly)
        + 0.000289 * math.sin(3 * mean_anomaly)
    )

    omega = math.radians(125.04 - 1934.136 * t)
    apparent = mean_longitude + center - 0.00569 - 0.00478 * math.sin(omega)
    return apparent % 360


def sun_longitude(moment: datetime) -> float:
    """某一 UTC+8 時刻的太陽視黃經（度）"""
    return sun_longitude_jd(julian_day(moment))


def term_band(moment: datetime) -> SolarTermDefinition:
    """取得某一時刻所處的 15° 黃經區段對應的節氣

    黃經 315° 起為立春，之後每 15° 依序為下一個節氣。
    """
    longitude = sun_longitude(moment)
    band = int(((longitude - 315) % 360) // 15)
    return SOLAR_TERMS[band]


def _angle_past(longitude: float, target: float) -> float:
    """longitude 超過 target 的角度，落在 [-180, 180)"""
    return (longitude - target + 180) % 360 - 180


def find_term_moment(year: int, term: SolarTermDefinition) -> datetime:
    """以二分法求出某一年某節氣的交節時刻

    Args:
        year: 公曆年
        term: 節氣基本資料

    Returns:
        交節時刻（UTC+8，精確到分）
    """
    month, day = (int(part) for part in term.typical_date.split("-"))
    center = julian_day(datetime(year, month, day, 12, 0))
    low = center - SEARCH_WINDOW_DAYS
    high = center + SEARCH_WINDOW_DAYS

    target = float(term.solar_longitude)
    if not (_angle_past(sun_longitude_jd(low), target) < 0 <= _angle_past(sun_longitude_jd(high), target)):
        raise RuntimeError(f"{year} 年 {term.name} 不在搜尋範圍內")

    for _ in range(BISECTION_STEPS):
        middle = (low + high) / 2
        if _angle_past(sun_longitude_jd(middle), target) < 0:
            low = middle
        else:
            high = middle

    return from_julian_day(high)


class ApproximateSolarTerms:
    """以天文近似計算產生的節氣表

    只在預先計算的節氣表缺少該年份時使用。
    """

    def __init__(self, min_year: int = 1800, max_year: int = 2200):
        self.min_year = min_year
        self.max_year = max_year

    def supports(self, year: int) -> bool:
        return self.min_year <= year <= self.max_year

    def lookup(self, year: int) -> SolarTermTable:
        """計算某一公曆年的節氣表

        Raises:
            UnsupportedYearError: 年份超出近似計算支援範圍
        """
        if not self.supports(year):
            raise UnsupportedYearError(
                year,
                f"{year} 年超出近似計算範圍 ({self.min_year}-{self.max_year})",
            )

        entries = sorted(
            (SolarTermEntry.for_term(term.name, find_term_moment(year, term)) for term in SOLAR_TERMS),
            key=lambda e: e.timestamp,
        )
        logger.debug("已以近似計算產生 %d 年節氣表", year)
        return SolarTermTable(year, validate_entries(year, entries), Provenance.APPROXIMATE)
