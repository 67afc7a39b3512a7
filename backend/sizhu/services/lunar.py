# backend/sizhu/services/lunar.py
"""農曆服務

使用 cnlunar 庫提供命盤的農曆資訊：
- 農曆日期轉換
- 生肖

節氣與干支一律由本套件以精確的交節時刻推算，不採用 cnlunar 的結果。
"""

from datetime import date, datetime
from typing import Optional

import cnlunar


# cnlunar 支援的範圍（1901 年春節起至 2100 年底）
LUNAR_MIN_DATE = date(1901, 2, 19)
LUNAR_MAX_DATE = date(2100, 12, 31)


class LunarService:
    """農曆服務"""

    def __init__(self, dt: datetime):
        """初始化農曆服務

        Args:
            dt: 要查詢的日期時間
        """
        self.dt = dt
        self._lunar = cnlunar.Lunar(dt)

    def get_lunar_date(self) -> dict:
        """取得農曆日期

        Returns:
            農曆日期資訊
        """
        return {
            "year": self._lunar.lunarYear,
            "month": self._lunar.lunarMonth,
            "day": self._lunar.lunarDay,
            "year_cn": self._lunar.lunarYearCn,
            "month_cn": self._lunar.lunarMonthCn,
            "day_cn": self._lunar.lunarDayCn,
            "zodiac": self._lunar.chineseYearZodiac,
            "is_leap": self._lunar.isLunarLeapMonth,
        }


def is_lunar_supported(dt: date) -> bool:
    if isinstance(dt, datetime):
        dt = dt.date()
    return LUNAR_MIN_DATE <= dt <= LUNAR_MAX_DATE


def get_lunar_date(dt: datetime) -> Optional[dict]:
    """取得農曆日期（便捷函式）

    Args:
        dt: 日期時間

    Returns:
        農曆日期資訊，超出 cnlunar 支援範圍則返回 None
    """
    if not is_lunar_supported(dt):
        return None
    return LunarService(dt).get_lunar_date()
