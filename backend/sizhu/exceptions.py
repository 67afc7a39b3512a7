"""例外類別

排盤計算為純函式，所有錯誤皆立即回報給呼叫端，不做重試。
"""

from typing import Optional


class SizhuError(Exception):
    """四柱計算錯誤的共同基底類別"""


class InvalidInputError(SizhuError, ValueError):
    """日期時間欄位超出合法範圍"""


class UnsupportedYearError(SizhuError, LookupError):
    """該年份沒有可用的節氣資料（預先計算或近似計算皆無）"""

    def __init__(self, year: int, message: Optional[str] = None):
        self.year = year
        super().__init__(message or f"不支援的年份：{year}")


class NoDataError(UnsupportedYearError):
    """預先計算的節氣表不含該年份"""

    def __init__(self, year: int):
        super().__init__(year, f"節氣表中沒有 {year} 年的資料")
