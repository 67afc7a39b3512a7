# backend/sizhu/services/term_source.py
"""節氣資料來源

依資料可得性選擇節氣表：
1. 預先計算的節氣表（精確）
2. 天文近似計算（降級方案，需於設定中啟用）
兩者皆無法提供時拋出 UnsupportedYearError，不會默默使用錯誤資料。
"""

import logging
import threading
from functools import lru_cache
from typing import Optional

from sizhu.config import settings
from sizhu.exceptions import NoDataError
from sizhu.services.astronomy import ApproximateSolarTerms
from sizhu.services.solar_term import PrecomputedSolarTerms, SolarTermTable


logger = logging.getLogger(__name__)


class SolarTermSource:
    """節氣表查詢介面

    Attributes:
        precomputed: 預先計算的節氣表
        approximation: 天文近似計算，None 表示停用
    """

    def __init__(
        self,
        precomputed: PrecomputedSolarTerms,
        approximation: Optional[ApproximateSolarTerms] = None,
    ):
        self.precomputed = precomputed
        self.approximation = approximation
        self._approximate_tables: dict[int, SolarTermTable] = {}
        self._lock = threading.Lock()

    def lookup(self, year: int) -> SolarTermTable:
        """取得某一公曆年的節氣表

        Raises:
            UnsupportedYearError: 沒有任何來源能提供該年份
        """
        try:
            return self.precomputed.lookup(year)
        except NoDataError:
            if self.approximation is None:
                raise

        with self._lock:
            table = self._approximate_tables.get(year)
            if table is None:
                table = self.approximation.lookup(year)
                self._approximate_tables[year] = table
                logger.warning("節氣表缺少 %d 年，改用天文近似計算", year)
        return table

    def supports(self, year: int) -> bool:
        if self.precomputed.has_year(year):
            return True
        return self.approximation is not None and self.approximation.supports(year)


def create_solar_term_source() -> SolarTermSource:
    """依設定建立節氣資料來源"""
    precomputed = PrecomputedSolarTerms.load(settings.solar_terms_file)
    approximation = None
    if settings.approximation_enabled:
        approximation = ApproximateSolarTerms(
            settings.approximation_min_year,
            settings.approximation_max_year,
        )
    return SolarTermSource(precomputed, approximation)


@lru_cache
def get_solar_term_source() -> SolarTermSource:
    """取得共用的節氣資料來源（只載入一次）"""
    return create_solar_term_source()
