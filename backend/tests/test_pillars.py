# backend/tests/test_pillars.py
"""四柱推算測試"""

from datetime import date, datetime, timedelta, timezone

import pytest

from sizhu.exceptions import InvalidInputError, NoDataError, UnsupportedYearError
from sizhu.services.pillars import (
    day_pillar,
    double_hour_index,
    hour_pillar,
    least_precise,
    month_pillar,
    resolve_day_pillar,
    resolve_hour_pillar,
    resolve_month,
    resolve_month_pillar,
    resolve_year,
    resolve_year_pillar,
    to_reference_time,
    validate_moment,
    year_pillar,
)
from sizhu.services.solar_term import Provenance


class TestMonthPillarAtJieBoundary:
    """1967-10-09 10:45 寒露交節"""

    def test_before_boundary(self, source):
        result = resolve_month_pillar(1967, 10, 9, 2, 44, source)
        assert result.pillar.ganzhi == "己酉"
        assert result.month_index == 8
        assert result.term_name == "白露"
        assert result.provenance is Provenance.TABLE

    def test_one_minute_before(self, source):
        assert resolve_month_pillar(1967, 10, 9, 10, 44, source).pillar.ganzhi == "己酉"

    def test_exact_boundary(self, source):
        """交節當分即屬新月"""
        result = resolve_month_pillar(1967, 10, 9, 10, 45, source)
        assert result.pillar.ganzhi == "庚戌"
        assert result.month_index == 9
        assert result.term_name == "寒露"
        assert result.term_timestamp == datetime(1967, 10, 9, 10, 45)
        assert result.effective_year == 1967

    def test_after_boundary(self, source):
        assert resolve_month_pillar(1967, 10, 9, 10, 46, source).pillar.ganzhi == "庚戌"

    def test_every_jie_boundary(self, source, precomputed):
        """每個節交節前一分鐘與交節當下分屬不同月"""
        for year in precomputed.years:
            for entry in precomputed.lookup(year).jie_entries:
                at = entry.timestamp
                before = at - timedelta(minutes=1)
                current = resolve_month(at, source)
                previous = resolve_month(before, source)
                assert current.month_index == entry.month_index
                assert previous.month_index == (entry.month_index - 2) % 12 + 1


class TestLiChun:
    """2025-02-03 22:10 立春：年柱與月柱同時切換"""

    def test_before_li_chun(self, source):
        year = resolve_year_pillar(2025, 2, 3, 22, 9, source)
        assert year.effective_year == 2024
        assert year.pillar.ganzhi == "甲辰"

        month = resolve_month_pillar(2025, 2, 3, 22, 9, source)
        assert month.month_index == 12
        assert month.pillar.ganzhi == "丁丑"

    def test_at_li_chun(self, source):
        year = resolve_year_pillar(2025, 2, 3, 22, 10, source)
        assert year.effective_year == 2025
        assert year.pillar.ganzhi == "乙巳"
        assert year.li_chun == datetime(2025, 2, 3, 22, 10)
        assert year.provenance is Provenance.TABLE

        month = resolve_month_pillar(2025, 2, 3, 22, 10, source)
        assert month.month_index == 1
        assert month.pillar.ganzhi == "戊寅"
        assert month.effective_year == 2025


class TestPreviousYearLookup:
    """小寒之前需查前一年的節氣表"""

    def test_uses_previous_years_last_jie(self, source):
        result = resolve_month_pillar(2025, 1, 1, 12, 0, source)
        assert result.from_previous_year
        assert result.month_index == 11
        assert result.term_name == "大雪"
        assert result.term_timestamp == datetime(2024, 12, 6, 23, 17)
        assert result.pillar.ganzhi == "丙子"
        assert result.provenance is Provenance.TABLE

    def test_previous_year_approximated(self, source):
        result = resolve_month_pillar(1967, 1, 1, 0, 0, source)
        assert result.from_previous_year
        assert result.month_index == 11
        assert result.pillar.ganzhi == "庚子"
        assert result.provenance is Provenance.APPROXIMATE

    def test_previous_year_missing(self, table_only_source):
        """前一年沒有資料時拋出錯誤，不會猜測月份"""
        with pytest.raises(NoDataError) as exc_info:
            resolve_month_pillar(1967, 1, 1, 0, 0, table_only_source)
        assert exc_info.value.year == 1966


class TestProvenance:
    """資料來源標示"""

    def test_least_precise(self):
        assert least_precise(Provenance.TABLE) is Provenance.TABLE
        assert least_precise(Provenance.TABLE, Provenance.APPROXIMATE) is Provenance.APPROXIMATE
        assert least_precise(Provenance.ESTIMATED, Provenance.APPROXIMATE) is Provenance.ESTIMATED

    def test_approximate_year(self, source):
        result = resolve_month_pillar(1950, 6, 15, 12, 0, source)
        assert result.provenance is Provenance.APPROXIMATE
        assert result.month_index == 5
        assert result.pillar.ganzhi == "壬午"

    def test_unsupported_year(self, source, table_only_source):
        with pytest.raises(UnsupportedYearError):
            resolve_month_pillar(1700, 6, 15, 12, 0, source)
        with pytest.raises(UnsupportedYearError):
            resolve_month_pillar(1950, 6, 15, 12, 0, table_only_source)

    def test_estimated_li_chun(self, table_only_source):
        """沒有節氣表時以 2 月 4 日估計立春"""
        before = resolve_year(datetime(1950, 2, 3, 23, 59), table_only_source)
        assert before.effective_year == 1949
        assert before.provenance is Provenance.ESTIMATED

        after = resolve_year(datetime(1950, 2, 4, 0, 0), table_only_source)
        assert after.effective_year == 1950
        assert after.pillar.ganzhi == "庚寅"
        assert after.li_chun == datetime(1950, 2, 4)


class TestFormulas:
    """干支公式"""

    @pytest.mark.parametrize(
        "year_stem, month_index, expected",
        [
            (0, 1, "丙寅"),   # 甲己之年丙作首
            (5, 1, "丙寅"),
            (1, 1, "戊寅"),   # 乙庚之歲戊為頭
            (2, 1, "庚寅"),
            (3, 1, "壬寅"),
            (4, 1, "甲寅"),
            (3, 8, "己酉"),
            (3, 9, "庚戌"),
            (0, 12, "丁丑"),
        ],
    )
    def test_month_pillar(self, year_stem, month_index, expected):
        assert month_pillar(year_stem, month_index).ganzhi == expected

    @pytest.mark.parametrize("year_stem, month_index", [(10, 1), (-1, 1), (0, 0), (0, 13)])
    def test_month_pillar_invalid(self, year_stem, month_index):
        with pytest.raises(InvalidInputError):
            month_pillar(year_stem, month_index)

    def test_year_pillar(self):
        assert year_pillar(4).ganzhi == "甲子"
        assert year_pillar(1967).ganzhi == "丁未"
        assert year_pillar(1984).ganzhi == "甲子"
        assert year_pillar(2024).ganzhi == "甲辰"

    def test_day_pillar(self):
        assert day_pillar(date(1900, 1, 1)).ganzhi == "甲戌"
        assert day_pillar(date(2000, 1, 1)).ganzhi == "戊午"
        assert day_pillar(date(1967, 10, 9)).ganzhi == "丙午"
        assert day_pillar(datetime(2000, 1, 1, 23, 30)).ganzhi == "戊午"

    def test_day_pillar_period(self):
        """日柱六十日一循環"""
        start = date(2000, 1, 1)
        assert day_pillar(start + timedelta(days=60)) == day_pillar(start)
        assert day_pillar(start + timedelta(days=1)).cycle_index == 55

    def test_double_hour_index(self):
        assert double_hour_index(23) == 0
        assert double_hour_index(0) == 0
        assert double_hour_index(1) == 1
        assert double_hour_index(10) == 5
        assert double_hour_index(22) == 11
        with pytest.raises(InvalidInputError):
            double_hour_index(24)

    def test_hour_pillar(self):
        assert hour_pillar(0, 23).pillar.ganzhi == "甲子"
        assert hour_pillar(0, 0).pillar.ganzhi == "甲子"
        assert hour_pillar(0, 1).pillar.ganzhi == "乙丑"
        assert hour_pillar(2, 10).pillar.ganzhi == "癸巳"
        assert hour_pillar(2, 10).double_hour == "巳時"
        assert hour_pillar(5, 0).pillar.ganzhi == "甲子"


class TestInputs:
    """輸入檢查"""

    @pytest.mark.parametrize(
        "args",
        [(2025, 13, 1), (2025, 0, 1), (2025, 2, 30), (2025, 1, 1, 24), (2025, 1, 1, 0, 60)],
    )
    def test_invalid_moment(self, args):
        with pytest.raises(InvalidInputError):
            validate_moment(*args)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_day_pillar(2025, 2, 29)

    def test_resolve_hour_pillar(self):
        assert resolve_hour_pillar("丙", 10).pillar.ganzhi == "癸巳"
        assert resolve_hour_pillar(2, 10).pillar.ganzhi == "癸巳"
        with pytest.raises(InvalidInputError):
            resolve_hour_pillar("子", 10)
        with pytest.raises(InvalidInputError):
            resolve_hour_pillar(10, 10)

    def test_aware_datetime(self, source):
        """含時區的時刻先轉為 UTC+8"""
        utc = datetime(1967, 10, 9, 2, 45, tzinfo=timezone.utc)
        assert to_reference_time(utc) == datetime(1967, 10, 9, 10, 45)
        assert resolve_month(utc, source).term_name == "寒露"


class TestYearsWithoutTable:
    """節氣表未收錄的年份改用近似計算並如實標示"""

    def test_li_chun_2000(self, source):
        """2000 年立春約在 2/4 20:40，19:00 仍屬己卯年丑月"""
        year = resolve_year_pillar(2000, 2, 4, 19, 0, source)
        assert year.effective_year == 1999
        assert year.pillar.ganzhi == "己卯"
        assert year.provenance is Provenance.APPROXIMATE

        month = resolve_month_pillar(2000, 2, 4, 19, 0, source)
        assert month.pillar.ganzhi == "丁丑"
        assert month.provenance is Provenance.APPROXIMATE

    def test_after_li_chun_2000(self, source):
        month = resolve_month_pillar(2000, 2, 4, 22, 0, source)
        assert month.pillar.ganzhi == "戊寅"
        assert month.effective_year == 2000


class TestIdempotence:
    """同一時刻重複推算結果一致"""

    @pytest.mark.parametrize(
        "moment",
        [
            (1967, 10, 9, 10, 45),   # 節氣表年份
            (2025, 1, 1, 12, 0),     # 節氣表年份，查前一年
            (1950, 6, 15, 12, 0),    # 近似計算年份
            (1999, 1, 3, 0, 0),      # 近似計算年份，查前一年
        ],
    )
    def test_same_result_twice(self, source, moment):
        first_month = resolve_month_pillar(*moment, source=source)
        second_month = resolve_month_pillar(*moment, source=source)
        assert first_month == second_month

        first_year = resolve_year_pillar(*moment, source=source)
        second_year = resolve_year_pillar(*moment, source=source)
        assert first_year == second_year
