# backend/tests/test_solar_term.py
"""節氣表測試"""

from datetime import datetime

import pytest

from sizhu.exceptions import NoDataError, UnsupportedYearError
from sizhu.services.solar_term import (
    PrecomputedSolarTerms,
    Provenance,
    SolarTermEntry,
    dump_tables,
    get_all_solar_terms,
    get_solar_term_info,
    get_solar_terms_by_season,
    validate_entries,
)


class TestSolarTermDefinitions:
    """節氣基本資料測試"""

    def test_all_terms(self):
        terms = get_all_solar_terms()
        assert len(terms) == 24
        assert terms[0].name == "立春"
        assert terms[0].solar_longitude == 315

    def test_jie_month_indices(self):
        """十二節各自開始一個節氣月"""
        months = sorted(t.month_index for t in get_all_solar_terms() if t.is_jie)
        assert months == list(range(1, 13))

    def test_term_info(self):
        info = get_solar_term_info("寒露")
        assert info.is_jie
        assert info.month_index == 9
        assert get_solar_term_info("霜降").month_index is None
        assert get_solar_term_info("不存在") is None

    def test_by_season(self):
        spring = get_solar_terms_by_season("春")
        assert [t.name for t in spring] == ["立春", "雨水", "驚蟄", "春分", "清明", "穀雨"]


class TestPrecomputedSolarTerms:
    """預先計算的節氣表測試"""

    def test_years(self, precomputed):
        assert precomputed.years == [1967, 2024, 2025]

    def test_table_shape(self, precomputed):
        """每年 24 個節氣，時刻遞增"""
        for year in precomputed.years:
            table = precomputed.lookup(year)
            assert len(table.entries) == 24
            assert len(table.jie_entries) == 12
            assert table.provenance is Provenance.TABLE
            timestamps = [e.timestamp for e in table.entries]
            assert timestamps == sorted(timestamps)
            assert table.jie_entries[0].month_index == 12

    def test_known_times(self, precomputed):
        assert precomputed.lookup(1967).find("寒露").timestamp == datetime(1967, 10, 9, 10, 45)
        assert precomputed.lookup(2025).find("立春").timestamp == datetime(2025, 2, 3, 22, 10)

    def test_missing_year(self, precomputed):
        assert not precomputed.has_year(1950)
        with pytest.raises(NoDataError) as exc_info:
            precomputed.lookup(1950)
        assert isinstance(exc_info.value, UnsupportedYearError)
        assert exc_info.value.year == 1950

    def test_dump_and_reload(self, precomputed):
        """輸出後重新載入內容一致"""
        tables = [precomputed.lookup(year) for year in precomputed.years]
        reloaded = PrecomputedSolarTerms.from_dict(dump_tables(tables))
        assert reloaded.lookup(1967) == precomputed.lookup(1967)

    def test_from_dict_rejects_wrong_kind(self):
        raw = {"2025": [{"timestamp": "2025-01-05T10:32", "name": "小寒", "kind": "qi", "month_index": None}]}
        with pytest.raises(ValueError):
            PrecomputedSolarTerms.from_dict(raw)


class TestLastJie:
    """最後交入的節"""

    def test_boundary_is_inclusive(self, precomputed):
        table = precomputed.lookup(1967)
        assert table.last_jie_at_or_before(datetime(1967, 10, 9, 10, 45)).name == "寒露"
        assert table.last_jie_at_or_before(datetime(1967, 10, 9, 10, 44)).name == "白露"

    def test_before_first_jie(self, precomputed):
        table = precomputed.lookup(1967)
        assert table.last_jie_at_or_before(datetime(1967, 1, 6, 11, 23)) is None
        assert table.last_jie_at_or_before(datetime(1967, 1, 6, 11, 24)).name == "小寒"

    def test_end_of_year(self, precomputed):
        table = precomputed.lookup(1967)
        assert table.last_jie_at_or_before(datetime(1967, 12, 31, 23, 59)).name == "大雪"


class TestValidateEntries:
    """節氣表驗證"""

    def test_not_increasing(self):
        entries = [
            SolarTermEntry.for_term("立春", datetime(2025, 2, 3, 22, 10)),
            SolarTermEntry.for_term("小寒", datetime(2025, 1, 5, 10, 32)),
        ]
        with pytest.raises(ValueError):
            validate_entries(2025, entries)

    def test_other_year(self):
        entries = [SolarTermEntry.for_term("大雪", datetime(2024, 12, 6, 23, 17))]
        with pytest.raises(ValueError):
            validate_entries(2025, entries)

    def test_months_not_consecutive(self):
        entries = [
            SolarTermEntry.for_term("小寒", datetime(2025, 1, 5, 10, 32)),
            SolarTermEntry.for_term("驚蟄", datetime(2025, 3, 5, 16, 7)),
        ]
        with pytest.raises(ValueError):
            validate_entries(2025, entries)

    def test_valid(self):
        entries = [
            SolarTermEntry.for_term("小寒", datetime(2025, 1, 5, 10, 32)),
            SolarTermEntry.for_term("大寒", datetime(2025, 1, 20, 3, 0)),
            SolarTermEntry.for_term("立春", datetime(2025, 2, 3, 22, 10)),
        ]
        assert len(validate_entries(2025, entries)) == 3

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            SolarTermEntry.for_term("春節", datetime(2025, 1, 29))


class TestSolarTermSource:
    """節氣資料來源測試"""

    def test_table_first(self, source):
        assert source.lookup(2025).provenance is Provenance.TABLE

    def test_approximation_fallback(self, source):
        table = source.lookup(1950)
        assert table.provenance is Provenance.APPROXIMATE
        assert len(table.entries) == 24
        # 同一年份只計算一次
        assert source.lookup(1950) is table

    def test_without_approximation(self, table_only_source):
        with pytest.raises(NoDataError):
            table_only_source.lookup(1950)

    def test_supports(self, source, table_only_source):
        assert source.supports(1950)
        assert not source.supports(1700)
        assert table_only_source.supports(2025)
        assert not table_only_source.supports(1950)

    def test_out_of_range(self, source):
        with pytest.raises(UnsupportedYearError):
            source.lookup(1700)
