# backend/sizhu/services/ephemeris.py
"""以星曆表產生精確節氣表

使用 skyfield 與 JPL 星曆表 (de440s.bsp，涵蓋 1849-2150) 求出
太陽視黃經（當日春分點）每跨越 15° 的時刻，輸出預先計算節氣表的 JSON 格式。
星曆表檔案首次使用時會自動下載。
"""

import json
import logging
from datetime import timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
from skyfield import almanac
from skyfield.api import Loader

from sizhu.services.solar_term import (
    SOLAR_TERMS,
    PrecomputedSolarTerms,
    SolarTermEntry,
    SolarTermTable,
    Provenance,
    dump_tables,
    validate_entries,
)


logger = logging.getLogger(__name__)

CST = timezone(timedelta(hours=8))
EPHEMERIS_FILE = "de440s.bsp"


def term_index_from_longitude(degrees):
    """將黃經換算成節氣序號 (0=立春 … 23=大寒)"""
    degrees = np.asarray(degrees) % 360
    return (((degrees - 315) % 360 + 1e-9) // 15).astype(int) % 24


def entries_from_events(year: int, times: Iterable, events: Iterable[int]) -> list[SolarTermEntry]:
    """將 find_discrete 的結果轉成節氣時刻

    只保留 UTC+8 落在該公曆年的事件，時刻四捨五入到分。
    """
    entries = []
    for t, index in zip(times, events):
        moment = t.utc_datetime().astimezone(CST).replace(tzinfo=None)
        moment = (moment + timedelta(seconds=30)).replace(second=0, microsecond=0)
        if moment.year != year:
            continue
        entries.append(SolarTermEntry.for_term(SOLAR_TERMS[int(index)].name, moment))
    return entries


class EphemerisSolarTerms:
    """以 skyfield 計算節氣表

    Args:
        data_dir: 星曆表下載目錄
        ephemeris: 星曆表檔名
    """

    def __init__(self, data_dir: Path, ephemeris: str = EPHEMERIS_FILE):
        data_dir.mkdir(parents=True, exist_ok=True)
        loader = Loader(str(data_dir))
        self.timescale = loader.timescale()
        self.ephemeris = loader(ephemeris)
        self._earth = self.ephemeris["earth"]
        self._sun = self.ephemeris["sun"]

    def lookup(self, year: int) -> SolarTermTable:
        """計算某一公曆年的節氣表"""
        earth, sun = self._earth, self._sun

        def term_index(t):
            apparent = earth.at(t).observe(sun).apparent()
            # 以當日春分點為基準
            _, longitude, _ = apparent.ecliptic_latlon(epoch=t)
            return term_index_from_longitude(longitude.degrees)

        term_index.step_days = 5.0

        # 前後各多取一天，以涵蓋 UTC 與 UTC+8 的差
        t0 = self.timescale.utc(year - 1, 12, 31)
        t1 = self.timescale.utc(year + 1, 1, 2)
        times, events = almanac.find_discrete(t0, t1, term_index)

        entries = entries_from_events(year, times, events)
        if len(entries) != 24:
            raise RuntimeError(f"{year} 年只找到 {len(entries)} 個節氣")
        return SolarTermTable(year, validate_entries(year, entries), Provenance.TABLE)


def build_solar_term_table(
    start_year: int,
    end_year: int,
    output: Path,
    data_dir: Path,
    merge_with: Optional[PrecomputedSolarTerms] = None,
) -> int:
    """產生節氣表並寫入 JSON 檔

    Args:
        start_year: 起始年份
        end_year: 結束年份（含）
        output: 輸出檔案路徑
        data_dir: 星曆表下載目錄
        merge_with: 要保留的既有節氣表，新計算的年份會覆蓋

    Returns:
        輸出的年份數
    """
    if start_year > end_year:
        raise ValueError(f"起始年份 {start_year} 大於結束年份 {end_year}")

    tables = {}
    if merge_with is not None:
        tables = {year: merge_with.lookup(year) for year in merge_with.years}

    source = EphemerisSolarTerms(data_dir)
    for year in range(start_year, end_year + 1):
        logger.info("計算 %d 年節氣", year)
        tables[year] = source.lookup(year)

    output.parent.mkdir(parents=True, exist_ok=True)
    tmp = output.with_suffix(output.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(dump_tables(tables.values()), f, ensure_ascii=False, indent=2)
    tmp.replace(output)
    logger.info("已寫入 %s：%d 個年份", output, len(tables))
    return len(tables)
