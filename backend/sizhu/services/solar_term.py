# backend/sizhu/services/solar_term.py
"""二十四節氣資料

提供：
- 二十四節氣基本資料（名稱、太陽黃經、節／氣、月序）
- 節氣時刻記錄與每年的節氣表
- 預先計算的節氣表（JSON 資料檔）

所有時刻皆為中國標準時間 (UTC+8) 的無時區 datetime。
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from sizhu.exceptions import NoDataError


logger = logging.getLogger(__name__)


class TermKind(str, Enum):
    """節氣種類"""
    JIE = "jie"     # 節：月份交界
    QI = "qi"       # 氣：月中


class Provenance(str, Enum):
    """節氣資料來源（精確度由高至低）"""
    TABLE = "table"             # 預先計算的節氣表
    APPROXIMATE = "approximate"  # 天文近似計算，交節附近誤差可達 ±1 日
    ESTIMATED = "estimated"      # 固定日期估計（僅用於立春 2/4）


@dataclass(frozen=True)
class SolarTermDefinition:
    """節氣基本資料"""
    name: str                    # 節氣名稱
    name_en: str                 # 英文名稱
    order: int                   # 序號 (1-24，立春為 1)
    solar_longitude: int         # 太陽黃經度數
    typical_date: str            # 典型日期 (MM-DD)
    season: str                  # 所屬季節
    kind: TermKind               # 節或氣
    month_index: Optional[int]   # 節所開始的節氣月 (1=寅月 … 12=丑月)

    @property
    def is_jie(self) -> bool:
        return self.kind is TermKind.JIE


def _term(order, name, name_en, longitude, typical_date, season, month_index=None):
    kind = TermKind.JIE if month_index is not None else TermKind.QI
    return SolarTermDefinition(
        name=name,
        name_en=name_en,
        order=order,
        solar_longitude=longitude,
        typical_date=typical_date,
        season=season,
        kind=kind,
        month_index=month_index,
    )


# 二十四節氣，依黃經 315° 立春起算的順序排列
SOLAR_TERMS: list[SolarTermDefinition] = [
    _term(1, "立春", "Start of Spring", 315, "02-04", "春", 1),
    _term(2, "雨水", "Rain Water", 330, "02-19", "春"),
    _term(3, "驚蟄", "Awakening of Insects", 345, "03-06", "春", 2),
    _term(4, "春分", "Spring Equinox", 0, "03-21", "春"),
    _term(5, "清明", "Pure Brightness", 15, "04-05", "春", 3),
    _term(6, "穀雨", "Grain Rain", 30, "04-20", "春"),
    _term(7, "立夏", "Start of Summer", 45, "05-06", "夏", 4),
    _term(8, "小滿", "Grain Buds", 60, "05-21", "夏"),
    _term(9, "芒種", "Grain in Ear", 75, "06-06", "夏", 5),
    _term(10, "夏至", "Summer Solstice", 90, "06-21", "夏"),
    _term(11, "小暑", "Minor Heat", 105, "07-07", "夏", 6),
    _term(12, "大暑", "Major Heat", 120, "07-23", "夏"),
    _term(13, "立秋", "Start of Autumn", 135, "08-08", "秋", 7),
    _term(14, "處暑", "End of Heat", 150, "08-23", "秋"),
    _term(15, "白露", "White Dew", 165, "09-08", "秋", 8),
    _term(16, "秋分", "Autumn Equinox", 180, "09-23", "秋"),
    _term(17, "寒露", "Cold Dew", 195, "10-08", "秋", 9),
    _term(18, "霜降", "Frost Descent", 210, "10-24", "秋"),
    _term(19, "立冬", "Start of Winter", 225, "11-08", "冬", 10),
    _term(20, "小雪", "Minor Snow", 240, "11-22", "冬"),
    _term(21, "大雪", "Major Snow", 255, "12-07", "冬", 11),
    _term(22, "冬至", "Winter Solstice", 270, "12-22", "冬"),
    _term(23, "小寒", "Minor Cold", 285, "01-06", "冬", 12),
    _term(24, "大寒", "Major Cold", 300, "01-20", "冬"),
]

SOLAR_TERMS_BY_NAME: dict[str, SolarTermDefinition] = {t.name: t for t in SOLAR_TERMS}

LI_CHUN = "立春"


def get_solar_term_info(name: str) -> Optional[SolarTermDefinition]:
    """取得指定節氣的基本資料

    Args:
        name: 節氣名稱

    Returns:
        節氣資料，找不到則返回 None
    """
    return SOLAR_TERMS_BY_NAME.get(name)


def get_all_solar_terms() -> list[SolarTermDefinition]:
    """取得所有節氣，按序號排序"""
    return sorted(SOLAR_TERMS, key=lambda x: x.order)


def get_solar_terms_by_season(season: str) -> list[SolarTermDefinition]:
    """取得指定季節 (春/夏/秋/冬) 的所有節氣"""
    return [term for term in SOLAR_TERMS if term.season == season]


@dataclass(frozen=True)
class SolarTermEntry:
    """某一節氣的交節時刻

    Attributes:
        timestamp: 交節時刻（UTC+8，精確到分）
        name: 節氣名稱
        kind: 節或氣
        month_index: 節所開始的節氣月，氣為 None
    """
    timestamp: datetime
    name: str
    kind: TermKind
    month_index: Optional[int] = None

    @property
    def is_jie(self) -> bool:
        return self.kind is TermKind.JIE

    @classmethod
    def for_term(cls, name: str, timestamp: datetime) -> "SolarTermEntry":
        """依節氣名稱建立，種類與月序取自節氣基本資料"""
        info = SOLAR_TERMS_BY_NAME.get(name)
        if info is None:
            raise ValueError(f"未知的節氣名稱: {name!r}")
        return cls(
            timestamp=timestamp,
            name=name,
            kind=info.kind,
            month_index=info.month_index,
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.strftime("%Y-%m-%dT%H:%M"),
            "name": self.name,
            "kind": self.kind.value,
            "month_index": self.month_index,
        }


@dataclass(frozen=True)
class SolarTermTable:
    """單一公曆年的節氣表

    以包含交節時刻的公曆年為鍵，而非八字年：
    年初的小寒（丑月）屬於前一個八字年。
    """
    year: int
    entries: tuple[SolarTermEntry, ...]
    provenance: Provenance = Provenance.TABLE

    @property
    def jie_entries(self) -> tuple[SolarTermEntry, ...]:
        return tuple(e for e in self.entries if e.is_jie)

    def find(self, name: str) -> Optional[SolarTermEntry]:
        """依名稱尋找節氣"""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def last_jie_at_or_before(self, moment: datetime) -> Optional[SolarTermEntry]:
        """取得在 moment 當下或之前最後交入的節

        交節時刻本身即屬於新的節氣月。
        """
        found = None
        for entry in self.jie_entries:
            if entry.timestamp <= moment:
                found = entry
            else:
                break
        return found


def validate_entries(year: int, entries: Iterable[SolarTermEntry]) -> tuple[SolarTermEntry, ...]:
    """檢查節氣表是否合法並轉為不可變序列

    規則：
    - 時刻嚴格遞增
    - 所有時刻都落在該公曆年內
    - 節的月序依時間循環遞增 (… 12 → 1 → 2 …)，且不重複

    Raises:
        ValueError: 節氣表不合法
    """
    entries = tuple(entries)
    previous = None
    for entry in entries:
        if entry.timestamp.year != year:
            raise ValueError(f"{year} 年節氣表含有其他年份的時刻: {entry.name} {entry.timestamp}")
        if previous is not None and entry.timestamp <= previous.timestamp:
            raise ValueError(f"{year} 年節氣表時刻未遞增: {previous.name} → {entry.name}")
        if entry.is_jie and not 1 <= (entry.month_index or 0) <= 12:
            raise ValueError(f"{year} 年 {entry.name} 的月序不合法: {entry.month_index}")
        previous = entry

    months = [e.month_index for e in entries if e.is_jie]
    for current, following in zip(months, months[1:]):
        if following != current % 12 + 1:
            raise ValueError(f"{year} 年節的月序不連續: {current} → {following}")
    return entries


class PrecomputedSolarTerms:
    """預先計算的節氣表

    資料於建立時一次載入並凍結，之後只讀，可安全地被多個請求同時使用。
    JSON 格式：{"2025": [{"timestamp": "2025-01-05T10:32", "name": "小寒",
    "kind": "jie", "month_index": 12}, ...], ...}
    """

    def __init__(self, tables: dict[int, SolarTermTable]):
        self._tables = dict(tables)

    @classmethod
    def from_dict(cls, raw: dict) -> "PrecomputedSolarTerms":
        tables = {}
        for year_key, items in raw.items():
            year = int(year_key)
            entries = []
            for item in items:
                entry = SolarTermEntry(
                    timestamp=datetime.strptime(item["timestamp"], "%Y-%m-%dT%H:%M"),
                    name=item["name"],
                    kind=TermKind(item["kind"]),
                    month_index=item.get("month_index"),
                )
                expected = SOLAR_TERMS_BY_NAME.get(entry.name)
                if expected is None or expected.kind != entry.kind or expected.month_index != entry.month_index:
                    raise ValueError(f"{year} 年節氣資料與節氣定義不符: {item}")
                entries.append(entry)
            tables[year] = SolarTermTable(year, validate_entries(year, entries), Provenance.TABLE)
        return cls(tables)

    @classmethod
    def load(cls, path: Path) -> "PrecomputedSolarTerms":
        """從 JSON 檔載入節氣表"""
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        instance = cls.from_dict(raw)
        logger.info("已載入節氣表 %s：%d 個年份", path, len(instance.years))
        return instance

    @property
    def years(self) -> list[int]:
        return sorted(self._tables)

    def has_year(self, year: int) -> bool:
        return year in self._tables

    def lookup(self, year: int) -> SolarTermTable:
        """取得某一公曆年的節氣表

        Raises:
            NoDataError: 節氣表中沒有該年份
        """
        try:
            return self._tables[year]
        except KeyError:
            raise NoDataError(year) from None


def dump_tables(tables: Iterable[SolarTermTable]) -> dict:
    """將節氣表轉為 JSON 資料檔格式"""
    return {
        str(table.year): [entry.to_dict() for entry in table.entries]
        for table in sorted(tables, key=lambda t: t.year)
    }
