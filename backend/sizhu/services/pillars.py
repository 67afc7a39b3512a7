# backend/sizhu/services/pillars.py
"""四柱推算

以節氣為界推算年柱與月柱：
- 年柱以立春交節時刻為界，立春前屬前一年
- 月柱以十二節的交節時刻為界（精確到分），交節當下即屬新月
- 月干由年干推得（五虎遁）：甲己之年丙作首

日柱與時柱只依曆日與時辰循環推算，與節氣無關。
天干一律以 0 起算（甲=0 … 癸=9）。
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from sizhu.exceptions import InvalidInputError, UnsupportedYearError
from sizhu.services.ganzhi import (
    DOUBLE_HOURS,
    EARTHLY_BRANCHES,
    MONTH_BRANCHES,
    StemBranch,
    stem_index,
)
from sizhu.services.solar_term import LI_CHUN, Provenance
from sizhu.services.term_source import SolarTermSource, get_solar_term_source


CHINA_STANDARD_TIME = timezone(timedelta(hours=8), "CST")

# 日柱基準：1900-01-01 為甲戌日（六十甲子第 10 日）
DAY_EPOCH = date(1900, 1, 1)
DAY_EPOCH_CYCLE = 10

# 查無立春資料時的估計值
ESTIMATED_LI_CHUN = (2, 4)

_PRECISION = [Provenance.TABLE, Provenance.APPROXIMATE, Provenance.ESTIMATED]


def least_precise(*provenances: Provenance) -> Provenance:
    """取精確度最低的資料來源"""
    return max(provenances, key=_PRECISION.index)


@dataclass(frozen=True)
class MonthResolution:
    """節氣月推算結果

    Attributes:
        month_index: 節氣月 (1=寅月 … 12=丑月)
        term_name: 最後交入的節
        term_timestamp: 該節的交節時刻
        provenance: 節氣資料來源
        from_previous_year: 是否取自前一公曆年的節氣表
    """
    month_index: int
    term_name: str
    term_timestamp: datetime
    provenance: Provenance
    from_previous_year: bool = False


@dataclass(frozen=True)
class YearResolution:
    """八字年推算結果"""
    effective_year: int
    pillar: StemBranch
    li_chun: datetime
    provenance: Provenance


@dataclass(frozen=True)
class MonthPillar:
    """月柱"""
    pillar: StemBranch
    month_index: int
    term_name: str
    term_timestamp: datetime
    effective_year: int
    provenance: Provenance
    from_previous_year: bool = False


@dataclass(frozen=True)
class HourPillar:
    """時柱"""
    pillar: StemBranch
    double_hour: str


def to_reference_time(moment: datetime) -> datetime:
    """將時刻轉為中國標準時間 (UTC+8) 的無時區 datetime

    無時區的 datetime 視為已是 UTC+8。
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(CHINA_STANDARD_TIME).replace(tzinfo=None)


def validate_moment(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """檢查日期時間欄位並組成 datetime

    Raises:
        InvalidInputError: 任一欄位超出合法範圍
    """
    if not 1 <= month <= 12:
        raise InvalidInputError(f"月份必須介於 1-12: {month}")
    if not 0 <= hour <= 23:
        raise InvalidInputError(f"小時必須介於 0-23: {hour}")
    if not 0 <= minute <= 59:
        raise InvalidInputError(f"分鐘必須介於 0-59: {minute}")
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError as e:
        raise InvalidInputError(f"日期不合法: {year}-{month}-{day} ({e})") from None


def _source(source: Optional[SolarTermSource]) -> SolarTermSource:
    return source if source is not None else get_solar_term_source()


# ============================================================================
# 節氣月 / 八字年
# ============================================================================


def resolve_month(moment: datetime, source: Optional[SolarTermSource] = None) -> MonthResolution:
    """推算某一時刻所屬的節氣月

    先查該公曆年的節氣表；若該年第一個節（小寒）尚未交入，
    則往前查一年，取前一年最後交入的節（大雪）。

    Raises:
        UnsupportedYearError: 需要的節氣表無法取得
    """
    source = _source(source)
    moment = to_reference_time(moment)

    table = source.lookup(moment.year)
    entry = table.last_jie_at_or_before(moment)
    if entry is not None:
        return MonthResolution(
            month_index=entry.month_index,
            term_name=entry.name,
            term_timestamp=entry.timestamp,
            provenance=table.provenance,
        )

    previous = source.lookup(moment.year - 1)
    entry = previous.last_jie_at_or_before(moment)
    if entry is None:
        raise UnsupportedYearError(moment.year - 1, f"{moment.year - 1} 年節氣表沒有任何節")
    return MonthResolution(
        month_index=entry.month_index,
        term_name=entry.name,
        term_timestamp=entry.timestamp,
        provenance=least_precise(table.provenance, previous.provenance),
        from_previous_year=True,
    )


def year_pillar(effective_year: int) -> StemBranch:
    """八字年的干支，西元 4 年為甲子"""
    return StemBranch((effective_year - 4) % 10, (effective_year - 4) % 12)


def resolve_year(moment: datetime, source: Optional[SolarTermSource] = None) -> YearResolution:
    """推算某一時刻所屬的八字年

    立春交節時刻之前屬前一年。查無節氣表時以 2 月 4 日 0 時估計立春。
    """
    source = _source(source)
    moment = to_reference_time(moment)

    try:
        table = source.lookup(moment.year)
    except UnsupportedYearError:
        table = None

    entry = table.find(LI_CHUN) if table is not None else None
    if entry is not None:
        li_chun = entry.timestamp
        provenance = table.provenance
    else:
        li_chun = datetime(moment.year, *ESTIMATED_LI_CHUN)
        provenance = Provenance.ESTIMATED

    effective_year = moment.year - 1 if moment < li_chun else moment.year
    return YearResolution(
        effective_year=effective_year,
        pillar=year_pillar(effective_year),
        li_chun=li_chun,
        provenance=provenance,
    )


# ============================================================================
# 干支公式
# ============================================================================


def month_pillar(year_stem_index: int, solar_month_index: int) -> StemBranch:
    """由年干與節氣月推算月柱

    寅月月干 = 年干 × 2 + 2（甲己之年丙寅、乙庚之年戊寅 …），之後每月加一。

    Args:
        year_stem_index: 年干索引 (0-9)
        solar_month_index: 節氣月 (1-12)
    """
    if not 0 <= year_stem_index <= 9:
        raise InvalidInputError(f"年干索引必須介於 0-9: {year_stem_index}")
    if not 1 <= solar_month_index <= 12:
        raise InvalidInputError(f"節氣月必須介於 1-12: {solar_month_index}")

    stem = (year_stem_index * 2 + solar_month_index + 1) % 10
    branch = EARTHLY_BRANCHES.index(MONTH_BRANCHES[solar_month_index - 1])
    return StemBranch(stem, branch)


def day_pillar(day: date) -> StemBranch:
    """推算日柱

    以曆日差計算，不受時區或日光節約時間影響。
    """
    if isinstance(day, datetime):
        day = day.date()
    cycle_day = ((day - DAY_EPOCH).days + DAY_EPOCH_CYCLE) % 60
    return StemBranch.from_cycle(cycle_day)


def double_hour_index(hour: int) -> int:
    """時辰序號，23:00-00:59 為子時 (0)"""
    if not 0 <= hour <= 23:
        raise InvalidInputError(f"小時必須介於 0-23: {hour}")
    return (hour + 1) // 2 % 12


def hour_pillar(day_stem_index: int, hour: int) -> HourPillar:
    """由日干與小時推算時柱（五鼠遁）：甲己還加甲"""
    if not 0 <= day_stem_index <= 9:
        raise InvalidInputError(f"日干索引必須介於 0-9: {day_stem_index}")
    branch = double_hour_index(hour)
    stem = ((day_stem_index % 5) * 2 + branch) % 10
    return HourPillar(pillar=StemBranch(stem, branch), double_hour=DOUBLE_HOURS[branch])


# ============================================================================
# 月柱組合
# ============================================================================


def resolve_year_and_month(
    moment: datetime, source: Optional[SolarTermSource] = None
) -> tuple[YearResolution, MonthPillar]:
    """推算某一時刻的八字年與月柱

    月干取決於以立春為界的年干，因此兩者一併推算。
    """
    month_resolution = resolve_month(moment, source)
    year_resolution = resolve_year(moment, source)

    result = MonthPillar(
        pillar=month_pillar(year_resolution.pillar.stem_index, month_resolution.month_index),
        month_index=month_resolution.month_index,
        term_name=month_resolution.term_name,
        term_timestamp=month_resolution.term_timestamp,
        effective_year=year_resolution.effective_year,
        provenance=least_precise(month_resolution.provenance, year_resolution.provenance),
        from_previous_year=month_resolution.from_previous_year,
    )
    return year_resolution, result


# ============================================================================
# 對外介面
# ============================================================================


def resolve_month_pillar(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    source: Optional[SolarTermSource] = None,
) -> MonthPillar:
    """推算月柱（主要進入點）

    Raises:
        InvalidInputError: 日期時間欄位不合法
        UnsupportedYearError: 沒有可用的節氣資料
    """
    moment = validate_moment(year, month, day, hour, minute)
    _, result = resolve_year_and_month(moment, source)
    return result


def resolve_year_pillar(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    source: Optional[SolarTermSource] = None,
) -> YearResolution:
    """推算年柱"""
    moment = validate_moment(year, month, day, hour, minute)
    return resolve_year(moment, source)


def resolve_day_pillar(year: int, month: int, day: int) -> StemBranch:
    """推算日柱"""
    return day_pillar(validate_moment(year, month, day).date())


def resolve_hour_pillar(day_stem: Union[str, int], hour: int) -> HourPillar:
    """推算時柱

    Args:
        day_stem: 日干（「甲」或索引 0-9）
        hour: 小時 (0-23)
    """
    if isinstance(day_stem, str):
        try:
            day_stem = stem_index(day_stem)
        except ValueError as e:
            raise InvalidInputError(str(e)) from None
    return hour_pillar(day_stem, hour)
