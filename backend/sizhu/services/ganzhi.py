# backend/sizhu/services/ganzhi.py
"""天干地支基礎資料

提供：
- 十天干、十二地支與六十甲子
- 天干地支的顯示用資訊（拼音、五行、陰陽、生肖）

此處的資訊只供顯示，計算一律使用 0 起算的索引：
天干 甲=0 … 癸=9，地支 子=0 … 亥=11。
"""

from dataclasses import dataclass


HEAVENLY_STEMS = ["甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸"]
EARTHLY_BRANCHES = ["子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥"]

# 月支固定以寅月為首（立春起寅月）
MONTH_BRANCHES = ["寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥", "子", "丑"]

DOUBLE_HOURS = [
    "子時", "丑時", "寅時", "卯時", "辰時", "巳時",
    "午時", "未時", "申時", "酉時", "戌時", "亥時",
]

ELEMENTS = ["木", "火", "土", "金", "水"]


@dataclass(frozen=True)
class StemInfo:
    """天干顯示資訊"""
    name: str
    pinyin: str
    element: str        # 五行（中文）
    element_en: str
    yin: bool


@dataclass(frozen=True)
class BranchInfo:
    """地支顯示資訊"""
    name: str
    pinyin: str
    element: str
    element_en: str
    animal: str         # 生肖（中文）
    animal_en: str


STEM_INFO: dict[str, StemInfo] = {
    "甲": StemInfo("甲", "Jiǎ", "木", "Wood", False),
    "乙": StemInfo("乙", "Yǐ", "木", "Wood", True),
    "丙": StemInfo("丙", "Bǐng", "火", "Fire", False),
    "丁": StemInfo("丁", "Dīng", "火", "Fire", True),
    "戊": StemInfo("戊", "Wù", "土", "Earth", False),
    "己": StemInfo("己", "Jǐ", "土", "Earth", True),
    "庚": StemInfo("庚", "Gēng", "金", "Metal", False),
    "辛": StemInfo("辛", "Xīn", "金", "Metal", True),
    "壬": StemInfo("壬", "Rén", "水", "Water", False),
    "癸": StemInfo("癸", "Guǐ", "水", "Water", True),
}

BRANCH_INFO: dict[str, BranchInfo] = {
    "子": BranchInfo("子", "Zǐ", "水", "Water", "鼠", "Rat"),
    "丑": BranchInfo("丑", "Chǒu", "土", "Earth", "牛", "Ox"),
    "寅": BranchInfo("寅", "Yín", "木", "Wood", "虎", "Tiger"),
    "卯": BranchInfo("卯", "Mǎo", "木", "Wood", "兔", "Rabbit"),
    "辰": BranchInfo("辰", "Chén", "土", "Earth", "龍", "Dragon"),
    "巳": BranchInfo("巳", "Sì", "火", "Fire", "蛇", "Snake"),
    "午": BranchInfo("午", "Wǔ", "火", "Fire", "馬", "Horse"),
    "未": BranchInfo("未", "Wèi", "土", "Earth", "羊", "Goat"),
    "申": BranchInfo("申", "Shēn", "金", "Metal", "猴", "Monkey"),
    "酉": BranchInfo("酉", "Yǒu", "金", "Metal", "雞", "Rooster"),
    "戌": BranchInfo("戌", "Xū", "土", "Earth", "狗", "Dog"),
    "亥": BranchInfo("亥", "Hài", "水", "Water", "豬", "Pig"),
}


@dataclass(frozen=True)
class StemBranch:
    """干支組合（六十甲子之一）

    Attributes:
        stem_index: 天干索引 (0-9)
        branch_index: 地支索引 (0-11)
    """
    stem_index: int
    branch_index: int

    def __post_init__(self):
        if not 0 <= self.stem_index < 10:
            raise ValueError(f"天干索引超出範圍: {self.stem_index}")
        if not 0 <= self.branch_index < 12:
            raise ValueError(f"地支索引超出範圍: {self.branch_index}")
        # 陰陽必須一致，否則不在六十甲子之內
        if self.stem_index % 2 != self.branch_index % 2:
            raise ValueError(
                f"{HEAVENLY_STEMS[self.stem_index]}{EARTHLY_BRANCHES[self.branch_index]} 不是合法的干支組合"
            )

    @classmethod
    def from_cycle(cls, cycle_index: int) -> "StemBranch":
        """由六十甲子序號建立（0 = 甲子）"""
        cycle_index %= 60
        return cls(cycle_index % 10, cycle_index % 12)

    @classmethod
    def parse(cls, ganzhi: str) -> "StemBranch":
        """由兩字干支字串建立，例如「庚戌」"""
        if len(ganzhi) != 2:
            raise ValueError(f"干支字串格式錯誤: {ganzhi!r}")
        try:
            return cls(HEAVENLY_STEMS.index(ganzhi[0]), EARTHLY_BRANCHES.index(ganzhi[1]))
        except ValueError:
            raise ValueError(f"干支字串格式錯誤: {ganzhi!r}") from None

    @property
    def stem(self) -> str:
        return HEAVENLY_STEMS[self.stem_index]

    @property
    def branch(self) -> str:
        return EARTHLY_BRANCHES[self.branch_index]

    @property
    def ganzhi(self) -> str:
        return self.stem + self.branch

    @property
    def cycle_index(self) -> int:
        """六十甲子序號 (0-59)"""
        # 中國剩餘定理：找出 n ≡ stem (mod 10) 且 n ≡ branch (mod 12)
        return (6 * self.stem_index - 5 * self.branch_index) % 60

    @property
    def stem_info(self) -> StemInfo:
        return STEM_INFO[self.stem]

    @property
    def branch_info(self) -> BranchInfo:
        return BRANCH_INFO[self.branch]

    def __str__(self) -> str:
        return self.ganzhi


def stem_index(stem: str) -> int:
    """取得天干索引

    Raises:
        ValueError: 不是十天干之一
    """
    try:
        return HEAVENLY_STEMS.index(stem)
    except ValueError:
        raise ValueError(f"未知的天干: {stem!r}") from None


def sexagenary_cycle() -> list[StemBranch]:
    """依序取得六十甲子"""
    return [StemBranch.from_cycle(i) for i in range(60)]
