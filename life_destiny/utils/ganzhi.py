"""
六十甲子基础数据与运算

天干、地支、六十甲子均为固定的有序查表数据，所有运算都基于位置索引完成。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

HEAVENLY_STEMS: Tuple[str, ...] = ("甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸")
EARTHLY_BRANCHES: Tuple[str, ...] = ("子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥")

# 偶数位为阳干，奇数位为阴干
YANG_STEMS: Tuple[str, ...] = HEAVENLY_STEMS[0::2]
YIN_STEMS: Tuple[str, ...] = HEAVENLY_STEMS[1::2]

CYCLE_LENGTH = 60

SEXAGENARY_CYCLE: Tuple[str, ...] = tuple(
    HEAVENLY_STEMS[i % 10] + EARTHLY_BRANCHES[i % 12] for i in range(CYCLE_LENGTH)
)

# 公元 4 年为甲子年
_YEAR_CYCLE_OFFSET = 4


class Polarity(str, Enum):
    YANG = "阳"
    YIN = "阴"


_STEM_POLARITY = {stem: Polarity.YANG for stem in YANG_STEMS}
_STEM_POLARITY.update({stem: Polarity.YIN for stem in YIN_STEMS})


def stem_polarity(pillar: Optional[str]) -> Polarity:
    """
    取干支首字判断阴阳。

    空字符串或首字不是天干时按阳处理。
    """
    if not pillar:
        return Polarity.YANG
    text = pillar.strip()
    if not text:
        return Polarity.YANG
    return _STEM_POLARITY.get(text[0], Polarity.YANG)


def cycle_index(stem_index: int, branch_index: int) -> int:
    """
    由天干序号和地支序号求六十甲子序号 (0-59)。

    只有天干与地支奇偶相同的组合才是合法干支。
    """
    stem_index %= 10
    branch_index %= 12
    if stem_index % 2 != branch_index % 2:
        raise ValueError(f"天干序号 {stem_index} 与地支序号 {branch_index} 阴阳不合，无法组成干支")
    return (6 * stem_index - 5 * branch_index) % CYCLE_LENGTH


@dataclass(frozen=True)
class Pillar:
    """一柱干支，如 甲子。"""

    stem: str
    branch: str

    @property
    def text(self) -> str:
        return self.stem + self.branch

    @property
    def index(self) -> int:
        return cycle_index(HEAVENLY_STEMS.index(self.stem), EARTHLY_BRANCHES.index(self.branch))

    @property
    def polarity(self) -> Polarity:
        return _STEM_POLARITY[self.stem]

    def __str__(self) -> str:
        return self.text


def pillar_at(index: int) -> Pillar:
    """按六十甲子序号取干支，序号按 60 取模。"""
    text = SEXAGENARY_CYCLE[index % CYCLE_LENGTH]
    return Pillar(text[0], text[1])


def parse_pillar(text: Optional[str]) -> Optional[Pillar]:
    """
    解析两字干支，去除首尾空白。

    不是合法的六十甲子之一时返回 None。
    """
    if not text:
        return None
    value = text.strip()
    if len(value) != 2:
        return None
    stem, branch = value[0], value[1]
    if stem not in HEAVENLY_STEMS or branch not in EARTHLY_BRANCHES:
        return None
    if HEAVENLY_STEMS.index(stem) % 2 != EARTHLY_BRANCHES.index(branch) % 2:
        return None
    return Pillar(stem, branch)


def step_pillar(pillar: Pillar, steps: int) -> Pillar:
    """沿六十甲子移动 steps 步，负数为逆排。"""
    return pillar_at(pillar.index + steps)


def year_pillar(year: int) -> Pillar:
    """公历年份对应的流年干支，例如 2024 -> 甲辰。"""
    return pillar_at(year - _YEAR_CYCLE_OFFSET)
