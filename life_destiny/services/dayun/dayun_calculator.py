# -*- coding: utf-8 -*-
"""
大运排盘模块

根据年柱天干阴阳与性别确定大运顺逆，并把 1-100 岁（虚岁）划分为
童限和每十年一步的大运区间。
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from life_destiny.utils.ganzhi import Polarity, parse_pillar, stem_polarity, step_pillar, year_pillar

logger = logging.getLogger(__name__)

LIFESPAN_YEARS = 100
DECADE_LENGTH = 10
CHILDHOOD_LIMIT = "童限"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def label(self) -> str:
        return "男 (乾造)" if self is Gender.MALE else "女 (坤造)"


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def step(self) -> int:
        return 1 if self is Direction.FORWARD else -1

    @property
    def label(self) -> str:
        return "顺行 (Forward)" if self is Direction.FORWARD else "逆行 (Backward)"

    @property
    def example(self) -> str:
        if self is Direction.FORWARD:
            return "例如：第一步是【戊申】，第二步则是【己酉】（顺排）"
        return "例如：第一步是【戊申】，第二步则是【丁未】（逆排）"


def resolve_direction(year_pillar_text: Optional[str], gender: Gender) -> Direction:
    """阳男阴女顺行，阴男阳女逆行。"""
    polarity = stem_polarity(year_pillar_text)
    if gender is Gender.MALE:
        forward = polarity is Polarity.YANG
    else:
        forward = polarity is Polarity.YIN
    return Direction.FORWARD if forward else Direction.BACKWARD


_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def parse_start_age(value: Any) -> int:
    """起运年龄，取开头的整数部分（"3.5"、"3岁" 均为 3）；无法解析或小于 1 时按 1 岁处理。"""
    match = _LEADING_INT_RE.match(str(value)) if value is not None else None
    if match is None:
        logger.warning(f"起运年龄无法解析: {value!r}，按 1 岁处理")
        return 1
    age = int(match.group(1))
    return age if age >= 1 else 1


@dataclass(frozen=True)
class DecadeCycleSpec:
    first_pillar: str
    start_age: int
    direction: Direction

    @classmethod
    def build(cls, first_da_yun: Optional[str], start_age: Any,
              year_pillar_text: Optional[str], gender: Gender) -> "DecadeCycleSpec":
        return cls(
            first_pillar=(first_da_yun or "").strip(),
            start_age=parse_start_age(start_age),
            direction=resolve_direction(year_pillar_text, gender),
        )


@dataclass(frozen=True)
class AgeBand:
    lo: int
    hi: int
    step: Optional[int]
    pillar: Optional[str]

    @property
    def is_childhood(self) -> bool:
        return self.step is None

    @property
    def label(self) -> str:
        if self.is_childhood:
            return CHILDHOOD_LIMIT
        return self.pillar or f"第{self.step + 1}步大运"

    def contains(self, age: int) -> bool:
        return self.lo <= age <= self.hi


@dataclass(frozen=True)
class TimelineEntry:
    age: int
    year: Optional[int]
    gan_zhi: Optional[str]
    da_yun: Optional[str]


def decade_pillar(spec: DecadeCycleSpec, step: int) -> Optional[str]:
    """第 step 步（从 0 开始）大运干支；首步大运不是合法干支时返回 None。"""
    first = parse_pillar(spec.first_pillar)
    if first is None:
        return None
    return step_pillar(first, step * spec.direction.step).text


def build_age_bands(spec: DecadeCycleSpec) -> List[AgeBand]:
    """
    将 1-100 岁划分为童限区间和逐步大运区间。

    起运年龄为 1 时没有童限；最后一步大运在 100 岁处截断。
    """
    bands: List[AgeBand] = []
    if spec.start_age > 1:
        bands.append(AgeBand(1, min(spec.start_age - 1, LIFESPAN_YEARS), None, None))

    step = 0
    lo = spec.start_age
    while lo <= LIFESPAN_YEARS:
        hi = min(lo + DECADE_LENGTH - 1, LIFESPAN_YEARS)
        bands.append(AgeBand(lo, hi, step, decade_pillar(spec, step)))
        step += 1
        lo += DECADE_LENGTH
    return bands


def _check_age(age: int) -> None:
    if not 1 <= age <= LIFESPAN_YEARS:
        raise ValueError(f"年龄 {age} 超出 1-{LIFESPAN_YEARS} 岁范围")


def da_yun_for_age(spec: DecadeCycleSpec, age: int) -> Optional[str]:
    """指定虚岁所在的大运；童限返回 "童限"，首步大运未知时返回 None。"""
    _check_age(age)
    band = next(band for band in build_age_bands(spec) if band.contains(age))
    return CHILDHOOD_LIMIT if band.is_childhood else band.pillar


def build_life_timeline(spec: DecadeCycleSpec, birth_year: Optional[int]) -> List[TimelineEntry]:
    """逐岁展开 1-100 岁的年份、流年干支与大运。"""
    timeline = []
    for band in build_age_bands(spec):
        da_yun = CHILDHOOD_LIMIT if band.is_childhood else band.pillar
        for age in range(band.lo, band.hi + 1):
            year = birth_year + age - 1 if birth_year else None
            gan_zhi = year_pillar(year).text if year else None
            timeline.append(TimelineEntry(age, year, gan_zhi, da_yun))
    return timeline
