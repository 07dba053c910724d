# -*- coding: utf-8 -*-
"""
模型返回结果校验模块

只有 chartPoints 是必需的；其余分析字段缺失或类型不符时按默认值补齐。
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Union

from life_destiny.schemas.destiny import AnalysisRecord, LifeDestinyResult
from life_destiny.services.dayun.dayun_calculator import TimelineEntry
from life_destiny.services.destiny.errors import MalformedResponseError

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 5

TEXT_FIELD_DEFAULTS: Dict[str, str] = {
    "summary": "无摘要",
    "personality": "无性格分析",
    "industry": "无",
    "fengShui": "建议多亲近自然，保持心境平和。",
    "wealth": "无",
    "marriage": "无",
    "health": "无",
    "family": "无",
    "crypto": "暂无交易分析",
    "cryptoYear": "待定",
    "cryptoStyle": "现货定投",
}

SCORE_FIELDS = (
    "summaryScore",
    "personalityScore",
    "industryScore",
    "fengShuiScore",
    "wealthScore",
    "marriageScore",
    "healthScore",
    "familyScore",
    "cryptoScore",
)

_CODE_FENCE_RE = re.compile(r'```(?:json)?\s*(\{[\s\S]*\})\s*```', re.DOTALL)


def parse_content(content: str) -> Any:
    """
    解析模型返回的 content，兼容 ```json 代码块和 JSON 前后的多余文字。

    Raises:
        MalformedResponseError: 找不到可解析的 JSON
    """
    if not content or not content.strip():
        raise MalformedResponseError("模型返回的数据格式不正确（内容为空）。")

    match = _CODE_FENCE_RE.search(content)
    text = match.group(1) if match else content.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    first_brace = text.find('{')
    last_brace = text.rfind('}')
    if first_brace == -1 or last_brace <= first_brace:
        raise MalformedResponseError("模型返回的数据格式不正确（不是合法 JSON）。")
    try:
        return json.loads(text[first_brace:last_brace + 1])
    except json.JSONDecodeError as e:
        logger.error(f"模型返回内容无法解析为 JSON: {e.msg} at pos {e.pos}")
        raise MalformedResponseError(f"模型返回的数据格式不正确（JSON 解析失败: {e.msg}）。") from e


def _text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _score_or_default(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_SCORE
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_SCORE
    if isinstance(value, (int, float)) and math.isfinite(value) and value != 0:
        return int(round(value))
    return DEFAULT_SCORE


def build_analysis(data: Dict[str, Any]) -> AnalysisRecord:
    fields: Dict[str, Any] = {
        key: _text_or_default(data.get(key), default) for key, default in TEXT_FIELD_DEFAULTS.items()
    }
    fields.update({key: _score_or_default(data.get(key)) for key in SCORE_FIELDS})
    bazi = data.get("bazi")
    fields["bazi"] = bazi if isinstance(bazi, list) else []
    return AnalysisRecord(**fields)


def validate(raw: Union[str, Dict[str, Any]]) -> LifeDestinyResult:
    """
    把模型返回的原始 JSON 规整为 LifeDestinyResult。

    Raises:
        MalformedResponseError: 内容不是 JSON 对象，或 chartPoints 缺失/不是数组
    """
    data = parse_content(raw) if isinstance(raw, str) else raw
    if not isinstance(data, dict):
        raise MalformedResponseError("模型返回的数据格式不正确（顶层不是 JSON 对象）。")

    chart_points = data.get("chartPoints")
    if not isinstance(chart_points, list):
        raise MalformedResponseError("模型返回的数据格式不正确（缺失 chartPoints）。")

    chart_data = [point for point in chart_points if isinstance(point, dict)]
    dropped = len(chart_points) - len(chart_data)
    if dropped:
        logger.warning(f"chartPoints 中有 {dropped} 条不是对象，已丢弃")

    return LifeDestinyResult(chartData=chart_data, analysis=build_analysis(data))


def _as_age(value: Any):
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def reconcile_chart_points(chart_data: List[Dict[str, Any]], timeline: List[TimelineEntry]) -> int:
    """
    用本地推算的年份、流年干支和大运校正模型返回的K线数据。

    按 age 对齐；本地值为 None 的字段不做校正。返回被修改的字段数。
    """
    by_age = {entry.age: entry for entry in timeline}
    corrected = 0
    for point in chart_data:
        entry = by_age.get(_as_age(point.get("age")))
        if entry is None:
            continue
        for key, expected in (("year", entry.year), ("ganZhi", entry.gan_zhi), ("daYun", entry.da_yun)):
            if expected is None or point.get(key) == expected:
                continue
            logger.debug(f"age={entry.age} 字段 {key} 由 {point.get(key)!r} 校正为 {expected!r}")
            point[key] = expected
            corrected += 1
    if corrected:
        logger.warning(f"模型返回的K线数据与本地排盘不一致，已校正 {corrected} 个字段")
    return corrected
