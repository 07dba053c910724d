#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
模型返回结果校验单元测试
"""

import json

import pytest

from life_destiny.services.dayun.dayun_calculator import DecadeCycleSpec, Direction, build_life_timeline
from life_destiny.services.destiny.errors import MalformedResponseError
from life_destiny.services.destiny.response_validator import (
    DEFAULT_SCORE, SCORE_FIELDS, TEXT_FIELD_DEFAULTS, reconcile_chart_points, validate,
)


class TestValidate:
    """返回结果校验测试类"""

    def test_missing_chart_points(self):
        with pytest.raises(MalformedResponseError):
            validate({"summary": "好命"})

    @pytest.mark.parametrize("value", [None, {}, "1-100", 42])
    def test_chart_points_not_a_list(self, value):
        with pytest.raises(MalformedResponseError):
            validate({"chartPoints": value})

    @pytest.mark.parametrize("content", ["", "这不是 JSON", "[1, 2, 3]", "{broken"])
    def test_invalid_content(self, content):
        with pytest.raises(MalformedResponseError):
            validate(content)

    def test_empty_chart_points_gets_all_defaults(self):
        """只有空 chartPoints 时所有字段取默认值"""
        result = validate({"chartPoints": []})
        analysis = result.analysis.model_dump()

        assert result.chartData == []
        assert analysis["bazi"] == []
        for key in SCORE_FIELDS:
            assert analysis[key] == DEFAULT_SCORE
        for key, default in TEXT_FIELD_DEFAULTS.items():
            assert analysis[key] == default

    def test_content_in_code_fence(self):
        content = "好的，结果如下：\n```json\n" + json.dumps({"chartPoints": [{"age": 1}], "summary": "总评"}) + "\n```"
        result = validate(content)

        assert result.chartData == [{"age": 1}]
        assert result.analysis.summary == "总评"

    def test_content_with_surrounding_text(self):
        result = validate('结果：{"chartPoints": [], "wealthScore": 9} 以上')
        assert result.analysis.wealthScore == 9

    @pytest.mark.parametrize("value,expected", [
        (8, 8), ("8", 8), (7.6, 8), (True, DEFAULT_SCORE), (0, DEFAULT_SCORE),
        ("高", DEFAULT_SCORE), (None, DEFAULT_SCORE), ([9], DEFAULT_SCORE),
    ])
    def test_score_defaults(self, value, expected):
        result = validate({"chartPoints": [], "healthScore": value})
        assert result.analysis.healthScore == expected

    @pytest.mark.parametrize("value", ["", "   ", 123, None, ["文本"]])
    def test_text_defaults(self, value):
        result = validate({"chartPoints": [], "fengShui": value})
        assert result.analysis.fengShui == TEXT_FIELD_DEFAULTS["fengShui"]

    def test_keeps_provided_fields(self):
        result = validate({
            "chartPoints": [{"age": 1, "score": 60}],
            "bazi": ["甲子", "丙寅", "戊辰", "庚申"],
            "crypto": "适合长线",
            "cryptoScore": 3,
            "cryptoYear": "2028年",
        })

        assert result.analysis.bazi == ["甲子", "丙寅", "戊辰", "庚申"]
        assert result.analysis.crypto == "适合长线"
        assert result.analysis.cryptoScore == 3
        assert result.analysis.cryptoYear == "2028年"
        assert result.analysis.cryptoStyle == TEXT_FIELD_DEFAULTS["cryptoStyle"]

    def test_non_object_points_dropped(self):
        result = validate({"chartPoints": [{"age": 1}, "age 2", 3, {"age": 4}]})
        assert result.chartData == [{"age": 1}, {"age": 4}]


class TestReconcile:
    """本地排盘校正测试类"""

    def _timeline(self):
        spec = DecadeCycleSpec(first_pillar="丁卯", start_age=3, direction=Direction.FORWARD)
        return build_life_timeline(spec, 1990)

    def test_corrects_mismatches(self):
        points = [
            {"age": 1, "year": 1990, "ganZhi": "庚午", "daYun": "童限"},
            {"age": 13, "year": 2002, "ganZhi": "壬午", "daYun": "壬午"},
            {"age": 14, "year": 2000, "ganZhi": "癸未", "daYun": "戊辰"},
        ]
        corrected = reconcile_chart_points(points, self._timeline())

        assert corrected == 2
        assert points[1]["daYun"] == "戊辰"
        assert points[2]["year"] == 2003

    def test_skips_points_without_age(self):
        points = [{"daYun": "错误"}, {"age": "abc"}, {"age": 150}]
        assert reconcile_chart_points(points, self._timeline()) == 0
        assert points[0] == {"daYun": "错误"}

    def test_unknown_values_left_alone(self):
        """出生年份未知时不校正年份与流年"""
        spec = DecadeCycleSpec(first_pillar="丁卯", start_age=3, direction=Direction.FORWARD)
        timeline = build_life_timeline(spec, None)
        points = [{"age": 5, "year": 1800, "ganZhi": "甲子", "daYun": "丁卯"}]

        assert reconcile_chart_points(points, timeline) == 0
        assert points[0]["year"] == 1800
