#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线主流程单元测试
"""

import json
from unittest.mock import AsyncMock

import pytest

from life_destiny.services.destiny import destiny_service
from life_destiny.services.destiny.errors import ConfigurationError, MalformedResponseError


def _content(points):
    return json.dumps({"chartPoints": points, "summary": "身强用财"}, ensure_ascii=False)


class TestGenerateLifeAnalysis:
    """主流程测试类"""

    async def test_non_ascii_key_fails_before_network(self, monkeypatch, sample_input, prompt_manager):
        """Key 非法时不发起任何请求"""
        call = AsyncMock()
        monkeypatch.setattr(destiny_service, "request_chat_completion", call)
        sample_input.api_key = "sk-测试123"

        with pytest.raises(ConfigurationError):
            await destiny_service.generate_life_analysis(sample_input, prompt_manager)
        call.assert_not_called()

    async def test_success_and_reconcile(self, monkeypatch, sample_input, prompt_manager):
        points = [
            {"age": 2, "year": 1991, "ganZhi": "辛未", "daYun": "丁卯", "score": 50},
            {"age": 13, "year": 2002, "ganZhi": "壬午", "daYun": "戊辰", "score": 66},
        ]
        call = AsyncMock(return_value=_content(points))
        monkeypatch.setattr(destiny_service, "request_chat_completion", call)

        result = await destiny_service.generate_life_analysis(sample_input, prompt_manager, reconcile=True)

        settings, payload = call.call_args.args
        assert settings.base_url == "https://llm.example.com/v1"
        assert payload["model"] == "test-model"
        assert "Age 13 到 22" in payload["messages"][1]["content"]
        assert result.chartData[0]["daYun"] == "童限"
        assert result.chartData[1]["daYun"] == "戊辰"
        assert result.analysis.summary == "身强用财"
        assert result.analysis.summaryScore == 5

    async def test_reconcile_disabled(self, monkeypatch, sample_input, prompt_manager):
        points = [{"age": 2, "daYun": "丁卯"}]
        monkeypatch.setattr(destiny_service, "request_chat_completion", AsyncMock(return_value=_content(points)))

        result = await destiny_service.generate_life_analysis(sample_input, prompt_manager, reconcile=False)

        assert result.chartData[0]["daYun"] == "丁卯"

    async def test_malformed_content_propagates(self, monkeypatch, sample_input, prompt_manager):
        monkeypatch.setattr(destiny_service, "request_chat_completion",
                            AsyncMock(return_value='{"summary": "缺少K线"}'))

        with pytest.raises(MalformedResponseError):
            await destiny_service.generate_life_analysis(sample_input, prompt_manager)
