#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest 全局配置

提供：
- 共享 fixtures
- 模型接口的假会话
"""

import json
import os
import sys

import pytest

# 添加项目根目录到路径
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from life_destiny.prompts.prompt_manager import PromptManager
from life_destiny.schemas.destiny import LifeDestinyRequest


# ==================== 模型接口假对象 ====================

class FakeResponse:
    """模拟 aiohttp 响应，可作为 async with 的上下文；响应体按字节保存，读取时按 UTF-8 解码"""

    def __init__(self, status=200, json_body=None, text_body="", raw_body=None):
        self.status = status
        if raw_body is None:
            if not text_body and json_body is not None:
                text_body = json.dumps(json_body, ensure_ascii=False)
            raw_body = text_body.encode("utf-8")
        self._body = raw_body

    async def text(self, encoding="utf-8", errors="strict"):
        return self._body.decode(encoding, errors)

    async def json(self, content_type=None):
        return json.loads(await self.text())

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """模拟共享的 aiohttp.ClientSession，记录所有 post 调用"""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


def completion_body(content):
    """构造 chat/completions 成功响应体"""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


# ==================== Fixtures ====================

@pytest.fixture(scope="session")
def prompt_manager():
    """不启动文件监控的提示词管理器"""
    return PromptManager(watch=False)


@pytest.fixture
def sample_input():
    """阳男顺排，3 岁起运，第一步大运丁卯"""
    return LifeDestinyRequest(
        name="张三",
        gender="男",
        birthYear="1990",
        yearPillar="甲子",
        monthPillar="丙寅",
        dayPillar="戊辰",
        hourPillar="庚申",
        startAge="3",
        firstDaYun="丁卯",
        modelName="test-model",
        apiBaseUrl="https://llm.example.com/v1/",
        apiKey="sk-test123",
    )


@pytest.fixture
def fake_session(monkeypatch):
    """把共享客户端替换为假会话，返回工厂函数"""
    from life_destiny.clients import shared_client

    def _install(response=None, exc=None):
        session = FakeSession(response=response, exc=exc)
        monkeypatch.setattr(shared_client, "async_aiohttp_client", session)
        return session

    return _install
