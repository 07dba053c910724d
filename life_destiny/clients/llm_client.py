# clients/llm_client.py

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp

from life_destiny.config import API_KEY, LLM_API_BASE_URL, LLM_MODEL_NAME, LLM_REQUEST_TIMEOUT_SECONDS
from life_destiny.clients import shared_client
from life_destiny.monitoring.metrics import (
    LLM_REQUESTS_SENT_ATTEMPTS, LLM_RESPONSES_SUCCESS, LLM_RESPONSES_FAILED
)
from life_destiny.services.destiny.errors import (
    ConfigurationError, EmptyContentError, MalformedResponseError, TransportError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiSettings:
    api_key: str = field(repr=False)
    base_url: str
    model: str

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }


def _pick(value: Optional[str], fallback: Optional[str]) -> str:
    value = (value or "").strip()
    return value if value else (fallback or "").strip()


def resolve_api_settings(api_key: Optional[str] = None,
                         api_base_url: Optional[str] = None,
                         model_name: Optional[str] = None) -> ApiSettings:
    """
    合并请求参数与服务端配置，并在发起任何网络请求前完成校验。

    请求中未填写的字段使用环境变量中的配置；去除首尾空白，
    Base URL 去掉末尾的斜杠。

    Raises:
        ConfigurationError: Key / URL / 模型为空，或 Key 含有非 ASCII 字符
    """
    clean_key = _pick(api_key, API_KEY)
    clean_base_url = _pick(api_base_url, LLM_API_BASE_URL).rstrip("/")
    target_model = _pick(model_name, LLM_MODEL_NAME)

    if not clean_key:
        raise ConfigurationError("请在表单中填写有效的 API Key")
    # 误粘贴的中文或全角字符会导致请求头无法构造
    if not clean_key.isascii():
        raise ConfigurationError("API Key 包含非法字符（如中文或全角符号），请检查输入是否正确。")
    if not clean_base_url:
        raise ConfigurationError("请在表单中填写有效的 API Base URL")
    if not target_model:
        raise ConfigurationError("请输入模型名称")

    return ApiSettings(api_key=clean_key, base_url=clean_base_url, model=target_model)


def extract_message_content(response_json: Any) -> Optional[str]:
    """取 choices[0].message.content，结构不符时返回 None"""
    if not isinstance(response_json, dict):
        return None
    choices = response_json.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


async def request_chat_completion(settings: ApiSettings, payload: Dict[str, Any],
                                  timeout: float = LLM_REQUEST_TIMEOUT_SECONDS) -> str:
    """
    调用 OpenAI 兼容的 chat/completions 接口，返回 message.content。

    不做重试，任何失败都直接抛给调用方。

    Raises:
        TransportError: 非 2xx 状态码，或连接失败/超时
        EmptyContentError: 接口成功但没有返回内容
        MalformedResponseError: 2xx 但响应体不是 JSON
    """
    session = await shared_client.get_aiohttp_client()
    LLM_REQUESTS_SENT_ATTEMPTS.inc()
    logger.info(f"正在请求模型 {settings.model}: {settings.completions_url}")

    try:
        async with session.post(settings.completions_url, headers=settings.headers, json=payload,
                                timeout=aiohttp.ClientTimeout(total=timeout)) as response:
            if response.status < 200 or response.status >= 300:
                # 网关错误页可能不是 UTF-8 编码
                err_text = await response.text(errors="replace")
                LLM_RESPONSES_FAILED.labels(reason=f"http_{response.status}").inc()
                logger.error(f"模型接口返回错误状态: {response.status} - {err_text[:500]}")
                raise TransportError(f"API 请求失败: {response.status} - {err_text}",
                                     status=response.status, body=err_text)
            try:
                response_json = await response.json(content_type=None)
            except ValueError as e:
                LLM_RESPONSES_FAILED.labels(reason="invalid_json").inc()
                raise MalformedResponseError("模型返回的数据格式不正确（响应体不是合法 JSON）。") from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        LLM_RESPONSES_FAILED.labels(reason=type(e).__name__).inc()
        logger.error(f"模型接口请求失败: {type(e).__name__}: {e}")
        raise TransportError(f"API 请求失败: {type(e).__name__}: {e}") from e

    content = extract_message_content(response_json)
    if not content or not content.strip():
        LLM_RESPONSES_FAILED.labels(reason="empty_content").inc()
        logger.error("模型接口返回成功，但 content 为空")
        raise EmptyContentError("模型未返回任何内容。")

    LLM_RESPONSES_SUCCESS.inc()
    logger.info(f"模型返回内容长度: {len(content)}")
    return content
