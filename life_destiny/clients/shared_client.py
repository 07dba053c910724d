# clients/shared_client.py

import logging
from typing import Optional

import aiohttp

from life_destiny.config import (
    HTTP_CONNECT_TIMEOUT_SECONDS, HTTP_KEEPALIVE_SECONDS, HTTP_POOL_LIMIT, LLM_REQUEST_TIMEOUT_SECONDS
)

logger = logging.getLogger(__name__)

# 调用模型接口的全局会话，由 main.py 的 lifespan 创建和关闭
async_aiohttp_client: Optional[aiohttp.ClientSession] = None


def _is_usable(session: Optional[aiohttp.ClientSession]) -> bool:
    return session is not None and not session.closed


def _build_session() -> aiohttp.ClientSession:
    connector = aiohttp.TCPConnector(
        limit=HTTP_POOL_LIMIT,
        keepalive_timeout=HTTP_KEEPALIVE_SECONDS,
        enable_cleanup_closed=True,
    )
    # 单次请求的总超时在 request_chat_completion 中按调用覆盖
    timeout = aiohttp.ClientTimeout(total=LLM_REQUEST_TIMEOUT_SECONDS, connect=HTTP_CONNECT_TIMEOUT_SECONDS)
    return aiohttp.ClientSession(connector=connector, timeout=timeout)


async def init_aiohttp_client() -> aiohttp.ClientSession:
    """服务启动时创建共享会话；已有可用会话时直接复用"""
    global async_aiohttp_client
    if _is_usable(async_aiohttp_client):
        logger.warning("模型接口会话已存在，跳过重复初始化")
        return async_aiohttp_client

    async_aiohttp_client = _build_session()
    logger.info(
        f"模型接口会话已创建: 连接池上限 {HTTP_POOL_LIMIT}, 连接超时 {HTTP_CONNECT_TIMEOUT_SECONDS}s, "
        f"请求超时 {LLM_REQUEST_TIMEOUT_SECONDS}s"
    )
    return async_aiohttp_client


async def get_aiohttp_client() -> aiohttp.ClientSession:
    if not _is_usable(async_aiohttp_client):
        logger.warning("模型接口会话未初始化或已关闭，正在重新创建")
        return await init_aiohttp_client()
    return async_aiohttp_client


async def close_aiohttp_client():
    """服务关闭时释放连接池"""
    global async_aiohttp_client
    if _is_usable(async_aiohttp_client):
        await async_aiohttp_client.close()
        logger.info("模型接口会话已关闭")
    async_aiohttp_client = None
