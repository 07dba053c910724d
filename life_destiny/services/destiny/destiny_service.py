# -*- coding: utf-8 -*-
"""
人生K线分析主流程

校验配置 -> 构造提示词 -> 调用模型 -> 校验返回 -> 本地大运/流年校正。
任何一步失败都直接抛出，不做重试，也不返回部分结果。
"""

import logging
from typing import Optional

from life_destiny.clients.llm_client import request_chat_completion, resolve_api_settings
from life_destiny.config import CHART_RECONCILE_ENABLED
from life_destiny.monitoring.monitor import StepMonitor
from life_destiny.prompts.prompt_manager import PromptManager
from life_destiny.schemas.destiny import LifeDestinyRequest, LifeDestinyResult
from life_destiny.services.dayun.dayun_calculator import build_life_timeline
from life_destiny.services.destiny.prompt_builder import build_request
from life_destiny.services.destiny.response_validator import reconcile_chart_points, validate

logger = logging.getLogger(__name__)


async def generate_life_analysis(user_input: LifeDestinyRequest,
                                 prompt_manager: Optional[PromptManager] = None,
                                 reconcile: bool = CHART_RECONCILE_ENABLED) -> LifeDestinyResult:
    settings = resolve_api_settings(user_input.api_key, user_input.api_base_url, user_input.model_name)
    request = build_request(user_input, settings, prompt_manager)

    with StepMonitor("life_destiny_llm_call", extra_data={"model": settings.model}) as monitor:
        content = await request_chat_completion(settings, request.to_payload())
        monitor.update_extra(content_length=len(content))

    result = validate(content)
    logger.info(f"模型返回 {len(result.chartData)} 条K线数据")

    if reconcile:
        timeline = build_life_timeline(request.cycle, user_input.birth_year_int)
        reconcile_chart_points(result.chartData, timeline)
    return result
