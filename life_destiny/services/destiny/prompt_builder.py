# -*- coding: utf-8 -*-
"""
人生K线请求构造模块

把用户排好的四柱、起运参数与本地推算的大运区间写进提示词，
生成 chat/completions 请求体。本模块不发起任何网络请求。
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from life_destiny.clients.llm_client import ApiSettings
from life_destiny.config import LLM_TEMPERATURE
from life_destiny.prompts.prompt_manager import PromptManager, get_prompt_manager
from life_destiny.schemas.destiny import LifeDestinyRequest
from life_destiny.services.dayun.dayun_calculator import DecadeCycleSpec, build_age_bands
from life_destiny.utils.ganzhi import stem_polarity

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION_KEY = "life_destiny_system_instruction"
USER_PROMPT_KEY = "life_destiny_user_prompt"


@dataclass(frozen=True)
class GenerationRequest:
    settings: ApiSettings
    messages: List[Dict[str, str]]
    cycle: DecadeCycleSpec
    temperature: float = LLM_TEMPERATURE
    response_format: Dict[str, str] = field(default_factory=lambda: {"type": "json_object"})

    @property
    def user_prompt(self) -> str:
        return self.messages[-1]["content"]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": self.messages,
            "response_format": self.response_format,
            "temperature": self.temperature,
        }


def build_user_prompt(user_input: LifeDestinyRequest, cycle: DecadeCycleSpec,
                      prompt_manager: Optional[PromptManager] = None) -> str:
    manager = prompt_manager or get_prompt_manager()
    bands = build_age_bands(cycle)
    decade_count = sum(1 for band in bands if not band.is_childhood)

    return manager.render_prompt(
        USER_PROMPT_KEY,
        gender_label=user_input.gender.label,
        name=user_input.name or "未提供",
        birth_year=user_input.birth_year if user_input.birth_year not in (None, "") else "未提供",
        year_pillar=user_input.year_pillar,
        polarity=stem_polarity(user_input.year_pillar).value,
        month_pillar=user_input.month_pillar,
        day_pillar=user_input.day_pillar,
        hour_pillar=user_input.hour_pillar,
        start_age=cycle.start_age,
        first_da_yun=cycle.first_pillar,
        direction_label=cycle.direction.label,
        direction_example=cycle.direction.example,
        decade_count=decade_count,
        bands=bands,
    )


def build_request(user_input: LifeDestinyRequest, settings: ApiSettings,
                  prompt_manager: Optional[PromptManager] = None) -> GenerationRequest:
    """构造一次人生K线分析的模型请求。"""
    manager = prompt_manager or get_prompt_manager()
    cycle = DecadeCycleSpec.build(
        user_input.first_da_yun, user_input.start_age, user_input.year_pillar, user_input.gender
    )
    system_instruction = manager.get(SYSTEM_INSTRUCTION_KEY)
    if not system_instruction:
        raise RuntimeError(f"提示词键 '{SYSTEM_INSTRUCTION_KEY}' 不存在或为空")

    user_prompt = build_user_prompt(user_input, cycle, manager)
    logger.info(f"大运方向: {cycle.direction.label}, 起运年龄: {cycle.start_age}, 第一步大运: {cycle.first_pillar}")

    return GenerationRequest(
        settings=settings,
        messages=[
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_prompt},
        ],
        cycle=cycle,
    )
