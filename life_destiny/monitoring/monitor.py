"""统一的流程监控日志模块。"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

monitor_logger = logging.getLogger("life_destiny.monitor")


def generate_request_id() -> str:
    """生成 8 位 request_id，用于链路追踪。"""
    return uuid.uuid4().hex[:8]


def _serialize_extra(extra_data: Optional[Dict[str, Any]]) -> str:
    if not extra_data:
        return ""
    try:
        return json.dumps(extra_data, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(extra_data)


@dataclass
class StepMonitor:
    """用于包裹关键步骤的上下文管理器。"""

    step_name: str
    request_id: Optional[str] = None
    extra_data: Dict[str, Any] = field(default_factory=dict)
    status: str = field(default="成功", init=False)
    _start: float = field(default=0.0, init=False)

    def __enter__(self) -> "StepMonitor":
        self._start = time.perf_counter()
        self.request_id = self.request_id or generate_request_id()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        duration_ms = round((time.perf_counter() - self._start) * 1000, 2)
        if exc_type:
            self.status = "失败"
            level = monitor_logger.error
            extra = {**self.extra_data, "error": str(exc_val), "duration_ms": duration_ms}
        else:
            level = monitor_logger.info
            extra = {**self.extra_data, "duration_ms": duration_ms}

        level(
            "req=%s | step=%s | status=%s | extra=%s",
            self.request_id,
            self.step_name,
            self.status,
            _serialize_extra(extra),
        )

    def update_extra(self, **kwargs: Any) -> None:
        """动态更新附加信息。"""
        self.extra_data.update(kwargs)
