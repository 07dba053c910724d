from typing import Optional


class LifeDestinyError(Exception):
    """人生K线分析流程中的错误基类。"""


class ConfigurationError(LifeDestinyError):
    """API Key / Base URL / 模型名称缺失或非法，在发起网络请求前抛出。"""


class TransportError(LifeDestinyError):
    """模型接口返回非 2xx 状态，或请求未能送达。"""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class EmptyContentError(LifeDestinyError):
    """模型接口成功返回，但没有任何消息内容。"""


class MalformedResponseError(LifeDestinyError):
    """模型返回内容不是合法 JSON，或缺失 chartPoints。"""
