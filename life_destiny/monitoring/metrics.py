from prometheus_client import Counter

# 注意：prometheus_client 在同一个进程中多次定义同名指标会抛出 ValueError，
# 因此所有指标只在本模块加载时定义一次

# API 请求计数
REQUESTS_RECEIVED = Counter(
    "life_destiny_requests_received_total",
    "Total number of requests received at the API endpoints.",
    ["endpoint"]
)

# LLM 请求尝试计数
LLM_REQUESTS_SENT_ATTEMPTS = Counter(
    "llm_requests_sent_attempts_total",
    "Total attempts to send chat completion requests to the LLM."
)

# LLM 成功响应计数
LLM_RESPONSES_SUCCESS = Counter(
    "llm_responses_success_total",
    "Total number of successful responses with content from the LLM."
)

# LLM 失败响应计数
LLM_RESPONSES_FAILED = Counter(
    "llm_responses_failed_total",
    "Total number of failed/errored responses from the LLM.",
    ["reason"]
)

__all__ = [
    "REQUESTS_RECEIVED",
    "LLM_REQUESTS_SENT_ATTEMPTS",
    "LLM_RESPONSES_SUCCESS",
    "LLM_RESPONSES_FAILED",
]
