import os
import logging
from dotenv import load_dotenv

# 1. 加载 .env 文件
load_dotenv()


# =========================================================
# 服务基础配置
# =========================================================
# 默认监听 0.0.0.0 允许外部访问，默认端口 8000，默认日志级别 INFO
SERVICE_HOST = os.getenv("SERVICE_HOST", "0.0.0.0")
SERVICE_PORT = int(os.getenv("SERVICE_PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =========================================================
# LLM 基础配置 (OpenAI 兼容的 chat/completions 接口)
# =========================================================
LLM_API_BASE_URL = os.getenv("LLM_API_BASE_URL", "")
LLM_MODEL_NAME = os.getenv("LLM_MODEL_NAME", "[O]gemini-3-pro-preview")
API_KEY = os.getenv("API_KEY", "")

LLM_REQUEST_TIMEOUT_SECONDS = float(os.getenv("LLM_REQUEST_TIMEOUT_SECONDS", 300.0))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", 0.7))

# --- 共享 HTTP 连接池 ---
# 模型单次生成可能持续数分钟，读超时由 LLM_REQUEST_TIMEOUT_SECONDS 统一控制
HTTP_POOL_LIMIT = int(os.getenv("HTTP_POOL_LIMIT", 20))
HTTP_CONNECT_TIMEOUT_SECONDS = float(os.getenv("HTTP_CONNECT_TIMEOUT_SECONDS", 10.0))
HTTP_KEEPALIVE_SECONDS = float(os.getenv("HTTP_KEEPALIVE_SECONDS", 60.0))

# --- 本地大运/流年校正 ---
# 开启后，用本地推算的大运和流年干支覆盖模型返回的不一致数据
CHART_RECONCILE_ENABLED = os.getenv("CHART_RECONCILE_ENABLED", "True").lower() == "true"

# =========================================================
# 资源文件路径
# =========================================================
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROMPTS_FILE_PATH = os.getenv("PROMPTS_FILE_PATH", os.path.join(BASE_DIR, "prompts", "prompts.yaml"))

# =========================================================
# 日志检查
# =========================================================
logger = logging.getLogger(__name__)

if not API_KEY:
    logger.warning("⚠️ 警告: API_KEY 未配置，请求中必须携带 apiKey 才能调用模型！")
if not LLM_API_BASE_URL:
    logger.warning("⚠️ 警告: LLM_API_BASE_URL 未配置，请求中必须携带 apiBaseUrl 才能调用模型！")
