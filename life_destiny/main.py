"""
人生K线主应用入口
"""
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from prometheus_client import make_asgi_app
import logging

from life_destiny.config import SERVICE_HOST, SERVICE_PORT, LOG_LEVEL
from life_destiny.clients import shared_client
from life_destiny.prompts.prompt_manager import get_prompt_manager
from life_destiny.routers import destiny

# 配置日志
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("人生K线服务启动中...")
    get_prompt_manager()
    await shared_client.init_aiohttp_client()
    logger.info("服务启动完成")
    yield
    logger.info("人生K线服务关闭中...")
    await shared_client.close_aiohttp_client()
    get_prompt_manager().stop()
    logger.info("服务已关闭")


app = FastAPI(
    title="人生K线 - 八字大运流年分析服务",
    description="根据已排好的八字四柱与大运，生成 1-100 岁人生K线与命理报告",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(destiny.router, tags=["人生K线"])

app.mount("/metrics", make_asgi_app())


@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {
        "status": "healthy",
        "service": "life-destiny",
        "version": "1.0.0"
    }


if __name__ == "__main__":
    uvicorn.run(
        "life_destiny.main:app",
        host=SERVICE_HOST,
        port=SERVICE_PORT,
        log_level=LOG_LEVEL.lower()
    )
