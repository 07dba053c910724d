from fastapi import APIRouter, HTTPException
import logging

from life_destiny.monitoring.metrics import REQUESTS_RECEIVED
from life_destiny.schemas.destiny import (
    DayunPreviewRequest, DayunPreviewResponse, LifeDestinyRequest, LifeDestinyResult
)
from life_destiny.services.dayun.dayun_preview_service import build_dayun_preview
from life_destiny.services.destiny import destiny_service
from life_destiny.services.destiny.errors import (
    ConfigurationError, EmptyContentError, MalformedResponseError, TransportError
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/lifeDestiny", summary="人生K线分析", response_model=LifeDestinyResult)
async def life_destiny(client_request: LifeDestinyRequest):
    """根据排好的四柱与大运生成 1-100 岁人生K线与命理报告"""
    REQUESTS_RECEIVED.labels(endpoint="lifeDestiny").inc()
    try:
        return await destiny_service.generate_life_analysis(client_request)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TransportError, EmptyContentError, MalformedResponseError) as e:
        logger.error(f"模型调用失败: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"API Error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/dayunPreview", summary="大运排布预览", response_model=DayunPreviewResponse)
async def dayun_preview(client_request: DayunPreviewRequest):
    """本地推算大运顺逆、各步大运年龄区间与逐年流年"""
    REQUESTS_RECEIVED.labels(endpoint="dayunPreview").inc()
    return build_dayun_preview(client_request)
