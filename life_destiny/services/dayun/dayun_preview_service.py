import logging

from life_destiny.schemas.destiny import (
    AgeBandItem, DayunPreviewRequest, DayunPreviewResponse, TimelineItem
)
from life_destiny.services.dayun.dayun_calculator import (
    DecadeCycleSpec, build_age_bands, build_life_timeline
)
from life_destiny.utils.ganzhi import stem_polarity

logger = logging.getLogger(__name__)


def build_dayun_preview(request: DayunPreviewRequest) -> DayunPreviewResponse:
    """本地排出大运方向、年龄区间与逐年流年，不调用模型。"""
    cycle = DecadeCycleSpec.build(request.first_da_yun, request.start_age, request.year_pillar, request.gender)
    bands = build_age_bands(cycle)
    timeline = build_life_timeline(cycle, request.birth_year_int)
    logger.info(f"大运预览: 方向={cycle.direction.value}, 起运={cycle.start_age}, 区间数={len(bands)}")

    return DayunPreviewResponse(
        direction=cycle.direction.value,
        directionLabel=cycle.direction.label,
        yearStemPolarity=stem_polarity(request.year_pillar).value,
        startAge=cycle.start_age,
        bands=[
            AgeBandItem(startAge=band.lo, endAge=band.hi, daYun=band.label, isChildhood=band.is_childhood)
            for band in bands
        ],
        timeline=[
            TimelineItem(age=entry.age, year=entry.year, ganZhi=entry.gan_zhi, daYun=entry.da_yun)
            for entry in timeline
        ],
    )
