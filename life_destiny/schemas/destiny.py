from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional, Union

from life_destiny.services.dayun.dayun_calculator import Gender

_GENDER_ALIASES = {
    "male": Gender.MALE, "m": Gender.MALE, "男": Gender.MALE, "乾造": Gender.MALE,
    "female": Gender.FEMALE, "f": Gender.FEMALE, "女": Gender.FEMALE, "坤造": Gender.FEMALE,
}


def _parse_gender(v):
    if isinstance(v, Gender):
        return v
    if isinstance(v, str):
        gender = _GENDER_ALIASES.get(v.strip().lower())
        if gender is not None:
            return gender
    raise ValueError('gender 必须是 "male"/"female" 或 "男"/"女"')


def _to_int(v) -> Optional[int]:
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return None


class LifeDestinyRequest(BaseModel):
    """人生K线分析请求模型（四柱与大运由用户自行排好后提交）"""
    model_config = ConfigDict(
        populate_by_name=True,
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "name": "张三",
                "gender": "male",
                "birthYear": "1990",
                "yearPillar": "庚午",
                "monthPillar": "戊子",
                "dayPillar": "甲寅",
                "hourPillar": "丙寅",
                "startAge": "3",
                "firstDaYun": "己丑",
            }
        },
    )

    name: Optional[str] = Field(None, description="姓名，可选")
    gender: Gender = Field(Gender.MALE, description="性别 (male/female 或 男/女)")
    birth_year: Optional[Union[int, str]] = Field(None, alias="birthYear", description="出生年份（阳历）")
    year_pillar: str = Field(..., alias="yearPillar", description="年柱，如 甲子")
    month_pillar: str = Field("", alias="monthPillar", description="月柱")
    day_pillar: str = Field("", alias="dayPillar", description="日柱")
    hour_pillar: str = Field("", alias="hourPillar", description="时柱")
    start_age: Union[int, str] = Field(1, alias="startAge", description="起运年龄（虚岁）")
    first_da_yun: str = Field(..., alias="firstDaYun", description="第一步大运干支")
    model_name: Optional[str] = Field(None, alias="modelName", description="模型名称，未填写时使用服务端配置")
    api_base_url: Optional[str] = Field(None, alias="apiBaseUrl", description="API Base URL，未填写时使用服务端配置")
    api_key: Optional[str] = Field(None, alias="apiKey", description="API Key，未填写时使用服务端配置")

    @field_validator('gender', mode='before')
    @classmethod
    def gender_must_be_valid(cls, v):
        return _parse_gender(v)

    @property
    def birth_year_int(self) -> Optional[int]:
        return _to_int(self.birth_year)


class AnalysisRecord(BaseModel):
    """命理分析报告（各类文本与 1-10 分评分）"""
    bazi: List[Any] = Field(default_factory=list)
    summary: str
    summaryScore: int
    personality: str
    personalityScore: int
    industry: str
    industryScore: int
    fengShui: str
    fengShuiScore: int
    wealth: str
    wealthScore: int
    marriage: str
    marriageScore: int
    health: str
    healthScore: int
    family: str
    familyScore: int
    crypto: str
    cryptoScore: int
    cryptoYear: str
    cryptoStyle: str


class LifeDestinyResult(BaseModel):
    """经过校验的模型返回结果"""
    chartData: List[Dict[str, Any]] = Field(..., description="1-100 岁逐年K线数据")
    analysis: AnalysisRecord


class DayunPreviewRequest(BaseModel):
    """本地大运排布预览请求"""
    model_config = ConfigDict(populate_by_name=True)

    gender: Gender = Field(Gender.MALE, description="性别")
    year_pillar: str = Field("", alias="yearPillar", description="年柱")
    start_age: Union[int, str] = Field(1, alias="startAge", description="起运年龄（虚岁）")
    first_da_yun: str = Field("", alias="firstDaYun", description="第一步大运干支")
    birth_year: Optional[Union[int, str]] = Field(None, alias="birthYear", description="出生年份，提供时同时返回流年干支")

    @field_validator('gender', mode='before')
    @classmethod
    def gender_must_be_valid(cls, v):
        return _parse_gender(v)

    @property
    def birth_year_int(self) -> Optional[int]:
        return _to_int(self.birth_year)


class AgeBandItem(BaseModel):
    startAge: int
    endAge: int
    daYun: str
    isChildhood: bool


class TimelineItem(BaseModel):
    age: int
    year: Optional[int] = None
    ganZhi: Optional[str] = None
    daYun: Optional[str] = None


class DayunPreviewResponse(BaseModel):
    direction: str
    directionLabel: str
    yearStemPolarity: str
    startAge: int
    bands: List[AgeBandItem]
    timeline: List[TimelineItem]
