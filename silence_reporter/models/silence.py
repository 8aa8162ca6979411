"""
Alertmanager 静默规则数据模型

对应 Alertmanager API v2 `GET /api/v2/silences` 返回的结构:
https://github.com/prometheus/alertmanager/blob/main/api/v2/openapi.yaml
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


class SilenceMatcher(BaseModel):
    """静默规则匹配器"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: StrictStr = Field(..., description="标签名")
    value: StrictStr = Field(..., description="标签值")
    is_regex: StrictBool = Field(..., alias="isRegex", description="是否正则匹配")
    is_equal: StrictBool = Field(default=True, alias="isEqual", description="是否等值匹配")

    @property
    def operator(self) -> str:
        """匹配运算符: = / != / =~ / !~"""
        if self.is_regex:
            return "=~" if self.is_equal else "!~"
        return "=" if self.is_equal else "!="

    def render(self) -> str:
        """渲染为 name=value 形式"""
        return f"{self.name}{self.operator}{self.value}"


class SilenceStatus(BaseModel):
    """静默状态(由 Alertmanager 计算，本地不重新判断)"""

    model_config = ConfigDict(frozen=True)

    state: StrictStr = Field(..., description="active / pending / expired")


class SilenceRecord(BaseModel):
    """单条静默规则"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: StrictStr = Field(..., description="静默规则ID")
    matchers: List[SilenceMatcher] = Field(..., description="匹配器列表")
    created_by: StrictStr = Field(..., alias="createdBy", description="创建者")
    comment: StrictStr = Field(..., description="注释，可能为空")
    starts_at: StrictStr = Field(..., alias="startsAt", description="开始时间 (ISO-8601)")
    ends_at: StrictStr = Field(..., alias="endsAt", description="结束时间 (ISO-8601)")
    updated_at: Optional[StrictStr] = Field(None, alias="updatedAt", description="最后更新时间")
    status: SilenceStatus = Field(..., description="静默状态")

    @property
    def state(self) -> str:
        """状态标签"""
        return self.status.state
