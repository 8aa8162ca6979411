"""
Slack Web API 数据模型
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class SlackPostMessage(BaseModel):
    """chat.postMessage 请求体"""

    channel: str = Field(..., description="频道ID")
    text: str = Field(..., description="消息文本(同时作为通知的回退内容)")
    blocks: Optional[List[Dict[str, Any]]] = Field(None, description="Block Kit 富文本")

    def to_dict(self) -> dict:
        """转换为API请求格式的字典"""
        result = {"channel": self.channel, "text": self.text}
        if self.blocks:
            result["blocks"] = self.blocks
        return result


class SlackApiResponse(BaseModel):
    """Slack Web API 通用响应"""

    model_config = ConfigDict(extra="ignore")

    ok: StrictBool = Field(..., description="应用层成功标志")
    error: Optional[str] = Field(None, description="失败时的错误码")
