"""
API 响应模型 - Pydantic Schema 定义

行情类响应直接使用领域模型的 to_dict()，
这里只定义错误与健康检查等固定结构。
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime


class ErrorResponse(BaseModel):
    """错误响应"""
    error: str = Field(..., description="错误信息")


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = Field(..., description="服务状态")
    timestamp: datetime = Field(..., description="检查时间")
    version: str = Field(..., description="API 版本")
    components: Dict[str, str] = Field(default_factory=dict, description="组件状态")
    cache: Optional[Dict[str, Any]] = Field(default=None, description="聚合器缓存统计")
