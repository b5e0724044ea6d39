"""Schema 基类"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, ClassVar, Dict


class CamelModel(BaseModel):
    """JSON 字段使用 camelCase，同时接受 snake_case 输入"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PartialUpdate(CamelModel):
    """局部更新：只取请求中出现的字段"""

    # 允许显式置空的字段
    nullable_fields: ClassVar[frozenset] = frozenset()

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {
            key: value for key, value in data.items()
            if value is not None or key in self.nullable_fields
        }


class MessageResponse(BaseModel):
    """通用消息响应"""
    message: str
