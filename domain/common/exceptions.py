"""领域层业务异常定义，供领域、应用与基础设施使用。

边缘调用方（同步服务门面）将其转换为带标签的结果；下层只负责抛出。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    # 本层抛出的异常均不自动重试
    retryable: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "code": int(self.code),
            "message": self.message,
            "error_type": self.error_type,
            "details": self.details,
            "field": self.field,
        }


class InvalidDataFormatException(BusinessException):
    """客户端传入的标识未通过长度或 UUID 校验"""

    def __init__(self, field_name: str, expected_format: str):
        super().__init__(
            code=BusinessCode.INVALID_DATA_FORMAT,
            message=f"Invalid data format for {field_name}: {expected_format}",
            error_type="InvalidDataFormat",
            details={"field_name": field_name, "expected_format": expected_format},
            field=field_name,
            message_key="validation.invalid_data_format",
            format_params={"field_name": field_name, "expected_format": expected_format},
        )
        self.field_name = field_name
        self.expected_format = expected_format

