"""
错误处理模块 - 定义自定义异常类和错误处理逻辑
遵循简单性原则：清晰的错误分类和有意义的错误消息

AddressingFault 与 StoreContractViolation 表示调用方缺陷，应直接暴露；
CollaboratorFailure 与 LocatorMiss 是正常运行中的结果，由会话层降级为"未找到"提示。
"""
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status


class ErrorCode(str, Enum):
    """错误代码枚举"""
    # 客户端错误
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # 服务端错误
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # 对齐与高亮
    ADDRESSING_FAULT = "ADDRESSING_FAULT"
    STORE_CONTRACT_VIOLATION = "STORE_CONTRACT_VIOLATION"
    LOCATOR_MISS = "LOCATOR_MISS"

    # 外部服务错误
    COLLABORATOR_FAILURE = "COLLABORATOR_FAILURE"


class BaseApplicationError(Exception):
    """应用基础异常类"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


# 客户端错误 (4xx)
class InvalidRequestError(BaseApplicationError):
    """无效请求错误"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_REQUEST,
            details=details,
            status_code=status.HTTP_400_BAD_REQUEST
        )


class ResourceNotFoundError(BaseApplicationError):
    """资源不存在错误"""
    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} not found"
        details = {"resource_type": resource_type}
        if resource_id:
            details["resource_id"] = resource_id
            message = f"{resource_type} with id '{resource_id}' not found"

        super().__init__(
            message=message,
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
            details=details,
            status_code=status.HTTP_404_NOT_FOUND
        )


# 调用方缺陷
class AddressingFault(BaseApplicationError):
    """偏移量越界或落在代理对中间"""
    def __init__(self, message: str, offset: Optional[int] = None, length: Optional[int] = None):
        details: Dict[str, Any] = {}
        if offset is not None:
            details["offset"] = offset
        if length is not None:
            details["length"] = length

        super().__init__(
            message=f"Addressing fault: {message}",
            error_code=ErrorCode.ADDRESSING_FAULT,
            details=details,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
        )


class StoreContractViolation(BaseApplicationError):
    """高亮区间非法"""
    def __init__(self, start: int, end: int, limit: Optional[int] = None):
        details: Dict[str, Any] = {"start": start, "end": end}
        message = f"Invalid highlight range [{start}, {end})"
        if limit is not None:
            details["limit"] = limit
            message = f"{message} for document of length {limit}"

        super().__init__(
            message=message,
            error_code=ErrorCode.STORE_CONTRACT_VIOLATION,
            details=details,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
        )


# 可恢复结果
class CollaboratorFailure(BaseApplicationError):
    """语义匹配服务调用失败或返回无法解析的数据"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message=f"Similarity service error: {message}",
            error_code=ErrorCode.COLLABORATOR_FAILURE,
            details=details,
            status_code=status.HTTP_502_BAD_GATEWAY
        )


class LocatorMiss(BaseApplicationError):
    """匹配文本无法在目标文本中定位"""
    def __init__(self, snippet: str, plausible: bool = False):
        super().__init__(
            message="Similar text could not be located in the target document",
            error_code=ErrorCode.LOCATOR_MISS,
            details={"snippet": snippet, "plausible": plausible},
            status_code=status.HTTP_404_NOT_FOUND
        )

