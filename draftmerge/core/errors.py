"""
错误处理模块 - 应用异常层次
Each error class fixes its own code and HTTP status; instances only carry
the message and a details dict for the client.
"""
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from fastapi import status


class ErrorCode(str, Enum):
    """错误代码枚举"""
    # 客户端错误
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_MERGE_INSTRUCTION = "INVALID_MERGE_INSTRUCTION"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONTENT_NOT_FOUND = "CONTENT_NOT_FOUND"

    # 服务端错误
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORAGE_FAILED = "STORAGE_FAILED"
    MERGE_FAILED = "MERGE_FAILED"


class BaseApplicationError(Exception):
    """应用基础异常类"""

    error_code: ClassVar[ErrorCode] = ErrorCode.INTERNAL_ERROR
    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


def _present(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


# 客户端错误 (4xx)
class InvalidRequestError(BaseApplicationError):
    error_code = ErrorCode.INVALID_REQUEST
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidInputError(BaseApplicationError):
    """输入验证错误"""
    error_code = ErrorCode.INVALID_INPUT
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, _present(field=field, value=None if value is None else str(value)))


class MergeInstructionError(BaseApplicationError):
    """Rejected instruction set; ``position`` is the index in the submitted list."""
    error_code = ErrorCode.INVALID_MERGE_INSTRUCTION
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, position: Optional[int] = None, pair_index: Any = None):
        super().__init__(message, _present(position=position, pair_index=pair_index))


class ResourceNotFoundError(BaseApplicationError):
    """资源不存在错误"""
    error_code = ErrorCode.RESOURCE_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = (
            f"{resource_type} with id '{resource_id}' not found"
            if resource_id
            else f"{resource_type} not found"
        )
        super().__init__(message, _present(resource_type=resource_type, resource_id=resource_id or None))


class ContentNotFoundError(BaseApplicationError):
    """文档记录存在，但内容文件缺失"""
    error_code = ErrorCode.CONTENT_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, manuscript_id: str, doc_id: str):
        super().__init__(
            f"Content for document '{doc_id}' not found",
            {"manuscript_id": manuscript_id, "doc_id": doc_id},
        )


# 服务端错误 (5xx)
class StorageError(BaseApplicationError):
    """存储操作错误"""
    error_code = ErrorCode.STORAGE_FAILED

    def __init__(self, message: str, operation: str):
        super().__init__(f"Storage operation '{operation}' failed: {message}", {"operation": operation})


class MergeFailedError(BaseApplicationError):
    """合并失败 - 事务已回滚，没有留下任何数据"""
    error_code = ErrorCode.MERGE_FAILED

    def __init__(self, original_error: Optional[Exception] = None):
        details: Dict[str, Any] = {}
        if original_error is not None:
            details = {"original_error": str(original_error), "error_type": type(original_error).__name__}
        super().__init__("merge failed, no changes made", details)
