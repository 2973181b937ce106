"""
标准化异常处理模块
Business exceptions, error codes and the handlers that render them.
"""
import logging
from typing import Optional, Any, Dict
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


# ==================== 基础异常类 ====================

class CampaignPlatformException(Exception):
    """Base class for every error the service reports to callers."""

    error_code: str = "PLATFORM_ERROR"
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "An error occurred",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为响应字典"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ==================== 验证相关异常 ====================

class ValidationException(CampaignPlatformException):
    """数据验证异常"""
    error_code = "VALIDATION_ERROR"
    status_code = HTTP_400_BAD_REQUEST


class InvalidRuleException(ValidationException):
    """A targeting rule references an unknown field or carries a malformed value."""
    error_code = "INVALID_RULE"


class UnsupportedOperatorException(InvalidRuleException):
    error_code = "UNSUPPORTED_OPERATOR"

    def __init__(self, operator: Any):
        self.operator = operator
        super().__init__(
            message=f"Unsupported operator: {operator}",
            details={"operator": operator}
        )


# ==================== 资源相关异常 ====================

class NotFoundException(CampaignPlatformException):
    error_code = "NOT_FOUND"
    status_code = HTTP_404_NOT_FOUND


class CampaignNotFoundException(NotFoundException):
    """战役不存在"""
    error_code = "CAMPAIGN_NOT_FOUND"

    def __init__(self, campaign_id: Optional[str] = None):
        super().__init__(message="Campaign not found", details={"campaign_id": campaign_id})


# ==================== 认证相关异常 ====================

class AuthException(CampaignPlatformException):
    """认证相关异常基类"""
    error_code = "AUTH_ERROR"
    status_code = HTTP_401_UNAUTHORIZED


class MissingTokenException(AuthException):
    error_code = "MISSING_TOKEN"

    def __init__(self, message: str = "No token, authorization denied"):
        super().__init__(message=message)


class InvalidTokenException(AuthException):
    error_code = "INVALID_TOKEN"

    def __init__(self, message: str = "Token is not valid"):
        super().__init__(message=message)


# ==================== 存储与操作异常 ====================

class StoreUnavailableException(CampaignPlatformException):
    """The campaign or customer store could not be reached or rejected the operation."""
    error_code = "STORE_UNAVAILABLE"

    def __init__(self, message: str = "Data store unavailable"):
        super().__init__(message=message)


class OperationFailedException(CampaignPlatformException):
    """Generic failure reported at a handler boundary; the cause is only logged."""
    error_code = "OPERATION_FAILED"


class PreviewFailedException(OperationFailedException):
    error_code = "PREVIEW_FAILED"

    def __init__(self, message: str = "Error previewing campaign audience"):
        super().__init__(message=message)


# ==================== 异常处理器注册函数 ====================

def register_exception_handlers(app):
    """注册全局异常处理器"""

    @app.exception_handler(CampaignPlatformException)
    async def platform_exception_handler(request: Request, exc: CampaignPlatformException):
        logger.warning(
            f"{type(exc).__name__}: {exc.error_code} - {exc.message} | "
            f"Path: {request.url.path} | Details: {exc.details}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                **jsonable_encoder(exc.to_dict())
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """处理 HTTP 异常"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error_code": f"HTTP_{exc.status_code}",
                "message": exc.detail,
                "details": {}
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        logger.warning(f"Validation Error on {request.url.path}: {errors}")
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error_code": "VALIDATION_ERROR",
                "message": "Validation Error",
                "details": {"errors": errors}
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """处理所有未捕获的异常"""
        logger.exception(
            f"Unhandled exception: {type(exc).__name__} - {str(exc)} | "
            f"Path: {request.url.path}"
        )
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error_code": "INTERNAL_ERROR",
                "message": "Internal server error",
                "details": {}
            }
        )
