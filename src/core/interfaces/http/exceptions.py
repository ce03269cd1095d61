"""HTTP exception handlers.

提供统一的异常处理机制：
- 控制台（owner）接口：领域异常转换为 {"error": {"code", "message"}}
- 客户端 SDK 接口（/api/v1/login 等）：ClientApiError 转换为扁平的
  {"success": false, "message": ...}，与 SDK 约定的响应格式一致
"""

from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from src.core.config import settings
from src.core.domain.exceptions import DomainException


class ClientApiError(Exception):
    """Error surfaced to SDK clients in the flat ``success/message`` shape."""

    def __init__(
        self,
        message: str,
        code: int = status.HTTP_400_BAD_REQUEST,
        **extra: Any,
    ):
        self.message = message
        self.code = code
        self.extra = extra
        super().__init__(message)


async def client_api_exception_handler(
    _request: Request, exc: ClientApiError
) -> JSONResponse:
    """Handle client API exceptions."""
    return JSONResponse(
        status_code=exc.code,
        content={"success": False, "message": exc.message, **exc.extra},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Client SDK routes get the flat 400 shape; owner routes keep the default 422."""
    if request.url.path.startswith(f"{settings.API_V1_STR}/owner"):
        return await request_validation_exception_handler(request, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def domain_exception_handler(
    _request: Request, exc: DomainException
) -> JSONResponse:
    """Handle domain exceptions.

    通过读取异常类的 http_status_code 和 error_code 类属性来确定响应。
    这样各模块可以定义自己的异常类而不需要修改 core 层代码。
    """
    status_code = getattr(exc, "http_status_code", 400)
    error_code = getattr(exc, "error_code", "DOMAIN_ERROR")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": error_code,
                "message": exc.message,
            }
        },
    )


async def global_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions.

    存储层等基础设施故障：记录完整堆栈，对调用方只返回通用信息。
    """
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An internal error occurred",
            }
        },
    )
