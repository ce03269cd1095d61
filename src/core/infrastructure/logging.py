"""Logging configuration with structlog integration.

提供两种日志记录方式：
1. loguru: 用于一般调试日志
2. structlog: 用于认证结果、Webhook 投递等关键业务事件的结构化日志
"""

import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """配置 structlog 处理器链。"""
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """配置 loguru。"""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            "logs/keyward_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    """将日志级别字符串转换为数字。"""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


def mask_hwid(hwid: str | None) -> str | None:
    """HWID 只记录前 8 位。"""
    if not hwid:
        return hwid
    return hwid[:8] + "..." if len(hwid) > 8 else hwid


# ============================================================================
# 业务事件日志记录器
# ============================================================================


class BusinessEvents:
    """业务事件日志助手类。

    提供统一的业务事件日志记录接口，确保事件格式一致。密码永远不进入日志。

    Usage:
        from src.core.infrastructure.logging import BusinessEvents

        BusinessEvents.auth_outcome(application_id="app_1", event="user_login", ...)
        BusinessEvents.log_event("application_created", user_id="owner_1")
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def log_event(
        cls,
        event_name: str,
        user_id: str | None = None,
        event_data: dict[str, Any] | None = None,
        level: str = "info",
    ) -> None:
        """记录通用业务事件。"""
        getattr(cls._log, level)(
            event_name,
            event_type="business",
            user_id=user_id,
            **(event_data or {}),
        )

    @classmethod
    def auth_outcome(
        cls,
        application_id: str,
        event: str | None,
        status_code: int,
        username: str | None = None,
        ip_address: str | None = None,
        hwid: str | None = None,
        **extra: Any,
    ) -> None:
        """记录登录流水线的终态。"""
        level = "info" if status_code < 400 else "warning"
        getattr(cls._log, level)(
            "auth_outcome",
            event_type="auth",
            application_id=application_id,
            outcome=event,
            status_code=status_code,
            username=username,
            ip_address=ip_address,
            hwid=mask_hwid(hwid),
            **extra,
        )

    @classmethod
    def user_registered(
        cls,
        application_id: str,
        user_id: str,
        license_key_id: str,
        **extra: Any,
    ) -> None:
        """记录注册成功事件。"""
        cls._log.info(
            "user_registered",
            event_type="register",
            application_id=application_id,
            user_id=user_id,
            license_key_id=license_key_id,
            **extra,
        )

    @classmethod
    def license_consumed(
        cls,
        license_key_id: str,
        current_users: int,
        max_users: int,
        **extra: Any,
    ) -> None:
        """记录许可证名额消耗。"""
        cls._log.info(
            "license_consumed",
            event_type="license",
            license_key_id=license_key_id,
            current_users=current_users,
            max_users=max_users,
            **extra,
        )

    @classmethod
    def webhook_delivered(
        cls,
        webhook_id: str,
        event: str,
        attempts: int,
        status_code: int | None,
        **extra: Any,
    ) -> None:
        """记录 Webhook 投递成功。"""
        cls._log.info(
            "webhook_delivered",
            event_type="webhook",
            webhook_id=webhook_id,
            event=event,
            attempts=attempts,
            status_code=status_code,
            **extra,
        )

    @classmethod
    def webhook_delivery_failed(
        cls,
        webhook_id: str,
        event: str,
        attempts: int,
        error: str,
        **extra: Any,
    ) -> None:
        """记录 Webhook 最终投递失败。"""
        cls._log.warning(
            "webhook_delivery_failed",
            event_type="webhook_error",
            webhook_id=webhook_id,
            event=event,
            attempts=attempts,
            error=error,
            **extra,
        )

    @classmethod
    def webhook_fanout_summary(
        cls,
        application_id: str,
        event: str,
        succeeded: int,
        failed: int,
        **extra: Any,
    ) -> None:
        """记录一次事件分发的成功/失败计数。"""
        level = "info" if failed == 0 else "warning"
        getattr(cls._log, level)(
            "webhook_fanout_summary",
            event_type="webhook",
            application_id=application_id,
            event=event,
            succeeded=succeeded,
            failed=failed,
            **extra,
        )

    @classmethod
    def activity_log_failed(
        cls,
        application_id: str,
        event: str,
        error: str,
        **extra: Any,
    ) -> None:
        """记录活动日志写入失败（不影响调用方）。"""
        cls._log.error(
            "activity_log_failed",
            event_type="activity_log_error",
            application_id=application_id,
            event=event,
            error=error,
            **extra,
        )
