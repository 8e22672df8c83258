"""
自定义异常模块

定义应用特定的异常类，用于统一的错误处理。
所有业务异常都继承自 AppError，在 main.py 中有统一的异常处理器。

错误码约定：HTTP 状态码 * 1000 + 序号，例如 401001、404101。
"""
from __future__ import annotations


class AppError(Exception):
    """
    应用自定义异常类

    用于业务逻辑中的错误处理，包含：
    - code: 业务错误码（用于前端区分不同错误）
    - message: 错误消息（用户友好的提示）
    - status_code: HTTP 状态码（400, 404, 500 等）

    使用示例：
        raise AppError(code=404101, message="Creator not found", status_code=404)
    """

    def __init__(self, *, code: int, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


def login_required(action: str) -> AppError:
    """
    创建"未登录"异常（便捷函数）

    Args:
        action: 需要登录的动作描述，如 "subscribe"、"like a post"

    Returns:
        AppError: 401 异常实例

    使用示例：
        if user is None:
            raise login_required("subscribe")
    """
    return AppError(code=401001, message=f"You must be logged in to {action}", status_code=401)


def creator_only() -> AppError:
    """创建"仅限创作者"异常"""
    return AppError(code=403001, message="Only creators can do this", status_code=403)


def provider_failure(message: str) -> AppError:
    """
    创建外部服务（Stripe / OSS）失败异常

    对外只返回通用提示，具体错误由调用方写日志。
    """
    return AppError(code=502001, message=message, status_code=502)
