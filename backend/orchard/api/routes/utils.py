"""
工具路由模块

健康检查，供负载均衡和容器探活使用。
"""
from fastapi import APIRouter

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
async def health_check() -> bool:
    """请求路径: GET /api/v1/utils/health-check/"""
    return True
