"""
应用启动前检查脚本

等待数据库可以连接后再启动 API，避免容器编排时数据库还在初始化导致启动失败。

使用方式：
    python -m orchard.backend_pre_start && python -m orchard.initial_data
"""
import logging

from sqlalchemy import Engine
from sqlmodel import Session, select
from tenacity import after_log, before_log, retry, stop_after_attempt, wait_fixed

from orchard.core.db import engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60 * 5  # 最多等待 5 分钟
wait_seconds = 1


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
def wait_for_db(db_engine: Engine) -> None:
    """执行 SELECT 1，失败时由 tenacity 重试"""
    try:
        with Session(db_engine) as session:
            session.exec(select(1))
    except Exception as e:
        logger.error(f"Database not ready: {e}")
        raise


def main() -> None:
    logger.info("Waiting for database")
    wait_for_db(engine)
    logger.info("Database is ready")


if __name__ == "__main__":  # pragma: no cover
    main()
