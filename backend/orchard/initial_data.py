"""
建表脚本

按 orchard.models 中的模型创建所有缺失的表，在 backend_pre_start 之后执行。
"""
import logging

from sqlmodel import Session

from orchard.core.db import engine, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> None:
    logger.info("Creating tables")
    with Session(engine) as session:
        init_db(session)
    logger.info("Tables created")


if __name__ == "__main__":  # pragma: no cover
    main()
